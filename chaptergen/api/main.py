import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chaptergen.api.routes.chapters import router as chapters_router
from chaptergen.api.routes.transcript import router as transcript_router
from chaptergen.config import settings

logging.getLogger("chaptergen").setLevel(settings.log_level)

app = FastAPI(
    title="ChapterGen API",
    description="YouTube chapter generation from caption transcripts",
    version="0.1.0",
)

# The extension calls from chrome-extension:// origins with an x-api-key header.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "x-api-key", "x-free-trial"],
)

app.include_router(chapters_router)
app.include_router(transcript_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
