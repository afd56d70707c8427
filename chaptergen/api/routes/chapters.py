"""Chapter endpoint: generate or refine chapters behind the API-key gate."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Header, HTTPException
from postgrest import APIError

from chaptergen.accounts.auth import authenticate
from chaptergen.accounts.storage import get_supabase_client
from chaptergen.accounts.usage import record_usage, require_usage
from chaptergen.api.models import ChapterItem, ChapterRequest, ChapterResponse, UsageInfo
from chaptergen.config import LLMProvider, settings
from chaptergen.errors import (
    AccessDeniedError,
    ModelError,
    TranscriptValidationError,
    UsageLimitError,
)
from chaptergen.generation.pipeline import generate_chapters, refine_chapters, validate_transcript
from chaptergen.transcript.formatting import parse_chapters

logger = logging.getLogger(__name__)

router = APIRouter()


def _provider_configured() -> bool:
    if settings.llm_provider is LLMProvider.ANTHROPIC:
        return bool(settings.anthropic_api_key)
    return bool(settings.openai_api_key)


@router.post("/api/tools/chaptergen", response_model=ChapterResponse)
async def chaptergen(
    request: ChapterRequest,
    x_api_key: Annotated[str | None, Header()] = None,
    x_free_trial: Annotated[str | None, Header()] = None,
) -> ChapterResponse:
    """Generate chapters for a transcript, or refine an existing chapter list.

    Callers authenticate with ``x-api-key``; anonymous callers must send
    ``x-free-trial: true`` (free-trial usage is tracked client-side). Usage is
    recorded only for authenticated new generations, not quick actions.
    """
    user: dict[str, Any] | None = None
    subscribed = False
    used = 0
    client = None

    if x_api_key:
        client = get_supabase_client()
        try:
            user = authenticate(client, x_api_key)
        except AccessDeniedError as exc:
            raise HTTPException(status_code=401, detail=str(exc)) from exc

        subscribed = bool(user.get("subscribed_chaptergen"))
        try:
            used = require_usage(client, user["id"], subscribed).used
        except UsageLimitError as exc:
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "LIMIT_EXCEEDED",
                    "message": str(exc),
                    "usage": {"used": exc.used, "limit": exc.limit},
                },
            ) from exc
    elif x_free_trial != "true":
        raise HTTPException(
            status_code=401,
            detail="API key required. Use free trial or subscribe for access.",
        )

    if request.action and not request.current_chapters:
        raise HTTPException(
            status_code=400, detail="current_chapters is required for quick actions"
        )
    if not request.action and not (request.transcript or "").strip():
        raise HTTPException(status_code=400, detail="transcript is required")

    if not _provider_configured():
        raise HTTPException(status_code=500, detail=f"{settings.llm_provider} not configured")

    try:
        if request.transcript:
            validate_transcript(request.transcript)
        if request.action:
            result = await asyncio.to_thread(
                refine_chapters,
                request.current_chapters or "",
                request.action,
                request.transcript or "",
            )
        else:
            result = await asyncio.to_thread(generate_chapters, request.transcript or "")
    except TranscriptValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ModelError as exc:
        # Upstream model failure: 503 keeps a JSON body (and CORS headers) on the way out.
        raise HTTPException(status_code=503, detail=f"LLM unavailable: {exc}") from exc

    usage_info: UsageInfo | None = None
    if user is not None and client is not None:
        if not request.action:
            try:
                record_usage(client, user["id"])
                used += 1
            except APIError:
                logger.exception("Failed to record usage for user %s", user["id"])
        limit = None if subscribed else settings.free_generation_limit
        usage_info = UsageInfo(used=used, limit=limit)

    chapters = [ChapterItem(timestamp=c.timestamp, title=c.title) for c in parse_chapters(result)]
    return ChapterResponse(
        result=result,
        chapters=chapters,
        is_free_trial=user is None,
        usage=usage_info,
    )
