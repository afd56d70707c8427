"""Page-side message handler for the two-action extension protocol.

``getVideoInfo`` → ``{"videoId", "title"}``
``getTranscript`` → ``{"transcript"}``

Failures never raise out of the handler; they come back as ``{"error": msg}``
so the caller can show the message on its status line.
"""

from __future__ import annotations

import logging
from typing import Any

from chaptergen.errors import ChapterGenError
from chaptergen.transcript.extractor import TranscriptExtractor
from chaptergen.transcript.models import VideoInfo
from chaptergen.transcript.youtube import is_watch_page, video_id_from_page_url

logger = logging.getLogger(__name__)

GET_VIDEO_INFO = "getVideoInfo"
GET_TRANSCRIPT = "getTranscript"


async def read_video_info(page: Any) -> VideoInfo:
    """Return the video ID (from the URL) and the page title without the site suffix."""
    title = await page.title()
    return VideoInfo(
        video_id=video_id_from_page_url(page.url),
        title=title.replace(" - YouTube", ""),
    )


async def handle_message(
    page: Any,
    request: dict[str, Any],
    extractor: TranscriptExtractor | None = None,
) -> dict[str, Any]:
    """Answer one protocol request against *page*."""
    action = request.get("action")
    logger.debug("Message: %s", action)

    if action == GET_VIDEO_INFO:
        info = await read_video_info(page)
        return {"videoId": info.video_id, "title": info.title}

    if action == GET_TRANSCRIPT:
        if not is_watch_page(page.url):
            return {"error": "Open a YouTube video page first."}
        extractor = extractor or TranscriptExtractor(page)
        try:
            transcript = await extractor.extract()
        except ChapterGenError as exc:
            logger.warning("Transcript extraction failed: %s", exc)
            return {"error": str(exc)}
        logger.info("Transcript extracted (%d chars)", len(transcript))
        return {"transcript": transcript}

    return {"error": f"Unknown action: {action!r}"}
