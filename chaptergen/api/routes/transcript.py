"""Transcript endpoint: fetch a video's captions for chapter generation."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException

from chaptergen.api.models import TranscriptResponse, TranscriptSource
from chaptergen.errors import (
    ExtractionError,
    ExtractionNotFoundError,
    ExtractionTimeoutError,
    TranscriptTooShortError,
)
from chaptergen.transcript.browser import extract_from_url
from chaptergen.transcript.fetcher import fetch_transcript
from chaptergen.transcript.formatting import derive_video_duration
from chaptergen.transcript.youtube import extract_video_id

router = APIRouter()


@router.get("/api/transcript", response_model=TranscriptResponse)
async def get_transcript(
    url: str | None = None,
    video_id: str | None = None,
    source: TranscriptSource = TranscriptSource.CAPTIONS,
) -> TranscriptResponse:
    """Return the timestamped transcript of a video.

    ``source=captions`` (default) asks the caption service directly;
    ``source=page`` opens the watch page in a headless browser and reads the
    transcript panel, the same way the extension does.
    """
    value = url or video_id
    if not value:
        raise HTTPException(
            status_code=400,
            detail='Please provide a "url" or "video_id" query parameter',
        )

    if source is TranscriptSource.CAPTIONS:
        try:
            # Sync HTTP client inside youtube-transcript-api: keep it off the event loop.
            fetched = await asyncio.to_thread(fetch_transcript, value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ExtractionNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ExtractionError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        return TranscriptResponse(
            video_id=fetched.video_id,
            transcript=fetched.transcript,
            plain_text=fetched.plain_text,
            segments=fetched.segment_count,
            duration=fetched.duration,
            source=source,
        )

    extracted_id = extract_video_id(value)
    if extracted_id is None:
        raise HTTPException(
            status_code=400,
            detail="Could not extract video ID from the provided URL or ID",
        )

    try:
        transcript = await extract_from_url(f"https://www.youtube.com/watch?v={extracted_id}")
    except ExtractionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ExtractionTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except TranscriptTooShortError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ExtractionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return TranscriptResponse(
        video_id=extracted_id,
        transcript=transcript,
        duration=derive_video_duration(transcript),
        source=source,
    )
