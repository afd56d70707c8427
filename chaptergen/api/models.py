"""Pydantic request/response schemas for the ChapterGen API."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from chaptergen.generation.prompts import RefinementAction


class TranscriptSource(StrEnum):
    """Where the transcript endpoint reads captions from."""

    CAPTIONS = "captions"  # caption service, no browser
    PAGE = "page"  # headless browser on the watch page


class ChapterRequest(BaseModel):
    """Request body for the /api/tools/chaptergen endpoint.

    Without ``action`` this is a new generation and ``transcript`` is required.
    With ``action`` it is a quick refinement of ``current_chapters``.
    """

    transcript: str | None = None
    action: RefinementAction | None = None
    current_chapters: str | None = None


class ChapterItem(BaseModel):
    timestamp: str
    title: str


class UsageInfo(BaseModel):
    used: int
    limit: int | None = None  # None means unlimited


class ChapterResponse(BaseModel):
    """Response body for the /api/tools/chaptergen endpoint."""

    success: bool = True
    result: str
    chapters: list[ChapterItem] = []
    is_free_trial: bool = False
    usage: UsageInfo | None = None


class TranscriptResponse(BaseModel):
    """Response body for the /api/transcript endpoint."""

    video_id: str
    transcript: str
    plain_text: str | None = None
    segments: int | None = None
    duration: str
    source: TranscriptSource = TranscriptSource.CAPTIONS
