"""Two-pass chapter synthesis: draft chapters, then fix name spellings.

Stage functions take and return plain text, so the full pipeline is just
``correct_spelling(generate_draft(transcript))``.
"""

from __future__ import annotations

import logging

from chaptergen.config import settings
from chaptergen.errors import ModelError, TranscriptTooLongError, TranscriptTooShortError
from chaptergen.generation.client import ChatClient, get_chat_client
from chaptergen.generation.prompts import (
    CHAPTER_SYSTEM_PROMPT,
    REFINE_SYSTEM_PROMPT,
    SPELLING_SYSTEM_PROMPT,
    RefinementAction,
    build_chapter_prompt,
    build_refinement_prompt,
    build_spelling_prompt,
)
from chaptergen.transcript.formatting import (
    derive_video_duration,
    parse_chapters,
    unverified_timestamps,
)

logger = logging.getLogger(__name__)


def validate_transcript(transcript: str) -> str:
    """Reject transcripts outside the accepted length range.

    Runs before any model call; a very short transcript almost always means
    the extraction broke rather than that the video is short.

    Returns:
        The transcript, unchanged.
    """
    length = len(transcript.strip())
    if length < settings.min_transcript_chars:
        raise TranscriptTooShortError(
            f"Transcript is too short ({length} characters). "
            f"Minimum {settings.min_transcript_chars} characters."
        )
    if length > settings.max_transcript_chars:
        raise TranscriptTooLongError(
            f"Transcript too long ({length} characters). "
            f"Maximum {settings.max_transcript_chars:,} characters."
        )
    return transcript


def generate_draft(transcript: str, client: ChatClient | None = None) -> str:
    """Stage 1: ask the model for a chapter list placed at segment starts.

    Raises:
        TranscriptTooShortError: Before calling out, if the transcript is too short.
        ModelError: Any failure of the model call.
    """
    validate_transcript(transcript)
    client = client or get_chat_client()

    duration = derive_video_duration(transcript)
    logger.info("Generating draft chapters (%d chars, duration %s)", len(transcript), duration)

    draft = client.complete(
        CHAPTER_SYSTEM_PROMPT,
        build_chapter_prompt(transcript, duration),
        temperature=settings.draft_temperature,
        max_tokens=settings.max_tokens,
    )

    off_marker = unverified_timestamps(parse_chapters(draft), transcript)
    if off_marker:
        logger.debug("Draft timestamps not on a segment marker: %s", ", ".join(off_marker))
    return draft


def correct_spelling(chapters: str, client: ChatClient | None = None) -> str:
    """Stage 2: fix misspelled names in *chapters*.

    Best effort: if the call fails for any reason, *chapters* is returned
    exactly as given.
    """
    client = client or get_chat_client()
    try:
        return client.complete(
            SPELLING_SYSTEM_PROMPT,
            build_spelling_prompt(chapters),
            temperature=settings.spelling_temperature,
            max_tokens=settings.max_tokens,
        )
    except ModelError as exc:
        logger.warning("Name correction failed, using original chapters: %s", exc)
        return chapters


def generate_chapters(transcript: str, client: ChatClient | None = None) -> str:
    """Run both stages and return the final chapter text."""
    client = client or get_chat_client()
    return correct_spelling(generate_draft(transcript, client), client)


def refine_chapters(
    current_chapters: str,
    action: str | RefinementAction,
    transcript: str = "",
    client: ChatClient | None = None,
) -> str:
    """Apply a quick action to an existing chapter list (single call, no spelling pass).

    Raises:
        ValueError: Unknown *action*.
        ModelError: Any failure of the model call.
    """
    prompt = build_refinement_prompt(current_chapters, action, transcript)
    client = client or get_chat_client()
    return client.complete(
        REFINE_SYSTEM_PROMPT,
        prompt,
        temperature=settings.refine_temperature,
        max_tokens=settings.max_tokens,
    )
