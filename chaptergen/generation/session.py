"""One interactive chapter-generation session against an open watch page.

Tracks the per-request state machine and keeps the last generated result for
copy-to-clipboard. A session serves a single user; each ``generate`` call
overwrites the previous result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

import pyperclip

from chaptergen.errors import ChapterGenError
from chaptergen.generation.client import ChatClient, get_chat_client
from chaptergen.generation.pipeline import correct_spelling, generate_draft, validate_transcript
from chaptergen.transcript.extractor import TranscriptExtractor

logger = logging.getLogger(__name__)


class GenerationState(StrEnum):
    IDLE = "idle"
    EXTRACTING_TRANSCRIPT = "extracting_transcript"
    VALIDATING_LENGTH = "validating_length"
    DRAFT_GENERATING = "draft_generating"
    SPELLING_CORRECTING = "spelling_correcting"
    DONE = "done"
    FAILED = "failed"


class ChapterSession:
    """Drive extraction and both model stages, recording each transition.

    Args:
        client: Chat client for both stages (built from settings if omitted).
        copy: Clipboard writer; defaults to ``pyperclip.copy``.
        extractor_factory: Builds a TranscriptExtractor for a page.
    """

    def __init__(
        self,
        client: ChatClient | None = None,
        copy: Callable[[str], None] | None = None,
        extractor_factory: Callable[[Any], TranscriptExtractor] = TranscriptExtractor,
    ) -> None:
        self.client = client or get_chat_client()
        self._copy = copy or pyperclip.copy
        self._extractor_factory = extractor_factory
        self.state = GenerationState.IDLE
        self.failure_reason: str | None = None
        self.last_result: str = ""
        self.copied = False
        self.transitions: list[GenerationState] = [GenerationState.IDLE]

    def _enter(self, state: GenerationState) -> None:
        logger.debug("Session state %s -> %s", self.state, state)
        self.state = state
        self.transitions.append(state)

    def _fail(self, exc: ChapterGenError) -> None:
        self.failure_reason = str(exc)
        self._enter(GenerationState.FAILED)

    async def generate(self, page: Any) -> str:
        """Extract the page transcript and turn it into chapters.

        Raises:
            ChapterGenError: Extraction, validation, or draft generation failed.
                The session is left in ``FAILED`` with ``failure_reason`` set.
        """
        self.failure_reason = None
        self.copied = False
        self.transitions = [GenerationState.IDLE]
        self.state = GenerationState.IDLE

        try:
            self._enter(GenerationState.EXTRACTING_TRANSCRIPT)
            transcript = await self._extractor_factory(page).extract()

            self._enter(GenerationState.VALIDATING_LENGTH)
            validate_transcript(transcript)

            self._enter(GenerationState.DRAFT_GENERATING)
            draft = await asyncio.to_thread(generate_draft, transcript, self.client)
        except ChapterGenError as exc:
            self._fail(exc)
            raise

        # Never fails: falls back to the draft on any model error
        self._enter(GenerationState.SPELLING_CORRECTING)
        chapters = await asyncio.to_thread(correct_spelling, draft, self.client)

        self.last_result = chapters
        self._enter(GenerationState.DONE)
        self.copied = self.copy_last_result()
        return chapters

    def copy_last_result(self) -> bool:
        """Write the last result to the clipboard. Returns False if nothing was copied."""
        if not self.last_result:
            return False
        try:
            self._copy(self.last_result)
        except pyperclip.PyperclipException as exc:
            logger.warning("Failed to copy to clipboard: %s", exc)
            return False
        return True

    @property
    def status_message(self) -> str:
        """One-line status text for the current state."""
        if self.state is GenerationState.FAILED:
            return self.failure_reason or "Failed to generate chapters"
        if self.state is GenerationState.DONE:
            if self.copied:
                return "Chapters generated and copied to clipboard!"
            return "Chapters generated! Click Copy to save."
        if self.state is GenerationState.IDLE:
            return ""
        return "Generating chapters..."
