"""Read a timestamped transcript out of a rendered YouTube watch page."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from chaptergen.config import settings
from chaptergen.errors import (
    ExtractionNotFoundError,
    ExtractionTimeoutError,
    TranscriptTooShortError,
)
from chaptergen.transcript.formatting import build_transcript
from chaptergen.transcript.locators import TranscriptLocator, default_locators
from chaptergen.transcript.models import TranscriptSegment

logger = logging.getLogger(__name__)

PANEL_SELECTOR = "ytd-transcript-renderer"
SEGMENT_SELECTOR = "ytd-transcript-segment-renderer"
RENDERED_SEGMENT_SELECTOR = f"ytd-transcript-segment-list-renderer {SEGMENT_SELECTOR}"
TIMESTAMP_SELECTOR = ".segment-timestamp"
TEXT_SELECTOR = ".segment-text, yt-formatted-string.segment-text"


class TranscriptExtractor:
    """Open the transcript panel of *page* and read its caption segments.

    Args:
        page: A Playwright async ``Page`` showing a watch page.
        locators: Panel-opening strategies, tried in order.
        poll_interval: Seconds between checks for rendered segments.
        timeout: Default seconds to wait for segments to render.
        min_chars: Transcripts shorter than this are treated as a failed read.
    """

    def __init__(
        self,
        page: Any,
        locators: Sequence[TranscriptLocator] | None = None,
        poll_interval: float | None = None,
        timeout: float | None = None,
        min_chars: int | None = None,
    ) -> None:
        self.page = page
        self.locators = list(locators) if locators is not None else default_locators()
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.segment_poll_interval_ms / 1000
        )
        self.timeout = timeout if timeout is not None else settings.segment_timeout_ms / 1000
        self.min_chars = min_chars if min_chars is not None else settings.min_transcript_chars

    async def open_transcript_panel(self) -> str:
        """Bring the transcript panel on screen.

        Returns:
            Name of the locator that succeeded, or ``"already_open"``.

        Raises:
            ExtractionNotFoundError: No locator found a transcript control.
        """
        if await self.page.query_selector(PANEL_SELECTOR) is not None:
            return "already_open"

        for locator in self.locators:
            logger.debug("Trying transcript locator %s", locator.name)
            if await locator.locate(self.page):
                logger.info("Transcript panel opened via %s", locator.name)
                return locator.name

        raise ExtractionNotFoundError(
            "Could not find transcript button. Make sure the video has captions."
        )

    async def wait_for_segments(self, timeout: float | None = None) -> None:
        """Poll until at least one transcript segment has rendered.

        The page is checked at least once, even with a zero timeout.

        Raises:
            ExtractionTimeoutError: Nothing rendered within *timeout* seconds.
        """
        limit = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + limit

        while True:
            if await self.page.query_selector(RENDERED_SEGMENT_SELECTOR) is not None:
                return
            if time.monotonic() >= deadline:
                break
            await asyncio.sleep(self.poll_interval)

        raise ExtractionTimeoutError(f"Timeout waiting for: {RENDERED_SEGMENT_SELECTOR}")

    async def read_segments(self) -> list[TranscriptSegment]:
        """Read every rendered segment in display order.

        Segments without a text node or with blank text are skipped; a missing
        timestamp node is read as ``0:00``.
        """
        segments: list[TranscriptSegment] = []
        for index, element in enumerate(await self.page.query_selector_all(SEGMENT_SELECTOR)):
            text_el = await element.query_selector(TEXT_SELECTOR)
            if text_el is None:
                logger.debug("No text element in segment %d", index)
                continue

            text = ((await text_el.text_content()) or "").strip()
            if not text:
                continue

            timestamp_el = await element.query_selector(TIMESTAMP_SELECTOR)
            timestamp = "0:00"
            if timestamp_el is not None:
                timestamp = ((await timestamp_el.text_content()) or "").strip() or "0:00"

            segments.append(TranscriptSegment(timestamp=timestamp, text=text))
        return segments

    async def extract(self) -> str:
        """Open the panel, wait for segments, and return the marked-up transcript.

        Raises:
            ExtractionNotFoundError: No panel, or the panel had no segments.
            ExtractionTimeoutError: Segments never rendered.
            TranscriptTooShortError: The read produced too little text.
        """
        await self.open_transcript_panel()
        await self.wait_for_segments()

        segments = await self.read_segments()
        logger.info("Found %d transcript segments", len(segments))
        if not segments:
            raise ExtractionNotFoundError(
                "No transcript segments found. Video may not have captions."
            )

        transcript = build_transcript(segments)
        if len(transcript) < self.min_chars:
            raise TranscriptTooShortError("Transcript too short - extraction may have failed")

        return transcript
