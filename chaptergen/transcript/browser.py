"""Playwright session for driving a real YouTube watch page."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from chaptergen.config import settings
from chaptergen.errors import ExtractionError
from chaptergen.transcript.extractor import TranscriptExtractor

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}


@asynccontextmanager
async def open_watch_page(
    url: str,
    headless: bool | None = None,
    timeout_ms: int | None = None,
) -> AsyncIterator[Any]:
    """Launch Chromium, load *url*, and yield the Playwright page.

    The browser is closed when the block exits, whatever the outcome.
    """
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import async_playwright

    headless = settings.browser_headless if headless is None else headless
    timeout_ms = settings.browser_timeout_ms if timeout_ms is None else timeout_ms

    async with async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=headless)
        except PlaywrightError as exc:
            raise ExtractionError(f"Could not start browser: {exc}") from exc
        try:
            try:
                context = await browser.new_context(viewport=VIEWPORT)
                page = await context.new_page()
            except PlaywrightError as exc:
                raise ExtractionError(f"Could not open a browser page: {exc}") from exc
            try:
                await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
            except PlaywrightError as exc:
                raise ExtractionError(f"Could not load {url}: {exc}") from exc
            logger.info("Loaded watch page %s", url)
            yield page
        finally:
            await browser.close()


async def extract_from_url(url: str, headless: bool | None = None) -> str:
    """Load a watch page in a headless browser and extract its transcript."""
    async with open_watch_page(url, headless=headless) as page:
        return await TranscriptExtractor(page).extract()
