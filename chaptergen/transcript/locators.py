"""Strategies for opening the transcript panel on a rendered watch page.

YouTube has shipped several UIs for reaching the transcript, and which one a
given page shows depends on layout experiments and the viewer's locale. Each
locator below knows one way in; the extractor tries them in order until one
reports success.

All page access goes through the Playwright async ``Page``/``ElementHandle``
API (``query_selector``, ``query_selector_all``, ``click``, ``text_content``).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)

TRANSCRIPT_LABEL = "transcript"

# Pauses after clicks so the UI can animate / lazy-render its next element
EXPAND_SETTLE_SECONDS = 0.5
CLICK_SETTLE_SECONDS = 1.0


async def _text_of(element: Any) -> str:
    text = await element.text_content()
    return (text or "").lower()


async def _click_first_labelled(elements: list[Any], label: str) -> bool:
    """Click the first element whose text contains *label* (case-insensitive)."""
    for element in elements:
        if label in await _text_of(element):
            await element.click()
            return True
    return False


class TranscriptLocator(ABC):
    """One way of bringing the transcript panel on screen."""

    name: str = "locator"

    def __init__(self, settle_seconds: float = CLICK_SETTLE_SECONDS) -> None:
        self.settle_seconds = settle_seconds

    @abstractmethod
    async def locate(self, page: Any) -> bool:
        """Try to open the panel. Return True if this locator found its target."""

    async def _settle(self, seconds: float | None = None) -> None:
        await asyncio.sleep(self.settle_seconds if seconds is None else seconds)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(settle_seconds={self.settle_seconds})"


class ExpandDescriptionLocator(TranscriptLocator):
    """Expand the description ("...more"), then click its "Show transcript" button."""

    name = "description_button"

    async def locate(self, page: Any) -> bool:
        more_button = await page.query_selector("tp-yt-paper-button#expand")
        if more_button is not None:
            logger.debug("Expanding description")
            await more_button.click()
            await self._settle(min(self.settle_seconds, EXPAND_SETTLE_SECONDS))

        buttons = await page.query_selector_all(
            "ytd-button-renderer button, ytd-button-renderer a"
        )
        if await _click_first_labelled(buttons, TRANSCRIPT_LABEL):
            await self._settle()
            return True
        return False


class OverflowMenuLocator(TranscriptLocator):
    """Open the "..." (More actions) menu under the player and pick the transcript item."""

    name = "overflow_menu"

    MENU_BUTTON_SELECTORS = (
        'ytd-menu-renderer button[aria-label="More actions"]',
        "ytd-video-primary-info-renderer ytd-menu-renderer button",
        "#top-level-buttons-computed + ytd-menu-renderer button",
    )

    async def locate(self, page: Any) -> bool:
        menu_button = None
        for selector in self.MENU_BUTTON_SELECTORS:
            menu_button = await page.query_selector(selector)
            if menu_button is not None:
                break
        if menu_button is None:
            return False

        await menu_button.click()
        await self._settle(min(self.settle_seconds, EXPAND_SETTLE_SECONDS))

        items = await page.query_selector_all("ytd-menu-service-item-renderer, tp-yt-paper-item")
        if await _click_first_labelled(items, TRANSCRIPT_LABEL):
            await self._settle()
            return True
        return False


class EngagementPanelLocator(TranscriptLocator):
    """Accept an engagement panel that is already titled "Transcript"."""

    name = "engagement_panel"

    async def locate(self, page: Any) -> bool:
        panels = await page.query_selector_all("ytd-engagement-panel-section-list-renderer")
        for panel in panels:
            title = await panel.query_selector("#title")
            if title is not None and TRANSCRIPT_LABEL in await _text_of(title):
                return True
        return False


class DescriptionSectionLocator(TranscriptLocator):
    """Click the button of the transcript section in the structured description."""

    name = "description_section"

    async def locate(self, page: Any) -> bool:
        sections = await page.query_selector_all("ytd-structured-description-content-renderer")
        for section in sections:
            transcript_section = await section.query_selector(
                "ytd-video-description-transcript-section-renderer"
            )
            if transcript_section is None:
                continue
            button = await transcript_section.query_selector("button")
            if button is not None:
                await button.click()
                await self._settle()
                return True
        return False


def default_locators(settle_seconds: float = CLICK_SETTLE_SECONDS) -> list[TranscriptLocator]:
    """Return the locators in the order they should be attempted."""
    return [
        ExpandDescriptionLocator(settle_seconds),
        OverflowMenuLocator(settle_seconds),
        EngagementPanelLocator(settle_seconds),
        DescriptionSectionLocator(settle_seconds),
    ]
