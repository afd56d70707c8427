"""Tests for the interactive generation session state machine."""

from __future__ import annotations

import asyncio
from typing import Any

import pyperclip
import pytest

from chaptergen.errors import (
    AuthError,
    ExtractionNotFoundError,
    TranscriptTooShortError,
    UpstreamUnavailableError,
)
from chaptergen.generation.session import ChapterSession, GenerationState

TRANSCRIPT = (
    "[0:00] Welcome back to the highlights show, tonight we have a great one for you. "
    "\n[0:02] Here's the play. "
    "\n[0:19] What a goal by Caufield!"
)


class StubClient:
    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.calls = 0

    def complete(self, system: str, user: str, *, temperature: float, max_tokens: int) -> str:
        self.calls += 1
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class StubExtractor:
    def __init__(self, result: str | Exception) -> None:
        self.result = result

    async def extract(self) -> str:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def make_session(
    extracted: str | Exception,
    *replies: str | Exception,
    clipboard: list[str] | None = None,
) -> tuple[ChapterSession, StubClient]:
    client = StubClient(*replies)
    copied = clipboard if clipboard is not None else []
    session = ChapterSession(
        client=client,
        copy=copied.append,
        extractor_factory=lambda page: StubExtractor(extracted),  # type: ignore[arg-type,return-value]
    )
    return session, client


def run(session: ChapterSession, page: Any = None) -> str:
    return asyncio.run(session.generate(page))


class TestChapterSession:
    def test_starts_idle(self) -> None:
        session, _ = make_session(TRANSCRIPT)
        assert session.state is GenerationState.IDLE
        assert session.status_message == ""

    def test_happy_path_transitions_and_clipboard(self) -> None:
        clipboard: list[str] = []
        session, client = make_session(
            TRANSCRIPT, "0:00 Intro\n0:02 Cfield's Goal", "0:00 Intro\n0:02 Caufield's Goal",
            clipboard=clipboard,
        )

        result = run(session)

        assert result == "0:00 Intro\n0:02 Caufield's Goal"
        assert session.transitions == [
            GenerationState.IDLE,
            GenerationState.EXTRACTING_TRANSCRIPT,
            GenerationState.VALIDATING_LENGTH,
            GenerationState.DRAFT_GENERATING,
            GenerationState.SPELLING_CORRECTING,
            GenerationState.DONE,
        ]
        assert session.last_result == result
        assert clipboard == [result]
        assert session.copied
        assert session.status_message == "Chapters generated and copied to clipboard!"
        assert client.calls == 2

    def test_spelling_failure_still_done_with_draft(self) -> None:
        session, _ = make_session(
            TRANSCRIPT, "0:00 Intro\n0:02 Goal", UpstreamUnavailableError("down", status_code=503)
        )

        assert run(session) == "0:00 Intro\n0:02 Goal"
        assert session.state is GenerationState.DONE
        assert GenerationState.SPELLING_CORRECTING in session.transitions

    def test_extraction_failure(self) -> None:
        error = ExtractionNotFoundError("Could not find transcript button.")
        session, client = make_session(error)

        with pytest.raises(ExtractionNotFoundError):
            run(session)

        assert session.state is GenerationState.FAILED
        assert session.transitions[-2:] == [
            GenerationState.EXTRACTING_TRANSCRIPT,
            GenerationState.FAILED,
        ]
        assert session.status_message == "Could not find transcript button."
        assert client.calls == 0

    def test_short_transcript_fails_before_model(self) -> None:
        session, client = make_session("[0:00] Hi")

        with pytest.raises(TranscriptTooShortError):
            run(session)

        assert session.transitions[-2:] == [GenerationState.VALIDATING_LENGTH, GenerationState.FAILED]
        assert client.calls == 0

    def test_draft_failure(self) -> None:
        session, _ = make_session(TRANSCRIPT, AuthError("Invalid API key."))

        with pytest.raises(AuthError):
            run(session)

        assert session.transitions[-2:] == [GenerationState.DRAFT_GENERATING, GenerationState.FAILED]
        assert session.failure_reason == "Invalid API key."
        assert session.last_result == ""

    def test_new_run_overwrites_last_result(self) -> None:
        session, _ = make_session(TRANSCRIPT, "0:00 First", "0:00 First", "0:00 Second", "0:00 Second")

        run(session)
        run(session)

        assert session.last_result == "0:00 Second"
        assert session.transitions[0] is GenerationState.IDLE
        assert session.transitions.count(GenerationState.DONE) == 1

    def test_clipboard_unavailable(self) -> None:
        def broken_copy(text: str) -> None:
            raise pyperclip.PyperclipException("no clipboard mechanism")

        session = ChapterSession(
            client=StubClient("0:00 Intro", "0:00 Intro"),
            copy=broken_copy,
            extractor_factory=lambda page: StubExtractor(TRANSCRIPT),  # type: ignore[arg-type,return-value]
        )

        assert run(session) == "0:00 Intro"
        assert not session.copied
        assert session.state is GenerationState.DONE
        assert session.status_message == "Chapters generated! Click Copy to save."

    def test_copy_with_nothing_generated(self) -> None:
        session, _ = make_session(TRANSCRIPT)
        assert session.copy_last_result() is False
