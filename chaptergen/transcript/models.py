"""Data models for transcripts, chapters, and video metadata."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TranscriptSegment:
    """One caption line as rendered by the transcript panel."""

    timestamp: str  # "m:ss" or "h:mm:ss", as displayed
    text: str


@dataclass
class Chapter:
    """A navigation point: where a viewer should jump to watch a segment."""

    timestamp: str
    title: str

    def __str__(self) -> str:
        return f"{self.timestamp} {self.title}"


@dataclass
class VideoInfo:
    """Identity of the video open in the current page."""

    video_id: str | None
    title: str


@dataclass
class FetchedTranscript:
    """Transcript fetched from the caption service rather than the page."""

    video_id: str
    transcript: str  # with [m:ss] markers
    plain_text: str
    segment_count: int
    duration: str
