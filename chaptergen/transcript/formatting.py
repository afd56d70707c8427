"""Transcript text assembly, timestamp helpers, and chapter-list parsing."""

from __future__ import annotations

import re
from collections.abc import Iterable

from chaptergen.transcript.models import Chapter, TranscriptSegment

# Used when the transcript carries no markers at all
DEFAULT_VIDEO_DURATION = "10:00"

_MARKER_RE = re.compile(r"\[(\d+(?::\d{2}){1,2})\]")
_CHAPTER_LINE_RE = re.compile(r"^\s*(?:[-*]\s*)?(\d+(?::\d{2}){1,2})\s+[-:]?\s*(.+?)\s*$")


def build_transcript(segments: Iterable[TranscriptSegment]) -> str:
    """Concatenate segments into a single marked-up transcript string.

    A ``[timestamp]`` marker starts a new line only when the timestamp differs
    from the previous kept segment, so consecutive segments sharing a
    timestamp are coalesced under one marker. Segments with empty text are
    skipped.
    """
    parts: list[str] = []
    last_timestamp = ""

    for segment in segments:
        text = segment.text.strip()
        if not text:
            continue

        if segment.timestamp != last_timestamp:
            parts.append(f"\n[{segment.timestamp}] ")
            last_timestamp = segment.timestamp

        parts.append(text + " ")

    return "".join(parts).strip()


def transcript_markers(transcript: str) -> list[str]:
    """Return every ``[m:ss]`` marker value in order of appearance."""
    return _MARKER_RE.findall(transcript)


def derive_video_duration(transcript: str) -> str:
    """Approximate the video duration as the last marker in the transcript.

    >>> derive_video_duration("[0:00] Hi [0:02] play [0:19] goal")
    '0:19'
    """
    markers = transcript_markers(transcript)
    if not markers:
        return DEFAULT_VIDEO_DURATION
    return markers[-1]


def format_timestamp(seconds: float) -> str:
    """Format a caption offset in seconds as ``m:ss`` (minutes unbounded)."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def timestamp_to_seconds(timestamp: str) -> int:
    """Convert ``m:ss`` or ``h:mm:ss`` to whole seconds."""
    total = 0
    for part in timestamp.strip().split(":"):
        total = total * 60 + int(part)
    return total


def parse_chapters(text: str) -> list[Chapter]:
    """Parse ``m:ss Title`` lines from model output.

    Lines that do not start with a timestamp (preambles, blank lines) are
    ignored.
    """
    chapters: list[Chapter] = []
    for line in text.splitlines():
        match = _CHAPTER_LINE_RE.match(line)
        if match:
            chapters.append(Chapter(timestamp=match.group(1), title=match.group(2)))
    return chapters


def unverified_timestamps(chapters: Iterable[Chapter], transcript: str) -> list[str]:
    """Return chapter timestamps that are not segment markers in *transcript*.

    Chapters are supposed to start on a segment boundary, but nothing enforces
    it: the model is free to pick any time. This only reports mismatches.
    """
    known = {timestamp_to_seconds(m) for m in transcript_markers(transcript)}
    return [c.timestamp for c in chapters if timestamp_to_seconds(c.timestamp) not in known]
