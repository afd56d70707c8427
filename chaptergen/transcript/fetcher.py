"""Server-side caption fetch via youtube-transcript-api.

Used when there is no rendered page to scrape (the HTTP API and UI). The
result is formatted with the same builder as page extraction so both paths
feed the pipeline identical markup.
"""

from __future__ import annotations

import logging

from youtube_transcript_api import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
    YouTubeTranscriptApi,
)

from chaptergen.errors import ExtractionError, ExtractionNotFoundError
from chaptergen.transcript.formatting import build_transcript, format_timestamp
from chaptergen.transcript.models import FetchedTranscript, TranscriptSegment
from chaptergen.transcript.youtube import extract_video_id

logger = logging.getLogger(__name__)


def fetch_transcript(url_or_id: str) -> FetchedTranscript:
    """Fetch and format the caption track of a video.

    Args:
        url_or_id: Any URL form accepted by ``extract_video_id`` or a bare ID.

    Returns:
        The formatted transcript plus plain text, segment count and duration.

    Raises:
        ValueError: No video ID could be extracted from *url_or_id*.
        ExtractionNotFoundError: Captions disabled, missing, or video unavailable.
        ExtractionError: Any other caption-service failure.
    """
    video_id = extract_video_id(url_or_id)
    if video_id is None:
        msg = "Could not extract video ID from the provided URL or ID"
        raise ValueError(msg)

    logger.info("Fetching transcript for video %s", video_id)
    try:
        fetched = YouTubeTranscriptApi().fetch(video_id)
    except TranscriptsDisabled as exc:
        raise ExtractionNotFoundError("Transcripts are disabled for this video") from exc
    except VideoUnavailable as exc:
        raise ExtractionNotFoundError(
            "The video could not be found or is not available"
        ) from exc
    except NoTranscriptFound as exc:
        raise ExtractionNotFoundError(
            "No transcript found for this video. The video may not have captions available."
        ) from exc
    except CouldNotRetrieveTranscript as exc:
        raise ExtractionError("Failed to fetch transcript. Please try again later.") from exc

    segments: list[TranscriptSegment] = []
    texts: list[str] = []
    last_start = 0.0
    for snippet in fetched:
        text = snippet.text.replace("\n", " ").strip()
        segments.append(TranscriptSegment(timestamp=format_timestamp(snippet.start), text=text))
        if text:
            texts.append(text)
        last_start = snippet.start

    if not segments:
        raise ExtractionNotFoundError(
            "No transcript found for this video. The video may not have captions available."
        )

    return FetchedTranscript(
        video_id=video_id,
        transcript=build_transcript(segments),
        plain_text=" ".join(texts),
        segment_count=len(segments),
        duration=format_timestamp(last_start),
    )
