"""Error taxonomy for transcript extraction and chapter generation.

Every error carries a single user-facing message (``str(exc)``) so callers
can surface it as one status line without further formatting.
"""

from __future__ import annotations


class ChapterGenError(Exception):
    """Base class for all errors raised by chaptergen."""


# ---------------------------------------------------------------------------
# Transcript acquisition
# ---------------------------------------------------------------------------


class ExtractionError(ChapterGenError):
    """The transcript could not be read from the page or caption service."""


class ExtractionNotFoundError(ExtractionError):
    """No transcript control, panel, or caption track could be found."""


class ExtractionTimeoutError(ExtractionError):
    """Transcript segments never rendered within the polling timeout."""


class TranscriptValidationError(ChapterGenError):
    """The transcript text is unusable as model input."""


class TranscriptTooShortError(TranscriptValidationError):
    """Transcript is below the minimum length (usually a broken extraction)."""


class TranscriptTooLongError(TranscriptValidationError):
    """Transcript exceeds the maximum length accepted for one request."""


# ---------------------------------------------------------------------------
# Model calls
# ---------------------------------------------------------------------------


class ModelError(ChapterGenError):
    """A chat-completion call failed."""

    status_code: int | None = None

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class NetworkError(ModelError):
    """The model endpoint could not be reached."""


class AuthError(ModelError):
    status_code = 401


class RateLimitedError(ModelError):
    status_code = 429

    def __init__(self, message: str, retry_after: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class BadRequestError(ModelError):
    status_code = 400


class UpstreamUnavailableError(ModelError):
    """The provider answered with a 5xx status."""


class ModelAPIError(ModelError):
    """Any other non-2xx answer from the provider."""


class EmptyModelResponseError(ModelError):
    """The model answered but returned no usable content."""


class ParseError(ModelError):
    """The model response body could not be interpreted."""


# ---------------------------------------------------------------------------
# Access gate
# ---------------------------------------------------------------------------


class AccessDeniedError(ChapterGenError):
    """Missing, invalid, revoked, or inactive API key."""


class UsageLimitError(ChapterGenError):
    """The caller has used up their free generations."""

    def __init__(self, message: str, used: int, limit: int) -> None:
        super().__init__(message)
        self.used = used
        self.limit = limit


def error_for_status(
    status: int,
    detail: str | None = None,
    retry_after: str | None = None,
    provider: str = "OpenAI",
) -> ModelError:
    """Map a non-2xx status from a chat endpoint to a ModelError.

    Args:
        status: HTTP status code returned by the provider.
        detail: Error message from the response body, if any.
        retry_after: Value of the ``retry-after`` header on 429 responses.
        provider: Provider name used in user-facing messages.

    Returns:
        The matching ModelError instance (not raised).
    """
    if status == 401:
        return AuthError(f"Invalid API key. Please check your {provider} API key in settings.")
    if status == 429:
        if retry_after:
            hint = f"Try again in {retry_after} seconds."
        else:
            hint = "Please try again later."
        return RateLimitedError(f"Rate limit exceeded. {hint}", retry_after=retry_after)
    if status == 400:
        return BadRequestError(f"Bad request: {detail or f'Invalid request to {provider}'}")
    if status >= 500:
        return UpstreamUnavailableError(
            f"{provider} service temporarily unavailable. Please try again in a moment.",
            status_code=status,
        )
    return ModelAPIError(detail or f"{provider} API error (HTTP {status})", status_code=status)
