"""Tests for API endpoints (no external API keys required)."""

from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient
from postgrest import APIError

from chaptergen.accounts.usage import UsageCheck
from chaptergen.api.main import app
from chaptergen.errors import (
    AccessDeniedError,
    ExtractionError,
    ExtractionNotFoundError,
    ExtractionTimeoutError,
    NetworkError,
    UpstreamUnavailableError,
)
from chaptergen.transcript.models import FetchedTranscript

client = TestClient(app)

ROUTE = "chaptergen.api.routes.chapters"
TRANSCRIPT_ROUTE = "chaptergen.api.routes.transcript"

TRANSCRIPT = (
    "[0:00] Welcome back to the highlights show, tonight we have a great one for you. "
    "\n[0:02] Here's the play. "
    "\n[0:19] What a goal by Caufield!"
)
CHAPTERS = "0:00 Intro\n0:02 Caufield's Goal"
FREE_TRIAL = {"x-free-trial": "true"}


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_cors_preflight_allows_api_key_header():
    response = client.options(
        "/api/tools/chaptergen",
        headers={
            "Origin": "chrome-extension://abcdef",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-api-key,content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


# ---------------------------------------------------------------------------
# /api/tools/chaptergen -- access gate
# ---------------------------------------------------------------------------


class TestChapterAccess:
    def test_no_key_and_no_free_trial_is_401(self) -> None:
        response = client.post("/api/tools/chaptergen", json={"transcript": TRANSCRIPT})
        assert response.status_code == 401
        assert "API key required" in response.json()["detail"]

    def test_invalid_key_is_401(self) -> None:
        with (
            patch(f"{ROUTE}.get_supabase_client", return_value=MagicMock()),
            patch(
                f"{ROUTE}.authenticate",
                side_effect=AccessDeniedError("Invalid or revoked API key."),
            ),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"transcript": TRANSCRIPT},
                headers={"x-api-key": "ltgv_bad"},
            )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or revoked API key."

    def test_free_limit_exceeded_is_429(self) -> None:
        with (
            patch(f"{ROUTE}.get_supabase_client", return_value=MagicMock()),
            patch(f"{ROUTE}.authenticate", return_value={"id": "user-1"}),
            patch(
                "chaptergen.accounts.usage.check_usage",
                return_value=UsageCheck(allowed=False, used=1, limit=1, subscribed=False),
            ),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"transcript": TRANSCRIPT},
                headers={"x-api-key": "ltgv_key"},
            )
        assert response.status_code == 429
        detail = response.json()["detail"]
        assert detail["error"] == "LIMIT_EXCEEDED"
        assert detail["usage"] == {"used": 1, "limit": 1}

    def test_authenticated_generation_records_usage(self) -> None:
        supabase = MagicMock()
        with (
            patch(f"{ROUTE}.get_supabase_client", return_value=supabase),
            patch(f"{ROUTE}.authenticate", return_value={"id": "user-1"}),
            patch(
                "chaptergen.accounts.usage.check_usage",
                return_value=UsageCheck(allowed=True, used=0, limit=1, subscribed=False),
            ),
            patch(f"{ROUTE}.record_usage") as mock_record,
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.generate_chapters", return_value=CHAPTERS),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"transcript": TRANSCRIPT},
                headers={"x-api-key": "ltgv_key"},
            )
        assert response.status_code == 200
        body = response.json()
        assert body["is_free_trial"] is False
        assert body["usage"] == {"used": 1, "limit": 1}
        mock_record.assert_called_once_with(supabase, "user-1")

    def test_usage_write_failure_does_not_fail_request(self) -> None:
        with (
            patch(f"{ROUTE}.get_supabase_client", return_value=MagicMock()),
            patch(
                f"{ROUTE}.authenticate",
                return_value={"id": "user-1", "subscribed_chaptergen": True},
            ),
            patch(
                "chaptergen.accounts.usage.check_usage",
                return_value=UsageCheck(allowed=True, used=3, limit=None, subscribed=True),
            ),
            patch(
                f"{ROUTE}.record_usage",
                side_effect=APIError({"message": "insert failed", "code": "500"}),
            ),
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.generate_chapters", return_value=CHAPTERS),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"transcript": TRANSCRIPT},
                headers={"x-api-key": "ltgv_key"},
            )
        assert response.status_code == 200
        assert response.json()["usage"] == {"used": 3, "limit": None}

    def test_quick_action_does_not_record_usage(self) -> None:
        with (
            patch(f"{ROUTE}.get_supabase_client", return_value=MagicMock()),
            patch(f"{ROUTE}.authenticate", return_value={"id": "user-1"}),
            patch(
                "chaptergen.accounts.usage.check_usage",
                return_value=UsageCheck(allowed=True, used=0, limit=1, subscribed=False),
            ),
            patch(f"{ROUTE}.record_usage") as mock_record,
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.refine_chapters", return_value="0:00 Intro"),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"action": "shorter_titles", "current_chapters": CHAPTERS},
                headers={"x-api-key": "ltgv_key"},
            )
        assert response.status_code == 200
        mock_record.assert_not_called()


# ---------------------------------------------------------------------------
# /api/tools/chaptergen -- generation
# ---------------------------------------------------------------------------


class TestChapterGeneration:
    def test_free_trial_generation(self) -> None:
        with (
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.generate_chapters", return_value=CHAPTERS) as mock_generate,
        ):
            response = client.post(
                "/api/tools/chaptergen", json={"transcript": TRANSCRIPT}, headers=FREE_TRIAL
            )
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True
        assert body["result"] == CHAPTERS
        assert body["chapters"] == [
            {"timestamp": "0:00", "title": "Intro"},
            {"timestamp": "0:02", "title": "Caufield's Goal"},
        ]
        assert body["is_free_trial"] is True
        assert body["usage"] is None
        mock_generate.assert_called_once_with(TRANSCRIPT)

    def test_missing_transcript_is_400(self) -> None:
        response = client.post("/api/tools/chaptergen", json={}, headers=FREE_TRIAL)
        assert response.status_code == 400
        assert response.json()["detail"] == "transcript is required"

    def test_short_transcript_is_400(self) -> None:
        with (
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.generate_chapters") as mock_generate,
        ):
            response = client.post(
                "/api/tools/chaptergen", json={"transcript": "[0:00] Hi"}, headers=FREE_TRIAL
            )
        assert response.status_code == 400
        assert "too short" in response.json()["detail"]
        mock_generate.assert_not_called()

    def test_provider_not_configured_is_500(self) -> None:
        with patch(f"{ROUTE}._provider_configured", return_value=False):
            response = client.post(
                "/api/tools/chaptergen", json={"transcript": TRANSCRIPT}, headers=FREE_TRIAL
            )
        assert response.status_code == 500
        assert "not configured" in response.json()["detail"]

    def test_model_failure_is_503(self) -> None:
        error = UpstreamUnavailableError(
            "OpenAI service temporarily unavailable. Please try again in a moment.",
            status_code=502,
        )
        with (
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.generate_chapters", side_effect=error),
        ):
            response = client.post(
                "/api/tools/chaptergen", json={"transcript": TRANSCRIPT}, headers=FREE_TRIAL
            )
        assert response.status_code == 503
        assert response.json()["detail"].startswith("LLM unavailable: OpenAI service")

    def test_refinement(self) -> None:
        with (
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.refine_chapters", return_value="0:00 Intro\n0:02 Goal") as mock_refine,
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"action": "shorter_titles", "current_chapters": CHAPTERS},
                headers=FREE_TRIAL,
            )
        assert response.status_code == 200
        assert response.json()["result"] == "0:00 Intro\n0:02 Goal"
        mock_refine.assert_called_once_with(CHAPTERS, "shorter_titles", "")

    def test_refinement_requires_current_chapters(self) -> None:
        response = client.post(
            "/api/tools/chaptergen", json={"action": "more_chapters"}, headers=FREE_TRIAL
        )
        assert response.status_code == 400

    def test_unknown_action_is_422(self) -> None:
        response = client.post(
            "/api/tools/chaptergen",
            json={"action": "translate", "current_chapters": CHAPTERS},
            headers=FREE_TRIAL,
        )
        assert response.status_code == 422

    def test_refinement_network_error_is_503(self) -> None:
        with (
            patch(f"{ROUTE}._provider_configured", return_value=True),
            patch(f"{ROUTE}.refine_chapters", side_effect=NetworkError("Network error")),
        ):
            response = client.post(
                "/api/tools/chaptergen",
                json={"action": "add_timestamps", "current_chapters": CHAPTERS},
                headers=FREE_TRIAL,
            )
        assert response.status_code == 503


# ---------------------------------------------------------------------------
# /api/transcript
# ---------------------------------------------------------------------------


def _fetched() -> FetchedTranscript:
    return FetchedTranscript(
        video_id="dQw4w9WgXcQ",
        transcript=TRANSCRIPT,
        plain_text="Welcome back. Here's the play. What a goal by Caufield!",
        segment_count=3,
        duration="0:19",
    )


class TestTranscriptEndpoint:
    def test_requires_url_or_video_id(self) -> None:
        response = client.get("/api/transcript")
        assert response.status_code == 400

    def test_captions_source(self) -> None:
        with patch(f"{TRANSCRIPT_ROUTE}.fetch_transcript", return_value=_fetched()) as mock_fetch:
            response = client.get("/api/transcript", params={"video_id": "dQw4w9WgXcQ"})
        assert response.status_code == 200
        body = response.json()
        assert body["video_id"] == "dQw4w9WgXcQ"
        assert body["duration"] == "0:19"
        assert body["segments"] == 3
        assert body["source"] == "captions"
        mock_fetch.assert_called_once_with("dQw4w9WgXcQ")

    def test_captions_bad_url_is_400(self) -> None:
        with patch(
            f"{TRANSCRIPT_ROUTE}.fetch_transcript",
            side_effect=ValueError("Could not extract video ID from the provided URL or ID"),
        ):
            response = client.get("/api/transcript", params={"url": "https://example.com"})
        assert response.status_code == 400

    def test_captions_not_found_is_404(self) -> None:
        with patch(
            f"{TRANSCRIPT_ROUTE}.fetch_transcript",
            side_effect=ExtractionNotFoundError("Transcripts are disabled for this video"),
        ):
            response = client.get("/api/transcript", params={"video_id": "dQw4w9WgXcQ"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Transcripts are disabled for this video"

    def test_captions_service_failure_is_502(self) -> None:
        with patch(
            f"{TRANSCRIPT_ROUTE}.fetch_transcript",
            side_effect=ExtractionError("Failed to fetch transcript. Please try again later."),
        ):
            response = client.get("/api/transcript", params={"video_id": "dQw4w9WgXcQ"})
        assert response.status_code == 502

    def test_page_source(self) -> None:
        with patch(
            f"{TRANSCRIPT_ROUTE}.extract_from_url", new=AsyncMock(return_value=TRANSCRIPT)
        ) as mock_extract:
            response = client.get(
                "/api/transcript",
                params={"url": "https://youtu.be/dQw4w9WgXcQ", "source": "page"},
            )
        assert response.status_code == 200
        body = response.json()
        assert body["transcript"] == TRANSCRIPT
        assert body["duration"] == "0:19"
        assert body["source"] == "page"
        mock_extract.assert_awaited_once_with("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    def test_page_source_timeout_is_504(self) -> None:
        with patch(
            f"{TRANSCRIPT_ROUTE}.extract_from_url",
            new=AsyncMock(side_effect=ExtractionTimeoutError("Timeout waiting for: segments")),
        ):
            response = client.get(
                "/api/transcript", params={"video_id": "dQw4w9WgXcQ", "source": "page"}
            )
        assert response.status_code == 504

    def test_page_source_bad_id_is_400(self) -> None:
        response = client.get("/api/transcript", params={"url": "nope", "source": "page"})
        assert response.status_code == 400

    def test_unknown_source_is_422(self) -> None:
        response = client.get(
            "/api/transcript", params={"video_id": "dQw4w9WgXcQ", "source": "audio"}
        )
        assert response.status_code == 422
