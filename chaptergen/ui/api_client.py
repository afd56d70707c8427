"""HTTP client wrapper for the ChapterGen FastAPI backend."""

from __future__ import annotations

import os

import httpx
import streamlit as st

API_URL = os.getenv("API_URL", "http://localhost:8000")


def check_health() -> bool:
    """Return True if the API server responds to /health."""
    try:
        r = httpx.get(f"{API_URL}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.ConnectError:
        return False


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the API's ``detail`` field."""
    try:
        detail = response.json().get("detail")
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(detail, dict):
        return str(detail.get("message") or detail)
    return str(detail or f"HTTP {response.status_code}")


def _auth_headers(api_key: str | None) -> dict[str, str]:
    if api_key:
        return {"x-api-key": api_key}
    return {"x-free-trial": "true"}


def fetch_transcript(url: str, source: str = "captions") -> dict:  # type: ignore[type-arg]
    """Fetch the timestamped transcript for a YouTube URL."""
    try:
        r = httpx.get(
            f"{API_URL}/api/transcript",
            params={"url": url, "source": source},
            timeout=120.0,
        )
    except httpx.HTTPError as e:
        st.error(f"Transcript fetch failed: {e}")
        return {}
    if r.is_error:
        st.error(f"Transcript error: {_error_message(r)}")
        return {}
    return r.json()  # type: ignore[no-any-return]


def generate_chapters(transcript: str, api_key: str | None = None) -> dict:  # type: ignore[type-arg]
    """Run the two-pass chapter pipeline on a transcript."""
    try:
        r = httpx.post(
            f"{API_URL}/api/tools/chaptergen",
            json={"transcript": transcript},
            headers=_auth_headers(api_key),
            timeout=180.0,
        )
    except httpx.HTTPError as e:
        st.error(f"Generation failed: {e}")
        return {}
    if r.is_error:
        st.error(_error_message(r))
        return {}
    return r.json()  # type: ignore[no-any-return]


def refine_chapters(
    current_chapters: str,
    action: str,
    transcript: str = "",
    api_key: str | None = None,
) -> dict:  # type: ignore[type-arg]
    """Apply a quick action (more chapters, shorter titles, add timestamps)."""
    payload: dict[str, str] = {"action": action, "current_chapters": current_chapters}
    if transcript:
        payload["transcript"] = transcript
    try:
        r = httpx.post(
            f"{API_URL}/api/tools/chaptergen",
            json=payload,
            headers=_auth_headers(api_key),
            timeout=120.0,
        )
    except httpx.HTTPError as e:
        st.error(f"Refinement failed: {e}")
        return {}
    if r.is_error:
        st.error(_error_message(r))
        return {}
    return r.json()  # type: ignore[no-any-return]
