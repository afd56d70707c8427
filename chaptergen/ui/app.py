"""ChapterGen -- Streamlit UI.

Paste a YouTube URL, fetch its transcript, and generate chapters ready to
paste into the video description.
"""

from __future__ import annotations

import streamlit as st

from chaptergen.generation.prompts import RefinementAction
from chaptergen.ui.api_client import (
    check_health,
    fetch_transcript,
    generate_chapters,
    refine_chapters,
)

ACTION_LABELS = {
    RefinementAction.MORE_CHAPTERS: "More chapters",
    RefinementAction.SHORTER_TITLES: "Shorter titles",
    RefinementAction.ADD_TIMESTAMPS: "Add timestamps",
}

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="ChapterGen", layout="centered")

# ---------------------------------------------------------------------------
# Sidebar -- API key + transcript source + API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("ChapterGen")
    st.markdown("---")

    api_key = st.text_input(
        "API key",
        type="password",
        help="Leave empty to use the free trial.",
    ).strip()

    source: str = st.selectbox(
        "Transcript source",
        options=["captions", "page"],
        format_func=lambda x: "Caption service" if x == "captions" else "Watch page (browser)",
    )

    st.markdown("---")

    api_healthy = check_health()
    if api_healthy:
        st.markdown(":green_circle: API connected")
    else:
        st.markdown(":red_circle: API unreachable")

# ---------------------------------------------------------------------------
# Main page
# ---------------------------------------------------------------------------
st.header("Generate Chapters")

url = st.text_input("YouTube URL", placeholder="https://www.youtube.com/watch?v=...")

if st.button("Generate", disabled=not url, type="primary"):
    if not api_healthy:
        st.error("Cannot generate: the API server is not reachable.")
    else:
        with st.spinner("Fetching transcript..."):
            transcript_result = fetch_transcript(url, source=source)

        transcript = transcript_result.get("transcript", "")
        if transcript:
            st.session_state["transcript"] = transcript
            with st.spinner("Generating chapters..."):
                result = generate_chapters(transcript, api_key=api_key or None)
            if result:
                # Overwritten on every generation; the code block has a copy button.
                st.session_state["last_chapters"] = result["result"]
                usage = result.get("usage")
                if usage and usage.get("limit") is not None:
                    st.caption(f"Used {usage['used']} of {usage['limit']} free generations.")

last_chapters: str = st.session_state.get("last_chapters", "")
if last_chapters:
    st.subheader("Chapters")
    st.code(last_chapters, language=None)

    columns = st.columns(len(ACTION_LABELS))
    for column, (action, label) in zip(columns, ACTION_LABELS.items(), strict=True):
        if column.button(label, key=f"refine_{action.value}"):
            with st.spinner("Refining..."):
                refined = refine_chapters(
                    last_chapters,
                    action.value,
                    transcript=st.session_state.get("transcript", ""),
                    api_key=api_key or None,
                )
            if refined:
                st.session_state["last_chapters"] = refined["result"]
                st.rerun()

    with st.expander("Transcript"):
        st.text(st.session_state.get("transcript", ""))
