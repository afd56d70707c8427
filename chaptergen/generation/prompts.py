"""Prompt text for the draft, spelling, and refinement model calls."""

from __future__ import annotations

from enum import StrEnum

CHAPTER_SYSTEM_PROMPT = (
    "You are a YouTube chapter expert. Create chapters at the START of each "
    "segment, not where it's described.\n\n"
    "CRITICAL - CHAPTER TIMING:\n"
    "Chapters mark where a viewer should SKIP TO to watch a segment FROM THE BEGINNING.\n\n"
    "The problem: Captions often describe what just happened. If a play happens "
    "from 0:02-0:19, the player's name appears in captions at 0:19 (after the "
    "play). But the chapter should be at 0:02 (where the play STARTS).\n\n"
    "How to find the correct timestamp:\n"
    "1. When you see a name/topic mentioned, look BACKWARDS to find where that "
    "segment STARTED\n"
    "2. For highlights: Each clip starts right after the previous clip ends. "
    "New clip = new chapter at its START\n"
    '3. For list videos: Chapter starts at "next up", "number X is", "moving on '
    'to" - NOT in the middle of discussion\n'
    "4. Look for gaps/transitions between segments - that's where the new chapter begins\n\n"
    'Think: "If someone clicks this chapter, where do they land to see the WHOLE segment?"\n\n'
    "OTHER RULES:\n"
    '- SHORT TITLES (3-5 words): "[Player Name]\'s [Play Type]" or "[Item] - [Detail]"\n'
    "- Copy names EXACTLY as spelled in transcript\n"
    "- Capture EVERY distinct play/item - don't skip any\n"
    '- First chapter at 0:00: "Intro" or brief topic (2-3 words)'
)

_CHAPTER_USER_TEMPLATE = """\
Create YouTube chapters for this video. Duration: {duration}

CRITICAL - READ CAREFULLY:
The transcript shows timestamps where words are SPOKEN, but chapters should be where segments START.

Example problem:
- [0:02] (play begins - no caption yet)
- [0:19] "What a goal by Caufield!" (caption appears AFTER the play)
- WRONG: 0:19 Caufield's Goal (this is the END)
- RIGHT: 0:02 Caufield's Goal (this is the START)

For each chapter: Look at the context BEFORE the description to find where that segment \
actually began. Place the chapter at the START of the action, not where it's narrated.

Transcript with context:
{transcript}

Return ONLY chapters in format (timestamps at segment STARTS):
0:00 Intro
0:02 Player's Goal"""

SPELLING_SYSTEM_PROMPT = (
    "You are a spelling correction expert for sports players, celebrities, "
    "YouTubers, and brand names.\n\n"
    "Your job: Fix obvious misspellings in YouTube chapter titles caused by "
    "auto-caption errors.\n\n"
    "Common patterns to fix:\n"
    '- Phonetic spellings: "Cfield" -> "Caufield", "Jack Eel" -> "Jack Eichel", '
    '"Ovetshkin" -> "Ovechkin"\n'
    '- Split names: "Mc David" -> "McDavid", "Le Bron" -> "LeBron"\n'
    '- Sound-alikes: "Croz B" -> "Crosby", "Dry Seidel" -> "Draisaitl"\n'
    '- Missing letters: "Gretzky" is correct, "Gretsky" is wrong\n\n'
    "Rules:\n"
    "- ONLY fix obvious misspellings of real names\n"
    "- Do NOT change timestamps\n"
    "- Do NOT change chapter structure or wording (except the misspelled name)\n"
    "- If unsure, leave the name as-is\n"
    "- Keep everything else exactly the same"
)

_SPELLING_USER_TEMPLATE = """\
Fix any obvious name misspellings in these YouTube chapters. Only correct names that are \
clearly wrong phonetic transcriptions of real sports players, celebrities, or brands.

Chapters:
{chapters}

Return the corrected chapters in the exact same format. If no corrections needed, return \
them unchanged."""

REFINE_SYSTEM_PROMPT = (
    "You are a YouTube chapter expert. Improve the given chapters based on the "
    "request. Return ONLY the improved chapters in the same format (timestamp "
    "followed by title, one per line)."
)


class RefinementAction(StrEnum):
    """Quick follow-up edits on an existing chapter list."""

    MORE_CHAPTERS = "more_chapters"
    SHORTER_TITLES = "shorter_titles"
    ADD_TIMESTAMPS = "add_timestamps"


_REFINE_TEMPLATES: dict[RefinementAction, str] = {
    RefinementAction.MORE_CHAPTERS: """\
Add more chapters to break this video into smaller segments. Find additional natural \
breakpoints in the content.

Current chapters:
{chapters}

Reference transcript:
{transcript}

Return the improved chapters with more granular timestamps. Keep existing chapters but add \
new ones between them where appropriate.""",
    RefinementAction.SHORTER_TITLES: """\
Make these chapter titles shorter and punchier. Aim for 2-4 words per title.

Current chapters:
{chapters}

Return the same chapters with shorter, more scannable titles. Keep the same timestamps.""",
    RefinementAction.ADD_TIMESTAMPS: """\
Find more section breaks and add additional timestamps to these chapters.

Current chapters:
{chapters}

Reference transcript:
{transcript}

Add more timestamps to capture transitions and topic changes that were missed. Return the \
complete chapter list with additions.""",
}


def build_chapter_prompt(transcript: str, duration: str) -> str:
    return _CHAPTER_USER_TEMPLATE.format(transcript=transcript, duration=duration)


def build_spelling_prompt(chapters: str) -> str:
    return _SPELLING_USER_TEMPLATE.format(chapters=chapters)


def build_refinement_prompt(
    chapters: str,
    action: str | RefinementAction,
    transcript: str = "",
) -> str:
    """Build the user prompt for a quick action.

    Raises:
        ValueError: If *action* is not a known RefinementAction.
    """
    action = RefinementAction(action)
    return _REFINE_TEMPLATES[action].format(chapters=chapters, transcript=transcript)
