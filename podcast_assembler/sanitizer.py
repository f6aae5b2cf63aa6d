"""Clean script lines before speech synthesis."""

import re

from podcast_assembler.constants import LAUGHTER_MODES, LAUGHTER_PLACEHOLDER, STAGE_SPEAKER
from podcast_assembler.models import SanitizedLine, ScriptLine

# Stage directions like （♪ ジングル）, (BGM fades), （効果音）
_CUE_RE = re.compile(r"[（(]\s*(?:♪|BGM|ジングル|効果音|SE\b)[^）)]*[）)]", re.IGNORECASE)

# Bracket stage tokens: [OPENING_BGM], [JINGLE], ...
_STAGE_TOKEN_RE = re.compile(
    r"\[(?:OPENING_JINGLE|OPENING_BGM|JINGLE|ENDING_BGM|COUNTDOWN)\]",
    re.IGNORECASE,
)

# Laughter markers: （笑）, (笑), (laughs), (laughter)
_LAUGH_RE = re.compile(r"[（(]\s*(?:笑|laughs?|laughter)\s*[）)]", re.IGNORECASE)

_EMPTY_PARENS_RE = re.compile(r"\s*[（(]\s*[）)]\s*")
_COUNTDOWN_RE = re.compile(r"^\s*\[COUNTDOWN\]\s*$", re.IGNORECASE)


def has_laughter(text: str) -> bool:
    return bool(_LAUGH_RE.search(text or ""))


def is_stage_countdown(line: ScriptLine) -> bool:
    """A quiz stage line that inserts the countdown effect instead of speech."""
    return line.speaker == STAGE_SPEAKER and bool(_COUNTDOWN_RE.match(line.text or ""))


def sanitize_text(text: str, laughter_mode: str = "replace") -> str:
    """Strip stage cues and handle laughter markers.

    Returns "" when nothing speakable is left; callers skip synthesis then.
    """
    if laughter_mode not in LAUGHTER_MODES:
        raise ValueError(f"unknown laughter mode: {laughter_mode!r}")
    if not text:
        return ""

    s = _CUE_RE.sub("", text)
    s = _STAGE_TOKEN_RE.sub("", s)
    if laughter_mode == "replace":
        s = _LAUGH_RE.sub(f" {LAUGHTER_PLACEHOLDER} ", s)
    else:
        s = _LAUGH_RE.sub("", s)
    s = _EMPTY_PARENS_RE.sub(" ", s)
    return re.sub(r"\s+", " ", s).strip()


def sanitize_line(line: ScriptLine, laughter_mode: str = "replace") -> SanitizedLine:
    """Derive the synthesizable form of a script line."""
    if is_stage_countdown(line):
        return SanitizedLine(text="", is_countdown=True)
    return SanitizedLine(
        text=sanitize_text(line.text, laughter_mode),
        laugh_sfx=laughter_mode == "audio" and has_laughter(line.text),
    )
