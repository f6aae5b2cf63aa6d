"""Load script lines handed over by the script-drafting step."""

import json
import re
from pathlib import Path

from podcast_assembler.models import ScriptLine

# "Speaker: text" (ASCII or full-width colon)
_LINE_RE = re.compile(r"^\s*([^:：]{1,64}?)\s*[:：]\s*(.*)$")

# Bare stage tokens like [COUNTDOWN] on their own line
_STAGE_LINE_RE = re.compile(r"^\s*\[[A-Z_]+\]\s*$", re.IGNORECASE)

# Markdown emphasis around speaker names: **A**: Hello
_EMPHASIS_RE = re.compile(r"^[*_]+|[*_]+$")


def parse_script(text: str, stage_speaker: str = "__STAGE__") -> list[ScriptLine]:
    """Parse `Speaker: text` lines.

    Blank lines and markdown headings are skipped; bare bracket tokens become
    stage lines; a line without a speaker continues the previous line.
    """
    lines: list[ScriptLine] = []
    for raw in text.splitlines():
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if _STAGE_LINE_RE.match(stripped):
            lines.append(ScriptLine(speaker=stage_speaker, text=stripped))
            continue
        match = _LINE_RE.match(stripped)
        if match:
            speaker = _EMPHASIS_RE.sub("", match.group(1).strip()).strip()
            lines.append(ScriptLine(speaker=speaker, text=match.group(2).strip()))
        elif lines:
            lines[-1].text = f"{lines[-1].text} {stripped}".strip()
    return lines


def parse_script_json(data) -> list[ScriptLine]:
    """Accept either a list of {speaker, text} or {"lines": [...]}."""
    items = data.get("lines", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("script JSON must be a list of lines or an object with 'lines'")
    lines = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or "speaker" not in item or "text" not in item:
            raise ValueError(f"script line {i} must have 'speaker' and 'text'")
        lines.append(ScriptLine(speaker=str(item["speaker"]), text=str(item["text"])))
    return lines


def load_script(path: str | Path) -> list[ScriptLine]:
    """Load a script from .json or plain text."""
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return parse_script_json(json.loads(content))
    return parse_script(content)
