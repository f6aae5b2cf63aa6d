"""Data models for program assembly."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import numpy as np


class SourceKind(str, Enum):
    TTS = "tts"
    BGM = "bgm"
    JINGLE = "jingle"
    SFX = "sfx"


class MuteKind(str, Enum):
    """How a segment relates to the continuous background track.

    NONE: mixed under the background.
    BOOKEND: opening/ending BGM; never mixed, background phase holds.
    INLINE: jingle/SFX mid-program; never mixed, background phase keeps running.
    """
    NONE = "none"
    BOOKEND = "bookend"
    INLINE = "inline"


@dataclass
class ScriptLine:
    speaker: str
    text: str


@dataclass(frozen=True)
class SanitizedLine:
    text: str
    laugh_sfx: bool = False      # laughter deferred to a sound effect
    is_countdown: bool = False   # quiz stage cue, never synthesized


@dataclass
class Cue:
    """A planned timeline entry, before its audio is decoded."""
    kind: SourceKind
    path: Path
    mute: MuteKind = MuteKind.NONE
    label: str = ""


@dataclass
class Segment:
    kind: SourceKind
    samples: np.ndarray          # canonical int16 mono PCM
    mute_kind: MuteKind = MuteKind.NONE
    label: str = ""

    @property
    def mute(self) -> bool:
        return self.mute_kind is not MuteKind.NONE


@dataclass
class Timeline:
    """Ordered canonical chunks with parallel per-chunk metadata."""
    chunks: list[np.ndarray] = field(default_factory=list)
    mute_kinds: list[MuteKind] = field(default_factory=list)
    kinds: list[SourceKind] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)

    def append(self, segment: Segment) -> None:
        self.chunks.append(segment.samples)
        self.mute_kinds.append(segment.mute_kind)
        self.kinds.append(segment.kind)
        self.labels.append(segment.label)

    @property
    def mute_flags(self) -> list[bool]:
        return [kind is not MuteKind.NONE for kind in self.mute_kinds]

    @property
    def sample_count(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass(frozen=True)
class WavDescriptor:
    sample_rate: int
    num_channels: int
    bits_per_sample: int
    data_offset: int
    data_length: int
    audio_format: int = 1


@dataclass
class RenderResult:
    """Outcome of a render run.

    success=False is a whole-pipeline failure (no master written). A success
    with omissions is a partial success that still carries the master path.
    """
    success: bool
    path: str | None = None
    duration_seconds: float = 0.0
    segments: int = 0
    omissions: list[str] = field(default_factory=list)
    message: str = ""
