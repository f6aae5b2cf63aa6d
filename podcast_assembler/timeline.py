"""Plan and assemble the ordered program timeline."""

import logging
from pathlib import Path

import numpy as np

from podcast_assembler.assets import AssetPaths
from podcast_assembler.constants import TARGET_SAMPLE_RATE
from podcast_assembler.errors import WavDecodeError
from podcast_assembler.models import Cue, MuteKind, SanitizedLine, Segment, SourceKind, Timeline
from podcast_assembler.pcm import decode_pcm
from podcast_assembler.wav import read_wav_file

logger = logging.getLogger(__name__)


def build_cues(
    sanitized: list[SanitizedLine],
    speech_paths: list[Path | None],
    assets: AssetPaths,
    insert_opening_bgm: bool = True,
    insert_ending_bgm: bool = True,
    insert_jingles: bool = True,
    jingle_interval: int = 0,
) -> list[Cue]:
    """Order every segment of the program.

    [opening] then per line: [countdown] [speech] [laugh] [jingle every N], then [ending].
    Missing assets and failed lines (None paths) produce no cue.
    """
    if len(sanitized) != len(speech_paths):
        raise ValueError("sanitized lines and speech paths must align")

    cues: list[Cue] = []
    if insert_opening_bgm and assets.opening:
        cues.append(Cue(SourceKind.BGM, assets.opening, MuteKind.BOOKEND, "opening"))

    for i, (line, speech) in enumerate(zip(sanitized, speech_paths)):
        if line.is_countdown:
            if assets.countdown:
                cues.append(Cue(SourceKind.SFX, assets.countdown, MuteKind.INLINE, "countdown"))
            continue
        if speech is not None:
            cues.append(Cue(SourceKind.TTS, speech, MuteKind.NONE, f"line {i}"))
        if line.laugh_sfx and assets.laugh:
            cues.append(Cue(SourceKind.SFX, assets.laugh, MuteKind.INLINE, "laugh"))
        if insert_jingles and jingle_interval > 0 and (i + 1) % jingle_interval == 0 and assets.jingle:
            cues.append(Cue(SourceKind.JINGLE, assets.jingle, MuteKind.INLINE, "jingle"))

    if insert_ending_bgm and assets.ending:
        cues.append(Cue(SourceKind.BGM, assets.ending, MuteKind.BOOKEND, "ending"))
    return cues


def load_canonical(path: str | Path, target_rate: int = TARGET_SAMPLE_RATE) -> np.ndarray:
    """Decode a WAV file and normalize it. Raises WavDecodeError."""
    desc, payload = read_wav_file(path)
    return decode_pcm(desc, payload, target_rate)


def assemble_timeline(
    cues: list[Cue],
    target_rate: int = TARGET_SAMPLE_RATE,
) -> tuple[Timeline, list[str]]:
    """Decode and normalize cues in order.

    Undecodable files are skipped with a warning and reported as omissions.
    Asset files are decoded once per path.
    """
    timeline = Timeline()
    omissions: list[str] = []
    asset_cache: dict[Path, np.ndarray] = {}

    for cue in cues:
        path = Path(cue.path)
        if cue.kind is not SourceKind.TTS and path in asset_cache:
            samples = asset_cache[path]
        else:
            try:
                samples = load_canonical(path, target_rate)
            except WavDecodeError as e:
                logger.warning("Skipping %s (%s): %s", cue.label or path.name, path.name, e)
                omissions.append(f"{cue.label or path.name}: {e}")
                continue
            if cue.kind is not SourceKind.TTS:
                asset_cache[path] = samples
        timeline.append(Segment(cue.kind, samples, cue.mute, cue.label or path.name))

    return timeline, omissions
