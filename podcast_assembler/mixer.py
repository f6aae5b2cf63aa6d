"""Loop a background track under the mixable parts of the timeline."""

import math

import numpy as np

from podcast_assembler.constants import CONTINUOUS_BGM_DB, INT16_MAX, INT16_MIN
from podcast_assembler.models import MuteKind, Timeline


def db_to_gain(db: float) -> float:
    """Convert decibels to a linear multiplier; -inf dB is silence."""
    if math.isinf(db) and db < 0:
        return 0.0
    return 10 ** (db / 20)


def mix_continuous_bgm(
    chunks: list[np.ndarray],
    mute_kinds: list[MuteKind],
    bgm: np.ndarray | None,
    gain: float,
    phase: int = 0,
) -> tuple[list[np.ndarray], int]:
    """Mix `bgm` at `gain` under every NONE chunk, looping seamlessly.

    The background read position is threaded explicitly: pass `phase` in,
    get the next phase back. BOOKEND chunks hold the phase, INLINE chunks
    advance it by their length so the loop stays time-locked to the program.
    Inputs are not modified.
    """
    if len(chunks) != len(mute_kinds):
        raise ValueError("chunks and mute_kinds must have the same length")
    if bgm is None or len(bgm) == 0:
        return list(chunks), phase

    loop_len = len(bgm)
    scaled = np.floor(bgm.astype(np.float64) * gain + 0.5)
    phase %= loop_len
    mixed = []

    for chunk, mute in zip(chunks, mute_kinds):
        n = len(chunk)
        if mute is MuteKind.BOOKEND:
            mixed.append(chunk)
            continue
        if mute is MuteKind.INLINE:
            mixed.append(chunk)
            phase = (phase + n) % loop_len
            continue
        idx = (phase + np.arange(n)) % loop_len
        total = chunk.astype(np.float64) + scaled[idx]
        mixed.append(np.clip(total, INT16_MIN, INT16_MAX).astype(np.int16))
        phase = (phase + n) % loop_len

    return mixed, phase


def mix_timeline(
    timeline: Timeline,
    bgm: np.ndarray | None,
    volume_db: float = CONTINUOUS_BGM_DB,
    phase: int = 0,
) -> tuple[Timeline, int]:
    """Return a new Timeline with the background mixed in."""
    chunks, phase = mix_continuous_bgm(
        timeline.chunks, timeline.mute_kinds, bgm, db_to_gain(volume_db), phase,
    )
    return Timeline(
        chunks=chunks,
        mute_kinds=list(timeline.mute_kinds),
        kinds=list(timeline.kinds),
        labels=list(timeline.labels),
    ), phase
