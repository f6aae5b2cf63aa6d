"""Conversion of integer PCM to canonical mono 16-bit samples."""

import numpy as np

from podcast_assembler.constants import INT16_MIN, INT16_MAX, TARGET_SAMPLE_RATE
from podcast_assembler.models import WavDescriptor


def round_clamp16(values: np.ndarray) -> np.ndarray:
    """Round half up and clamp to the signed 16-bit range."""
    rounded = np.floor(np.asarray(values, dtype=np.float64) + 0.5)
    return np.clip(rounded, INT16_MIN, INT16_MAX).astype(np.int16)


def to_int16(payload: bytes, bits_per_sample: int) -> np.ndarray:
    """Interpret a little-endian integer PCM payload as int16 samples.

    8-bit is unsigned; 24 and 32-bit are narrowed by dropping low bytes.
    A trailing partial sample is ignored.
    """
    width = bits_per_sample // 8
    usable = len(payload) - (len(payload) % width)
    raw = payload[:usable]

    if bits_per_sample == 16:
        return np.frombuffer(raw, dtype="<i2").astype(np.int16)
    if bits_per_sample == 8:
        samples = np.frombuffer(raw, dtype=np.uint8).astype(np.int16)
        return ((samples - 128) << 8).astype(np.int16)
    if bits_per_sample == 24:
        triples = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3)
        # Keep the top two bytes; the most significant one carries the sign
        high = triples[:, 2].astype(np.int8).astype(np.int16) << 8
        return (high | triples[:, 1].astype(np.int16)).astype(np.int16)
    if bits_per_sample == 32:
        return (np.frombuffer(raw, dtype="<i4") >> 16).astype(np.int16)
    raise ValueError(f"unsupported bit depth: {bits_per_sample}")


def downmix(samples: np.ndarray, channels: int) -> np.ndarray:
    """Average interleaved channels into one float64 channel."""
    samples = np.asarray(samples, dtype=np.float64)
    if channels <= 1:
        return samples
    frames = len(samples) // channels
    return samples[:frames * channels].reshape(frames, channels).mean(axis=1)


def resample(mono: np.ndarray, src_rate: int, target_rate: int) -> np.ndarray:
    """Linear-interpolation resample. Returns unrounded float64 values."""
    n = len(mono)
    if n == 0 or src_rate == target_rate:
        return mono
    ratio = target_rate / src_rate
    dst_len = max(1, int(np.floor(n * ratio)))
    src_pos = np.arange(dst_len, dtype=np.float64) / ratio
    i0 = np.minimum(np.floor(src_pos).astype(np.int64), n - 1)
    i1 = np.minimum(n - 1, i0 + 1)
    frac = src_pos - i0
    return mono[i0] * (1.0 - frac) + mono[i1] * frac


def normalize(
    pcm16: np.ndarray,
    src_rate: int,
    src_channels: int,
    target_rate: int = TARGET_SAMPLE_RATE,
) -> np.ndarray:
    """Downmix and resample int16 PCM to canonical mono at `target_rate`.

    Pure and deterministic: identical inputs give byte-identical output.
    """
    mono = downmix(pcm16, src_channels)
    return round_clamp16(resample(mono, src_rate, target_rate))


def decode_pcm(
    desc: WavDescriptor,
    payload: bytes,
    target_rate: int = TARGET_SAMPLE_RATE,
) -> np.ndarray:
    """Canonical PCM for a decoded WAV payload."""
    return normalize(
        to_int16(payload, desc.bits_per_sample),
        desc.sample_rate,
        desc.num_channels,
        target_rate,
    )
