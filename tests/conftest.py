"""Shared fixtures for podcast assembler tests."""

import io
import struct

import numpy as np
import pytest
from pydub import AudioSegment

from podcast_assembler.config import RenderConfig
from podcast_assembler.models import ScriptLine


def make_wav_bytes(samples, sample_rate=22050, channels=1, sample_width=2) -> bytes:
    """Encode interleaved samples as a WAV with pydub (independent of our encoder)."""
    dtype = {1: np.uint8, 2: np.int16}[sample_width]
    audio = AudioSegment(
        data=np.asarray(samples, dtype=dtype).tobytes(),
        sample_width=sample_width,
        frame_rate=sample_rate,
        channels=channels,
    )
    out = io.BytesIO()
    audio.export(out, format="wav")
    return out.getvalue()


def write_wav(path, samples, sample_rate=22050, channels=1) -> str:
    path.write_bytes(make_wav_bytes(samples, sample_rate, channels))
    return str(path)


def tone(seconds=1.0, sample_rate=22050, amplitude=8000, freq=440.0) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return (np.sin(2 * np.pi * freq * t) * amplitude).astype(np.int16)


def raw_chunk(chunk_id: bytes, payload: bytes) -> bytes:
    """One RIFF chunk with word-alignment padding."""
    pad = b"\x00" if len(payload) % 2 else b""
    return chunk_id + struct.pack("<I", len(payload)) + payload + pad


def fmt_payload(channels=1, sample_rate=22050, bits=16, audio_format=1) -> bytes:
    block_align = channels * bits // 8
    return struct.pack("<HHIIHH", audio_format, channels, sample_rate,
                       sample_rate * block_align, block_align, bits)


def riff(*chunks: bytes) -> bytes:
    body = b"WAVE" + b"".join(chunks)
    return b"RIFF" + struct.pack("<I", len(body)) + body


class FakeSynthesizer:
    """Writes a fixed-length tone per line; fails for texts in `fail_on`."""

    def __init__(self, seconds=1.0, sample_rate=22050, fail_on=()):
        self.seconds = seconds
        self.sample_rate = sample_rate
        self.fail_on = set(fail_on)
        self.calls = []

    async def synthesize(self, text, voice, output_path):
        self.calls.append((text, voice))
        if text in self.fail_on:
            raise RuntimeError(f"backend rejected {text!r}")
        write_wav(output_path, tone(self.seconds, self.sample_rate), self.sample_rate)
        return output_path


@pytest.fixture
def fake_synth():
    return FakeSynthesizer()


@pytest.fixture
def two_lines():
    return [ScriptLine(speaker="A", text="Hello"), ScriptLine(speaker="B", text="Hi")]


@pytest.fixture
def asset_root(tmp_path):
    """Project root with an empty asset directory."""
    audio_dir = tmp_path / "assets"
    audio_dir.mkdir()
    return tmp_path


@pytest.fixture
def base_config(tmp_path, asset_root):
    """Config with every insertion off, rendering into tmp_path/out."""
    return RenderConfig(
        project_root=str(asset_root),
        asset_dir="assets",
        output_dir=str(tmp_path / "out"),
        output_name="show",
        insert_opening_bgm=False,
        insert_ending_bgm=False,
        insert_jingles=False,
        insert_continuous_bgm=False,
        write_manifest=False,
    )
