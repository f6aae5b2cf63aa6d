"""Block-based lossy encoding of the canonical PCM stream."""

import io
from typing import Protocol

import numpy as np
from pydub import AudioSegment

from podcast_assembler.constants import MP3_BITRATE_KBPS, MP3_FRAME_SAMPLES, TARGET_SAMPLE_RATE
from podcast_assembler.errors import EncodeError


class BlockEncoder(Protocol):
    def encode(self, frame: np.ndarray) -> bytes:
        """Consume one frame of int16 samples; return any bytes ready so far."""

    def flush(self) -> bytes:
        """Emit everything still buffered."""


class Mp3BlockEncoder:
    """MP3 encoder behind the block contract.

    ffmpeg (through pydub) encodes the whole stream in one pass, so encode()
    only buffers frames and returns b"". All MP3 bytes come from flush().
    """

    def __init__(
        self,
        sample_rate: int = TARGET_SAMPLE_RATE,
        channels: int = 1,
        bitrate_kbps: int = MP3_BITRATE_KBPS,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.bitrate_kbps = bitrate_kbps
        self._pending = io.BytesIO()

    def encode(self, frame: np.ndarray) -> bytes:
        self._pending.write(np.asarray(frame, dtype="<i2").tobytes())
        return b""

    def flush(self) -> bytes:
        pcm = self._pending.getvalue()
        self._pending = io.BytesIO()
        if not pcm:
            return b""
        audio = AudioSegment(
            data=pcm,
            sample_width=2,
            frame_rate=self.sample_rate,
            channels=self.channels,
        )
        out = io.BytesIO()
        audio.export(out, format="mp3", bitrate=f"{self.bitrate_kbps}k")
        return out.getvalue()


def encode_blocks(
    samples: np.ndarray,
    encoder: BlockEncoder,
    frame_samples: int = MP3_FRAME_SAMPLES,
) -> bytes:
    """Feed `samples` through `encoder` in fixed-size frames, then flush.

    The last frame may be short. Any encoder failure is raised as EncodeError.
    """
    if frame_samples < 1:
        raise ValueError("frame_samples must be >= 1")
    parts = []
    try:
        for start in range(0, len(samples), frame_samples):
            parts.append(encoder.encode(samples[start:start + frame_samples]))
        parts.append(encoder.flush())
    except EncodeError:
        raise
    except Exception as e:
        raise EncodeError(f"lossy encoding failed: {e}") from e
    return b"".join(parts)
