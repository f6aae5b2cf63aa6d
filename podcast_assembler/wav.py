"""RIFF/WAVE container decoding and canonical PCM header encoding."""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import numpy as np

from podcast_assembler.constants import (
    TARGET_CHANNELS,
    TARGET_BITS_PER_SAMPLE,
    WAV_FORMAT_PCM,
    WAV_FORMAT_EXTENSIBLE,
)
from podcast_assembler.errors import WavDecodeError
from podcast_assembler.models import WavDescriptor

SUPPORTED_BITS = (8, 16, 24, 32)


@dataclass(frozen=True)
class Chunk:
    id: str
    offset: int   # offset of the chunk payload (after the 8-byte header)
    size: int     # declared payload size


class WavReader:
    """Bounds-checked view over a WAV byte buffer.

    Exposes little-endian field reads and chunk iteration; every read that
    would run past the buffer raises WavDecodeError.
    """

    def __init__(self, data: bytes):
        self._data = memoryview(data)

    def __len__(self) -> int:
        return len(self._data)

    def _check(self, offset: int, length: int) -> None:
        if offset < 0 or offset + length > len(self._data):
            raise WavDecodeError(
                f"read of {length} bytes at offset {offset} exceeds buffer of {len(self._data)}"
            )

    def tag(self, offset: int) -> str:
        self._check(offset, 4)
        return bytes(self._data[offset:offset + 4]).decode("latin-1")

    def u16(self, offset: int) -> int:
        self._check(offset, 2)
        return struct.unpack_from("<H", self._data, offset)[0]

    def u32(self, offset: int) -> int:
        self._check(offset, 4)
        return struct.unpack_from("<I", self._data, offset)[0]

    def slice(self, offset: int, length: int) -> bytes:
        """Return up to `length` bytes from `offset`, clamped to the buffer end."""
        self._check(offset, 0)
        return bytes(self._data[offset:offset + length])

    def chunks(self) -> Iterator[Chunk]:
        """Walk RIFF chunks from offset 12, honoring word alignment."""
        pos = 12
        while pos + 8 <= len(self._data):
            chunk_id = self.tag(pos)
            size = self.u32(pos + 4)
            yield Chunk(chunk_id, pos + 8, size)
            pos += 8 + size + (size % 2)


def parse_descriptor(reader: WavReader) -> WavDescriptor:
    """Validate magic markers and capture the fmt/data chunk fields."""
    if len(reader) < 12 or reader.tag(0) != "RIFF" or reader.tag(8) != "WAVE":
        raise WavDecodeError("missing RIFF/WAVE magic")

    fmt = None
    data = None
    for chunk in reader.chunks():
        if chunk.id == "fmt ":
            if chunk.size < 16:
                raise WavDecodeError(f"fmt chunk too short ({chunk.size} bytes)")
            audio_format = reader.u16(chunk.offset)
            if audio_format == WAV_FORMAT_EXTENSIBLE and chunk.size >= 26:
                # Sub-format GUID starts with the plain format code
                audio_format = reader.u16(chunk.offset + 24)
            fmt = (
                audio_format,
                reader.u16(chunk.offset + 2),
                reader.u32(chunk.offset + 4),
                reader.u16(chunk.offset + 14),
            )
        elif chunk.id == "data" and data is None:
            # Streamed writers leave the size at 0xFFFFFFFF; keep what is there
            available = max(0, len(reader) - chunk.offset)
            data = (chunk.offset, min(chunk.size, available))

    if fmt is None:
        raise WavDecodeError("no fmt chunk")
    if data is None:
        raise WavDecodeError("no data chunk")

    audio_format, channels, sample_rate, bits = fmt
    if audio_format != WAV_FORMAT_PCM:
        raise WavDecodeError(f"unsupported audio format {audio_format:#06x} (integer PCM only)")
    if bits not in SUPPORTED_BITS:
        raise WavDecodeError(f"unsupported bit depth {bits}")
    if channels == 0 or sample_rate == 0:
        raise WavDecodeError("zero channels or sample rate")

    return WavDescriptor(
        sample_rate=sample_rate,
        num_channels=channels,
        bits_per_sample=bits,
        data_offset=data[0],
        data_length=data[1],
        audio_format=audio_format,
    )


def decode_wav(data: bytes) -> tuple[WavDescriptor, bytes]:
    """Decode a WAV buffer into its descriptor and raw PCM payload."""
    reader = WavReader(data)
    desc = parse_descriptor(reader)
    return desc, reader.slice(desc.data_offset, desc.data_length)


def read_wav_file(path: str | Path) -> tuple[WavDescriptor, bytes]:
    """Read and decode a WAV file. I/O errors surface as WavDecodeError."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise WavDecodeError(f"cannot read {path}: {e}") from e
    return decode_wav(data)


def encode_header(
    data_length: int,
    sample_rate: int,
    channels: int = TARGET_CHANNELS,
    bits_per_sample: int = TARGET_BITS_PER_SAMPLE,
) -> bytes:
    """Build the 44-byte canonical PCM header for a payload of `data_length` bytes."""
    bytes_per_sample = bits_per_sample // 8
    byte_rate = sample_rate * channels * bytes_per_sample
    block_align = channels * bytes_per_sample
    return (
        b"RIFF"
        + struct.pack("<I", 36 + data_length)
        + b"WAVE"
        + b"fmt "
        + struct.pack("<IHHIIHH", 16, WAV_FORMAT_PCM, channels, sample_rate,
                      byte_rate, block_align, bits_per_sample)
        + b"data"
        + struct.pack("<I", data_length)
    )


def encode_wav(chunks: list[np.ndarray], sample_rate: int) -> bytes:
    """Serialize canonical chunks as one mono 16-bit WAV.

    Call only after mixing: the header embeds the final payload length.
    """
    payload = b"".join(np.asarray(c, dtype="<i2").tobytes() for c in chunks)
    return encode_header(len(payload), sample_rate) + payload
