"""Write the final master (WAV or MP3) and its provenance manifest."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

from podcast_assembler.constants import MP3_BITRATE_KBPS, MP3_FRAME_SAMPLES, VERSION
from podcast_assembler.encoder import BlockEncoder, Mp3BlockEncoder, encode_blocks
from podcast_assembler.errors import MasterWriteError
from podcast_assembler.wav import encode_wav


def master_path(output_dir: str, name: str, output_format: str) -> str:
    """Deterministic output location: <output_dir>/<name>.<format>."""
    return os.path.join(output_dir, f"{name}.{output_format}")


def _write_bytes(path: str, data: bytes) -> None:
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise MasterWriteError(f"cannot write master {path}: {e}") from e


def export(
    chunks: list[np.ndarray],
    output_dir: str,
    name: str,
    sample_rate: int,
    output_format: str = "wav",
    encoder: BlockEncoder | None = None,
    frame_samples: int = MP3_FRAME_SAMPLES,
    bitrate_kbps: int = MP3_BITRATE_KBPS,
) -> str:
    """Persist the mixed program once. Returns the path written.

    wav: canonical 44-byte header plus PCM. mp3: the same PCM fed through a
    block encoder. Raises EncodeError or MasterWriteError.
    """
    path = master_path(output_dir, name, output_format)
    if output_format == "wav":
        data = encode_wav(chunks, sample_rate)
    else:
        if encoder is None:
            encoder = Mp3BlockEncoder(sample_rate=sample_rate, channels=1, bitrate_kbps=bitrate_kbps)
        samples = np.concatenate(chunks) if chunks else np.zeros(0, dtype=np.int16)
        data = encode_blocks(samples, encoder, frame_samples)
    _write_bytes(path, data)
    return path


def write_manifest(
    output_path: str,
    program_type: str,
    settings: dict,
    stats: dict,
) -> str:
    """Write <master>.json beside the master. Returns the manifest path."""
    manifest = {
        "program": program_type,
        "output": os.path.basename(output_path),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "producer_version": VERSION,
        "settings": settings,
        "stats": stats,
    }
    manifest_path = str(Path(output_path).with_suffix(".json"))
    try:
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise MasterWriteError(f"cannot write manifest {manifest_path}: {e}") from e
    return manifest_path
