"""Render configuration: every recognized option, with its default and effect."""

import dataclasses
import json
import logging
import os
from dataclasses import dataclass, field

from podcast_assembler.constants import (
    TARGET_SAMPLE_RATE,
    TARGET_CHANNELS,
    TARGET_BITS_PER_SAMPLE,
    CONTINUOUS_BGM_DB,
    JINGLE_INTERVAL,
    LAUGHTER_MODE,
    LAUGHTER_MODES,
    PROGRAM_TYPES,
    OUTPUT_FORMATS,
    MP3_FRAME_SAMPLES,
    MP3_BITRATE_KBPS,
    TTS_RETRY_COUNT,
    TTS_CONCURRENCY,
    TTS_RATE,
    TTS_PITCH,
    VOICE_A,
    ASSET_DIR,
    OUTPUT_DIR,
)
from podcast_assembler.errors import ConfigError

logger = logging.getLogger(__name__)

CONCURRENCY_ENV = "PODCAST_TTS_CONCURRENCY"


@dataclass
class RenderConfig:
    # Canonical format. Only mono 16-bit is supported; the rate is free.
    sample_rate: int = TARGET_SAMPLE_RATE
    channels: int = TARGET_CHANNELS
    bits_per_sample: int = TARGET_BITS_PER_SAMPLE

    # Program structure
    program_type: str = "podcast"            # selects the asset set
    insert_opening_bgm: bool = True          # bookend before the first line
    insert_ending_bgm: bool = True           # bookend after the last line
    insert_jingles: bool = True              # ignored for quiz programs
    jingle_interval: int = JINGLE_INTERVAL   # lines between jingles; 0 disables
    insert_continuous_bgm: bool = True       # loop BGM under speech
    bgm_volume_db: float = CONTINUOUS_BGM_DB
    laughter_mode: str = LAUGHTER_MODE       # replace | mute | audio

    # Assets. Empty values fall back to the program type's asset set.
    project_root: str = "."
    asset_dir: str = ASSET_DIR
    assets: dict[str, str] = field(default_factory=dict)

    # Speech
    voices: dict[str, str] = field(default_factory=dict)  # speaker -> voice
    default_voice: str = VOICE_A
    rate: str = TTS_RATE
    pitch: str = TTS_PITCH
    tts_concurrency: int = TTS_CONCURRENCY
    tts_retries: int = TTS_RETRY_COUNT
    tts_cache_dir: str | None = None
    pronunciation_dict: str | None = None

    # Output
    output_dir: str = OUTPUT_DIR
    output_name: str = "program"
    output_format: str = "wav"               # wav | mp3
    mp3_bitrate_kbps: int = MP3_BITRATE_KBPS
    mp3_frame_samples: int = MP3_FRAME_SAMPLES
    write_manifest: bool = True
    cleanup_segments: bool = True

    def validate(self) -> "RenderConfig":
        if self.channels != TARGET_CHANNELS or self.bits_per_sample != TARGET_BITS_PER_SAMPLE:
            raise ConfigError("only mono 16-bit canonical PCM is supported")
        if self.sample_rate <= 0:
            raise ConfigError(f"invalid sample rate: {self.sample_rate}")
        if self.program_type not in PROGRAM_TYPES:
            raise ConfigError(f"unknown program type: {self.program_type}")
        if self.laughter_mode not in LAUGHTER_MODES:
            raise ConfigError(f"unknown laughter mode: {self.laughter_mode}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"unknown output format: {self.output_format}")
        if self.jingle_interval < 0:
            raise ConfigError("jingle_interval must be >= 0")
        if self.tts_concurrency < 1:
            raise ConfigError("tts_concurrency must be >= 1")
        if self.mp3_frame_samples < 1:
            raise ConfigError("mp3_frame_samples must be >= 1")
        return self


def config_from_dict(data: dict) -> RenderConfig:
    """Build a config from a plain dict, rejecting unknown keys."""
    known = {f.name for f in dataclasses.fields(RenderConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
    return RenderConfig(**data).validate()


def load_config(path: str | None = None, **overrides) -> RenderConfig:
    """Load config JSON (optional), then apply env and keyword overrides."""
    data = {}
    if path:
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot load config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"config {path} must be a JSON object")

    env_concurrency = os.environ.get(CONCURRENCY_ENV)
    if env_concurrency:
        try:
            data["tts_concurrency"] = int(env_concurrency)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", CONCURRENCY_ENV, env_concurrency)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return config_from_dict(data)
