"""End-to-end rendering of a script into one audio master."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path

import numpy as np

from podcast_assembler.assets import resolve_assets
from podcast_assembler.cleanup import cleanup_segments
from podcast_assembler.config import RenderConfig
from podcast_assembler.constants import STAGE_SPEAKER
from podcast_assembler.encoder import BlockEncoder
from podcast_assembler.errors import EncodeError, MasterWriteError, WavDecodeError
from podcast_assembler.exporter import export, write_manifest
from podcast_assembler.mixer import mix_timeline
from podcast_assembler.models import RenderResult, ScriptLine
from podcast_assembler.sanitizer import sanitize_line
from podcast_assembler.timeline import assemble_timeline, build_cues, load_canonical
from podcast_assembler.tts import (
    EdgeTTSSynthesizer,
    SynthesisJob,
    Synthesizer,
    segment_filename,
    synthesize_lines,
)
from podcast_assembler.voices import assign_voice, default_voice_map

logger = logging.getLogger(__name__)


def default_synthesizer(config: RenderConfig) -> EdgeTTSSynthesizer:
    return EdgeTTSSynthesizer(
        rate=config.rate,
        pitch=config.pitch,
        retries=config.tts_retries,
        cache_dir=config.tts_cache_dir,
        pronunciation_dict=config.pronunciation_dict,
    )


def _load_background(path: Path | None, sample_rate: int) -> np.ndarray | None:
    """Decode the continuous BGM once. Failures disable mixing, nothing more."""
    if path is None:
        return None
    try:
        return load_canonical(path, sample_rate)
    except WavDecodeError as e:
        logger.warning("Continuous BGM unusable, mixing disabled: %s", e)
        return None


def render_program(
    lines: list[ScriptLine],
    config: RenderConfig | None = None,
    synthesizer: Synthesizer | None = None,
    encoder: BlockEncoder | None = None,
    verbose: bool = False,
) -> RenderResult:
    """Render script lines to a single master file.

    Per-line and per-asset problems are logged and reported as omissions.
    An empty program, an encoder failure, or a failed final write returns
    RenderResult(success=False).
    """
    config = (config or RenderConfig()).validate()
    synthesizer = synthesizer or default_synthesizer(config)
    omissions: list[str] = []

    # Step 1: Assets
    assets = resolve_assets(config)
    for key in ("opening", "ending", "continuous"):
        wanted = getattr(config, f"insert_{key}_bgm")
        if wanted and getattr(assets, key) is None:
            omissions.append(f"{key} bgm: asset not found")

    # Step 2: Sanitize
    sanitized = [sanitize_line(line, config.laughter_mode) for line in lines]

    # Step 3: Synthesis
    os.makedirs(config.output_dir, exist_ok=True)
    temp_dir = Path(tempfile.mkdtemp(prefix=f"{config.output_name}-segments-", dir=config.output_dir))
    voices = config.voices or default_voice_map(
        [line.speaker for line in lines if line.speaker != STAGE_SPEAKER]
    )
    jobs = [
        SynthesisJob(
            index=i,
            text=clean.text,
            voice=assign_voice(line.speaker, voices, config.default_voice),
            output_path=temp_dir / segment_filename(i, line.speaker),
        )
        for i, (line, clean) in enumerate(zip(lines, sanitized))
        if clean.text
    ]
    if verbose:
        print(f"Synthesizing {len(jobs)} lines (concurrency {config.tts_concurrency})...")
    results = asyncio.run(synthesize_lines(jobs, synthesizer, config.tts_concurrency))

    speech_paths: list[Path | None] = [None] * len(lines)
    for job, path in zip(jobs, results):
        speech_paths[job.index] = path
        if path is None:
            omissions.append(f"line {job.index}: synthesis failed")

    try:
        # Step 4: Timeline
        cues = build_cues(
            sanitized,
            speech_paths,
            assets,
            insert_opening_bgm=config.insert_opening_bgm,
            insert_ending_bgm=config.insert_ending_bgm,
            insert_jingles=config.insert_jingles and config.program_type != "quiz",
            jingle_interval=config.jingle_interval,
        )
        timeline, decode_omissions = assemble_timeline(cues, config.sample_rate)
        omissions.extend(decode_omissions)

        if len(timeline) == 0:
            return RenderResult(success=False, omissions=omissions,
                                message="no usable audio segments; nothing to render")

        # Step 5: Continuous BGM
        bgm = _load_background(assets.continuous, config.sample_rate) if config.insert_continuous_bgm else None
        if bgm is not None:
            if verbose:
                print("Mixing continuous BGM...")
            timeline, _ = mix_timeline(timeline, bgm, config.bgm_volume_db)

        # Step 6: Export
        if verbose:
            print(f"Writing {config.output_format.upper()} master...")
        try:
            output_path = export(
                timeline.chunks,
                config.output_dir,
                config.output_name,
                config.sample_rate,
                output_format=config.output_format,
                encoder=encoder,
                frame_samples=config.mp3_frame_samples,
                bitrate_kbps=config.mp3_bitrate_kbps,
            )
        except (EncodeError, MasterWriteError) as e:
            logger.error("Render failed: %s", e)
            return RenderResult(success=False, omissions=omissions, message=str(e))
    finally:
        if config.cleanup_segments:
            cleanup_segments(speech_paths, temp_dir)

    duration = timeline.sample_count / config.sample_rate
    if config.write_manifest:
        try:
            write_manifest(
                output_path,
                config.program_type,
                settings={
                    "sample_rate": config.sample_rate,
                    "format": config.output_format,
                    "continuous_bgm": bgm is not None,
                    "bgm_volume_db": config.bgm_volume_db,
                    "jingle_interval": config.jingle_interval,
                    "laughter_mode": config.laughter_mode,
                },
                stats={
                    "lines": len(lines),
                    "segments": len(timeline),
                    "duration_seconds": round(duration, 2),
                    "omissions": omissions,
                },
            )
        except MasterWriteError as e:
            logger.warning("Manifest not written: %s", e)

    for note in omissions:
        logger.warning("Omitted: %s", note)
    return RenderResult(
        success=True,
        path=output_path,
        duration_seconds=duration,
        segments=len(timeline),
        omissions=omissions,
    )
