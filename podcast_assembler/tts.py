"""TTS generation via edge-tts with retry, disk cache, and ordered concurrency."""

import asyncio
import hashlib
import json
import logging
import os
import random
import re
import shutil
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import edge_tts
from pydub import AudioSegment

from podcast_assembler.constants import (
    TTS_CACHE_VERSION,
    TTS_CONCURRENCY,
    TTS_PITCH,
    TTS_RATE,
    TTS_RETRY_BASE_DELAY,
    TTS_RETRY_COUNT,
    TTS_RETRY_MAX_DELAY,
)
from podcast_assembler.errors import SynthesisError

logger = logging.getLogger(__name__)


class Synthesizer(Protocol):
    async def synthesize(self, text: str, voice: str, output_path: Path) -> Path:
        """Write a PCM WAV of `text` to output_path, or raise SynthesisError."""


@dataclass
class SynthesisJob:
    index: int
    text: str
    voice: str
    output_path: Path


def normalize_for_matching(text: str) -> str:
    """NFKC plus dash/dot/space variants, so dictionary keys match reliably."""
    n = unicodedata.normalize("NFKC", text)
    n = re.sub(r"[ｰ‐―–—]", "ー", n)
    n = re.sub(r"[･·∙•]", "・", n)
    return re.sub(r"\s{2,}", " ", n.replace("　", " "))


def load_pronunciation_dict(path: str | Path | None) -> list[tuple[re.Pattern, str]]:
    """Load a {word: reading} JSON file. Failures are logged and ignored."""
    if not path:
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to load pronunciation dictionary %s: %s", path, e)
        return []
    entries = []
    for word, reading in data.items():
        if not isinstance(word, str) or not isinstance(reading, str) or not word:
            continue
        entries.append((re.compile(re.escape(normalize_for_matching(word)), re.IGNORECASE), reading))
    return entries


def apply_pronunciation(text: str, entries: list[tuple[re.Pattern, str]]) -> str:
    text = normalize_for_matching(text)
    for pattern, reading in entries:
        text = pattern.sub(lambda _m, r=reading: r, text)
    return text


def cache_key(text: str, voice: str, rate: str, pitch: str) -> str:
    payload = {"v": TTS_CACHE_VERSION, "text": text, "voice": voice, "rate": rate, "pitch": pitch}
    return hashlib.sha1(json.dumps(payload, ensure_ascii=False, sort_keys=True).encode()).hexdigest()


def _transcode_to_wav(src: Path, dst: Path) -> None:
    """Convert edge-tts MP3 output to PCM WAV at its native rate."""
    AudioSegment.from_file(str(src)).export(str(dst), format="wav")


class EdgeTTSSynthesizer:
    """Synthesizer backed by edge_tts.Communicate."""

    def __init__(
        self,
        rate: str = TTS_RATE,
        pitch: str = TTS_PITCH,
        retries: int = TTS_RETRY_COUNT,
        base_delay: float = TTS_RETRY_BASE_DELAY,
        cache_dir: str | Path | None = None,
        pronunciation_dict: str | Path | None = None,
    ):
        self.rate = rate
        self.pitch = pitch
        self.retries = retries
        self.base_delay = base_delay
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.pronunciations = load_pronunciation_dict(pronunciation_dict)

    def _cache_path(self, text: str, voice: str) -> Path | None:
        if self.cache_dir is None:
            return None
        return self.cache_dir / f"{cache_key(text, voice, self.rate, self.pitch)}.wav"

    async def _generate_once(self, text: str, voice: str, output_path: Path) -> None:
        mp3_path = output_path.with_suffix(".mp3")
        try:
            communicate = edge_tts.Communicate(text, voice, rate=self.rate, pitch=self.pitch)
            await communicate.save(str(mp3_path))
            # 0-byte file counts as failure
            if not mp3_path.exists() or mp3_path.stat().st_size == 0:
                raise SynthesisError(f"TTS produced 0-byte file for: {text[:50]}...")
            await asyncio.to_thread(_transcode_to_wav, mp3_path, output_path)
        finally:
            if mp3_path.exists():
                mp3_path.unlink()

    async def synthesize(self, text: str, voice: str, output_path: Path) -> Path:
        """Generate one WAV clip, retrying with exponential backoff."""
        output_path = Path(output_path)
        text = apply_pronunciation(text, self.pronunciations)

        cached = self._cache_path(text, voice)
        if cached is not None and cached.exists() and cached.stat().st_size > 0:
            await asyncio.to_thread(shutil.copyfile, cached, output_path)
            logger.debug("TTS cache hit: %s", cached.name)
            return output_path

        last_error = None
        for attempt in range(self.retries + 1):
            try:
                await self._generate_once(text, voice, output_path)
                break
            except Exception as e:
                last_error = e
            if attempt < self.retries:
                delay = min(TTS_RETRY_MAX_DELAY, self.base_delay * (2 ** attempt))
                await asyncio.sleep(delay + random.uniform(0, self.base_delay / 2))
        else:
            raise SynthesisError(f"TTS failed after {self.retries + 1} attempts: {last_error}") from last_error

        if cached is not None:
            try:
                os.makedirs(cached.parent, exist_ok=True)
                await asyncio.to_thread(shutil.copyfile, output_path, cached)
            except OSError as e:
                logger.warning("Could not write TTS cache %s: %s", cached, e)
        return output_path


async def _run_job(job: SynthesisJob, synthesizer: Synthesizer, gate: asyncio.Semaphore) -> Path | None:
    async with gate:
        try:
            return await synthesizer.synthesize(job.text, job.voice, job.output_path)
        except Exception as e:
            logger.warning("Synthesis failed for line %d, omitting it: %s", job.index, e)
            return None


async def synthesize_lines(
    jobs: list[SynthesisJob],
    synthesizer: Synthesizer,
    concurrency: int = TTS_CONCURRENCY,
) -> list[Path | None]:
    """Run jobs with bounded concurrency; results follow job order, None on failure."""
    gate = asyncio.Semaphore(max(1, concurrency))
    return list(await asyncio.gather(*(_run_job(job, synthesizer, gate) for job in jobs)))


def segment_filename(index: int, speaker: str) -> str:
    """Generate filename for a speech segment."""
    speaker_slug = re.sub(r"[^\w]+", "_", speaker).strip("_").lower() or "speaker"
    return f"{index:03d}_{speaker_slug}.wav"
