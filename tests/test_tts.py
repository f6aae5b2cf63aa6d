"""Tests for speech synthesis with a patched edge-tts backend."""

import asyncio
import json
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from podcast_assembler.errors import SynthesisError
from podcast_assembler.tts import (
    EdgeTTSSynthesizer,
    SynthesisJob,
    apply_pronunciation,
    cache_key,
    load_pronunciation_dict,
    normalize_for_matching,
    segment_filename,
    synthesize_lines,
)


class FakeCommunicate:
    """Stands in for edge_tts.Communicate; fails the first `failures` saves."""

    instances = []
    failures = 0
    payload = b"ID3fake-mp3"

    def __init__(self, text, voice, rate=None, pitch=None):
        self.text = text
        self.voice = voice
        self.rate = rate
        self.pitch = pitch
        FakeCommunicate.instances.append(self)

    async def save(self, path):
        if len(FakeCommunicate.instances) <= FakeCommunicate.failures:
            raise ConnectionError("service unavailable")
        Path(path).write_bytes(FakeCommunicate.payload)


@pytest.fixture
def fake_edge():
    FakeCommunicate.instances = []
    FakeCommunicate.failures = 0
    FakeCommunicate.payload = b"ID3fake-mp3"
    with patch("podcast_assembler.tts.edge_tts.Communicate", FakeCommunicate), \
            patch("podcast_assembler.tts._transcode_to_wav", lambda src, dst: shutil.copyfile(src, dst)):
        yield FakeCommunicate


def run(coro):
    return asyncio.run(coro)


def test_synthesize_writes_output(tmp_path, fake_edge):
    synth = EdgeTTSSynthesizer(rate="+10%", pitch="-2Hz", base_delay=0)
    out = run(synth.synthesize("Hello", "ja-JP-NanamiNeural", tmp_path / "000_a.wav"))
    assert out.read_bytes() == fake_edge.payload
    call = fake_edge.instances[0]
    assert (call.voice, call.rate, call.pitch) == ("ja-JP-NanamiNeural", "+10%", "-2Hz")
    assert not (tmp_path / "000_a.mp3").exists()


def test_retries_then_succeeds(tmp_path, fake_edge):
    fake_edge.failures = 2
    synth = EdgeTTSSynthesizer(retries=3, base_delay=0)
    run(synth.synthesize("Hello", "v", tmp_path / "a.wav"))
    assert len(fake_edge.instances) == 3


def test_exhausted_retries_raise(tmp_path, fake_edge):
    fake_edge.failures = 100
    synth = EdgeTTSSynthesizer(retries=2, base_delay=0)
    with pytest.raises(SynthesisError, match="after 3 attempts"):
        run(synth.synthesize("Hello", "v", tmp_path / "a.wav"))
    assert len(fake_edge.instances) == 3


def test_zero_byte_output_is_failure(tmp_path, fake_edge):
    fake_edge.payload = b""
    synth = EdgeTTSSynthesizer(retries=0, base_delay=0)
    with pytest.raises(SynthesisError):
        run(synth.synthesize("Hello", "v", tmp_path / "a.wav"))
    assert not (tmp_path / "a.mp3").exists()
    assert not (tmp_path / "a.wav").exists()


def test_cache_hit_skips_backend(tmp_path, fake_edge):
    synth = EdgeTTSSynthesizer(base_delay=0, cache_dir=tmp_path / "cache")
    run(synth.synthesize("Hello", "v", tmp_path / "first.wav"))
    run(synth.synthesize("Hello", "v", tmp_path / "second.wav"))
    assert len(fake_edge.instances) == 1
    assert (tmp_path / "second.wav").read_bytes() == fake_edge.payload
    run(synth.synthesize("Hello", "other-voice", tmp_path / "third.wav"))
    assert len(fake_edge.instances) == 2


def test_cache_copies_run_off_the_event_loop(tmp_path, fake_edge):
    synth = EdgeTTSSynthesizer(base_delay=0, cache_dir=tmp_path / "cache")
    with patch("asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
        run(synth.synthesize("Hello", "v", tmp_path / "first.wav"))
        run(synth.synthesize("Hello", "v", tmp_path / "second.wav"))
    copies = [c for c in to_thread.call_args_list if c.args[0] is shutil.copyfile]
    # write-through after the first render, cache hit on the second
    assert len(copies) == 2
    assert copies[0].args[1] == tmp_path / "first.wav"
    assert copies[1].args[2] == tmp_path / "second.wav"


def test_cache_key_varies_by_settings():
    base = cache_key("hi", "v", "+0%", "+0Hz")
    assert base == cache_key("hi", "v", "+0%", "+0Hz")
    assert base != cache_key("hi", "v", "+5%", "+0Hz")
    assert base != cache_key("hi", "w", "+0%", "+0Hz")


def test_pronunciation_applied_before_backend(tmp_path, fake_edge):
    dict_path = tmp_path / "dict.json"
    dict_path.write_text(json.dumps({"API": "エーピーアイ"}), encoding="utf-8")
    synth = EdgeTTSSynthesizer(base_delay=0, pronunciation_dict=dict_path)
    run(synth.synthesize("新しいＡＰＩです", "v", tmp_path / "a.wav"))
    assert fake_edge.instances[0].text == "新しいエーピーアイです"


def test_pronunciation_dict_failures_are_ignored(tmp_path):
    bad = tmp_path / "dict.json"
    bad.write_text("{broken", encoding="utf-8")
    assert load_pronunciation_dict(bad) == []
    assert load_pronunciation_dict(tmp_path / "missing.json") == []
    assert load_pronunciation_dict(None) == []


def test_normalize_for_matching():
    assert normalize_for_matching("ＡＢＣ　ｰ") == "ABC ー"
    assert apply_pronunciation("ok", []) == "ok"


class DelayedSynth:
    """Earlier lines finish later; tracks peak concurrency."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.active = 0
        self.peak = 0

    async def synthesize(self, text, voice, output_path):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(0.01 * (5 - int(text)))
            if text in self.fail_on:
                raise SynthesisError("boom")
            return output_path
        finally:
            self.active -= 1


def jobs(n, tmp_path):
    return [SynthesisJob(i, str(i), "v", tmp_path / f"{i}.wav") for i in range(n)]


def test_synthesize_lines_preserves_order(tmp_path):
    synth = DelayedSynth()
    results = run(synthesize_lines(jobs(5, tmp_path), synth, concurrency=5))
    assert results == [tmp_path / f"{i}.wav" for i in range(5)]


def test_synthesize_lines_bounds_concurrency(tmp_path):
    synth = DelayedSynth()
    run(synthesize_lines(jobs(5, tmp_path), synth, concurrency=2))
    assert synth.peak == 2


def test_synthesize_lines_failure_is_none(tmp_path, caplog):
    synth = DelayedSynth(fail_on={"1"})
    results = run(synthesize_lines(jobs(3, tmp_path), synth, concurrency=3))
    assert results[0] is not None and results[2] is not None
    assert results[1] is None
    assert "line 1" in caplog.text


def test_segment_filename():
    assert segment_filename(3, "Host A") == "003_host_a.wav"
    assert segment_filename(12, "!!!") == "012_speaker.wav"
