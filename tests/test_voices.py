"""Tests for voice assignment."""

from podcast_assembler.constants import VOICE_A, VOICE_B
from podcast_assembler.voices import assign_voice, default_voice_map


def test_default_voice_map():
    assert default_voice_map(["A", "B", "A", "C"]) == {"A": VOICE_A, "B": VOICE_B, "C": VOICE_B}


def test_assign_voice_exact_and_case_insensitive():
    voices = {"Host": "en-US-GuyNeural"}
    assert assign_voice("Host", voices) == "en-US-GuyNeural"
    assert assign_voice("host", voices) == "en-US-GuyNeural"


def test_assign_voice_fallback():
    assert assign_voice("Guest", {}, "ja-JP-KeitaNeural") == "ja-JP-KeitaNeural"
    assert assign_voice("Guest", {}) == VOICE_A
