"""Speaker to voice assignment."""

import logging

from podcast_assembler.constants import VOICE_A, VOICE_B

logger = logging.getLogger(__name__)


def default_voice_map(speakers: list[str]) -> dict[str, str]:
    """Two-caster default: first speaker gets VOICE_A, everyone else VOICE_B."""
    mapping = {}
    for speaker in speakers:
        if speaker in mapping:
            continue
        mapping[speaker] = VOICE_A if not mapping else VOICE_B
    return mapping


def assign_voice(speaker: str, voices: dict[str, str], default_voice: str = VOICE_A) -> str:
    """Look up a speaker's voice, case-insensitively, falling back to default_voice."""
    if speaker in voices:
        return voices[speaker]
    lowered = speaker.lower()
    for name, voice in voices.items():
        if name.lower() == lowered:
            return voice
    logger.debug("No voice mapped for %r, using %s", speaker, default_voice)
    return default_voice
