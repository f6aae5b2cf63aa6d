"""Exception types raised by the assembly pipeline."""


class PodcastError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(PodcastError):
    """Invalid or unrecognized configuration."""


class WavDecodeError(PodcastError):
    """Malformed or unsupported WAV container. Recoverable per segment."""


class SynthesisError(PodcastError):
    """Speech synthesis failed for a single line. Recoverable per line."""


class EncodeError(PodcastError):
    """Lossy encoding of the master failed. Fatal for the run."""


class MasterWriteError(PodcastError):
    """The final master could not be written. Fatal for the run."""
