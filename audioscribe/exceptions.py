"""
audioscribe.exceptions - Custom exception classes.

All audioscribe-specific exceptions inherit from AudioscribeError.
"""


class AudioscribeError(Exception):
    """Base exception for all audioscribe errors."""

    pass


class ConfigError(AudioscribeError):
    """Configuration loading or validation error."""

    pass


class SourceError(AudioscribeError):
    """Audio could not be loaded from a file or URL."""

    pass


class TranscriptionError(AudioscribeError):
    """Transcription request failed or returned nothing usable."""

    pass


class ConversionError(AudioscribeError):
    """Audio format conversion error."""

    pass


class ExportError(AudioscribeError):
    """Transcript export error."""

    pass


class BusyError(AudioscribeError):
    """An action was started while the same action is still running."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"{action} is already in progress")


class DependencyError(AudioscribeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
