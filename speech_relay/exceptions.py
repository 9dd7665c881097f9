"""Errors raised inside the service adapters."""


class RelayError(Exception):
    """Base class for failures talking to an external capability."""

    stage = "relay"

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class TranscriptionError(RelayError):
    """Raised when the speech recognizer fails or is canceled."""

    stage = "transcription"


class TranslationError(RelayError):
    """Raised when the translator call fails or returns an unexpected body."""

    stage = "translation"


class SynthesisError(RelayError):
    """Raised when speech synthesis produces no audio."""

    stage = "synthesis"
