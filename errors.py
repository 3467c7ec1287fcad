"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
DEVICE_BUSY = "DEVICE_BUSY"
AUDIO_TOO_SHORT = "AUDIO_TOO_SHORT"
RECORDING_TOO_SHORT = "RECORDING_TOO_SHORT"
NO_AUDIBLE_SPEECH = "NO_AUDIBLE_SPEECH"
PROVIDER_REQUEST_FAILED = "PROVIDER_REQUEST_FAILED"
PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
AUTH_FAILED = "AUTH_FAILED"
EMPTY_ENRICHMENT_RESPONSE = "EMPTY_ENRICHMENT_RESPONSE"
INJECTION_FAILED = "INJECTION_FAILED"
CLIPBOARD_READ_FAILED = "CLIPBOARD_READ_FAILED"
SESSION_CANCELLED = "SESSION_CANCELLED"

ERROR_MESSAGES = {
    DEVICE_UNAVAILABLE: "Failed to access microphone.",
    DEVICE_BUSY: "Microphone is already in use by a running recording.",
    AUDIO_TOO_SHORT: "Audio too short or empty. Please record for longer.",
    RECORDING_TOO_SHORT: "Recording is too short. Please record at least 1-2 seconds of speech.",
    NO_AUDIBLE_SPEECH: "No audible speech detected (recording is near-silent). Check mic input/volume.",
    PROVIDER_REQUEST_FAILED: "AI request failed.",
    PROVIDER_TIMEOUT: "AI request timed out, please retry.",
    AUTH_FAILED: "Missing OPENAI_API_KEY or GROQ_API_KEY.",
    EMPTY_ENRICHMENT_RESPONSE: "No enrichment response from AI.",
    INJECTION_FAILED: "Paste failed.",
    CLIPBOARD_READ_FAILED: "Clipboard could not be read.",
    SESSION_CANCELLED: "Recording cancelled.",
}


class DictationError(Exception):
    """Base class; ``code`` is one of the constants above."""

    code = PROVIDER_REQUEST_FAILED

    def __init__(self, message: str | None = None) -> None:
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)


class DeviceUnavailable(DictationError):
    code = DEVICE_UNAVAILABLE


class DeviceBusy(DictationError):
    code = DEVICE_BUSY


class AudioTooShort(DictationError):
    code = AUDIO_TOO_SHORT


class RecordingTooShort(DictationError):
    code = RECORDING_TOO_SHORT


class NoAudibleSpeech(DictationError):
    code = NO_AUDIBLE_SPEECH


class ProviderRequestFailed(DictationError):
    code = PROVIDER_REQUEST_FAILED


class ProviderTimeout(ProviderRequestFailed):
    code = PROVIDER_TIMEOUT


class MissingApiKey(ProviderRequestFailed):
    code = AUTH_FAILED


class EmptyEnrichmentResponse(DictationError):
    code = EMPTY_ENRICHMENT_RESPONSE


class InjectionFailed(DictationError):
    code = INJECTION_FAILED


class ClipboardReadFailed(DictationError):
    code = CLIPBOARD_READ_FAILED
