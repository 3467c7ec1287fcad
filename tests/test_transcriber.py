"""Tests for TranscriptionClient."""

from __future__ import annotations

import numpy as np
import pytest

import audio_quality
from errors import AudioTooShort, NoAudibleSpeech, ProviderRequestFailed, RecordingTooShort
from models import AudioBlob, EncodedAudio
from transcriber import TranscriptionClient, fallback_model, is_likely_hallucination


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

class FakeSpeechToText:
    def __init__(self, *responses: str, error: Exception | None = None) -> None:
        self.responses = list(responses)
        self.error = error
        self.calls: list[tuple[str, str | None]] = []
        self.payloads: list[EncodedAudio] = []

    def transcribe(self, audio: EncodedAudio, model: str, language: str | None = None) -> str:
        self.calls.append((model, language))
        self.payloads.append(audio)
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


def _speech_blob(seconds: float = 1.0) -> AudioBlob:
    t = np.arange(int(seconds * 16000)) / 16000
    samples = (0.2 * np.sin(2 * np.pi * 220.0 * t) * 32767).astype(np.int16)
    return AudioBlob(data=samples.tobytes(), encoding="wav")


# ---------------------------------------------------------------
# Preconditions and gate
# ---------------------------------------------------------------

def test_tiny_buffer_fails_before_network() -> None:
    provider = FakeSpeechToText("hello")
    client = TranscriptionClient(provider)

    with pytest.raises(AudioTooShort, match="100 bytes"):
        client.transcribe(AudioBlob(data=b"\x01" * 100))
    assert provider.calls == []


def test_missing_buffer_fails_before_network() -> None:
    provider = FakeSpeechToText("hello")
    client = TranscriptionClient(provider)

    with pytest.raises(AudioTooShort):
        client.transcribe(None)  # type: ignore[arg-type]
    assert provider.calls == []


def test_silent_recording_is_rejected() -> None:
    provider = FakeSpeechToText("Thank you.")
    client = TranscriptionClient(provider)

    with pytest.raises(NoAudibleSpeech):
        client.transcribe(AudioBlob(data=b"\x00\x00" * 16000))
    assert provider.calls == []


def test_short_recording_is_rejected() -> None:
    provider = FakeSpeechToText("hi")
    client = TranscriptionClient(provider)

    # 0.1 s is above the byte floor but below the duration floor.
    with pytest.raises(RecordingTooShort):
        client.transcribe(_speech_blob(0.1))
    assert provider.calls == []


def test_undecodable_audio_skips_gate(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(audio_quality, "sf", None)
    provider = FakeSpeechToText("hello")
    client = TranscriptionClient(provider)

    assert client.transcribe(AudioBlob(data=b"\x00\x00" * 16000)) == "hello"
    assert len(provider.calls) == 1


# ---------------------------------------------------------------
# Language hint
# ---------------------------------------------------------------

def test_auto_language_without_default_is_unset() -> None:
    provider = FakeSpeechToText("hello world")
    client = TranscriptionClient(provider, model="whisper-1")

    assert client.transcribe(_speech_blob(), "auto") == "hello world"
    assert provider.calls == [("whisper-1", None)]
    assert provider.payloads[0].filename == "audio.wav"


def test_explicit_language_wins_over_default() -> None:
    provider = FakeSpeechToText("bonjour")
    client = TranscriptionClient(provider, default_language="en")

    client.transcribe(_speech_blob(), "fr")
    assert provider.calls[0][1] == "fr"


def test_auto_language_uses_configured_default() -> None:
    provider = FakeSpeechToText("hallo")
    client = TranscriptionClient(provider, default_language="de")

    client.transcribe(_speech_blob(), "auto")
    assert provider.calls[0][1] == "de"


# ---------------------------------------------------------------
# Hallucination guard
# ---------------------------------------------------------------

@pytest.mark.parametrize("garbage", ["thank you.", "Thank you", "  VIELEN DANK.  ", "vielen dank", "", "   "])
def test_garbage_detection(garbage: str) -> None:
    assert is_likely_hallucination(garbage) is True


def test_real_text_is_not_garbage() -> None:
    assert is_likely_hallucination("Thank you for the report") is False


def test_fallback_model_swaps_large_and_turbo() -> None:
    assert fallback_model("whisper-large-v3") == "whisper-large-v3-turbo"
    assert fallback_model("whisper-large-v3-turbo") == "whisper-large-v3"
    assert fallback_model("whisper-1") == "whisper-large-v3"


def test_hallucinated_first_attempt_retries_without_language() -> None:
    provider = FakeSpeechToText("Thank you.", "Ich habe gestern mit 50 Leuten gesprochen")
    client = TranscriptionClient(provider, model="whisper-large-v3")

    text = client.transcribe(_speech_blob(), "de")

    assert text == "Ich habe gestern mit 50 Leuten gesprochen"
    assert provider.calls == [("whisper-large-v3", "de"), ("whisper-large-v3-turbo", None)]


def test_second_attempt_is_returned_even_if_degenerate() -> None:
    provider = FakeSpeechToText("", "Vielen Dank.")
    client = TranscriptionClient(provider, model="whisper-large-v3-turbo")

    assert client.transcribe(_speech_blob()) == "Vielen Dank."
    assert [model for model, _ in provider.calls] == ["whisper-large-v3-turbo", "whisper-large-v3"]


def test_provider_errors_propagate() -> None:
    provider = FakeSpeechToText(error=ProviderRequestFailed("429 rate limit"))
    client = TranscriptionClient(provider)

    with pytest.raises(ProviderRequestFailed, match="429"):
        client.transcribe(_speech_blob())
