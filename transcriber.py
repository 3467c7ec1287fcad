"""Speech-to-text client with a fail-fast quality gate and a hallucination guard."""

from __future__ import annotations

import logging
from typing import Optional

import audio_quality
from errors import AudioTooShort
from interfaces import SpeechToTextProvider
from models import AUTO_LANGUAGE, AudioBlob

logger = logging.getLogger(__name__)

MIN_AUDIO_BYTES = 2000

# Whisper emits these on silence or noise.
HALLUCINATED_TRANSCRIPTS = frozenset({"thank you.", "thank you", "vielen dank.", "vielen dank"})

LARGE_MODEL = "whisper-large-v3"
TURBO_MODEL = "whisper-large-v3-turbo"


def is_likely_hallucination(text: str) -> bool:
    t = text.strip().lower()
    return not t or t in HALLUCINATED_TRANSCRIPTS


def fallback_model(model: str) -> str:
    return TURBO_MODEL if model == LARGE_MODEL else LARGE_MODEL


class TranscriptionClient:
    def __init__(
        self,
        provider: SpeechToTextProvider,
        model: str = "whisper-1",
        default_language: Optional[str] = None,
        min_audio_bytes: int = MIN_AUDIO_BYTES,
    ) -> None:
        self._provider = provider
        self._model = model
        self._default_language = default_language
        self._min_audio_bytes = min_audio_bytes

    def effective_language(self, language_hint: Optional[str]) -> Optional[str]:
        if language_hint and language_hint != AUTO_LANGUAGE:
            return language_hint
        return self._default_language or None

    def transcribe(self, audio: AudioBlob, language_hint: Optional[str] = None) -> str:
        if audio is None or len(audio) < self._min_audio_bytes:
            size = len(audio) if audio is not None else 0
            raise AudioTooShort(f"Audio too short or empty ({size} bytes). Please record for longer.")

        payload = audio_quality.package(audio)
        stats = audio_quality.measure(payload.data)
        if stats is not None:
            logger.debug("Audio stats: %.2fs, rms=%.4f", stats.duration_s, stats.rms)
        audio_quality.check(stats)

        language = self.effective_language(language_hint)
        text = self._provider.transcribe(payload, self._model, language)
        if not is_likely_hallucination(text):
            return text

        retry_model = fallback_model(self._model)
        logger.info("Transcript %r looks hallucinated, retrying with %s", text, retry_model)
        return self._provider.transcribe(payload, retry_model, None)
