"""OpenAI-compatible speech-to-text and chat-completion adapters.

Works against api.openai.com or any compatible endpoint (e.g. Groq) selected
through ``OPENAI_BASE_URL``. Every SDK failure is mapped onto the app's error
taxonomy; nothing is retried here.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Iterator, Optional

from config import ProviderSettings
from errors import MissingApiKey, ProviderRequestFailed, ProviderTimeout
from models import EncodedAudio

try:
    import openai
except Exception:  # pragma: no cover
    openai = None  # type: ignore

logger = logging.getLogger(__name__)


class OpenAIProvider:
    def __init__(self, settings: ProviderSettings, client: Optional[Any] = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if openai is None:
                raise ProviderRequestFailed("openai is not installed")
            if not self._settings.api_key:
                raise MissingApiKey()
            self._client = openai.OpenAI(
                api_key=self._settings.api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.timeout_s,
                max_retries=0,
            )
        return self._client

    def transcribe(self, audio: EncodedAudio, model: str, language: Optional[str] = None) -> str:
        extra: dict[str, Any] = {}
        if language:
            extra["language"] = language
        logger.info("Transcribing %d bytes with %s (language=%s)", len(audio.data), model, language or "auto")
        with _translate_errors():
            result = self.client.audio.transcriptions.create(
                file=(audio.filename, audio.data, audio.mime_type),
                model=model,
                response_format="json",
                temperature=0,
                **extra,
            )
        return getattr(result, "text", "") or ""

    def complete(self, messages: list[dict[str, Any]], model: str, temperature: float) -> str:
        logger.info("Chat completion with %s", model)
        with _translate_errors():
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or ""


@contextlib.contextmanager
def _translate_errors() -> Iterator[None]:
    if openai is None:
        yield
        return
    try:
        yield
    except openai.APITimeoutError as exc:
        logger.warning("Provider timeout: %s", exc)
        raise ProviderTimeout(str(exc) or None) from exc
    except openai.OpenAIError as exc:
        logger.warning("Provider request failed: %s", exc)
        raise ProviderRequestFailed(str(exc) or None) from exc
