"""Protocol interfaces used by the recorder, the clients and SessionController."""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol

from models import AudioBlob, EncodedAudio, PasteResult, ProcessingMode, UserPreferences

ChunkCallback = Callable[[bytes], None]
ErrorCallback = Callable[[str], None]


class CaptureDevice(Protocol):
    sample_rate: int
    channels: int

    def open(self, on_chunk: ChunkCallback, on_error: ErrorCallback) -> None: ...

    def close(self) -> None: ...

    def supports(self, encoding: str) -> bool: ...


class Recorder(Protocol):
    def start(self) -> None: ...

    def stop(self) -> Optional[AudioBlob]: ...

    def reset(self) -> None: ...


class SpeechToTextProvider(Protocol):
    def transcribe(self, audio: EncodedAudio, model: str, language: Optional[str] = None) -> str: ...


class ChatProvider(Protocol):
    def complete(self, messages: list[dict[str, Any]], model: str, temperature: float) -> str: ...


class Transcriber(Protocol):
    def transcribe(self, audio: AudioBlob, language_hint: Optional[str] = None) -> str: ...


class Enricher(Protocol):
    def enrich(
        self,
        text: str,
        mode: ProcessingMode = ProcessingMode.STANDARD,
        language_label: str = "",
        clipboard_context: str = "",
        direct_paste: bool = False,
    ) -> str: ...


class ClipboardReader(Protocol):
    def read_clipboard(self) -> str: ...


class PasteService(Protocol):
    def paste_text(self, text: str) -> PasteResult: ...


class ConfigStore(Protocol):
    def load_preferences(self) -> UserPreferences: ...

    def save_preferences(self, prefs: UserPreferences) -> None: ...
