"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


class SessionState(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    TRANSCRIBING = "TRANSCRIBING"
    ENRICHING = "ENRICHING"
    PASTING = "PASTING"
    ERROR = "ERROR"


class ProcessingMode(str, Enum):
    STANDARD = "standard"
    CONTEXT_REPLY = "context_reply"
    MEETING_MINUTES = "meeting_minutes"
    TODO_EXTRACTOR = "todo_extractor"
    SCIENTIFIC_WORK = "scientific_work"


AUTO_LANGUAGE = "auto"
DEFAULT_LANGUAGE_LABEL = "Deutsch"

# Display order matters: this is the order of the language menu.
LANGUAGES: dict[str, str] = {
    AUTO_LANGUAGE: "Auto-detect",
    "de": "Deutsch",
    "en": "English",
    "fr": "Français",
    "es": "Español",
    "it": "Italiano",
    "pt": "Português",
    "nl": "Nederlands",
    "pl": "Polski",
    "tr": "Türkçe",
    "ru": "Русский",
    "ar": "العربية",
    "hi": "हिन्दी",
    "ja": "日本語",
    "ko": "한국어",
    "zh": "中文",
}


def language_label(code: str) -> str:
    return LANGUAGES.get(code, DEFAULT_LANGUAGE_LABEL)


@dataclass
class AudioBlob:
    """Concatenated 16-bit PCM tagged with the container it will be shipped in."""

    data: bytes
    encoding: str = "wav"
    sample_rate: int = 16000
    channels: int = 1

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class EncodedAudio:
    filename: str
    data: bytes
    mime_type: str


@dataclass
class AudioStats:
    duration_s: float
    rms: float


@dataclass
class UserPreferences:
    language_code: str = AUTO_LANGUAGE
    processing_mode: ProcessingMode = ProcessingMode.STANDARD
    direct_paste: bool = False
    ui_language: str = "de"
    hotkey: str = "<ctrl>+<alt>+<space>"


@dataclass
class PasteResult:
    success: bool
    reason: str
    clipboard_restored: bool


@dataclass
class PipelineResult:
    transcript: str = ""
    enriched: str = ""
    error: str = ""
    pasted: bool = False

    @property
    def ok(self) -> bool:
        return not self.error
