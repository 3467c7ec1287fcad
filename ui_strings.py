"""German and English strings for the tray menu and overlay."""

from __future__ import annotations

from models import ProcessingMode

DEFAULT_UI_LANGUAGE = "de"

STRINGS: dict[str, dict[str, str]] = {
    "de": {
        "mode": "Modus",
        "language": "Sprache",
        "ui_language": "UI-Sprache",
        "direct_paste": "Direktes Einfügen",
        "start_recording": "Aufnahme starten",
        "stop_recording": "Aufnahme stoppen",
        "processing": "Verarbeitung…",
        "recording": "Aufnahme läuft…",
        "transcribing": "Transkribieren & Aufbereiten…",
        "pasting": "Einfügen…",
        "ready": "Bereit",
        "quit": "VoiceFlow beenden",
        "mode_standard": "Standard (Grammatik korrigieren)",
        "mode_context_reply": "Kontext-Antwort (Zwischenablage)",
        "mode_meeting_minutes": "Meeting-Protokoll",
        "mode_todo_extractor": "To-do-Extraktor",
        "mode_scientific_work": "Wissenschaftliche Arbeit",
    },
    "en": {
        "mode": "Mode",
        "language": "Language",
        "ui_language": "UI language",
        "direct_paste": "Direct paste",
        "start_recording": "Start recording",
        "stop_recording": "Stop recording",
        "processing": "Processing…",
        "recording": "Recording…",
        "transcribing": "Transcribing & enriching…",
        "pasting": "Pasting…",
        "ready": "Ready",
        "quit": "Quit VoiceFlow",
        "mode_standard": "Standard (fix grammar)",
        "mode_context_reply": "Context reply (uses clipboard)",
        "mode_meeting_minutes": "Meeting minutes",
        "mode_todo_extractor": "To-do extractor",
        "mode_scientific_work": "Scientific work",
    },
}

UI_LANGUAGES = {"de": "Deutsch", "en": "English"}


def normalize_ui_language(code: str) -> str:
    return code if code in STRINGS else DEFAULT_UI_LANGUAGE


def tr(ui_language: str, key: str) -> str:
    return STRINGS[normalize_ui_language(ui_language)][key]


def mode_label(ui_language: str, mode: ProcessingMode) -> str:
    return tr(ui_language, f"mode_{mode.value}")
