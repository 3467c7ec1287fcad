"""Provider settings from the environment and a JSON-based preference store."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from models import AUTO_LANGUAGE, LANGUAGES, ProcessingMode, UserPreferences
from ui_strings import normalize_ui_language

try:
    from dotenv import load_dotenv
except Exception:  # pragma: no cover
    load_dotenv = None  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_WHISPER_MODEL = "whisper-1"
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_S = 60.0


@dataclass
class ProviderSettings:
    api_key: str = ""
    base_url: Optional[str] = None
    whisper_model: str = DEFAULT_WHISPER_MODEL
    whisper_language: Optional[str] = None
    llm_model: str = DEFAULT_LLM_MODEL
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls, load_files: bool = True) -> "ProviderSettings":
        if load_files and load_dotenv is not None:
            # .env.local wins over .env; neither overrides the real environment.
            load_dotenv(".env.local")
            load_dotenv(".env")
        env = os.environ
        timeout_raw = env.get("VOICEFLOW_TIMEOUT_S", "")
        try:
            timeout_s = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
        except ValueError:
            logger.warning("Ignoring invalid VOICEFLOW_TIMEOUT_S=%r", timeout_raw)
            timeout_s = DEFAULT_TIMEOUT_S
        return cls(
            api_key=env.get("OPENAI_API_KEY") or env.get("GROQ_API_KEY") or "",
            base_url=env.get("OPENAI_BASE_URL") or None,
            whisper_model=env.get("WHISPER_MODEL") or DEFAULT_WHISPER_MODEL,
            whisper_language=env.get("WHISPER_LANGUAGE") or None,
            llm_model=env.get("LLM_MODEL") or DEFAULT_LLM_MODEL,
            timeout_s=timeout_s,
        )


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "voiceflow" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def load_preferences(self) -> UserPreferences:
        data = self._read_all()
        defaults = UserPreferences()

        language = str(data.get("language", defaults.language_code))
        if language not in LANGUAGES:
            language = AUTO_LANGUAGE
        try:
            mode = ProcessingMode(data.get("mode", defaults.processing_mode.value))
        except ValueError:
            mode = defaults.processing_mode

        return UserPreferences(
            language_code=language,
            processing_mode=mode,
            direct_paste=data.get("direct_paste") is True,
            ui_language=normalize_ui_language(str(data.get("ui_language", defaults.ui_language))),
            hotkey=str(data.get("hotkey", defaults.hotkey)),
        )

    def save_preferences(self, prefs: UserPreferences) -> None:
        data = self._read_all()
        data.update(
            {
                "language": prefs.language_code,
                "mode": prefs.processing_mode.value,
                "direct_paste": prefs.direct_paste,
                "ui_language": prefs.ui_language,
                "hotkey": prefs.hotkey,
            }
        )
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
