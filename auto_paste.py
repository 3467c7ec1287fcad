"""Clipboard read and text injection into the focused application."""

from __future__ import annotations

import logging
import sys
import time
from typing import Callable, Optional

from errors import ERROR_MESSAGES, INJECTION_FAILED, ClipboardReadFailed
from models import PasteResult

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

try:
    from pynput.keyboard import Controller, Key
except Exception:  # pragma: no cover
    Controller = None  # type: ignore
    Key = None  # type: ignore

logger = logging.getLogger(__name__)


def _paste_modifier() -> object:
    return Key.cmd if sys.platform == "darwin" else Key.ctrl


class ClipboardPasteService:
    """Pastes through the clipboard and puts the previous clipboard back.

    ``before_paste`` runs first so the app can hide its own window and let the
    target application take focus.
    """

    def __init__(
        self,
        focus_delay_s: float = 0.15,
        restore_delay_s: float = 0.1,
        before_paste: Optional[Callable[[], None]] = None,
    ) -> None:
        self._focus_delay_s = focus_delay_s
        self._restore_delay_s = restore_delay_s
        self._before_paste = before_paste

    def read_clipboard(self) -> str:
        try:
            return self._read_clipboard()
        except ClipboardReadFailed as exc:
            logger.warning("Treating clipboard as empty: %s", exc)
            return ""

    def _read_clipboard(self) -> str:
        if pyperclip is None:
            raise ClipboardReadFailed("pyperclip is not installed")
        try:
            return pyperclip.paste() or ""
        except Exception as exc:
            raise ClipboardReadFailed(str(exc) or None) from exc

    def paste_text(self, text: str) -> PasteResult:
        if not text.strip():
            return PasteResult(success=False, reason="empty text", clipboard_restored=True)
        if pyperclip is None or Controller is None or Key is None:
            return PasteResult(
                success=False,
                reason="clipboard/keyboard dependency missing",
                clipboard_restored=False,
            )

        if self._before_paste is not None:
            try:
                self._before_paste()
            except Exception:
                logger.warning("before_paste hook failed", exc_info=True)
        time.sleep(self._focus_delay_s)

        old_clip: str | None = None
        restored = False
        try:
            try:
                old_clip = pyperclip.paste()
            except Exception:
                old_clip = None
            pyperclip.copy(text)
            keyboard = Controller()
            modifier = _paste_modifier()
            keyboard.press(modifier)
            keyboard.press("v")
            keyboard.release("v")
            keyboard.release(modifier)
            if old_clip is not None:
                time.sleep(self._restore_delay_s)
                pyperclip.copy(old_clip)
            return PasteResult(success=True, reason="ok", clipboard_restored=old_clip is not None)
        except Exception as exc:
            try:
                if old_clip is not None:
                    pyperclip.copy(old_clip)
                    restored = True
            except Exception:
                restored = False
            logger.warning("Text injection failed: %s", exc)
            return PasteResult(
                success=False,
                reason=f"{ERROR_MESSAGES[INJECTION_FAILED]} {exc}",
                clipboard_restored=restored,
            )
