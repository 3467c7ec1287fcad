"""Global toggle hotkey based on pynput."""

from __future__ import annotations

import logging
from typing import Callable, Optional

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

logger = logging.getLogger(__name__)

# pynput does not suppress the chord; it must not type text.
DEFAULT_HOTKEY = "<ctrl>+<alt>+<space>"


class GlobalHotkeyAdapter:
    """Emits one trigger per hotkey activation; the caller toggles start/stop."""

    def __init__(self, hotkey: str = DEFAULT_HOTKEY) -> None:
        self._hotkey = hotkey
        self._listener: Optional[object] = None

    @property
    def hotkey(self) -> str:
        return self._hotkey

    def start(self, on_trigger: Callable[[], None]) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")
        if self._listener is not None:
            return
        # Raises ValueError on a malformed combination.
        keyboard.HotKey.parse(self._hotkey)

        def _on_activate() -> None:
            logger.debug("Hotkey %s triggered", self._hotkey)
            on_trigger()

        self._listener = keyboard.GlobalHotKeys({self._hotkey: _on_activate})
        self._listener.start()
        logger.info("Global hotkey %s registered", self._hotkey)

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None
