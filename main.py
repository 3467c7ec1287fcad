"""Application entrypoint."""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
import threading

from auto_paste import ClipboardPasteService
from config import JsonConfigStore, ProviderSettings
from enricher import EnrichmentClient
from hotkey import GlobalHotkeyAdapter
from models import LANGUAGES, PipelineResult, ProcessingMode, SessionState
from overlay import OverlayWindow
from providers import OpenAIProvider
from recorder import Recorder
from session_controller import SessionController
from transcriber import TranscriptionClient
from ui_strings import UI_LANGUAGES, mode_label, tr

try:
    from PySide6.QtCore import QObject, QSize, Signal
    from PySide6.QtGui import QAction, QActionGroup, QBrush, QColor, QIcon, QPainter, QPixmap
    from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

ICON_IDLE = "#888888"
ICON_RECORDING = "#FF4444"
ICON_BUSY = "#4488FF"
ICON_ERROR = "#FF8800"


def _create_icon(color: str = ICON_IDLE, size: int = 22) -> QIcon:
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


class UIBridge(QObject):
    result_signal = Signal(object)
    error_signal = Signal(str)
    state_signal = Signal(str, str)
    hide_signal = Signal()


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.config_store = JsonConfigStore()
        self.prefs = self.config_store.load_preferences()
        self.overlay = OverlayWindow()
        self.ui = UIBridge()
        self.ui.result_signal.connect(self._on_result_ui)
        self.ui.error_signal.connect(self._on_error_ui)
        self.ui.state_signal.connect(self._on_state_change_ui)
        self.ui.hide_signal.connect(self.overlay.hide)

        settings = ProviderSettings.from_env()
        if not settings.api_key:
            logger.warning("No API key configured; transcription will fail until OPENAI_API_KEY is set")
        provider = OpenAIProvider(settings)
        paste_service = ClipboardPasteService(before_paste=self.ui.hide_signal.emit)
        self.controller = SessionController(
            recorder=Recorder(),
            transcriber=TranscriptionClient(provider, settings.whisper_model, settings.whisper_language),
            enricher=EnrichmentClient(provider, settings.llm_model),
            paste_service=paste_service,
            clipboard=paste_service,
            on_state_change=self._on_state_change,
            on_result=self._on_result,
            on_error=self._on_error,
        )
        self.hotkey = GlobalHotkeyAdapter(hotkey=self.prefs.hotkey)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self._setup_menu()
        self._set_tooltip(self._t("ready"))
        self.tray.show()

    def _t(self, key: str) -> str:
        return tr(self.prefs.ui_language, key)

    def _set_tooltip(self, text: str) -> None:
        self.tray.setToolTip(f"VoiceFlow — {text}")

    def _setup_menu(self) -> None:
        menu = QMenu()

        self.record_action = QAction(self._t("start_recording"), menu)
        self.record_action.triggered.connect(self._on_hotkey)
        menu.addAction(self.record_action)
        menu.addSeparator()

        mode_menu = menu.addMenu(self._t("mode"))
        mode_group = QActionGroup(mode_menu)
        for mode in ProcessingMode:
            action = QAction(mode_label(self.prefs.ui_language, mode), mode_menu, checkable=True)
            action.setChecked(mode == self.prefs.processing_mode)
            action.triggered.connect(lambda _checked=False, m=mode: self._update_prefs(processing_mode=m))
            mode_group.addAction(action)
            mode_menu.addAction(action)

        language_menu = menu.addMenu(self._t("language"))
        language_group = QActionGroup(language_menu)
        for code, label in LANGUAGES.items():
            action = QAction(label, language_menu, checkable=True)
            action.setChecked(code == self.prefs.language_code)
            action.triggered.connect(lambda _checked=False, c=code: self._update_prefs(language_code=c))
            language_group.addAction(action)
            language_menu.addAction(action)

        paste_action = QAction(self._t("direct_paste"), menu, checkable=True)
        paste_action.setChecked(self.prefs.direct_paste)
        paste_action.toggled.connect(lambda checked: self._update_prefs(direct_paste=checked))
        menu.addAction(paste_action)

        ui_menu = menu.addMenu(self._t("ui_language"))
        ui_group = QActionGroup(ui_menu)
        for code, label in UI_LANGUAGES.items():
            action = QAction(label, ui_menu, checkable=True)
            action.setChecked(code == self.prefs.ui_language)
            action.triggered.connect(lambda _checked=False, c=code: self._set_ui_language(c))
            ui_group.addAction(action)
            ui_menu.addAction(action)

        menu.addSeparator()
        quit_action = QAction(self._t("quit"), menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self._menu = menu
        self.tray.setContextMenu(menu)

    def _update_prefs(self, **changes: object) -> None:
        self.prefs = dataclasses.replace(self.prefs, **changes)
        self.config_store.save_preferences(self.prefs)

    def _set_ui_language(self, code: str) -> None:
        self._update_prefs(ui_language=code)
        self._setup_menu()
        self._set_tooltip(self._t("ready"))

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_state_change(self, from_state: SessionState, to_state: SessionState) -> None:
        self.ui.state_signal.emit(from_state.value, to_state.value)

    def _on_result(self, result: PipelineResult) -> None:
        self.ui.result_signal.emit(result)

    def _on_error(self, code: str, message: str) -> None:
        self.ui.error_signal.emit(f"{code}: {message}")

    # ------------------------------------------------------------------
    # UI thread handlers
    # ------------------------------------------------------------------

    def _on_result_ui(self, result: PipelineResult) -> None:
        if result.pasted:
            self.overlay.hide()
            return
        self.overlay.show_result(result)

    def _on_error_ui(self, msg: str) -> None:
        self._set_tooltip(msg)

    def _on_state_change_ui(self, from_state: str, to_state: str) -> None:
        if to_state == SessionState.RECORDING.value:
            self.tray.setIcon(_create_icon(ICON_RECORDING))
            self._set_tooltip(self._t("recording"))
            self.record_action.setText(self._t("stop_recording"))
            self.overlay.show_status(f"🎙️ {self._t('recording')}")
        elif to_state in (SessionState.TRANSCRIBING.value, SessionState.ENRICHING.value):
            self.tray.setIcon(_create_icon(ICON_BUSY))
            self._set_tooltip(self._t("processing"))
            self.record_action.setText(self._t("processing"))
            self.overlay.show_status(self._t("transcribing"))
        elif to_state == SessionState.PASTING.value:
            self.tray.setIcon(_create_icon(ICON_BUSY))
            self._set_tooltip(self._t("pasting"))
            self.record_action.setText(self._t("pasting"))
        elif to_state == SessionState.ERROR.value:
            self.tray.setIcon(_create_icon(ICON_ERROR))
        elif to_state == SessionState.IDLE.value:
            self.tray.setIcon(_create_icon(ICON_IDLE))
            if from_state != SessionState.ERROR.value:
                self._set_tooltip(self._t("ready"))
            self.record_action.setText(self._t("start_recording"))

    # ------------------------------------------------------------------
    # Hotkey
    # ------------------------------------------------------------------

    def _on_hotkey(self) -> None:
        # stop_session blocks on the network; keep it off the Qt and listener threads.
        threading.Thread(target=self.controller.toggle, args=(self.prefs,), daemon=True).start()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        try:
            self.hotkey.start(on_trigger=self._on_hotkey)
        except Exception as exc:
            logger.warning("Hotkey disabled: %s", exc)
            self.overlay.show_error(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.cancel_session("app quit")
        self.app.quit()


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("VOICEFLOW_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
