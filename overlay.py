"""Overlay window showing recording status, transcript and AI output."""

from __future__ import annotations

from models import PipelineResult

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QApplication, QLabel, QVBoxLayout, QWidget
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

_BASE_STYLE = "font-size: 16px; padding: 14px; border-radius: 12px;"
_STATUS_STYLE = "color: white; background: rgba(0,0,0,190);" + _BASE_STYLE
_OUTPUT_STYLE = "color: #E8F5E9; background: rgba(20,40,20,200);" + _BASE_STYLE
_ERROR_STYLE = "color: #FF6B6B; background: rgba(0,0,0,210);" + _BASE_STYLE


class OverlayWindow(QWidget):
    def __init__(self, width: int = 640) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool)
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFixedWidth(width)

        self._status = QLabel("")
        self._status.setWordWrap(True)
        self._status.setStyleSheet(_STATUS_STYLE)
        self._output = QLabel("")
        self._output.setWordWrap(True)
        self._output.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._output.setStyleSheet(_OUTPUT_STYLE)
        self._output.hide()

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self._status)
        layout.addWidget(self._output)
        self.setLayout(layout)

        self._hide_timer: QTimer | None = None

    def _center_top(self) -> None:
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        x = geom.x() + (geom.width() - self.width()) // 2
        y = geom.y() + 40
        self.move(x, y)

    def show_status(self, text: str) -> None:
        self._cancel_hide_timer()
        self._status.setStyleSheet(_STATUS_STYLE)
        self._status.setText(text)
        self._output.hide()
        self._center_top()
        self.show()

    def show_result(self, result: PipelineResult, hide_after_ms: int = 8000) -> None:
        """Transcript or error on top; the AI pane whenever enriched text exists."""
        self._cancel_hide_timer()
        self._status.setStyleSheet(_ERROR_STYLE if result.error else _STATUS_STYLE)
        self._status.setText(result.transcript)
        if result.enriched:
            self._output.setText(result.enriched)
            self._output.show()
        else:
            self._output.hide()
        self._center_top()
        self.show()
        self.hide_with_delay(hide_after_ms)

    def show_error(self, text: str, hide_after_ms: int = 3000) -> None:
        self.show_status(f"⚠️ {text}")
        self._status.setStyleSheet(_ERROR_STYLE)
        self.hide_with_delay(hide_after_ms)

    def hide_with_delay(self, delay_ms: int = 400) -> None:
        self._cancel_hide_timer()
        if QTimer is not None:
            self._hide_timer = QTimer()
            self._hide_timer.setSingleShot(True)
            self._hide_timer.timeout.connect(self.hide)
            self._hide_timer.start(delay_ms)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.stop()
            self._hide_timer = None
