"""State-machine based orchestration of record → transcribe → enrich → paste."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from enricher import truncate_clipboard
from errors import DEVICE_UNAVAILABLE, PROVIDER_REQUEST_FAILED, SESSION_CANCELLED, DictationError, InjectionFailed
from interfaces import ClipboardReader, Enricher, PasteService, Recorder, Transcriber
from models import (
    AUTO_LANGUAGE,
    AudioBlob,
    PasteResult,
    PipelineResult,
    ProcessingMode,
    SessionState,
    UserPreferences,
    language_label,
)

logger = logging.getLogger(__name__)

NO_SPEECH_TEXT = "(No speech detected)"

StateCallback = Callable[[SessionState, SessionState], None]
ResultCallback = Callable[[PipelineResult], None]
ErrorCallback = Callable[[str, str], None]


class SessionController:
    def __init__(
        self,
        recorder: Recorder,
        transcriber: Transcriber,
        enricher: Enricher,
        paste_service: PasteService,
        clipboard: Optional[ClipboardReader] = None,
        on_state_change: Optional[StateCallback] = None,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._recorder = recorder
        self._transcriber = transcriber
        self._enricher = enricher
        self._paste_service = paste_service
        self._clipboard = clipboard
        self._on_state_change = on_state_change
        self._on_result = on_result
        self._on_error = on_error

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._session_id = 0

    @property
    def state(self) -> SessionState:
        return self._state

    def toggle(self, prefs: UserPreferences) -> Optional[PipelineResult]:
        """Hotkey entry point: start when idle, finish when recording, else ignore."""
        with self._lock:
            state = self._state
        if state == SessionState.IDLE:
            self.start_session()
            return None
        if state == SessionState.RECORDING:
            return self.stop_session(prefs)
        logger.debug("Ignoring toggle while %s", state.value)
        return None

    def start_session(self) -> bool:
        with self._lock:
            if self._state != SessionState.IDLE:
                return False
            self._session_id += 1
            try:
                self._recorder.start()
            except DictationError as exc:
                self._emit_error(exc.code, exc.message)
                self._safe_reset_recorder()
                if self._on_result:
                    self._on_result(PipelineResult(transcript=f"Error: {exc.message}", error=exc.message))
                return False
            self._transition(SessionState.RECORDING)
            return True

    def stop_session(self, prefs: UserPreferences) -> Optional[PipelineResult]:
        with self._lock:
            if self._state != SessionState.RECORDING:
                return None
            session_id = self._session_id
            blob = self._recorder.stop()
            device_error = getattr(self._recorder, "last_error", None)
            self._safe_reset_recorder()
            self._transition(SessionState.TRANSCRIBING)

        if blob is None and device_error:
            result = PipelineResult()
            self._finish_with_error(session_id, result, DEVICE_UNAVAILABLE, device_error)
            return result
        return self.run_pipeline(blob, prefs, session_id)

    def cancel_session(self, reason: str) -> None:
        """Best-effort abort; a pipeline still in flight has its result discarded."""
        with self._lock:
            if self._state == SessionState.IDLE:
                return
            self._session_id += 1
            self._emit_error(SESSION_CANCELLED, reason)
            self._safe_reset_recorder()
            self._transition(SessionState.IDLE)

    def run_pipeline(
        self,
        blob: Optional[AudioBlob],
        prefs: UserPreferences,
        session_id: Optional[int] = None,
    ) -> PipelineResult:
        if session_id is None:
            session_id = self._session_id
        result = PipelineResult()
        mode = prefs.processing_mode
        try:
            text = self._transcriber.transcribe(blob, prefs.language_code)
            result.transcript = text or NO_SPEECH_TEXT
            if not self._advance(session_id, SessionState.ENRICHING):
                return result

            clipboard_context = ""
            if mode == ProcessingMode.CONTEXT_REPLY and self._clipboard is not None:
                clipboard_context = truncate_clipboard(self._clipboard.read_clipboard())

            label = "" if prefs.language_code == AUTO_LANGUAGE else language_label(prefs.language_code)
            result.enriched = self._enricher.enrich(
                text or "",
                mode,
                label,
                clipboard_context,
                prefs.direct_paste,
            )
        except DictationError as exc:
            result.enriched = ""
            self._finish_with_error(session_id, result, exc.code, exc.message)
            return result
        except Exception as exc:
            logger.exception("Pipeline failed")
            result.enriched = ""
            self._finish_with_error(session_id, result, PROVIDER_REQUEST_FAILED, str(exc) or "AI error")
            return result

        if prefs.direct_paste:
            if not self._advance(session_id, SessionState.PASTING):
                return result
            paste = self._run_paste(result.enriched)
            if not paste.success:
                err = InjectionFailed(paste.reason)
                self._finish_with_error(session_id, result, err.code, err.message)
                return result
            result.pasted = True

        if self._advance(session_id, SessionState.IDLE) and self._on_result:
            self._on_result(result)
        return result

    def _run_paste(self, text: str) -> PasteResult:
        try:
            return self._paste_service.paste_text(text)
        except Exception as exc:
            logger.exception("Paste service raised")
            return PasteResult(success=False, reason=str(exc), clipboard_restored=False)

    def _finish_with_error(self, session_id: int, result: PipelineResult, code: str, message: str) -> None:
        result.error = message
        result.transcript = f"Error: {message}"
        if not self._advance(session_id, SessionState.ERROR):
            return
        with self._lock:
            self._emit_error(code, message)
            self._transition(SessionState.IDLE)
        if self._on_result:
            self._on_result(result)

    def _advance(self, session_id: int, to_state: SessionState) -> bool:
        with self._lock:
            if session_id != self._session_id:
                logger.info("Discarding result of cancelled session %d", session_id)
                return False
            self._transition(to_state)
            return True

    def _emit_error(self, code: str, message: str) -> None:
        logger.warning("%s: %s", code, message)
        if self._on_error:
            self._on_error(code, message)

    def _safe_reset_recorder(self) -> None:
        try:
            self._recorder.reset()
        except Exception:
            logger.exception("Recorder reset failed")

    def _transition(self, to_state: SessionState) -> None:
        from_state = self._state
        if from_state == to_state:
            return
        self._state = to_state
        if self._on_state_change:
            self._on_state_change(from_state, to_state)
