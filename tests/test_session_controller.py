from __future__ import annotations

from typing import Optional

from errors import DEVICE_UNAVAILABLE, INJECTION_FAILED, NO_AUDIBLE_SPEECH, DeviceUnavailable, NoAudibleSpeech
from models import AudioBlob, PasteResult, PipelineResult, ProcessingMode, SessionState, UserPreferences
from session_controller import SessionController


class FakeRecorder:
    def __init__(self, blob: Optional[AudioBlob] = None, fail: Exception | None = None) -> None:
        self.blob = blob if blob is not None else AudioBlob(data=b"\x01\x00" * 8000)
        self.fail = fail
        self.started = 0
        self.stopped = 0
        self.resets = 0
        self.last_error: str | None = None

    def start(self) -> None:
        if self.fail is not None:
            raise self.fail
        self.started += 1

    def stop(self) -> Optional[AudioBlob]:
        self.stopped += 1
        return self.blob

    def reset(self) -> None:
        self.resets += 1
        self.last_error = None


class FakeTranscriber:
    def __init__(self, text: str = "hello world", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[AudioBlob, str | None]] = []
        self.hook = None

    def transcribe(self, audio: AudioBlob, language_hint: str | None = None) -> str:
        self.calls.append((audio, language_hint))
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            raise self.error
        return self.text


class FakeEnricher:
    def __init__(self, reply: str = "Hello, world.") -> None:
        self.reply = reply
        self.calls: list[dict] = []

    def enrich(self, text, mode=ProcessingMode.STANDARD, language_label="", clipboard_context="", direct_paste=False):  # noqa: ANN001, ANN201
        self.calls.append(
            {
                "text": text,
                "mode": mode,
                "language_label": language_label,
                "clipboard_context": clipboard_context,
                "direct_paste": direct_paste,
            }
        )
        return self.reply


class FakePasteService:
    def __init__(self, success: bool = True) -> None:
        self.success = success
        self.calls: list[str] = []

    def paste_text(self, text: str) -> PasteResult:
        self.calls.append(text)
        if self.success:
            return PasteResult(success=True, reason="ok", clipboard_restored=True)
        return PasteResult(success=False, reason="no target", clipboard_restored=True)


class FakeClipboard:
    def __init__(self, text: str = "") -> None:
        self.text = text
        self.reads = 0

    def read_clipboard(self) -> str:
        self.reads += 1
        return self.text


def _controller(**overrides):  # noqa: ANN003, ANN202
    parts = {
        "recorder": FakeRecorder(),
        "transcriber": FakeTranscriber(),
        "enricher": FakeEnricher(),
        "paste_service": FakePasteService(),
        "clipboard": FakeClipboard(),
    }
    parts.update(overrides)
    transitions: list[tuple[SessionState, SessionState]] = []
    errors: list[tuple[str, str]] = []
    results: list[PipelineResult] = []
    controller = SessionController(
        **parts,
        on_state_change=lambda f, t: transitions.append((f, t)),
        on_error=lambda c, m: errors.append((c, m)),
        on_result=results.append,
    )
    return controller, parts, transitions, errors, results


def test_toggle_runs_full_pipeline() -> None:
    controller, parts, transitions, errors, results = _controller()
    prefs = UserPreferences(language_code="de")

    assert controller.toggle(prefs) is None
    assert controller.state == SessionState.RECORDING
    result = controller.toggle(prefs)

    assert result is not None
    assert result.transcript == "hello world"
    assert result.enriched == "Hello, world."
    assert result.ok and not result.pasted
    assert controller.state == SessionState.IDLE
    assert parts["recorder"].resets == 1
    assert parts["transcriber"].calls[0][1] == "de"
    assert parts["enricher"].calls[0]["language_label"] == "Deutsch"
    assert parts["paste_service"].calls == []
    assert (SessionState.RECORDING, SessionState.TRANSCRIBING) in transitions
    assert (SessionState.TRANSCRIBING, SessionState.ENRICHING) in transitions
    assert (SessionState.ENRICHING, SessionState.IDLE) in transitions
    assert errors == []
    assert results == [result]


def test_auto_language_passes_empty_label() -> None:
    controller, parts, *_ = _controller()
    controller.start_session()
    controller.stop_session(UserPreferences(language_code="auto"))

    assert parts["transcriber"].calls[0][1] == "auto"
    assert parts["enricher"].calls[0]["language_label"] == ""


def test_direct_paste_injects_enriched_text() -> None:
    controller, parts, transitions, *_ = _controller()
    controller.start_session()
    result = controller.stop_session(UserPreferences(direct_paste=True))

    assert result is not None and result.pasted
    assert parts["paste_service"].calls == ["Hello, world."]
    assert parts["enricher"].calls[0]["direct_paste"] is True
    assert (SessionState.ENRICHING, SessionState.PASTING) in transitions
    assert controller.state == SessionState.IDLE


def test_transcription_failure_skips_enrichment() -> None:
    controller, parts, transitions, errors, results = _controller(
        transcriber=FakeTranscriber(error=NoAudibleSpeech())
    )
    controller.start_session()
    result = controller.stop_session(UserPreferences(direct_paste=True))

    assert result is not None
    assert result.transcript.startswith("Error: No audible speech detected")
    assert result.enriched == ""
    assert parts["enricher"].calls == []
    assert parts["paste_service"].calls == []
    assert errors[0][0] == NO_AUDIBLE_SPEECH
    assert (SessionState.TRANSCRIBING, SessionState.ERROR) in transitions
    assert controller.state == SessionState.IDLE
    assert results == [result]


def test_unexpected_exception_is_rendered_as_error() -> None:
    controller, parts, _, errors, _ = _controller(transcriber=FakeTranscriber(error=ValueError("boom")))
    controller.start_session()
    result = controller.stop_session(UserPreferences())

    assert result is not None
    assert result.transcript == "Error: boom"
    assert controller.state == SessionState.IDLE


def test_empty_transcript_still_enriched() -> None:
    controller, parts, *_ = _controller(transcriber=FakeTranscriber(text=""))
    controller.start_session()
    result = controller.stop_session(UserPreferences())

    assert result is not None
    assert result.transcript == "(No speech detected)"
    assert parts["enricher"].calls[0]["text"] == ""


def test_context_reply_reads_and_caps_clipboard() -> None:
    clipboard = FakeClipboard("z" * 15000)
    controller, parts, *_ = _controller(clipboard=clipboard)
    controller.start_session()
    controller.stop_session(UserPreferences(processing_mode=ProcessingMode.CONTEXT_REPLY))

    assert clipboard.reads == 1
    assert len(parts["enricher"].calls[0]["clipboard_context"]) == 12000
    assert parts["enricher"].calls[0]["mode"] == ProcessingMode.CONTEXT_REPLY


def test_other_modes_do_not_read_clipboard() -> None:
    clipboard = FakeClipboard("secret")
    controller, parts, *_ = _controller(clipboard=clipboard)
    controller.start_session()
    controller.stop_session(UserPreferences(processing_mode=ProcessingMode.MEETING_MINUTES))

    assert clipboard.reads == 0
    assert parts["enricher"].calls[0]["clipboard_context"] == ""


def test_injection_failure_is_surfaced_and_recoverable() -> None:
    controller, parts, _, errors, _ = _controller(paste_service=FakePasteService(success=False))
    controller.start_session()
    result = controller.stop_session(UserPreferences(direct_paste=True))

    assert result is not None
    assert not result.pasted
    assert result.transcript == "Error: no target"
    assert result.error == "no target"
    assert result.enriched == "Hello, world."
    assert errors == [(INJECTION_FAILED, "no target")]
    assert controller.state == SessionState.IDLE
    assert controller.start_session() is True


def test_start_failure_stays_idle() -> None:
    controller, parts, transitions, errors, results = _controller(
        recorder=FakeRecorder(fail=DeviceUnavailable("Permission denied"))
    )

    assert controller.start_session() is False
    assert controller.state == SessionState.IDLE
    assert transitions == []
    assert errors == [(DEVICE_UNAVAILABLE, "Permission denied")]
    assert results == [PipelineResult(transcript="Error: Permission denied", error="Permission denied")]
    assert parts["recorder"].resets == 1


def test_device_error_during_recording_is_reported() -> None:
    recorder = FakeRecorder()
    controller, parts, _, errors, _ = _controller(recorder=recorder)
    controller.start_session()
    recorder.blob = None  # type: ignore[assignment]
    recorder.last_error = "Audio input stream stopped unexpectedly"
    result = controller.stop_session(UserPreferences())

    assert result is not None
    assert result.error == "Audio input stream stopped unexpectedly"
    assert parts["transcriber"].calls == []
    assert errors[0][0] == DEVICE_UNAVAILABLE
    assert controller.state == SessionState.IDLE


def test_toggle_is_ignored_while_processing() -> None:
    transcriber = FakeTranscriber()
    controller, parts, *_ = _controller(transcriber=transcriber)
    seen: list[object] = []
    transcriber.hook = lambda: seen.append((controller.state, controller.toggle(UserPreferences())))

    controller.start_session()
    controller.stop_session(UserPreferences())

    assert seen == [(SessionState.TRANSCRIBING, None)]
    assert parts["recorder"].started == 1


def test_stop_and_cancel_from_idle_are_noops() -> None:
    controller, parts, _, errors, _ = _controller()

    assert controller.stop_session(UserPreferences()) is None
    controller.cancel_session("noop")
    assert controller.state == SessionState.IDLE
    assert errors == []


def test_cancel_while_recording_resets_recorder() -> None:
    controller, parts, _, errors, _ = _controller()
    controller.start_session()
    controller.cancel_session("new recording")

    assert controller.state == SessionState.IDLE
    assert parts["recorder"].resets == 1
    assert errors[0][1] == "new recording"


def test_cancel_during_transcription_discards_result() -> None:
    transcriber = FakeTranscriber()
    controller, parts, _, _, results = _controller(transcriber=transcriber)
    transcriber.hook = lambda: controller.cancel_session("user reset")

    controller.start_session()
    controller.stop_session(UserPreferences(direct_paste=True))

    assert parts["enricher"].calls == []
    assert parts["paste_service"].calls == []
    assert results == []
    assert controller.state == SessionState.IDLE
