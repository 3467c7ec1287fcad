"""Microphone capture adapter and the recording state machine."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from audio_quality import DEFAULT_ENCODING, ENCODING_PREFERENCES, negotiate_encoding, soundfile_supports
from errors import DeviceBusy, DeviceUnavailable
from interfaces import CaptureDevice, ChunkCallback, ErrorCallback
from models import AudioBlob, RecorderState

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)

CHUNK_MS = 100


class SoundDeviceCapture:
    """Exclusive microphone handle delivering int16 PCM every ``chunk_ms``."""

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = CHUNK_MS,
        device: Optional[Any] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self.device = device
        self._stream: Any = None
        self._on_chunk: Optional[ChunkCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._closing = False
        self.overflow_count = 0

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def supports(self, encoding: str) -> bool:
        return soundfile_supports(encoding)

    def open(self, on_chunk: ChunkCallback, on_error: ErrorCallback) -> None:
        if sd is None:
            raise DeviceUnavailable("sounddevice is not installed")
        if self._stream is not None:
            raise DeviceBusy()
        self._on_chunk = on_chunk
        self._on_error = on_error
        self._closing = False
        self.overflow_count = 0

        blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                blocksize=blocksize,
                device=self.device,
                callback=self._on_audio,
                finished_callback=self._on_finished,
            )
            stream.start()
        except Exception as exc:
            if stream is not None:
                try:
                    stream.close()
                except Exception:
                    logger.debug("Closing half-opened stream failed", exc_info=True)
            raise DeviceUnavailable(str(exc) or None) from exc
        self._stream = stream

    def close(self) -> None:
        self._closing = True
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            if getattr(status, "input_overflow", False):
                self.overflow_count += 1
            logger.debug("Input stream status: %s", status)
        if self._closing or self._on_chunk is None or np is None:
            return
        self._on_chunk(np.asarray(indata, dtype=np.int16).tobytes())

    def _on_finished(self) -> None:
        if not self._closing and self._on_error is not None:
            self._on_error("Audio input stream stopped unexpectedly")


class Recorder:
    """idle --start--> recording --stop--> stopped --reset--> idle.

    A device error while recording drops straight back to idle. The capture
    device is released on every path that leaves ``recording``.
    """

    def __init__(
        self,
        device: Optional[CaptureDevice] = None,
        encodings: tuple[str, ...] = ENCODING_PREFERENCES,
    ) -> None:
        self._device = device if device is not None else SoundDeviceCapture()
        self._encodings = encodings
        self._lock = threading.Lock()
        self._state = RecorderState.IDLE
        self._chunks: list[bytes] = []
        self._encoding = DEFAULT_ENCODING
        self._device_held = False
        self.last_error: Optional[str] = None

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def device_held(self) -> bool:
        return self._device_held

    def start(self) -> None:
        with self._lock:
            if self._state == RecorderState.RECORDING:
                raise DeviceBusy()
            if self._device_held:
                # Should not happen: every exit from recording releases it.
                logger.error("Capture device still held outside a recording, releasing")
                self._release_device()
            self._chunks = []
            self.last_error = None
            self._encoding = negotiate_encoding(self._device.supports, self._encodings)
            try:
                self._device.open(self._on_chunk, self._on_device_error)
            except DeviceUnavailable as exc:
                self._fail_start(exc.message)
                raise
            except Exception as exc:
                err = DeviceUnavailable(str(exc) or None)
                self._fail_start(err.message)
                raise err from exc
            self._device_held = True
            self._state = RecorderState.RECORDING
            logger.info("Started recording, encoding: %s", self._encoding)

    def stop(self) -> Optional[AudioBlob]:
        with self._lock:
            if self._state != RecorderState.RECORDING:
                return None
            self._state = RecorderState.STOPPED
            self._release_device()
            chunks, self._chunks = self._chunks, []

        if not chunks:
            logger.warning("No audio chunks recorded")
            return None
        blob = AudioBlob(
            data=b"".join(chunks),
            encoding=self._encoding,
            sample_rate=self._device.sample_rate,
            channels=self._device.channels,
        )
        logger.info("Final blob: %d bytes, chunks: %d, encoding: %s", len(blob), len(chunks), blob.encoding)
        return blob

    def reset(self) -> None:
        with self._lock:
            self._release_device()
            self._state = RecorderState.IDLE
            self._chunks = []
            self.last_error = None

    def _on_chunk(self, chunk: bytes) -> None:
        # Runs on the audio thread; must not take the lock held by stop().
        if self._state != RecorderState.RECORDING or not chunk:
            return
        self._chunks.append(chunk)
        logger.debug("Data chunk: %d bytes", len(chunk))

    def _on_device_error(self, message: str) -> None:
        with self._lock:
            if self._state != RecorderState.RECORDING:
                return
            logger.error("Recording error: %s", message)
            self._release_device()
            self._state = RecorderState.IDLE
            self._chunks = []
            self.last_error = message

    def _fail_start(self, message: str) -> None:
        self._device_held = False
        self._state = RecorderState.IDLE
        self.last_error = message
        logger.warning("Failed to access microphone: %s", message)

    def _release_device(self) -> None:
        if not self._device_held:
            return
        self._device_held = False
        try:
            self._device.close()
        except Exception:
            logger.exception("Failed to release capture device")
