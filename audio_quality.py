"""Container packaging and the silence/length gate run before transcription.

The recorder hands over raw 16-bit PCM tagged with a negotiated container.
``package`` turns it into the file that is uploaded, ``measure`` decodes that
file again to estimate duration and loudness, and ``check`` rejects audio that
would make the speech-to-text model hallucinate.
"""

from __future__ import annotations

import io
import logging
import wave
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from errors import NoAudibleSpeech, RecordingTooShort
from models import AudioBlob, AudioStats, EncodedAudio

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import soundfile as sf
except Exception:  # pragma: no cover
    sf = None  # type: ignore

logger = logging.getLogger(__name__)

MIN_DURATION_S = 0.25
MIN_RMS = 0.003


@dataclass(frozen=True)
class ContainerFormat:
    name: str
    sf_format: str
    sf_subtype: str
    mime_type: str
    extension: str


CONTAINERS: dict[str, ContainerFormat] = {
    "ogg/opus": ContainerFormat("ogg/opus", "OGG", "OPUS", "audio/ogg;codecs=opus", "ogg"),
    "ogg/vorbis": ContainerFormat("ogg/vorbis", "OGG", "VORBIS", "audio/ogg", "ogg"),
    "flac": ContainerFormat("flac", "FLAC", "PCM_16", "audio/flac", "flac"),
    "wav": ContainerFormat("wav", "WAV", "PCM_16", "audio/wav", "wav"),
}
ENCODING_PREFERENCES: tuple[str, ...] = ("ogg/opus", "ogg/vorbis", "flac", "wav")
DEFAULT_ENCODING = "wav"


def soundfile_supports(encoding: str) -> bool:
    container = CONTAINERS.get(encoding)
    if container is None:
        return False
    if container.name == DEFAULT_ENCODING:
        return True
    if sf is None:
        return False
    return bool(sf.check_format(container.sf_format, container.sf_subtype))


def negotiate_encoding(
    is_supported: Callable[[str], bool] = soundfile_supports,
    preferences: Sequence[str] = ENCODING_PREFERENCES,
) -> str:
    """Return the first supported encoding, or the default when none match."""
    for encoding in preferences:
        if is_supported(encoding):
            return encoding
    logger.warning("No preferred encoding supported, falling back to %s", DEFAULT_ENCODING)
    return DEFAULT_ENCODING


def _pcm_to_wav(
    pcm: bytes,
    sample_rate: int = 16000,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buf.getvalue()


def _encode_with_soundfile(pcm: bytes, sample_rate: int, channels: int, container: ContainerFormat) -> bytes:
    samples = np.frombuffer(pcm, dtype=np.int16).reshape(-1, channels)
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format=container.sf_format, subtype=container.sf_subtype)
    return buf.getvalue()


def package(blob: AudioBlob) -> EncodedAudio:
    """Wrap the blob's PCM in its negotiated container."""
    channels = max(1, blob.channels)
    frame_bytes = 2 * channels
    pcm = blob.data[: len(blob.data) - len(blob.data) % frame_bytes]

    container = CONTAINERS.get(blob.encoding, CONTAINERS[DEFAULT_ENCODING])
    if container.name != DEFAULT_ENCODING and sf is not None and np is not None:
        try:
            data = _encode_with_soundfile(pcm, blob.sample_rate, channels, container)
            return EncodedAudio(filename=f"audio.{container.extension}", data=data, mime_type=container.mime_type)
        except Exception as exc:
            logger.warning("Encoding as %s failed (%s), using WAV", container.name, exc)

    wav = CONTAINERS[DEFAULT_ENCODING]
    data = _pcm_to_wav(pcm, blob.sample_rate, channels)
    return EncodedAudio(filename=f"audio.{wav.extension}", data=data, mime_type=wav.mime_type)


def measure(payload: bytes) -> Optional[AudioStats]:
    """Decode ``payload`` and compute duration and first-channel RMS.

    Returns ``None`` when the payload cannot be decoded; callers then skip the
    gate instead of failing.
    """
    if sf is None or np is None:
        return None
    try:
        samples, sample_rate = sf.read(io.BytesIO(payload), dtype="float32", always_2d=True)
    except Exception as exc:
        logger.debug("Audio stats unavailable: %s", exc)
        return None
    if sample_rate <= 0:
        return None

    frames = samples.shape[0]
    if frames == 0:
        return AudioStats(duration_s=0.0, rms=0.0)
    channel0 = samples[:, 0].astype(np.float64)
    rms = float(np.sqrt(np.mean(channel0 * channel0)))
    return AudioStats(duration_s=frames / float(sample_rate), rms=rms)


def check(
    stats: Optional[AudioStats],
    min_duration_s: float = MIN_DURATION_S,
    min_rms: float = MIN_RMS,
) -> None:
    """Raise if ``stats`` describe audio unlikely to contain speech."""
    if stats is None:
        return
    if stats.duration_s < min_duration_s:
        raise RecordingTooShort()
    if stats.rms < min_rms:
        raise NoAudibleSpeech()
