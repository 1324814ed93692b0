"""Incident recording sessions with scoped capture devices and a max-duration timer."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Protocol

from rightguard.client.services import RecordingClient
from rightguard.client.state import AppStore
from rightguard.constants import RECORDING_CONFIG
from rightguard.errors import UnauthenticatedError, ValidationFailure
from rightguard.models import IncidentRecord, Location

LOGGER = logging.getLogger(__name__)

RecordingKind = Literal["audio", "video"]


@dataclass
class CapturedMedia:
    data: bytes
    kind: RecordingKind
    duration_seconds: float
    started_at: float

    @property
    def content_type(self) -> str:
        return str(RECORDING_CONFIG["video_format"] if self.kind == "video" else RECORDING_CONFIG["audio_format"])

    @property
    def file_name(self) -> str:
        return f"right-guard-{self.kind}-{int(self.started_at * 1000)}.webm"


class CaptureDevice(Protocol):
    """A microphone/camera handle. ``release`` must be safe to call more than once."""

    def open(self, kind: RecordingKind) -> None: ...

    def read_all(self) -> bytes: ...

    def release(self) -> None: ...


class BufferedCaptureDevice:
    """Capture device fed with chunks by the caller (uploads, tests, pre-recorded media)."""

    def __init__(self, chunks: Optional[List[bytes]] = None) -> None:
        self._chunks: List[bytes] = list(chunks or [])
        self.kind: Optional[RecordingKind] = None
        self.released = False

    def open(self, kind: RecordingKind) -> None:
        self.kind = kind
        self.released = False

    def write(self, chunk: bytes) -> None:
        if chunk:
            self._chunks.append(chunk)

    def read_all(self) -> bytes:
        return b"".join(self._chunks)

    def release(self) -> None:
        self.released = True


class RecordingSession:
    """Own one capture device for the length of one recording.

    ``start`` acquires the device, flips the store's recording flag, and arms a
    timer that stops the recording at the maximum duration. ``stop`` returns
    the captured media. ``close`` (also run on context-manager exit) releases
    the device and the timer without producing media.
    """

    def __init__(
        self,
        device_factory: Callable[[], CaptureDevice],
        *,
        store: Optional[AppStore] = None,
        recordings: Optional[RecordingClient] = None,
        max_duration_seconds: Optional[float] = None,
        on_auto_stop: Optional[Callable[[CapturedMedia], None]] = None,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._device_factory = device_factory
        self._store = store
        self._recordings = recordings or (store.services.recordings if store is not None else None)
        self.max_duration_seconds = float(max_duration_seconds or RECORDING_CONFIG["max_duration_seconds"])
        self._on_auto_stop = on_auto_stop
        self._timer_factory = timer_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._device: Optional[CaptureDevice] = None
        self._timer: Optional[threading.Timer] = None
        self._kind: RecordingKind = "audio"
        self._started_at: Optional[float] = None
        self._generation = 0
        self.last_media: Optional[CapturedMedia] = None

    @property
    def is_active(self) -> bool:
        return self._device is not None

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def __enter__(self) -> "RecordingSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self, kind: RecordingKind = "audio") -> None:
        with self._lock:
            if self._device is not None:
                raise ValidationFailure("A recording is already in progress")
            device = self._device_factory()
            try:
                device.open(kind)
            except Exception:
                device.release()
                raise
            self._device = device
            self._kind = kind
            self._started_at = self._clock()
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(self.max_duration_seconds, lambda: self._auto_stop(generation))
            self._timer.daemon = True
            self._timer.start()
            if self._store is not None:
                self._store.set_recording(True)
        LOGGER.info("Recording started (%s, max %ss)", kind, self.max_duration_seconds)

    def stop(self) -> CapturedMedia:
        with self._lock:
            if self._device is None or self._started_at is None:
                raise ValidationFailure("No recording in progress")
            started_at = self._started_at
            try:
                data = self._device.read_all()
            finally:
                self._release()
            media = CapturedMedia(
                data=data,
                kind=self._kind,
                duration_seconds=min(self._clock() - started_at, self.max_duration_seconds),
                started_at=started_at,
            )
            self.last_media = media
        LOGGER.info("Recording stopped after %.1fs (%s bytes)", media.duration_seconds, len(media.data))
        return media

    def close(self) -> None:
        with self._lock:
            if self._device is not None:
                LOGGER.info("Recording discarded")
            self._release()

    def _release(self) -> None:
        timer, device = self._timer, self._device
        self._timer = None
        self._device = None
        self._started_at = None
        if timer is not None:
            timer.cancel()
        if device is not None:
            device.release()
        if self._store is not None and self._store.state.is_recording:
            self._store.set_recording(False)

    def _auto_stop(self, generation: int) -> None:
        with self._lock:
            # A cancelled timer can still fire once it is running; ignore it unless its recording is current.
            if self._device is None or generation != self._generation:
                return
            media = self.stop()
        LOGGER.info("Recording reached the %ss limit and was stopped", self.max_duration_seconds)
        if self._on_auto_stop is not None:
            self._on_auto_stop(media)

    def save(self, media: CapturedMedia, location: Location, notes: Optional[str] = None) -> IncidentRecord:
        """Send captured media for the current user to the recordings API."""

        if self._recordings is None:
            raise ValidationFailure("No recording client configured")
        user = self._store.state.user if self._store is not None else None
        if user is None:
            raise UnauthenticatedError("User not authenticated")
        return self._recordings.save_recording(
            media.data,
            user.user_id,
            location,
            notes,
            file_name=media.file_name,
            content_type=media.content_type,
        )


__all__ = ["BufferedCaptureDevice", "CaptureDevice", "CapturedMedia", "RecordingKind", "RecordingSession"]
