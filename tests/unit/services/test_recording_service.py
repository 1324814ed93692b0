"""Tests for recording persistence and ownership checks."""

from __future__ import annotations

import pytest

from rightguard.errors import IntegrationError, NotFoundError, ValidationFailure
from rightguard.models import Location
from rightguard.services.recordings import RecordingService, RecordingUpload
from rightguard.storage import PinnedMedia


class _StubMedia:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.pinned = []

    def pin(self, file_name, data, content_type):
        if self.fail:
            raise IntegrationError("IPFS upload failed")
        self.pinned.append((file_name, data, content_type))
        return PinnedMedia(content_hash="QmHash", url="https://gateway/ipfs/QmHash", file_name=file_name, size_bytes=len(data))


def _upload() -> RecordingUpload:
    return RecordingUpload(file_name="clip.webm", data=b"media-bytes", content_type="audio/webm")


def _service(record_stores, observability, media) -> RecordingService:
    return RecordingService(store=record_stores["incident_records"], media_storage=media, observability=observability)


def test_save_recording_pins_media(record_stores, observability):
    media = _StubMedia()
    service = _service(record_stores, observability, media)

    saved = service.save_recording(_upload(), "user-1", Location(latitude=37.0, longitude=-120.0, address="Fresno"), "n")

    assert saved.media_uploaded is True
    assert saved.record.media_url == "https://gateway/ipfs/QmHash"
    assert saved.record.location.address == "Fresno"
    assert saved.record.notes == "n"
    assert media.pinned[0][0] == "clip.webm"
    assert "recording.saved" in observability.event_names()


def test_failed_upload_still_saves_record(record_stores, observability):
    service = _service(record_stores, observability, _StubMedia(fail=True))

    saved = service.save_recording(_upload(), "user-1", Location(latitude=37.0, longitude=-120.0))

    assert saved.media_uploaded is False
    assert saved.record.media_url is None
    assert len(service.get_recordings("user-1")) == 1


def test_get_recordings_is_scoped_and_paginated(record_stores, observability):
    service = _service(record_stores, observability, _StubMedia())
    for _ in range(3):
        service.save_recording(_upload(), "user-1", Location(latitude=1.0, longitude=2.0))
    service.save_recording(_upload(), "user-2", Location(latitude=1.0, longitude=2.0))

    assert len(service.get_recordings("user-1")) == 3
    assert len(service.get_recordings("user-1", limit=2)) == 2
    assert len(service.get_recordings("user-1", limit=2, offset=2)) == 1
    with pytest.raises(ValidationFailure):
        service.get_recordings("")


def test_delete_by_another_owner_fails(record_stores, observability):
    service = _service(record_stores, observability, _StubMedia())
    saved = service.save_recording(_upload(), "owner", Location(latitude=1.0, longitude=2.0))

    with pytest.raises(NotFoundError, match="not found or access denied"):
        service.delete_recording(saved.record.record_id, "intruder")
    assert len(service.get_recordings("owner")) == 1

    service.delete_recording(saved.record.record_id, "owner")
    assert service.get_recordings("owner") == []


def test_save_requires_upload_and_user(record_stores, observability):
    service = _service(record_stores, observability, _StubMedia())
    with pytest.raises(ValidationFailure):
        service.save_recording(None, "user-1", Location(latitude=1.0, longitude=2.0))
    with pytest.raises(ValidationFailure):
        service.save_recording(_upload(), "", Location(latitude=1.0, longitude=2.0))
