"""Service layer coordinating incident recordings and media pinning."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from rightguard.constants import TABLES
from rightguard.errors import NotFoundError, ValidationFailure
from rightguard.models import IncidentRecord, Location
from rightguard.observability import Observability, get_observability
from rightguard.services.factories import build_media_storage, build_record_store
from rightguard.storage import MediaStorage
from rightguard.store.records import RecordStore

LOGGER = logging.getLogger(__name__)


@dataclass
class RecordingUpload:
    """In-memory representation of captured media before pinning."""

    file_name: str
    data: bytes
    content_type: Optional[str]


@dataclass
class SavedRecording:
    record: IncidentRecord
    media_uploaded: bool


def _record_from_row(row: Dict[str, Any]) -> IncidentRecord:
    return IncidentRecord(
        record_id=row["record_id"],
        user_id=row["user_id"],
        timestamp=row["timestamp"],
        location=Location(latitude=row["latitude"], longitude=row["longitude"], address=row.get("address")),
        media_url=row.get("media_url"),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
    )


class RecordingService:
    """Orchestrate incident persistence across the relational store and IPFS."""

    def __init__(
        self,
        *,
        store: Optional[RecordStore] = None,
        media_storage: Optional[MediaStorage] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._store = store or build_record_store(TABLES["incident_records"])
        self._media = media_storage
        self._observability = observability or get_observability(component="recordings")

    @property
    def media_storage(self) -> MediaStorage:
        if self._media is None:
            self._media = build_media_storage()
        return self._media

    # ------------------------------------------------------------------
    # Recording creation
    # ------------------------------------------------------------------
    def save_recording(
        self,
        upload: Optional[RecordingUpload],
        user_id: str,
        location: Location,
        notes: Optional[str] = None,
    ) -> SavedRecording:
        """Pin the media, then persist the incident record.

        A failed upload does not fail the save: the record is stored without a
        media URL and ``media_uploaded`` is ``False``.
        """

        if upload is None or not user_id:
            raise ValidationFailure("Missing required fields")

        media_url: Optional[str] = None
        try:
            with self._observability.timed("recordings.pin_ms"):
                pinned = self.media_storage.pin(upload.file_name, upload.data, upload.content_type)
            media_url = pinned.url
        except Exception:
            LOGGER.exception("IPFS upload failed for user %s; storing record without media", user_id)

        now = datetime.now(timezone.utc)
        row = self._store.insert(
            {
                "record_id": str(uuid.uuid4()),
                "user_id": user_id,
                "timestamp": now,
                "latitude": location.latitude,
                "longitude": location.longitude,
                "address": location.address or None,
                "media_url": media_url,
                "notes": notes or None,
                "created_at": now,
            }
        )
        record = _record_from_row(row)
        self._observability.emit_event(
            "recording.saved", record_id=record.record_id, user_id=user_id, media_uploaded=media_url is not None
        )
        self._observability.increment("recordings.saved", tags={"media": "pinned" if media_url else "missing"})
        return SavedRecording(record=record, media_uploaded=media_url is not None)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_recordings(self, user_id: str, *, limit: int = 10, offset: int = 0) -> List[IncidentRecord]:
        """Return the user's records, newest first."""

        if not user_id:
            raise ValidationFailure("User ID is required")
        if limit < 1 or offset < 0:
            raise ValidationFailure("limit must be positive and offset non-negative")
        rows = self._store.list({"user_id": user_id}, order_by="created_at", limit=limit, offset=offset)
        return [_record_from_row(row) for row in rows]

    def delete_recording(self, record_id: str, user_id: str) -> None:
        """Delete a record owned by ``user_id``. Pinned media stays on IPFS."""

        if not record_id or not user_id:
            raise ValidationFailure("Record ID and User ID are required")
        existing = self._store.find_one(record_id=record_id, user_id=user_id)
        if existing is None:
            raise NotFoundError("Record not found or access denied")
        self._store.delete(record_id=record_id, user_id=user_id)
        LOGGER.info("Deleted incident record %s for user %s", record_id, user_id)


__all__ = ["RecordingService", "RecordingUpload", "SavedRecording"]
