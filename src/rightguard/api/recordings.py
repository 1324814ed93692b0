"""FastAPI router exposing incident recording endpoints."""

from __future__ import annotations

import asyncio
import math
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from rightguard.api.responses import failure_boundary, ok
from rightguard.errors import ValidationFailure
from rightguard.models import Location
from rightguard.services.recordings import RecordingService, RecordingUpload

router = APIRouter(prefix="/recordings", tags=["recordings"])


def get_service() -> RecordingService:
    return RecordingService()


def _parse_coordinate(raw: Optional[str]) -> float:
    try:
        value = float(raw) if raw is not None else math.nan
    except ValueError:
        value = math.nan
    if math.isnan(value):
        raise ValidationFailure("Missing required fields")
    return value


@router.post("", summary="Save an incident recording")
async def save_recording(
    file: Optional[UploadFile] = File(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    service: RecordingService = Depends(get_service),
):
    if file is None or not user_id:
        raise ValidationFailure("Missing required fields")
    location = Location(
        latitude=_parse_coordinate(latitude),
        longitude=_parse_coordinate(longitude),
        address=address or None,
    )
    upload = RecordingUpload(
        file_name=file.filename or "recording.webm",
        data=await file.read(),
        content_type=file.content_type,
    )

    with failure_boundary("Failed to save recording"):
        saved = await asyncio.to_thread(service.save_recording, upload, user_id, location, notes)
    message = "Recording saved successfully"
    if not saved.media_uploaded:
        message = "Recording saved without media (upload failed)"
    return ok(saved.record, message=message)


@router.get("", summary="List a user's recordings, newest first")
def list_recordings(
    user_id: Optional[str] = Query(None, alias="userId"),
    limit: int = Query(10),
    offset: int = Query(0),
    service: RecordingService = Depends(get_service),
):
    with failure_boundary("Failed to fetch recordings"):
        records = service.get_recordings(user_id or "", limit=limit, offset=offset)
    return ok(records)


@router.delete("", summary="Delete a recording owned by the caller")
def delete_recording(
    record_id: Optional[str] = Query(None, alias="recordId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    service: RecordingService = Depends(get_service),
):
    with failure_boundary("Failed to delete recording"):
        service.delete_recording(record_id or "", user_id or "")
    return ok(message="Recording deleted successfully")
