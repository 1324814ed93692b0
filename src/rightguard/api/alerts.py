"""FastAPI router for emergency alerts."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from rightguard.api.responses import failure_boundary, ok
from rightguard.models import WireModel
from rightguard.services.alerts import AlertService

router = APIRouter(prefix="/alerts", tags=["alerts"])


class AlertRequest(WireModel):
    user_id: Optional[str] = None
    incident_record_id: Optional[str] = None
    recipients: List[str] = Field(default_factory=list)
    alert_type: str = "emergency"
    language: str = "en"
    location: Optional[str] = None
    custom_message: Optional[str] = None


class AlertStatusUpdate(WireModel):
    alert_id: Optional[str] = None
    status: Optional[str] = None


def get_service() -> AlertService:
    return AlertService()


@router.post("", summary="Send an alert to every recipient")
def send_alert(payload: AlertRequest, service: AlertService = Depends(get_service)):
    with failure_boundary("Failed to send alerts"):
        outcome = service.send_alert(
            payload.user_id or "",
            payload.recipients,
            payload.incident_record_id,
            alert_type=payload.alert_type,
            language=payload.language,
            location=payload.location,
            custom_message=payload.custom_message,
        )
    return ok(outcome.dispatch, message=outcome.message)


@router.get("", summary="List a user's alert logs, newest first")
def list_alerts(
    user_id: Optional[str] = Query(None, alias="userId"),
    incident_record_id: Optional[str] = Query(None, alias="incidentRecordId"),
    limit: int = Query(50),
    offset: int = Query(0),
    service: AlertService = Depends(get_service),
):
    with failure_boundary("Failed to fetch alerts"):
        alerts = service.get_alerts(user_id or "", incident_record_id, limit=limit, offset=offset)
    return ok(alerts)


@router.patch("", summary="Update the delivery status of an alert")
def update_alert_status(payload: AlertStatusUpdate, service: AlertService = Depends(get_service)):
    with failure_boundary("Failed to update alert status"):
        alert = service.update_alert_status(payload.alert_id or "", payload.status or "")
    return ok(alert, message="Alert status updated successfully")
