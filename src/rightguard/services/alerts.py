"""Templated emergency alerts fanned out to notification channels."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from rightguard.constants import ALERT_STATUSES, ALERT_TEMPLATES, ALERT_TYPES, LANGUAGES, LOCATION_UNAVAILABLE, TABLES
from rightguard.errors import NotFoundError, ValidationFailure
from rightguard.models import AlertDispatch, AlertLog, AlertSummary
from rightguard.observability import Observability, get_observability
from rightguard.services.factories import build_notification_channels, build_record_store
from rightguard.services.notifications import NotificationChannel
from rightguard.store.records import RecordStore
from rightguard.util.contacts import classify_recipient

LOGGER = logging.getLogger(__name__)

TIME_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


@dataclass
class AlertOutcome:
    dispatch: AlertDispatch

    @property
    def message(self) -> str:
        summary = self.dispatch.summary
        return f"Alerts sent: {summary.successful} successful, {summary.failed} failed"


def render_alert_message(
    alert_type: str,
    language: str,
    *,
    location: Optional[str] = None,
    custom_message: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Fill the ``{location}`` and ``{time}`` placeholders of a template or custom message."""

    base = custom_message or ALERT_TEMPLATES[language][alert_type]
    moment = now or datetime.now()
    return base.replace("{location}", location or LOCATION_UNAVAILABLE, 1).replace(
        "{time}", moment.strftime(TIME_FORMAT), 1
    )


class AlertService:
    """Send one alert per recipient and keep a log row for every attempt."""

    def __init__(
        self,
        *,
        store: Optional[RecordStore] = None,
        channels: Optional[Dict[str, NotificationChannel]] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._store = store or build_record_store(TABLES["alert_logs"])
        self._channels = channels if channels is not None else build_notification_channels()
        self._observability = observability or get_observability(component="alerts")

    def send_alert(
        self,
        user_id: str,
        recipients: Sequence[str],
        incident_record_id: Optional[str] = None,
        *,
        alert_type: str = "emergency",
        language: str = "en",
        location: Optional[str] = None,
        custom_message: Optional[str] = None,
    ) -> AlertOutcome:
        """Deliver the alert to each recipient sequentially, in input order.

        Every recipient yields exactly one :class:`AlertLog`, whatever the
        channel outcome. A log row that cannot be persisted is still returned.
        """

        if not user_id or not recipients:
            raise ValidationFailure("User ID and recipients are required")
        if language not in LANGUAGES:
            raise ValidationFailure(f"Unsupported language '{language}'")
        if alert_type not in ALERT_TYPES:
            raise ValidationFailure(f"Invalid alert type '{alert_type}'")

        message = render_alert_message(alert_type, language, location=location, custom_message=custom_message)
        logs: List[AlertLog] = []
        for recipient in recipients:
            status = "delivered" if self._deliver(recipient, message) else "failed"
            now = datetime.now(timezone.utc)
            log = AlertLog(
                alert_id=str(uuid.uuid4()),
                user_id=user_id,
                incident_record_id=incident_record_id or "",
                recipient=recipient,
                timestamp=now,
                status=status,
                created_at=now,
            )
            try:
                log = AlertLog(**self._store.insert(log.model_dump()))
            except SQLAlchemyError:
                LOGGER.exception("Failed to save alert log for recipient %s", recipient)
            logs.append(log)

        successful = sum(1 for log in logs if log.status == "delivered")
        failed = sum(1 for log in logs if log.status == "failed")
        dispatch = AlertDispatch(
            alerts=logs,
            summary=AlertSummary(total=len(recipients), successful=successful, failed=failed),
        )
        self._observability.emit_event(
            "alert.dispatched", user_id=user_id, alert_type=alert_type, successful=successful, failed=failed
        )
        self._observability.increment("alerts.delivered", value=successful)
        self._observability.increment("alerts.failed", value=failed)
        return AlertOutcome(dispatch=dispatch)

    def _deliver(self, recipient: str, message: str) -> bool:
        kind = classify_recipient(recipient)
        channel = self._channels.get(kind)
        if channel is None:
            LOGGER.warning("No %s channel configured for recipient %s", kind, recipient)
            return False
        try:
            return bool(channel.send(recipient, message))
        except Exception:
            LOGGER.exception("Failed to send alert to %s", recipient)
            return False

    # ------------------------------------------------------------------
    # Queries and status updates
    # ------------------------------------------------------------------
    def get_alerts(
        self,
        user_id: str,
        incident_record_id: Optional[str] = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AlertLog]:
        """Return the user's alert logs, newest first."""

        if not user_id:
            raise ValidationFailure("User ID is required")
        if limit < 1 or offset < 0:
            raise ValidationFailure("limit must be positive and offset non-negative")
        filters = {"user_id": user_id}
        if incident_record_id:
            filters["incident_record_id"] = incident_record_id
        rows = self._store.list(filters, order_by="created_at", limit=limit, offset=offset)
        return [AlertLog(**row) for row in rows]

    def update_alert_status(self, alert_id: str, status: str) -> AlertLog:
        if not alert_id or not status:
            raise ValidationFailure("Alert ID and status are required")
        if status not in ALERT_STATUSES:
            raise ValidationFailure(f"Invalid alert status '{status}'")
        row = self._store.update(alert_id, {"status": status})
        if row is None:
            raise NotFoundError("Alert not found")
        return AlertLog(**row)


__all__ = ["AlertOutcome", "AlertService", "render_alert_message"]
