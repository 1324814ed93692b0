"""Client-side domain services: request shaping over :class:`ApiGateway`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from rightguard.client.gateway import ApiGateway
from rightguard.errors import ApiError, NotFoundError
from rightguard.models import (
    AccessCheck,
    AlertDispatch,
    AlertLog,
    ApiResponse,
    EntitlementListing,
    IncidentRecord,
    LegalGuide,
    Location,
    PurchaseResult,
    User,
)


def _unwrap(envelope: ApiResponse[Any], fallback: str) -> Any:
    """Return ``envelope.data`` or raise the matching client error."""

    if envelope.success:
        return envelope.data
    message = envelope.error or fallback
    if envelope.status_code == 404:
        raise NotFoundError(message)
    raise ApiError(message, status_code=envelope.status_code or 500)


class _GatewayClient:
    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway


class AuthClient(_GatewayClient):
    def create_or_update_user(self, farcaster_profile: str, selected_state: Optional[str] = None) -> User:
        payload = {"farcasterProfile": farcaster_profile, "selectedState": selected_state}
        envelope = self._gateway.request("/auth", "POST", json=payload)
        return User.model_validate(_unwrap(envelope, "Authentication failed"))

    def get_user(self, farcaster_profile: str) -> User:
        """Fetch a user; raises :class:`NotFoundError` when the handle is unknown."""

        envelope = self._gateway.request("/auth", params={"farcasterProfile": farcaster_profile})
        return User.model_validate(_unwrap(envelope, "Failed to fetch user"))


class LegalGuideClient(_GatewayClient):
    def get_guide(self, state: str, language: str) -> LegalGuide:
        envelope = self._gateway.request("/legal-guides", params={"state": state, "language": language})
        return LegalGuide.model_validate(_unwrap(envelope, "Failed to fetch legal guide"))

    def create_guide(self, *, state: str, language: str, title: str, content: str, script: str) -> LegalGuide:
        payload = {"state": state, "language": language, "title": title, "content": content, "script": script}
        envelope = self._gateway.request("/legal-guides", "POST", json=payload)
        return LegalGuide.model_validate(_unwrap(envelope, "Failed to create legal guide"))


class RecordingClient(_GatewayClient):
    def save_recording(
        self,
        media: bytes,
        user_id: str,
        location: Location,
        notes: Optional[str] = None,
        *,
        file_name: str = "recording.webm",
        content_type: str = "video/webm",
    ) -> IncidentRecord:
        form: Dict[str, str] = {
            "userId": user_id,
            "latitude": str(location.latitude),
            "longitude": str(location.longitude),
        }
        if location.address:
            form["address"] = location.address
        if notes:
            form["notes"] = notes
        files = {"file": (file_name, media, content_type)}
        envelope = self._gateway.request("/recordings", "POST", data=form, files=files)
        return IncidentRecord.model_validate(_unwrap(envelope, "Failed to save recording"))

    def get_recordings(self, user_id: str, limit: int = 10, offset: int = 0) -> List[IncidentRecord]:
        params = {"userId": user_id, "limit": limit, "offset": offset}
        envelope = self._gateway.request("/recordings", params=params)
        return [IncidentRecord.model_validate(item) for item in _unwrap(envelope, "Failed to fetch recordings") or []]

    def delete_recording(self, record_id: str, user_id: str) -> None:
        envelope = self._gateway.request("/recordings", "DELETE", params={"recordId": record_id, "userId": user_id})
        _unwrap(envelope, "Failed to delete recording")


class AlertClient(_GatewayClient):
    def send_alert(
        self,
        user_id: str,
        recipients: Sequence[str],
        *,
        incident_record_id: Optional[str] = None,
        alert_type: str = "emergency",
        language: str = "en",
        location: Optional[str] = None,
        custom_message: Optional[str] = None,
    ) -> AlertDispatch:
        payload = {
            "userId": user_id,
            "recipients": list(recipients),
            "incidentRecordId": incident_record_id,
            "alertType": alert_type,
            "language": language,
            "location": location,
            "customMessage": custom_message,
        }
        envelope = self._gateway.request("/alerts", "POST", json=payload)
        return AlertDispatch.model_validate(_unwrap(envelope, "Failed to send alerts"))

    def get_alerts(
        self, user_id: str, incident_record_id: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> List[AlertLog]:
        params = {"userId": user_id, "incidentRecordId": incident_record_id, "limit": limit, "offset": offset}
        envelope = self._gateway.request("/alerts", params=params)
        return [AlertLog.model_validate(item) for item in _unwrap(envelope, "Failed to fetch alerts") or []]

    def update_alert_status(self, alert_id: str, status: str) -> AlertLog:
        envelope = self._gateway.request("/alerts", "PATCH", json={"alertId": alert_id, "status": status})
        return AlertLog.model_validate(_unwrap(envelope, "Failed to update alert status"))


class PaymentClient(_GatewayClient):
    def purchase_feature(self, user_id: str, feature_key: str, tx_hash: str, amount: float) -> PurchaseResult:
        payload = {"userId": user_id, "featureKey": feature_key, "txHash": tx_hash, "amount": amount}
        envelope = self._gateway.request("/payments", "POST", json=payload)
        return PurchaseResult.model_validate(_unwrap(envelope, "Payment processing failed"))

    def get_entitlements(self, user_id: str) -> EntitlementListing:
        envelope = self._gateway.request("/payments", params={"userId": user_id})
        return EntitlementListing.model_validate(_unwrap(envelope, "Failed to fetch premium features"))

    def validate_access(self, user_id: str, feature_key: str) -> AccessCheck:
        envelope = self._gateway.request("/payments", "PATCH", json={"userId": user_id, "featureKey": feature_key})
        return AccessCheck.model_validate(_unwrap(envelope, "Feature validation failed"))


@dataclass
class RightGuardServices:
    """The five client services sharing one gateway."""

    auth: AuthClient
    legal_guides: LegalGuideClient
    recordings: RecordingClient
    alerts: AlertClient
    payments: PaymentClient

    @classmethod
    def from_gateway(cls, gateway: ApiGateway) -> "RightGuardServices":
        return cls(
            auth=AuthClient(gateway),
            legal_guides=LegalGuideClient(gateway),
            recordings=RecordingClient(gateway),
            alerts=AlertClient(gateway),
            payments=PaymentClient(gateway),
        )


__all__ = [
    "AlertClient",
    "AuthClient",
    "LegalGuideClient",
    "PaymentClient",
    "RecordingClient",
    "RightGuardServices",
]
