"""Pydantic models shared by the Right Guard API, services, and client core.

Attributes are snake_case in Python and camelCase on the wire (``userId``,
``farcasterProfile``, ``premiumFeatures`` ...). Use :meth:`WireModel.to_wire`
to produce JSON-ready payloads with the wire names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from rightguard.constants import DEFAULT_JURISDICTION

Language = Literal["en", "es"]
AlertStatus = Literal["sent", "delivered", "failed"]
AlertType = Literal["emergency", "recording", "followUp"]

T = TypeVar("T")


class WireModel(BaseModel):
    """Base model that accepts either field names or camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class User(WireModel):
    """Identity record keyed by a Farcaster handle."""

    user_id: str
    farcaster_profile: Optional[str] = None
    selected_state: str = DEFAULT_JURISDICTION
    premium_features: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("premium_features", mode="before")
    @classmethod
    def _coerce_features(cls, value: Any) -> List[str]:
        if value is None:
            return []
        return list(value)

    def has_feature(self, feature_key: str) -> bool:
        return feature_key in self.premium_features


class LegalGuide(WireModel):
    """State and language specific rights guide."""

    guide_id: str
    state: str
    language: Language
    title: str
    content: str
    script: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Location(WireModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class IncidentRecord(WireModel):
    """A saved incident recording and where it happened."""

    record_id: str
    user_id: str
    timestamp: datetime
    location: Location
    media_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class AlertLog(WireModel):
    """One delivery attempt to one recipient."""

    alert_id: str
    user_id: str
    incident_record_id: str = ""
    recipient: str
    timestamp: datetime
    status: AlertStatus
    created_at: Optional[datetime] = None


class PurchaseLog(WireModel):
    purchase_id: str
    user_id: str
    feature_key: str
    amount: float
    tx_hash: str
    created_at: Optional[datetime] = None


class PremiumFeature(WireModel):
    """Catalogue entry for a purchasable entitlement."""

    key: str
    name: str
    price: float
    description: str


class AlertSummary(WireModel):
    total: int
    successful: int
    failed: int


class AlertDispatch(WireModel):
    """Result of a send-alert call: every log row plus delivery counts."""

    alerts: List[AlertLog]
    summary: AlertSummary


class PurchaseResult(WireModel):
    user: User
    unlocked_feature: PremiumFeature


class EntitlementListing(WireModel):
    unlocked: List[PremiumFeature] = Field(default_factory=list)
    available: List[PremiumFeature] = Field(default_factory=list)


class AccessCheck(WireModel):
    has_access: bool
    feature: Optional[PremiumFeature] = None


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope returned by every API operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = Field(default=None, exclude=True)


__all__ = [
    "AccessCheck",
    "AlertDispatch",
    "AlertLog",
    "AlertStatus",
    "AlertSummary",
    "AlertType",
    "ApiResponse",
    "EntitlementListing",
    "IncidentRecord",
    "Language",
    "LegalGuide",
    "Location",
    "PremiumFeature",
    "PurchaseLog",
    "PurchaseResult",
    "User",
    "WireModel",
]
