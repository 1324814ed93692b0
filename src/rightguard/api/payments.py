"""FastAPI router for premium entitlements."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rightguard.api.responses import failure_boundary, ok
from rightguard.models import WireModel
from rightguard.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


class PurchaseRequest(WireModel):
    user_id: Optional[str] = None
    feature_key: Optional[str] = None
    tx_hash: Optional[str] = None
    amount: Optional[float] = None


class AccessRequest(WireModel):
    user_id: Optional[str] = None
    feature_key: Optional[str] = None


def get_service() -> PaymentService:
    return PaymentService()


@router.post("", summary="Unlock a premium feature after an on-chain payment")
def purchase_feature(payload: PurchaseRequest, service: PaymentService = Depends(get_service)):
    with failure_boundary("Payment processing failed"):
        result = service.purchase_feature(
            payload.user_id or "", payload.feature_key or "", payload.tx_hash or "", payload.amount
        )
    return ok(result, message=f"{result.unlocked_feature.name} unlocked successfully!")


@router.get("", summary="List unlocked and available premium features")
def list_entitlements(
    user_id: Optional[str] = Query(None, alias="userId"),
    service: PaymentService = Depends(get_service),
):
    with failure_boundary("Failed to fetch premium features"):
        listing = service.get_entitlements(user_id or "")
    return ok(listing)


@router.patch("", summary="Check whether a user holds a premium feature")
def validate_access(payload: AccessRequest, service: PaymentService = Depends(get_service)):
    with failure_boundary("Feature validation failed"):
        check = service.validate_access(payload.user_id or "", payload.feature_key or "")
    return ok(check)
