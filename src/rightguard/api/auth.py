"""FastAPI router for identity records."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rightguard.api.responses import failure_boundary, ok
from rightguard.models import WireModel
from rightguard.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


class AuthRequest(WireModel):
    farcaster_profile: Optional[str] = None
    selected_state: Optional[str] = None


def get_service() -> AuthService:
    return AuthService()


@router.post("", summary="Create or update a user by Farcaster handle")
def create_or_update_user(payload: AuthRequest, service: AuthService = Depends(get_service)):
    with failure_boundary("Authentication failed"):
        user, created = service.create_or_update_user(payload.farcaster_profile or "", payload.selected_state)
    return ok(user, message="User created successfully" if created else "User updated successfully")


@router.get("", summary="Fetch a user by Farcaster handle")
def get_user(
    farcaster_profile: Optional[str] = Query(None, alias="farcasterProfile"),
    service: AuthService = Depends(get_service),
):
    with failure_boundary("Failed to fetch user"):
        user = service.get_user(farcaster_profile or "")
    return ok(user)
