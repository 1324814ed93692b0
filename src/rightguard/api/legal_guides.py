"""FastAPI router for legal rights guides."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rightguard.api.responses import failure_boundary, ok
from rightguard.models import WireModel
from rightguard.services.legal_guides import LegalGuideService

router = APIRouter(prefix="/legal-guides", tags=["legal-guides"])


class GuideCreateRequest(WireModel):
    state: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    script: Optional[str] = None


def get_service() -> LegalGuideService:
    return LegalGuideService()


@router.get("", summary="Fetch or generate the guide for a state and language")
def get_guide(
    state: Optional[str] = Query(None),
    language: Optional[str] = Query(None),
    service: LegalGuideService = Depends(get_service),
):
    with failure_boundary("Failed to fetch legal guide"):
        lookup = service.get_guide(state or "", language or "")
    return ok(lookup.guide, message=lookup.message)


@router.post("", summary="Store a curated legal guide")
def create_guide(payload: GuideCreateRequest, service: LegalGuideService = Depends(get_service)):
    with failure_boundary("Failed to create legal guide"):
        guide = service.create_guide(
            payload.state or "",
            payload.language or "",
            payload.title or "",
            payload.content or "",
            payload.script or "",
        )
    return ok(guide, message="Legal guide created successfully")
