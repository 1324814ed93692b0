"""Coarse jurisdiction detection and reverse geocoding for incident locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from rightguard.constants import DEFAULT_JURISDICTION
from rightguard.models import Location
from rightguard.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class JurisdictionBox:
    """Inclusive latitude/longitude rectangle mapped to a state name."""

    name: str
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


# Evaluated in order; the first matching box wins.
JURISDICTION_BOXES: Tuple[JurisdictionBox, ...] = (
    JurisdictionBox("California", 32.5, 42.0, -124.0, -114.0),
    JurisdictionBox("Florida", 25.8, 31.0, -87.0, -80.0),
    JurisdictionBox("Texas", 25.8, 36.5, -106.6, -93.5),
    JurisdictionBox("New York", 40.5, 45.0, -79.8, -71.8),
)


def detect_jurisdiction(
    latitude: float,
    longitude: float,
    *,
    boxes: Tuple[JurisdictionBox, ...] = JURISDICTION_BOXES,
    fallback: str = DEFAULT_JURISDICTION,
) -> str:
    """Return the first jurisdiction whose box contains the coordinates.

    Args:
        latitude: Decimal degrees north.
        longitude: Decimal degrees east (negative for the western hemisphere).
        boxes: Ordered bounding boxes. Overlaps resolve to the earliest entry.
        fallback: Jurisdiction returned when no box matches.
    """

    for box in boxes:
        if box.contains(latitude, longitude):
            return box.name
    return fallback


def reverse_geocode(
    latitude: float,
    longitude: float,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> Location:
    """Attach a human-readable address to coordinates when the lookup succeeds.

    A failed lookup is not an error: the location is returned without an
    address.
    """

    resolved = settings or get_settings()
    params = {"latitude": latitude, "longitude": longitude, "localityLanguage": "en"}
    owns_client = client is None
    http = client or httpx.Client(timeout=resolved.geocoding.timeout_seconds)
    try:
        response = http.get(resolved.geocoding.reverse_url, params=params)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError):
        LOGGER.warning("Reverse geocoding failed for %s, %s", latitude, longitude, exc_info=True)
        return Location(latitude=latitude, longitude=longitude)
    finally:
        if owns_client:
            http.close()

    address = payload.get("displayName") if isinstance(payload, dict) else None
    return Location(latitude=latitude, longitude=longitude, address=address or f"{latitude}, {longitude}")


__all__ = ["JURISDICTION_BOXES", "JurisdictionBox", "detect_jurisdiction", "reverse_geocode"]
