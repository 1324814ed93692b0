"""Tests for jurisdiction detection and reverse geocoding."""

from __future__ import annotations

import httpx
import pytest

from rightguard.settings import get_settings
from rightguard.util.geo import JurisdictionBox, detect_jurisdiction, reverse_geocode


@pytest.mark.parametrize(
    ("latitude", "longitude", "expected"),
    [
        (37.0, -120.0, "California"),
        (28.5, -81.4, "Florida"),
        (30.3, -97.7, "Texas"),
        (42.6, -73.8, "New York"),
        (32.5, -124.0, "California"),
        (42.0, -114.0, "California"),
    ],
)
def test_detect_jurisdiction_matches_boxes(latitude, longitude, expected):
    assert detect_jurisdiction(latitude, longitude) == expected


def test_detect_jurisdiction_falls_back_outside_every_box():
    assert detect_jurisdiction(0.0, 0.0) == "California"
    assert detect_jurisdiction(47.6, -122.3) == "California"
    assert detect_jurisdiction(47.6, -122.3, fallback="Washington") == "Washington"


def test_detect_jurisdiction_first_match_wins_on_overlap():
    boxes = (
        JurisdictionBox("First", 0.0, 10.0, 0.0, 10.0),
        JurisdictionBox("Second", 0.0, 10.0, 0.0, 10.0),
    )
    assert detect_jurisdiction(5.0, 5.0, boxes=boxes) == "First"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_reverse_geocode_uses_display_name():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"displayName": "Sacramento, CA"})

    location = reverse_geocode(38.58, -121.49, client=_client(handler), settings=get_settings())

    assert location.address == "Sacramento, CA"
    assert seen["params"]["latitude"] == "38.58"
    assert seen["params"]["localityLanguage"] == "en"


def test_reverse_geocode_without_display_name_uses_coordinates():
    location = reverse_geocode(
        38.5, -121.5, client=_client(lambda request: httpx.Response(200, json={})), settings=get_settings()
    )
    assert location.address == "38.5, -121.5"


def test_reverse_geocode_failure_returns_bare_location():
    location = reverse_geocode(
        38.5, -121.5, client=_client(lambda request: httpx.Response(503)), settings=get_settings()
    )
    assert location.latitude == 38.5
    assert location.longitude == -121.5
    assert location.address is None
