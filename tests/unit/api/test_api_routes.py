"""End-to-end tests for the Right Guard routers over real services and stubbed integrations."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from rightguard.api import recordings as recordings_api
from rightguard.models import IncidentRecord
from rightguard.services.recordings import SavedRecording


@pytest.fixture
def client(wired_app):
    with TestClient(wired_app) as test_client:
        yield test_client


def _create_user(client, handle="alice", state=None) -> dict:
    payload = {"farcasterProfile": handle}
    if state:
        payload["selectedState"] = state
    return client.post("/api/auth", json=payload).json()["data"]


def test_health(client):
    body = client.get("/health").json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"


def test_auth_upsert_and_fetch(client):
    created = client.post("/api/auth", json={"farcasterProfile": "alice"})
    assert created.status_code == 200
    assert created.json()["message"] == "User created successfully"
    user = created.json()["data"]
    assert user["selectedState"] == "California"
    assert user["premiumFeatures"] == []

    updated = client.post("/api/auth", json={"farcasterProfile": "alice", "selectedState": "Texas"})
    assert updated.json()["message"] == "User updated successfully"
    assert updated.json()["data"]["userId"] == user["userId"]

    fetched = client.get("/api/auth", params={"farcasterProfile": "alice"}).json()
    assert fetched["data"]["selectedState"] == "Texas"


def test_auth_errors(client):
    missing = client.post("/api/auth", json={})
    assert missing.status_code == 400
    assert missing.json() == {"success": False, "error": "Farcaster profile is required"}

    unknown = client.get("/api/auth", params={"farcasterProfile": "nobody"})
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "User not found"


def test_guide_generated_then_cached(client):
    first = client.get("/api/legal-guides", params={"state": "Ohio", "language": "en"}).json()
    assert first["message"] == "Guide generated and cached successfully"
    assert first["data"]["title"] == "Ohio Legal Rights Guide"

    second = client.get("/api/legal-guides", params={"state": "Ohio", "language": "en"}).json()
    assert "message" not in second
    assert second["data"]["guideId"] == first["data"]["guideId"]


def test_guide_errors(client, stubs):
    missing = client.get("/api/legal-guides", params={"state": "Ohio"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "State and language are required"

    stubs["generator"].fail = True
    failed = client.get("/api/legal-guides", params={"state": "Iowa", "language": "en"})
    assert failed.status_code == 500
    assert failed.json() == {"success": False, "error": "Failed to fetch legal guide"}


def test_create_guide(client):
    payload = {"state": "Maine", "language": "es", "title": "T", "content": "C", "script": "S"}
    created = client.post("/api/legal-guides", json=payload).json()
    assert created["message"] == "Legal guide created successfully"

    fetched = client.get("/api/legal-guides", params={"state": "Maine", "language": "es"}).json()
    assert fetched["data"]["title"] == "T"

    incomplete = client.post("/api/legal-guides", json={"state": "Maine"})
    assert incomplete.status_code == 400
    assert incomplete.json()["error"] == "All fields are required"


def test_recording_lifecycle(client, stubs):
    user = _create_user(client)
    form = {"userId": user["userId"], "latitude": "34.05", "longitude": "-118.24", "notes": "traffic stop"}
    files = {"file": ("clip.webm", b"bytes", "audio/webm")}

    saved = client.post("/api/recordings", data=form, files=files).json()
    assert saved["message"] == "Recording saved successfully"
    record = saved["data"]
    assert record["mediaUrl"] == "https://gateway/ipfs/QmHash"
    assert record["location"]["latitude"] == 34.05

    stubs["media"].fail = True
    degraded = client.post("/api/recordings", data=form, files=files).json()
    assert degraded["message"] == "Recording saved without media (upload failed)"
    assert degraded["data"].get("mediaUrl") is None

    listing = client.get("/api/recordings", params={"userId": user["userId"], "limit": 1}).json()
    assert len(listing["data"]) == 1

    denied = client.delete("/api/recordings", params={"recordId": record["recordId"], "userId": "someone-else"})
    assert denied.status_code == 404
    assert denied.json()["error"] == "Record not found or access denied"

    deleted = client.delete("/api/recordings", params={"recordId": record["recordId"], "userId": user["userId"]})
    assert deleted.json() == {"success": True, "message": "Recording deleted successfully"}


def test_recording_requires_fields(client):
    files = {"file": ("clip.webm", b"bytes", "audio/webm")}

    no_coordinates = client.post("/api/recordings", data={"userId": "u"}, files=files)
    assert no_coordinates.status_code == 400
    assert no_coordinates.json()["error"] == "Missing required fields"

    bad_latitude = client.post("/api/recordings", data={"userId": "u", "latitude": "north", "longitude": "1"}, files=files)
    assert bad_latitude.status_code == 400

    no_file = client.post("/api/recordings", data={"userId": "u", "latitude": "1", "longitude": "1"})
    assert no_file.status_code == 400


def test_invalid_query_types_use_the_envelope(client):
    response = client.get("/api/recordings", params={"userId": "u", "limit": "many"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request")


def test_alert_send_list_and_update(client):
    payload = {
        "userId": "user-1",
        "recipients": ["5551234567", "@friend", "a@example.com"],
        "alertType": "recording",
        "location": "Main St",
    }
    sent = client.post("/api/alerts", json=payload).json()
    assert sent["message"] == "Alerts sent: 3 successful, 0 failed"
    assert sent["data"]["summary"] == {"total": 3, "successful": 3, "failed": 0}
    alert_id = sent["data"]["alerts"][0]["alertId"]

    listing = client.get("/api/alerts", params={"userId": "user-1"}).json()
    assert len(listing["data"]) == 3

    updated = client.patch("/api/alerts", json={"alertId": alert_id, "status": "failed"}).json()
    assert updated["data"]["status"] == "failed"

    missing = client.patch("/api/alerts", json={"alertId": "nope", "status": "sent"})
    assert missing.status_code == 404


def test_alert_rejects_unknown_type(client):
    response = client.post("/api/alerts", json={"userId": "u", "recipients": ["5551234567"], "alertType": "panic"})
    assert response.status_code == 400


def test_premium_purchase_flow(client):
    user = _create_user(client)

    listing = client.get("/api/payments", params={"userId": user["userId"]}).json()["data"]
    assert listing["unlocked"] == []
    assert len(listing["available"]) == 3

    purchase = {"userId": user["userId"], "featureKey": "stateSpecific", "txHash": "0xabc", "amount": 0.99}
    result = client.post("/api/payments", json=purchase).json()
    assert result["message"] == "State-Specific Scripts unlocked successfully!"
    assert result["data"]["user"]["premiumFeatures"] == ["stateSpecific"]

    again = client.post("/api/payments", json=purchase)
    assert again.status_code == 400
    assert again.json()["error"] == "Feature already unlocked"

    access = client.patch("/api/payments", json={"userId": user["userId"], "featureKey": "stateSpecific"}).json()
    assert access["data"]["hasAccess"] is True


def test_premium_purchase_rejections(client):
    user = _create_user(client)
    base = {"userId": user["userId"], "featureKey": "enhancedRecording", "txHash": "0xabc"}

    mismatch = client.post("/api/payments", json={**base, "amount": 0.99})
    assert mismatch.json()["error"] == "Amount mismatch"

    unverified = client.post("/api/payments", json={**base, "txHash": "bogus", "amount": 1.99})
    assert unverified.json()["error"] == "Transaction verification failed"

    unknown_user = client.post("/api/payments", json={**base, "userId": "ghost", "amount": 1.99})
    assert unknown_user.status_code == 404


def test_recording_upload_runs_off_the_event_loop(wired_app):
    seen = {}

    class _LoopCheckingService:
        def save_recording(self, upload, user_id, location, notes=None):
            try:
                asyncio.get_running_loop()
                seen["on_loop"] = True
            except RuntimeError:
                seen["on_loop"] = False
            record = IncidentRecord(
                record_id="rec-1", user_id=user_id, timestamp=datetime.now(timezone.utc), location=location
            )
            return SavedRecording(record=record, media_uploaded=False)

    wired_app.dependency_overrides[recordings_api.get_service] = lambda: _LoopCheckingService()
    form = {"userId": "u", "latitude": "1", "longitude": "2"}
    files = {"file": ("clip.webm", b"bytes", "audio/webm")}
    with TestClient(wired_app) as test_client:
        body = test_client.post("/api/recordings", data=form, files=files).json()

    assert body["success"] is True
    assert seen["on_loop"] is False
