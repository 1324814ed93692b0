"""Unit tests for the generic RecordStore."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import sqlalchemy as sa

from rightguard.services.factories import build_record_store
from rightguard.store.records import RecordStore
from rightguard.store.sql import METADATA, incident_records, reset_session_factories


def _record(record_id: str, user_id: str, created_at: datetime) -> dict:
    return {
        "record_id": record_id,
        "user_id": user_id,
        "timestamp": created_at,
        "latitude": 37.0,
        "longitude": -120.0,
        "address": None,
        "media_url": None,
        "notes": None,
        "created_at": created_at,
    }


def test_insert_get_and_find_one(session_factory):
    store = RecordStore(incident_records, session_factory=session_factory)
    now = datetime.now(timezone.utc)

    created = store.insert(_record("rec-1", "user-1", now))

    assert created["record_id"] == "rec-1"
    assert store.get("rec-1")["user_id"] == "user-1"
    assert store.find_one(record_id="rec-1", user_id="user-1") is not None
    assert store.find_one(record_id="rec-1", user_id="user-2") is None
    assert store.get("missing") is None


def test_list_orders_and_paginates(session_factory):
    store = RecordStore(incident_records, session_factory=session_factory)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for index in range(5):
        store.insert(_record(f"rec-{index}", "user-1", base + timedelta(minutes=index)))
    store.insert(_record("other", "user-2", base))

    newest_first = store.list({"user_id": "user-1"}, order_by="created_at")
    assert [row["record_id"] for row in newest_first] == ["rec-4", "rec-3", "rec-2", "rec-1", "rec-0"]

    page = store.list({"user_id": "user-1"}, order_by="created_at", limit=2, offset=1)
    assert [row["record_id"] for row in page] == ["rec-3", "rec-2"]

    oldest_first = store.list({"user_id": "user-1"}, order_by="created_at", descending=False, limit=1)
    assert oldest_first[0]["record_id"] == "rec-0"


def test_update_and_delete(session_factory):
    store = RecordStore(incident_records, session_factory=session_factory)
    store.insert(_record("rec-1", "user-1", datetime.now(timezone.utc)))

    updated = store.update("rec-1", {"notes": "stopped at checkpoint"})
    assert updated["notes"] == "stopped at checkpoint"
    assert store.update("missing", {"notes": "x"}) is None

    assert store.delete(record_id="rec-1", user_id="user-2") == 0
    assert store.delete(record_id="rec-1", user_id="user-1") == 1
    assert store.get("rec-1") is None


def test_delete_without_filters_is_refused(session_factory):
    store = RecordStore(incident_records, session_factory=session_factory)
    with pytest.raises(ValueError):
        store.delete()


def test_unknown_filter_column_raises(session_factory):
    store = RecordStore(incident_records, session_factory=session_factory)
    with pytest.raises(KeyError):
        store.find_one(owner="user-1")


def test_composite_primary_key_is_rejected():
    table = sa.Table(
        "composite_example",
        sa.MetaData(),
        sa.Column("a", sa.String, primary_key=True),
        sa.Column("b", sa.String, primary_key=True),
    )
    with pytest.raises(ValueError):
        RecordStore(table, session_factory=lambda: None)


def test_json_columns_round_trip(record_stores):
    users = record_stores["users"]
    now = datetime.now(timezone.utc)
    users.insert(
        {
            "user_id": "user-1",
            "farcaster_profile": "alice",
            "selected_state": "Texas",
            "premium_features": ["stateSpecific"],
            "created_at": now,
            "updated_at": now,
        }
    )
    assert users.get("user-1")["premium_features"] == ["stateSpecific"]
    assert set(METADATA.tables) >= {"users", "legal_guides", "incident_records", "alert_logs", "purchase_logs"}


def test_record_stores_share_one_engine_per_database(tmp_path, monkeypatch):
    monkeypatch.setenv("RIGHTGUARD_DATABASE_URL", f"sqlite:///{(tmp_path / 'shared.db').as_posix()}")
    reset_session_factories()
    try:
        users = build_record_store("users")
        purchases = build_record_store("purchase_logs")

        assert users._session_factory is purchases._session_factory
    finally:
        reset_session_factories()
