"""Shared fixtures for Right Guard unit tests."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

import pytest
import sqlalchemy as sa
from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker

from rightguard.api import alerts as alerts_api
from rightguard.api import auth as auth_api
from rightguard.api import legal_guides as guides_api
from rightguard.api import payments as payments_api
from rightguard.api import recordings as recordings_api
from rightguard.api.app import create_app
from rightguard.errors import IntegrationError
from rightguard.services.alerts import AlertService
from rightguard.services.auth import AuthService
from rightguard.services.guide_generator import GeneratedGuide
from rightguard.services.legal_guides import LegalGuideService
from rightguard.services.payments import PaymentService
from rightguard.services.recordings import RecordingService
from rightguard.storage import PinnedMedia
from rightguard.store.records import RecordStore
from rightguard.store.sql import METADATA, create_schema


class StubObservability:
    """Collects emitted events and metrics instead of logging them."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.metrics: List[Tuple[str, float]] = []

    def emit_event(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def increment(self, metric: str, *, value: float = 1.0, tags: Any = None) -> None:
        self.metrics.append((metric, value))

    @contextmanager
    def timed(self, metric: str, *, tags: Any = None) -> Iterator[None]:
        yield
        self.metrics.append((metric, 0.0))

    def event_names(self) -> List[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def session_factory(tmp_path) -> sessionmaker:
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'rightguard.db'}", future=True)
    create_schema(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def record_stores(session_factory) -> Dict[str, RecordStore]:
    return {name: RecordStore(table, session_factory=session_factory) for name, table in METADATA.tables.items()}


@pytest.fixture
def observability() -> StubObservability:
    return StubObservability()


class StubGuideGenerator:
    def __init__(self) -> None:
        self.fail = False

    def generate(self, state: str, language: str) -> GeneratedGuide:
        if self.fail:
            raise IntegrationError("model offline")
        return GeneratedGuide(title=f"{state} Legal Rights Guide", content="Stay calm.", script="I remain silent.")


class StubMediaStorage:
    def __init__(self) -> None:
        self.fail = False

    def pin(self, file_name: str, data: bytes, content_type: str | None) -> PinnedMedia:
        if self.fail:
            raise IntegrationError("IPFS upload failed")
        return PinnedMedia(
            content_hash="QmHash", url="https://gateway/ipfs/QmHash", file_name=file_name, size_bytes=len(data)
        )


class AlwaysDeliverChannel:
    def __init__(self, kind: str) -> None:
        self.kind = kind

    def send(self, recipient: str, message: str) -> bool:
        return True


class PrefixVerifier:
    """Accepts any transaction hash that starts with ``0x``."""

    def verify(self, tx_hash: str, expected_amount: float) -> bool:
        return tx_hash.startswith("0x")


@pytest.fixture
def stubs() -> Dict[str, Any]:
    return {"generator": StubGuideGenerator(), "media": StubMediaStorage()}


@pytest.fixture
def wired_app(record_stores, observability, stubs) -> Iterator[FastAPI]:
    """The API app with every router bound to the temporary database and stubbed integrations."""

    app = create_app()
    app.dependency_overrides[auth_api.get_service] = lambda: AuthService(
        store=record_stores["users"], observability=observability
    )
    app.dependency_overrides[guides_api.get_service] = lambda: LegalGuideService(
        store=record_stores["legal_guides"], generator=stubs["generator"], observability=observability
    )
    app.dependency_overrides[recordings_api.get_service] = lambda: RecordingService(
        store=record_stores["incident_records"], media_storage=stubs["media"], observability=observability
    )
    app.dependency_overrides[alerts_api.get_service] = lambda: AlertService(
        store=record_stores["alert_logs"],
        channels={kind: AlwaysDeliverChannel(kind) for kind in ("sms", "social", "email")},
        observability=observability,
    )
    app.dependency_overrides[payments_api.get_service] = lambda: PaymentService(
        users=record_stores["users"],
        purchases=record_stores["purchase_logs"],
        verifier=PrefixVerifier(),
        observability=observability,
    )
    yield app
    app.dependency_overrides.clear()
