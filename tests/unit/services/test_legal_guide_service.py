"""Tests for cache-aside guide lookup."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from rightguard.errors import IntegrationError, ValidationFailure
from rightguard.services.guide_generator import GeneratedGuide
from rightguard.services.legal_guides import LegalGuideService


class _StubGenerator:
    def __init__(self, *, fail: bool = False) -> None:
        self.calls = []
        self.fail = fail

    def generate(self, state: str, language: str) -> GeneratedGuide:
        self.calls.append((state, language))
        if self.fail:
            raise IntegrationError("Failed to generate legal guide content")
        return GeneratedGuide(title=f"{state} guide", content="Know your rights.", script="I remain silent.")


class _FailingInsertStore:
    """Wraps a real store but refuses writes."""

    def __init__(self, inner) -> None:
        self._inner = inner

    def find_one(self, **filters):
        return self._inner.find_one(**filters)

    def insert(self, values):
        raise OperationalError("INSERT", {}, Exception("database is locked"))


def _seed_guide(store, state="Texas", language="en"):
    now = datetime.now(timezone.utc)
    store.insert(
        {
            "guide_id": "guide-1",
            "state": state,
            "language": language,
            "title": "Stored guide",
            "content": "Stored content",
            "script": "Stored script",
            "created_at": now,
            "updated_at": now,
        }
    )


def test_cached_guide_never_calls_generator(record_stores, observability):
    _seed_guide(record_stores["legal_guides"])
    generator = _StubGenerator()
    service = LegalGuideService(store=record_stores["legal_guides"], generator=generator, observability=observability)

    lookup = service.get_guide("Texas", "en")

    assert generator.calls == []
    assert lookup.cached is True
    assert lookup.generated is False
    assert lookup.message is None
    assert lookup.guide.title == "Stored guide"


def test_miss_generates_and_stores(record_stores, observability):
    generator = _StubGenerator()
    service = LegalGuideService(store=record_stores["legal_guides"], generator=generator, observability=observability)

    first = service.get_guide("Florida", "es")
    second = service.get_guide("Florida", "es")

    assert generator.calls == [("Florida", "es")]
    assert first.generated is True and first.cached is True
    assert first.message == "Guide generated and cached successfully"
    assert second.guide.guide_id == first.guide.guide_id
    assert "guide.generated" in observability.event_names()


def test_persistence_failure_still_returns_guide(record_stores, observability):
    generator = _StubGenerator()
    store = _FailingInsertStore(record_stores["legal_guides"])
    service = LegalGuideService(store=store, generator=generator, observability=observability)

    lookup = service.get_guide("Ohio", "en")

    assert lookup.cached is False
    assert lookup.guide.title == "Ohio guide"
    assert lookup.message == "Guide generated successfully (not cached)"


def test_generation_failure_propagates(record_stores, observability):
    service = LegalGuideService(
        store=record_stores["legal_guides"], generator=_StubGenerator(fail=True), observability=observability
    )
    with pytest.raises(IntegrationError):
        service.get_guide("Ohio", "en")
    assert record_stores["legal_guides"].list() == []


def test_lookup_validation(record_stores, observability):
    service = LegalGuideService(
        store=record_stores["legal_guides"], generator=_StubGenerator(), observability=observability
    )
    with pytest.raises(ValidationFailure):
        service.get_guide("", "en")
    with pytest.raises(ValidationFailure):
        service.get_guide("Ohio", "fr")


def test_create_guide_requires_all_fields(record_stores, observability):
    service = LegalGuideService(
        store=record_stores["legal_guides"], generator=_StubGenerator(), observability=observability
    )
    with pytest.raises(ValidationFailure, match="All fields are required"):
        service.create_guide("Ohio", "en", "Title", "", "Script")

    guide = service.create_guide("Ohio", "en", "Title", "Content", "Script")
    assert service.get_guide("Ohio", "en").guide.guide_id == guide.guide_id
