"""Factory helpers that instantiate core collaborators based on configuration.

These helpers centralize the logic for honoring the environment-specific
settings declared in :mod:`rightguard.settings`. Services call them for any
collaborator that was not injected, so API handlers and tests can swap in
their own implementations.
"""

from __future__ import annotations

import random
from typing import Dict, Optional

from rightguard.services.chain import TransactionVerifier
from rightguard.services.guide_generator import GuideGenerator
from rightguard.services.notifications import NotificationChannel, build_channels
from rightguard.settings import get_settings
from rightguard.storage import MediaStorage, PinataStorage
from rightguard.store.records import RecordStore
from rightguard.store.sql import METADATA
from rightguard.store.sql import session_factory as build_sql_session_factory


def build_record_store(table_name: str) -> RecordStore:
    """Return a :class:`RecordStore` for ``table_name`` on the configured engine.

    Raises:
        NotImplementedError: If the configured backend is not supported.
        KeyError: If the table is not part of the schema.
    """

    settings = get_settings()
    backend = settings.storage.structured_backend
    if backend not in {"sqlite", "postgres"}:
        raise NotImplementedError(f"Unsupported structured storage backend '{backend}'")

    table = METADATA.tables[table_name]
    return RecordStore(table, session_factory=build_sql_session_factory(settings=settings, create=settings.is_local))


def build_media_storage() -> MediaStorage:
    """Instantiate the media pinning backend."""

    return PinataStorage(settings=get_settings())


def build_guide_generator() -> GuideGenerator:
    """Return a :class:`GuideGenerator` for the configured LLM provider."""

    return GuideGenerator(settings=get_settings())


def build_transaction_verifier() -> TransactionVerifier:
    return TransactionVerifier(settings=get_settings())


def build_notification_channels(rng: Optional[random.Random] = None) -> Dict[str, NotificationChannel]:
    """Return the notification channels keyed by recipient kind."""

    return build_channels(settings=get_settings(), rng=rng)


__all__ = [
    "build_guide_generator",
    "build_media_storage",
    "build_notification_channels",
    "build_record_store",
    "build_transaction_verifier",
]
