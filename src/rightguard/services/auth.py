"""Identity records keyed by Farcaster handle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from rightguard.constants import DEFAULT_JURISDICTION, TABLES
from rightguard.errors import NotFoundError, ValidationFailure
from rightguard.models import User
from rightguard.observability import Observability, get_observability
from rightguard.services.factories import build_record_store
from rightguard.store.records import RecordStore

LOGGER = logging.getLogger(__name__)


class AuthService:
    """Create, update, and look up users by their social handle."""

    def __init__(self, *, store: Optional[RecordStore] = None, observability: Optional[Observability] = None) -> None:
        self._store = store or build_record_store(TABLES["users"])
        self._observability = observability or get_observability(component="auth")

    def create_or_update_user(self, farcaster_profile: str, selected_state: Optional[str] = None) -> Tuple[User, bool]:
        """Upsert a user by handle.

        Existing users keep their jurisdiction unless ``selected_state`` is given.
        New users start in the default jurisdiction with no entitlements.

        Returns:
            The stored user and ``True`` when it was newly created.
        """

        if not farcaster_profile:
            raise ValidationFailure("Farcaster profile is required")

        now = datetime.now(timezone.utc)
        existing = self._store.find_one(farcaster_profile=farcaster_profile)
        if existing:
            updated = self._store.update(
                existing["user_id"],
                {"selected_state": selected_state or existing["selected_state"], "updated_at": now},
            )
            if updated is None:
                raise NotFoundError("User not found")
            return User(**updated), False

        created = self._store.insert(
            {
                "user_id": str(uuid.uuid4()),
                "farcaster_profile": farcaster_profile,
                "selected_state": selected_state or DEFAULT_JURISDICTION,
                "premium_features": [],
                "created_at": now,
                "updated_at": now,
            }
        )
        self._observability.emit_event("user.created", user_id=created["user_id"])
        self._observability.increment("users.created")
        return User(**created), True

    def get_user(self, farcaster_profile: str) -> User:
        if not farcaster_profile:
            raise ValidationFailure("Farcaster profile is required")
        row = self._store.find_one(farcaster_profile=farcaster_profile)
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)


__all__ = ["AuthService"]
