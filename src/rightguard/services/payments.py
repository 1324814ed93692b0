"""Premium entitlements unlocked by on-chain payments."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from rightguard.constants import PREMIUM_FEATURES, TABLES
from rightguard.errors import NotFoundError, ValidationFailure
from rightguard.models import AccessCheck, EntitlementListing, PremiumFeature, PurchaseResult, User
from rightguard.observability import Observability, get_observability
from rightguard.services.chain import TransactionProofVerifier
from rightguard.services.factories import build_record_store, build_transaction_verifier
from rightguard.store.records import RecordStore

LOGGER = logging.getLogger(__name__)


def premium_feature(feature_key: str) -> Optional[PremiumFeature]:
    """Return the catalogue entry for ``feature_key`` or ``None``."""

    entry = PREMIUM_FEATURES.get(feature_key)
    if entry is None:
        return None
    return PremiumFeature(key=feature_key, **entry)


def list_premium_features() -> List[PremiumFeature]:
    return [PremiumFeature(key=key, **entry) for key, entry in PREMIUM_FEATURES.items()]


class PaymentService:
    """Validate purchases and append entitlements to users."""

    def __init__(
        self,
        *,
        users: Optional[RecordStore] = None,
        purchases: Optional[RecordStore] = None,
        verifier: Optional[TransactionProofVerifier] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._users = users or build_record_store(TABLES["users"])
        self._purchases = purchases or build_record_store(TABLES["purchase_logs"])
        self._verifier = verifier or build_transaction_verifier()
        self._observability = observability or get_observability(component="payments")

    def _load_user(self, user_id: str) -> User:
        row = self._users.get(user_id)
        if row is None:
            raise NotFoundError("User not found")
        return User(**row)

    def purchase_feature(self, user_id: str, feature_key: str, tx_hash: str, amount: Optional[float]) -> PurchaseResult:
        """Unlock ``feature_key`` for ``user_id`` once the payment checks pass.

        Checks run in order and the first failure is raised: required fields,
        known feature, exact price match, transaction proof, user exists,
        feature not already held. A failed check leaves the user untouched.
        """

        if not user_id or not feature_key or not tx_hash or not amount:
            raise ValidationFailure("Missing required fields")

        feature = premium_feature(feature_key)
        if feature is None:
            raise ValidationFailure("Invalid feature")
        if amount != feature.price:
            raise ValidationFailure("Amount mismatch")
        with self._observability.timed("payments.verify_ms"):
            verified = self._verifier.verify(tx_hash, amount)
        if not verified:
            raise ValidationFailure("Transaction verification failed")

        user = self._load_user(user_id)
        if user.has_feature(feature_key):
            raise ValidationFailure("Feature already unlocked")

        now = datetime.now(timezone.utc)
        updated = self._users.update(
            user_id,
            {"premium_features": [*user.premium_features, feature_key], "updated_at": now},
        )
        if updated is None:
            raise NotFoundError("User not found")

        try:
            self._purchases.insert(
                {
                    "purchase_id": str(uuid.uuid4()),
                    "user_id": user_id,
                    "feature_key": feature_key,
                    "amount": amount,
                    "tx_hash": tx_hash,
                    "created_at": now,
                }
            )
        except SQLAlchemyError:
            LOGGER.exception("Failed to write purchase log for user %s feature %s", user_id, feature_key)

        self._observability.emit_event("entitlement.granted", user_id=user_id, feature_key=feature_key)
        self._observability.increment("entitlements.granted", tags={"feature": feature_key})
        return PurchaseResult(user=User(**updated), unlocked_feature=feature)

    def get_entitlements(self, user_id: str) -> EntitlementListing:
        if not user_id:
            raise ValidationFailure("User ID is required")
        user = self._load_user(user_id)
        unlocked: List[PremiumFeature] = []
        for key in user.premium_features:
            feature = premium_feature(key)
            if feature is None:
                LOGGER.warning("User %s holds unknown entitlement %s", user_id, key)
                continue
            unlocked.append(feature)
        available = [feature for feature in list_premium_features() if not user.has_feature(feature.key)]
        return EntitlementListing(unlocked=unlocked, available=available)

    def validate_access(self, user_id: str, feature_key: str) -> AccessCheck:
        if not user_id or not feature_key:
            raise ValidationFailure("User ID and feature key are required")
        user = self._load_user(user_id)
        return AccessCheck(has_access=user.has_feature(feature_key), feature=premium_feature(feature_key))


__all__ = ["PaymentService", "list_premium_features", "premium_feature"]
