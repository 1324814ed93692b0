"""Notification channels used to deliver emergency alerts."""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Protocol

from rightguard.settings import Settings, get_settings
from rightguard.util.contacts import RecipientKind

LOGGER = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Deliver one message to one recipient and report success."""

    kind: RecipientKind

    def send(self, recipient: str, message: str) -> bool: ...


class SimulatedChannel:
    """Log the message and succeed unless the configured failure probability triggers.

    No SMS, Farcaster, or email provider is wired up; delivery outcomes are
    drawn from ``rng`` so tests can seed or replace it.
    """

    def __init__(self, kind: RecipientKind, *, failure_rate: float = 0.0, rng: Optional[random.Random] = None) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        self.kind = kind
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    def send(self, recipient: str, message: str) -> bool:
        target = recipient[1:] if self.kind == "social" and recipient.startswith("@") else recipient
        LOGGER.info("Simulated %s notification to %s: %s", self.kind, target, message)
        if self.failure_rate <= 0.0:
            return True
        return self._rng.random() >= self.failure_rate

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"SimulatedChannel(kind={self.kind!r}, failure_rate={self.failure_rate})"


def build_channels(
    *, settings: Settings | None = None, rng: Optional[random.Random] = None
) -> Dict[RecipientKind, NotificationChannel]:
    """Return one simulated channel per recipient kind using configured failure rates."""

    resolved = settings or get_settings()
    rates = resolved.notifications
    shared_rng = rng or random.Random()
    return {
        "sms": SimulatedChannel("sms", failure_rate=rates.sms_failure_rate, rng=shared_rng),
        "social": SimulatedChannel("social", failure_rate=rates.social_failure_rate, rng=shared_rng),
        "email": SimulatedChannel("email", failure_rate=rates.email_failure_rate, rng=shared_rng),
    }


__all__ = ["NotificationChannel", "SimulatedChannel", "build_channels"]
