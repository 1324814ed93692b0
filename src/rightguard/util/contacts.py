"""Validation and formatting helpers for emergency contacts."""

from __future__ import annotations

import re
from typing import Literal

PHONE_PATTERN = re.compile(r"^\+?1?[-.\s]?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
FARCASTER_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
_TEN_DIGITS = re.compile(r"^(\d{3})(\d{3})(\d{4})$")

RecipientKind = Literal["sms", "social", "email"]


def validate_phone_number(phone: str) -> bool:
    """Accept North American numbers with optional +1, separators, and parentheses."""

    return bool(PHONE_PATTERN.fullmatch(phone or ""))


def format_phone_number(phone: str) -> str:
    """Render a bare 10-digit number as ``(555) 123-4567``; anything else is unchanged."""

    cleaned = re.sub(r"\D", "", phone or "")
    match = _TEN_DIGITS.match(cleaned)
    if match:
        return f"({match.group(1)}) {match.group(2)}-{match.group(3)}"
    return phone


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email or ""))


def validate_farcaster_username(username: str) -> bool:
    return bool(FARCASTER_PATTERN.fullmatch(username or ""))


def classify_recipient(recipient: str) -> RecipientKind:
    """Route a recipient string to a notification channel kind.

    ``@handle`` goes to the social channel, any other string containing ``@``
    is treated as an email address, and everything else as a phone number.
    """

    if "@" in recipient:
        return "social" if recipient.startswith("@") else "email"
    return "sms"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


__all__ = [
    "classify_recipient",
    "format_phone_number",
    "truncate_text",
    "validate_email",
    "validate_farcaster_username",
    "validate_phone_number",
]
