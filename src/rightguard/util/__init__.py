"""Utility package for Right Guard.

Shared helpers that do not belong to a more specific area: jurisdiction
detection from coordinates, reverse geocoding, and contact validation.
"""

from .contacts import (
    classify_recipient,
    format_phone_number,
    truncate_text,
    validate_email,
    validate_farcaster_username,
    validate_phone_number,
)
from .geo import JURISDICTION_BOXES, JurisdictionBox, detect_jurisdiction, reverse_geocode

__all__ = [
    "JURISDICTION_BOXES",
    "JurisdictionBox",
    "classify_recipient",
    "detect_jurisdiction",
    "format_phone_number",
    "reverse_geocode",
    "truncate_text",
    "validate_email",
    "validate_farcaster_username",
    "validate_phone_number",
]
