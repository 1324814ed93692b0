"""Session state helpers for the Right Guard Streamlit app."""

from __future__ import annotations

import os
from typing import Any

import streamlit as st

from rightguard.settings import get_settings

SETTINGS = get_settings()


def ensure_session_defaults() -> None:
    """Populate Streamlit session state with the app defaults."""

    default_api_base = os.getenv("RIGHTGUARD_API__BASE_URL") or SETTINGS.api.base_url

    defaults: dict[str, Any] = {
        "api_base": default_api_base,
        "store": None,
        "guide": None,
        "guide_error": None,
        "latitude": 37.0,
        "longitude": -120.0,
        "address": None,
        "last_record": None,
        "purchase_message": None,
        "recording_type": "audio",
    }
    for key, value in defaults.items():
        st.session_state.setdefault(key, value)


__all__ = ["SETTINGS", "ensure_session_defaults"]
