"""Client-core wiring for the Streamlit app."""

from __future__ import annotations

import httpx
import streamlit as st

from rightguard.client import ApiGateway, AppStore, JsonFileStorage, RightGuardServices, StorageService
from rightguard.settings import get_settings

SETTINGS = get_settings()


def build_store(api_base: str) -> AppStore:
    """Create an :class:`AppStore` talking to ``api_base`` and hydrate it from local storage."""

    client = httpx.Client(base_url=api_base, timeout=SETTINGS.api.timeout_seconds)
    gateway = ApiGateway(client=client, settings=SETTINGS)
    storage = StorageService(JsonFileStorage(SETTINGS.client.storage_path))
    store = AppStore(services=RightGuardServices.from_gateway(gateway), storage=storage)
    store.hydrate()
    return store


def get_store() -> AppStore:
    """Return the session's store, rebuilding it when the API base URL changes."""

    store = st.session_state.get("store")
    if store is None or st.session_state.get("store_api_base") != st.session_state["api_base"]:
        store = build_store(st.session_state["api_base"])
        st.session_state["store"] = store
        st.session_state["store_api_base"] = st.session_state["api_base"]
    return store


__all__ = ["SETTINGS", "build_store", "get_store"]
