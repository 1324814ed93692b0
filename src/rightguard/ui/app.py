"""Streamlit front end for Right Guard.

Run:
    streamlit run src/rightguard/ui/app.py

The app drives the client core (:mod:`rightguard.client`) against the API
configured via ``RIGHTGUARD_API__BASE_URL``. It has three tabs:

- Rights: basic rights, quick scripts, and the state-specific guide
- Record: capture an incident, save it, and alert emergency contacts
- Premium: entitlements and on-chain unlocks
"""

from __future__ import annotations

from typing import List

import streamlit as st

from rightguard.client.recorder import BufferedCaptureDevice, RecordingSession
from rightguard.client.state import AppStore
from rightguard.constants import APP_CONFIG, BASIC_RIGHTS, LANGUAGES, US_STATES
from rightguard.errors import RightGuardError
from rightguard.models import Location
from rightguard.ui.api import SETTINGS, get_store
from rightguard.ui.state import ensure_session_defaults
from rightguard.util import (
    classify_recipient,
    detect_jurisdiction,
    format_phone_number,
    reverse_geocode,
    validate_email,
    validate_farcaster_username,
    validate_phone_number,
)


def _valid_contact(contact: str) -> bool:
    kind = classify_recipient(contact)
    if kind == "social":
        return validate_farcaster_username(contact[1:])
    if kind == "email":
        return validate_email(contact)
    return validate_phone_number(contact)


def _parse_contacts(raw: str) -> List[str]:
    contacts = []
    for line in raw.splitlines():
        contact = line.strip()
        if not contact:
            continue
        if classify_recipient(contact) == "sms":
            contact = format_phone_number(contact)
        contacts.append(contact)
    return contacts


def render_sidebar(store: AppStore) -> None:
    state = store.state
    st.sidebar.title(APP_CONFIG["name"])
    st.sidebar.caption(APP_CONFIG["tagline"])

    st.session_state["api_base"] = st.sidebar.text_input("API base URL", value=st.session_state["api_base"])

    languages = list(LANGUAGES)
    language = st.sidebar.selectbox(
        "Language",
        options=languages,
        index=languages.index(state.selected_language),
        format_func=lambda code: LANGUAGES[code],
    )
    if language != state.selected_language:
        store.set_language(language)

    states = list(US_STATES)
    current = state.current_jurisdiction if state.current_jurisdiction in states else states[0]
    jurisdiction = st.sidebar.selectbox("State", options=states, index=states.index(current))
    if jurisdiction != state.current_jurisdiction:
        store.set_current_jurisdiction(jurisdiction)
        st.session_state["guide"] = None

    st.sidebar.divider()
    if state.user is None:
        handle = st.sidebar.text_input("Farcaster username")
        if st.sidebar.button("Sign in", disabled=not handle):
            if not validate_farcaster_username(handle):
                st.sidebar.error("Usernames may contain letters, numbers, and hyphens only.")
            else:
                try:
                    store.initialize_user(handle)
                    st.rerun()
                except RightGuardError as exc:
                    st.sidebar.error(f"Sign in failed: {exc.message}")
    else:
        st.sidebar.success(f"Signed in as @{state.user.farcaster_profile}")
        if st.sidebar.button("Log out"):
            store.logout()
            st.rerun()


def render_rights_tab(store: AppStore) -> None:
    state = store.state
    rights = BASIC_RIGHTS[state.selected_language]
    st.subheader(str(rights["title"]))
    for item in rights["rights"]:
        st.markdown(f"- {item}")

    st.markdown("#### Scripts")
    for script in rights["scripts"].values():
        st.code(script, language=None)

    st.divider()
    st.markdown(f"#### {state.current_jurisdiction}")
    if st.button("Load state guide"):
        try:
            guide = store.services.legal_guides.get_guide(state.current_jurisdiction, state.selected_language)
            st.session_state["guide"] = guide
            st.session_state["guide_error"] = None
        except RightGuardError as exc:
            st.session_state["guide"] = None
            st.session_state["guide_error"] = exc.message

    if st.session_state.get("guide_error"):
        st.error(st.session_state["guide_error"])
    guide = st.session_state.get("guide")
    if guide is not None:
        st.markdown(f"### {guide.title}")
        st.markdown(guide.content)
        st.info(guide.script)


def render_record_tab(store: AppStore) -> None:
    state = store.state
    col_lat, col_lon = st.columns(2)
    latitude = col_lat.number_input("Latitude", value=float(st.session_state["latitude"]), format="%.5f")
    longitude = col_lon.number_input("Longitude", value=float(st.session_state["longitude"]), format="%.5f")
    st.session_state["latitude"], st.session_state["longitude"] = latitude, longitude

    if st.button("Use this location"):
        location = reverse_geocode(latitude, longitude, settings=SETTINGS)
        st.session_state["address"] = location.address
        store.set_current_jurisdiction(detect_jurisdiction(latitude, longitude))
        st.rerun()
    location_label = st.session_state.get("address") or "Location unavailable"
    st.caption(location_label)

    st.session_state["recording_type"] = st.radio(
        "Recording type", options=["audio", "video"], horizontal=True, index=0
    )
    captured = st.file_uploader("Captured media", type=["webm", "mp4", "m4a", "wav", "ogg"])
    notes = st.text_area("Notes")

    if st.button("Save recording", disabled=captured is None or state.user is None):
        device = BufferedCaptureDevice()
        with RecordingSession(
            lambda: device, store=store, max_duration_seconds=SETTINGS.recording.max_duration_seconds
        ) as session:
            session.start(st.session_state["recording_type"])
            device.write(captured.getvalue())
            media = session.stop()
            location = Location(latitude=latitude, longitude=longitude, address=st.session_state.get("address"))
            try:
                record = session.save(media, location, notes or None)
                st.session_state["last_record"] = record
                st.success("Recording saved")
                if record.media_url:
                    st.markdown(f"[View on IPFS]({record.media_url})")
                else:
                    st.warning("Media could not be uploaded; the incident was saved without it.")
            except RightGuardError as exc:
                st.error(f"Failed to save recording: {exc.message}")
    if state.user is None:
        st.caption("Sign in to save recordings and send alerts.")

    st.divider()
    st.markdown("#### Emergency contacts")
    contacts = store.storage.get_emergency_contacts()
    raw = st.text_area("One phone number, email, or @username per line", value="\n".join(contacts))
    if st.button("Save contacts"):
        parsed = _parse_contacts(raw)
        invalid = [contact for contact in parsed if not _valid_contact(contact)]
        if invalid:
            st.error("Invalid contacts: " + ", ".join(invalid))
        else:
            store.storage.set_emergency_contacts(parsed)
            st.success(f"Saved {len(parsed)} contact(s)")
            contacts = parsed

    alert_type = st.selectbox("Alert", options=["emergency", "recording", "followUp"])
    if st.button("Send alert", disabled=not contacts or state.user is None):
        last_record = st.session_state.get("last_record")
        try:
            dispatch = store.services.alerts.send_alert(
                state.user.user_id,
                contacts,
                incident_record_id=last_record.record_id if last_record else None,
                alert_type=alert_type,
                language=state.selected_language,
                location=st.session_state.get("address"),
            )
            summary = dispatch.summary
            st.success(f"Alerts sent: {summary.successful} successful, {summary.failed} failed")
            st.dataframe([log.to_wire() for log in dispatch.alerts], use_container_width=True)
        except RightGuardError as exc:
            st.error(f"Failed to send alerts: {exc.message}")


def render_premium_tab(store: AppStore) -> None:
    user = store.state.user
    if user is None:
        st.info("Sign in to unlock premium features.")
        return

    try:
        listing = store.services.payments.get_entitlements(user.user_id)
    except RightGuardError as exc:
        st.error(f"Failed to load premium features: {exc.message}")
        return

    st.markdown("#### Unlocked")
    if not listing.unlocked:
        st.caption("No premium features yet.")
    for feature in listing.unlocked:
        st.markdown(f"- **{feature.name}**: {feature.description}")

    st.markdown("#### Available")
    for feature in listing.available:
        with st.expander(f"{feature.name} (${feature.price:.2f})"):
            st.write(feature.description)
            tx_hash = st.text_input("Transaction hash", key=f"tx-{feature.key}")
            if st.button("Unlock", key=f"unlock-{feature.key}", disabled=not tx_hash):
                try:
                    result = store.purchase_entitlement(feature.key, tx_hash, feature.price)
                    st.session_state["purchase_message"] = f"{result.unlocked_feature.name} unlocked successfully!"
                    st.rerun()
                except RightGuardError as exc:
                    st.error(exc.message)

    if st.session_state.get("purchase_message"):
        st.success(st.session_state.pop("purchase_message"))


def main() -> None:
    st.set_page_config(page_title=APP_CONFIG["name"], page_icon="🛡️", layout="centered")
    ensure_session_defaults()
    store = get_store()
    render_sidebar(store)

    rights_tab, record_tab, premium_tab = st.tabs(["Rights", "Record", "Premium"])
    with rights_tab:
        render_rights_tab(store)
    with record_tab:
        render_record_tab(store)
    with premium_tab:
        render_premium_tab(store)


if __name__ == "__main__":
    main()
