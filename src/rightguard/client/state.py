"""Client session state: a pure reducer plus an injectable store with storage effects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from rightguard.client.services import RightGuardServices
from rightguard.client.storage import StorageService
from rightguard.constants import DEFAULT_JURISDICTION, DEFAULT_LANGUAGE, LANGUAGES
from rightguard.errors import UnauthenticatedError, ValidationFailure
from rightguard.models import PurchaseResult, User

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    user: Optional[User] = None
    selected_language: str = DEFAULT_LANGUAGE
    current_jurisdiction: str = DEFAULT_JURISDICTION
    is_recording: bool = False
    premium_unlocked: bool = False


INITIAL_STATE = AppState()


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetUser:
    user: Optional[User]


@dataclass(frozen=True)
class SetLanguage:
    language: str


@dataclass(frozen=True)
class SetCurrentJurisdiction:
    jurisdiction: str


@dataclass(frozen=True)
class SetRecording:
    recording: bool


@dataclass(frozen=True)
class UpdateUserEntitlements:
    features: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[SetUser, SetLanguage, SetCurrentJurisdiction, SetRecording, UpdateUserEntitlements, Reset]


def reduce(state: AppState, action: Action) -> AppState:
    """Return the next state. ``premium_unlocked`` always mirrors whether the user holds any entitlement."""

    if isinstance(action, SetUser):
        user = action.user
        jurisdiction = user.selected_state if user is not None and user.selected_state else state.current_jurisdiction
        return replace(
            state,
            user=user,
            current_jurisdiction=jurisdiction,
            premium_unlocked=bool(user is not None and user.premium_features),
        )
    if isinstance(action, SetLanguage):
        return replace(state, selected_language=action.language)
    if isinstance(action, SetCurrentJurisdiction):
        return replace(state, current_jurisdiction=action.jurisdiction)
    if isinstance(action, SetRecording):
        return replace(state, is_recording=action.recording)
    if isinstance(action, UpdateUserEntitlements):
        features = list(action.features)
        user = state.user.model_copy(update={"premium_features": features}) if state.user is not None else None
        return replace(state, user=user, premium_unlocked=len(features) > 0)
    if isinstance(action, Reset):
        return INITIAL_STATE
    return state


Listener = Callable[[AppState], None]


class AppStore:
    """Hold the session state, mirror it to local storage, and run the async actions."""

    def __init__(
        self,
        *,
        services: RightGuardServices,
        storage: StorageService,
        initial: AppState = INITIAL_STATE,
    ) -> None:
        self._services = services
        self._storage = storage
        self._state = initial
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def storage(self) -> StorageService:
        return self._storage

    @property
    def services(self) -> RightGuardServices:
        return self._services

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispatch(self, action: Action) -> AppState:
        previous = self._state
        self._state = reduce(previous, action)
        self._run_effects(previous, self._state)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def hydrate(self) -> AppState:
        """Load the persisted user, language, and jurisdiction, in that order."""

        # Read everything first: dispatching SetUser writes the user's state back to storage.
        stored_user = self._storage.get_user()
        stored_language = self._storage.get_language()
        stored_jurisdiction = self._storage.get_selected_state()
        if stored_user is not None:
            self.dispatch(SetUser(stored_user))
        self.dispatch(SetLanguage(stored_language))
        return self.dispatch(SetCurrentJurisdiction(stored_jurisdiction))

    # ------------------------------------------------------------------
    # Storage effects
    # ------------------------------------------------------------------
    def _run_effects(self, previous: AppState, current: AppState) -> None:
        if current.user != previous.user:
            if current.user is None:
                self._persist("user", self._storage.clear_user)
            else:
                self._persist("user", self._storage.set_user, current.user)
        if current.selected_language != previous.selected_language:
            self._persist("language", self._storage.set_language, current.selected_language)
        if current.current_jurisdiction != previous.current_jurisdiction:
            self._persist("jurisdiction", self._storage.set_selected_state, current.current_jurisdiction)

    def _persist(self, name: str, writer: Callable[..., None], *args: object) -> None:
        try:
            writer(*args)
        except Exception:
            LOGGER.warning("Failed to persist %s to local storage", name, exc_info=True)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------
    def set_user(self, user: Optional[User]) -> AppState:
        return self.dispatch(SetUser(user))

    def set_language(self, language: str) -> AppState:
        if language not in LANGUAGES:
            raise ValidationFailure(f"Unsupported language '{language}'")
        return self.dispatch(SetLanguage(language))

    def set_current_jurisdiction(self, jurisdiction: str) -> AppState:
        return self.dispatch(SetCurrentJurisdiction(jurisdiction))

    def set_recording(self, recording: bool) -> AppState:
        return self.dispatch(SetRecording(recording))

    def update_user_entitlements(self, features: Sequence[str]) -> AppState:
        return self.dispatch(UpdateUserEntitlements(tuple(features)))

    def has_entitlement(self, feature_key: str) -> bool:
        user = self._state.user
        return user is not None and user.has_feature(feature_key)

    def logout(self) -> AppState:
        return self.dispatch(Reset())

    # ------------------------------------------------------------------
    # Async actions
    # ------------------------------------------------------------------
    def initialize_user(self, farcaster_profile: str) -> User:
        """Upsert the user for ``farcaster_profile`` in the current jurisdiction and adopt it."""

        try:
            user = self._services.auth.create_or_update_user(farcaster_profile, self._state.current_jurisdiction)
        except Exception:
            LOGGER.exception("Failed to initialize user %s", farcaster_profile)
            raise
        self.set_user(user)
        return user

    def purchase_entitlement(self, feature_key: str, tx_hash: str, amount: float) -> PurchaseResult:
        user = self._state.user
        if user is None:
            raise UnauthenticatedError("User not authenticated")
        try:
            result = self._services.payments.purchase_feature(user.user_id, feature_key, tx_hash, amount)
        except Exception:
            LOGGER.exception("Failed to purchase feature %s", feature_key)
            raise
        self.set_user(result.user)
        return result


__all__ = [
    "Action",
    "AppState",
    "AppStore",
    "INITIAL_STATE",
    "Reset",
    "SetCurrentJurisdiction",
    "SetLanguage",
    "SetRecording",
    "SetUser",
    "UpdateUserEntitlements",
    "reduce",
]
