"""
State holders for the two sources of "current user".

Each adapter owns one nullable value plus a loading flag and pushes every
change to its subscribers. Producers (the session backend, the identity
provider listener) call `begin_loading`, `resolve` and `fail`; consumers read
`snapshot()` and `subscribe()` for changes. Last write wins.
"""
import logging
from typing import Callable, Generic, TypeVar

from .route_authorization import AppUser, ExternalIdentity

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AuthStateAdapter(Generic[T]):
    source_name = "auth"

    def __init__(self, value: T | None = None, *, loading: bool = True):
        self._value = value
        self._loading = loading
        self._last_error: str | None = None
        self._subscribers: list[Callable[[], None]] = []

    def current_value(self) -> T | None:
        return self._value

    def is_loading(self) -> bool:
        return self._loading

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def snapshot(self) -> tuple[T | None, bool]:
        return self._value, self._loading

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register `callback` for change notifications; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def begin_loading(self) -> None:
        self._set(self._value, True)

    def resolve(self, value: T | None) -> None:
        self._last_error = None
        self._set(value, False)

    def fail(self, error: Exception | str) -> None:
        # Consumers only ever see an absent value; the error is kept for display.
        self._last_error = str(error)
        logger.warning("%s adapter failed: %s", self.source_name, error)
        self._set(None, False)

    def _set(self, value: T | None, loading: bool) -> None:
        if value == self._value and loading == self._loading:
            return
        self._value = value
        self._loading = loading
        for callback in list(self._subscribers):
            callback()


class SessionAdapter(AuthStateAdapter[AppUser]):
    source_name = "session"


class IdentityProviderAdapter(AuthStateAdapter[ExternalIdentity]):
    source_name = "identity provider"
