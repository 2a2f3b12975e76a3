"""
Client-side route guard.

Keeps the current path and re-runs the authorization decision whenever the
path changes or either auth adapter pushes a new value. Navigate actions are
followed immediately, so `current_action` always describes what is on screen.
"""
from dataclasses import dataclass
import logging
from typing import Callable

from .auth_adapters import IdentityProviderAdapter, SessionAdapter
from .page_registry import normalize_path
from .route_authorization import RenderPage, RouteDecision, decide
from .view_dispatcher import ViewAction, ViewDispatcher

logger = logging.getLogger(__name__)

MAX_REDIRECT_HOPS = 5
MAX_HISTORY = 50


@dataclass(frozen=True)
class RedirectChain:
    """Paths visited while following navigate actions, and where it stopped."""

    paths: tuple[str, ...]
    action: ViewAction

    @property
    def looped(self) -> bool:
        # Following stopped with a redirect still pending.
        return self.action.kind == "navigate"

    @property
    def final_path(self) -> str:
        return self.paths[-1]


def evaluate(
    path: str,
    session: SessionAdapter,
    identity: IdentityProviderAdapter,
    dispatcher: ViewDispatcher,
) -> tuple[RouteDecision, ViewAction]:
    """One guarded evaluation against the adapters' current snapshots."""
    path = normalize_path(path)
    found = dispatcher.registry.resolve(path)
    if not found.page.protected:
        # Public pages (sign-in, not found) are routed outside the guard.
        decision = RenderPage()
    else:
        app_user, session_loading = session.snapshot()
        external_identity, identity_loading = identity.snapshot()
        decision = decide(path, app_user, external_identity, session_loading, identity_loading)
    return decision, dispatcher.dispatch(decision, path)


def follow_redirects(
    path: str,
    session: SessionAdapter,
    identity: IdentityProviderAdapter,
    dispatcher: ViewDispatcher,
    max_hops: int = MAX_REDIRECT_HOPS,
) -> RedirectChain:
    """
    Evaluate `path` and keep following navigate actions.

    Stops on the first non-navigate action, on a redirect back to a path
    already visited, or after `max_hops` redirects. In the last two cases the
    returned chain is `looped` and its action is the pending redirect.
    """
    paths = [normalize_path(path)]
    _, action = evaluate(paths[0], session, identity, dispatcher)
    while action.kind == "navigate":
        target = normalize_path(action.target)
        if target in paths or len(paths) > max_hops:
            logger.error("Redirect loop detected: %s -> %s", " -> ".join(paths), target)
            break
        paths.append(target)
        _, action = evaluate(target, session, identity, dispatcher)
    return RedirectChain(paths=tuple(paths), action=action)


class RouteGuard:
    def __init__(
        self,
        session: SessionAdapter,
        identity: IdentityProviderAdapter,
        dispatcher: ViewDispatcher | None = None,
        *,
        path: str = "/",
        on_action: Callable[[ViewAction], None] | None = None,
    ):
        self.session = session
        self.identity = identity
        self.dispatcher = dispatcher or ViewDispatcher()
        self.on_action = on_action
        self.path = normalize_path(path)
        self.current_action: ViewAction | None = None
        # Most recent paths shown, oldest first; capped at MAX_HISTORY.
        self.history: list[str] = [self.path]
        self._unsubscribers = [
            session.subscribe(self.refresh),
            identity.subscribe(self.refresh),
        ]
        self.refresh()

    def navigate(self, path: str) -> ViewAction:
        self.path = normalize_path(path)
        self._record(self.path)
        return self.refresh()

    def refresh(self) -> ViewAction:
        chain = follow_redirects(self.path, self.session, self.identity, self.dispatcher)
        for visited in chain.paths[1:]:
            self._record(visited)
        self.path = chain.final_path
        self.current_action = chain.action
        if self.on_action is not None:
            self.on_action(chain.action)
        return chain.action

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _record(self, path: str) -> None:
        self.history.append(path)
        if len(self.history) > MAX_HISTORY:
            del self.history[:-MAX_HISTORY]
