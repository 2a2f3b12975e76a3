"""
Route authorization for the candidate / recruiter portals.

A page request is judged against two independent principals:

- the first-party session user (`AppUser`), which carries a role, and
- the external identity-provider user (`ExternalIdentity`), which only proves
  who someone is and may not be registered with us yet.

`decide()` is a pure function of the requested path and snapshots of both
principals. It never raises; malformed input degrades to a navigational
outcome rather than an error.
"""
from dataclasses import dataclass
from enum import Enum
import logging

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth"
ROOT_PATH = "/"
CANDIDATE_PREFIX = "/candidate"
RECRUITER_PREFIX = "/recruiter"
CANDIDATE_HOME = "/candidate/dashboard"
RECRUITER_HOME = "/recruiter/dashboard"


class Role(str, Enum):
    CANDIDATE = "candidate"
    RECRUITER = "recruiter"


def parse_role(value) -> Role | None:
    """Map a raw role string onto `Role` (exact match); anything else yields None."""
    if not isinstance(value, str):
        return None
    try:
        return Role(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class AppUser:
    id: int | None
    email: str | None
    # Kept as the raw string: rows with unknown roles must still be representable.
    role: str
    name: str | None = None


@dataclass(frozen=True)
class ExternalIdentity:
    email: str | None
    uid: str | None = None
    provider: str = "external"


@dataclass(frozen=True)
class ShowLoading:
    kind = "loading"


@dataclass(frozen=True)
class RedirectTo:
    path: str
    kind = "redirect"


@dataclass(frozen=True)
class RenderPage:
    kind = "render"


RouteDecision = ShowLoading | RedirectTo | RenderPage


def home_for_role(role) -> str | None:
    parsed = parse_role(role)
    if parsed is Role.CANDIDATE:
        return CANDIDATE_HOME
    if parsed is Role.RECRUITER:
        return RECRUITER_HOME
    return None


def decide(
    path: str,
    app_user: AppUser | None,
    external_identity: ExternalIdentity | None,
    session_loading: bool = False,
    identity_loading: bool = False,
) -> RouteDecision:
    """Decide what to do with a page request. First matching rule wins."""
    path = path or ROOT_PATH
    decision = _decide(path, app_user, external_identity, bool(session_loading), bool(identity_loading))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "route decision path=%s session_user=%s session_role=%s identity=%s loading=(%s,%s) -> %s",
            path,
            app_user is not None,
            app_user.role if app_user is not None else "none",
            external_identity.email if external_identity is not None else "none",
            session_loading,
            identity_loading,
            decision,
        )
    return decision


def _decide(
    path: str,
    app_user: AppUser | None,
    external_identity: ExternalIdentity | None,
    session_loading: bool,
    identity_loading: bool,
) -> RouteDecision:
    if session_loading or identity_loading:
        return ShowLoading()

    if app_user is None and external_identity is None:
        return RedirectTo(AUTH_PATH)

    # An external identity alone is not enough: first-party registration must complete.
    if external_identity is not None and app_user is None and path != AUTH_PATH:
        return RedirectTo(AUTH_PATH)

    if app_user is not None:
        role = parse_role(app_user.role)
        if path.startswith(CANDIDATE_PREFIX) and role is not Role.CANDIDATE:
            return RedirectTo(RECRUITER_HOME)
        if path.startswith(RECRUITER_PREFIX) and role is not Role.RECRUITER:
            return RedirectTo(CANDIDATE_HOME)
        if path == ROOT_PATH:
            home = home_for_role(role)
            if home is not None:
                return RedirectTo(home)
    elif external_identity is not None and path == ROOT_PATH:
        return RedirectTo(AUTH_PATH)

    return RenderPage()
