import logging

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import IDENTITY_TOKEN_HEADER, SESSION_COOKIE_NAME
from ..database import get_db
from ..models.user import User
from ..services.auth_adapters import IdentityProviderAdapter, SessionAdapter
from ..services.identity_provider import IdentityVerifier, get_identity_verifier
from ..services.route_authorization import AppUser
from .error_handlers import UnauthorizedError, get_error_message
from .jwt import decode_access_token

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "True", "yes", "YES"}


def _session_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def _load_session_user(request: Request, db: Session) -> User | None:
    claims = decode_access_token(_session_token(request) or "")
    if not claims:
        return None
    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user = _load_session_user(request, db)
    if user is None:
        raise UnauthorizedError(get_error_message("unauthorized"))
    return user


def to_app_user(user: User) -> AppUser:
    return AppUser(id=user.id, email=user.email, role=user.role, name=user.name)


def get_session_adapter(request: Request, db: Session = Depends(get_db)) -> SessionAdapter:
    """Session adapter resolved from the request's bearer token or session cookie."""
    adapter = SessionAdapter()
    if request.headers.get("X-Session-Loading") in _TRUTHY:
        return adapter
    try:
        user = _load_session_user(request, db)
    except SQLAlchemyError as e:
        adapter.fail(e)
        return adapter
    adapter.resolve(to_app_user(user) if user is not None else None)
    return adapter


def get_identity_adapter(
    request: Request,
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> IdentityProviderAdapter:
    """Identity adapter resolved from the identity provider token header."""
    adapter = IdentityProviderAdapter()
    if request.headers.get("X-Identity-Loading") in _TRUTHY:
        return adapter
    token = (request.headers.get(IDENTITY_TOKEN_HEADER) or "").strip()
    if not token:
        adapter.resolve(None)
        return adapter
    try:
        adapter.resolve(verifier.verify(token))
    except Exception as e:
        adapter.fail(e)
    return adapter
