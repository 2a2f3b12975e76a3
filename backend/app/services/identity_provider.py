"""
Verification of tokens issued by the external identity provider.

The provider itself (sign-in flows, key rotation) lives outside this service;
we only need a way to turn a presented token into an `ExternalIdentity`.
"""
import logging
from typing import Protocol, runtime_checkable

from ..config import IDENTITY_PROVIDER_NAME, IDENTITY_PROVIDER_SECRET
from ..utils.jwt import decode_access_token
from .route_authorization import ExternalIdentity

logger = logging.getLogger(__name__)


@runtime_checkable
class IdentityVerifier(Protocol):
    def verify(self, token: str) -> ExternalIdentity | None:
        """Return the identity behind `token`, or None if it cannot be trusted."""
        ...


class SharedSecretIdentityVerifier:
    """Verifies HS256 tokens signed with a secret shared with the provider."""

    def __init__(self, secret: str = IDENTITY_PROVIDER_SECRET, provider: str = IDENTITY_PROVIDER_NAME):
        self.secret = secret
        self.provider = provider

    def verify(self, token: str) -> ExternalIdentity | None:
        claims = decode_access_token(token, secret=self.secret)
        if not claims:
            logger.warning("Rejected %s identity token", self.provider)
            return None
        uid = claims.get("uid") or claims.get("sub")
        email = claims.get("email")
        if not uid and not email:
            logger.warning("%s identity token has neither uid nor email", self.provider)
            return None
        return ExternalIdentity(
            email=str(email) if email else None,
            uid=str(uid) if uid else None,
            provider=self.provider,
        )


_verifier: IdentityVerifier = SharedSecretIdentityVerifier()


def get_identity_verifier() -> IdentityVerifier:
    return _verifier
