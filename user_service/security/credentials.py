"""Credential verification at login and caller resolution on each request."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt

from ..domain.account import CallerContext
from ..domain.ports import AccountStore, PasswordHasher
from .tokens import decode_access_token, issue_access_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TokenBundle:
    """Access token returned to API consumers after a successful login."""

    access_token: str
    expires_in: int


class CredentialService:
    def __init__(self, repository: AccountStore, hasher: PasswordHasher) -> None:
        self._repository = repository
        self._hasher = hasher

    def authenticate(self, username: str, password: str) -> TokenBundle | None:
        """Verify the username/password pair and issue a token, or return ``None``."""
        account = self._repository.find_by_username(username)
        if account is None or not self._hasher.verify(account.password_hash, password):
            logger.info("login rejected for %s", username)
            return None
        access_token, expires_in = issue_access_token(subject=account.username)
        logger.info("user logged in: %s", account.username)
        return TokenBundle(access_token=access_token, expires_in=expires_in)

    def resolve_caller(self, token: str) -> CallerContext | None:
        """Map a bearer token to the caller it belongs to.

        The role is taken from the stored account, so a demotion or deletion
        takes effect on the next request even while the token is still valid.
        """
        try:
            claims = decode_access_token(token)
        except jwt.PyJWTError as exc:
            logger.debug("rejected bearer token: %s", exc)
            return None
        account = self._repository.find_by_username(claims["sub"])
        if account is None:
            return None
        return CallerContext.from_account(account)
