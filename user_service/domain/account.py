from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(slots=True)
class Account:
    """Aggregate root for a user identity and its credentials."""

    id: int | None
    username: str
    password_hash: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: Role = Role.USER


@dataclass(slots=True, frozen=True)
class CallerContext:
    """Authenticated requester, resolved once per request and never mutated."""

    username: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "CallerContext":
        return cls(username=account.username, role=account.role)
