"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .account import Role


class LifecycleAction(str, Enum):
    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"


@dataclass(slots=True)
class RegisterAccountInput:
    """Validated inputs required to register a new account.

    ``role`` records what the client asked for; registration always yields a USER.
    """

    username: str
    password: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: Role | None = None


@dataclass(slots=True)
class UpdateAccountInput:
    """Replacement values for the mutable fields of an account."""

    email: str
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None


@dataclass(slots=True, frozen=True)
class NotificationMessage:
    recipient: str
    subject: str
    body: str


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    """Outcome of handing one message to a notification sink."""

    recipient: str
    success: bool
    error: str | None = None
