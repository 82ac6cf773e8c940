"""Error kinds and result envelopes returned by account workflows."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"


class DuplicateAccountError(Exception):
    """Raised by a store when a write violates username or email uniqueness."""


class MissingAccountError(Exception):
    """Raised by a store when an update targets an account that no longer exists."""


@dataclass(slots=True, frozen=True)
class AccountError:
    kind: ErrorKind
    message: str


@dataclass(slots=True)
class Outcome(Generic[T]):
    """Either a value or an :class:`AccountError`, never both."""

    value: T | None = None
    error: AccountError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Outcome[T]":
        return cls(error=AccountError(kind=kind, message=message))
