"""Collaborator interfaces consumed by the account workflows."""

from __future__ import annotations

from typing import Protocol

from .account import Account
from .contracts import DeliveryResult, NotificationMessage


class AccountStore(Protocol):
    """
    Key-indexed persistence for accounts.

    Implementations enforce username and email uniqueness and raise
    :class:`~user_service.domain.errors.DuplicateAccountError` from ``save``
    when a write would violate it.
    """

    def find_by_id(self, account_id: int) -> Account | None:
        ...

    def find_by_username(self, username: str) -> Account | None:
        ...

    def exists_by_username(self, username: str) -> bool:
        ...

    def exists_by_email(self, email: str) -> bool:
        ...

    def save(self, account: Account) -> Account:
        """Insert the account when ``account.id`` is ``None``, otherwise update it."""

        ...

    def delete(self, account: Account) -> None:
        ...

    def find_all(self) -> list[Account]:
        ...


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, password_hash: str, plaintext: str) -> bool:
        ...


class NotificationSink(Protocol):
    """Delivers one message; failures are reported in the result, not raised."""

    def send(self, message: NotificationMessage) -> DeliveryResult:
        ...
