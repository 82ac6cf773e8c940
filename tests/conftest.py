from __future__ import annotations

import dataclasses
from collections.abc import Iterable

import pytest

from user_service.domain.account import Account, CallerContext, Role
from user_service.domain.contracts import DeliveryResult, NotificationMessage
from user_service.domain.errors import DuplicateAccountError, MissingAccountError
from user_service.domain.notifications import AdminNotifier
from user_service.domain.service import AccountService


class FakeRepository:
    """In-memory repository mimicking Postgres-backed behaviors, unique constraints included."""

    def __init__(self, accounts: Iterable[Account] = ()) -> None:
        self._accounts: dict[int, Account] = {}
        self._seq = 0
        self.writes = 0
        self.fail_next_save_as_duplicate = False
        for account in accounts:
            self.save(account)
        self.writes = 0

    def find_by_id(self, account_id: int):
        account = self._accounts.get(account_id)
        return dataclasses.replace(account) if account else None

    def find_by_username(self, username: str):
        for account in self._accounts.values():
            if account.username == username:
                return dataclasses.replace(account)
        return None

    def exists_by_username(self, username: str) -> bool:
        return any(account.username == username for account in self._accounts.values())

    def exists_by_email(self, email: str) -> bool:
        return any(account.email == email for account in self._accounts.values())

    def save(self, account: Account) -> Account:
        if self.fail_next_save_as_duplicate:
            self.fail_next_save_as_duplicate = False
            raise DuplicateAccountError("username already exists")
        for other in self._accounts.values():
            if other.id == account.id:
                continue
            if other.username == account.username:
                raise DuplicateAccountError("username already exists")
            if other.email == account.email:
                raise DuplicateAccountError("email already exists")
        if account.id is not None and account.id not in self._accounts:
            raise MissingAccountError(f"user {account.id} no longer exists")
        if account.id is None:
            self._seq += 1
            account = dataclasses.replace(account, id=self._seq)
        self._accounts[account.id] = dataclasses.replace(account)
        self.writes += 1
        return dataclasses.replace(account)

    def delete(self, account: Account) -> None:
        self._accounts.pop(account.id, None)
        self.writes += 1

    def find_all(self) -> list[Account]:
        return [dataclasses.replace(account) for account in self._accounts.values()]


class FakeHasher:
    def hash(self, plaintext: str) -> str:
        return f"hashed:{plaintext}"

    def verify(self, password_hash: str, plaintext: str) -> bool:
        return password_hash == f"hashed:{plaintext}"


class RecordingSink:
    """Notification sink that remembers every message and can fail chosen recipients."""

    def __init__(self, failing: Iterable[str] = (), raising: Iterable[str] = ()) -> None:
        self.messages: list[NotificationMessage] = []
        self._failing = set(failing)
        self._raising = set(raising)

    def send(self, message: NotificationMessage) -> DeliveryResult:
        self.messages.append(message)
        if message.recipient in self._raising:
            raise RuntimeError("smtp relay unreachable")
        if message.recipient in self._failing:
            return DeliveryResult(recipient=message.recipient, success=False, error="mailbox unavailable")
        return DeliveryResult(recipient=message.recipient, success=True)


def make_account(username: str, role: Role = Role.USER, **overrides) -> Account:
    fields = {
        "id": None,
        "username": username,
        "password_hash": f"hashed:{username}-secret",
        "email": f"{username}@example.com",
        "first_name": username.capitalize(),
        "last_name": None,
        "role": role,
    }
    fields.update(overrides)
    return Account(**fields)


@pytest.fixture
def repository() -> FakeRepository:
    """Store seeded with alice (USER) and bob (ADMIN)."""
    return FakeRepository([make_account("alice"), make_account("bob", Role.ADMIN)])


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def service(repository, sink) -> AccountService:
    return AccountService(repository, FakeHasher(), AdminNotifier(repository, sink))


@pytest.fixture
def alice(repository) -> CallerContext:
    return CallerContext.from_account(repository.find_by_username("alice"))


@pytest.fixture
def bob(repository) -> CallerContext:
    return CallerContext.from_account(repository.find_by_username("bob"))
