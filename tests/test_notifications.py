from __future__ import annotations

import pytest

from user_service.domain.account import Role
from user_service.domain.contracts import LifecycleAction, RegisterAccountInput
from user_service.domain.notifications import AdminNotifier, build_message
from user_service.domain.service import AccountService

from .conftest import FakeHasher, FakeRepository, RecordingSink, make_account


@pytest.fixture
def admins_repository() -> FakeRepository:
    return FakeRepository(
        [
            make_account("alice"),
            make_account("bob", Role.ADMIN),
            make_account("dana", Role.ADMIN),
        ]
    )


def test_one_message_per_admin(admins_repository):
    sink = RecordingSink()
    carol = admins_repository.save(make_account("carol"))

    results = AdminNotifier(admins_repository, sink).notify(LifecycleAction.UPDATED, carol)

    assert sorted(m.recipient for m in sink.messages) == ["bob@example.com", "dana@example.com"]
    assert {m.subject for m in sink.messages} == {"Updated user carol"}
    assert all(result.success for result in results)


def test_no_admins_means_no_messages():
    repository = FakeRepository([make_account("alice")])
    sink = RecordingSink()

    results = AdminNotifier(repository, sink).notify(
        LifecycleAction.CREATED, repository.find_by_username("alice")
    )

    assert results == []
    assert sink.messages == []


def test_failed_delivery_does_not_stop_fan_out(admins_repository):
    sink = RecordingSink(failing=["bob@example.com"])
    alice = admins_repository.find_by_username("alice")

    results = AdminNotifier(admins_repository, sink).notify(LifecycleAction.DELETED, alice)

    outcome = {result.recipient: result for result in results}
    assert not outcome["bob@example.com"].success
    assert outcome["bob@example.com"].error == "mailbox unavailable"
    assert outcome["dana@example.com"].success


def test_raising_sink_is_contained(admins_repository):
    sink = RecordingSink(raising=["bob@example.com"])
    alice = admins_repository.find_by_username("alice")

    results = AdminNotifier(admins_repository, sink).notify(LifecycleAction.CREATED, alice)

    assert len(sink.messages) == 2
    assert [r.success for r in results if r.recipient == "bob@example.com"] == [False]


def test_admin_set_is_read_on_every_call(admins_repository):
    sink = RecordingSink()
    notifier = AdminNotifier(admins_repository, sink)
    alice = admins_repository.find_by_username("alice")

    notifier.notify(LifecycleAction.UPDATED, alice)
    admins_repository.save(make_account("erin", Role.ADMIN))
    sink.messages.clear()
    notifier.notify(LifecycleAction.UPDATED, alice)

    assert len(sink.messages) == 3


def test_body_omits_password_hash_by_default():
    account = make_account("carol", password_hash="$argon2id$secret")

    message = build_message(LifecycleAction.CREATED, account, "bob@example.com")

    assert message.subject == "Created user carol"
    assert message.body == "Created user with username - carol, email - carol@example.com"
    assert "$argon2id$secret" not in message.body


def test_legacy_body_includes_password_hash_when_enabled(admins_repository):
    sink = RecordingSink()
    carol = make_account("carol", password_hash="$argon2id$secret")

    AdminNotifier(admins_repository, sink, include_password_hash=True).notify(LifecycleAction.CREATED, carol)

    assert sink.messages[0].body == (
        "Created user with username - carol, password - $argon2id$secret, email - carol@example.com"
    )


def test_failed_delivery_does_not_fail_lifecycle_operation():
    repository = FakeRepository([make_account("bob", Role.ADMIN)])
    sink = RecordingSink(raising=["bob@example.com"])
    service = AccountService(repository, FakeHasher(), AdminNotifier(repository, sink))

    outcome = service.register(RegisterAccountInput(username="carol", password="p", email="c@x.com"))

    assert outcome.ok
    assert repository.find_by_username("carol") is not None


class UnreachableAdminsRepository(FakeRepository):
    def find_all(self):
        raise ConnectionError("pool exhausted")


def test_admin_lookup_failure_is_contained():
    repository = UnreachableAdminsRepository([make_account("alice")])
    sink = RecordingSink()

    results = AdminNotifier(repository, sink).notify(
        LifecycleAction.UPDATED, repository.find_by_username("alice")
    )

    assert results == []
    assert sink.messages == []


def test_admin_lookup_failure_does_not_fail_register():
    repository = UnreachableAdminsRepository([make_account("bob", Role.ADMIN)])
    service = AccountService(repository, FakeHasher(), AdminNotifier(repository, RecordingSink()))

    outcome = service.register(RegisterAccountInput(username="carol", password="p", email="c@x.com"))

    assert outcome.ok
    assert repository.find_by_username("carol") is not None
