"""Account service orchestrating access checks, persistence, and admin notifications."""

from __future__ import annotations

import dataclasses
import logging

from .access import permit, permit_admin_only
from .account import Account, CallerContext, Role
from .contracts import LifecycleAction, RegisterAccountInput, UpdateAccountInput
from .errors import DuplicateAccountError, ErrorKind, MissingAccountError, Outcome
from .notifications import AdminNotifier
from .ports import AccountStore, PasswordHasher

logger = logging.getLogger(__name__)


class AccountService:
    """Account lifecycle workflows.

    Every operation that targets an existing account checks existence first,
    then access, and only then touches the store. Admin notification runs after
    a successful write and never changes the operation's outcome.
    """

    def __init__(
        self,
        repository: AccountStore,
        hasher: PasswordHasher,
        notifier: AdminNotifier,
    ) -> None:
        """Store dependencies used to orchestrate persistence and notification."""
        self._repository = repository
        self._hasher = hasher
        self._notifier = notifier

    def register(self, payload: RegisterAccountInput) -> Outcome[Account]:
        """Create a USER account, rejecting duplicate usernames and emails."""
        if self._repository.exists_by_username(payload.username):
            return Outcome.failure(ErrorKind.CONFLICT, "username already exists")
        if self._repository.exists_by_email(payload.email):
            return Outcome.failure(ErrorKind.CONFLICT, "email already exists")

        if payload.role is not None and payload.role is not Role.USER:
            logger.warning(
                "registration for %s requested role %s; assigning USER",
                payload.username,
                payload.role.value,
            )

        account = Account(
            id=None,
            username=payload.username,
            password_hash=self._hasher.hash(payload.password),
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=Role.USER,
        )
        try:
            saved = self._repository.save(account)
        except DuplicateAccountError as exc:
            return Outcome.failure(ErrorKind.CONFLICT, str(exc) or "account already exists")
        logger.info("user created: %s", saved.username)

        self._notifier.notify(LifecycleAction.CREATED, saved)
        return Outcome.success(saved)

    def get(self, account_id: int, caller: CallerContext) -> Outcome[Account]:
        return self._authorized(self._repository.find_by_id(account_id), caller)

    def get_by_username(self, username: str, caller: CallerContext) -> Outcome[Account]:
        return self._authorized(self._repository.find_by_username(username), caller)

    def list_all(self, caller: CallerContext) -> Outcome[list[Account]]:
        if not permit_admin_only(caller):
            return Outcome.failure(ErrorKind.AUTHORIZATION, "admin access required")
        return Outcome.success(self._repository.find_all())

    def update(
        self, account_id: int, patch: UpdateAccountInput, caller: CallerContext
    ) -> Outcome[Account]:
        """Apply ``patch`` to the account.

        Email and names are always overwritten. The password hash only changes
        when ``patch.password`` is non-empty.
        """
        lookup = self._authorized(self._repository.find_by_id(account_id), caller)
        if not lookup.ok:
            return lookup
        current = lookup.value

        changed = dataclasses.replace(
            current,
            email=patch.email,
            first_name=patch.first_name,
            last_name=patch.last_name,
        )
        if patch.password:
            changed.password_hash = self._hasher.hash(patch.password)

        try:
            updated = self._repository.save(changed)
        except DuplicateAccountError as exc:
            return Outcome.failure(ErrorKind.CONFLICT, str(exc) or "email already exists")
        except MissingAccountError:
            return Outcome.failure(ErrorKind.NOT_FOUND, "user not found")
        logger.info("user updated: %s", updated.username)

        self._notifier.notify(LifecycleAction.UPDATED, updated)
        return Outcome.success(updated)

    def delete(self, account_id: int, caller: CallerContext) -> Outcome[None]:
        lookup = self._authorized(self._repository.find_by_id(account_id), caller)
        if not lookup.ok:
            return Outcome(error=lookup.error)
        snapshot = lookup.value

        self._repository.delete(snapshot)
        logger.info("user deleted: %s", snapshot.username)

        self._notifier.notify(LifecycleAction.DELETED, snapshot)
        return Outcome.success()

    def _authorized(self, account: Account | None, caller: CallerContext) -> Outcome[Account]:
        if account is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, "user not found")
        if not permit(caller, account):
            return Outcome.failure(ErrorKind.AUTHORIZATION, "access denied")
        return Outcome.success(account)
