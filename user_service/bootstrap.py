"""Seed an administrator account; registration can only ever create USER accounts."""

from __future__ import annotations

import logging

from psycopg_pool import ConnectionPool

from .config import get_settings
from .domain.account import Account, Role
from .domain.ports import AccountStore, PasswordHasher
from .repository import AccountRepository
from .security.passwords import Argon2PasswordHasher

logger = logging.getLogger(__name__)


def ensure_admin(
    repository: AccountStore,
    hasher: PasswordHasher,
    *,
    username: str,
    password: str,
    email: str,
) -> Account:
    """Create the admin account, or promote an existing account with that username."""
    existing = repository.find_by_username(username)
    if existing is not None:
        if existing.role is Role.ADMIN:
            return existing
        existing.role = Role.ADMIN
        logger.info("promoted %s to admin", username)
        return repository.save(existing)

    account = repository.save(
        Account(
            id=None,
            username=username,
            password_hash=hasher.hash(password),
            email=email,
            role=Role.ADMIN,
        )
    )
    logger.info("seeded admin account %s", username)
    return account


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    if not settings.bootstrap_admin_username or not settings.bootstrap_admin_password:
        raise SystemExit("BOOTSTRAP_ADMIN_USERNAME and BOOTSTRAP_ADMIN_PASSWORD must be set")

    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    try:
        repository = AccountRepository(pool)
        repository.ensure_schema()
        admin = ensure_admin(
            repository,
            Argon2PasswordHasher.from_settings(settings),
            username=settings.bootstrap_admin_username,
            password=settings.bootstrap_admin_password,
            email=settings.bootstrap_admin_email or f"{settings.bootstrap_admin_username}@localhost",
        )
        print("OK:", admin.username, "role =", admin.role.value)
    finally:
        pool.close()


if __name__ == "__main__":
    main()
