"""Access rules for account records."""

from __future__ import annotations

from .account import Account, CallerContext, Role


def permit(caller: CallerContext, target: Account) -> bool:
    """Return ``True`` when the caller is an admin or owns the target account."""
    return caller.role is Role.ADMIN or caller.username == target.username


def permit_admin_only(caller: CallerContext) -> bool:
    return caller.role is Role.ADMIN
