"""Domain model and workflows for account lifecycle management."""

from .account import Account, CallerContext, Role
from .contracts import (
    DeliveryResult,
    LifecycleAction,
    NotificationMessage,
    RegisterAccountInput,
    UpdateAccountInput,
)
from .errors import AccountError, DuplicateAccountError, ErrorKind, MissingAccountError, Outcome

__all__ = [
    "Account",
    "AccountError",
    "CallerContext",
    "DeliveryResult",
    "DuplicateAccountError",
    "ErrorKind",
    "LifecycleAction",
    "MissingAccountError",
    "NotificationMessage",
    "Outcome",
    "RegisterAccountInput",
    "Role",
    "UpdateAccountInput",
]
