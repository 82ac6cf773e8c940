"""Fan-out of account change notifications to every administrator."""

from __future__ import annotations

import logging

from prometheus_client import Counter

from .account import Account, Role
from .contracts import DeliveryResult, LifecycleAction, NotificationMessage
from .ports import AccountStore, NotificationSink

logger = logging.getLogger(__name__)

NOTIFICATIONS_TOTAL = Counter(
    "user_service_notifications_total",
    "Admin notifications handed to the notification sink, by outcome.",
    ["outcome"],
)


def build_message(
    action: LifecycleAction,
    account: Account,
    recipient: str,
    *,
    include_password_hash: bool = False,
) -> NotificationMessage:
    """Render the admin notification for ``account``."""
    subject = f"{action.value} user {account.username}"
    if include_password_hash:
        body = (
            f"{action.value} user with username - {account.username}, "
            f"password - {account.password_hash}, email - {account.email}"
        )
    else:
        body = f"{action.value} user with username - {account.username}, email - {account.email}"
    return NotificationMessage(recipient=recipient, subject=subject, body=body)


class AdminNotifier:
    """Sends one message per admin account whenever an account changes.

    Delivery is best effort: a failure for one admin is logged and the loop
    moves on to the next. Nothing here raises back into the lifecycle operation.
    """

    def __init__(
        self,
        repository: AccountStore,
        sink: NotificationSink,
        *,
        include_password_hash: bool = False,
    ) -> None:
        self._repository = repository
        self._sink = sink
        self._include_password_hash = include_password_hash

    def notify(self, action: LifecycleAction, account: Account) -> list[DeliveryResult]:
        """Notify every current admin about ``action`` applied to ``account``."""
        # Admin membership is read fresh on each call.
        try:
            accounts = self._repository.find_all()
        except Exception:  # the triggering write has already committed
            NOTIFICATIONS_TOTAL.labels(outcome="failed").inc()
            logger.exception("could not enumerate admins for %s of %s", action.value, account.username)
            return []
        admins = [candidate for candidate in accounts if candidate.role is Role.ADMIN]
        results: list[DeliveryResult] = []
        for admin in admins:
            message = build_message(
                action,
                account,
                admin.email,
                include_password_hash=self._include_password_hash,
            )
            result = self._deliver(message)
            if result.success:
                NOTIFICATIONS_TOTAL.labels(outcome="delivered").inc()
                logger.info("notification sent to admin %s", admin.email)
            else:
                NOTIFICATIONS_TOTAL.labels(outcome="failed").inc()
                logger.warning(
                    "notification to admin %s failed: %s", admin.email, result.error
                )
            results.append(result)
        return results

    def _deliver(self, message: NotificationMessage) -> DeliveryResult:
        try:
            return self._sink.send(message)
        except Exception as exc:  # sink contract violated; keep fanning out
            logger.exception("notification sink raised for %s", message.recipient)
            return DeliveryResult(recipient=message.recipient, success=False, error=str(exc))
