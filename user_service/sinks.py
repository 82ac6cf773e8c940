"""Notification sinks that deliver admin messages over HTTP, SMTP, or the log."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import httpx

from .config import Settings
from .domain.contracts import DeliveryResult, NotificationMessage
from .domain.ports import NotificationSink

logger = logging.getLogger(__name__)


class HttpNotificationSink:
    """Posts messages to a notification service endpoint as JSON."""

    def __init__(self, url: str, client: httpx.Client, token: str = "") -> None:
        self._url = url
        self._client = client
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    def send(self, message: NotificationMessage) -> DeliveryResult:
        payload = {"to": message.recipient, "subject": message.subject, "text": message.body}
        try:
            response = self._client.post(self._url, json=payload, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return DeliveryResult(
                recipient=message.recipient,
                success=False,
                error=f"notification service returned {exc.response.status_code}",
            )
        except httpx.HTTPError as exc:
            return DeliveryResult(recipient=message.recipient, success=False, error=str(exc))
        return DeliveryResult(recipient=message.recipient, success=True)


class SmtpNotificationSink:
    """Sends each message as an HTML email through an SMTP relay."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, message: NotificationMessage) -> DeliveryResult:
        mime = MIMEMultipart()
        mime["From"] = self._sender
        mime["To"] = message.recipient
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.body, "html"))

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(mime, to_addrs=[message.recipient])
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("failed to send email to %s: %s", message.recipient, exc)
            return DeliveryResult(recipient=message.recipient, success=False, error=str(exc))

        logger.info("email sent to %s", message.recipient)
        return DeliveryResult(recipient=message.recipient, success=True)


class LoggingNotificationSink:
    """Writes messages to the log instead of delivering them; for local development."""

    def send(self, message: NotificationMessage) -> DeliveryResult:
        logger.info("notification for %s: %s", message.recipient, message.subject)
        return DeliveryResult(recipient=message.recipient, success=True)


def build_smtp_sink(settings: Settings) -> SmtpNotificationSink:
    return SmtpNotificationSink(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.smtp_sender,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.notification_timeout_seconds,
    )


def build_sink(settings: Settings, client: httpx.Client | None = None) -> NotificationSink:
    """Instantiate the configured notification backend."""
    backend = settings.notification_backend
    if backend == "smtp":
        logger.info("admin notifications delivered over smtp via %s:%s", settings.smtp_host, settings.smtp_port)
        return build_smtp_sink(settings)
    if backend == "log":
        logger.info("admin notifications written to the log only")
        return LoggingNotificationSink()
    if backend != "http":
        raise ValueError(f"unknown notification backend: {backend!r}")
    logger.info("admin notifications posted to %s", settings.notification_service_url)
    return HttpNotificationSink(
        settings.notification_service_url,
        client or httpx.Client(timeout=settings.notification_timeout_seconds),
        token=settings.notification_service_token,
    )
