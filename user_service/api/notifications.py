"""Notification delivery endpoint consumed by the HTTP notification sink."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, EmailStr

from ..config import get_settings
from ..domain.contracts import NotificationMessage
from ..domain.ports import NotificationSink

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])

settings = get_settings()

_bearer = HTTPBearer(auto_error=False)


class NotificationRequest(BaseModel):
    """Message to deliver; ``text`` may contain HTML."""

    to: EmailStr
    subject: str
    text: str


def get_email_sink(request: Request) -> NotificationSink:
    sink: NotificationSink = request.app.state.email_sink
    return sink


def require_service_token(bearer: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> None:
    """Admit only callers presenting ``NOTIFICATION_SERVICE_TOKEN``; reject everyone when it is unset."""
    expected = settings.notification_service_token
    if not expected or bearer is None or not secrets.compare_digest(bearer.credentials, expected):
        logger.warning("rejected unauthenticated notification request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post("/send", status_code=status.HTTP_200_OK, dependencies=[Depends(require_service_token)])
def send_notification(
    payload: NotificationRequest,
    sink: NotificationSink = Depends(get_email_sink),
) -> dict[str, str]:
    result = sink.send(NotificationMessage(recipient=payload.to, subject=payload.subject, body=payload.text))
    if not result.success:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to send email")
    return {"status": "sent"}
