"""HTTP route definitions for the user service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, EmailStr, Field

from ..config import get_settings
from ..domain.account import Account, CallerContext, Role
from ..domain.contracts import RegisterAccountInput, UpdateAccountInput
from ..domain.errors import ErrorKind, Outcome
from ..domain.service import AccountService
from ..security.credentials import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

settings = get_settings()

_bearer = HTTPBearer(auto_error=False)

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
}


class AccountResponse(BaseModel):
    """Serialised representation of an `Account` aggregate.

    ``password`` carries the stored hash and is only populated when the
    ``EXPOSE_PASSWORD_HASH`` compatibility setting is on.
    """

    id: int
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    role: Role
    password: str | None = None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        fields = {
            "id": account.id,
            "username": account.username,
            "email": account.email,
            "first_name": account.first_name,
            "last_name": account.last_name,
            "role": account.role,
        }
        if settings.expose_password_hash:
            fields["password"] = account.password_hash
        return cls(**fields)


class RegisterRequest(BaseModel):
    """Payload accepted when registering a new account."""

    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    role: Role | None = None


class UpdateAccountRequest(BaseModel):
    """Replacement values for an account; a blank password keeps the current one."""

    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    """Token issuance response containing the bearer token and metadata."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_credentials(request: Request) -> CredentialService:
    credentials: CredentialService = request.app.state.credential_service
    return credentials


def get_caller(
    bearer: HTTPAuthorizationCredentials | None = Depends(_bearer),
    credentials: CredentialService = Depends(get_credentials),
) -> CallerContext:
    """Resolve the authenticated caller from the bearer token or reject with 401."""
    caller = credentials.resolve_caller(bearer.credentials) if bearer else None
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


@router.post("/auth/register", response_model=AccountResponse, response_model_exclude_unset=True)
def register(
    payload: RegisterRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Register a new account; the role is always USER."""
    outcome = service.register(
        RegisterAccountInput(
            username=payload.username,
            password=payload.password,
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=payload.role,
        )
    )
    return AccountResponse.from_domain(_unwrap(outcome))


@router.post("/auth/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    credentials: CredentialService = Depends(get_credentials),
) -> TokenResponse:
    bundle = credentials.authenticate(payload.username, payload.password)
    if bundle is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")
    return TokenResponse(access_token=bundle.access_token, expires_in=bundle.expires_in)


@router.get("/users/me", response_model=AccountResponse, response_model_exclude_unset=True)
def get_current_user(
    caller: CallerContext = Depends(get_caller),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    logger.info("fetching current user: %s", caller.username)
    return AccountResponse.from_domain(_unwrap(service.get_by_username(caller.username, caller)))


@router.get("/users", response_model=list[AccountResponse], response_model_exclude_unset=True)
def list_users(
    caller: CallerContext = Depends(get_caller),
    service: AccountService = Depends(get_service),
) -> list[AccountResponse]:
    logger.info("fetching all users for %s", caller.username)
    return [AccountResponse.from_domain(account) for account in _unwrap(service.list_all(caller))]


@router.get("/users/{account_id}", response_model=AccountResponse, response_model_exclude_unset=True)
def get_user(
    account_id: int,
    caller: CallerContext = Depends(get_caller),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    logger.info("fetching user with id %s", account_id)
    return AccountResponse.from_domain(_unwrap(service.get(account_id, caller)))


@router.put("/users/{account_id}", response_model=AccountResponse, response_model_exclude_unset=True)
def update_user(
    account_id: int,
    payload: UpdateAccountRequest,
    caller: CallerContext = Depends(get_caller),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    logger.info("updating user with id %s", account_id)
    outcome = service.update(
        account_id,
        UpdateAccountInput(
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            password=payload.password,
        ),
        caller,
    )
    return AccountResponse.from_domain(_unwrap(outcome))


@router.delete("/users/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    account_id: int,
    caller: CallerContext = Depends(get_caller),
    service: AccountService = Depends(get_service),
) -> Response:
    logger.info("deleting user with id %s", account_id)
    _unwrap(service.delete(account_id, caller))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _unwrap(outcome: Outcome):
    """Return the outcome's value or raise the matching HTTP error."""
    if outcome.error is not None:
        raise HTTPException(status_code=_STATUS_BY_KIND[outcome.error.kind], detail=outcome.error.message)
    return outcome.value
