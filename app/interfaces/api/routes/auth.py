"""Endpoints for account signup and session tokens."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from app.application.use_cases.notifications import NotificationDispatcher
from app.application.use_cases.users import (
    AuthenticationStatus,
    authenticate_user,
    register_user,
)
from app.config import Settings, get_settings
from app.domain.entities import ROLE_CUSTOMER, AuthUser
from app.infrastructure.backend import BackendClient, BackendError
from app.infrastructure.security import create_access_token
from app.interfaces.api.dependencies import get_api_client, get_signup_dispatcher
from app.interfaces.api.schemas import Token, UserRead, UserSignup

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def to_user_read(user: AuthUser) -> UserRead:
    return UserRead(
        id=user.id or "",
        email=user.email,
        role=user.role,
        status=user.status,
        user_metadata=user.user_metadata,
        created_at=user.created_at,
    )


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(
    payload: UserSignup,
    client: BackendClient = Depends(get_api_client),
    dispatcher: NotificationDispatcher = Depends(get_signup_dispatcher),
):
    """Create an account and let the admins know about it.

    Only service role callers may choose the role; everyone else signs up as a
    customer.
    """

    role = payload.role if client.privileged else ROLE_CUSTOMER
    try:
        user = register_user(
            client,
            dispatcher,
            email=payload.email,
            password=payload.password,
            name=payload.name,
            role=role,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BackendError as exc:
        logger.error("Signup for %s failed: %s", payload.email, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User directory unavailable",
        ) from exc

    logger.info("New account %s registered with role %s", user.email, user.role)
    return to_user_read(user)


# OAuth2PasswordRequestForm names the email field ``username``.
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    client: BackendClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    """Authenticate by email and password and return a session token."""

    try:
        user, auth_status = authenticate_user(client, form_data.username, form_data.password)
    except BackendError as exc:
        logger.error("Login lookup failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User directory unavailable",
        ) from exc

    if auth_status is AuthenticationStatus.INVALID_CREDENTIALS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if auth_status is AuthenticationStatus.SUSPENDED:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is suspended",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        user.id,
        role=user.role,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_id": user.id,
        "role": user.role,
    }
