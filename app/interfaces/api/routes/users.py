"""Routes for browsing the user directory."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.application.use_cases.users import list_users as list_users_uc
from app.config import Settings, get_settings
from app.domain.entities import AuthUser
from app.infrastructure.backend import BackendClient, BackendError
from app.interfaces.api.dependencies import get_admin_client, get_current_active_user
from app.interfaces.api.schemas import UserRead

from .auth import to_user_read

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: AuthUser = Depends(get_current_active_user)):
    """Return the account that owns the session token."""

    return to_user_read(current_user)


@router.get("/", response_model=list[UserRead])
def list_users(
    role: str | None = Query(None, description="Only users whose metadata role matches"),
    user_status: str | None = Query(None, alias="status"),
    client: BackendClient = Depends(get_admin_client),
    settings: Settings = Depends(get_settings),
):
    """List every user of the directory; requires the service role key."""

    try:
        users = list_users_uc(
            client,
            role=role,
            status=user_status,
            page_size=settings.user_list_page_size,
        )
    except BackendError as exc:
        logger.error("Error listing users: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User directory unavailable",
        ) from exc
    return [to_user_read(user) for user in users]
