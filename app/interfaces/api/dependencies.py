"""FastAPI dependency utilities."""

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from app.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationReadTracker,
)
from app.config import Settings, get_settings
from app.domain.entities import AuthUser
from app.infrastructure.backend import BackendClient, BackendClients, BackendError
from app.infrastructure.security import decode_access_token, keys_match

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

_UNAVAILABLE_DETAIL = "Admin client not configured"


def get_backend_clients(request: Request) -> BackendClients:
    """Return the client handles built at startup."""

    return request.app.state.backend


def get_api_client(
    apikey: str | None = Header(default=None),
    clients: BackendClients = Depends(get_backend_clients),
    settings: Settings = Depends(get_settings),
) -> BackendClient:
    """Pick the client matching the ``apikey`` header.

    The service role key selects the privileged handle and the anon key the
    public one; anything else is rejected.
    """

    if clients.admin is not None and keys_match(apikey, settings.service_role_key):
        return clients.admin
    if keys_match(apikey, settings.anon_key):
        return clients.public
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
    )


def get_admin_client(
    client: BackendClient = Depends(get_api_client),
    clients: BackendClients = Depends(get_backend_clients),
) -> BackendClient:
    """Ensure the caller presented the service role key."""

    if clients.admin is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=_UNAVAILABLE_DETAIL,
        )
    if not client.privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Service role key required",
        )
    return client


def get_dispatcher(
    client: BackendClient = Depends(get_api_client),
    clients: BackendClients = Depends(get_backend_clients),
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    """Return a dispatcher for privileged callers.

    Without a configured privileged client the dispatcher reports every call
    as unavailable, which the routes turn into a 503.
    """

    if clients.admin is None:
        return NotificationDispatcher(None)
    if not client.privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Service role key required",
        )
    return NotificationDispatcher(client, page_size=settings.user_list_page_size)


def get_signup_dispatcher(
    clients: BackendClients = Depends(get_backend_clients),
    settings: Settings = Depends(get_settings),
) -> NotificationDispatcher:
    """Dispatcher used by the signup flow regardless of who is calling."""

    return NotificationDispatcher(clients.admin, page_size=settings.user_list_page_size)


def resolve_session_user(token: str, clients: BackendClients) -> AuthUser:
    """Resolve the user that owns the session token."""

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise credentials_exception from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise credentials_exception

    try:
        user = clients.public.auth.get_user(user_id)
    except BackendError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="User directory unavailable",
        ) from exc
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    clients: BackendClients = Depends(get_backend_clients),
) -> AuthUser:
    """Return the authenticated user from the provided token."""

    return resolve_session_user(token, clients)


def get_current_active_user(current_user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """Ensure the authenticated user is not suspended."""

    if current_user.is_suspended():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is suspended",
        )
    return current_user


def get_read_tracker(
    clients: BackendClients = Depends(get_backend_clients),
) -> NotificationReadTracker:
    return NotificationReadTracker(clients.public)
