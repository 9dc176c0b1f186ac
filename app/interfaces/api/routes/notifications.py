"""Endpoints and websocket handler for marketplace notifications."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import anyio
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from app.application.use_cases.notifications import (
    DispatchResult,
    DispatchStatus,
    NotificationDispatcher,
    NotificationReadTracker,
    ReadResult,
    RealtimeNotificationBridge,
    format_time_ago,
    notification_heading,
    notification_link,
    send_low_stock_notification,
    send_new_order_notification,
    send_new_user_notification,
    send_order_status_notification,
)
from app.config import Settings, get_settings
from app.domain.entities import (
    AuthUser,
    Notification,
    NotificationType,
    OrderEvent,
    StockEvent,
)
from app.infrastructure.backend import BackendError
from app.infrastructure.realtime import WebSocketSender, serialize_notification
from app.interfaces.api.dependencies import (
    get_current_active_user,
    get_dispatcher,
    get_read_tracker,
    resolve_session_user,
)
from app.interfaces.api.schemas import (
    DispatchResponse,
    NotificationMarkReadRequest,
    NotificationRead,
    NotificationSendRequest,
    OrderEventRequest,
    ReadResponse,
    RoleNotificationRequest,
    SignupEventRequest,
    SingleDispatchResponse,
    StockEventRequest,
    UnreadCountResponse,
)
from app.utils import utc_now

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        read=notification.read,
        metadata=notification.metadata or {},
        created_at=notification.created_at,
        updated_at=notification.updated_at,
        heading=notification_heading(notification.type),
        link=notification_link(notification),
        time_ago=format_time_ago(notification.created_at),
    )


def _notification_to_payload(notification: Notification) -> dict[str, Any]:
    payload = serialize_notification(notification)
    payload["heading"] = notification_heading(notification.type)
    payload["link"] = notification_link(notification)
    return payload


def _raise_for_dispatch(result: DispatchResult) -> None:
    if result.status is DispatchStatus.UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=result.error or "Notification service unavailable",
        )
    if result.status is DispatchStatus.FAILED:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error or "Failed to send notification",
        )


def _dispatch_response(result: DispatchResult) -> DispatchResponse:
    _raise_for_dispatch(result)
    return DispatchResponse(
        success=result.ok,
        status=result.status.name.lower(),
        count=len(result),
        dispatch_id=result.dispatch_id,
        notifications=[_notification_to_schema(item) for item in result.notifications],
    )


def _read_response(result: ReadResult) -> ReadResponse:
    if not result:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error or "Failed to update notifications",
        )
    return ReadResponse(ok=True, updated=result.updated_count)


@router.post("/send", response_model=SingleDispatchResponse, status_code=status.HTTP_201_CREATED)
def send_notification(
    payload: NotificationSendRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Create one notification for ``targetUserId``; requires the service role key."""

    result = dispatcher.send_to_user(
        payload.target_user_id,
        payload.title,
        payload.message,
        payload.type,
        payload.metadata,
    )
    _raise_for_dispatch(result)
    return SingleDispatchResponse(
        success=True,
        notification=_notification_to_schema(result.notification),
    )


@router.get("/send", response_model=DispatchResponse)
def broadcast_notification(
    title: str | None = Query(None),
    message: str | None = Query(None),
    type: NotificationType = Query(NotificationType.SYSTEM),
    role: str | None = Query(None),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Broadcast to everyone holding ``role``, or to every user when no role is given."""

    if not title or not message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: title, message",
        )

    sent_at = utc_now().isoformat()
    if role:
        result = dispatcher.send_to_role(
            role, title, message, type, {"role": role, "sent_at": sent_at}
        )
        if result.status is DispatchStatus.NO_RECIPIENTS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No users found with role: {role}",
            )
    else:
        result = dispatcher.send_to_all(title, message, type, {"sent_at": sent_at})
    return _dispatch_response(result)


@router.post("/role/{role}", response_model=DispatchResponse, status_code=status.HTTP_201_CREATED)
def send_role_notification(
    role: str,
    payload: RoleNotificationRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Send a custom notification to every user holding ``role``."""

    result = dispatcher.send_to_role(
        role, payload.title, payload.message, payload.type, payload.metadata
    )
    return _dispatch_response(result)


@router.post("/events/new-order", response_model=DispatchResponse)
def new_order_event(
    payload: OrderEventRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    order = OrderEvent(**payload.model_dump(exclude={"dispatch_id"}))
    result = send_new_order_notification(dispatcher, order, dispatch_id=payload.dispatch_id)
    return _dispatch_response(result)


@router.post("/events/order-status", response_model=DispatchResponse)
def order_status_event(
    payload: OrderEventRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    order = OrderEvent(**payload.model_dump(exclude={"dispatch_id"}))
    result = send_order_status_notification(dispatcher, order, dispatch_id=payload.dispatch_id)
    return _dispatch_response(result)


@router.post("/events/low-stock", response_model=DispatchResponse)
def low_stock_event(
    payload: StockEventRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    stock = StockEvent(**payload.model_dump(exclude={"dispatch_id"}))
    result = send_low_stock_notification(dispatcher, stock, dispatch_id=payload.dispatch_id)
    return _dispatch_response(result)


@router.post("/events/new-signup", response_model=DispatchResponse)
def new_signup_event(
    payload: SignupEventRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    result = send_new_user_notification(
        dispatcher,
        user_id=payload.user_id,
        email=payload.email,
        full_name=payload.full_name,
        role=payload.role,
        dispatch_id=payload.dispatch_id,
    )
    return _dispatch_response(result)


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int | None = Query(None, ge=1, le=100),
    tracker: NotificationReadTracker = Depends(get_read_tracker),
    current_user: AuthUser = Depends(get_current_active_user),
    settings: Settings = Depends(get_settings),
):
    """Return the most recent notifications for the authenticated user."""

    try:
        notifications = tracker.list_recent(
            current_user.id, limit=limit or settings.notification_fetch_limit
        )
    except BackendError as exc:
        logger.error("Error fetching notifications for %s: %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notifications unavailable",
        ) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    tracker: NotificationReadTracker = Depends(get_read_tracker),
    current_user: AuthUser = Depends(get_current_active_user),
):
    try:
        count = tracker.unread_count(current_user.id)
    except BackendError as exc:
        logger.error("Error counting notifications for %s: %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notifications unavailable",
        ) from exc
    return UnreadCountResponse(count=count)


@router.post("/read-all", response_model=ReadResponse)
def mark_all_read(
    tracker: NotificationReadTracker = Depends(get_read_tracker),
    current_user: AuthUser = Depends(get_current_active_user),
):
    """Mark every unread notification of the authenticated user as read."""

    return _read_response(tracker.mark_all_read(current_user.id))


@router.post("/read", response_model=ReadResponse)
def mark_many_read(
    payload: NotificationMarkReadRequest,
    tracker: NotificationReadTracker = Depends(get_read_tracker),
    current_user: AuthUser = Depends(get_current_active_user),
):
    return _read_response(tracker.mark_many_read(payload.ids, user_id=current_user.id))


@router.post("/{notification_id}/read", response_model=ReadResponse)
def mark_read(
    notification_id: str,
    tracker: NotificationReadTracker = Depends(get_read_tracker),
    current_user: AuthUser = Depends(get_current_active_user),
):
    """Mark one notification read; ids owned by someone else are left untouched."""

    return _read_response(tracker.mark_read(notification_id, user_id=current_user.id))


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    clients = websocket.app.state.backend
    settings = get_settings()
    try:
        user = await anyio.to_thread.run_sync(resolve_session_user, token, clients)
    except HTTPException:
        await websocket.close(code=1008)
        return
    if user.is_suspended():
        await websocket.close(code=1008)
        return

    await websocket.accept()
    # Pushes wait until the init snapshot has gone out.
    sender = WebSocketSender(websocket, asyncio.get_running_loop(), paused=True)

    def push_notification(notification: Notification, unread: int) -> None:
        sender.send(
            {
                "type": "notification",
                "data": _notification_to_payload(notification),
                "unread_count": unread,
            }
        )

    def push_toast(notification: Notification) -> None:
        sender.send(
            {
                "type": "toast",
                "data": {
                    "id": notification.id,
                    "heading": notification_heading(notification.type),
                    "title": notification.title,
                    "message": notification.message,
                },
            }
        )

    bridge = RealtimeNotificationBridge(
        clients.public,
        user.id,
        limit=settings.notification_fetch_limit,
        on_notification=push_notification,
        on_toast=push_toast,
    )
    try:
        initial = await anyio.to_thread.run_sync(bridge.start)
    except BackendError as exc:
        logger.error("Could not load notifications for %s: %s", user.id, exc)
        await websocket.close(code=1011)
        return

    try:
        await websocket.send_json(
            {
                "type": "init",
                "data": [_notification_to_payload(n) for n in initial],
                "unread_count": bridge.unread_count,
            }
        )
        await sender.release()
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    ids = [str(item) for item in ids]
                    result = await anyio.to_thread.run_sync(bridge.mark_many_read, ids)
                    await websocket.send_json(
                        {
                            "type": "ack",
                            "ok": result.ok,
                            "ids": list(result.updated_ids),
                            "unread_count": bridge.unread_count,
                        }
                    )
                continue
    except WebSocketDisconnect:
        logger.debug("Notification socket closed for %s", user.id)
    finally:
        sender.close()
        bridge.stop()
