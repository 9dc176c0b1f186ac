"""Domain-specific notifications for orders, stock levels and signups.

Each composer gathers the admin audience plus any directly targeted user and
writes every row in a single batch, so either all recipients are notified or
none are.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.domain.entities import ROLE_ADMIN, NotificationType, OrderEvent, StockEvent
from app.infrastructure.backend import BackendError

from .dispatcher import NotificationDispatcher, build_notification
from .results import DispatchResult

logger = logging.getLogger(__name__)


@dataclass
class _Draft:
    title: str
    message: str
    type: NotificationType
    metadata: dict[str, Any] = field(default_factory=dict)


def format_amount(value: float | int) -> str:
    """Render ``value`` the way the dashboard prints totals (``50``, ``99.99``)."""

    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}".rstrip("0").rstrip(".")


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _compose(
    dispatcher: NotificationDispatcher,
    *,
    admin_draft: _Draft | None,
    direct: list[tuple[str | None, _Draft]],
    dispatch_id: str | None,
) -> DispatchResult:
    if not dispatcher.available:
        return dispatcher.send_batch([], dispatch_id=dispatch_id)

    admin_ids: list[str] = []
    if admin_draft is not None:
        try:
            admin_ids = dispatcher.role_recipients(ROLE_ADMIN)
        except BackendError as exc:
            logger.error("Error fetching admin recipients: %s", exc)
            return DispatchResult.failed(str(exc))
        if not admin_ids:
            logger.info("No users found with role: %s", ROLE_ADMIN)

    records = []
    if admin_draft is not None:
        for user_id in admin_ids:
            records.append(
                build_notification(
                    user_id,
                    admin_draft.title,
                    admin_draft.message,
                    admin_draft.type,
                    admin_draft.metadata,
                )
            )
    # A user may receive several direct drafts, but each draft only once.
    delivered: set[tuple[str, int]] = set()
    for user_id, draft in direct:
        if not user_id or (user_id, id(draft)) in delivered:
            continue
        delivered.add((user_id, id(draft)))
        records.append(
            build_notification(user_id, draft.title, draft.message, draft.type, draft.metadata)
        )

    if not records:
        return DispatchResult.no_recipients()
    return dispatcher.send_batch(records, dispatch_id=dispatch_id)


def send_new_order_notification(
    dispatcher: NotificationDispatcher, order: OrderEvent, *, dispatch_id: str | None = None
) -> DispatchResult:
    """Tell every admin, and the vendor when known, about a new order."""

    amount = format_amount(order.total_amount)
    metadata = {
        "order_id": order.order_id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "total_amount": order.total_amount,
    }
    admin_draft = _Draft(
        title="New Order Received",
        message=f"New order #{order.order_number} received for ${amount}",
        type=NotificationType.ORDER,
        metadata=metadata,
    )
    direct: list[tuple[str | None, _Draft]] = []
    if order.vendor_id:
        direct.append(
            (
                order.vendor_id,
                _Draft(
                    title="New Order Assignment",
                    message=(
                        f"You have received a new order #{order.order_number} for ${amount}"
                    ),
                    type=NotificationType.ORDER,
                    metadata=dict(metadata),
                ),
            )
        )
    return _compose(dispatcher, admin_draft=admin_draft, direct=direct, dispatch_id=dispatch_id)


def send_order_status_notification(
    dispatcher: NotificationDispatcher, order: OrderEvent, *, dispatch_id: str | None = None
) -> DispatchResult:
    """Tell the customer, every admin and the vendor about a status change."""

    direct: list[tuple[str | None, _Draft]] = [
        (
            order.customer_id,
            _Draft(
                title="Order Status Updated",
                message=(
                    f"Your order #{order.order_number} status has been updated to: {order.status}"
                ),
                type=NotificationType.STATUS_UPDATE,
                metadata=_compact(
                    {
                        "order_id": order.order_id,
                        "order_number": order.order_number,
                        "old_status": order.old_status,
                        "new_status": order.status,
                        "total_amount": order.total_amount,
                    }
                ),
            ),
        )
    ]
    admin_draft = _Draft(
        title="Order Status Changed",
        message=(
            f"Order #{order.order_number} status changed from "
            f"{order.old_status or 'unknown'} to {order.status}"
        ),
        type=NotificationType.ORDER,
        metadata=_compact(
            {
                "order_id": order.order_id,
                "order_number": order.order_number,
                "customer_id": order.customer_id,
                "old_status": order.old_status,
                "new_status": order.status,
                "total_amount": order.total_amount,
            }
        ),
    )
    if order.vendor_id:
        direct.append(
            (
                order.vendor_id,
                _Draft(
                    title="Order Status Updated",
                    message=(
                        f"Order #{order.order_number} status has been updated to: {order.status}"
                    ),
                    type=NotificationType.ORDER,
                    metadata={
                        "order_id": order.order_id,
                        "order_number": order.order_number,
                        "customer_id": order.customer_id,
                        "new_status": order.status,
                        "total_amount": order.total_amount,
                    },
                ),
            )
        )
    return _compose(dispatcher, admin_draft=admin_draft, direct=direct, dispatch_id=dispatch_id)


def send_low_stock_notification(
    dispatcher: NotificationDispatcher, stock: StockEvent, *, dispatch_id: str | None = None
) -> DispatchResult:
    """Alert every admin and the owning vendor that a product is running low."""

    base_metadata = {
        "product_id": stock.product_id,
        "product_name": stock.product_name,
        "current_stock": stock.current_stock,
        "threshold": stock.threshold,
    }
    admin_draft = _Draft(
        title="Low Stock Alert",
        message=(
            f'Product "{stock.product_name}" is running low on stock. '
            f"Current quantity: {stock.current_stock}"
        ),
        type=NotificationType.STOCK,
        metadata={**base_metadata, "vendor_id": stock.vendor_id},
    )
    vendor_draft = _Draft(
        title="Low Stock Alert",
        message=(
            f'Your product "{stock.product_name}" is running low on stock. '
            f"Current quantity: {stock.current_stock}"
        ),
        type=NotificationType.STOCK,
        metadata=dict(base_metadata),
    )
    return _compose(
        dispatcher,
        admin_draft=admin_draft,
        direct=[(stock.vendor_id, vendor_draft)],
        dispatch_id=dispatch_id,
    )


def send_new_user_notification(
    dispatcher: NotificationDispatcher,
    *,
    user_id: str,
    email: str,
    full_name: str | None = None,
    role: str | None = None,
    dispatch_id: str | None = None,
) -> DispatchResult:
    """Tell every admin that a new account signed up."""

    admin_draft = _Draft(
        title="New User Signup",
        message=f"New user signed up: {full_name or email}",
        type=NotificationType.NEW_SIGNUP,
        metadata={
            "user_id": user_id,
            "email": email,
            "full_name": full_name or "N/A",
            "role": role or "user",
        },
    )
    return _compose(dispatcher, admin_draft=admin_draft, direct=[], dispatch_id=dispatch_id)


__all__ = [
    "format_amount",
    "send_low_stock_notification",
    "send_new_order_notification",
    "send_new_user_notification",
    "send_order_status_notification",
]
