"""Tests for the order, stock and signup notification composers."""

from __future__ import annotations

from app.application.use_cases.notifications import (
    DispatchStatus,
    NotificationDispatcher,
    format_amount,
    send_low_stock_notification,
    send_new_order_notification,
    send_new_user_notification,
    send_order_status_notification,
)
from app.domain.entities import OrderEvent, StockEvent
from app.infrastructure.backend import BackendUnavailableError


def _by_user(result):
    grouped = {}
    for notification in result.notifications:
        grouped.setdefault(notification.user_id, []).append(notification)
    return grouped


def test_format_amount_drops_needless_decimals() -> None:
    assert format_amount(50) == "50"
    assert format_amount(50.0) == "50"
    assert format_amount(99.99) == "99.99"
    assert format_amount(12.5) == "12.5"


def test_new_order_notifies_admins_and_vendor_not_customer(clients, dispatcher, make_user) -> None:
    admins = [make_user(f"admin{index}@example.com", role="admin") for index in range(3)]
    vendor = make_user("vendor@example.com", role="vendor")
    customer = make_user("customer@example.com")

    order = OrderEvent(
        order_id="o1",
        order_number="ORD-1",
        customer_id=customer.id,
        status="pending",
        total_amount=50,
        vendor_id=vendor.id,
    )
    result = send_new_order_notification(dispatcher, order)

    assert result.status is DispatchStatus.DELIVERED
    grouped = _by_user(result)
    assert set(grouped) == {admin.id for admin in admins} | {vendor.id}
    assert customer.id not in grouped
    assert all(item.type == "order" for item in result.notifications)

    admin_row = grouped[admins[0].id][0]
    assert admin_row.title == "New Order Received"
    assert admin_row.message == "New order #ORD-1 received for $50"
    assert admin_row.metadata["order_id"] == "o1"

    vendor_row = grouped[vendor.id][0]
    assert vendor_row.title == "New Order Assignment"
    assert vendor_row.message == "You have received a new order #ORD-1 for $50"

    assert clients.public.notifications.count(user_id=customer.id) == 0


def test_new_order_without_vendor_only_reaches_admins(dispatcher, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")

    order = OrderEvent(
        order_id="o2",
        order_number="ORD-2",
        customer_id="c1",
        status="pending",
        total_amount=99.99,
    )
    result = send_new_order_notification(dispatcher, order)

    assert result.recipient_ids == [admin.id]
    assert result.notification.message == "New order #ORD-2 received for $99.99"


def test_new_order_with_nobody_to_tell(dispatcher) -> None:
    order = OrderEvent(
        order_id="o3", order_number="ORD-3", customer_id="c1", status="pending", total_amount=1
    )

    result = send_new_order_notification(dispatcher, order)

    assert result.status is DispatchStatus.NO_RECIPIENTS


def test_order_status_notifies_customer_admins_and_vendor(dispatcher, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")
    vendor = make_user("vendor@example.com", role="vendor")
    customer = make_user("customer@example.com")

    order = OrderEvent(
        order_id="o1",
        order_number="ORD-1",
        customer_id=customer.id,
        status="shipped",
        total_amount=50,
        vendor_id=vendor.id,
        old_status="pending",
    )
    result = send_order_status_notification(dispatcher, order)

    grouped = _by_user(result)
    customer_row = grouped[customer.id][0]
    assert customer_row.type == "status_update"
    assert customer_row.message == "Your order #ORD-1 status has been updated to: shipped"
    assert customer_row.metadata["old_status"] == "pending"
    assert customer_row.metadata["new_status"] == "shipped"

    admin_row = grouped[admin.id][0]
    assert admin_row.type == "order"
    assert admin_row.message == "Order #ORD-1 status changed from pending to shipped"

    assert grouped[vendor.id][0].title == "Order Status Updated"


def test_order_status_without_old_status_omits_it(dispatcher, make_user) -> None:
    customer = make_user("customer@example.com")

    order = OrderEvent(
        order_id="o1", order_number="ORD-1", customer_id=customer.id, status="paid", total_amount=5
    )
    result = send_order_status_notification(dispatcher, order)

    assert result.recipient_ids == [customer.id]
    assert "old_status" not in result.notification.metadata


def test_low_stock_alerts_admins_and_vendor(dispatcher, make_user) -> None:
    admins = [make_user(f"admin{index}@example.com", role="admin") for index in range(2)]
    vendor = make_user("vendor@example.com", role="vendor")

    stock = StockEvent(
        product_id="p1",
        product_name="Widget",
        current_stock=3,
        threshold=5,
        vendor_id=vendor.id,
    )
    result = send_low_stock_notification(dispatcher, stock)

    grouped = _by_user(result)
    assert set(grouped) == {admin.id for admin in admins} | {vendor.id}
    for notification in result.notifications:
        assert notification.type == "stock"
        assert notification.metadata["current_stock"] == 3
        assert notification.metadata["threshold"] == 5
    assert grouped[admins[0].id][0].metadata["vendor_id"] == vendor.id
    assert grouped[vendor.id][0].message == (
        'Your product "Widget" is running low on stock. Current quantity: 3'
    )


def test_new_signup_tells_admins(dispatcher, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")

    result = send_new_user_notification(
        dispatcher, user_id="u1", email="new@example.com", full_name="Ada Lovelace", role="vendor"
    )

    assert result.recipient_ids == [admin.id]
    notification = result.notification
    assert notification.type == "new_signup"
    assert notification.message == "New user signed up: Ada Lovelace"
    assert notification.metadata == {
        "user_id": "u1",
        "email": "new@example.com",
        "full_name": "Ada Lovelace",
        "role": "vendor",
    }


def test_composer_retry_with_same_dispatch_id_is_idempotent(clients, dispatcher, make_user) -> None:
    admin = make_user("admin@example.com", role="admin")
    vendor = make_user("vendor@example.com", role="vendor")
    stock = StockEvent(
        product_id="p1", product_name="Widget", current_stock=3, threshold=5, vendor_id=vendor.id
    )

    first = send_low_stock_notification(dispatcher, stock, dispatch_id="stock-p1")
    second = send_low_stock_notification(dispatcher, stock, dispatch_id="stock-p1")

    assert len(first) == len(second) == 2
    assert clients.public.notifications.count(user_id=admin.id) == 1
    assert clients.public.notifications.count(user_id=vendor.id) == 1


def test_composers_report_unavailable_without_admin_client() -> None:
    stock = StockEvent(
        product_id="p1", product_name="Widget", current_stock=3, threshold=5, vendor_id="v1"
    )

    result = send_low_stock_notification(NotificationDispatcher(None), stock)

    assert result.status is DispatchStatus.UNAVAILABLE


def test_order_status_for_self_sold_order_writes_both_rows(dispatcher, make_user) -> None:
    seller = make_user("seller@example.com", role="vendor")

    order = OrderEvent(
        order_id="o1",
        order_number="ORD-1",
        customer_id=seller.id,
        status="shipped",
        total_amount=50,
        vendor_id=seller.id,
    )
    result = send_order_status_notification(dispatcher, order)

    rows = _by_user(result)[seller.id]
    assert sorted(row.type for row in rows) == ["order", "status_update"]
    assert {row.message for row in rows} == {
        "Your order #ORD-1 status has been updated to: shipped",
        "Order #ORD-1 status has been updated to: shipped",
    }


def test_low_stock_reports_store_failure(clients, dispatcher, make_user, monkeypatch) -> None:
    admin = make_user("admin@example.com", role="admin")
    vendor = make_user("vendor@example.com", role="vendor")

    def store_down(records):
        raise BackendUnavailableError("connection refused")

    monkeypatch.setattr(clients.admin.notifications, "insert", store_down)
    stock = StockEvent(
        product_id="p1", product_name="Widget", current_stock=2, threshold=5, vendor_id=vendor.id
    )
    result = send_low_stock_notification(dispatcher, stock)

    assert result.status is DispatchStatus.FAILED
    assert result.notifications == ()
    assert clients.public.notifications.count(user_id=admin.id) == 0
    assert clients.public.notifications.count(user_id=vendor.id) == 0


def test_composer_reports_directory_failure(clients, dispatcher, make_user, monkeypatch) -> None:
    vendor = make_user("vendor@example.com", role="vendor")

    def store_down(**kwargs):
        raise BackendUnavailableError("connection refused")

    monkeypatch.setattr(clients.admin.auth, "list_users", store_down)
    order = OrderEvent(
        order_id="o1",
        order_number="ORD-1",
        customer_id="c1",
        status="pending",
        total_amount=50,
        vendor_id=vendor.id,
    )
    result = send_new_order_notification(dispatcher, order)

    assert result.status is DispatchStatus.FAILED
    assert result.notifications == ()
    assert clients.public.notifications.count(user_id=vendor.id) == 0
