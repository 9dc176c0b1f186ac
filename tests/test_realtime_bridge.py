"""Tests for the per-session realtime notification bridge."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import RealtimeNotificationBridge
from app.infrastructure.backend import BackendUnavailableError


def test_start_loads_recent_notifications(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    for index in range(3):
        dispatcher.send_to_user(user.id, f"Title {index}", "Body")

    bridge = RealtimeNotificationBridge(clients.public, user.id, limit=2)
    try:
        initial = bridge.start()
    finally:
        bridge.stop()

    assert [item.title for item in initial] == ["Title 2", "Title 1"]
    assert bridge.unread_count == 2


def test_inserts_are_prepended_and_counted(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    other = make_user("other@example.com")
    dispatcher.send_to_user(user.id, "Older", "Body")

    seen, toasts = [], []
    bridge = RealtimeNotificationBridge(
        clients.public,
        user.id,
        on_notification=lambda notification, unread: seen.append((notification.title, unread)),
        on_toast=lambda notification: toasts.append(notification.title),
    )
    bridge.start()
    try:
        dispatcher.send_to_user(user.id, "Newer", "Body")
        dispatcher.send_to_user(other.id, "Not mine", "Body")
        dispatcher.send_to_user(user.id, "Newest", "Body")
    finally:
        bridge.stop()

    assert [item.title for item in bridge.notifications] == ["Newest", "Newer", "Older"]
    assert bridge.unread_count == 3
    assert seen == [("Newer", 2), ("Newest", 3)]
    assert toasts == ["Newer", "Newest"]


def test_insert_during_initial_fetch_is_kept_once(clients, dispatcher, make_user, monkeypatch) -> None:
    user = make_user("buyer@example.com")
    table = clients.public.notifications
    original_select = table.select

    def select_with_concurrent_insert(**kwargs):
        dispatcher.send_to_user(user.id, "Raced", "Body")
        return original_select(**kwargs)

    monkeypatch.setattr(table, "select", select_with_concurrent_insert)

    bridge = RealtimeNotificationBridge(clients.public, user.id)
    bridge.start()
    bridge.stop()

    assert [item.title for item in bridge.notifications] == ["Raced"]
    assert bridge.unread_count == 1


def test_stop_ends_delivery(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    bridge = RealtimeNotificationBridge(clients.public, user.id)
    bridge.start()
    assert bridge.is_subscribed
    bridge.stop()
    bridge.stop()

    dispatcher.send_to_user(user.id, "Missed", "Body")

    assert not bridge.is_subscribed
    assert bridge.notifications == []
    assert clients.public.realtime.channel_count == 0


def test_resync_fetches_rows_missed_while_stopped(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    dispatcher.send_to_user(user.id, "Before", "Body")

    bridge = RealtimeNotificationBridge(clients.public, user.id)
    bridge.start()
    bridge.stop()
    dispatcher.send_to_user(user.id, "While away", "Body")

    added = bridge.resync()

    assert [item.title for item in added] == ["While away"]
    assert [item.title for item in bridge.notifications] == ["While away", "Before"]
    assert bridge.unread_count == 2
    assert bridge.resync() == []


def test_mark_read_updates_store_and_counter(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    first = dispatcher.send_to_user(user.id, "One", "Body").notification
    dispatcher.send_to_user(user.id, "Two", "Body")

    bridge = RealtimeNotificationBridge(clients.public, user.id)
    bridge.start()
    try:
        assert bridge.mark_read(first.id)
        assert bridge.unread_count == 1
        assert bridge.mark_read(first.id)
        assert bridge.unread_count == 1

        assert bridge.mark_all_read()
    finally:
        bridge.stop()

    assert bridge.unread_count == 0
    assert all(item.read for item in bridge.notifications)
    assert clients.public.notifications.count(user_id=user.id, read=False) == 0


def test_failed_initial_fetch_closes_subscription(clients, make_user, monkeypatch) -> None:
    user = make_user("buyer@example.com")

    def broken_select(**kwargs):
        raise BackendUnavailableError("store offline")

    monkeypatch.setattr(clients.public.notifications, "select", broken_select)
    bridge = RealtimeNotificationBridge(clients.public, user.id)

    with pytest.raises(BackendUnavailableError):
        bridge.start()
    assert not bridge.is_subscribed
    assert clients.public.realtime.channel_count == 0
