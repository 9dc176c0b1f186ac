"""Tests for read flag updates."""

from __future__ import annotations

from app.application.use_cases.notifications import NotificationReadTracker, ReadStatus
from app.infrastructure.backend import BackendUnavailableError
from app.infrastructure.realtime import EVENT_UPDATE


def test_mark_read_is_idempotent(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    notification = dispatcher.send_to_user(user.id, "Hi", "There").notification
    tracker = NotificationReadTracker(clients.public)

    first = tracker.mark_read(notification.id)
    second = tracker.mark_read(notification.id)

    assert first and second
    assert first.updated_ids == (notification.id,)
    assert second.updated_count == 0
    assert clients.public.notifications.get(notification.id).read is True


def test_mark_read_respects_owner(clients, dispatcher, make_user) -> None:
    owner = make_user("owner@example.com")
    intruder = make_user("intruder@example.com")
    notification = dispatcher.send_to_user(owner.id, "Hi", "There").notification
    tracker = NotificationReadTracker(clients.public)

    result = tracker.mark_read(notification.id, user_id=intruder.id)

    assert result.updated_count == 0
    assert clients.public.notifications.get(notification.id).read is False


def test_mark_all_read_only_touches_one_user(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    other = make_user("other@example.com")
    for _ in range(3):
        dispatcher.send_to_user(user.id, "Hi", "There")
    dispatcher.send_to_user(other.id, "Hi", "There")
    tracker = NotificationReadTracker(clients.public)

    result = tracker.mark_all_read(user.id)

    assert result.updated_count == 3
    assert tracker.unread_count(user.id) == 0
    assert tracker.unread_count(other.id) == 1


def test_mark_many_read_skips_duplicates(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    first = dispatcher.send_to_user(user.id, "One", "Body").notification
    second = dispatcher.send_to_user(user.id, "Two", "Body").notification
    tracker = NotificationReadTracker(clients.public)

    result = tracker.mark_many_read([first.id, first.id, second.id], user_id=user.id)

    assert sorted(result.updated_ids) == sorted([first.id, second.id])
    assert tracker.unread_count(user.id) == 0


def test_read_updates_are_published(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    notification = dispatcher.send_to_user(user.id, "Hi", "There").notification
    events = []
    channel = clients.public.realtime.channel("updates").on(
        EVENT_UPDATE,
        table="notifications",
        filter=f"user_id=eq.{user.id}",
        callback=events.append,
    )
    channel.subscribe()
    try:
        NotificationReadTracker(clients.public).mark_read(notification.id)
    finally:
        channel.unsubscribe()

    assert len(events) == 1
    assert events[0].new["read"] is True
    assert events[0].old["read"] is False


def test_store_failure_is_reported(clients, monkeypatch) -> None:
    def broken(*args, **kwargs):
        raise BackendUnavailableError("store offline")

    monkeypatch.setattr(clients.public.notifications, "mark_all_read", broken)

    result = NotificationReadTracker(clients.public).mark_all_read("u1")

    assert not result
    assert result.status is ReadStatus.FAILED
    assert result.error == "store offline"


def test_list_recent_is_newest_first(clients, dispatcher, make_user) -> None:
    user = make_user("buyer@example.com")
    for index in range(4):
        dispatcher.send_to_user(user.id, f"Title {index}", "Body")

    recent = NotificationReadTracker(clients.public).list_recent(user.id, limit=3)

    assert [item.title for item in recent] == ["Title 3", "Title 2", "Title 1"]
