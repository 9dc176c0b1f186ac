"""In-process change feed over store tables.

Writers publish row changes after their transaction commits; subscribers open
named channels bound to a table, an event type and an optional row filter
written in the ``column=op.value`` form (``user_id=eq.42``).
"""

from __future__ import annotations

import itertools
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from app.utils import utc_now

logger = logging.getLogger(__name__)

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENT_ANY = "*"
_EVENT_TYPES = {EVENT_INSERT, EVENT_UPDATE, EVENT_ANY}

_FILTER_PATTERN = re.compile(r"^(?P<column>[A-Za-z_][A-Za-z0-9_]*)=(?P<op>eq|neq|in)\.(?P<value>.+)$")


@dataclass(frozen=True)
class ChangeEvent:
    """A committed row change as delivered to subscribers."""

    event_type: str
    table: str
    new: dict[str, Any]
    old: dict[str, Any]
    sequence: int
    commit_timestamp: datetime


@dataclass(frozen=True)
class RowFilter:
    """Server-side row predicate attached to a channel binding."""

    column: str
    operator: str
    value: str

    def matches(self, row: dict[str, Any]) -> bool:
        actual = row.get(self.column)
        actual_text = "" if actual is None else str(actual)
        if self.operator == "eq":
            return actual_text == self.value
        if self.operator == "neq":
            return actual_text != self.value
        candidates = {item.strip() for item in self.value.strip("()").split(",")}
        return actual_text in candidates


def parse_filter(expression: str | None) -> RowFilter | None:
    """Parse ``expression`` into a :class:`RowFilter`.

    ``None`` or an empty string means no filter. Raises ``ValueError`` when the
    expression is malformed.
    """

    if expression is None or not expression.strip():
        return None
    match = _FILTER_PATTERN.match(expression.strip())
    if not match:
        raise ValueError(f"Invalid row filter: {expression!r}")
    return RowFilter(
        column=match.group("column"),
        operator=match.group("op"),
        value=match.group("value"),
    )


ChangeCallback = Callable[[ChangeEvent], None]


@dataclass(frozen=True)
class _Binding:
    event: str
    table: str
    row_filter: RowFilter | None
    callback: ChangeCallback

    def accepts(self, event: ChangeEvent) -> bool:
        if self.table != event.table:
            return False
        if self.event not in (EVENT_ANY, event.event_type):
            return False
        if self.row_filter is None:
            return True
        return self.row_filter.matches(event.new or event.old)


@dataclass(eq=False)
class Channel:
    """Named subscription made of one or more bindings."""

    feed: "ChangeFeed"
    name: str
    _bindings: list[_Binding] = field(default_factory=list)
    _subscribed: bool = False

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    def on(
        self,
        event: str,
        *,
        table: str,
        callback: ChangeCallback,
        filter: str | None = None,
    ) -> "Channel":
        """Register ``callback`` for ``event`` on ``table``; returns the channel."""

        normalized = event.upper()
        if normalized not in _EVENT_TYPES:
            raise ValueError(f"Unsupported change event: {event!r}")
        self._bindings.append(
            _Binding(
                event=normalized,
                table=table,
                row_filter=parse_filter(filter),
                callback=callback,
            )
        )
        return self

    def subscribe(self) -> "Channel":
        """Start receiving events; subscribing twice is a no-op."""

        if not self._subscribed:
            self.feed._attach(self)
            self._subscribed = True
        return self

    def unsubscribe(self) -> None:
        """Stop receiving events; safe to call more than once."""

        if self._subscribed:
            self.feed._detach(self)
            self._subscribed = False

    def _deliver(self, event: ChangeEvent) -> None:
        for binding in self._bindings:
            if not binding.accepts(event):
                continue
            try:
                binding.callback(event)
            except Exception:  # a subscriber must not fail the writer
                logger.exception(
                    "Subscriber on channel %s failed to handle %s #%s",
                    self.name,
                    event.event_type,
                    event.sequence,
                )


class ChangeFeed:
    """Fan committed row changes out to subscribed channels."""

    def __init__(self) -> None:
        self._channels: list[Channel] = []
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)

    @property
    def channel_count(self) -> int:
        with self._lock:
            return len(self._channels)

    def channel(self, name: str) -> Channel:
        """Create a new, not yet subscribed, channel called ``name``."""

        return Channel(feed=self, name=name)

    def remove_channel(self, channel: Channel) -> None:
        channel.unsubscribe()

    def publish(
        self,
        table: str,
        event_type: str,
        new: dict[str, Any] | None = None,
        old: dict[str, Any] | None = None,
    ) -> ChangeEvent:
        """Deliver a change to every matching subscriber on the calling thread."""

        with self._lock:
            event = ChangeEvent(
                event_type=event_type,
                table=table,
                new=dict(new or {}),
                old=dict(old or {}),
                sequence=next(self._sequence),
                commit_timestamp=utc_now(),
            )
            channels = list(self._channels)
        for channel in channels:
            channel._deliver(event)
        return event

    def _attach(self, channel: Channel) -> None:
        with self._lock:
            if channel not in self._channels:
                self._channels.append(channel)

    def _detach(self, channel: Channel) -> None:
        with self._lock:
            if channel in self._channels:
                self._channels.remove(channel)


__all__ = [
    "EVENT_ANY",
    "EVENT_INSERT",
    "EVENT_UPDATE",
    "ChangeEvent",
    "ChangeFeed",
    "Channel",
    "RowFilter",
    "parse_filter",
]
