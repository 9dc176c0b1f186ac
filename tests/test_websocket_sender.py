"""Tests for delivering websocket messages from feed callbacks."""

from __future__ import annotations

import asyncio

from app.infrastructure.realtime import WebSocketSender


class _RecordingSocket:
    def __init__(self) -> None:
        self.sent = []

    async def send_json(self, message) -> None:
        self.sent.append(message)


def test_paused_sender_holds_messages_until_released() -> None:
    socket = _RecordingSocket()

    async def scenario() -> list:
        sender = WebSocketSender(socket, asyncio.get_running_loop(), paused=True)
        sender.send({"type": "notification", "n": 1})
        await asyncio.to_thread(sender.send, {"type": "toast", "n": 2})
        await asyncio.sleep(0)
        held_back = list(socket.sent)

        await socket.send_json({"type": "init"})
        await sender.release()
        sender.send({"type": "notification", "n": 3})
        for _ in range(3):
            await asyncio.sleep(0)
        return held_back

    held_back = asyncio.run(scenario())

    assert held_back == []
    assert [message["type"] for message in socket.sent] == [
        "init",
        "notification",
        "toast",
        "notification",
    ]
    assert [message.get("n") for message in socket.sent[1:]] == [1, 2, 3]


def test_closed_sender_drops_held_messages() -> None:
    socket = _RecordingSocket()

    async def scenario() -> None:
        sender = WebSocketSender(socket, asyncio.get_running_loop(), paused=True)
        sender.send({"type": "notification"})
        sender.close()
        await sender.release()
        sender.send({"type": "toast"})
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert socket.sent == []
