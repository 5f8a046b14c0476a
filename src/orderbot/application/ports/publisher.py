from __future__ import annotations

from typing import Protocol


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...


def conversation_channel(conversation_id: str) -> str:
    return f"events:{conversation_id}"
