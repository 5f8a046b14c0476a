from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orderbot.domain.common.ids import ConversationId, OrderId
from orderbot.domain.common.money import Money


@dataclass(frozen=True)
class CartUpdated:
    order_id: OrderId
    conversation_id: ConversationId
    operation: str
    item_count: int
    total: Money
    occurred_at: datetime


@dataclass(frozen=True)
class OrderConfirmed:
    order_id: OrderId
    conversation_id: ConversationId
    total: Money
    item_count: int
    occurred_at: datetime
