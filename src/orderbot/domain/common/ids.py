from __future__ import annotations

from typing import NewType

ConversationId = NewType("ConversationId", str)
MenuId = NewType("MenuId", str)
ProductId = NewType("ProductId", str)
PromotionId = NewType("PromotionId", str)
OrderId = NewType("OrderId", str)
OrderItemId = NewType("OrderItemId", str)
