from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from orderbot.domain.order.entities import Order
from orderbot.domain.order.events import CartUpdated, OrderConfirmed


def _serialize_event(
    *,
    event_type: str,
    occurred_at: datetime,
    conversation_id: str,
    payload: dict[str, Any],
    trace_id: str | None,
    request_id: str | None,
) -> str:
    envelope = {
        "event_id": str(uuid4()),
        "event_type": event_type,
        "occurred_at": occurred_at.isoformat(),
        "request_id": request_id,
        "trace_id": trace_id,
        "conversation_id": conversation_id,
        "payload": payload,
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def _order_payload(order: Order) -> dict[str, Any]:
    return {
        "orderId": str(order.order_id),
        "status": order.status.value,
        "menuId": str(order.menu_id) if order.menu_id else None,
        "totals": {
            "subtotalCents": order.totals.subtotal.amount_cents,
            "discountCents": order.totals.discount.amount_cents,
            "deliveryFeeCents": order.totals.delivery_fee.amount_cents,
            "totalCents": order.totals.total.amount_cents,
            "currency": order.currency,
        },
        "items": [
            {
                "itemId": str(item.item_id),
                "productId": str(item.product_id),
                "quantity": item.quantity,
                "unitPriceCents": item.unit_price.amount_cents,
                "totalPriceCents": item.total_price.amount_cents,
            }
            for item in order.items
        ],
    }


def serialize_cart_updated_event(
    *,
    event: CartUpdated,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload = _order_payload(order)
    payload["operation"] = event.operation
    return _serialize_event(
        event_type="cart.updated",
        occurred_at=event.occurred_at,
        conversation_id=str(event.conversation_id),
        payload=payload,
        trace_id=trace_id,
        request_id=request_id,
    )


def serialize_order_confirmed_event(
    *,
    event: OrderConfirmed,
    order: Order,
    trace_id: str | None,
    request_id: str | None,
) -> str:
    payload = _order_payload(order)
    payload["contactFirstName"] = order.contact_first_name
    if order.shipping is not None:
        payload["shippingType"] = order.shipping.type.value
    if order.payment is not None:
        payload["paymentMethod"] = order.payment.method.value
    return _serialize_event(
        event_type="order.confirmed",
        occurred_at=event.occurred_at,
        conversation_id=str(event.conversation_id),
        payload=payload,
        trace_id=trace_id,
        request_id=request_id,
    )
