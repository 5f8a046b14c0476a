from __future__ import annotations

import logging
from datetime import datetime, timezone

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import OrderConflictError, OrderNotEditableError, OrderNotFoundError
from orderbot.application.mappers.event_envelope import serialize_cart_updated_event
from orderbot.application.mappers.order_mapper import to_order_summary
from orderbot.application.metrics.ordering import record_cart_mutation, record_discount_applied
from orderbot.application.ports.publisher import EventPublisher, conversation_channel
from orderbot.application.ports.repositories import (
    CatalogRepository,
    OptimisticConcurrencyError,
    OrderRepository,
)
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.application.services.order_totals import PricedOrder
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId
from orderbot.domain.order.entities import Order
from orderbot.domain.order.entities import OrderNotEditableError as DomainOrderNotEditableError
from orderbot.domain.order.events import CartUpdated

logger = logging.getLogger(__name__)


def load_order(order_repository: OrderRepository, order_id: OrderId) -> Order:
    order = order_repository.get(order_id)
    if order is None:
        raise OrderNotFoundError(f"order {order_id} not found", details={"orderId": str(order_id)})
    return order


def load_editable_order(order_repository: OrderRepository, order_id: OrderId) -> Order:
    order = load_order(order_repository, order_id)
    try:
        order.ensure_editable()
    except DomainOrderNotEditableError as exc:
        raise OrderNotEditableError(str(exc), details={"status": order.status.value}) from exc
    return order


def bind_menu_if_missing(order: Order, menu_resolver: MenuResolver) -> Order:
    if order.menu_id is not None:
        return order
    menu_id = menu_resolver.resolve(None)
    if menu_id is None:
        return order
    return order.bind_menu(menu_id)


def summarize(order: Order, catalog_repository: CatalogRepository) -> OrderSummaryResponse:
    missing_display = [
        item.product_id
        for item in order.items
        if item.snapshot is None or not item.snapshot.name or not item.snapshot.image
    ]
    products = catalog_repository.get_products(missing_display) if missing_display else {}
    return to_order_summary(order, products)


def commit_cart_mutation(
    *,
    order_repository: OrderRepository,
    publisher: EventPublisher,
    priced: PricedOrder,
    expected_version: int,
    operation: str,
    trace_ctx: TraceContext,
) -> Order:
    """Persist a priced cart and announce it; publishing never fails the mutation."""
    persisted = save_priced_order(order_repository, priced, expected_version)
    record_cart_mutation(operation)
    event = CartUpdated(
        order_id=persisted.order_id,
        conversation_id=persisted.conversation_id,
        operation=operation,
        item_count=len(persisted.items),
        total=persisted.totals.total,
        occurred_at=datetime.now(timezone.utc),
    )
    message = serialize_cart_updated_event(
        event=event,
        order=persisted,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_quietly(publisher, conversation_channel(str(persisted.conversation_id)), message)
    return persisted


def save_priced_order(
    order_repository: OrderRepository,
    priced: PricedOrder,
    expected_version: int,
) -> Order:
    try:
        persisted = order_repository.save(priced.order, expected_version=expected_version)
    except OptimisticConcurrencyError as exc:
        raise OrderConflictError(
            str(exc), details={"orderId": str(priced.order.order_id)}
        ) from exc

    # only committed discounts are counted
    discount_cents = persisted.totals.discount.amount_cents
    if priced.applied is not None and discount_cents > 0:
        record_discount_applied(
            promotion_type=priced.applied.promotion_type,
            amount_cents=discount_cents,
            currency=persisted.currency,
        )
        logger.info(
            "promotion_discount_applied",
            extra={
                "order_id": str(persisted.order_id),
                "promotion_id": str(priced.applied.promotion_id),
                "discount_cents": discount_cents,
            },
        )
    return persisted


def publish_quietly(publisher: EventPublisher, channel: str, message: str) -> None:
    try:
        publisher.publish(channel=channel, message=message)
    except Exception:
        logger.warning("event_publish_failed", exc_info=True, extra={"channel": channel})
