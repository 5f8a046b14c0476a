from __future__ import annotations

import logging
from datetime import datetime, timezone

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import (
    EmptyOrderError,
    InsufficientStockError,
    InventoryMissingError,
    MissingAddressError,
    MissingContactError,
    MissingPaymentError,
    MissingShippingError,
    OrderConflictError,
    PreconditionFailedError,
)
from orderbot.application.mappers.event_envelope import serialize_order_confirmed_event
from orderbot.application.metrics.ordering import (
    record_confirmation_blocked,
    record_inventory_rejection,
    record_order_confirmed,
)
from orderbot.application.ports.publisher import EventPublisher, conversation_channel
from orderbot.application.ports.repositories import (
    CatalogRepository,
    InsufficientInventoryError,
    InventoryRecordMissingError,
    OptimisticConcurrencyError,
    OrderRepository,
)
from orderbot.application.use_cases.cart_support import (
    load_editable_order,
    publish_quietly,
    summarize,
)
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId
from orderbot.domain.order.entities import ConfirmationBlocker, OrderConfirmationBlockedError
from orderbot.domain.order.events import OrderConfirmed

logger = logging.getLogger(__name__)

_BLOCKER_ERRORS: dict[ConfirmationBlocker, tuple[type[PreconditionFailedError], str]] = {
    ConfirmationBlocker.EMPTY_ORDER: (EmptyOrderError, "the order has no items"),
    ConfirmationBlocker.MISSING_CONTACT: (
        MissingContactError,
        "a contact first name is required before confirming",
    ),
    ConfirmationBlocker.MISSING_SHIPPING: (
        MissingShippingError,
        "a shipping method is required before confirming",
    ),
    ConfirmationBlocker.MISSING_ADDRESS: (
        MissingAddressError,
        "a delivery address is required for DELIVERY orders",
    ),
    ConfirmationBlocker.MISSING_PAYMENT: (
        MissingPaymentError,
        "a payment method is required before confirming",
    ),
}


class ConfirmOrder:
    """Confirm a cart, decrementing inventory and freezing its totals."""

    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository
        self._publisher = publisher

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> OrderSummaryResponse:
        order = load_editable_order(self._order_repository, order_id)
        try:
            confirmed = order.confirm()
        except OrderConfirmationBlockedError as exc:
            error_cls, message = _BLOCKER_ERRORS[exc.blocker]
            record_confirmation_blocked(exc.blocker.value)
            logger.info(
                "order_confirmation_blocked",
                extra={"order_id": str(order_id), "reason": exc.blocker.value},
            )
            raise error_cls(message, details={"orderId": str(order_id)}) from exc

        try:
            result = self._order_repository.confirm(confirmed, expected_version=order.version)
        except InsufficientInventoryError as exc:
            record_inventory_rejection("insufficient_at_confirm")
            logger.warning(
                "inventory_insufficient",
                extra={
                    "order_id": str(order_id),
                    "product_id": str(exc.product_id),
                    "quantity": exc.requested,
                    "available": exc.available,
                },
            )
            raise InsufficientStockError(
                product_id=str(exc.product_id),
                requested=exc.requested,
                available=exc.available,
            ) from exc
        except InventoryRecordMissingError as exc:
            record_inventory_rejection("missing_at_confirm")
            raise InventoryMissingError(str(exc.product_id)) from exc
        except OptimisticConcurrencyError as exc:
            raise OrderConflictError(str(exc), details={"orderId": str(order_id)}) from exc

        persisted = result.order
        for stock in result.remaining_stock:
            if stock.quantity < stock.safety_stock:
                logger.warning(
                    "inventory_below_safety_stock",
                    extra={
                        "product_id": str(stock.product_id),
                        "quantity": stock.quantity,
                        "safety_stock": stock.safety_stock,
                    },
                )

        record_order_confirmed(persisted.currency)
        event = OrderConfirmed(
            order_id=persisted.order_id,
            conversation_id=persisted.conversation_id,
            total=persisted.totals.total,
            item_count=len(persisted.items),
            occurred_at=datetime.now(timezone.utc),
        )
        message = serialize_order_confirmed_event(
            event=event,
            order=persisted,
            trace_id=trace_ctx.trace_id,
            request_id=trace_ctx.request_id,
        )
        publish_quietly(self._publisher, conversation_channel(str(persisted.conversation_id)), message)
        logger.info(
            "order_confirmed",
            extra={"order_id": str(order_id), "total_cents": persisted.totals.total.amount_cents},
        )
        return summarize(persisted, self._catalog_repository)
