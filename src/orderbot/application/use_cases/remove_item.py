from __future__ import annotations

import logging

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import OrderItemNotFoundError
from orderbot.application.ports.publisher import EventPublisher
from orderbot.application.ports.repositories import CatalogRepository, OrderRepository
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.cart_support import (
    commit_cart_mutation,
    load_editable_order,
    summarize,
)
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId, OrderItemId
from orderbot.domain.order.entities import OrderItemMissingError

logger = logging.getLogger(__name__)


class RemoveItem:
    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
        totals_calculator: OrderTotalsCalculator,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository
        self._totals_calculator = totals_calculator
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        order_item_id: OrderItemId,
        trace_ctx: TraceContext,
    ) -> OrderSummaryResponse:
        order = load_editable_order(self._order_repository, order_id)
        try:
            updated = order.remove_item(order_item_id)
        except OrderItemMissingError as exc:
            raise OrderItemNotFoundError(
                str(exc),
                details={"orderId": str(order_id), "orderItemId": str(order_item_id)},
            ) from exc

        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=self._totals_calculator.price(updated),
            expected_version=order.version,
            operation="remove_item",
            trace_ctx=trace_ctx,
        )
        logger.info(
            "cart_item_removed",
            extra={"order_id": str(order_id), "order_item_id": str(order_item_id)},
        )
        return summarize(persisted, self._catalog_repository)
