from __future__ import annotations

import logging

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.ports.publisher import EventPublisher
from orderbot.application.ports.repositories import CatalogRepository, OrderRepository
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.cart_support import (
    commit_cart_mutation,
    load_editable_order,
    summarize,
)
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId

logger = logging.getLogger(__name__)


class ClearCart:
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

    def execute(self, order_id: OrderId, trace_ctx: TraceContext) -> OrderSummaryResponse:
        order = load_editable_order(self._order_repository, order_id)
        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=self._totals_calculator.price(order.clear_items()),
            expected_version=order.version,
            operation="clear",
            trace_ctx=trace_ctx,
        )
        logger.info("cart_cleared", extra={"order_id": str(order_id)})
        return summarize(persisted, self._catalog_repository)
