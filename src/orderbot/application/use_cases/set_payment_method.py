from __future__ import annotations

import logging
from dataclasses import replace

from orderbot.application.dto.requests import SetPaymentRequest
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


class SetPaymentMethod:
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
        request_dto: SetPaymentRequest,
        trace_ctx: TraceContext,
    ) -> OrderSummaryResponse:
        order = load_editable_order(self._order_repository, order_id)
        # payment amount must reflect the freshly recalculated total
        priced = self._totals_calculator.price(order)
        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=replace(priced, order=priced.order.with_payment_method(request_dto.method)),
            expected_version=order.version,
            operation="set_payment",
            trace_ctx=trace_ctx,
        )
        logger.info(
            "payment_method_set",
            extra={"order_id": str(order_id), "method": request_dto.method.value},
        )
        return summarize(persisted, self._catalog_repository)
