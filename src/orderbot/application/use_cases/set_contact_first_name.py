from __future__ import annotations

import logging

from orderbot.application.dto.requests import SetContactRequest
from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import InvalidInputError
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


class SetContactFirstName:
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
        request_dto: SetContactRequest,
        trace_ctx: TraceContext,
    ) -> OrderSummaryResponse:
        if not request_dto.first_name.strip():
            raise InvalidInputError("first name must be non-empty")

        order = load_editable_order(self._order_repository, order_id)
        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=self._totals_calculator.price(
                order.with_contact_first_name(request_dto.first_name)
            ),
            expected_version=order.version,
            operation="set_contact",
            trace_ctx=trace_ctx,
        )
        logger.info("contact_first_name_set", extra={"order_id": str(order_id)})
        return summarize(persisted, self._catalog_repository)
