from __future__ import annotations

import logging

from orderbot.application.dto.requests import SetShippingRequest
from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import InvalidInputError
from orderbot.application.ports.publisher import EventPublisher
from orderbot.application.ports.repositories import CatalogRepository, OrderRepository
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.cart_support import (
    bind_menu_if_missing,
    commit_cart_mutation,
    load_editable_order,
    summarize,
)
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId
from orderbot.domain.common.money import Money

logger = logging.getLogger(__name__)


class SetShippingMethod:
    """Record delivery or pickup.

    A delivery without address is accepted here; confirmation rejects it.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
        totals_calculator: OrderTotalsCalculator,
        menu_resolver: MenuResolver,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository
        self._totals_calculator = totals_calculator
        self._menu_resolver = menu_resolver
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        request_dto: SetShippingRequest,
        trace_ctx: TraceContext,
    ) -> OrderSummaryResponse:
        if request_dto.fee_cents is not None and request_dto.fee_cents < 0:
            raise InvalidInputError(
                "shipping fee must be >= 0",
                details={"feeCents": request_dto.fee_cents},
            )

        order = load_editable_order(self._order_repository, order_id)
        fee = None
        if request_dto.fee_cents is not None:
            fee = Money(amount_cents=request_dto.fee_cents, currency=order.currency)

        updated = bind_menu_if_missing(order, self._menu_resolver).with_shipping(
            shipping_type=request_dto.type,
            fee=fee,
            address_description=request_dto.address_description,
            pickup_location=request_dto.pickup_location,
            eta=request_dto.eta,
        )
        if updated.shipping is not None and updated.shipping.missing_address:
            logger.warning("delivery_address_missing", extra={"order_id": str(order_id)})

        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=self._totals_calculator.price(updated),
            expected_version=order.version,
            operation="set_shipping",
            trace_ctx=trace_ctx,
        )
        logger.info(
            "shipping_method_set",
            extra={"order_id": str(order_id), "method": request_dto.type.value},
        )
        return summarize(persisted, self._catalog_repository)
