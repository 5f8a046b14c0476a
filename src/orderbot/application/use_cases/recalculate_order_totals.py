from __future__ import annotations

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.ports.repositories import CatalogRepository, OrderRepository
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.cart_support import load_order, save_priced_order, summarize
from orderbot.domain.common.ids import OrderId
from orderbot.domain.order.entities import OrderStatus


class RecalculateOrderTotals:
    """Re-derive the stored totals; a no-op when they are already current.

    Confirmed orders keep the totals frozen at confirmation time.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
        totals_calculator: OrderTotalsCalculator,
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository
        self._totals_calculator = totals_calculator

    def execute(self, order_id: OrderId) -> OrderSummaryResponse:
        order = load_order(self._order_repository, order_id)
        if order.status != OrderStatus.CART:
            return summarize(order, self._catalog_repository)

        priced = self._totals_calculator.price(order)
        if priced.order == order:
            return summarize(order, self._catalog_repository)

        persisted = save_priced_order(
            self._order_repository, priced, expected_version=order.version
        )
        return summarize(persisted, self._catalog_repository)
