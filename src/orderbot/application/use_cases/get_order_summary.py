from __future__ import annotations

from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.ports.repositories import CatalogRepository, OrderRepository
from orderbot.application.use_cases.cart_support import load_order, summarize
from orderbot.domain.common.ids import OrderId


class GetOrderSummary:
    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository

    def execute(self, order_id: OrderId) -> OrderSummaryResponse:
        return summarize(load_order(self._order_repository, order_id), self._catalog_repository)
