from __future__ import annotations

import logging
from uuid import uuid4

from orderbot.application.dto.requests import UpsertCartItemRequest
from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import (
    InsufficientStockError,
    InvalidInputError,
    InventoryMissingError,
)
from orderbot.application.metrics.ordering import record_inventory_rejection
from orderbot.application.ports.publisher import EventPublisher
from orderbot.application.ports.repositories import (
    CatalogRepository,
    InventoryRepository,
    MenuRepository,
    OrderRepository,
)
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.cart_support import (
    bind_menu_if_missing,
    commit_cart_mutation,
    load_editable_order,
    summarize,
)
from orderbot.application.use_cases.context import TraceContext
from orderbot.domain.common.ids import OrderId, OrderItemId, ProductId
from orderbot.domain.common.money import Money
from orderbot.domain.order.entities import Order, ProductSnapshot

logger = logging.getLogger(__name__)


class AddOrUpdateItem:
    """Set the absolute quantity of a product in the cart.

    Calling it again for the same product replaces the quantity; callers compute
    the new total themselves.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        inventory_repository: InventoryRepository,
        catalog_repository: CatalogRepository,
        menu_repository: MenuRepository,
        totals_calculator: OrderTotalsCalculator,
        menu_resolver: MenuResolver,
        publisher: EventPublisher,
    ) -> None:
        self._order_repository = order_repository
        self._inventory_repository = inventory_repository
        self._catalog_repository = catalog_repository
        self._menu_repository = menu_repository
        self._totals_calculator = totals_calculator
        self._menu_resolver = menu_resolver
        self._publisher = publisher

    def execute(
        self,
        order_id: OrderId,
        request_dto: UpsertCartItemRequest,
        trace_ctx: TraceContext,
    ) -> OrderSummaryResponse:
        if request_dto.quantity < 1:
            raise InvalidInputError(
                "quantity must be a positive integer",
                details={"quantity": request_dto.quantity},
            )
        if request_dto.unit_price_cents is not None and request_dto.unit_price_cents <= 0:
            raise InvalidInputError(
                "unit price must be a positive integer",
                details={"unitPriceCents": request_dto.unit_price_cents},
            )
        product_id = ProductId(request_dto.product_id.strip())
        if not product_id:
            raise InvalidInputError("product id must be non-empty")

        order = load_editable_order(self._order_repository, order_id)
        self._check_stock(product_id, request_dto.quantity)

        product = self._catalog_repository.get_product(product_id)
        snapshot = self._snapshot(request_dto).with_defaults(product)

        bound = bind_menu_if_missing(order, self._menu_resolver)
        updated = bound.upsert_item(
            item_id=OrderItemId(f"oit_{uuid4().hex[:12]}"),
            product_id=product_id,
            quantity=request_dto.quantity,
            unit_price=self._unit_price(bound, product_id, request_dto.unit_price_cents),
            snapshot=snapshot if snapshot != ProductSnapshot() else None,
        )
        persisted = commit_cart_mutation(
            order_repository=self._order_repository,
            publisher=self._publisher,
            priced=self._totals_calculator.price(updated),
            expected_version=order.version,
            operation="upsert_item",
            trace_ctx=trace_ctx,
        )
        logger.info(
            "cart_item_upserted",
            extra={
                "order_id": str(order_id),
                "product_id": str(product_id),
                "quantity": request_dto.quantity,
            },
        )
        return summarize(persisted, self._catalog_repository)

    def _check_stock(self, product_id: ProductId, quantity: int) -> None:
        stock = self._inventory_repository.get_stock(product_id)
        if stock is None:
            record_inventory_rejection("missing")
            logger.warning("inventory_missing", extra={"product_id": str(product_id)})
            raise InventoryMissingError(str(product_id))
        if not stock.covers(quantity):
            record_inventory_rejection("insufficient")
            logger.warning(
                "inventory_insufficient",
                extra={
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "available": stock.quantity,
                },
            )
            raise InsufficientStockError(
                product_id=str(product_id),
                requested=quantity,
                available=stock.quantity,
            )

    def _unit_price(self, order: Order, product_id: ProductId, unit_price_cents: int | None) -> Money:
        if unit_price_cents is not None:
            return Money(amount_cents=unit_price_cents, currency=order.currency)
        if order.menu_id is None:
            raise InvalidInputError("unit price is required while the cart has no menu")
        menu_item = self._menu_repository.get_menu_item(order.menu_id, product_id)
        if menu_item is None or not menu_item.available:
            raise InvalidInputError(
                f"product {product_id} is not available on menu {order.menu_id}",
                details={"productId": str(product_id), "menuId": str(order.menu_id)},
            )
        if menu_item.price.currency != order.currency:
            raise InvalidInputError(
                f"menu price currency {menu_item.price.currency} does not match cart currency {order.currency}"
            )
        return menu_item.price

    @staticmethod
    def _snapshot(request_dto: UpsertCartItemRequest) -> ProductSnapshot:
        payload = request_dto.product_snapshot
        if payload is None:
            return ProductSnapshot()
        return ProductSnapshot(name=payload.name, image=payload.image, type=payload.type)
