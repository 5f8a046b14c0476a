from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from orderbot.domain.catalog.entities import Menu, MenuItem, Product, StockLevel
from orderbot.domain.common.ids import ConversationId, MenuId, OrderId, ProductId
from orderbot.domain.order.entities import Order
from orderbot.domain.promotion.entities import Promotion


class MenuRepository(Protocol):
    def get(self, menu_id: MenuId) -> Menu | None: ...

    def find_first_active(self) -> Menu | None: ...

    def get_menu_item(self, menu_id: MenuId, product_id: ProductId) -> MenuItem | None: ...


class CatalogRepository(Protocol):
    def get_product(self, product_id: ProductId) -> Product | None: ...

    def get_products(self, product_ids: Iterable[ProductId]) -> dict[ProductId, Product]: ...


class InventoryRepository(Protocol):
    def get_stock(self, product_id: ProductId) -> StockLevel | None: ...


class PromotionRepository(Protocol):
    def list_promotions(
        self,
        menu_id: MenuId,
        include_inactive: bool = False,
    ) -> list[Promotion]: ...


class OrderRepository(Protocol):
    def add(self, order: Order) -> None: ...

    def get(self, order_id: OrderId) -> Order | None: ...

    def find_active_by_conversation(self, conversation_id: ConversationId) -> Order | None: ...

    def save(self, order: Order, expected_version: int) -> Order: ...

    def confirm(self, order: Order, expected_version: int) -> ConfirmationResult: ...


@dataclass(frozen=True)
class ConfirmationResult:
    order: Order
    remaining_stock: list[StockLevel] = field(default_factory=list)


class OptimisticConcurrencyError(Exception):
    pass


class InventoryRecordMissingError(Exception):
    def __init__(self, product_id: ProductId) -> None:
        super().__init__(f"inventory record missing for product {product_id}")
        self.product_id = product_id


class InsufficientInventoryError(Exception):
    def __init__(self, product_id: ProductId, requested: int, available: int) -> None:
        super().__init__(
            f"insufficient inventory for product {product_id}: "
            f"requested={requested}, available={available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available
