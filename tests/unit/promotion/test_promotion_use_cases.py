from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderbot.application.dto.requests import EvaluatePromotionsRequest, RequestedItem
from orderbot.application.services.menu_resolution import FirstActiveMenuResolver
from orderbot.application.services.order_totals import OrderTotalsCalculator
from orderbot.application.use_cases.evaluate_promotions import EvaluatePromotions
from orderbot.application.use_cases.get_promotions import GetPromotions, promotions_cache_key
from orderbot.domain.catalog.entities import (
    BeverageCategory,
    EmpanadaCategory,
    EmpanadaDetails,
    Menu,
    MenuItem,
    Product,
    ProductType,
)
from orderbot.domain.common.ids import (
    ConversationId,
    MenuId,
    OrderId,
    OrderItemId,
    ProductId,
    PromotionId,
)
from orderbot.domain.common.money import Money
from orderbot.domain.order.entities import Order, ProductSnapshot, create_cart
from orderbot.domain.promotion.entities import (
    DiscountKind,
    FixedBundlePrice,
    Promotion,
    PromotionRequirement,
    PromotionType,
    QuantityDiscount,
)

MENU_ID = MenuId("men_001")
CLASSIC = ProductId("prd_carne")


class FakeMenuRepository:
    def __init__(self, menus: list[Menu]) -> None:
        self._menus = {menu.menu_id: menu for menu in menus}

    def get(self, menu_id: MenuId) -> Menu | None:
        return self._menus.get(menu_id)

    def find_first_active(self) -> Menu | None:
        active = [menu for menu in self._menus.values() if menu.active]
        return min(active, key=lambda menu: menu.created_at) if active else None

    def get_menu_item(self, menu_id: MenuId, product_id: ProductId) -> MenuItem | None:
        return None


class FakePromotionRepository:
    def __init__(self, promotions: list[Promotion]) -> None:
        self._promotions = promotions
        self.calls = 0

    def list_promotions(self, menu_id: MenuId, include_inactive: bool = False) -> list[Promotion]:
        self.calls += 1
        return [
            promotion
            for promotion in self._promotions
            if promotion.menu_id == menu_id and (include_inactive or promotion.active)
        ]


class FakeCatalogRepository:
    def __init__(self, products: list[Product]) -> None:
        self._products = {product.product_id: product for product in products}

    def get_product(self, product_id: ProductId) -> Product | None:
        return self._products.get(product_id)

    def get_products(self, product_ids: Iterable[ProductId]) -> dict[ProductId, Product]:
        return {pid: self._products[pid] for pid in product_ids if pid in self._products}


class FakeOrderRepository:
    def __init__(self, orders: list[Order]) -> None:
        self._orders = orders

    def find_active_by_conversation(self, conversation_id: ConversationId) -> Order | None:
        for order in self._orders:
            if order.conversation_id == conversation_id:
                return order
        return None


class FakeCache:
    def __init__(self, fail: bool = False) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self._fail = fail

    def get(self, key: str) -> str | None:
        if self._fail:
            raise ConnectionError("cache down")
        return self.values.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if self._fail:
            raise ConnectionError("cache down")
        self.values[key] = value
        self.ttls[key] = ttl_seconds


def _menus() -> FakeMenuRepository:
    return FakeMenuRepository(
        [Menu(MENU_ID, "Menú Principal", True, datetime(2026, 1, 1, tzinfo=timezone.utc))]
    )


def _bundle() -> Promotion:
    return Promotion(
        promotion_id=PromotionId("prm_bundle"),
        menu_id=MENU_ID,
        name="3 clásicas + 1 bebida",
        type=PromotionType.FIXED_BUNDLE_PRICE.value,
        active=True,
        stackable=False,
        terms=FixedBundlePrice(
            fixed_price=Money(amount_cents=8200, currency="ARS"),
            requirements=(
                PromotionRequirement(
                    qty=3,
                    product_type=ProductType.EMPANADA,
                    empanada_category=EmpanadaCategory.CLASSIC,
                ),
                PromotionRequirement(
                    qty=1,
                    product_type=ProductType.BEVERAGE,
                    beverage_categories=(BeverageCategory.WATER, BeverageCategory.SOFT_DRINK),
                ),
            ),
        ),
    )


def _inactive_volume() -> Promotion:
    return Promotion(
        promotion_id=PromotionId("prm_volume"),
        menu_id=MENU_ID,
        name="Docena",
        type=PromotionType.QUANTITY_DISCOUNT.value,
        active=False,
        stackable=False,
        terms=QuantityDiscount(
            min_qty=12,
            discount_kind=DiscountKind.PERCENT,
            discount_value=Decimal("0.1"),
        ),
    )


def _cart_with_classics(quantity: int) -> Order:
    cart = create_cart(
        order_id=OrderId("ord_001"),
        conversation_id=ConversationId("conv_001"),
        menu_id=MENU_ID,
        currency="ARS",
        now=datetime.now(timezone.utc),
    )
    return cart.upsert_item(
        item_id=OrderItemId("oit_001"),
        product_id=CLASSIC,
        quantity=quantity,
        unit_price=Money(amount_cents=2500, currency="ARS"),
        snapshot=ProductSnapshot(name="Carne suave"),
    )


def _catalog() -> FakeCatalogRepository:
    return FakeCatalogRepository(
        [
            Product(
                product_id=CLASSIC,
                name="Carne suave",
                type=ProductType.EMPANADA,
                empanada=EmpanadaDetails(category=EmpanadaCategory.CLASSIC),
            )
        ]
    )


def test_get_promotions_lists_active_and_caches() -> None:
    repository = FakePromotionRepository([_bundle(), _inactive_volume()])
    cache = FakeCache()
    use_case = GetPromotions(repository, FirstActiveMenuResolver(_menus()), cache, ttl_seconds=30)

    first = use_case.execute()
    second = use_case.execute()

    assert first == second
    assert first.menuId == MENU_ID
    assert [promotion.promotionId for promotion in first.promotions] == ["prm_bundle"]
    assert first.promotions[0].fixedPrice is not None
    assert first.promotions[0].fixedPrice.amountCents == 8200
    assert first.promotions[0].requirements[0].description == "3x classic empanadas"
    assert repository.calls == 1
    assert cache.ttls[promotions_cache_key(MENU_ID, False)] == 30


def test_get_promotions_include_inactive_uses_separate_cache_entry() -> None:
    repository = FakePromotionRepository([_bundle(), _inactive_volume()])
    cache = FakeCache()
    use_case = GetPromotions(repository, FirstActiveMenuResolver(_menus()), cache)

    response = use_case.execute(include_inactive=True)

    assert len(response.promotions) == 2
    volume = response.promotions[1]
    assert volume.discountKind == "PERCENT"
    assert volume.discountValue == "0.1"
    assert set(cache.values) == {"promotions:men_001:all"}


def test_get_promotions_works_when_cache_is_down() -> None:
    repository = FakePromotionRepository([_bundle()])
    use_case = GetPromotions(repository, FirstActiveMenuResolver(_menus()), FakeCache(fail=True))

    assert len(use_case.execute().promotions) == 1
    assert len(use_case.execute().promotions) == 1
    assert repository.calls == 2


def test_get_promotions_without_menu() -> None:
    use_case = GetPromotions(
        FakePromotionRepository([]),
        FirstActiveMenuResolver(FakeMenuRepository([])),
        FakeCache(),
    )

    response = use_case.execute()

    assert response.menuId is None
    assert response.promotions == []


def test_evaluate_combines_cart_and_requested_items() -> None:
    use_case = EvaluatePromotions(
        order_repository=FakeOrderRepository([_cart_with_classics(3)]),
        promotion_repository=FakePromotionRepository([_bundle()]),
        catalog_repository=_catalog(),
        menu_resolver=FirstActiveMenuResolver(_menus()),
    )

    response = use_case.execute(
        EvaluatePromotionsRequest(
            conversation_id="conv_001",
            requested_items=[
                RequestedItem(
                    product_type=ProductType.BEVERAGE,
                    beverage_category=BeverageCategory.WATER,
                    quantity=1,
                    label="agua",
                )
            ],
        )
    )

    assert response.menuId == MENU_ID
    assert [item.source for item in response.analyzedItems] == ["cart", "requested"]
    assert response.analyzedItems[0].label == "Carne suave"
    assert response.promotions[0].appliesNow is True
    assert response.summary == "1 promotion(s) can be applied: 3 clásicas + 1 bebida."


def test_evaluate_reports_missing_items_without_cart() -> None:
    use_case = EvaluatePromotions(
        order_repository=FakeOrderRepository([]),
        promotion_repository=FakePromotionRepository([_bundle()]),
        catalog_repository=_catalog(),
        menu_resolver=FirstActiveMenuResolver(_menus()),
    )

    response = use_case.execute(
        EvaluatePromotionsRequest(requested_items=[RequestedItem(product_id=CLASSIC, quantity=2)])
    )

    evaluation = response.promotions[0]
    assert evaluation.appliesNow is False
    assert [missing.missingQuantity for missing in evaluation.missingRequirements] == [1, 1]
    assert response.analyzedItems[0].empanadaCategory == "CLASSIC"


def test_evaluate_does_not_touch_the_cart() -> None:
    cart = _cart_with_classics(3)
    use_case = EvaluatePromotions(
        order_repository=FakeOrderRepository([cart]),
        promotion_repository=FakePromotionRepository([_bundle()]),
        catalog_repository=_catalog(),
        menu_resolver=FirstActiveMenuResolver(_menus()),
    )

    use_case.execute(
        EvaluatePromotionsRequest(
            conversation_id="conv_001",
            requested_items=[RequestedItem(product_type=ProductType.EMPANADA, quantity=6)],
        )
    )

    assert cart.items[0].quantity == 3


def test_requested_item_needs_product_reference() -> None:
    with pytest.raises(ValueError):
        RequestedItem(quantity=1)


def test_evaluate_counts_cart_lines_missing_from_catalog() -> None:
    volume = replace(_inactive_volume(), active=True)
    cart = _cart_with_classics(3).upsert_item(
        item_id=OrderItemId("oit_002"),
        product_id=ProductId("prd_retirado"),
        quantity=9,
        unit_price=Money(amount_cents=2000, currency="ARS"),
        snapshot=None,
    )
    use_case = EvaluatePromotions(
        order_repository=FakeOrderRepository([cart]),
        promotion_repository=FakePromotionRepository([volume]),
        catalog_repository=_catalog(),
        menu_resolver=FirstActiveMenuResolver(_menus()),
    )

    response = use_case.execute(EvaluatePromotionsRequest(conversation_id="conv_001"))

    untyped = response.analyzedItems[1]
    assert untyped.productId == "prd_retirado"
    assert untyped.productType is None
    assert response.promotions[0].appliesNow is True
    assert response.promotions[0].missingQuantity == 0

    committed = OrderTotalsCalculator(FakePromotionRepository([volume]), _catalog()).calculate(cart)
    assert committed.applied is not None
