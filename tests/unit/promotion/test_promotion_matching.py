from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderbot.domain.catalog.entities import (
    BeverageCategory,
    BeverageDetails,
    EmpanadaCategory,
    EmpanadaDetails,
    Product,
    ProductType,
)
from orderbot.domain.common.ids import ProductId
from orderbot.domain.promotion.entities import PromotionRequirement
from orderbot.domain.promotion.matching import (
    ItemSource,
    PromotionItem,
    bundles_to_apply,
    item_matches_requirement,
    matching_quantity,
    max_bundles,
    promotion_item_from_product,
)

CLASSIC_REQUIREMENT = PromotionRequirement(
    qty=3,
    product_type=ProductType.EMPANADA,
    empanada_category=EmpanadaCategory.CLASSIC,
)
DRINK_REQUIREMENT = PromotionRequirement(
    qty=1,
    product_type=ProductType.BEVERAGE,
    beverage_categories=(BeverageCategory.WATER, BeverageCategory.SOFT_DRINK),
)


def _empanada(quantity: int, category: EmpanadaCategory | None) -> PromotionItem:
    return PromotionItem(
        quantity=quantity,
        product_type=ProductType.EMPANADA,
        empanada_category=category,
        unit_price_cents=2500,
    )


def _beverage(quantity: int, category: BeverageCategory | None) -> PromotionItem:
    return PromotionItem(
        quantity=quantity,
        product_type=ProductType.BEVERAGE,
        beverage_category=category,
        unit_price_cents=1200,
    )


def test_empanada_category_must_match_when_required() -> None:
    assert item_matches_requirement(_empanada(1, EmpanadaCategory.CLASSIC), CLASSIC_REQUIREMENT)
    assert not item_matches_requirement(_empanada(1, EmpanadaCategory.SPECIAL), CLASSIC_REQUIREMENT)
    assert not item_matches_requirement(_empanada(1, None), CLASSIC_REQUIREMENT)


def test_requirement_without_category_accepts_any_empanada() -> None:
    any_empanada = PromotionRequirement(qty=1, product_type=ProductType.EMPANADA)

    assert item_matches_requirement(_empanada(1, EmpanadaCategory.SPECIAL), any_empanada)
    assert item_matches_requirement(_empanada(1, None), any_empanada)


def test_beverage_category_must_be_listed() -> None:
    assert item_matches_requirement(_beverage(1, BeverageCategory.WATER), DRINK_REQUIREMENT)
    assert item_matches_requirement(_beverage(1, BeverageCategory.SOFT_DRINK), DRINK_REQUIREMENT)
    assert not item_matches_requirement(_beverage(1, BeverageCategory.BEER), DRINK_REQUIREMENT)
    assert not item_matches_requirement(_beverage(1, None), DRINK_REQUIREMENT)


def test_item_without_product_type_never_matches() -> None:
    item = PromotionItem(quantity=5, product_type=None)

    assert not item_matches_requirement(item, CLASSIC_REQUIREMENT)
    assert matching_quantity([item], CLASSIC_REQUIREMENT) == 0


def test_max_bundles_is_limited_by_scarcest_requirement() -> None:
    items = [
        _empanada(4, EmpanadaCategory.CLASSIC),
        _empanada(3, EmpanadaCategory.CLASSIC),
        _beverage(1, BeverageCategory.WATER),
        _beverage(5, BeverageCategory.BEER),
    ]

    assert matching_quantity(items, CLASSIC_REQUIREMENT) == 7
    assert max_bundles(items, [CLASSIC_REQUIREMENT, DRINK_REQUIREMENT]) == 1
    assert max_bundles(items, [CLASSIC_REQUIREMENT]) == 2
    assert max_bundles(items, []) == 0


def test_bundles_to_apply_caps_non_stackable_promotions() -> None:
    assert bundles_to_apply(3, stackable=True) == 3
    assert bundles_to_apply(3, stackable=False) == 1
    assert bundles_to_apply(0, stackable=False) == 0


def test_promotion_item_from_product_copies_categories() -> None:
    product = Product(
        product_id=ProductId("prd_coca"),
        name="Coca Cola",
        type=ProductType.BEVERAGE,
        beverage=BeverageDetails(category=BeverageCategory.SOFT_DRINK),
    )

    item = promotion_item_from_product(product, 2, unit_price_cents=1800, source=ItemSource.REQUESTED)

    assert item.product_type == ProductType.BEVERAGE
    assert item.beverage_category == BeverageCategory.SOFT_DRINK
    assert item.empanada_category is None
    assert item.label == "Coca Cola"
    assert item.value_cents == 3600


def test_promotion_item_for_unknown_product_has_no_type() -> None:
    item = promotion_item_from_product(None, 1, product_id=ProductId("prd_gone"))

    assert item.product_type is None
    assert item.product_id == "prd_gone"


def test_requirement_rejects_category_for_other_product_type() -> None:
    with pytest.raises(ValueError):
        PromotionRequirement(
            qty=1,
            product_type=ProductType.BEVERAGE,
            empanada_category=EmpanadaCategory.CLASSIC,
        )


def test_empanada_details_only_on_empanadas() -> None:
    with pytest.raises(ValueError):
        Product(
            product_id=ProductId("prd_flan"),
            name="Flan",
            type=ProductType.DESSERT,
            empanada=EmpanadaDetails(category=EmpanadaCategory.CLASSIC),
        )
