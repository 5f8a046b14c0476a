from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from orderbot.domain.catalog.entities import (
    BeverageCategory,
    EmpanadaCategory,
    Product,
    ProductType,
)
from orderbot.domain.common.ids import ProductId
from orderbot.domain.promotion.entities import PromotionRequirement


class ItemSource(str, Enum):
    CART = "cart"
    REQUESTED = "requested"


@dataclass(frozen=True)
class PromotionItem:
    """A line item reduced to the attributes promotions look at."""

    quantity: int
    product_type: ProductType | None
    empanada_category: EmpanadaCategory | None = None
    beverage_category: BeverageCategory | None = None
    unit_price_cents: int = 0
    product_id: ProductId | None = None
    label: str | None = None
    source: ItemSource = ItemSource.CART

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price_cents < 0:
            raise ValueError("unit_price_cents must be >= 0")

    @property
    def value_cents(self) -> int:
        return self.unit_price_cents * self.quantity


def promotion_item_from_product(
    product: Product | None,
    quantity: int,
    *,
    product_id: ProductId | None = None,
    unit_price_cents: int = 0,
    label: str | None = None,
    source: ItemSource = ItemSource.CART,
) -> PromotionItem:
    if product is None:
        return PromotionItem(
            quantity=quantity,
            product_type=None,
            unit_price_cents=unit_price_cents,
            product_id=product_id,
            label=label,
            source=source,
        )
    return PromotionItem(
        quantity=quantity,
        product_type=product.type,
        empanada_category=product.empanada_category,
        beverage_category=product.beverage_category,
        unit_price_cents=unit_price_cents,
        product_id=product.product_id,
        label=label or product.name,
        source=source,
    )


def item_matches_requirement(item: PromotionItem, requirement: PromotionRequirement) -> bool:
    if item.product_type is None or item.product_type != requirement.product_type:
        return False

    if (
        requirement.product_type == ProductType.EMPANADA
        and requirement.empanada_category is not None
        and item.empanada_category != requirement.empanada_category
    ):
        return False

    if requirement.product_type == ProductType.BEVERAGE and requirement.beverage_categories:
        if item.beverage_category is None:
            return False
        if item.beverage_category not in requirement.beverage_categories:
            return False

    return True


def eligible_items(
    items: Iterable[PromotionItem], requirement: PromotionRequirement
) -> list[PromotionItem]:
    return [item for item in items if item_matches_requirement(item, requirement)]


def matching_quantity(items: Iterable[PromotionItem], requirement: PromotionRequirement) -> int:
    return sum(item.quantity for item in eligible_items(items, requirement))


def total_quantity(items: Iterable[PromotionItem]) -> int:
    return sum(item.quantity for item in items)


def max_bundles(items: Iterable[PromotionItem], requirements: Iterable[PromotionRequirement]) -> int:
    """Number of complete bundles the items cover; every requirement must be met."""
    materialized = list(items)
    bundles = [
        matching_quantity(materialized, requirement) // requirement.qty
        for requirement in requirements
    ]
    if not bundles:
        return 0
    return min(bundles)


def bundles_to_apply(possible: int, stackable: bool) -> int:
    if stackable:
        return possible
    return min(possible, 1)
