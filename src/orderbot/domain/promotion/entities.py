from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from orderbot.domain.catalog.entities import BeverageCategory, EmpanadaCategory, ProductType
from orderbot.domain.common.ids import MenuId, PromotionId
from orderbot.domain.common.money import Money


class PromotionType(str, Enum):
    FIXED_BUNDLE_PRICE = "FIXED_BUNDLE_PRICE"
    QUANTITY_DISCOUNT = "QUANTITY_DISCOUNT"


class DiscountKind(str, Enum):
    PERCENT = "PERCENT"
    AMOUNT = "AMOUNT"


@dataclass(frozen=True)
class PromotionRequirement:
    qty: int
    product_type: ProductType
    empanada_category: EmpanadaCategory | None = None
    beverage_categories: tuple[BeverageCategory, ...] = ()

    def __post_init__(self) -> None:
        if self.qty < 1:
            raise ValueError("requirement qty must be >= 1")
        if self.empanada_category is not None and self.product_type != ProductType.EMPANADA:
            raise ValueError("empanada_category only applies to EMPANADA requirements")
        if self.beverage_categories and self.product_type != ProductType.BEVERAGE:
            raise ValueError("beverage_categories only applies to BEVERAGE requirements")

    def describe(self) -> str:
        base_qty = f"{self.qty}x"
        if self.product_type == ProductType.EMPANADA:
            if self.empanada_category is not None:
                return f"{base_qty} {self.empanada_category.value.lower()} empanadas"
            return f"{base_qty} empanadas"
        if self.product_type == ProductType.BEVERAGE:
            if self.beverage_categories:
                categories = ", ".join(category.value for category in self.beverage_categories)
                return f"{base_qty} beverages ({categories})"
            return f"{base_qty} beverages"
        return f"{base_qty} {self.product_type.value.lower()}"


@dataclass(frozen=True)
class FixedBundlePrice:
    fixed_price: Money
    requirements: tuple[PromotionRequirement, ...]

    def __post_init__(self) -> None:
        if not self.requirements:
            raise ValueError("fixed bundle promotions require at least one requirement")


@dataclass(frozen=True)
class QuantityDiscount:
    min_qty: int
    discount_kind: DiscountKind
    discount_value: Decimal
    currency: str | None = None

    def __post_init__(self) -> None:
        if self.min_qty < 0:
            raise ValueError("min_qty must be >= 0")
        if self.discount_value < 0:
            raise ValueError("discount_value must be >= 0")


PromotionTerms = FixedBundlePrice | QuantityDiscount


@dataclass(frozen=True)
class Promotion:
    """A menu promotion.

    ``type`` keeps the raw tag read from storage so unknown promotion kinds can
    travel through the system; ``terms`` is ``None`` for those.
    """

    promotion_id: PromotionId
    menu_id: MenuId
    name: str
    type: str
    active: bool
    stackable: bool
    terms: PromotionTerms | None
    created_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.terms, FixedBundlePrice) and self.type != PromotionType.FIXED_BUNDLE_PRICE:
            raise ValueError("fixed bundle terms require type=FIXED_BUNDLE_PRICE")
        if isinstance(self.terms, QuantityDiscount) and self.type != PromotionType.QUANTITY_DISCOUNT:
            raise ValueError("quantity discount terms require type=QUANTITY_DISCOUNT")
