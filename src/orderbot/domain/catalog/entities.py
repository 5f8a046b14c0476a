from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from orderbot.domain.common.ids import MenuId, ProductId
from orderbot.domain.common.money import Money


class ProductType(str, Enum):
    EMPANADA = "EMPANADA"
    BEVERAGE = "BEVERAGE"
    DESSERT = "DESSERT"


class EmpanadaCategory(str, Enum):
    CLASSIC = "CLASSIC"
    SPECIAL = "SPECIAL"


class BeverageCategory(str, Enum):
    WATER = "WATER"
    SOFT_DRINK = "SOFT_DRINK"
    BEER = "BEER"


@dataclass(frozen=True)
class EmpanadaDetails:
    category: EmpanadaCategory | None
    is_vegetarian: bool = False
    is_vegan: bool = False


@dataclass(frozen=True)
class BeverageDetails:
    category: BeverageCategory | None
    is_alcoholic: bool = False


@dataclass(frozen=True)
class Product:
    product_id: ProductId
    name: str
    type: ProductType
    image: str | None = None
    empanada: EmpanadaDetails | None = None
    beverage: BeverageDetails | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
        if self.empanada is not None and self.type != ProductType.EMPANADA:
            raise ValueError("empanada details require type=EMPANADA")
        if self.beverage is not None and self.type != ProductType.BEVERAGE:
            raise ValueError("beverage details require type=BEVERAGE")

    @property
    def empanada_category(self) -> EmpanadaCategory | None:
        return self.empanada.category if self.empanada else None

    @property
    def beverage_category(self) -> BeverageCategory | None:
        return self.beverage.category if self.beverage else None


@dataclass(frozen=True)
class Menu:
    menu_id: MenuId
    name: str
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class MenuItem:
    menu_id: MenuId
    product_id: ProductId
    price: Money
    available: bool = True


@dataclass(frozen=True)
class StockLevel:
    product_id: ProductId
    quantity: int
    safety_stock: int = 0

    def covers(self, quantity: int) -> bool:
        return self.quantity >= quantity
