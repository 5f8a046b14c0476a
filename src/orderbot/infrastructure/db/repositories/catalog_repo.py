from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from orderbot.application.ports.repositories import CatalogRepository
from orderbot.domain.catalog.entities import (
    BeverageCategory,
    BeverageDetails,
    EmpanadaCategory,
    EmpanadaDetails,
    Product,
    ProductType,
)
from orderbot.domain.common.ids import ProductId
from orderbot.infrastructure.db.models.catalog import ProductModel


class SqlAlchemyCatalogRepository(CatalogRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_product(self, product_id: ProductId) -> Product | None:
        with Session(self._engine) as session:
            model = session.get(ProductModel, str(product_id))
            if model is None:
                return None
            return self._to_domain(model)

    def get_products(self, product_ids: Iterable[ProductId]) -> dict[ProductId, Product]:
        ids = sorted({str(product_id) for product_id in product_ids})
        if not ids:
            return {}
        statement = select(ProductModel).where(ProductModel.id.in_(ids))
        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
            return {ProductId(model.id): self._to_domain(model) for model in models}

    @staticmethod
    def _to_domain(model: ProductModel) -> Product:
        product_type = ProductType(model.type)
        empanada = None
        beverage = None
        if product_type == ProductType.EMPANADA:
            empanada = EmpanadaDetails(
                category=EmpanadaCategory(model.empanada_category) if model.empanada_category else None,
                is_vegetarian=model.is_vegetarian,
                is_vegan=model.is_vegan,
            )
        elif product_type == ProductType.BEVERAGE:
            beverage = BeverageDetails(
                category=BeverageCategory(model.beverage_category) if model.beverage_category else None,
                is_alcoholic=model.is_alcoholic,
            )
        return Product(
            product_id=ProductId(model.id),
            name=model.name,
            type=product_type,
            image=model.image,
            empanada=empanada,
            beverage=beverage,
        )
