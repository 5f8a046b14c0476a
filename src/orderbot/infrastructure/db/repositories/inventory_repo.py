from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from orderbot.application.ports.repositories import (
    InsufficientInventoryError,
    InventoryRecordMissingError,
    InventoryRepository,
)
from orderbot.domain.catalog.entities import StockLevel
from orderbot.domain.common.ids import ProductId
from orderbot.infrastructure.db.models.catalog import InventoryModel


class SqlAlchemyInventoryRepository(InventoryRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_stock(self, product_id: ProductId) -> StockLevel | None:
        with Session(self._engine) as session:
            model = session.get(InventoryModel, str(product_id))
            if model is None:
                return None
            return _to_stock_level(model)


def decrement_stock(session: Session, product_id: ProductId, quantity: int) -> StockLevel:
    """Lock the inventory row and subtract ``quantity`` inside the caller's transaction."""
    statement = (
        select(InventoryModel)
        .where(InventoryModel.product_id == str(product_id))
        .with_for_update()
    )
    model = session.execute(statement).scalar_one_or_none()
    if model is None:
        raise InventoryRecordMissingError(product_id)
    if model.quantity < quantity:
        raise InsufficientInventoryError(
            product_id=product_id,
            requested=quantity,
            available=model.quantity,
        )
    model.quantity = model.quantity - quantity
    return _to_stock_level(model)


def _to_stock_level(model: InventoryModel) -> StockLevel:
    return StockLevel(
        product_id=ProductId(model.product_id),
        quantity=model.quantity,
        safety_stock=model.safety_stock,
    )
