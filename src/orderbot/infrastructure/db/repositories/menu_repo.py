from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from orderbot.application.ports.repositories import MenuRepository
from orderbot.domain.catalog.entities import Menu, MenuItem
from orderbot.domain.common.ids import MenuId, ProductId
from orderbot.domain.common.money import Money
from orderbot.infrastructure.db.models.catalog import MenuItemModel, MenuModel


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, menu_id: MenuId) -> Menu | None:
        with Session(self._engine) as session:
            model = session.get(MenuModel, str(menu_id))
            if model is None:
                return None
            return _to_menu(model)

    def find_first_active(self) -> Menu | None:
        statement = (
            select(MenuModel)
            .where(MenuModel.active.is_(True))
            .order_by(MenuModel.created_at.asc(), MenuModel.id.asc())
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return _to_menu(model)

    def get_menu_item(self, menu_id: MenuId, product_id: ProductId) -> MenuItem | None:
        statement = (
            select(MenuItemModel)
            .where(
                MenuItemModel.menu_id == str(menu_id),
                MenuItemModel.product_id == str(product_id),
            )
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return MenuItem(
                menu_id=MenuId(model.menu_id),
                product_id=ProductId(model.product_id),
                price=Money(amount_cents=model.price_cents, currency=model.currency),
                available=model.is_available,
            )


def _to_menu(model: MenuModel) -> Menu:
    return Menu(
        menu_id=MenuId(model.id),
        name=model.name,
        active=model.active,
        created_at=model.created_at,
    )
