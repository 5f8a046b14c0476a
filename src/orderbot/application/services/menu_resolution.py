from __future__ import annotations

from typing import Protocol

from orderbot.application.errors import MenuNotFoundError
from orderbot.application.ports.repositories import MenuRepository
from orderbot.domain.common.ids import MenuId


class MenuResolver(Protocol):
    def resolve(self, menu_hint: MenuId | None = None) -> MenuId | None: ...


class FirstActiveMenuResolver:
    """Use the explicit menu when given, otherwise the oldest active menu.

    Returns ``None`` when no menu is hinted and none is active; carts then stay
    unbound and are priced without promotions.
    """

    def __init__(self, menu_repository: MenuRepository) -> None:
        self._menu_repository = menu_repository

    def resolve(self, menu_hint: MenuId | None = None) -> MenuId | None:
        if menu_hint:
            menu = self._menu_repository.get(menu_hint)
            if menu is None:
                raise MenuNotFoundError(f"menu {menu_hint} not found")
            return menu.menu_id

        menu = self._menu_repository.find_first_active()
        return menu.menu_id if menu is not None else None
