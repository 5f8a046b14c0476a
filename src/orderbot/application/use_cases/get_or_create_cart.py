from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from orderbot.application.dto.requests import GetOrCreateCartRequest
from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.errors import InvalidInputError, OrderConflictError
from orderbot.application.ports.repositories import (
    CatalogRepository,
    OptimisticConcurrencyError,
    OrderRepository,
)
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.application.use_cases.cart_support import summarize
from orderbot.domain.common.ids import ConversationId, MenuId, OrderId
from orderbot.domain.order.entities import create_cart

logger = logging.getLogger(__name__)


class GetOrCreateCart:
    def __init__(
        self,
        order_repository: OrderRepository,
        catalog_repository: CatalogRepository,
        menu_resolver: MenuResolver,
        default_currency: str = "ARS",
    ) -> None:
        self._order_repository = order_repository
        self._catalog_repository = catalog_repository
        self._menu_resolver = menu_resolver
        self._default_currency = default_currency

    def execute(
        self,
        conversation_id: ConversationId,
        request_dto: GetOrCreateCartRequest | None = None,
    ) -> OrderSummaryResponse:
        if not str(conversation_id).strip():
            raise InvalidInputError("conversation id must be non-empty")
        request_dto = request_dto or GetOrCreateCartRequest()
        menu_hint = MenuId(request_dto.menu_id) if request_dto.menu_id else None

        existing = self._order_repository.find_active_by_conversation(conversation_id)
        if existing is not None:
            if existing.menu_id is None:
                menu_id = self._menu_resolver.resolve(menu_hint)
                if menu_id is not None:
                    try:
                        existing = self._order_repository.save(
                            existing.bind_menu(menu_id),
                            expected_version=existing.version,
                        )
                    except OptimisticConcurrencyError as exc:
                        raise OrderConflictError(str(exc)) from exc
                    logger.info(
                        "cart_menu_bound",
                        extra={"order_id": str(existing.order_id), "menu_id": str(menu_id)},
                    )
            return summarize(existing, self._catalog_repository)

        menu_id = self._menu_resolver.resolve(menu_hint)
        currency = (request_dto.currency or self._default_currency).strip().upper()
        try:
            order = create_cart(
                order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
                conversation_id=conversation_id,
                menu_id=menu_id,
                currency=currency,
                now=datetime.now(timezone.utc),
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc), details={"currency": currency}) from exc

        self._order_repository.add(order)
        logger.info(
            "cart_created",
            extra={
                "order_id": str(order.order_id),
                "conversation_id": str(conversation_id),
                "menu_id": str(menu_id) if menu_id else None,
            },
        )
        return summarize(order, self._catalog_repository)
