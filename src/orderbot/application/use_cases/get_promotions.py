from __future__ import annotations

import logging

from pydantic import ValidationError

from orderbot.application.dto.responses import PromotionListResponse
from orderbot.application.mappers.promotion_mapper import to_promotion_response
from orderbot.application.ports.cache import CacheStore
from orderbot.application.ports.repositories import PromotionRepository
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.domain.common.ids import MenuId

logger = logging.getLogger(__name__)


def promotions_cache_key(menu_id: MenuId, include_inactive: bool) -> str:
    scope = "all" if include_inactive else "active"
    return f"promotions:{menu_id}:{scope}"


class GetPromotions:
    def __init__(
        self,
        promotion_repository: PromotionRepository,
        menu_resolver: MenuResolver,
        cache: CacheStore,
        ttl_seconds: int = 60,
    ) -> None:
        self._promotion_repository = promotion_repository
        self._menu_resolver = menu_resolver
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    def _cache_get(self, key: str) -> str | None:
        try:
            return self._cache.get(key)
        except Exception:
            logger.debug("promotions_cache_read_failed", exc_info=True)
            return None

    def _cache_set(self, key: str, value: str) -> None:
        if self._ttl_seconds <= 0:
            return
        try:
            self._cache.set(key, value, ttl_seconds=self._ttl_seconds)
        except Exception:
            logger.debug("promotions_cache_write_failed", exc_info=True)

    def execute(
        self,
        menu_id: MenuId | None = None,
        include_inactive: bool = False,
    ) -> PromotionListResponse:
        resolved = self._menu_resolver.resolve(menu_id)
        if resolved is None:
            return PromotionListResponse(message="No menu is available to list promotions.")

        key = promotions_cache_key(resolved, include_inactive)
        payload = self._cache_get(key)
        if payload:
            try:
                return PromotionListResponse.model_validate_json(payload)
            except ValidationError:
                pass

        promotions = self._promotion_repository.list_promotions(
            resolved,
            include_inactive=include_inactive,
        )
        if promotions:
            message = f"{len(promotions)} promotion(s) found for the selected menu."
        else:
            message = "No promotions were found for the selected menu."

        response = PromotionListResponse(
            menuId=str(resolved),
            promotions=[to_promotion_response(promotion) for promotion in promotions],
            message=message,
        )
        self._cache_set(key, response.model_dump_json())
        return response
