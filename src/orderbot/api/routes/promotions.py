from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from orderbot.api.container import Container, get_container
from orderbot.application.dto.requests import EvaluatePromotionsRequest
from orderbot.application.dto.responses import (
    PromotionEvaluationListResponse,
    PromotionListResponse,
)
from orderbot.application.use_cases.evaluate_promotions import EvaluatePromotions
from orderbot.application.use_cases.get_promotions import GetPromotions
from orderbot.domain.common.ids import MenuId

router = APIRouter()


@router.get("/v1/promotions", response_model=PromotionListResponse)
def list_promotions(
    menu_id: str | None = Query(default=None, alias="menuId"),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    container: Container = Depends(get_container),
) -> PromotionListResponse:
    use_case = GetPromotions(
        promotion_repository=container.promotion_repository,
        menu_resolver=container.menu_resolver,
        cache=container.cache,
        ttl_seconds=container.settings.promotions_cache_ttl_seconds,
    )
    return use_case.execute(
        menu_id=MenuId(menu_id) if menu_id else None,
        include_inactive=include_inactive,
    )


@router.post("/v1/promotions/evaluate", response_model=PromotionEvaluationListResponse)
def evaluate_promotions(
    request_dto: EvaluatePromotionsRequest,
    container: Container = Depends(get_container),
) -> PromotionEvaluationListResponse:
    use_case = EvaluatePromotions(
        order_repository=container.order_repository,
        promotion_repository=container.promotion_repository,
        catalog_repository=container.catalog_repository,
        menu_resolver=container.menu_resolver,
    )
    return use_case.execute(request_dto)
