from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from orderbot.application.ports.repositories import PromotionRepository
from orderbot.domain.catalog.entities import BeverageCategory, EmpanadaCategory, ProductType
from orderbot.domain.common.ids import MenuId, PromotionId
from orderbot.domain.common.money import Money
from orderbot.domain.promotion.entities import (
    DiscountKind,
    FixedBundlePrice,
    Promotion,
    PromotionRequirement,
    PromotionTerms,
    PromotionType,
    QuantityDiscount,
)
from orderbot.infrastructure.db.models.promotion import PromotionModel

logger = logging.getLogger(__name__)


class SqlAlchemyPromotionRepository(PromotionRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_promotions(
        self,
        menu_id: MenuId,
        include_inactive: bool = False,
    ) -> list[Promotion]:
        statement = (
            select(PromotionModel)
            .options(selectinload(PromotionModel.requirements))
            .where(PromotionModel.menu_id == str(menu_id))
            .order_by(
                PromotionModel.active.desc(),
                PromotionModel.created_at.asc(),
                PromotionModel.id.asc(),
            )
        )
        if not include_inactive:
            statement = statement.where(PromotionModel.active.is_(True))

        with Session(self._engine) as session:
            models = session.execute(statement).scalars().all()
            return [self._to_domain(model) for model in models]

    def _to_domain(self, model: PromotionModel) -> Promotion:
        try:
            terms = _terms_from_model(model)
        except ValueError:
            logger.warning("promotion_terms_invalid", extra={"promotion_id": model.id})
            terms = None
        return Promotion(
            promotion_id=PromotionId(model.id),
            menu_id=MenuId(model.menu_id),
            name=model.name,
            type=model.type,
            active=model.active,
            stackable=model.stackable,
            terms=terms,
            created_at=model.created_at,
        )


def _terms_from_model(model: PromotionModel) -> PromotionTerms | None:
    if model.type == PromotionType.FIXED_BUNDLE_PRICE.value:
        if model.fixed_price_cents is None or not model.currency or not model.requirements:
            return None
        return FixedBundlePrice(
            fixed_price=Money(amount_cents=model.fixed_price_cents, currency=model.currency),
            requirements=tuple(
                PromotionRequirement(
                    qty=requirement.qty,
                    product_type=ProductType(requirement.product_type),
                    empanada_category=(
                        EmpanadaCategory(requirement.empanada_category)
                        if requirement.empanada_category
                        else None
                    ),
                    beverage_categories=tuple(
                        BeverageCategory(category)
                        for category in (requirement.beverage_categories or [])
                    ),
                )
                for requirement in model.requirements
            ),
        )

    if model.type == PromotionType.QUANTITY_DISCOUNT.value:
        if model.min_qty is None or model.discount_kind is None or model.discount_value is None:
            return None
        return QuantityDiscount(
            min_qty=model.min_qty,
            discount_kind=DiscountKind(model.discount_kind),
            discount_value=Decimal(model.discount_value),
            currency=model.currency,
        )

    return None
