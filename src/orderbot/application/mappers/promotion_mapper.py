from __future__ import annotations

from orderbot.application.dto.responses import (
    AnalyzedItemResponse,
    MissingRequirementResponse,
    PromotionEvaluationResponse,
    PromotionRequirementResponse,
    PromotionResponse,
)
from orderbot.application.mappers.order_mapper import to_money_response
from orderbot.domain.promotion.entities import (
    FixedBundlePrice,
    Promotion,
    PromotionRequirement,
    QuantityDiscount,
)
from orderbot.domain.promotion.evaluation import PromotionEvaluation
from orderbot.domain.promotion.matching import PromotionItem


def _requirement_response(requirement: PromotionRequirement) -> PromotionRequirementResponse:
    return PromotionRequirementResponse(
        qty=requirement.qty,
        productType=requirement.product_type.value,
        empanadaCategory=(
            requirement.empanada_category.value if requirement.empanada_category else None
        ),
        beverageCategories=[category.value for category in requirement.beverage_categories],
        description=requirement.describe(),
    )


def to_promotion_response(promotion: Promotion) -> PromotionResponse:
    response = PromotionResponse(
        promotionId=str(promotion.promotion_id),
        menuId=str(promotion.menu_id),
        name=promotion.name,
        type=promotion.type,
        active=promotion.active,
        stackable=promotion.stackable,
    )
    terms = promotion.terms
    if isinstance(terms, FixedBundlePrice):
        return response.model_copy(
            update={
                "fixedPrice": to_money_response(terms.fixed_price),
                "currency": terms.fixed_price.currency,
                "requirements": [_requirement_response(req) for req in terms.requirements],
            }
        )
    if isinstance(terms, QuantityDiscount):
        return response.model_copy(
            update={
                "minQty": terms.min_qty,
                "discountKind": terms.discount_kind.value,
                "discountValue": str(terms.discount_value),
                "currency": terms.currency,
            }
        )
    return response


def to_evaluation_response(evaluation: PromotionEvaluation) -> PromotionEvaluationResponse:
    return PromotionEvaluationResponse(
        promotionId=str(evaluation.promotion_id),
        name=evaluation.name,
        type=evaluation.type,
        appliesNow=evaluation.applies_now,
        notes=evaluation.notes,
        bundlesPossible=evaluation.bundles_possible,
        missingRequirements=[
            MissingRequirementResponse(
                requirement=missing.requirement,
                missingQuantity=missing.missing_quantity,
            )
            for missing in evaluation.missing_requirements
        ],
        missingQuantity=evaluation.missing_quantity,
        requirements=evaluation.requirements,
    )


def to_analyzed_item_response(item: PromotionItem) -> AnalyzedItemResponse:
    return AnalyzedItemResponse(
        productId=str(item.product_id) if item.product_id else None,
        productType=item.product_type.value if item.product_type else None,
        empanadaCategory=item.empanada_category.value if item.empanada_category else None,
        beverageCategory=item.beverage_category.value if item.beverage_category else None,
        quantity=item.quantity,
        label=item.label,
        source=item.source.value,
    )
