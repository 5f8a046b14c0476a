from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from orderbot.domain.common.ids import PromotionId
from orderbot.domain.promotion.entities import (
    FixedBundlePrice,
    Promotion,
    PromotionType,
    QuantityDiscount,
)
from orderbot.domain.promotion.matching import (
    PromotionItem,
    bundles_to_apply,
    matching_quantity,
    total_quantity,
)


@dataclass(frozen=True)
class MissingRequirement:
    requirement: str
    missing_quantity: int


@dataclass(frozen=True)
class PromotionEvaluation:
    promotion_id: PromotionId
    name: str
    type: str
    applies_now: bool
    notes: str
    bundles_possible: int | None = None
    missing_requirements: tuple[MissingRequirement, ...] = ()
    missing_quantity: int | None = None
    requirements: str | None = None


def evaluate_promotion(promotion: Promotion, items: Sequence[PromotionItem]) -> PromotionEvaluation:
    """Report whether ``promotion`` applies to ``items`` and what is still missing.

    Never raises for unsupported promotion kinds; those come back as not applicable.
    """
    terms = promotion.terms
    if isinstance(terms, FixedBundlePrice):
        return _evaluate_fixed_bundle(promotion, terms, items)
    if isinstance(terms, QuantityDiscount):
        return _evaluate_quantity_discount(promotion, terms, items)
    if promotion.type in {kind.value for kind in PromotionType}:
        notes = "Promotion is missing the terms needed to evaluate it."
    else:
        notes = "Promotion type is not supported for automatic evaluation."
    return PromotionEvaluation(
        promotion_id=promotion.promotion_id,
        name=promotion.name,
        type=promotion.type,
        applies_now=False,
        notes=notes,
    )


def evaluate_promotions(
    promotions: Sequence[Promotion], items: Sequence[PromotionItem]
) -> list[PromotionEvaluation]:
    return [evaluate_promotion(promotion, items) for promotion in promotions]


def summarize_evaluations(evaluations: Sequence[PromotionEvaluation]) -> str:
    if not evaluations:
        return "No active promotions were found for the selected menu."
    applicable = [evaluation for evaluation in evaluations if evaluation.applies_now]
    if applicable:
        names = ", ".join(evaluation.name for evaluation in applicable)
        return f"{len(applicable)} promotion(s) can be applied: {names}."
    return "Promotion requirements are not met yet; check the missing items listed."


def _evaluate_fixed_bundle(
    promotion: Promotion,
    terms: FixedBundlePrice,
    items: Sequence[PromotionItem],
) -> PromotionEvaluation:
    per_requirement = []
    for requirement in terms.requirements:
        available = matching_quantity(items, requirement)
        per_requirement.append(
            (requirement, available // requirement.qty, max(requirement.qty - available, 0))
        )

    possible = min(bundles for _, bundles, _ in per_requirement)
    capped = bundles_to_apply(possible, promotion.stackable)
    applies_now = capped >= 1

    missing = tuple(
        MissingRequirement(requirement=requirement.describe(), missing_quantity=missing_qty)
        for requirement, _, missing_qty in per_requirement
        if missing_qty > 0
    )
    if applies_now:
        notes = f"This promotion can be applied {capped} time(s) with the current items."
    else:
        notes = "Some items are still missing to complete the promotion requirements."

    return PromotionEvaluation(
        promotion_id=promotion.promotion_id,
        name=promotion.name,
        type=promotion.type,
        applies_now=applies_now,
        notes=notes,
        bundles_possible=capped,
        missing_requirements=missing,
    )


def _evaluate_quantity_discount(
    promotion: Promotion,
    terms: QuantityDiscount,
    items: Sequence[PromotionItem],
) -> PromotionEvaluation:
    # counts every item regardless of product type
    quantity = total_quantity(items)
    applies_now = quantity >= terms.min_qty
    missing_quantity = 0 if applies_now else terms.min_qty - quantity

    if applies_now:
        notes = "The combined quantity reaches the required minimum."
    else:
        notes = f"{missing_quantity} more unit(s) are needed to activate this promotion."

    return PromotionEvaluation(
        promotion_id=promotion.promotion_id,
        name=promotion.name,
        type=promotion.type,
        applies_now=applies_now,
        notes=notes,
        missing_quantity=missing_quantity,
        requirements=f"Minimum {terms.min_qty} units.",
    )
