from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from fractions import Fraction

from orderbot.domain.common.ids import PromotionId
from orderbot.domain.common.money import round_cents
from orderbot.domain.promotion.entities import (
    DiscountKind,
    FixedBundlePrice,
    Promotion,
    QuantityDiscount,
)
from orderbot.domain.promotion.matching import (
    PromotionItem,
    bundles_to_apply,
    eligible_items,
    max_bundles,
    total_quantity,
)


@dataclass(frozen=True)
class DiscountCandidate:
    promotion_id: PromotionId
    promotion_type: str
    amount_cents: int


def quantity_discount_candidate(
    terms: QuantityDiscount,
    items: Sequence[PromotionItem],
    subtotal_cents: int,
    currency: str,
) -> int:
    if total_quantity(items) < terms.min_qty:
        return 0
    if terms.discount_kind == DiscountKind.PERCENT:
        return round_cents(subtotal_cents * terms.discount_value)
    if terms.discount_kind == DiscountKind.AMOUNT:
        if terms.currency is not None and terms.currency != currency:
            return 0
        return round_cents(terms.discount_value)
    return 0


def fixed_bundle_candidate(
    terms: FixedBundlePrice,
    items: Sequence[PromotionItem],
    stackable: bool,
    currency: str,
) -> int:
    """Value of the items a bundle consumes minus what the bundle charges for them.

    For each requirement only the share of eligible value covered by the applied
    bundles counts, so leftover items keep their full price.
    """
    if terms.fixed_price.currency != currency:
        return 0

    applied = bundles_to_apply(max_bundles(items, terms.requirements), stackable)
    if applied < 1:
        return 0

    bundle_value = Fraction(0)
    for requirement in terms.requirements:
        eligible = eligible_items(items, requirement)
        eligible_qty = sum(item.quantity for item in eligible)
        if not eligible_qty:
            continue
        eligible_value = sum(item.value_cents for item in eligible)
        proportion = min(Fraction(applied * requirement.qty, eligible_qty), Fraction(1))
        bundle_value += eligible_value * proportion

    promo_price = applied * terms.fixed_price.amount_cents
    return max(round_cents(bundle_value - promo_price), 0)


def discount_candidate(
    promotion: Promotion,
    items: Sequence[PromotionItem],
    subtotal_cents: int,
    currency: str,
) -> int:
    terms = promotion.terms
    if isinstance(terms, QuantityDiscount):
        return quantity_discount_candidate(terms, items, subtotal_cents, currency)
    if isinstance(terms, FixedBundlePrice):
        return fixed_bundle_candidate(terms, items, promotion.stackable, currency)
    return 0


def best_discount(
    promotions: Sequence[Promotion],
    items: Sequence[PromotionItem],
    subtotal_cents: int,
    currency: str,
) -> DiscountCandidate | None:
    """Pick the single largest discount; promotions never combine with each other."""
    best: DiscountCandidate | None = None
    for promotion in promotions:
        amount = discount_candidate(promotion, items, subtotal_cents, currency)
        if amount <= 0:
            continue
        if best is None or amount > best.amount_cents:
            best = DiscountCandidate(
                promotion_id=promotion.promotion_id,
                promotion_type=promotion.type,
                amount_cents=amount,
            )
    return best
