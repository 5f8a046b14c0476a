from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from orderbot.domain.common.money import Money
from orderbot.domain.pricing.discounts import DiscountCandidate, best_discount
from orderbot.domain.promotion.entities import Promotion
from orderbot.domain.promotion.matching import PromotionItem


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Money
    discount: Money
    delivery_fee: Money
    total: Money

    def __post_init__(self) -> None:
        currencies = {
            self.subtotal.currency,
            self.discount.currency,
            self.delivery_fee.currency,
            self.total.currency,
        }
        if len(currencies) != 1:
            raise ValueError("order totals must share one currency")
        expected_total = max(
            self.subtotal.amount_cents
            - self.discount.amount_cents
            + self.delivery_fee.amount_cents,
            0,
        )
        if self.total.amount_cents != expected_total:
            raise ValueError("total must equal max(subtotal - discount + delivery_fee, 0)")

    @classmethod
    def zero(cls, currency: str) -> OrderTotals:
        return cls(
            subtotal=Money.zero(currency),
            discount=Money.zero(currency),
            delivery_fee=Money.zero(currency),
            total=Money.zero(currency),
        )


@dataclass(frozen=True)
class PricingResult:
    totals: OrderTotals
    applied: DiscountCandidate | None


def calculate_totals(
    *,
    currency: str,
    subtotal_cents: int,
    items: Sequence[PromotionItem],
    promotions: Sequence[Promotion],
    delivery_fee_cents: int,
) -> PricingResult:
    applied = best_discount(promotions, items, subtotal_cents, currency)
    discount_cents = applied.amount_cents if applied else 0
    total_cents = max(subtotal_cents - discount_cents + delivery_fee_cents, 0)
    return PricingResult(
        totals=OrderTotals(
            subtotal=Money(amount_cents=subtotal_cents, currency=currency),
            discount=Money(amount_cents=discount_cents, currency=currency),
            delivery_fee=Money(amount_cents=delivery_fee_cents, currency=currency),
            total=Money(amount_cents=total_cents, currency=currency),
        ),
        applied=applied,
    )
