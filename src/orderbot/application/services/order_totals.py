from __future__ import annotations

from dataclasses import dataclass

from orderbot.application.ports.repositories import CatalogRepository, PromotionRepository
from orderbot.domain.order.entities import Order
from orderbot.domain.pricing.discounts import DiscountCandidate
from orderbot.domain.pricing.totals import PricingResult, calculate_totals
from orderbot.domain.promotion.matching import PromotionItem, promotion_item_from_product


@dataclass(frozen=True)
class PricedOrder:
    """A cart carrying fresh totals and the promotion that produced its discount."""

    order: Order
    applied: DiscountCandidate | None


class OrderTotalsCalculator:
    """Derives subtotal, discount, delivery fee and total for a cart.

    Promotions of the order's bound menu compete; only the best single discount
    is applied.
    """

    def __init__(
        self,
        promotion_repository: PromotionRepository,
        catalog_repository: CatalogRepository,
    ) -> None:
        self._promotion_repository = promotion_repository
        self._catalog_repository = catalog_repository

    def calculate(self, order: Order) -> PricingResult:
        promotions = []
        if order.menu_id is not None and order.items:
            promotions = self._promotion_repository.list_promotions(order.menu_id)

        items = self._promotion_items(order) if promotions else []
        return calculate_totals(
            currency=order.currency,
            subtotal_cents=order.subtotal_cents,
            items=items,
            promotions=promotions,
            delivery_fee_cents=order.delivery_fee_cents,
        )

    def price(self, order: Order) -> PricedOrder:
        result = self.calculate(order)
        return PricedOrder(order=order.with_totals(result.totals), applied=result.applied)

    def _promotion_items(self, order: Order) -> list[PromotionItem]:
        products = self._catalog_repository.get_products(item.product_id for item in order.items)
        return [
            promotion_item_from_product(
                products.get(item.product_id),
                item.quantity,
                product_id=item.product_id,
                unit_price_cents=item.unit_price.amount_cents,
            )
            for item in order.items
        ]
