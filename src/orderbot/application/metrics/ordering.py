from __future__ import annotations

from prometheus_client import Counter

CART_MUTATIONS_TOTAL = Counter(
    "orderbot_cart_mutations_total",
    "Total number of committed cart mutations.",
    ["operation"],
)

ORDERS_CONFIRMED_TOTAL = Counter(
    "orderbot_orders_confirmed_total",
    "Total number of orders confirmed.",
    ["currency"],
)

ORDER_CONFIRMATION_BLOCKED_TOTAL = Counter(
    "orderbot_order_confirmation_blocked_total",
    "Total number of rejected confirmation attempts.",
    ["reason"],
)

INVENTORY_REJECTIONS_TOTAL = Counter(
    "orderbot_inventory_rejections_total",
    "Total number of quantity changes rejected by the inventory guard.",
    ["reason"],
)

DISCOUNT_APPLIED_TOTAL = Counter(
    "orderbot_discount_applied_total",
    "Total number of recalculations that applied a promotion discount.",
    ["promotion_type"],
)

DISCOUNT_APPLIED_CENTS_TOTAL = Counter(
    "orderbot_discount_applied_cents_total",
    "Sum of applied discounts in minor units.",
    ["promotion_type", "currency"],
)

PROMOTION_EVALUATIONS_TOTAL = Counter(
    "orderbot_promotion_evaluations_total",
    "Total number of speculative promotion evaluations.",
    ["applies_now"],
)


def record_cart_mutation(operation: str) -> None:
    CART_MUTATIONS_TOTAL.labels(operation=operation).inc()


def record_order_confirmed(currency: str) -> None:
    ORDERS_CONFIRMED_TOTAL.labels(currency=currency).inc()


def record_confirmation_blocked(reason: str) -> None:
    ORDER_CONFIRMATION_BLOCKED_TOTAL.labels(reason=reason).inc()


def record_inventory_rejection(reason: str) -> None:
    INVENTORY_REJECTIONS_TOTAL.labels(reason=reason).inc()


def record_discount_applied(promotion_type: str, amount_cents: int, currency: str) -> None:
    DISCOUNT_APPLIED_TOTAL.labels(promotion_type=promotion_type).inc()
    DISCOUNT_APPLIED_CENTS_TOTAL.labels(promotion_type=promotion_type, currency=currency).inc(
        amount_cents
    )


def record_promotion_evaluation(applies_now: bool) -> None:
    PROMOTION_EVALUATIONS_TOTAL.labels(applies_now=str(applies_now).lower()).inc()
