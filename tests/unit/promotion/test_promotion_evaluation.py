from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderbot.domain.catalog.entities import BeverageCategory, EmpanadaCategory, ProductType
from orderbot.domain.common.ids import MenuId, PromotionId
from orderbot.domain.common.money import Money
from orderbot.domain.promotion.entities import (
    DiscountKind,
    FixedBundlePrice,
    Promotion,
    PromotionRequirement,
    PromotionType,
    QuantityDiscount,
)
from orderbot.domain.promotion.evaluation import (
    MissingRequirement,
    evaluate_promotion,
    evaluate_promotions,
    summarize_evaluations,
)
from orderbot.domain.promotion.matching import PromotionItem


def _bundle(stackable: bool = False, classic_qty: int = 3) -> Promotion:
    return Promotion(
        promotion_id=PromotionId("prm_bundle"),
        menu_id=MenuId("men_001"),
        name="Promo clásica",
        type=PromotionType.FIXED_BUNDLE_PRICE.value,
        active=True,
        stackable=stackable,
        terms=FixedBundlePrice(
            fixed_price=Money(amount_cents=8200, currency="ARS"),
            requirements=(
                PromotionRequirement(
                    qty=classic_qty,
                    product_type=ProductType.EMPANADA,
                    empanada_category=EmpanadaCategory.CLASSIC,
                ),
                PromotionRequirement(
                    qty=1,
                    product_type=ProductType.BEVERAGE,
                    beverage_categories=(BeverageCategory.WATER, BeverageCategory.SOFT_DRINK),
                ),
            ),
        ),
    )


def _volume(min_qty: int = 12) -> Promotion:
    return Promotion(
        promotion_id=PromotionId("prm_volume"),
        menu_id=MenuId("men_001"),
        name="Docena",
        type=PromotionType.QUANTITY_DISCOUNT.value,
        active=True,
        stackable=False,
        terms=QuantityDiscount(
            min_qty=min_qty,
            discount_kind=DiscountKind.PERCENT,
            discount_value=Decimal("0.1"),
        ),
    )


def _classics(quantity: int) -> PromotionItem:
    return PromotionItem(
        quantity=quantity,
        product_type=ProductType.EMPANADA,
        empanada_category=EmpanadaCategory.CLASSIC,
    )


def _sodas(quantity: int) -> PromotionItem:
    return PromotionItem(
        quantity=quantity,
        product_type=ProductType.BEVERAGE,
        beverage_category=BeverageCategory.SOFT_DRINK,
    )


def test_bundle_applies_when_every_requirement_is_met() -> None:
    evaluation = evaluate_promotion(_bundle(), [_classics(3), _sodas(1)])

    assert evaluation.applies_now is True
    assert evaluation.bundles_possible == 1
    assert evaluation.missing_requirements == ()


def test_bundle_reports_each_missing_requirement() -> None:
    evaluation = evaluate_promotion(_bundle(), [_classics(2)])

    assert evaluation.applies_now is False
    assert evaluation.bundles_possible == 0
    assert evaluation.missing_requirements == (
        MissingRequirement(requirement="3x classic empanadas", missing_quantity=1),
        MissingRequirement(requirement="1x beverages (WATER, SOFT_DRINK)", missing_quantity=1),
    )


def test_non_stackable_bundle_reports_single_application() -> None:
    evaluation = evaluate_promotion(_bundle(stackable=False), [_classics(9), _sodas(3)])

    assert evaluation.bundles_possible == 1


def test_stackable_bundle_reports_every_application() -> None:
    evaluation = evaluate_promotion(_bundle(stackable=True), [_classics(9), _sodas(3)])

    assert evaluation.bundles_possible == 3
    assert "3 time(s)" in evaluation.notes


def test_quantity_discount_reports_missing_units() -> None:
    evaluation = evaluate_promotion(_volume(min_qty=12), [_classics(8), _sodas(2)])

    assert evaluation.applies_now is False
    assert evaluation.missing_quantity == 2
    assert evaluation.requirements == "Minimum 12 units."


def test_quantity_discount_counts_units_of_every_type() -> None:
    evaluation = evaluate_promotion(_volume(min_qty=12), [_classics(10), _sodas(2)])

    assert evaluation.applies_now is True
    assert evaluation.missing_quantity == 0


def test_unknown_promotion_type_is_not_applicable() -> None:
    promotion = Promotion(
        promotion_id=PromotionId("prm_other"),
        menu_id=MenuId("men_001"),
        name="2x1",
        type="BUY_ONE_GET_ONE",
        active=True,
        stackable=False,
        terms=None,
    )

    evaluation = evaluate_promotion(promotion, [_classics(2)])

    assert evaluation.applies_now is False
    assert evaluation.notes == "Promotion type is not supported for automatic evaluation."


def test_known_type_without_terms_is_not_applicable() -> None:
    promotion = Promotion(
        promotion_id=PromotionId("prm_broken"),
        menu_id=MenuId("men_001"),
        name="broken",
        type=PromotionType.FIXED_BUNDLE_PRICE.value,
        active=True,
        stackable=False,
        terms=None,
    )

    evaluation = evaluate_promotion(promotion, [_classics(3)])

    assert evaluation.applies_now is False
    assert evaluation.notes == "Promotion is missing the terms needed to evaluate it."


def test_summary_lists_applicable_promotions() -> None:
    evaluations = evaluate_promotions([_bundle(), _volume()], [_classics(3), _sodas(1)])

    assert summarize_evaluations(evaluations) == "1 promotion(s) can be applied: Promo clásica."


def test_summary_without_promotions() -> None:
    assert summarize_evaluations([]) == "No active promotions were found for the selected menu."


def test_summary_when_nothing_applies() -> None:
    evaluations = evaluate_promotions([_bundle(), _volume()], [_classics(1)])

    assert summarize_evaluations(evaluations).startswith("Promotion requirements are not met yet")
