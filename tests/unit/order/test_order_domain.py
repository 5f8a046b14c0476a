from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from orderbot.domain.catalog.entities import Product, ProductType
from orderbot.domain.common.ids import ConversationId, MenuId, OrderId, OrderItemId, ProductId
from orderbot.domain.common.money import Money
from orderbot.domain.order.entities import (
    ConfirmationBlocker,
    Order,
    OrderConfirmationBlockedError,
    OrderItem,
    OrderItemMissingError,
    OrderNotEditableError,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductSnapshot,
    ShippingType,
    create_cart,
)
from orderbot.domain.pricing.totals import OrderTotals


def _cart() -> Order:
    return create_cart(
        order_id=OrderId("ord_001"),
        conversation_id=ConversationId("conv_001"),
        menu_id=MenuId("men_001"),
        currency="ARS",
        now=datetime.now(timezone.utc),
    )


def _ars(amount_cents: int) -> Money:
    return Money(amount_cents=amount_cents, currency="ARS")


def _with_item(order: Order, product_id: str = "prd_001", quantity: int = 2) -> Order:
    return order.upsert_item(
        item_id=OrderItemId(f"oit_{product_id}"),
        product_id=ProductId(product_id),
        quantity=quantity,
        unit_price=_ars(2500),
        snapshot=ProductSnapshot(name="Carne suave"),
    )


def _ready_to_confirm() -> Order:
    return (
        _with_item(_cart())
        .with_contact_first_name("Ana")
        .with_shipping(ShippingType.PICKUP)
        .with_payment_method(PaymentMethod.CASH)
    )


def test_order_item_quantity_must_be_gte_one() -> None:
    with pytest.raises(ValueError):
        OrderItem(
            item_id=OrderItemId("oit_001"),
            product_id=ProductId("prd_001"),
            quantity=0,
            unit_price=_ars(100),
            total_price=_ars(0),
        )


def test_order_item_total_must_match_quantity() -> None:
    with pytest.raises(ValueError):
        OrderItem(
            item_id=OrderItemId("oit_001"),
            product_id=ProductId("prd_001"),
            quantity=2,
            unit_price=_ars(100),
            total_price=_ars(150),
        )


def test_upsert_sets_absolute_quantity_and_keeps_line_id() -> None:
    order = _with_item(_cart(), quantity=2)
    order = order.upsert_item(
        item_id=OrderItemId("oit_other"),
        product_id=ProductId("prd_001"),
        quantity=5,
        unit_price=_ars(2500),
        snapshot=None,
    )

    assert len(order.items) == 1
    item = order.items[0]
    assert item.quantity == 5
    assert item.item_id == "oit_prd_001"
    assert item.total_price == _ars(12500)
    assert item.snapshot == ProductSnapshot(name="Carne suave")


def test_remove_unknown_item_raises() -> None:
    with pytest.raises(OrderItemMissingError):
        _cart().remove_item(OrderItemId("oit_missing"))


def test_clear_items_empties_the_cart() -> None:
    order = _with_item(_with_item(_cart(), "prd_001"), "prd_002").clear_items()

    assert order.items == []
    assert order.subtotal_cents == 0


def test_delivery_without_address_is_accepted_but_blocks_confirmation() -> None:
    order = (
        _with_item(_cart())
        .with_contact_first_name("Ana")
        .with_shipping(ShippingType.DELIVERY, address_description="   ")
        .with_payment_method(PaymentMethod.CARD)
    )

    assert order.shipping is not None
    assert order.shipping.missing_address is True
    with pytest.raises(OrderConfirmationBlockedError) as exc_info:
        order.confirm()
    assert exc_info.value.blocker == ConfirmationBlocker.MISSING_ADDRESS


def test_pickup_drops_delivery_address() -> None:
    order = _cart().with_shipping(ShippingType.DELIVERY, address_description="Av. Siempre Viva 742")
    order = order.with_shipping(ShippingType.PICKUP)

    assert order.shipping is not None
    assert order.shipping.address_description is None
    assert order.delivery_fee_cents == 0


def test_shipping_update_keeps_previous_fee() -> None:
    order = _cart().with_shipping(ShippingType.DELIVERY, fee=_ars(1500), address_description="Calle 1")
    order = order.with_shipping(ShippingType.DELIVERY, eta=datetime(2026, 10, 19, 21, tzinfo=timezone.utc))

    assert order.shipping is not None
    assert order.shipping.fee == _ars(1500)
    assert order.shipping.address_description == "Calle 1"
    assert order.delivery_fee_cents == 1500


def test_contact_first_name_is_trimmed_and_required() -> None:
    assert _cart().with_contact_first_name("  Ana ").contact_first_name == "Ana"
    with pytest.raises(ValueError):
        _cart().with_contact_first_name("   ")


def test_payment_amount_follows_totals() -> None:
    order = _cart().with_payment_method(PaymentMethod.CASH)
    totals = OrderTotals(
        subtotal=_ars(5000),
        discount=_ars(0),
        delivery_fee=_ars(0),
        total=_ars(5000),
    )

    order = order.with_totals(totals)

    assert order.payment is not None
    assert order.payment.status == PaymentStatus.PENDING
    assert order.payment.amount == _ars(5000)


@pytest.mark.parametrize(
    ("order", "blocker"),
    [
        (_cart(), ConfirmationBlocker.EMPTY_ORDER),
        (_with_item(_cart()), ConfirmationBlocker.MISSING_CONTACT),
        (_with_item(_cart()).with_contact_first_name("Ana"), ConfirmationBlocker.MISSING_SHIPPING),
        (
            _with_item(_cart()).with_contact_first_name("Ana").with_shipping(ShippingType.PICKUP),
            ConfirmationBlocker.MISSING_PAYMENT,
        ),
    ],
)
def test_confirmation_blockers_are_checked_in_order(order: Order, blocker: ConfirmationBlocker) -> None:
    assert order.confirmation_blocker() == blocker


def test_confirmed_order_is_not_editable() -> None:
    confirmed = _ready_to_confirm().confirm()

    assert confirmed.status == OrderStatus.CONFIRMED
    with pytest.raises(OrderNotEditableError):
        confirmed.with_contact_first_name("Luis")
    with pytest.raises(OrderNotEditableError):
        _with_item(confirmed, "prd_002")


def test_order_rejects_duplicate_products() -> None:
    item = OrderItem(
        item_id=OrderItemId("oit_001"),
        product_id=ProductId("prd_001"),
        quantity=1,
        unit_price=_ars(100),
        total_price=_ars(100),
    )
    with pytest.raises(ValueError):
        Order(
            order_id=OrderId("ord_001"),
            conversation_id=ConversationId("conv_001"),
            menu_id=None,
            status=OrderStatus.CART,
            currency="ARS",
            items=[item, item],
            totals=OrderTotals.zero("ARS"),
            created_at=datetime.now(timezone.utc),
        )


def test_snapshot_defaults_come_from_product() -> None:
    product = Product(
        product_id=ProductId("prd_001"),
        name="Humita",
        type=ProductType.EMPANADA,
        image="/images/menu/empanada-humita.png",
    )

    assert ProductSnapshot().with_defaults(product) == ProductSnapshot(
        name="Humita",
        image="/images/menu/empanada-humita.png",
        type=ProductType.EMPANADA,
    )
    assert ProductSnapshot(name="Mi humita").with_defaults(product).image == (
        "/images/menu/empanada-humita.png"
    )
