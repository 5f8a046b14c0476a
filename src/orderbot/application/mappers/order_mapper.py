from __future__ import annotations

from collections.abc import Mapping

from orderbot.application.dto.responses import (
    MoneyResponse,
    OrderItemResponse,
    OrderSummaryResponse,
    PaymentResponse,
    ShippingResponse,
)
from orderbot.domain.catalog.entities import Product
from orderbot.domain.common.ids import ProductId
from orderbot.domain.common.money import Money
from orderbot.domain.order.entities import Order, OrderItem


def to_money_response(money: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=money.amount_cents, currency=money.currency)


def display_name(item: OrderItem, product: Product | None) -> str:
    if item.snapshot is not None and item.snapshot.name:
        return item.snapshot.name
    if product is not None:
        return product.name
    return f"Product {str(item.product_id)[-4:]}"


def display_image(item: OrderItem, product: Product | None) -> str | None:
    if item.snapshot is not None and item.snapshot.image:
        return item.snapshot.image
    return product.image if product is not None else None


def _item_response(item: OrderItem, product: Product | None) -> OrderItemResponse:
    product_type = None
    if item.snapshot is not None and item.snapshot.type is not None:
        product_type = item.snapshot.type.value
    elif product is not None:
        product_type = product.type.value
    return OrderItemResponse(
        itemId=str(item.item_id),
        productId=str(item.product_id),
        name=display_name(item, product),
        image=display_image(item, product),
        productType=product_type,
        quantity=item.quantity,
        unitPrice=to_money_response(item.unit_price),
        totalPrice=to_money_response(item.total_price),
    )


def to_order_summary(
    order: Order,
    products: Mapping[ProductId, Product] | None = None,
) -> OrderSummaryResponse:
    products = products or {}
    shipping = None
    if order.shipping is not None:
        shipping = ShippingResponse(
            type=order.shipping.type.value,
            fee=to_money_response(order.shipping.fee),
            addressDescription=order.shipping.address_description,
            pickupLocation=order.shipping.pickup_location,
            eta=order.shipping.eta,
        )
    payment = None
    if order.payment is not None:
        payment = PaymentResponse(
            method=order.payment.method.value,
            status=order.payment.status.value,
            amount=to_money_response(order.payment.amount),
        )
    return OrderSummaryResponse(
        orderId=str(order.order_id),
        conversationId=str(order.conversation_id),
        menuId=str(order.menu_id) if order.menu_id else None,
        status=order.status.value,
        currency=order.currency,
        contactFirstName=order.contact_first_name,
        items=[_item_response(item, products.get(item.product_id)) for item in order.items],
        subtotal=to_money_response(order.totals.subtotal),
        discount=to_money_response(order.totals.discount),
        deliveryFee=to_money_response(order.totals.delivery_fee),
        total=to_money_response(order.totals.total),
        shipping=shipping,
        payment=payment,
        version=order.version,
        createdAt=order.created_at,
    )
