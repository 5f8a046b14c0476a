from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from orderbot.domain.catalog.entities import Product, ProductType
from orderbot.domain.common.ids import ConversationId, MenuId, OrderId, OrderItemId, ProductId
from orderbot.domain.common.money import Money
from orderbot.domain.pricing.totals import OrderTotals


class OrderStatus(str, Enum):
    CART = "CART"
    CONFIRMED = "CONFIRMED"


class ShippingType(str, Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class ConfirmationBlocker(str, Enum):
    EMPTY_ORDER = "EMPTY_ORDER"
    MISSING_CONTACT = "MISSING_CONTACT"
    MISSING_SHIPPING = "MISSING_SHIPPING"
    MISSING_ADDRESS = "MISSING_ADDRESS"
    MISSING_PAYMENT = "MISSING_PAYMENT"


@dataclass(frozen=True)
class ProductSnapshot:
    """Display data copied onto a line item when it is added."""

    name: str | None = None
    image: str | None = None
    type: ProductType | None = None

    def with_defaults(self, product: Product | None) -> ProductSnapshot:
        if product is None:
            return self
        if not self.name:
            return ProductSnapshot(name=product.name, image=product.image, type=product.type)
        if self.image is None:
            return replace(self, image=product.image)
        return self


@dataclass(frozen=True)
class OrderItem:
    item_id: OrderItemId
    product_id: ProductId
    quantity: int
    unit_price: Money
    total_price: Money
    snapshot: ProductSnapshot | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price.currency != self.total_price.currency:
            raise ValueError("total_price currency must match unit_price currency")
        if self.total_price.amount_cents != self.unit_price.amount_cents * self.quantity:
            raise ValueError("total_price must equal unit_price * quantity")


@dataclass(frozen=True)
class Shipping:
    type: ShippingType
    fee: Money
    address_description: str | None = None
    pickup_location: str | None = None
    eta: datetime | None = None

    @property
    def missing_address(self) -> bool:
        return self.type == ShippingType.DELIVERY and not self.address_description


@dataclass(frozen=True)
class Payment:
    method: PaymentMethod
    status: PaymentStatus
    amount: Money


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    conversation_id: ConversationId
    menu_id: MenuId | None
    status: OrderStatus
    currency: str
    items: list[OrderItem]
    totals: OrderTotals
    created_at: datetime
    contact_first_name: str | None = None
    shipping: Shipping | None = None
    payment: Payment | None = None
    version: int = 1
    updated_at: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.totals.total.currency != self.currency:
            raise ValueError("order totals currency must match order currency")
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("order may hold at most one item per product")
        if self.version < 1:
            raise ValueError("version must be >= 1")

    @property
    def subtotal_cents(self) -> int:
        return sum(item.total_price.amount_cents for item in self.items)

    @property
    def delivery_fee_cents(self) -> int:
        return self.shipping.fee.amount_cents if self.shipping else 0

    def find_item(self, item_id: OrderItemId) -> OrderItem | None:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def ensure_editable(self) -> None:
        if self.status != OrderStatus.CART:
            raise OrderNotEditableError(
                f"order {self.order_id} cannot be modified from status={self.status.value}"
            )

    def bind_menu(self, menu_id: MenuId) -> Order:
        return replace(self, menu_id=menu_id)

    def upsert_item(
        self,
        item_id: OrderItemId,
        product_id: ProductId,
        quantity: int,
        unit_price: Money,
        snapshot: ProductSnapshot | None,
    ) -> Order:
        """Set the absolute quantity for ``product_id``; an existing line keeps its id."""
        self.ensure_editable()
        total_price = unit_price.times(quantity)
        items: list[OrderItem] = []
        replaced = False
        for item in self.items:
            if item.product_id == product_id:
                items.append(
                    replace(
                        item,
                        quantity=quantity,
                        unit_price=unit_price,
                        total_price=total_price,
                        snapshot=snapshot or item.snapshot,
                    )
                )
                replaced = True
            else:
                items.append(item)
        if not replaced:
            items.append(
                OrderItem(
                    item_id=item_id,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=total_price,
                    snapshot=snapshot,
                )
            )
        return replace(self, items=items)

    def remove_item(self, item_id: OrderItemId) -> Order:
        self.ensure_editable()
        if self.find_item(item_id) is None:
            raise OrderItemMissingError(f"order item {item_id} not found in order {self.order_id}")
        return replace(self, items=[item for item in self.items if item.item_id != item_id])

    def clear_items(self) -> Order:
        self.ensure_editable()
        return replace(self, items=[])

    def with_shipping(
        self,
        shipping_type: ShippingType,
        fee: Money | None = None,
        address_description: str | None = None,
        pickup_location: str | None = None,
        eta: datetime | None = None,
    ) -> Order:
        self.ensure_editable()
        address = address_description.strip() if address_description else None
        if shipping_type != ShippingType.DELIVERY:
            address = None
        current = self.shipping
        if current is None:
            shipping = Shipping(
                type=shipping_type,
                fee=fee or Money.zero(self.currency),
                address_description=address,
                pickup_location=pickup_location,
                eta=eta,
            )
        else:
            shipping = Shipping(
                type=shipping_type,
                fee=fee or current.fee,
                address_description=address or (
                    current.address_description if shipping_type == ShippingType.DELIVERY else None
                ),
                pickup_location=pickup_location or current.pickup_location,
                eta=eta or current.eta,
            )
        return replace(self, shipping=shipping)

    def with_payment_method(self, method: PaymentMethod) -> Order:
        self.ensure_editable()
        if self.payment is None:
            payment = Payment(method=method, status=PaymentStatus.PENDING, amount=self.totals.total)
        else:
            payment = replace(self.payment, method=method, amount=self.totals.total)
        return replace(self, payment=payment)

    def with_contact_first_name(self, first_name: str) -> Order:
        self.ensure_editable()
        trimmed = first_name.strip()
        if not trimmed:
            raise ValueError("first name must be non-empty")
        return replace(self, contact_first_name=trimmed)

    def with_totals(self, totals: OrderTotals) -> Order:
        payment = self.payment
        if payment is not None:
            payment = replace(payment, amount=totals.total)
        return replace(self, totals=totals, payment=payment)

    def confirmation_blocker(self) -> ConfirmationBlocker | None:
        if not self.items:
            return ConfirmationBlocker.EMPTY_ORDER
        if not self.contact_first_name:
            return ConfirmationBlocker.MISSING_CONTACT
        if self.shipping is None:
            return ConfirmationBlocker.MISSING_SHIPPING
        if self.shipping.missing_address:
            return ConfirmationBlocker.MISSING_ADDRESS
        if self.payment is None or self.payment.method is None:
            return ConfirmationBlocker.MISSING_PAYMENT
        return None

    def confirm(self) -> Order:
        self.ensure_editable()
        blocker = self.confirmation_blocker()
        if blocker is not None:
            raise OrderConfirmationBlockedError(blocker)
        return replace(self, status=OrderStatus.CONFIRMED)


def create_cart(
    order_id: OrderId,
    conversation_id: ConversationId,
    menu_id: MenuId | None,
    currency: str,
    now: datetime,
) -> Order:
    return Order(
        order_id=order_id,
        conversation_id=conversation_id,
        menu_id=menu_id,
        status=OrderStatus.CART,
        currency=currency,
        items=[],
        totals=OrderTotals.zero(currency),
        created_at=now,
    )


class OrderNotEditableError(Exception):
    pass


class OrderItemMissingError(Exception):
    pass


class OrderConfirmationBlockedError(Exception):
    def __init__(self, blocker: ConfirmationBlocker) -> None:
        super().__init__(f"order cannot be confirmed: {blocker.value}")
        self.blocker = blocker
