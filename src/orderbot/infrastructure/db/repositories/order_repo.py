from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Engine, Select, select, update
from sqlalchemy.orm import Session, selectinload

from orderbot.application.ports.repositories import (
    ConfirmationResult,
    InsufficientInventoryError,
    InventoryRecordMissingError,
    OptimisticConcurrencyError,
    OrderRepository,
)
from orderbot.domain.catalog.entities import ProductType
from orderbot.domain.common.ids import ConversationId, MenuId, OrderId, OrderItemId, ProductId
from orderbot.domain.common.money import Money
from orderbot.domain.order.entities import (
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    ProductSnapshot,
    Shipping,
    ShippingType,
)
from orderbot.domain.pricing.totals import OrderTotals
from orderbot.infrastructure.db.models.order import (
    OrderItemModel,
    OrderModel,
    PaymentModel,
    ShippingModel,
)
from orderbot.infrastructure.db.repositories.inventory_repo import decrement_stock


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, order: Order) -> None:
        with Session(self._engine) as session:
            model = OrderModel(
                id=str(order.order_id),
                conversation_id=str(order.conversation_id),
                created_at=order.created_at,
                version=order.version,
            )
            _apply_header(model, order)
            session.add(model)
            session.flush()
            _sync_children(session, model, order)
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        statement = _order_query().where(OrderModel.id == str(order_id)).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def find_active_by_conversation(self, conversation_id: ConversationId) -> Order | None:
        statement = (
            _order_query()
            .where(
                OrderModel.conversation_id == str(conversation_id),
                OrderModel.status == OrderStatus.CART.value,
            )
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .limit(1)
        )
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def save(self, order: Order, expected_version: int) -> Order:
        """Write the whole cart in one transaction guarded by the version column."""
        with Session(self._engine) as session:
            result = session.execute(
                update(OrderModel)
                .where(
                    OrderModel.id == str(order.order_id),
                    OrderModel.version == expected_version,
                )
                .values(
                    menu_id=str(order.menu_id) if order.menu_id else None,
                    status=order.status.value,
                    currency=order.currency,
                    subtotal_cents=order.totals.subtotal.amount_cents,
                    discount_cents=order.totals.discount.amount_cents,
                    delivery_fee_cents=order.totals.delivery_fee.amount_cents,
                    total_cents=order.totals.total.amount_cents,
                    contact_first_name=order.contact_first_name,
                    version=OrderModel.version + 1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")

            model = session.execute(
                _order_query().where(OrderModel.id == str(order.order_id))
            ).scalar_one()
            _sync_children(session, model, order)
            session.commit()

        saved = self.get(order.order_id)
        if saved is None:
            raise RuntimeError(f"order {order.order_id} not found after save")
        return saved

    def confirm(self, order: Order, expected_version: int) -> ConfirmationResult:
        """Decrement stock for every line and flip the status; all or nothing."""
        with Session(self._engine) as session:
            remaining = []
            try:
                for item in order.items:
                    remaining.append(decrement_stock(session, item.product_id, item.quantity))
            except (InsufficientInventoryError, InventoryRecordMissingError):
                session.rollback()
                raise

            result = session.execute(
                update(OrderModel)
                .where(
                    OrderModel.id == str(order.order_id),
                    OrderModel.version == expected_version,
                    OrderModel.status == OrderStatus.CART.value,
                )
                .values(
                    status=order.status.value,
                    version=OrderModel.version + 1,
                    updated_at=datetime.now(timezone.utc),
                )
            )
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order.order_id} version conflict")
            session.commit()

        confirmed = self.get(order.order_id)
        if confirmed is None:
            raise RuntimeError(f"order {order.order_id} not found after confirmation")
        return ConfirmationResult(order=confirmed, remaining_stock=remaining)

    @staticmethod
    def _to_domain(model: OrderModel) -> Order:
        currency = model.currency
        items = [
            OrderItem(
                item_id=OrderItemId(item.id),
                product_id=ProductId(item.product_id),
                quantity=item.quantity,
                unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
                total_price=Money(amount_cents=item.total_price_cents, currency=item.currency),
                snapshot=_snapshot_from_model(item),
            )
            for item in model.items
        ]
        shipping = None
        if model.shipping is not None:
            shipping = Shipping(
                type=ShippingType(model.shipping.type),
                fee=Money(amount_cents=model.shipping.fee_cents, currency=model.shipping.currency),
                address_description=model.shipping.address_description,
                pickup_location=model.shipping.pickup_location,
                eta=model.shipping.eta,
            )
        payment = None
        if model.payment is not None:
            payment = Payment(
                method=PaymentMethod(model.payment.method),
                status=PaymentStatus(model.payment.status),
                amount=Money(amount_cents=model.payment.amount_cents, currency=model.payment.currency),
            )
        return Order(
            order_id=OrderId(model.id),
            conversation_id=ConversationId(model.conversation_id),
            menu_id=MenuId(model.menu_id) if model.menu_id else None,
            status=OrderStatus(model.status),
            currency=currency,
            items=items,
            totals=OrderTotals(
                subtotal=Money(amount_cents=model.subtotal_cents, currency=currency),
                discount=Money(amount_cents=model.discount_cents, currency=currency),
                delivery_fee=Money(amount_cents=model.delivery_fee_cents, currency=currency),
                total=Money(amount_cents=model.total_cents, currency=currency),
            ),
            created_at=model.created_at,
            contact_first_name=model.contact_first_name,
            shipping=shipping,
            payment=payment,
            version=model.version,
            updated_at=model.updated_at,
        )


def _order_query() -> Select[tuple[OrderModel]]:
    return select(OrderModel).options(
        selectinload(OrderModel.items),
        selectinload(OrderModel.shipping),
        selectinload(OrderModel.payment),
    )


def _apply_header(model: OrderModel, order: Order) -> None:
    model.menu_id = str(order.menu_id) if order.menu_id else None
    model.status = order.status.value
    model.currency = order.currency
    model.subtotal_cents = order.totals.subtotal.amount_cents
    model.discount_cents = order.totals.discount.amount_cents
    model.delivery_fee_cents = order.totals.delivery_fee.amount_cents
    model.total_cents = order.totals.total.amount_cents
    model.contact_first_name = order.contact_first_name


def _sync_children(session: Session, model: OrderModel, order: Order) -> None:
    _sync_items(session, model, order)
    _sync_shipping(session, model, order)
    _sync_payment(session, model, order)


def _sync_items(session: Session, model: OrderModel, order: Order) -> None:
    # rows are matched by product; (order_id, product_id) is unique
    existing = {item_model.product_id: item_model for item_model in model.items}
    wanted = {str(item.product_id): item for item in order.items}

    for product_id, item_model in existing.items():
        if product_id not in wanted:
            session.delete(item_model)

    for product_id, item in wanted.items():
        item_model = existing.get(product_id)
        if item_model is None:
            item_model = OrderItemModel(
                id=str(item.item_id),
                order_id=model.id,
                product_id=product_id,
                created_at=datetime.now(timezone.utc),
            )
            session.add(item_model)
        item_model.quantity = item.quantity
        item_model.unit_price_cents = item.unit_price.amount_cents
        item_model.total_price_cents = item.total_price.amount_cents
        item_model.currency = item.unit_price.currency
        snapshot = item.snapshot
        item_model.snapshot_name = snapshot.name if snapshot else None
        item_model.snapshot_image = snapshot.image if snapshot else None
        item_model.snapshot_type = snapshot.type.value if snapshot and snapshot.type else None


def _sync_shipping(session: Session, model: OrderModel, order: Order) -> None:
    current = model.shipping
    if order.shipping is None:
        if current is not None:
            session.delete(current)
        return
    if current is None:
        current = ShippingModel(id=f"shp_{uuid4().hex[:12]}", order_id=model.id)
        session.add(current)
    current.type = order.shipping.type.value
    current.fee_cents = order.shipping.fee.amount_cents
    current.currency = order.shipping.fee.currency
    current.address_description = order.shipping.address_description
    current.pickup_location = order.shipping.pickup_location
    current.eta = order.shipping.eta


def _sync_payment(session: Session, model: OrderModel, order: Order) -> None:
    current = model.payment
    if order.payment is None:
        if current is not None:
            session.delete(current)
        return
    if current is None:
        current = PaymentModel(id=f"pay_{uuid4().hex[:12]}", order_id=model.id)
        session.add(current)
    current.method = order.payment.method.value
    current.status = order.payment.status.value
    current.amount_cents = order.payment.amount.amount_cents
    current.currency = order.payment.amount.currency


def _snapshot_from_model(item: OrderItemModel) -> ProductSnapshot | None:
    if item.snapshot_name is None and item.snapshot_image is None and item.snapshot_type is None:
        return None
    return ProductSnapshot(
        name=item.snapshot_name,
        image=item.snapshot_image,
        type=ProductType(item.snapshot_type) if item.snapshot_type else None,
    )
