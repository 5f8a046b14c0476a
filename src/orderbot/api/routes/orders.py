from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from orderbot.api.container import Container, get_container
from orderbot.api.dependencies import get_trace_context
from orderbot.application.dto.requests import (
    GetOrCreateCartRequest,
    SetContactRequest,
    SetPaymentRequest,
    SetShippingRequest,
    UpsertCartItemRequest,
)
from orderbot.application.dto.responses import OrderSummaryResponse
from orderbot.application.use_cases.add_or_update_item import AddOrUpdateItem
from orderbot.application.use_cases.clear_cart import ClearCart
from orderbot.application.use_cases.confirm_order import ConfirmOrder
from orderbot.application.use_cases.context import TraceContext
from orderbot.application.use_cases.get_or_create_cart import GetOrCreateCart
from orderbot.application.use_cases.get_order_summary import GetOrderSummary
from orderbot.application.use_cases.recalculate_order_totals import RecalculateOrderTotals
from orderbot.application.use_cases.remove_item import RemoveItem
from orderbot.application.use_cases.set_contact_first_name import SetContactFirstName
from orderbot.application.use_cases.set_payment_method import SetPaymentMethod
from orderbot.application.use_cases.set_shipping_method import SetShippingMethod
from orderbot.domain.common.ids import ConversationId, OrderId, OrderItemId

router = APIRouter()


@router.post("/v1/conversations/{conversation_id}/cart", response_model=OrderSummaryResponse)
def get_or_create_cart(
    conversation_id: str,
    request_dto: GetOrCreateCartRequest | None = Body(default=None),
    container: Container = Depends(get_container),
) -> OrderSummaryResponse:
    use_case = GetOrCreateCart(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        menu_resolver=container.menu_resolver,
        default_currency=container.settings.default_currency,
    )
    return use_case.execute(ConversationId(conversation_id), request_dto)


@router.get("/v1/orders/{order_id}", response_model=OrderSummaryResponse)
def get_order(
    order_id: str,
    container: Container = Depends(get_container),
) -> OrderSummaryResponse:
    use_case = GetOrderSummary(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
    )
    return use_case.execute(OrderId(order_id))


@router.post("/v1/orders/{order_id}/recalculate", response_model=OrderSummaryResponse)
def recalculate_order(
    order_id: str,
    container: Container = Depends(get_container),
) -> OrderSummaryResponse:
    use_case = RecalculateOrderTotals(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
    )
    return use_case.execute(OrderId(order_id))


@router.put("/v1/orders/{order_id}/items", response_model=OrderSummaryResponse)
def upsert_item(
    order_id: str,
    request_dto: UpsertCartItemRequest,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = AddOrUpdateItem(
        order_repository=container.order_repository,
        inventory_repository=container.inventory_repository,
        catalog_repository=container.catalog_repository,
        menu_repository=container.menu_repository,
        totals_calculator=container.totals_calculator,
        menu_resolver=container.menu_resolver,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), request_dto, trace_ctx)


@router.delete("/v1/orders/{order_id}/items/{order_item_id}", response_model=OrderSummaryResponse)
def remove_item(
    order_id: str,
    order_item_id: str,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = RemoveItem(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), OrderItemId(order_item_id), trace_ctx)


@router.delete("/v1/orders/{order_id}/items", response_model=OrderSummaryResponse)
def clear_cart(
    order_id: str,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = ClearCart(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), trace_ctx)


@router.put("/v1/orders/{order_id}/shipping", response_model=OrderSummaryResponse)
def set_shipping(
    order_id: str,
    request_dto: SetShippingRequest,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = SetShippingMethod(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
        menu_resolver=container.menu_resolver,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), request_dto, trace_ctx)


@router.put("/v1/orders/{order_id}/payment", response_model=OrderSummaryResponse)
def set_payment(
    order_id: str,
    request_dto: SetPaymentRequest,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = SetPaymentMethod(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), request_dto, trace_ctx)


@router.put("/v1/orders/{order_id}/contact", response_model=OrderSummaryResponse)
def set_contact(
    order_id: str,
    request_dto: SetContactRequest,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = SetContactFirstName(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        totals_calculator=container.totals_calculator,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), request_dto, trace_ctx)


@router.post("/v1/orders/{order_id}/confirm", response_model=OrderSummaryResponse)
def confirm_order(
    order_id: str,
    container: Container = Depends(get_container),
    trace_ctx: TraceContext = Depends(get_trace_context),
) -> OrderSummaryResponse:
    use_case = ConfirmOrder(
        order_repository=container.order_repository,
        catalog_repository=container.catalog_repository,
        publisher=container.publisher,
    )
    return use_case.execute(OrderId(order_id), trace_ctx)
