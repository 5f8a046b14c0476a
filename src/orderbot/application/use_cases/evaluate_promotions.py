from __future__ import annotations

from collections.abc import Sequence

from orderbot.application.dto.requests import EvaluatePromotionsRequest, RequestedItem
from orderbot.application.dto.responses import PromotionEvaluationListResponse
from orderbot.application.mappers.promotion_mapper import (
    to_analyzed_item_response,
    to_evaluation_response,
)
from orderbot.application.metrics.ordering import record_promotion_evaluation
from orderbot.application.ports.repositories import (
    CatalogRepository,
    OrderRepository,
    PromotionRepository,
)
from orderbot.application.services.menu_resolution import MenuResolver
from orderbot.domain.catalog.entities import ProductType
from orderbot.domain.common.ids import ConversationId, MenuId, ProductId
from orderbot.domain.order.entities import Order
from orderbot.domain.promotion.evaluation import evaluate_promotions, summarize_evaluations
from orderbot.domain.promotion.matching import (
    ItemSource,
    PromotionItem,
    promotion_item_from_product,
)


class EvaluatePromotions:
    """Answer "would a promotion apply if these items were added" without writing anything.

    The analyzed set is the conversation's current cart plus the requested items.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        promotion_repository: PromotionRepository,
        catalog_repository: CatalogRepository,
        menu_resolver: MenuResolver,
    ) -> None:
        self._order_repository = order_repository
        self._promotion_repository = promotion_repository
        self._catalog_repository = catalog_repository
        self._menu_resolver = menu_resolver

    def execute(self, request_dto: EvaluatePromotionsRequest) -> PromotionEvaluationListResponse:
        explicit_menu = MenuId(request_dto.menu_id) if request_dto.menu_id else None
        cart = None
        if request_dto.conversation_id:
            cart = self._order_repository.find_active_by_conversation(
                ConversationId(request_dto.conversation_id)
            )

        menu_id = explicit_menu or (cart.menu_id if cart is not None else None)
        if menu_id is None:
            menu_id = self._menu_resolver.resolve(None)

        items = self._cart_items(cart) if cart is not None else []
        items.extend(self._requested_items(request_dto.requested_items))

        promotions = self._promotion_repository.list_promotions(menu_id) if menu_id else []
        evaluations = evaluate_promotions(promotions, items)
        for evaluation in evaluations:
            record_promotion_evaluation(evaluation.applies_now)

        return PromotionEvaluationListResponse(
            menuId=str(menu_id) if menu_id else None,
            analyzedItems=[to_analyzed_item_response(item) for item in items],
            promotions=[to_evaluation_response(evaluation) for evaluation in evaluations],
            summary=summarize_evaluations(evaluations),
        )

    def _cart_items(self, cart: Order) -> list[PromotionItem]:
        products = self._catalog_repository.get_products(item.product_id for item in cart.items)
        # untyped lines still count toward cart-wide quantity minimums
        return [
            promotion_item_from_product(
                products.get(order_item.product_id),
                order_item.quantity,
                product_id=order_item.product_id,
                unit_price_cents=order_item.unit_price.amount_cents,
                label=order_item.snapshot.name if order_item.snapshot else None,
                source=ItemSource.CART,
            )
            for order_item in cart.items
        ]

    def _requested_items(self, requested: Sequence[RequestedItem]) -> list[PromotionItem]:
        product_ids = [ProductId(item.product_id) for item in requested if item.product_id]
        products = self._catalog_repository.get_products(product_ids) if product_ids else {}

        items: list[PromotionItem] = []
        for request_item in requested:
            product_id = ProductId(request_item.product_id) if request_item.product_id else None
            product = products.get(product_id) if product_id else None
            if product is not None:
                items.append(
                    promotion_item_from_product(
                        product,
                        request_item.quantity,
                        label=request_item.label,
                        source=ItemSource.REQUESTED,
                    )
                )
                continue
            if request_item.product_type is None:
                continue
            items.append(
                PromotionItem(
                    quantity=request_item.quantity,
                    product_type=request_item.product_type,
                    empanada_category=(
                        request_item.empanada_category
                        if request_item.product_type == ProductType.EMPANADA
                        else None
                    ),
                    beverage_category=(
                        request_item.beverage_category
                        if request_item.product_type == ProductType.BEVERAGE
                        else None
                    ),
                    product_id=product_id,
                    label=request_item.label,
                    source=ItemSource.REQUESTED,
                )
            )
        return items
