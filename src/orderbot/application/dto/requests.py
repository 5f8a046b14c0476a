from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from orderbot.domain.catalog.entities import BeverageCategory, EmpanadaCategory, ProductType
from orderbot.domain.order.entities import PaymentMethod, ShippingType


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class GetOrCreateCartRequest(CamelBaseModel):
    menu_id: str | None = None
    currency: str | None = None


class ProductSnapshotPayload(CamelBaseModel):
    name: str | None = None
    image: str | None = None
    type: ProductType | None = None


class UpsertCartItemRequest(CamelBaseModel):
    product_id: str
    quantity: int
    unit_price_cents: int | None = None
    product_snapshot: ProductSnapshotPayload | None = None


class SetShippingRequest(CamelBaseModel):
    type: ShippingType
    fee_cents: int | None = None
    address_description: str | None = None
    pickup_location: str | None = None
    eta: datetime | None = None


class SetPaymentRequest(CamelBaseModel):
    method: PaymentMethod


class SetContactRequest(CamelBaseModel):
    first_name: str


class RequestedItem(CamelBaseModel):
    product_id: str | None = None
    product_type: ProductType | None = None
    empanada_category: EmpanadaCategory | None = None
    beverage_category: BeverageCategory | None = None
    quantity: int = Field(ge=1)
    label: str | None = None

    @model_validator(mode="after")
    def _require_product_reference(self) -> RequestedItem:
        if not self.product_id and self.product_type is None:
            raise ValueError("either productId or productType is required")
        return self


class EvaluatePromotionsRequest(CamelBaseModel):
    conversation_id: str | None = None
    menu_id: str | None = None
    requested_items: list[RequestedItem] = Field(default_factory=list)
