from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class OrderItemResponse(BaseModel):
    itemId: str
    productId: str
    name: str
    image: str | None = None
    productType: str | None = None
    quantity: int
    unitPrice: MoneyResponse
    totalPrice: MoneyResponse


class ShippingResponse(BaseModel):
    type: str
    fee: MoneyResponse
    addressDescription: str | None = None
    pickupLocation: str | None = None
    eta: datetime | None = None


class PaymentResponse(BaseModel):
    method: str
    status: str
    amount: MoneyResponse


class OrderSummaryResponse(BaseModel):
    orderId: str
    conversationId: str
    menuId: str | None = None
    status: str
    currency: str
    contactFirstName: str | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    subtotal: MoneyResponse
    discount: MoneyResponse
    deliveryFee: MoneyResponse
    total: MoneyResponse
    shipping: ShippingResponse | None = None
    payment: PaymentResponse | None = None
    version: int
    createdAt: datetime


class PromotionRequirementResponse(BaseModel):
    qty: int
    productType: str
    empanadaCategory: str | None = None
    beverageCategories: list[str] = Field(default_factory=list)
    description: str


class PromotionResponse(BaseModel):
    promotionId: str
    menuId: str
    name: str
    type: str
    active: bool
    stackable: bool
    fixedPrice: MoneyResponse | None = None
    minQty: int | None = None
    discountKind: str | None = None
    discountValue: str | None = None
    currency: str | None = None
    requirements: list[PromotionRequirementResponse] = Field(default_factory=list)


class PromotionListResponse(BaseModel):
    menuId: str | None = None
    promotions: list[PromotionResponse] = Field(default_factory=list)
    message: str


class AnalyzedItemResponse(BaseModel):
    productId: str | None = None
    productType: str | None = None
    empanadaCategory: str | None = None
    beverageCategory: str | None = None
    quantity: int
    label: str | None = None
    source: str


class MissingRequirementResponse(BaseModel):
    requirement: str
    missingQuantity: int


class PromotionEvaluationResponse(BaseModel):
    promotionId: str
    name: str
    type: str
    appliesNow: bool
    notes: str
    bundlesPossible: int | None = None
    missingRequirements: list[MissingRequirementResponse] = Field(default_factory=list)
    missingQuantity: int | None = None
    requirements: str | None = None


class PromotionEvaluationListResponse(BaseModel):
    menuId: str | None = None
    analyzedItems: list[AnalyzedItemResponse] = Field(default_factory=list)
    promotions: list[PromotionEvaluationResponse] = Field(default_factory=list)
    summary: str
