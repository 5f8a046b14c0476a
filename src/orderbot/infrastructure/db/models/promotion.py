from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderbot.infrastructure.db.models.catalog import Base


class PromotionModel(Base):
    __tablename__ = "promotions"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    menu_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("menus.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="1")
    stackable: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="0")
    fixed_price_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    min_qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discount_kind: Mapped[str | None] = mapped_column(String(20), nullable=True)
    discount_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    requirements: Mapped[list["PromotionRequirementModel"]] = relationship(
        back_populates="promotion",
        cascade="all, delete-orphan",
        order_by="PromotionRequirementModel.position",
    )

    __table_args__ = (Index("ix_promotions_menu_active", "menu_id", "active"),)


class PromotionRequirementModel(Base):
    __tablename__ = "promotion_requirements"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    promotion_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("promotions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    product_type: Mapped[str] = mapped_column(String(20), nullable=False)
    empanada_category: Mapped[str | None] = mapped_column(String(20), nullable=True)
    beverage_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    promotion: Mapped[PromotionModel] = relationship(back_populates="requirements")
