from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import Engine, inspect
from sqlalchemy.orm import Session

from orderbot.config import Settings
from orderbot.infrastructure.db.models.catalog import (
    InventoryModel,
    MenuItemModel,
    MenuModel,
    ProductModel,
)
from orderbot.infrastructure.db.models.promotion import PromotionModel, PromotionRequirementModel
from orderbot.infrastructure.db.session import build_engine

MENU_ID = "men_principal"
CURRENCY = "ARS"

PRICE_CLASSIC = 2500
PRICE_SPECIAL = 3200
PRICE_WATER = 1200
PRICE_SOFT = 1800
PRICE_BEER = 2500
PRICE_FLAN = 2500
PRICE_PANQUEQUE = 3000

EMPANADA_CLASSIC_STOCK = 300
EMPANADA_SPECIAL_STOCK = 200
BEVERAGE_STOCK = 200
DESSERT_STOCK = 100

EMPANADA_SAFETY_STOCK = 50
BEVERAGE_SAFETY_STOCK = 30
DESSERT_SAFETY_STOCK = 20

REQUIRED_TABLES = {
    "menus",
    "products",
    "menu_items",
    "inventory",
    "promotions",
    "promotion_requirements",
}


def _image(filename: str) -> str:
    return f"/images/menu/{filename}"


# (id, name, category, vegetarian, image)
EMPANADAS = [
    ("prd_emp_carne_suave", "Carne suave", "CLASSIC", False, "empanada-carne-suave.png"),
    ("prd_emp_jamon_queso", "Jamón y queso", "CLASSIC", False, "empanada-jamon-queso.png"),
    ("prd_emp_pollo", "Pollo", "CLASSIC", False, "empanada-pollo.png"),
    ("prd_emp_capresse", "Capresse", "CLASSIC", True, "empanada-capresse.png"),
    ("prd_emp_humita", "Humita", "CLASSIC", True, "empanada-humita.png"),
    ("prd_emp_roquefort", "Roquefort", "CLASSIC", True, "empanada-roquefort.png"),
    ("prd_emp_vacio_malbec", "Vacío al malbec", "SPECIAL", False, "empanada-vacio-malbec.png"),
    ("prd_emp_bondiola_pizza", "Bondiola a la pizza", "SPECIAL", False, "empanada-bondiola.png"),
    ("prd_emp_cuatro_quesos", "Cuatro quesos", "SPECIAL", True, "empanada-cuatro-quesos.png"),
    ("prd_emp_hongos_bosque", "Hongos del bosque", "SPECIAL", True, "empanada-hongos.png"),
]

# (id, name, category, alcoholic, price, image)
BEVERAGES = [
    ("prd_bev_agua_sin_gas", "Agua sin gas", "WATER", False, PRICE_WATER, "bebida-agua-sin-gas.png"),
    ("prd_bev_agua_con_gas", "Agua con gas", "WATER", False, PRICE_WATER, "bebida-agua-con-gas.png"),
    ("prd_bev_coca_regular", "Coca Cola Regular", "SOFT_DRINK", False, PRICE_SOFT, "bebida-coca-cola-regular.png"),
    ("prd_bev_coca_zero", "Coca Cola Zero", "SOFT_DRINK", False, PRICE_SOFT, "bebida-coca-cola-zero.png"),
    ("prd_bev_sprite", "Sprite", "SOFT_DRINK", False, PRICE_SOFT, "bebida-sprite.png"),
    ("prd_bev_fanta", "Fanta", "SOFT_DRINK", False, PRICE_SOFT, "bebida-fanta.png"),
    ("prd_bev_quilmes", "Quilmes", "BEER", True, PRICE_BEER, "bebida-quilmes.png"),
    ("prd_bev_heineken", "Heineken", "BEER", True, PRICE_BEER, "bebida-heineken.png"),
]

# (id, name, price, image)
DESSERTS = [
    ("prd_des_flan", "Flan con dulce de leche", PRICE_FLAN, "postre-flan.png"),
    ("prd_des_panqueque", "Panqueque de dulce de leche", PRICE_PANQUEQUE, "postre-panqueques.png"),
]

# (id, name, fixed price, stackable, [(qty, product type, empanada category, beverage categories)])
BUNDLE_PROMOTIONS = [
    (
        "prm_3_clasicas_1_bebida",
        "Promo: 3 Empanadas Clásicas + 1 Bebida (Agua/Gaseosa)",
        8200,
        False,
        [(3, "EMPANADA", "CLASSIC", []), (1, "BEVERAGE", None, ["WATER", "SOFT_DRINK"])],
    ),
    (
        "prm_6_clasicas_2_bebidas",
        "Promo: 6 Empanadas Clásicas + 2 Bebidas (Agua/Gaseosa)",
        16500,
        False,
        [(6, "EMPANADA", "CLASSIC", []), (2, "BEVERAGE", None, ["WATER", "SOFT_DRINK"])],
    ),
    (
        "prm_12_clasicas",
        "Promo: 12 Empanadas Clásicas",
        27000,
        True,
        [(12, "EMPANADA", "CLASSIC", [])],
    ),
]


def _merge_product(
    session: Session,
    product: ProductModel,
    price_cents: int,
    stock: int,
    safety_stock: int,
) -> None:
    session.merge(product)
    session.merge(
        MenuItemModel(
            id=f"mit_{product.id.removeprefix('prd_')}",
            menu_id=MENU_ID,
            product_id=product.id,
            price_cents=price_cents,
            currency=CURRENCY,
            is_available=True,
        )
    )
    session.merge(
        InventoryModel(product_id=product.id, quantity=stock, safety_stock=safety_stock)
    )


def seed(engine: Engine) -> None:
    """Upsert the default menu, its products, stock and bundle promotions."""
    now = datetime.now(timezone.utc)
    with Session(engine) as session:
        session.merge(MenuModel(id=MENU_ID, name="Menú Principal", active=True, created_at=now))
        session.flush()

        for product_id, name, category, vegetarian, image in EMPANADAS:
            _merge_product(
                session,
                ProductModel(
                    id=product_id,
                    name=name,
                    type="EMPANADA",
                    image=_image(image),
                    empanada_category=category,
                    is_vegetarian=vegetarian,
                    is_vegan=False,
                    is_alcoholic=False,
                ),
                price_cents=PRICE_CLASSIC if category == "CLASSIC" else PRICE_SPECIAL,
                stock=EMPANADA_CLASSIC_STOCK if category == "CLASSIC" else EMPANADA_SPECIAL_STOCK,
                safety_stock=EMPANADA_SAFETY_STOCK,
            )

        for product_id, name, category, alcoholic, price_cents, image in BEVERAGES:
            _merge_product(
                session,
                ProductModel(
                    id=product_id,
                    name=name,
                    type="BEVERAGE",
                    image=_image(image),
                    beverage_category=category,
                    is_alcoholic=alcoholic,
                    is_vegetarian=False,
                    is_vegan=False,
                ),
                price_cents=price_cents,
                stock=BEVERAGE_STOCK,
                safety_stock=BEVERAGE_SAFETY_STOCK,
            )

        for product_id, name, price_cents, image in DESSERTS:
            _merge_product(
                session,
                ProductModel(
                    id=product_id,
                    name=name,
                    type="DESSERT",
                    image=_image(image),
                    is_vegetarian=False,
                    is_vegan=False,
                    is_alcoholic=False,
                ),
                price_cents=price_cents,
                stock=DESSERT_STOCK,
                safety_stock=DESSERT_SAFETY_STOCK,
            )

        # created_at is staggered so listing order matches declaration order
        for index, (promotion_id, name, fixed_price, stackable, requirements) in enumerate(
            BUNDLE_PROMOTIONS
        ):
            session.merge(
                PromotionModel(
                    id=promotion_id,
                    menu_id=MENU_ID,
                    name=name,
                    type="FIXED_BUNDLE_PRICE",
                    active=True,
                    stackable=stackable,
                    fixed_price_cents=fixed_price,
                    currency=CURRENCY,
                    min_qty=None,
                    discount_kind=None,
                    discount_value=None,
                    created_at=now + timedelta(seconds=index),
                )
            )
            for position, (qty, product_type, empanada_category, beverages) in enumerate(
                requirements
            ):
                session.merge(
                    PromotionRequirementModel(
                        id=f"{promotion_id}_req{position}",
                        promotion_id=promotion_id,
                        position=position,
                        qty=qty,
                        product_type=product_type,
                        empanada_category=empanada_category,
                        beverage_categories=list(beverages),
                    )
                )

        session.commit()


def main() -> None:
    settings = Settings.from_env()
    engine = build_engine(settings.require_database_url(), connect_timeout=2)
    inspector = inspect(engine)
    if not REQUIRED_TABLES.issubset(set(inspector.get_table_names())):
        print("no schema yet")
        return

    seed(engine)
    print("seed complete")


if __name__ == "__main__":
    main()
