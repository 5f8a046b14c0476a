from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from orderbot.infrastructure.db.models.promotion import PromotionModel


def test_lists_seeded_promotions_in_creation_order(client: TestClient) -> None:
    response = client.get("/v1/promotions")

    assert response.status_code == 200
    body = response.json()
    assert body["menuId"] == "men_principal"
    assert [promotion["promotionId"] for promotion in body["promotions"]] == [
        "prm_3_clasicas_1_bebida",
        "prm_6_clasicas_2_bebidas",
        "prm_12_clasicas",
    ]
    first = body["promotions"][0]
    assert first["type"] == "FIXED_BUNDLE_PRICE"
    assert first["fixedPrice"] == {"amountCents": 8200, "currency": "ARS"}
    assert [requirement["qty"] for requirement in first["requirements"]] == [3, 1]
    assert first["requirements"][1]["beverageCategories"] == ["WATER", "SOFT_DRINK"]


def test_inactive_promotions_only_listed_on_request(client: TestClient, engine: Engine) -> None:
    with Session(engine) as session:
        session.get(PromotionModel, "prm_12_clasicas").active = False
        session.commit()

    active = client.get("/v1/promotions").json()
    everything = client.get("/v1/promotions", params={"includeInactive": "true"}).json()

    assert len(active["promotions"]) == 2
    assert len(everything["promotions"]) == 3
    assert everything["promotions"][0]["promotionId"] == "prm_3_clasicas_1_bebida"
    assert everything["promotions"][-1]["active"] is False


def test_unknown_menu_is_not_found(client: TestClient) -> None:
    response = client.get("/v1/promotions", params={"menuId": "men_missing"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "MENU_NOT_FOUND"


def test_evaluate_cart_plus_requested_items(client: TestClient) -> None:
    order_id = client.post("/v1/conversations/conv_eval/cart").json()["orderId"]
    client.put(
        f"/v1/orders/{order_id}/items",
        json={"productId": "prd_emp_humita", "quantity": 10},
    )

    response = client.post(
        "/v1/promotions/evaluate",
        json={
            "conversationId": "conv_eval",
            "requestedItems": [
                {"productType": "EMPANADA", "empanadaCategory": "CLASSIC", "quantity": 2},
                {"productId": "prd_bev_sprite", "quantity": 1},
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["source"] for item in body["analyzedItems"]] == ["cart", "requested", "requested"]
    by_id = {promotion["promotionId"]: promotion for promotion in body["promotions"]}
    assert by_id["prm_3_clasicas_1_bebida"]["appliesNow"] is True
    assert by_id["prm_3_clasicas_1_bebida"]["bundlesPossible"] == 1
    assert by_id["prm_6_clasicas_2_bebidas"]["appliesNow"] is False
    assert by_id["prm_6_clasicas_2_bebidas"]["missingRequirements"] == [
        {"requirement": "2x beverages (WATER, SOFT_DRINK)", "missingQuantity": 1}
    ]
    assert by_id["prm_12_clasicas"]["appliesNow"] is True

    # evaluation never changes the cart
    cart = client.get(f"/v1/orders/{order_id}").json()
    assert [item["quantity"] for item in cart["items"]] == [10]


def test_evaluate_rejects_items_without_reference(client: TestClient) -> None:
    response = client.post(
        "/v1/promotions/evaluate",
        json={"requestedItems": [{"quantity": 1}]},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


def test_twelve_classics_get_the_dozen_price(client: TestClient) -> None:
    order_id = client.post("/v1/conversations/conv_dozen/cart").json()["orderId"]

    response = client.put(
        f"/v1/orders/{order_id}/items",
        json={"productId": "prd_emp_pollo", "quantity": 12},
    )

    body = response.json()
    assert body["subtotal"]["amountCents"] == 12 * 2500
    assert body["discount"]["amountCents"] == 12 * 2500 - 27000
    assert body["total"]["amountCents"] == 27000
