from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from orderbot.infrastructure.db.models.catalog import InventoryModel

CLASSIC = "prd_emp_carne_suave"
SPECIAL = "prd_emp_vacio_malbec"
WATER = "prd_bev_agua_sin_gas"


def _open_cart(client: TestClient, conversation_id: str = "conv_001") -> str:
    response = client.post(f"/v1/conversations/{conversation_id}/cart")
    assert response.status_code == 200
    body = response.json()
    assert body["menuId"] == "men_principal"
    return body["orderId"]


def _put_item(client: TestClient, order_id: str, product_id: str, quantity: int):
    return client.put(
        f"/v1/orders/{order_id}/items",
        json={"productId": product_id, "quantity": quantity},
    )


def test_order_flow_is_persisted(client: TestClient, engine: Engine) -> None:
    order_id = _open_cart(client)

    assert _put_item(client, order_id, CLASSIC, 3).status_code == 200
    response = _put_item(client, order_id, WATER, 1)
    assert response.status_code == 200
    body = response.json()
    assert body["subtotal"]["amountCents"] == 3 * 2500 + 1200
    assert body["discount"]["amountCents"] == 500
    assert body["total"] == {"amountCents": 8200, "currency": "ARS"}
    names = {item["productId"]: item["name"] for item in body["items"]}
    assert names[CLASSIC] == "Carne suave"

    assert client.put(f"/v1/orders/{order_id}/contact", json={"firstName": "Ana"}).status_code == 200
    shipping = client.put(
        f"/v1/orders/{order_id}/shipping",
        json={"type": "DELIVERY", "addressDescription": "Av. Corrientes 1234", "feeCents": 1500},
    )
    assert shipping.status_code == 200
    assert shipping.json()["total"]["amountCents"] == 8200 + 1500

    payment = client.put(f"/v1/orders/{order_id}/payment", json={"method": "CASH"})
    assert payment.status_code == 200
    assert payment.json()["payment"]["amount"]["amountCents"] == 9700

    confirm = client.post(f"/v1/orders/{order_id}/confirm")
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "CONFIRMED"

    summary = client.get(f"/v1/orders/{order_id}")
    assert summary.status_code == 200
    assert summary.json()["status"] == "CONFIRMED"
    assert summary.json()["total"]["amountCents"] == 9700

    with Session(engine) as session:
        assert session.get(InventoryModel, CLASSIC).quantity == 300 - 3
        assert session.get(InventoryModel, WATER).quantity == 200 - 1

    # confirmed carts are frozen and the conversation gets a fresh one
    rejected = _put_item(client, order_id, CLASSIC, 1)
    assert rejected.status_code == 409
    assert rejected.json()["error"]["code"] == "ORDER_NOT_EDITABLE"
    assert _open_cart(client) != order_id


def test_quantity_update_replaces_previous_quantity(client: TestClient) -> None:
    order_id = _open_cart(client)

    _put_item(client, order_id, SPECIAL, 2)
    body = _put_item(client, order_id, SPECIAL, 5).json()

    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 5
    assert body["subtotal"]["amountCents"] == 5 * 3200


def test_remove_and_clear_items(client: TestClient) -> None:
    order_id = _open_cart(client)
    _put_item(client, order_id, CLASSIC, 3)
    body = _put_item(client, order_id, WATER, 1).json()
    water_item_id = next(item["itemId"] for item in body["items"] if item["productId"] == WATER)

    removed = client.delete(f"/v1/orders/{order_id}/items/{water_item_id}")
    assert removed.status_code == 200
    assert removed.json()["discount"]["amountCents"] == 0
    assert removed.json()["total"]["amountCents"] == 7500

    missing = client.delete(f"/v1/orders/{order_id}/items/{water_item_id}")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "ORDER_ITEM_NOT_FOUND"

    cleared = client.delete(f"/v1/orders/{order_id}/items")
    assert cleared.status_code == 200
    assert cleared.json()["items"] == []
    assert cleared.json()["total"]["amountCents"] == 0


def test_delivery_without_address_cannot_be_confirmed(client: TestClient) -> None:
    order_id = _open_cart(client)
    _put_item(client, order_id, CLASSIC, 2)
    client.put(f"/v1/orders/{order_id}/contact", json={"firstName": "Ana"})
    shipping = client.put(f"/v1/orders/{order_id}/shipping", json={"type": "DELIVERY"})
    assert shipping.status_code == 200
    client.put(f"/v1/orders/{order_id}/payment", json={"method": "CARD"})

    response = client.post(f"/v1/orders/{order_id}/confirm")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_ADDRESS"
    assert client.get(f"/v1/orders/{order_id}").json()["status"] == "CART"


def test_stock_is_checked_when_adding(client: TestClient) -> None:
    order_id = _open_cart(client)

    response = _put_item(client, order_id, "prd_des_flan", 101)

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert error["details"] == {"productId": "prd_des_flan", "requested": 101, "available": 100}


def test_stock_shortage_at_confirm_rolls_back(client: TestClient, engine: Engine) -> None:
    order_id = _open_cart(client)
    _put_item(client, order_id, CLASSIC, 3)
    _put_item(client, order_id, WATER, 2)
    client.put(f"/v1/orders/{order_id}/contact", json={"firstName": "Ana"})
    client.put(f"/v1/orders/{order_id}/shipping", json={"type": "PICKUP"})
    client.put(f"/v1/orders/{order_id}/payment", json={"method": "CASH"})

    with Session(engine) as session:
        session.get(InventoryModel, WATER).quantity = 1
        session.commit()

    response = client.post(f"/v1/orders/{order_id}/confirm")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"
    with Session(engine) as session:
        assert session.get(InventoryModel, CLASSIC).quantity == 300
        assert session.get(InventoryModel, WATER).quantity == 1
    assert client.get(f"/v1/orders/{order_id}").json()["status"] == "CART"


def test_validation_errors_use_error_envelope(client: TestClient) -> None:
    order_id = _open_cart(client)

    response = _put_item(client, order_id, CLASSIC, 0)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "requestId" in response.json()


def test_zero_unit_price_is_rejected(client: TestClient) -> None:
    order_id = _open_cart(client)

    response = client.put(
        f"/v1/orders/{order_id}/items",
        json={"productId": CLASSIC, "quantity": 2, "unitPriceCents": 0},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"] == {"unitPriceCents": 0}
    assert client.get(f"/v1/orders/{order_id}").json()["items"] == []


def test_unknown_order_is_not_found(client: TestClient) -> None:
    response = client.get("/v1/orders/ord_missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ORDER_NOT_FOUND"
