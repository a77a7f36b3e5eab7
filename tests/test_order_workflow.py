import httpx
import pytest

from jwt_pizza.core.errors import InfrastructureError
from jwt_pizza.services.orders import OrderStore
from tests.helpers import FACTORY_API_KEY, auth_header, order_payload


def test_menu_is_public(client, menu_item):
    response = client.get("/api/order/menu")

    assert response.status_code == 200
    [item] = response.json()
    assert item["title"] == "Veggie"
    assert item["price"] == pytest.approx(0.0038)


def test_add_menu_item_requires_admin(client, register):
    _, token = register()

    response = client.put(
        "/api/order/menu",
        json={"title": "Student", "description": "No topping", "image": "pizza9.png", "price": 0.0001},
        headers=auth_header(token),
    )

    assert response.status_code == 403
    assert response.json() == {"message": "unable to add menu item"}


def test_admin_adds_menu_item_and_gets_full_menu(client, admin_token, menu_item):
    response = client.put(
        "/api/order/menu",
        json={"title": "Student", "description": "No topping", "image": "pizza9.png", "price": 0.0001},
        headers=auth_header(admin_token),
    )

    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["Veggie", "Student"]


def test_place_order_fulfilled(client, register, menu_item, factory):
    user, token = register(name="pizza diner", email="d@jwt.com")

    response = client.post("/api/order", json=order_payload(menu_item, count=2), headers=auth_header(token))

    assert response.status_code == 200
    body = response.json()
    assert body["jwt"] == "factory.issued.jwt"
    assert body["reportUrl"] == "http://factory.test/report/1"
    assert body["order"]["franchiseId"] == 1
    assert body["order"]["storeId"] == 1
    assert len(body["order"]["items"]) == 2

    [request] = factory.requests
    assert request.method == "POST"
    assert str(request.url) == "http://factory.test/api/order"
    assert request.headers["Authorization"] == f"Bearer {FACTORY_API_KEY}"
    sent = factory.last_payload()
    assert sent["diner"] == {"id": user["id"], "name": "pizza diner", "email": "d@jwt.com"}
    assert sent["order"]["id"] == body["order"]["id"]


def test_place_order_requires_authentication(client, menu_item, factory):
    response = client.post("/api/order", json=order_payload(menu_item))

    assert response.status_code == 401
    assert factory.requests == []


def test_unknown_menu_id_rejected_before_any_write(client, register, menu_item, factory):
    _, token = register()
    payload = order_payload(menu_item)
    payload["items"].append({"menuId": 999, "description": "Ghost", "price": 1.0})

    response = client.post("/api/order", json=payload, headers=auth_header(token))

    assert response.status_code == 404
    assert response.json() == {"message": "No ID found"}
    assert factory.requests == []
    assert client.get("/api/order", headers=auth_header(token)).json()["orders"] == []


def test_empty_order_is_rejected(client, register, factory):
    _, token = register()

    response = client.post(
        "/api/order",
        json={"franchiseId": 1, "storeId": 1, "items": []},
        headers=auth_header(token),
    )

    assert response.status_code == 400
    assert factory.requests == []


def test_factory_failure_keeps_persisted_order(client, register, menu_item, factory):
    _, token = register()
    factory.status_code = 500
    factory.body = {"message": "oven on fire", "reportUrl": "http://factory.test/report/2"}

    response = client.post("/api/order", json=order_payload(menu_item), headers=auth_header(token))

    assert response.status_code == 500
    assert response.json() == {
        "message": "Failed to fulfill order at factory",
        "reportUrl": "http://factory.test/report/2",
    }
    history = client.get("/api/order", headers=auth_header(token)).json()
    assert len(history["orders"]) == 1


def test_factory_network_error_is_a_failed_fulfillment(app, client, register, menu_item, factory):
    _, token = register()
    factory.error = httpx.ConnectError("connection refused")

    response = client.post("/api/order", json=order_payload(menu_item), headers=auth_header(token))

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fulfill order at factory", "reportUrl": None}
    assert len(client.get("/api/order", headers=auth_header(token)).json()["orders"]) == 1
    assert app.state.pizza_metrics.snapshot()["fulfillment_failures"] == 1


def test_order_history_is_paginated(database, register, menu_item):
    user, _ = register()
    store = OrderStore(database, list_per_page=2)
    for _ in range(3):
        store.add_diner_order(
            diner_id=user["id"],
            franchise_id=1,
            store_id=1,
            items=[{"menuId": menu_item["id"], "description": "Veggie", "price": 0.0038}],
        )

    first = store.get_orders(user["id"])
    second = store.get_orders(user["id"], page=2)

    assert first["dinerId"] == user["id"]
    assert first["page"] == 1
    assert len(first["orders"]) == 2
    assert second["page"] == 2
    assert len(second["orders"]) == 1
    assert second["orders"][0]["items"][0]["menuId"] == menu_item["id"]


def test_order_history_only_shows_own_orders(client, register, menu_item):
    _, first_token = register(email="one@jwt.com")
    _, second_token = register(email="two@jwt.com")
    client.post("/api/order", json=order_payload(menu_item), headers=auth_header(first_token))

    assert client.get("/api/order", headers=auth_header(second_token)).json()["orders"] == []


def test_order_metrics_are_recorded(app, client, register, menu_item):
    _, token = register()

    client.post("/api/order", json=order_payload(menu_item, count=3), headers=auth_header(token))

    snapshot = app.state.pizza_metrics.snapshot()
    assert snapshot["total_orders"] == 1
    assert snapshot["pizzas_sold"] == 3
    assert snapshot["revenue"] == pytest.approx(0.0114)
    assert snapshot["fulfillment_failures"] == 0


def test_resolve_menu_ids_returns_known_subset(app, menu_item):
    assert app.state.menu_store.resolve_menu_ids([menu_item["id"], 999]) == {menu_item["id"]}
    assert app.state.menu_store.resolve_menu_ids([]) == set()


def test_menu_update_checks_role_before_body(client, register):
    _, token = register()

    forbidden = client.put("/api/order/menu", json={"price": 0.1}, headers=auth_header(token))
    anonymous = client.put("/api/order/menu", json={})

    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "unable to add menu item"}
    assert anonymous.status_code == 401


def test_infrastructure_error_before_fulfillment_is_500(app, client, register, menu_item, factory, monkeypatch):
    _, token = register()

    def _broken(**kwargs):
        raise InfrastructureError("database error")

    monkeypatch.setattr(app.state.order_store, "add_diner_order", _broken)

    response = client.post("/api/order", json=order_payload(menu_item), headers=auth_header(token))

    assert response.status_code == 500
    assert response.json() == {"message": "database error"}
    assert factory.requests == []
    assert app.state.pizza_metrics.snapshot()["pizzas_sold"] == 0
