import pytest

from jwt_pizza.services.franchises import FranchiseStore
from tests.helpers import auth_header, order_payload


def _create_franchise(client, admin_token, name="pizzaPocket", admins=()):
    response = client.post(
        "/api/franchise",
        json={"name": name, "admins": [{"email": email} for email in admins]},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 200, response.text
    return response.json()


def _create_store(client, token, franchise_id, name="SLC"):
    return client.post(f"/api/franchise/{franchise_id}/store", json={"name": name}, headers=auth_header(token))


def _login(client, email, password):
    return client.put("/api/auth", json={"email": email, "password": password}).json()["token"]


def test_create_franchise_requires_admin(client, register):
    _, token = register()

    response = client.post("/api/franchise", json={"name": "pizzaPocket", "admins": []}, headers=auth_header(token))

    assert response.status_code == 403
    assert response.json() == {"message": "unable to create a franchise"}


def test_create_franchise_without_token_is_unauthorized(client):
    response = client.post("/api/franchise", json={"name": "pizzaPocket", "admins": []})

    assert response.status_code == 401


def test_create_franchise_assigns_franchisee_role(client, register, admin_token):
    user, _ = register(name="franchise owner", email="f@jwt.com", password="franchisee")

    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])

    assert franchise["name"] == "pizzaPocket"
    assert franchise["admins"] == [{"email": "f@jwt.com", "id": user["id"], "name": "franchise owner"}]
    relogged = client.put("/api/auth", json={"email": "f@jwt.com", "password": "franchisee"}).json()
    assert {"role": "franchisee", "objectId": franchise["id"]} in relogged["user"]["roles"]


def test_create_franchise_with_unknown_admin_is_not_found(client, admin_token):
    response = client.post(
        "/api/franchise",
        json={"name": "pizzaPocket", "admins": [{"email": "ghost@jwt.com"}]},
        headers=auth_header(admin_token),
    )

    assert response.status_code == 404
    assert response.json() == {"message": "unknown user for franchise admin ghost@jwt.com provided"}
    assert client.get("/api/franchise").json() == []


def test_duplicate_franchise_name_conflicts(client, admin_token):
    _create_franchise(client, admin_token)

    response = client.post("/api/franchise", json={"name": "pizzaPocket"}, headers=auth_header(admin_token))

    assert response.status_code == 409


def test_public_listing_hides_admins_and_revenue(client, admin_token, register):
    register(email="f@jwt.com")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    store = _create_store(client, admin_token, franchise["id"]).json()

    response = client.get("/api/franchise")

    assert response.status_code == 200
    assert response.json() == [
        {"id": franchise["id"], "name": "pizzaPocket", "stores": [{"id": store["id"], "name": "SLC"}]}
    ]


def test_admin_listing_includes_admins_and_store_revenue(client, admin_token, register, menu_item):
    owner, _ = register(email="f@jwt.com")
    _, diner_token = register(email="d@jwt.com")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    store = _create_store(client, admin_token, franchise["id"]).json()
    client.post(
        "/api/order",
        json=order_payload(menu_item, franchise_id=franchise["id"], store_id=store["id"], count=2),
        headers=auth_header(diner_token),
    )

    [listed] = client.get("/api/franchise", headers=auth_header(admin_token)).json()

    assert listed["admins"] == [{"id": owner["id"], "name": owner["name"], "email": "f@jwt.com"}]
    [listed_store] = listed["stores"]
    assert listed_store["id"] == store["id"]
    assert listed_store["totalRevenue"] == pytest.approx(0.0076)


def test_user_franchises_visible_to_owner_and_admin_only(client, admin_token, register):
    owner, _ = register(email="f@jwt.com", password="franchisee")
    _, stranger_token = register(email="s@jwt.com")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    owner_token = _login(client, "f@jwt.com", "franchisee")

    own = client.get(f"/api/franchise/{owner['id']}", headers=auth_header(owner_token)).json()
    as_admin = client.get(f"/api/franchise/{owner['id']}", headers=auth_header(admin_token)).json()
    as_stranger = client.get(f"/api/franchise/{owner['id']}", headers=auth_header(stranger_token)).json()

    assert [item["id"] for item in own] == [franchise["id"]]
    assert as_admin == own
    assert as_stranger == []


def test_delete_franchise_requires_admin(client, admin_token, register):
    franchise = _create_franchise(client, admin_token)
    _, token = register()

    response = client.delete(f"/api/franchise/{franchise['id']}", headers=auth_header(token))

    assert response.status_code == 403
    assert response.json() == {"message": "unable to delete a franchise"}


def test_delete_franchise_removes_stores_and_roles(client, admin_token, register):
    register(email="f@jwt.com", password="franchisee")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    _create_store(client, admin_token, franchise["id"])

    response = client.delete(f"/api/franchise/{franchise['id']}", headers=auth_header(admin_token))

    assert response.status_code == 200
    assert response.json() == {"message": "franchise deleted"}
    assert client.get("/api/franchise").json() == []
    relogged = client.put("/api/auth", json={"email": "f@jwt.com", "password": "franchisee"}).json()
    assert relogged["user"]["roles"] == [{"role": "diner"}]


@pytest.mark.parametrize("failing_step", ["_delete_stores", "_delete_franchisee_roles"])
def test_delete_franchise_failure_rolls_back_everything(client, admin_token, register, monkeypatch, failing_step):
    register(email="f@jwt.com", password="franchisee")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    store = _create_store(client, admin_token, franchise["id"]).json()

    def _boom(db, franchise_id):
        raise RuntimeError("lost connection mid-transaction")

    monkeypatch.setattr(FranchiseStore, failing_step, staticmethod(_boom))

    response = client.delete(f"/api/franchise/{franchise['id']}", headers=auth_header(admin_token))

    assert response.status_code == 500
    assert response.json() == {"message": "unable to delete franchise"}
    assert client.get("/api/franchise").json() == [
        {"id": franchise["id"], "name": "pizzaPocket", "stores": [{"id": store["id"], "name": "SLC"}]}
    ]
    relogged = client.put("/api/auth", json={"email": "f@jwt.com", "password": "franchisee"}).json()
    assert {"role": "franchisee", "objectId": franchise["id"]} in relogged["user"]["roles"]


def test_franchisee_manages_own_stores(client, admin_token, register):
    register(email="f@jwt.com", password="franchisee")
    franchise = _create_franchise(client, admin_token, admins=["f@jwt.com"])
    owner_token = _login(client, "f@jwt.com", "franchisee")

    created = _create_store(client, owner_token, franchise["id"], name="Provo")
    assert created.status_code == 200
    store = created.json()
    assert store == {"id": store["id"], "franchiseId": franchise["id"], "name": "Provo"}

    deleted = client.delete(f"/api/franchise/{franchise['id']}/store/{store['id']}", headers=auth_header(owner_token))
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "store deleted"}
    assert client.get("/api/franchise").json()[0]["stores"] == []


def test_other_users_cannot_manage_stores(client, admin_token, register):
    franchise = _create_franchise(client, admin_token)
    store = _create_store(client, admin_token, franchise["id"]).json()
    _, token = register()

    created = _create_store(client, token, franchise["id"])
    deleted = client.delete(f"/api/franchise/{franchise['id']}/store/{store['id']}", headers=auth_header(token))

    assert created.status_code == 403
    assert created.json() == {"message": "unable to create a store"}
    assert deleted.status_code == 403
    assert deleted.json() == {"message": "unable to delete a store"}


def test_store_on_unknown_franchise_is_not_found(client, admin_token):
    response = _create_store(client, admin_token, 404)

    assert response.status_code == 404
    assert response.json() == {"message": "unknown franchise"}


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("POST", "/api/franchise"),
        ("POST", "/api/franchise/1/store"),
        ("DELETE", "/api/franchise/1"),
        ("DELETE", "/api/franchise/1/store/1"),
    ],
)
def test_protected_routes_reject_anonymous_before_body_validation(client, method, path):
    response = client.request(method, path, json={})

    assert response.status_code == 401
    assert response.json() == {"message": "unauthorized"}


@pytest.mark.parametrize(
    ("path", "message"),
    [
        ("/api/franchise", "unable to create a franchise"),
        ("/api/franchise/1/store", "unable to create a store"),
    ],
)
def test_role_check_wins_over_malformed_body(client, register, path, message):
    _, token = register()

    response = client.post(path, json={}, headers=auth_header(token))

    assert response.status_code == 403
    assert response.json() == {"message": message}


def test_admin_with_malformed_body_gets_validation_error(client, admin_token):
    response = client.post("/api/franchise", json={}, headers=auth_header(admin_token))

    assert response.status_code == 400
    assert response.json()["message"].startswith("name:")


def test_recreated_store_does_not_inherit_deleted_store_revenue(client, admin_token, register, menu_item):
    _, diner_token = register()
    franchise = _create_franchise(client, admin_token)
    old_store = _create_store(client, admin_token, franchise["id"], name="old").json()
    client.post(
        "/api/order",
        json=order_payload(menu_item, franchise_id=franchise["id"], store_id=old_store["id"], count=2),
        headers=auth_header(diner_token),
    )
    client.delete(f"/api/franchise/{franchise['id']}/store/{old_store['id']}", headers=auth_header(admin_token))

    new_store = _create_store(client, admin_token, franchise["id"], name="brand new").json()

    assert new_store["id"] != old_store["id"]
    [listed] = client.get("/api/franchise", headers=auth_header(admin_token)).json()
    assert listed["stores"] == [{"id": new_store["id"], "name": "brand new", "totalRevenue": 0.0}]


def test_recreated_franchise_gets_fresh_id(client, admin_token):
    first = _create_franchise(client, admin_token, name="first")
    client.delete(f"/api/franchise/{first['id']}", headers=auth_header(admin_token))

    second = _create_franchise(client, admin_token, name="second")

    assert second["id"] != first["id"]
