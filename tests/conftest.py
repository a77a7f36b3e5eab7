from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from jwt_pizza.core.config import Settings
from jwt_pizza.core.database import Database
from jwt_pizza.core.identity import Role, RoleAssignment
from jwt_pizza.main import create_app
from jwt_pizza.services.fulfillment import FulfillmentClient
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, FACTORY_API_KEY, FACTORY_URL


class FakeFactory:
    """httpx.MockTransport handler que grava as chamadas feitas à fábrica."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = {"jwt": "factory.issued.jwt", "reportUrl": "http://factory.test/report/1"}
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        jwt_secret_key="test-secret",
        jwt_algorithm="HS256",
        jwt_expire_minutes=0,
        factory_url=FACTORY_URL,
        factory_api_key=FACTORY_API_KEY,
        factory_timeout_seconds=1.0,
        list_per_page=10,
        cors_origins=[],
        default_admin_password="",
        create_tables_on_startup=False,
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def factory():
    return FakeFactory()


@pytest.fixture
def app(settings, database, factory):
    fulfillment = FulfillmentClient(
        FACTORY_URL,
        FACTORY_API_KEY,
        timeout=settings.factory_timeout_seconds,
        transport=httpx.MockTransport(factory),
    )
    application = create_app(settings=settings, database=database, fulfillment=fulfillment)
    yield application
    fulfillment.close()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def register(client):
    def _register(name: str = "pizza diner", email: str = "d@jwt.com", password: str = "diner"):
        response = client.post("/api/auth", json={"name": name, "email": email, "password": password})
        assert response.status_code == 200, response.text
        body = response.json()
        return body["user"], body["token"]

    return _register


@pytest.fixture
def admin_token(app, client):
    app.state.user_store.add_user(
        name="常用名字",
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        roles=[RoleAssignment(Role.ADMIN)],
    )
    response = client.put("/api/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def menu_item(app):
    return app.state.menu_store.add_menu_item(
        title="Veggie",
        description="A garden of delight",
        image="pizza1.png",
        price=0.0038,
    )
