FACTORY_URL = "http://factory.test"
FACTORY_API_KEY = "factory-key"
ADMIN_EMAIL = "a@jwt.com"
ADMIN_PASSWORD = "admin"


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def order_payload(menu_item: dict, *, franchise_id: int = 1, store_id: int = 1, count: int = 1) -> dict:
    item = {"menuId": menu_item["id"], "description": menu_item["title"], "price": menu_item["price"]}
    return {"franchiseId": franchise_id, "storeId": store_id, "items": [dict(item) for _ in range(count)]}
