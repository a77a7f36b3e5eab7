from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

from jwt_pizza.core.database import Database
from jwt_pizza.core.errors import NotFoundError
from jwt_pizza.models.order import DinerOrder
from jwt_pizza.models.order_item import OrderItem
from jwt_pizza.services.menu import resolve_menu_ids

logger = logging.getLogger(__name__)


def _order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "menuId": item.menu_id,
        "description": item.description,
        "price": item.price,
    }


def _order_to_dict(order: DinerOrder) -> Dict[str, Any]:
    return {
        "id": order.id,
        "franchiseId": order.franchise_id,
        "storeId": order.store_id,
        "date": order.date.isoformat() if order.date else None,
        "items": [_order_item_to_dict(item) for item in order.items],
    }


def get_offset(page: int, per_page: int) -> int:
    return (max(page, 1) - 1) * per_page


class OrderStore:
    def __init__(self, database: Database, list_per_page: int = 10):
        self._database = database
        self._list_per_page = list_per_page

    def add_diner_order(
        self,
        *,
        diner_id: int,
        franchise_id: int,
        store_id: int,
        items: Sequence[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Persist header + item snapshots. Any unknown menu id aborts before a row is written."""
        with self._database.session() as db:
            menu_ids = {int(item["menuId"]) for item in items}
            known = resolve_menu_ids(db, menu_ids)
            if menu_ids - known:
                logger.info("order rejected, unknown menu ids=%s", sorted(menu_ids - known))
                raise NotFoundError("No ID found")

            order = DinerOrder(
                diner_id=diner_id,
                franchise_id=franchise_id,
                store_id=store_id,
                date=datetime.now(timezone.utc),
            )
            for item in items:
                order.items.append(
                    OrderItem(
                        menu_id=int(item["menuId"]),
                        description=item["description"],
                        price=item["price"],
                    )
                )
            db.add(order)
            db.flush()
            logger.debug("INSERT INTO dinerOrder / orderItem", extra={"log_type": "db"})

            return {
                "id": order.id,
                "franchiseId": franchise_id,
                "storeId": store_id,
                "items": [
                    {"menuId": item.menu_id, "description": item.description, "price": item.price}
                    for item in order.items
                ],
            }

    def get_orders(self, diner_id: int, page: int = 1) -> Dict[str, Any]:
        page = max(int(page or 1), 1)
        with self._database.session() as db:
            orders: List[DinerOrder] = (
                db.query(DinerOrder)
                .filter(DinerOrder.diner_id == diner_id)
                .order_by(DinerOrder.id)
                .offset(get_offset(page, self._list_per_page))
                .limit(self._list_per_page)
                .all()
            )
            logger.debug("SELECT ... FROM dinerOrder WHERE dinerId=? LIMIT offset,listPerPage", extra={"log_type": "db"})
            return {"dinerId": diner_id, "orders": [_order_to_dict(order) for order in orders], "page": page}
