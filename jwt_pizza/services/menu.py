from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from jwt_pizza.core.database import Database
from jwt_pizza.models.menu_item import MenuItem

logger = logging.getLogger(__name__)


def menu_item_to_dict(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "description": item.description,
        "image": item.image,
        "price": item.price,
    }


class MenuStore:
    def __init__(self, database: Database):
        self._database = database

    def get_menu(self) -> list[dict[str, Any]]:
        with self._database.session() as db:
            items = db.query(MenuItem).order_by(MenuItem.id).all()
            logger.debug("SELECT * FROM menu", extra={"log_type": "db"})
            return [menu_item_to_dict(item) for item in items]

    def add_menu_item(self, *, title: str, description: str, image: str, price: float) -> dict[str, Any]:
        with self._database.session() as db:
            item = MenuItem(title=title, description=description, image=image, price=price)
            db.add(item)
            db.flush()
            logger.debug("INSERT INTO menu (title, description, image, price)", extra={"log_type": "db"})
            return menu_item_to_dict(item)

    def resolve_menu_ids(self, menu_ids: Iterable[int]) -> set[int]:
        with self._database.session() as db:
            return resolve_menu_ids(db, menu_ids)


def resolve_menu_ids(db: Session, menu_ids: Iterable[int]) -> set[int]:
    """Subset of menu_ids present in the menu table."""
    wanted = {int(menu_id) for menu_id in menu_ids}
    if not wanted:
        return set()
    return {row.id for row in db.query(MenuItem.id).filter(MenuItem.id.in_(wanted)).all()}
