from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jwt_pizza.core.database import Database
from jwt_pizza.core.errors import ConflictError, InfrastructureError, NotFoundError
from jwt_pizza.core.identity import Role
from jwt_pizza.models.franchise import Franchise
from jwt_pizza.models.order import DinerOrder
from jwt_pizza.models.order_item import OrderItem
from jwt_pizza.models.store import Store
from jwt_pizza.models.user import User
from jwt_pizza.models.user_role import UserRole

logger = logging.getLogger(__name__)


class FranchiseStore:
    def __init__(self, database: Database):
        self._database = database

    # =========================
    # Leitura
    # =========================
    def list_franchises(self, *, include_details: bool) -> List[Dict[str, Any]]:
        with self._database.session() as db:
            franchises = db.query(Franchise).order_by(Franchise.id).all()
            result = []
            for franchise in franchises:
                if include_details:
                    result.append(self._franchise_details(db, franchise))
                else:
                    result.append(
                        {
                            "id": franchise.id,
                            "name": franchise.name,
                            "stores": [{"id": store.id, "name": store.name} for store in franchise.stores],
                        }
                    )
            return result

    def get_user_franchises(self, user_id: int) -> List[Dict[str, Any]]:
        with self._database.session() as db:
            franchise_ids = [
                row.object_id
                for row in db.query(UserRole.object_id)
                .filter(UserRole.user_id == user_id, UserRole.role == Role.FRANCHISEE.value)
                .all()
            ]
            if not franchise_ids:
                return []
            franchises = db.query(Franchise).filter(Franchise.id.in_(franchise_ids)).order_by(Franchise.id).all()
            return [self._franchise_details(db, franchise) for franchise in franchises]

    # =========================
    # Escrita
    # =========================
    def create_franchise(self, *, name: str, admin_emails: Iterable[str]) -> Dict[str, Any]:
        with self._database.session() as db:
            admins = []
            for email in admin_emails:
                user = db.query(User).filter(User.email == email).first()
                if user is None:
                    raise NotFoundError(f"unknown user for franchise admin {email} provided")
                admins.append(user)

            franchise = Franchise(name=name)
            db.add(franchise)
            try:
                db.flush()
            except IntegrityError as exc:
                raise ConflictError("franchise already exists") from exc

            for admin in admins:
                db.add(UserRole(user_id=admin.id, role=Role.FRANCHISEE.value, object_id=franchise.id))
            logger.debug("INSERT INTO franchise / userRole", extra={"log_type": "db"})

            return {
                "id": franchise.id,
                "name": franchise.name,
                "admins": [{"email": admin.email, "id": admin.id, "name": admin.name} for admin in admins],
            }

    def delete_franchise(self, franchise_id: int) -> None:
        """Stores, franchisee roles and the franchise go together or not at all."""
        try:
            with self._database.session() as db:
                self._delete_stores(db, franchise_id)
                self._delete_franchisee_roles(db, franchise_id)
                db.query(Franchise).filter(Franchise.id == franchise_id).delete(synchronize_session=False)
                logger.debug("DELETE FROM franchise WHERE id=?", extra={"log_type": "db"})
        except Exception as exc:
            logger.error("franchise delete rolled back franchise_id=%s", franchise_id, exc_info=True)
            raise InfrastructureError("unable to delete franchise") from exc

    def create_store(self, franchise_id: int, *, name: str) -> Dict[str, Any]:
        with self._database.session() as db:
            if db.get(Franchise, franchise_id) is None:
                raise NotFoundError("unknown franchise")
            store = Store(franchise_id=franchise_id, name=name)
            db.add(store)
            db.flush()
            logger.debug("INSERT INTO store (franchiseId, name) VALUES (?, ?)", extra={"log_type": "db"})
            return {"id": store.id, "franchiseId": franchise_id, "name": store.name}

    def delete_store(self, franchise_id: int, store_id: int) -> None:
        with self._database.session() as db:
            if db.get(Franchise, franchise_id) is None:
                raise NotFoundError("unknown franchise")
            db.query(Store).filter(Store.franchise_id == franchise_id, Store.id == store_id).delete(
                synchronize_session=False
            )
            logger.debug("DELETE FROM store WHERE franchiseId=? AND id=?", extra={"log_type": "db"})

    # =========================
    # Helpers
    # =========================
    @staticmethod
    def _delete_stores(db: Session, franchise_id: int) -> None:
        db.query(Store).filter(Store.franchise_id == franchise_id).delete(synchronize_session=False)
        logger.debug("DELETE FROM store WHERE franchiseId=?", extra={"log_type": "db"})

    @staticmethod
    def _delete_franchisee_roles(db: Session, franchise_id: int) -> None:
        db.query(UserRole).filter(
            UserRole.object_id == franchise_id,
            UserRole.role == Role.FRANCHISEE.value,
        ).delete(synchronize_session=False)
        logger.debug("DELETE FROM userRole WHERE objectId=?", extra={"log_type": "db"})

    @staticmethod
    def _franchise_details(db: Session, franchise: Franchise) -> Dict[str, Any]:
        admins = (
            db.query(User.id, User.name, User.email)
            .join(UserRole, UserRole.user_id == User.id)
            .filter(UserRole.object_id == franchise.id, UserRole.role == Role.FRANCHISEE.value)
            .order_by(User.id)
            .all()
        )
        stores = (
            db.query(Store.id, Store.name, func.coalesce(func.sum(OrderItem.price), 0).label("total_revenue"))
            .outerjoin(DinerOrder, DinerOrder.store_id == Store.id)
            .outerjoin(OrderItem, OrderItem.order_id == DinerOrder.id)
            .filter(Store.franchise_id == franchise.id)
            .group_by(Store.id, Store.name)
            .order_by(Store.id)
            .all()
        )
        return {
            "id": franchise.id,
            "name": franchise.name,
            "admins": [{"id": row.id, "name": row.name, "email": row.email} for row in admins],
            "stores": [
                {"id": row.id, "name": row.name, "totalRevenue": float(row.total_revenue or 0)} for row in stores
            ],
        }