from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jwt_pizza.core.database import Database
from jwt_pizza.core.errors import ConflictError, NotFoundError
from jwt_pizza.core.identity import Identity, Role, RoleAssignment
from jwt_pizza.models.user import User
from jwt_pizza.models.user_role import UserRole
from jwt_pizza.services.passwords import hash_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserRecord:
    id: int
    name: str
    email: str
    password_hash: str
    roles: tuple[RoleAssignment, ...]

    def to_identity(self) -> Identity:
        return Identity(id=self.id, name=self.name, email=self.email, roles=frozenset(self.roles))

    def to_public_dict(self) -> dict[str, Any]:
        # nunca expõe o hash
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "roles": [assignment.to_dict() for assignment in self.roles],
        }


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        roles=tuple(RoleAssignment(role=Role(r.role), object_id=int(r.object_id or 0)) for r in user.roles),
    )


class UserStore:
    """Credential store: users, password hashes and role assignments."""

    def __init__(self, database: Database):
        self._database = database

    def add_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        roles: Optional[Iterable[RoleAssignment]] = None,
    ) -> UserRecord:
        assignments = list(roles or [RoleAssignment(Role.DINER)])
        with self._database.session() as db:
            if self._query_by_email(db, email) is not None:
                raise ConflictError("email already registered")

            user = User(name=name, email=email, password_hash=hash_password(password))
            for assignment in assignments:
                object_id = assignment.object_id if assignment.role == Role.FRANCHISEE else 0
                user.roles.append(UserRole(role=assignment.role.value, object_id=object_id))
            db.add(user)
            try:
                db.flush()
            except IntegrityError as exc:
                raise ConflictError("email already registered") from exc
            logger.debug("INSERT INTO user / userRole", extra={"log_type": "db"})
            return _to_record(user)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._database.session() as db:
            user = self._query_by_email(db, email)
            logger.debug("SELECT * FROM user WHERE email=?", extra={"log_type": "db"})
            return _to_record(user) if user is not None else None

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._database.session() as db:
            user = db.get(User, user_id)
            return _to_record(user) if user is not None else None

    def update_user(
        self,
        user_id: int,
        *,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserRecord:
        with self._database.session() as db:
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundError("unknown user")

            if email and email != user.email:
                if self._query_by_email(db, email) is not None:
                    raise ConflictError("email already registered")
                user.email = email
            if password:
                user.password_hash = hash_password(password)

            try:
                db.flush()
            except IntegrityError as exc:
                raise ConflictError("email already registered") from exc
            logger.debug("UPDATE user SET ... WHERE id=?", extra={"log_type": "db"})
            return _to_record(user)

    @staticmethod
    def _query_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()
