from __future__ import annotations

import logging

from jwt_pizza.core.database import Database
from jwt_pizza.models.auth_session import AuthSession
from jwt_pizza.services.tokens import token_signature

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Active token -> user bindings. A token missing here is never authenticated.

    Only the signature segment is stored: it is fixed-length for HS256 and unique
    per token (the claims carry a jti), while the full token grows with the user's
    name and email.
    """

    def __init__(self, database: Database):
        self._database = database

    def login(self, user_id: int, token: str) -> None:
        signature = token_signature(token)
        if not signature:
            raise ValueError("malformed token")
        with self._database.session() as db:
            db.add(AuthSession(token=signature, user_id=user_id))
            logger.debug("INSERT INTO auth (token, userId) VALUES (?, ?)", extra={"log_type": "db"})

    def is_active(self, token: str) -> bool:
        signature = token_signature(token)
        if not signature:
            return False
        with self._database.session() as db:
            found = db.query(AuthSession.user_id).filter(AuthSession.token == signature).first()
            logger.debug("SELECT userId FROM auth WHERE token=?", extra={"log_type": "db"})
            return found is not None

    def logout(self, token: str) -> None:
        signature = token_signature(token)
        if not signature:
            return
        with self._database.session() as db:
            db.query(AuthSession).filter(AuthSession.token == signature).delete(synchronize_session=False)
            logger.debug("DELETE FROM auth WHERE token=?", extra={"log_type": "db"})
