from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jwt_pizza.core.errors import NotFoundError, ValidationError
from jwt_pizza.core.identity import FAULTED, Identity, ResolvedIdentity, Role, build_roles
from jwt_pizza.core.metrics import PizzaMetrics
from jwt_pizza.services.authorization_service import AuthorizationService
from jwt_pizza.services.passwords import verify_password
from jwt_pizza.services.sessions import SessionStore
from jwt_pizza.services.tokens import InvalidTokenError, TokenCodec, token_signature
from jwt_pizza.services.users import UserRecord, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    user: UserRecord
    token: str

    def to_dict(self) -> Dict[str, Any]:
        return {"user": self.user.to_public_dict(), "token": self.token}


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class AuthSessionManager:
    """
    Token lifecycle + per-request identity.

    A request is authenticated only when the token signature verifies AND the
    token is still present in the session store. Either check alone is not enough.
    """

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        codec: TokenCodec,
        metrics: Optional[PizzaMetrics] = None,
    ):
        self._users = users
        self._sessions = sessions
        self._codec = codec
        self._metrics = metrics

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> AuthResult:
        if _is_blank(name) or _is_blank(email) or _is_blank(password):
            raise ValidationError("name, email, and password are required")

        user = self._users.add_user(name=name.strip(), email=email.strip(), password=password)
        logger.info("user registered id=%s", user.id)
        return self._start_session(user)

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        user = self._users.find_user_by_email((email or "").strip())
        # usuário inexistente e senha errada caem no mesmo erro
        if user is None or not verify_password(password or "", user.password_hash):
            self._record_auth(False)
            raise NotFoundError("unknown user")
        self._record_auth(True)
        return self._start_session(user)

    def authenticate(self, token: Optional[str]) -> ResolvedIdentity:
        if not token:
            return None
        try:
            payload = self._codec.decode(token)
            if not self._sessions.is_active(token):
                logger.info("inactive session signature=%s", token_signature(token)[:8])
                return None
            return self._identity_from_payload(payload)
        except (InvalidTokenError, ValueError, KeyError, TypeError):
            logger.info("token rejected signature=%s", token_signature(token)[:8])
            return None
        except Exception:
            logger.exception("token verification faulted signature=%s", token_signature(token)[:8])
            return FAULTED

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        self._sessions.logout(token)
        logger.info("session revoked signature=%s", token_signature(token)[:8])

    def update_user(
        self,
        acting: ResolvedIdentity,
        target_user_id: int,
        *,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> UserRecord:
        AuthorizationService.ensure_self_or_role(
            acting,
            target_user_id=target_user_id,
            role=Role.ADMIN,
            message="unauthorized",
        )
        return self._users.update_user(
            target_user_id,
            email=email.strip() if email else None,
            password=password or None,
        )

    def _start_session(self, user: UserRecord) -> AuthResult:
        token = self._codec.encode(user.to_identity())
        self._sessions.login(user.id, token)
        return AuthResult(user=user, token=token)

    def _record_auth(self, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.auth_attempt(success=success)

    @staticmethod
    def _identity_from_payload(payload: Dict[str, Any]) -> Identity:
        raw_id = payload.get("id", payload.get("sub"))
        return Identity(
            id=int(raw_id),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            roles=build_roles(payload.get("roles") or []),
        )
