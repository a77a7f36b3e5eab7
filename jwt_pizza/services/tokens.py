from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from jwt_pizza.core.identity import Identity


class InvalidTokenError(ValueError):
    pass


class TokenCodec:
    """Signs and verifies auth tokens. Says nothing about whether the session is still active."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 0):
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    def encode(self, identity: Identity) -> str:
        now = datetime.now(timezone.utc)
        # "sub" precisa ser STRING
        payload: Dict[str, Any] = {
            "sub": str(identity.id),
            "id": identity.id,
            "name": identity.name,
            "email": identity.email,
            "roles": identity.roles_payload(),
            "iat": int(now.timestamp()),
            "jti": uuid.uuid4().hex,
        }
        if self._expire_minutes > 0:
            payload["exp"] = int((now + timedelta(minutes=self._expire_minutes)).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError("invalid token") from exc


def token_signature(token: str | None) -> str:
    """Third segment of a well-formed token, for log correlation only."""
    parts = (token or "").split(".")
    if len(parts) == 3:
        return parts[2]
    return ""
