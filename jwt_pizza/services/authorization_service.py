from __future__ import annotations

import logging
from typing import Iterable

from jwt_pizza.core.errors import ForbiddenError, UnauthorizedError
from jwt_pizza.core.identity import FAULTED, Identity, ResolvedIdentity, Role, has_role

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centralize authentication gates and RBAC checks for protected operations."""

    @staticmethod
    def log_access_denied(*, reason: str, identity: ResolvedIdentity, required: str) -> None:
        logger.warning(
            "Access denied (%s): user_id=%s roles=%s required=%s",
            reason,
            getattr(identity, "id", None),
            identity.roles_payload() if isinstance(identity, Identity) else [],
            required,
        )

    @classmethod
    def require_identity(cls, identity: ResolvedIdentity) -> Identity:
        if isinstance(identity, Identity):
            return identity
        reason = "faulted" if identity is FAULTED else "unauthenticated"
        logger.info("Authentication required (%s)", reason)
        raise UnauthorizedError()

    @classmethod
    def ensure_role(cls, identity: ResolvedIdentity, role: Role, message: str) -> Identity:
        resolved = cls.require_identity(identity)
        if not has_role(resolved, role):
            cls.log_access_denied(reason="role_denied", identity=resolved, required=role.value)
            raise ForbiddenError(message)
        return resolved

    @classmethod
    def ensure_any_role(
        cls,
        identity: ResolvedIdentity,
        roles: Iterable[tuple[Role, int | None]],
        message: str,
    ) -> Identity:
        """Pass when any (role, object_id) pair matches; object_id None matches any scope."""
        resolved = cls.require_identity(identity)
        wanted = list(roles)
        if any(has_role(resolved, role, object_id) for role, object_id in wanted):
            return resolved
        cls.log_access_denied(
            reason="role_denied",
            identity=resolved,
            required=",".join(f"{role.value}:{object_id or '*'}" for role, object_id in wanted),
        )
        raise ForbiddenError(message)

    @classmethod
    def ensure_self_or_role(
        cls,
        identity: ResolvedIdentity,
        *,
        target_user_id: int,
        role: Role,
        message: str,
    ) -> Identity:
        resolved = cls.require_identity(identity)
        if resolved.id == target_user_id or has_role(resolved, role):
            return resolved
        cls.log_access_denied(reason="not_owner", identity=resolved, required=f"self|{role.value}")
        raise ForbiddenError(message)
