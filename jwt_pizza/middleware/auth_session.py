from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from jwt_pizza.core.request_context import set_request_context
from jwt_pizza.services.tokens import token_signature


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


class AuthSessionMiddleware(BaseHTTPMiddleware):
    """Resolve the caller identity once per request from the Authorization header."""

    async def dispatch(self, request, call_next):
        token = extract_bearer_token(request.headers.get("Authorization"))
        request.state.token = token
        request.state.identity = None

        auth_manager = getattr(request.app.state, "auth_manager", None)
        if token and auth_manager is not None:
            set_request_context(token_signature=token_signature(token)[:8] or None)
            # consulta ao banco é síncrona
            identity = await run_in_threadpool(auth_manager.authenticate, token)
            request.state.identity = identity
            user_id = getattr(identity, "id", None)
            if user_id is not None:
                set_request_context(user_id=str(user_id))

        return await call_next(request)
