from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    request_id: str | None = None
    user_id: str | None = None
    # só o prefixo da assinatura, nunca o token inteiro
    token_signature: str | None = None


_EMPTY = RequestContext()
_CURRENT: ContextVar[RequestContext] = ContextVar("jwt_pizza_request_context", default=_EMPTY)


def set_request_context(
    *,
    request_id: str | None = None,
    user_id: str | None = None,
    token_signature: str | None = None,
) -> None:
    updates = {
        name: value
        for name, value in (("request_id", request_id), ("user_id", user_id), ("token_signature", token_signature))
        if value is not None
    }
    if updates:
        _CURRENT.set(replace(_CURRENT.get(), **updates))


def get_request_context() -> RequestContext:
    return _CURRENT.get()


def clear_request_context() -> None:
    _CURRENT.set(_EMPTY)
