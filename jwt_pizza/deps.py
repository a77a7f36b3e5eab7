# jwt_pizza/deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from jwt_pizza.core.config import Settings
from jwt_pizza.core.identity import Identity, ResolvedIdentity, Role
from jwt_pizza.core.metrics import InMemoryRequestMetrics, PizzaMetrics
from jwt_pizza.services.auth_session import AuthSessionManager
from jwt_pizza.services.authorization_service import AuthorizationService
from jwt_pizza.services.franchises import FranchiseStore
from jwt_pizza.services.menu import MenuStore
from jwt_pizza.services.order_workflow import OrderWorkflow
from jwt_pizza.services.orders import OrderStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_manager(request: Request) -> AuthSessionManager:
    return request.app.state.auth_manager


def get_menu_store(request: Request) -> MenuStore:
    return request.app.state.menu_store


def get_order_store(request: Request) -> OrderStore:
    return request.app.state.order_store


def get_franchise_store(request: Request) -> FranchiseStore:
    return request.app.state.franchise_store


def get_order_workflow(request: Request) -> OrderWorkflow:
    return request.app.state.order_workflow


def get_request_metrics(request: Request) -> InMemoryRequestMetrics:
    return request.app.state.request_metrics


def get_pizza_metrics(request: Request) -> PizzaMetrics:
    return request.app.state.pizza_metrics


def get_bearer_token(request: Request) -> Optional[str]:
    """Token já extraído pelo AuthSessionMiddleware."""
    return getattr(request.state, "token", None)


def get_identity(request: Request) -> ResolvedIdentity:
    """Identidade resolvida pelo middleware; None para anônimo, FAULTED se a verificação falhou."""
    return getattr(request.state, "identity", None)


def require_identity(identity: ResolvedIdentity = Depends(get_identity)) -> Identity:
    return AuthorizationService.require_identity(identity)


def require_role(role: Role, message: str):
    """Dependency factory: resolves before the body is validated, so 401/403 win over 400."""

    def dependency(identity: ResolvedIdentity = Depends(get_identity)) -> Identity:
        return AuthorizationService.ensure_role(identity, role, message)

    return dependency


def require_franchise_manager(message: str):
    """Admin, or a franchisee of the franchise named by the `franchise_id` path param."""

    def dependency(franchise_id: int, identity: ResolvedIdentity = Depends(get_identity)) -> Identity:
        return AuthorizationService.ensure_any_role(
            identity,
            [(Role.ADMIN, None), (Role.FRANCHISEE, franchise_id)],
            message,
        )

    return dependency
