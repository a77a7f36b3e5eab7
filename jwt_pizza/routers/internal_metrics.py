from __future__ import annotations

from fastapi import APIRouter, Depends

from jwt_pizza.core.identity import Identity, Role
from jwt_pizza.core.metrics import InMemoryRequestMetrics, PizzaMetrics
from jwt_pizza.deps import get_pizza_metrics, get_request_metrics, require_role

router = APIRouter(prefix="/internal/metrics", tags=["internal-metrics"])


@router.get("")
def metrics_snapshot(
    _admin: Identity = Depends(require_role(Role.ADMIN, "unauthorized")),
    request_metrics: InMemoryRequestMetrics = Depends(get_request_metrics),
    pizza_metrics: PizzaMetrics = Depends(get_pizza_metrics),
):
    return {"requests": request_metrics.snapshot(), "pizza": pizza_metrics.snapshot()}
