from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from jwt_pizza.core.errors import ValidationError
from jwt_pizza.core.identity import ResolvedIdentity
from jwt_pizza.core.metrics import PizzaMetrics
from jwt_pizza.services.authorization_service import AuthorizationService
from jwt_pizza.services.fulfillment import FulfillmentClient
from jwt_pizza.services.orders import OrderStore

logger = logging.getLogger(__name__)

FULFILLMENT_FAILED_MESSAGE = "Failed to fulfill order at factory"


@dataclass(frozen=True)
class OrderOutcome:
    """Result of one placement. A failed fulfillment still carries the persisted order."""

    fulfilled: bool
    order: Dict[str, Any]
    jwt: Optional[str] = None
    report_url: Optional[str] = None
    message: Optional[str] = None
    factory_status: int = 0

    @property
    def status_code(self) -> int:
        return 200 if self.fulfilled else 500

    def to_response(self) -> Dict[str, Any]:
        if self.fulfilled:
            return {"order": self.order, "jwt": self.jwt, "reportUrl": self.report_url}
        return {"message": self.message or FULFILLMENT_FAILED_MESSAGE, "reportUrl": self.report_url}


class OrderWorkflow:
    def __init__(self, orders: OrderStore, fulfillment: FulfillmentClient, metrics: PizzaMetrics):
        self._orders = orders
        self._fulfillment = fulfillment
        self._metrics = metrics

    def place_order(
        self,
        identity: ResolvedIdentity,
        *,
        franchise_id: int,
        store_id: int,
        items: Sequence[Dict[str, Any]],
    ) -> OrderOutcome:
        diner = AuthorizationService.require_identity(identity)
        if not items:
            raise ValidationError("order must contain at least one item")

        self._metrics.order_attempted()

        # persistência isolada: a chamada à fábrica não participa desta transação
        start = time.perf_counter()
        order = self._orders.add_diner_order(
            diner_id=diner.id,
            franchise_id=franchise_id,
            store_id=store_id,
            items=items,
        )
        latency_ms = (time.perf_counter() - start) * 1000

        revenue = sum(float(item["price"]) for item in items)
        self._metrics.order_persisted(pizzas=len(items), revenue=revenue, latency_ms=latency_ms)
        logger.info(
            "order persisted id=%s diner_id=%s items=%s",
            order["id"],
            diner.id,
            len(items),
            extra={"duration_ms": round(latency_ms, 2)},
        )

        result = self._fulfillment.submit_order(
            diner={"id": diner.id, "name": diner.name, "email": diner.email},
            order=order,
        )
        if result.ok:
            return OrderOutcome(
                fulfilled=True,
                order=order,
                jwt=result.jwt,
                report_url=result.report_url,
                factory_status=result.status_code,
            )

        # o pedido continua gravado mesmo sem token de rastreio
        self._metrics.fulfillment_failed()
        logger.warning(
            "order %s persisted but fulfillment failed status=%s",
            order["id"],
            result.status_code,
        )
        return OrderOutcome(
            fulfilled=False,
            order=order,
            report_url=result.report_url,
            message=FULFILLMENT_FAILED_MESSAGE,
            factory_status=result.status_code,
        )
