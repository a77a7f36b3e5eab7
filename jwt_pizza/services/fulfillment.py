from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from jwt_pizza.core.logging_setup import status_to_log_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FulfillmentResult:
    ok: bool
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def jwt(self) -> Optional[str]:
        return self.body.get("jwt")

    @property
    def report_url(self) -> Optional[str]:
        return self.body.get("reportUrl")


class FulfillmentClient:
    """HTTP client for the pizza factory. Never raises on transport failures."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.order_url = f"{base_url.rstrip('/')}/api/order"
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        )

    def submit_order(self, diner: Dict[str, Any], order: Dict[str, Any]) -> FulfillmentResult:
        payload = {"diner": diner, "order": order}
        try:
            response = self._client.post(self.order_url, json=payload)
        except httpx.HTTPError as exc:
            result = FulfillmentResult(
                ok=False,
                status_code=0,
                body={"message": f"factory unreachable: {exc.__class__.__name__}"},
            )
            self._log_attempt(payload, result)
            return result

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}
        if not isinstance(body, dict):
            body = {"message": str(body)}

        result = FulfillmentResult(ok=response.is_success, status_code=response.status_code, body=body)
        self._log_attempt(payload, result)
        return result

    def close(self) -> None:
        self._client.close()

    def _log_attempt(self, payload: Dict[str, Any], result: FulfillmentResult) -> None:
        logger.log(
            status_to_log_level(result.status_code),
            "factory request",
            extra={
                "log_type": "factory",
                "method": "POST",
                "url": self.order_url,
                "status_code": result.status_code,
                "req_body": json.dumps(payload, default=str),
                "res_body": json.dumps(result.body, default=str),
            },
        )
