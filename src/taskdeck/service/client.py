# src/taskdeck/service/client.py

"""
HTTP client for the task / metrics service.

The client is an explicitly constructed value (ClientConfig -> ServiceClient) that is passed
to whoever needs it. There is no module-level client and no retry logic: every call resolves
or fails once.

Failures are normalized:
- httpx.HTTPStatusError / httpx.RequestError -> ServiceError
- a body that is not JSON                       -> DataShapeError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import DataShapeError, ServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClientConfig:
    base_url: str = "http://localhost:8080"
    timeout_ms: int = 10_000
    metrics_path: str = "/metrics"

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(max(1, int(self.timeout_ms)) / 1000.0)


class ServiceClient:
    """
    Async client implementing the TaskService and MetricsService ports.

    `transport` is only meant for tests (httpx.MockTransport).
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout(),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> ServiceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---- low-level ----

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("%s %s failed status=%s body=%s", method, path, status, e.response.text[:200])
            raise ServiceError(f"{method} {path} failed with HTTP {status}", status_code=status) from e
        except httpx.RequestError as e:
            logger.warning("%s %s connection error: %s", method, path, e)
            raise ServiceError(f"{method} {path} failed: {e.__class__.__name__}") from e

        logger.debug("%s %s -> %s", method, path, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DataShapeError(f"{method} {path} returned a non-JSON body") from e

    # ---- TaskService ----

    async def list_tasks(self) -> Any:
        return await self._request("GET", "/tasks")

    async def create_task(self, *, name: str, scheduled_time: str, duration_sec: int) -> Any:
        payload = {"name": name, "scheduled_time": scheduled_time, "duration_sec": duration_sec}
        return await self._request("POST", "/tasks", json=payload)

    async def mark_done(self, task_id: Any) -> Any:
        return await self._request("PATCH", f"/tasks/{task_id}")

    async def delete_task(self, task_id: Any) -> Any:
        return await self._request("DELETE", f"/tasks/{task_id}")

    # ---- MetricsService ----

    async def get_metrics(self, algo: str = "all") -> Any:
        return await self._request("GET", self.config.metrics_path, params={"algo": algo})
