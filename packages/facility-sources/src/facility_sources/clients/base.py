from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from facility_sources.core.exceptions import (
    MisconfiguredCredentials,
    UpstreamRejected,
    UpstreamUnavailable,
    truncate_body,
)
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector

logger = logging.getLogger(__name__)


def require_key(value: str | None, env_name: str) -> str:
    if value is None or not value.strip():
        raise MisconfiguredCredentials(f"{env_name} is not configured")
    return value.strip()


class ProviderHttpClient:
    """Shared request/response handling for third-party JSON APIs."""

    provider_name = "unknown"

    def __init__(
        self,
        base_url: str,
        connect_timeout_seconds: float = 2.0,
        read_timeout_seconds: float = 8.0,
        metrics: InMemoryGatewayMetricsCollector | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(
            connect=connect_timeout_seconds,
            read=read_timeout_seconds,
            write=read_timeout_seconds,
            pool=connect_timeout_seconds,
        )
        self._metrics = metrics
        self._client_factory = client_factory

    async def _request_json(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout))
            async with factory() as client:
                response = await client.request(method, url, params=params, headers=headers, json=json_body)
        except httpx.TimeoutException as exc:
            self._record_http_error("timeout")
            raise UpstreamUnavailable(f"{self.provider_name} timeout: {path}") from exc
        except httpx.HTTPError as exc:
            self._record_http_error("network")
            raise UpstreamUnavailable(f"{self.provider_name} request failed: {path}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            self._record_http_error(response.status_code)
            raise UpstreamUnavailable(
                f"{self.provider_name} unavailable: status={response.status_code}",
                details=truncate_body(response.text),
            )
        if response.status_code >= 400:
            self._record_http_error(response.status_code)
            raise UpstreamRejected(
                f"{self.provider_name} rejected request: status={response.status_code}",
                details=truncate_body(response.text),
            )

        try:
            return response.json()
        except ValueError as exc:
            self._record_http_error("invalid_json")
            logger.warning(
                "upstream_invalid_json",
                extra={"provider": self.provider_name, "path": path, "body": truncate_body(response.text)},
            )
            raise UpstreamRejected(
                f"{self.provider_name} returned a non-JSON body",
                details=truncate_body(response.text),
            ) from exc

    def _record_http_error(self, code: int | str) -> None:
        logger.warning("upstream_http_error", extra={"provider": self.provider_name, "code": str(code)})
        if self._metrics:
            self._metrics.increment_provider_http_error(provider=self.provider_name, code=code)
