from __future__ import annotations

from collections.abc import Callable
from typing import Any
from urllib.parse import unquote

import httpx

from facility_sources.clients.base import ProviderHttpClient, require_key
from facility_sources.core.exceptions import UpstreamRejected
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector

SUCCESS_RESULT_CODES = {"00", "0000"}


def extract_items(payload: Any) -> list[dict[str, Any]]:
    """Pull ``response.body.items.item`` out of a data.go.kr JSON envelope.

    ``items`` is an empty string when nothing matched and ``item`` is a bare
    object when exactly one row matched.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("response"), dict):
        raise UpstreamRejected("public data payload missing 'response' object")
    response = payload["response"]
    header = response.get("header") or {}
    result_code = str(header.get("resultCode", "00"))
    if result_code not in SUCCESS_RESULT_CODES:
        raise UpstreamRejected(
            f"public data error [{result_code}]",
            details=str(header.get("resultMsg", "")),
        )
    body = response.get("body") or {}
    items = body.get("items")
    if not isinstance(items, dict):
        return []
    item = items.get("item")
    if isinstance(item, dict):
        return [item]
    if isinstance(item, list):
        return [row for row in item if isinstance(row, dict)]
    return []


class PublicDataClient(ProviderHttpClient):
    provider_name = "public_data"

    def __init__(
        self,
        service_key: str | None,
        base_url: str = "https://apis.data.go.kr",
        connect_timeout_seconds: float = 2.0,
        read_timeout_seconds: float = 8.0,
        metrics: InMemoryGatewayMetricsCollector | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=read_timeout_seconds,
            metrics=metrics,
            client_factory=client_factory,
        )
        # Portal keys are issued both raw and percent-encoded; httpx encodes again.
        self._service_key = unquote(require_key(service_key, "PUBLIC_DATA_API_KEY"))

    async def fetch_items(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        query = {**params, "serviceKey": self._service_key, "_type": "json"}
        payload = await self._request_json("GET", path, params=query)
        return extract_items(payload)
