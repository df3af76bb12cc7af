from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from facility_sources.clients.base import ProviderHttpClient, require_key
from facility_sources.core.exceptions import UpstreamRejected
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from geo_engine.models import GeoPoint

MAX_RADIUS_METERS = 20_000
MAX_PAGE_SIZE = 15
MAX_PAGE = 45


def clamp_radius_meters(radius_km: float) -> int:
    return max(0, min(round(radius_km * 1000), MAX_RADIUS_METERS))


class KakaoLocalClient(ProviderHttpClient):
    provider_name = "kakao_local"

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://dapi.kakao.com",
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
        self._headers = {"Authorization": f"KakaoAK {require_key(api_key, 'KAKAO_REST_API_KEY')}"}

    async def coord_to_address(self, point: GeoPoint) -> list[dict[str, Any]]:
        payload = await self._get("/v2/local/geo/coord2address.json", {"x": point.lng, "y": point.lat})
        return self._documents(payload)

    async def search_address(self, query: str) -> list[dict[str, Any]]:
        payload = await self._get("/v2/local/search/address.json", {"query": query})
        return self._documents(payload)

    async def search_category(
        self,
        category_group_code: str,
        point: GeoPoint,
        radius_km: float,
        page: int = 1,
        size: int = MAX_PAGE_SIZE,
    ) -> tuple[list[dict[str, Any]], bool]:
        params = {
            "category_group_code": category_group_code,
            "x": point.lng,
            "y": point.lat,
            "radius": clamp_radius_meters(radius_km),
            "page": min(page, MAX_PAGE),
            "size": min(size, MAX_PAGE_SIZE),
            "sort": "distance",
        }
        payload = await self._get("/v2/local/search/category.json", params)
        return self._documents(payload), self._is_end(payload)

    async def search_keyword(
        self,
        query: str,
        point: GeoPoint | None = None,
        radius_km: float | None = None,
        page: int = 1,
        size: int = MAX_PAGE_SIZE,
    ) -> tuple[list[dict[str, Any]], bool]:
        params: dict[str, Any] = {"query": query, "page": min(page, MAX_PAGE), "size": min(size, MAX_PAGE_SIZE)}
        if point is not None:
            params.update({"x": point.lng, "y": point.lat, "sort": "distance"})
            if radius_km is not None:
                params["radius"] = clamp_radius_meters(radius_km)
        payload = await self._get("/v2/local/search/keyword.json", params)
        return self._documents(payload), self._is_end(payload)

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        return await self._request_json("GET", path, params=params, headers=self._headers)

    @staticmethod
    def _documents(payload: Any) -> list[dict[str, Any]]:
        if not isinstance(payload, dict):
            raise UpstreamRejected("kakao payload is not a json object")
        documents = payload.get("documents")
        if not isinstance(documents, list):
            raise UpstreamRejected("kakao payload missing list field 'documents'")
        return [doc for doc in documents if isinstance(doc, dict)]

    @staticmethod
    def _is_end(payload: Any) -> bool:
        meta = payload.get("meta") if isinstance(payload, dict) else None
        if not isinstance(meta, dict):
            return True
        return meta.get("is_end") is True
