from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from facility_sources.clients.kakao_local import KakaoLocalClient
from facility_sources.core.exceptions import InvalidInput, NotFound, UpstreamUnavailable
from geo_engine.distance import haversine_distance_km
from geo_engine.models import GeoPoint

from api.schemas.geo import ForwardGeocodeResult, GeoDistanceResult, ReverseGeocodeResult

logger = logging.getLogger(__name__)


def _address_name(block: Any) -> str:
    if isinstance(block, dict):
        return str(block.get("address_name") or "").strip()
    return ""


class GeoService:
    """Address lookups against the map provider plus plain distance math.

    The map client is built on first use so distance calls work without a key.
    """

    def __init__(self, kakao_client_provider: Callable[[], KakaoLocalClient]) -> None:
        self._kakao_client_provider = kakao_client_provider

    async def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult:
        point = GeoPoint(lat=lat, lng=lng)
        if not point.is_valid():
            raise InvalidInput("lat/lng out of range")
        documents = await self._kakao_client_provider().coord_to_address(point)
        if not documents:
            raise UpstreamUnavailable("reverse geocoding returned no address")
        document = documents[0]
        road = document.get("road_address")
        lot = document.get("address")
        address = _address_name(road) or _address_name(lot)
        # The lot-number block is the one that always carries region names.
        regions = lot if isinstance(lot, dict) else road if isinstance(road, dict) else {}
        return ReverseGeocodeResult(
            address=address,
            region1=str(regions.get("region_1depth_name") or ""),
            region2=str(regions.get("region_2depth_name") or ""),
        )

    async def forward_geocode(self, address_text: str) -> ForwardGeocodeResult:
        query = (address_text or "").strip()
        if not query:
            raise InvalidInput("address is required")
        documents = await self._kakao_client_provider().search_address(query)
        if not documents:
            raise NotFound(f"no location found for '{query}'")
        document = documents[0]
        try:
            lat = float(document["y"])
            lng = float(document["x"])
        except (KeyError, TypeError, ValueError) as exc:
            raise NotFound(f"no usable coordinates for '{query}'") from exc
        road = document.get("road_address")
        normalized = _address_name(road) or str(document.get("address_name") or query)
        return ForwardGeocodeResult(lat=lat, lng=lng, normalized_address=normalized)

    async def distance_km(
        self,
        origin_lat: float,
        origin_lng: float,
        target_lat: float,
        target_lng: float,
    ) -> GeoDistanceResult:
        origin = GeoPoint(lat=origin_lat, lng=origin_lng)
        target = GeoPoint(lat=target_lat, lng=target_lng)
        return GeoDistanceResult(distance_km=round(haversine_distance_km(origin, target), 3))
