from __future__ import annotations

import asyncio
from collections.abc import Awaitable

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from devkit.config import FinderSettings

from api.dependencies import get_geo_service, get_settings
from api.errors import ApiError
from api.response import success_response
from api.services.geo_service import GeoService

router = APIRouter(prefix="/v1/geo", tags=["geo"])


async def _with_timeout(action: Awaitable[BaseModel], timeout_seconds: float) -> dict:
    try:
        data = await asyncio.wait_for(action, timeout=timeout_seconds)
    except TimeoutError as exc:
        raise ApiError("UPSTREAM_TIMEOUT", "Geocoding timed out", 504) from exc
    return success_response(data.model_dump(), meta={})


@router.get("/reverse")
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    service: GeoService = Depends(get_geo_service),
    settings: FinderSettings = Depends(get_settings),
) -> dict:
    return await _with_timeout(service.reverse_geocode(lat, lng), settings.UPSTREAM_READ_TIMEOUT_SECONDS)


@router.get("/forward")
async def forward_geocode(
    address: str = Query(..., max_length=200),
    service: GeoService = Depends(get_geo_service),
    settings: FinderSettings = Depends(get_settings),
) -> dict:
    return await _with_timeout(service.forward_geocode(address), settings.UPSTREAM_READ_TIMEOUT_SECONDS)


@router.get("/distance")
async def distance(
    origin_lat: float = Query(..., ge=-90, le=90),
    origin_lng: float = Query(..., ge=-180, le=180),
    target_lat: float = Query(..., ge=-90, le=90),
    target_lng: float = Query(..., ge=-180, le=180),
    service: GeoService = Depends(get_geo_service),
) -> dict:
    result = await service.distance_km(origin_lat, origin_lng, target_lat, target_lng)
    return success_response(result.model_dump(), meta={})
