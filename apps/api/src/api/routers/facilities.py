from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Query

from devkit.config import FinderSettings
from facility_sources.core.models import FacilityQuery, SearchMode

from api.dependencies import get_aggregation_service, get_settings
from api.errors import ApiError
from api.response import success_response
from api.schemas.facility import FacilityItem, FacilityListQuery
from api.services.facility_service import AggregationService

router = APIRouter(prefix="/v1/facilities", tags=["facilities"])


@router.get("")
async def list_facilities(
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    radius_km: float | None = Query(default=None, gt=0, le=50),
    region1: str | None = Query(default=None, min_length=1),
    region2: str | None = Query(default=None, min_length=1),
    num_of_rows: int | None = Query(default=None, ge=1, le=100),
    mode: SearchMode = SearchMode.HOSPITAL,
    include_emergency: bool = False,
    department: str | None = None,
    sort: str = Query(default="distance", pattern="^(distance|open)$"),
    service: AggregationService = Depends(get_aggregation_service),
    settings: FinderSettings = Depends(get_settings),
) -> dict:
    params = FacilityListQuery(
        lat=lat,
        lng=lng,
        radius_km=radius_km,
        region1=region1,
        region2=region2,
        num_of_rows=num_of_rows,
        mode=mode,
        include_emergency=include_emergency,
        department=department,
        sort=sort,
    )
    query = FacilityQuery(**params.model_dump())
    try:
        result = await asyncio.wait_for(
            service.find_facilities(query),
            timeout=settings.AGGREGATION_TIMEOUT_SECONDS,
        )
    except TimeoutError as exc:
        raise ApiError("UPSTREAM_TIMEOUT", "Facility search timed out", 504) from exc

    items = [FacilityItem.from_record(record).model_dump() for record in result.facilities]
    meta = {
        "count": len(items),
        "source": result.source,
        "address": result.address,
        "attempts": result.attempts,
    }
    return success_response({"facilities": items}, meta=meta)
