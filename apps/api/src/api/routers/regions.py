from __future__ import annotations

from fastapi import APIRouter, Depends

from facility_sources.regions import RegionTable

from api.dependencies import get_region_table
from api.response import success_response
from api.schemas.region import RegionItem

router = APIRouter(prefix="/v1/regions", tags=["regions"])


@router.get("")
async def list_regions(table: RegionTable = Depends(get_region_table)) -> dict:
    items = [
        RegionItem(
            name=entry.short_name,
            long_name=entry.long_name,
            admin_code=entry.admin_code,
            hira_code=entry.hira_code,
            districts=list(entry.districts),
        ).model_dump()
        for entry in table.entries
    ]
    return success_response(items, meta={"count": len(items)})
