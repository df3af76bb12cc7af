from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from facility_sources.core.models import FacilityRecord, SearchMode


class BedInfoItem(BaseModel):
    total_beds: int
    available_beds: int
    status: str
    last_updated: str


class OperatingHoursItem(BaseModel):
    start_time: str
    end_time: str


class FacilityItem(BaseModel):
    id: str
    name: str
    address: str
    lat: float | None
    lng: float | None
    phone: str | None = None
    category: str
    source: str
    bed_info: BedInfoItem | None = None
    bed_match_confidence: float | None = None
    operating_hours: OperatingHoursItem | None = None
    distance_km: float | None = None
    is_open: bool | None = None
    closing_time: str | None = None
    department: str | None = None

    @classmethod
    def from_record(cls, record: FacilityRecord) -> "FacilityItem":
        bed_info = record.bed_info
        hours = record.operating_hours
        return cls(
            id=record.id,
            name=record.name,
            address=record.address,
            lat=record.coordinates.lat if record.coordinates else None,
            lng=record.coordinates.lng if record.coordinates else None,
            phone=record.phone,
            category=record.category.value,
            source=record.source,
            bed_info=BedInfoItem(
                total_beds=bed_info.total_beds,
                available_beds=bed_info.available_beds,
                status=bed_info.status,
                last_updated=bed_info.last_updated,
            )
            if bed_info
            else None,
            bed_match_confidence=record.bed_match_confidence,
            operating_hours=OperatingHoursItem(start_time=hours.start_time, end_time=hours.end_time)
            if hours
            else None,
            distance_km=record.derived_distance_km,
            is_open=record.derived_is_open,
            closing_time=record.closing_time,
            department=record.derived_department,
        )


class FacilityListQuery(BaseModel):
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    radius_km: float | None = Field(default=None, gt=0, le=50)
    region1: str | None = Field(default=None, min_length=1)
    region2: str | None = Field(default=None, min_length=1)
    num_of_rows: int | None = Field(default=None, ge=1, le=100)
    mode: SearchMode = SearchMode.HOSPITAL
    include_emergency: bool = False
    department: str | None = None
    sort: Literal["distance", "open"] = "distance"
