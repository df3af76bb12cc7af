from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

from geo_engine.models import GeoPoint


class FacilityCategory(str, Enum):
    EMERGENCY_ROOM = "emergency-room"
    GENERAL_HOSPITAL = "general-hospital"
    CLINIC = "clinic"
    PHARMACY = "pharmacy"


class SearchMode(str, Enum):
    HOSPITAL = "hospital"
    EMERGENCY = "emergency"


@dataclass(frozen=True)
class BedInfo:
    total_beds: int
    available_beds: int
    status: str
    last_updated: str


@dataclass(frozen=True)
class OperatingHours:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class FacilityRecord:
    id: str
    name: str
    address: str
    coordinates: GeoPoint | None
    category: FacilityCategory
    source: str
    phone: str | None = None
    bed_info: BedInfo | None = None
    bed_match_confidence: float | None = None
    operating_hours: OperatingHours | None = None
    derived_distance_km: float | None = None
    derived_is_open: bool | None = None
    closing_time: str | None = None
    derived_department: str | None = None


def surrogate_id() -> str:
    return f"local-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class RegionQuery:
    region1: str
    region2: str | None = None


@dataclass(frozen=True)
class ResolvedRegion:
    long_name: str
    short_name: str
    admin_code: str
    hira_code: str
    district: str | None = None


@dataclass(frozen=True)
class SourceRequest:
    """What an adapter needs to answer one query."""

    mode: SearchMode
    point: GeoPoint | None = None
    radius_km: float = 5.0
    region: ResolvedRegion | None = None
    num_of_rows: int = 100


@dataclass(frozen=True)
class FacilityQuery:
    lat: float | None = None
    lng: float | None = None
    region1: str | None = None
    region2: str | None = None
    radius_km: float | None = None
    num_of_rows: int | None = None
    mode: SearchMode = SearchMode.HOSPITAL
    include_emergency: bool = False
    department: str | None = None
    sort: str = "distance"

    @property
    def point(self) -> GeoPoint | None:
        if self.lat is None or self.lng is None:
            return None
        return GeoPoint(lat=self.lat, lng=self.lng)

    @property
    def region_query(self) -> RegionQuery | None:
        if not self.region1:
            return None
        return RegionQuery(region1=self.region1, region2=self.region2)


@dataclass
class FacilitySearchResult:
    facilities: list[FacilityRecord]
    source: str | None
    address: str | None = None
    attempts: list[str] = field(default_factory=list)
