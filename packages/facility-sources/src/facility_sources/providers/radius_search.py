from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from facility_sources.clients.public_data import PublicDataClient
from facility_sources.core.exceptions import EmptyResult, InvalidInput, UpstreamError
from facility_sources.core.models import (
    FacilityCategory,
    FacilityRecord,
    OperatingHours,
    SearchMode,
    SourceRequest,
    surrogate_id,
)
from facility_sources.core.retry import with_exponential_backoff
from facility_sources.providers.base import FacilitySourceAdapter
from facility_sources.providers.fields import pick, to_int, to_point, to_str
from facility_sources.rules.categories import classify_public_facility
from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import GeoPoint

logger = logging.getLogger(__name__)


class ParamStyle(str, Enum):
    UPPER = "upper"
    CAMEL = "camel"


@dataclass(frozen=True)
class EndpointVariant:
    path: str
    param_style: ParamStyle

    def build_params(self, point: GeoPoint, num_of_rows: int) -> dict[str, Any]:
        if self.param_style is ParamStyle.UPPER:
            coordinates = {"WGS84_LON": point.lng, "WGS84_LAT": point.lat}
        else:
            coordinates = {"wgs84Lon": point.lng, "wgs84Lat": point.lat}
        return {**coordinates, "pageNo": 1, "numOfRows": num_of_rows}


# The registry renamed its coordinate parameters between releases; newest shape first.
HOSPITAL_VARIANTS: tuple[EndpointVariant, ...] = (
    EndpointVariant("/B552657/HsptlAsembySearchService/getHsptlMdcncLcinfoInqire", ParamStyle.UPPER),
    EndpointVariant("/B552657/HsptlAsembySearchService/getHsptlMdcncLcinfoInqire", ParamStyle.CAMEL),
)

EMERGENCY_VARIANTS: tuple[EndpointVariant, ...] = (
    EndpointVariant("/B552657/ErmctInfoInqireService/getEgytLcinfoInqire", ParamStyle.UPPER),
    EndpointVariant("/B552657/ErmctInfoInqireService/getEgytLcinfoInqire", ParamStyle.CAMEL),
    EndpointVariant("/B552657/ErmctInfoInqireService/getEgyInfoList", ParamStyle.UPPER),
)


class RadiusSearchAdapter(FacilitySourceAdapter):
    """Coordinate search on the government facility registry, filtered to a radius."""

    def __init__(
        self,
        client: PublicDataClient,
        mode: SearchMode = SearchMode.HOSPITAL,
        variants: tuple[EndpointVariant, ...] | None = None,
        retries: int = 2,
        retry_base_delay_seconds: float = 0.1,
    ) -> None:
        self._client = client
        self._mode = mode
        self._variants = variants or (EMERGENCY_VARIANTS if mode is SearchMode.EMERGENCY else HOSPITAL_VARIANTS)
        self._retries = retries
        self._retry_base_delay_seconds = retry_base_delay_seconds
        self.name = "radius_search_emergency" if mode is SearchMode.EMERGENCY else "radius_search"

    @property
    def variants(self) -> tuple[EndpointVariant, ...]:
        return self._variants

    def supports(self, request: SourceRequest) -> bool:
        return request.point is not None

    async def fetch(self, request: SourceRequest) -> list[FacilityRecord]:
        if request.point is None:
            raise InvalidInput("radius search requires coordinates")
        rows = await self._fetch_first_usable_variant(request.point, request.num_of_rows)
        records = [self._to_record(row) for row in rows]
        inside = [
            record
            for record in records
            if record.coordinates is None
            or is_point_inside_radius(request.point, record.coordinates, request.radius_km)
        ]
        if not inside:
            raise EmptyResult(f"no facilities within {request.radius_km}km")
        return inside

    async def _fetch_first_usable_variant(self, point: GeoPoint, num_of_rows: int) -> list[dict[str, Any]]:
        failures: list[UpstreamError] = []
        for variant in self._variants:
            params = variant.build_params(point, num_of_rows)
            try:
                rows = await with_exponential_backoff(
                    lambda: self._client.fetch_items(variant.path, params),
                    retries=self._retries,
                    base_delay_seconds=self._retry_base_delay_seconds,
                    on_retry=self._on_retry,
                )
            except UpstreamError as exc:
                logger.info(
                    "endpoint_variant_failed",
                    extra={
                        "adapter": self.name,
                        "path": variant.path,
                        "param_style": variant.param_style.value,
                        "error_code": exc.code,
                    },
                )
                failures.append(exc)
                continue
            if rows:
                return rows
            failures.append(EmptyResult(f"{variant.path} ({variant.param_style.value}) returned no rows"))

        details = "; ".join(f"{type(exc).__name__}: {exc.message}" for exc in failures)
        hard_failures = [exc for exc in failures if not isinstance(exc, EmptyResult)]
        if hard_failures:
            last = hard_failures[-1]
            raise type(last)(f"all {len(self._variants)} endpoint variants failed", details=details)
        raise EmptyResult("every endpoint variant returned no rows", details=details)

    def _on_retry(self, attempt: int, delay: float) -> None:
        logger.info("endpoint_variant_retry", extra={"adapter": self.name, "attempt": attempt, "delay": delay})

    def _to_record(self, row: dict[str, Any]) -> FacilityRecord:
        hpid = to_str(row.get("hpid"))
        name = to_str(row.get("dutyName"))
        if self._mode is SearchMode.EMERGENCY:
            category = FacilityCategory.EMERGENCY_ROOM
        else:
            category = classify_public_facility(
                name=name,
                hpid=hpid,
                division_name=to_str(pick(row, "dutyDivName", "dutyDivNam")),
                emergency_flag=to_int(row.get("dutyEryn")),
            )
        start = to_str(pick(row, "startTime", "dutyTime1s"))
        end = to_str(pick(row, "endTime", "dutyTime1c"))
        return FacilityRecord(
            id=hpid or surrogate_id(),
            name=name,
            address=to_str(row.get("dutyAddr")),
            coordinates=to_point(pick(row, "latitude", "wgs84Lat"), pick(row, "longitude", "wgs84Lon")),
            category=category,
            source=self.name,
            phone=to_str(pick(row, "dutyTel1", "dutyTel3")) or None,
            operating_hours=OperatingHours(start_time=start, end_time=end) if start and end else None,
        )
