from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Protocol

from devkit.timezone import now_kst
from facility_sources.core.exceptions import (
    InvalidInput,
    NoDataAvailable,
    NotFound,
    UnsupportedRegion,
    UpstreamError,
)
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import (
    FacilityCategory,
    FacilityQuery,
    FacilityRecord,
    FacilitySearchResult,
    RegionQuery,
    ResolvedRegion,
    SearchMode,
    SourceRequest,
)
from facility_sources.providers.fallback import FallbackChain
from facility_sources.regions import RegionTable
from facility_sources.rules.departments import classify_department
from facility_sources.rules.hours import evaluate_operating_status
from geo_engine.distance import haversine_distance_km
from geo_engine.models import GeoPoint

from api.schemas.geo import ReverseGeocodeResult
from api.services.phone_backfill import PhoneBackfiller

logger = logging.getLogger(__name__)

UPSTREAM_PAGE_SIZE = 100


class ReverseGeocoder(Protocol):
    async def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult: ...


class AggregationService:
    """Runs one facility search end to end.

    Resolve the region, run the fallback chain for the search mode, then filter,
    derive distance/open status/department, sort, truncate and backfill phones.
    """

    def __init__(
        self,
        chain_factory: Callable[[SearchMode], FallbackChain],
        region_table: RegionTable,
        geocoder: ReverseGeocoder | None = None,
        phone_backfiller: PhoneBackfiller | None = None,
        metrics: InMemoryGatewayMetricsCollector | None = None,
        max_results: int = 30,
        default_radius_km: float = 5.0,
        clock: Callable[[], datetime] = now_kst,
    ) -> None:
        self._chain_factory = chain_factory
        self._region_table = region_table
        self._geocoder = geocoder
        self._phone_backfiller = phone_backfiller
        self._metrics = metrics
        self._max_results = max_results
        self._default_radius_km = default_radius_km
        self._clock = clock

    async def find_facilities(self, query: FacilityQuery) -> FacilitySearchResult:
        point = self._validate(query)
        region_query = query.region_query
        region = self._region_table.resolve(region_query) if region_query else None

        address = None
        if point is not None and self._geocoder is not None:
            address, reverse_region = await self._reverse_geocode(point, query.mode, region)
            if region is None:
                region = reverse_region

        request = SourceRequest(
            mode=query.mode,
            point=point,
            radius_km=query.radius_km or self._default_radius_km,
            region=region,
            num_of_rows=UPSTREAM_PAGE_SIZE,
        )
        chain = self._chain_factory(query.mode)
        try:
            chain_result = await chain.run(request, accept=lambda record: self._category_allowed(record, query))
        except NoDataAvailable as exc:
            if not exc.only_empty_results:
                raise
            logger.info("facility_search_empty", extra={"mode": query.mode.value, "attempts": exc.details})
            return FacilitySearchResult(
                facilities=[],
                source=None,
                address=address,
                attempts=[attempt.summary() for attempt in exc.attempts],
            )

        records = self._with_distance(chain_result.records, point, query.radius_km)
        records = self._with_derived_fields(records)
        if query.department:
            records = [record for record in records if record.derived_department == query.department]
        records = self._sorted(records, query.sort)

        limit = min(query.num_of_rows or self._max_results, self._max_results)
        records = records[:limit]
        if self._phone_backfiller is not None:
            records = await self._phone_backfiller.backfill(records)

        if self._metrics:
            self._metrics.add_returned_records(len(records))
        logger.info(
            "facility_search_completed",
            extra={"mode": query.mode.value, "source": chain_result.source, "count": len(records)},
        )
        return FacilitySearchResult(
            facilities=records,
            source=chain_result.source,
            address=address,
            attempts=[attempt.summary() for attempt in chain_result.attempts],
        )

    @staticmethod
    def _validate(query: FacilityQuery) -> GeoPoint | None:
        if (query.lat is None) != (query.lng is None):
            raise InvalidInput("lat and lng must be given together")
        point = query.point
        if point is not None and not point.is_valid():
            raise InvalidInput("lat/lng out of range")
        if point is None and query.mode is SearchMode.HOSPITAL:
            raise InvalidInput("lat and lng are required for hospital search")
        if point is None and not query.region1:
            raise InvalidInput("either lat/lng or region1 is required")
        if query.radius_km is not None and query.radius_km <= 0:
            raise InvalidInput("radius_km must be positive")
        return point

    async def _reverse_geocode(
        self,
        point: GeoPoint,
        mode: SearchMode,
        region: ResolvedRegion | None,
    ) -> tuple[str | None, ResolvedRegion | None]:
        try:
            resolved = await self._geocoder.reverse_geocode(point.lat, point.lng)
        except (UpstreamError, NotFound, InvalidInput) as exc:
            logger.warning("reverse_geocode_degraded", extra={"error_code": exc.code, "error_message": exc.message})
            return None, None
        address = resolved.address or None
        if mode is not SearchMode.EMERGENCY or region is not None or not resolved.region1:
            return address, None
        try:
            return address, self._region_table.resolve(
                RegionQuery(region1=resolved.region1, region2=resolved.region2 or None)
            )
        except UnsupportedRegion:
            logger.info("reverse_geocode_region_unmapped", extra={"region1": resolved.region1})
            return address, None

    @staticmethod
    def _category_allowed(record: FacilityRecord, query: FacilityQuery) -> bool:
        if record.category is FacilityCategory.PHARMACY:
            return False
        if query.mode is SearchMode.EMERGENCY:
            return record.category is FacilityCategory.EMERGENCY_ROOM
        if record.category is FacilityCategory.EMERGENCY_ROOM:
            return query.include_emergency
        return True

    @staticmethod
    def _with_distance(
        records: list[FacilityRecord],
        reference: GeoPoint | None,
        radius_km: float | None,
    ) -> list[FacilityRecord]:
        if reference is None:
            return records
        enriched: list[FacilityRecord] = []
        for record in records:
            coordinates = record.coordinates
            if coordinates is None or not coordinates.is_valid():
                coordinates = reference
            distance = round(haversine_distance_km(reference, coordinates), 3)
            if radius_km is not None and distance > radius_km:
                continue
            enriched.append(replace(record, coordinates=coordinates, derived_distance_km=distance))
        return enriched

    def _with_derived_fields(self, records: list[FacilityRecord]) -> list[FacilityRecord]:
        now = self._clock()
        enriched: list[FacilityRecord] = []
        for record in records:
            hours = record.operating_hours
            status = evaluate_operating_status(
                hours.start_time if hours else None,
                hours.end_time if hours else None,
                now=now,
            )
            enriched.append(
                replace(
                    record,
                    derived_is_open=status.is_open,
                    closing_time=status.closing_time,
                    derived_department=classify_department(record.name),
                )
            )
        return enriched

    @staticmethod
    def _sorted(records: list[FacilityRecord], sort: str) -> list[FacilityRecord]:
        def distance_key(record: FacilityRecord) -> float:
            if record.derived_distance_km is None:
                return float("inf")
            return record.derived_distance_km

        if sort == "open":
            return sorted(records, key=lambda record: (not record.derived_is_open, distance_key(record)))
        return sorted(records, key=distance_key)
