from __future__ import annotations

import asyncio

import pytest

from facility_sources.core.exceptions import UpstreamUnavailable
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import FacilityCategory, FacilityRecord
from geo_engine.models import GeoPoint

from api.services.phone_backfill import PhoneBackfiller


def record(name: str, phone: str | None = None) -> FacilityRecord:
    return FacilityRecord(
        id=name,
        name=name,
        address="",
        coordinates=GeoPoint(lat=37.5, lng=127.0),
        category=FacilityCategory.CLINIC,
        source="stub",
        phone=phone,
    )


@pytest.mark.asyncio
async def test_failed_lookup_degrades_only_that_record() -> None:
    async def lookup(name: str, near: GeoPoint | None) -> str | None:
        if name == "broken":
            raise UpstreamUnavailable("kakao timeout")
        return f"tel-{name}"

    metrics = InMemoryGatewayMetricsCollector()
    backfiller = PhoneBackfiller(lookup, concurrency=2, metrics=metrics)

    filled = await backfiller.backfill([record("a"), record("broken"), record("c", phone="02-1")])

    assert [item.phone for item in filled] == ["tel-a", None, "02-1"]
    assert metrics.enrichment_failures_total["phone"] == 1


@pytest.mark.asyncio
async def test_lookup_concurrency_is_bounded() -> None:
    in_flight = 0
    peak = 0

    async def lookup(name: str, near: GeoPoint | None) -> str | None:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return None

    backfiller = PhoneBackfiller(lookup, concurrency=3)

    filled = await backfiller.backfill([record(f"r{i}") for i in range(10)])

    assert peak == 3
    assert all(item.phone is None for item in filled)


def test_concurrency_must_be_positive() -> None:
    async def lookup(name: str, near: GeoPoint | None) -> str | None:
        return None

    with pytest.raises(ValueError):
        PhoneBackfiller(lookup, concurrency=0)
