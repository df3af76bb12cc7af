from __future__ import annotations

import httpx
import pytest

from facility_sources.clients.public_data import PublicDataClient
from facility_sources.core.exceptions import EmptyResult, UpstreamRejected, UpstreamUnavailable
from facility_sources.core.models import FacilityCategory, SearchMode, SourceRequest
from facility_sources.providers.radius_search import (
    EMERGENCY_VARIANTS,
    HOSPITAL_VARIANTS,
    EndpointVariant,
    ParamStyle,
    RadiusSearchAdapter,
)
from geo_engine.models import GeoPoint

CITY_HALL = GeoPoint(lat=37.5665, lng=126.9780)


def envelope(rows: list[dict]) -> dict:
    return {"response": {"header": {"resultCode": "00"}, "body": {"items": {"item": rows} if rows else ""}}}


HOSPITAL_ROWS = [
    {
        "hpid": "A1",
        "dutyName": "서울내과의원",
        "dutyAddr": "서울특별시 중구",
        "dutyDivName": "의원",
        "dutyTel1": "02-111-1111",
        "latitude": 37.5670,
        "longitude": 126.9785,
        "startTime": "0900",
        "endTime": "1800",
    },
    {
        "hpid": "C2",
        "dutyName": "온누리약국",
        "dutyAddr": "서울특별시 중구",
        "latitude": 37.5668,
        "longitude": 126.9782,
    },
    {
        "hpid": "A3",
        "dutyName": "멀리있는병원",
        "dutyAddr": "경기도 수원시",
        "latitude": 37.2636,
        "longitude": 127.0286,
    },
]


def build_adapter(handler, mode: SearchMode = SearchMode.HOSPITAL, variants=None) -> RadiusSearchAdapter:
    transport = httpx.MockTransport(handler)
    client = PublicDataClient(
        service_key="key",
        base_url="https://public.example.com",
        client_factory=lambda: httpx.AsyncClient(transport=transport),
    )
    return RadiusSearchAdapter(client, mode=mode, variants=variants, retry_base_delay_seconds=0.0)


def request(mode: SearchMode = SearchMode.HOSPITAL, radius_km: float = 5.0) -> SourceRequest:
    return SourceRequest(mode=mode, point=CITY_HALL, radius_km=radius_km)


def test_variant_parameter_styles() -> None:
    upper = EndpointVariant("/p", ParamStyle.UPPER).build_params(CITY_HALL, 50)
    camel = EndpointVariant("/p", ParamStyle.CAMEL).build_params(CITY_HALL, 50)

    assert upper == {"WGS84_LON": 126.978, "WGS84_LAT": 37.5665, "pageNo": 1, "numOfRows": 50}
    assert camel == {"wgs84Lon": 126.978, "wgs84Lat": 37.5665, "pageNo": 1, "numOfRows": 50}


def test_default_variants_follow_mode() -> None:
    hospital = build_adapter(lambda _: httpx.Response(200))
    emergency = build_adapter(lambda _: httpx.Response(200), mode=SearchMode.EMERGENCY)

    assert hospital.variants == HOSPITAL_VARIANTS
    assert hospital.name == "radius_search"
    assert emergency.variants == EMERGENCY_VARIANTS
    assert emergency.name == "radius_search_emergency"


@pytest.mark.asyncio
async def test_normalizes_rows_and_filters_by_radius() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("getHsptlMdcncLcinfoInqire")
        assert request.url.params["WGS84_LON"] == "126.978"
        return httpx.Response(200, json=envelope(HOSPITAL_ROWS))

    records = await build_adapter(handler).fetch(request())

    assert [record.id for record in records] == ["A1", "C2"]
    clinic, pharmacy = records
    assert clinic.category is FacilityCategory.CLINIC
    assert clinic.phone == "02-111-1111"
    assert clinic.operating_hours.start_time == "0900"
    assert clinic.operating_hours.end_time == "1800"
    assert pharmacy.category is FacilityCategory.PHARMACY
    assert pharmacy.operating_hours is None


@pytest.mark.asyncio
async def test_moves_to_next_variant_when_first_returns_nothing() -> None:
    seen: list[tuple[str, ...]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(tuple(sorted(key for key in request.url.params.keys() if "84" in key)))
        if "WGS84_LON" in request.url.params:
            return httpx.Response(200, json=envelope([]))
        return httpx.Response(200, json=envelope(HOSPITAL_ROWS[:1]))

    records = await build_adapter(handler).fetch(request())

    assert seen == [("WGS84_LAT", "WGS84_LON"), ("wgs84Lat", "wgs84Lon")]
    assert [record.id for record in records] == ["A1"]


@pytest.mark.asyncio
async def test_transient_failures_are_retried_before_next_variant() -> None:
    calls = {"count": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, json=envelope(HOSPITAL_ROWS[:1]))

    records = await build_adapter(handler).fetch(request())

    assert calls["count"] == 2
    assert len(records) == 1


@pytest.mark.asyncio
async def test_every_variant_empty_is_empty_result() -> None:
    with pytest.raises(EmptyResult) as exc_info:
        await build_adapter(lambda _: httpx.Response(200, json=envelope([]))).fetch(request())

    assert "camel" in exc_info.value.details


@pytest.mark.asyncio
async def test_hard_failures_surface_the_last_error_kind() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "WGS84_LON" in request.url.params:
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(400, text="bad params")

    with pytest.raises(UpstreamRejected) as exc_info:
        await build_adapter(handler).fetch(request())

    assert "UpstreamUnavailable" in exc_info.value.details
    assert "UpstreamRejected" in exc_info.value.details


@pytest.mark.asyncio
async def test_unavailable_only_raises_unavailable() -> None:
    with pytest.raises(UpstreamUnavailable):
        await build_adapter(lambda _: httpx.Response(500)).fetch(request())


@pytest.mark.asyncio
async def test_rows_outside_radius_only_is_empty_result() -> None:
    with pytest.raises(EmptyResult):
        await build_adapter(lambda _: httpx.Response(200, json=envelope(HOSPITAL_ROWS[2:]))).fetch(request())


@pytest.mark.asyncio
async def test_emergency_mode_marks_every_record_as_emergency_room() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "ErmctInfoInqireService" in request.url.path
        return httpx.Response(200, json=envelope([{**HOSPITAL_ROWS[0], "dutyName": "중구보건의원"}]))

    records = await build_adapter(handler, mode=SearchMode.EMERGENCY).fetch(request(SearchMode.EMERGENCY))

    assert records[0].category is FacilityCategory.EMERGENCY_ROOM
    assert records[0].source == "radius_search_emergency"


def test_requires_coordinates() -> None:
    adapter = build_adapter(lambda _: httpx.Response(200))

    assert adapter.supports(request()) is True
    assert adapter.supports(SourceRequest(mode=SearchMode.HOSPITAL)) is False
