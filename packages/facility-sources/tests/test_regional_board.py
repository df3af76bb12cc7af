from __future__ import annotations

import httpx
import pytest

from facility_sources.clients.public_data import PublicDataClient
from facility_sources.core.exceptions import EmptyResult, UpstreamRejected
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import FacilityCategory, ResolvedRegion, SearchMode, SourceRequest
from facility_sources.providers.regional_board import (
    BED_STATUS_PATH,
    FACILITY_LIST_PATH,
    RegionalBoardAdapter,
    to_bed_info,
)
from geo_engine.models import GeoPoint

SEOUL = ResolvedRegion(long_name="서울특별시", short_name="서울", admin_code="11", hira_code="110000", district="종로구")


def envelope(rows: list[dict]) -> dict:
    return {"response": {"header": {"resultCode": "00"}, "body": {"items": {"item": rows} if rows else ""}}}


FACILITIES = [
    {
        "hpid": "A1100010",
        "dutyName": "서울대학교병원",
        "dutyAddr": "서울특별시 종로구 대학로 101",
        "dutyTel3": "02-2072-2473",
        "wgs84Lat": "37.5796",
        "wgs84Lon": "126.9990",
    },
    {
        "hpid": "A1100017",
        "dutyName": "강북삼성병원",
        "dutyAddr": "서울특별시 종로구 새문안로 29",
        "dutyTel1": "02-2001-2001",
        "wgs84Lat": "37.5684",
        "wgs84Lon": "126.9670",
    },
]


def build_adapter(handler, metrics: InMemoryGatewayMetricsCollector | None = None) -> RegionalBoardAdapter:
    transport = httpx.MockTransport(handler)
    client = PublicDataClient(
        service_key="key",
        base_url="https://public.example.com",
        client_factory=lambda: httpx.AsyncClient(transport=transport),
    )
    return RegionalBoardAdapter(client, min_match_confidence=0.6, metrics=metrics)


def request() -> SourceRequest:
    return SourceRequest(mode=SearchMode.EMERGENCY, region=SEOUL, point=GeoPoint(lat=37.5665, lng=126.978))


def test_bed_info_keeps_overcrowded_counts() -> None:
    info = to_bed_info({"hvec": "-3", "hvs01": "20", "hvidate": "20260105142000"})

    assert info.available_beds == -3
    assert info.total_beds == 20
    assert info.status == "불가"
    assert info.last_updated == "2026-01-05 14:20:00"


def test_bed_info_defaults_absent_numbers_to_zero() -> None:
    info = to_bed_info({"hvec": None})

    assert info.available_beds == 0
    assert info.total_beds == 0


@pytest.mark.asyncio
async def test_joins_beds_by_code_then_name() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["STAGE1"] == "서울특별시"
        assert request.url.params["STAGE2"] == "종로구"
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(200, json=envelope(FACILITIES))
        assert request.url.path == BED_STATUS_PATH
        return httpx.Response(
            200,
            json=envelope(
                [
                    {"hpid": "A1100010", "dutyName": "서울대학교병원", "hvec": "4", "hvs01": "30", "hvidate": "20260105142000"},
                    {"hpid": "ZZZ", "dutyName": "강북삼성병원 응급실", "hvec": "2", "hvs01": "12"},
                ]
            ),
        )

    records = await build_adapter(handler).fetch(request())

    assert [record.id for record in records] == ["A1100010", "A1100017"]
    first, second = records
    assert first.category is FacilityCategory.EMERGENCY_ROOM
    assert first.bed_info.available_beds == 4
    assert first.bed_match_confidence == 1.0
    assert first.phone == "02-2072-2473"
    assert first.coordinates == GeoPoint(lat=37.5796, lng=126.999)
    assert second.bed_info.available_beds == 2
    assert second.bed_match_confidence == 1.0
    assert second.phone == "02-2001-2001"
    assert all(record.source == "regional_board" for record in records)


@pytest.mark.asyncio
async def test_low_confidence_name_match_is_omitted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(200, json=envelope([{"hpid": "A1", "dutyName": "한빛병원"}]))
        return httpx.Response(200, json=envelope([{"hpid": "B1", "dutyName": "한빛병원분당제2분원", "hvec": "1"}]))

    records = await build_adapter(handler).fetch(request())

    assert records[0].bed_info is None
    assert records[0].bed_match_confidence is None


@pytest.mark.asyncio
async def test_bed_board_failure_degrades_to_records_without_beds() -> None:
    metrics = InMemoryGatewayMetricsCollector()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(200, json=envelope(FACILITIES))
        return httpx.Response(500, text="board down")

    records = await build_adapter(handler, metrics=metrics).fetch(request())

    assert len(records) == 2
    assert all(record.bed_info is None for record in records)
    assert metrics.enrichment_failures_total["bed_info"] == 1


@pytest.mark.asyncio
async def test_empty_facility_list_is_empty_result() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=envelope([]))

    with pytest.raises(EmptyResult):
        await build_adapter(handler).fetch(request())


@pytest.mark.asyncio
async def test_facility_list_rejection_propagates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(401, text="unauthorized")
        return httpx.Response(200, json=envelope([]))

    with pytest.raises(UpstreamRejected):
        await build_adapter(handler).fetch(request())


def test_requires_emergency_mode_and_region() -> None:
    adapter = build_adapter(lambda _: httpx.Response(200, json=envelope([])))

    assert adapter.supports(request()) is True
    assert adapter.supports(SourceRequest(mode=SearchMode.EMERGENCY, point=GeoPoint(lat=37.5, lng=127.0))) is False
    assert adapter.supports(SourceRequest(mode=SearchMode.HOSPITAL, region=SEOUL)) is False


@pytest.mark.asyncio
async def test_bed_row_claimed_by_hpid_is_not_name_matched_elsewhere() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(
                200,
                json=envelope([{"hpid": "X1", "dutyName": "서울병원"}, {"hpid": "Y1", "dutyName": "서울병원강남"}]),
            )
        return httpx.Response(200, json=envelope([{"hpid": "Y1", "dutyName": "서울병원강남", "hvec": "7", "hvs01": "20"}]))

    records = await build_adapter(handler).fetch(request())

    assert records[0].bed_info is None
    assert records[0].bed_match_confidence is None
    assert records[1].bed_info.available_beds == 7
    assert records[1].bed_match_confidence == 1.0


@pytest.mark.asyncio
async def test_bed_row_joins_at_most_one_facility_by_name() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == FACILITY_LIST_PATH:
            return httpx.Response(
                200,
                json=envelope([{"hpid": "A1", "dutyName": "한빛병원"}, {"hpid": "A2", "dutyName": "한빛병원 응급실"}]),
            )
        return httpx.Response(200, json=envelope([{"hpid": "ZZZ", "dutyName": "한빛병원", "hvec": "3"}]))

    records = await build_adapter(handler).fetch(request())

    assert records[0].bed_info.available_beds == 3
    assert records[1].bed_info is None
