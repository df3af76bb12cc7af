from __future__ import annotations

import httpx
import pytest

from facility_sources.clients.kakao_local import KakaoLocalClient
from facility_sources.core.exceptions import InvalidInput, NotFound, UpstreamUnavailable

from api.services.geo_service import GeoService


def build_service(handler) -> GeoService:
    transport = httpx.MockTransport(handler)
    client = KakaoLocalClient(
        api_key="test-key",
        base_url="https://kakao.example.com",
        client_factory=lambda: httpx.AsyncClient(transport=transport),
    )
    return GeoService(kakao_client_provider=lambda: client)


@pytest.mark.asyncio
async def test_reverse_geocode_prefers_road_address() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v2/local/geo/coord2address.json"
        assert request.url.params["x"] == "126.978"
        assert request.url.params["y"] == "37.5665"
        return httpx.Response(
            200,
            json={
                "documents": [
                    {
                        "road_address": {"address_name": "서울특별시 중구 세종대로 110"},
                        "address": {
                            "address_name": "서울 중구 태평로1가 31",
                            "region_1depth_name": "서울",
                            "region_2depth_name": "중구",
                        },
                    }
                ]
            },
        )

    result = await build_service(handler).reverse_geocode(37.5665, 126.978)

    assert result.address == "서울특별시 중구 세종대로 110"
    assert result.region1 == "서울"
    assert result.region2 == "중구"


@pytest.mark.asyncio
async def test_reverse_geocode_falls_back_to_lot_address() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "documents": [
                    {
                        "road_address": None,
                        "address": {
                            "address_name": "경기 성남시 분당구 정자동 1",
                            "region_1depth_name": "경기",
                            "region_2depth_name": "성남시 분당구",
                        },
                    }
                ]
            },
        )

    result = await build_service(handler).reverse_geocode(37.36, 127.11)

    assert result.address == "경기 성남시 분당구 정자동 1"
    assert result.region1 == "경기"


@pytest.mark.asyncio
async def test_reverse_geocode_without_documents_is_unavailable() -> None:
    service = build_service(lambda _: httpx.Response(200, json={"documents": []}))

    with pytest.raises(UpstreamUnavailable):
        await service.reverse_geocode(37.5, 127.0)


@pytest.mark.asyncio
async def test_forward_geocode_returns_coordinates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["query"] == "세종대로 110"
        return httpx.Response(
            200,
            json={
                "documents": [
                    {
                        "address_name": "서울 중구 태평로1가 31",
                        "x": "126.977829",
                        "y": "37.566535",
                        "road_address": {"address_name": "서울 중구 세종대로 110"},
                    }
                ]
            },
        )

    result = await build_service(handler).forward_geocode("  세종대로 110 ")

    assert result.lat == pytest.approx(37.566535)
    assert result.lng == pytest.approx(126.977829)
    assert result.normalized_address == "서울 중구 세종대로 110"


@pytest.mark.asyncio
async def test_forward_geocode_rejects_blank_input() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("provider must not be called")

    with pytest.raises(InvalidInput):
        await build_service(handler).forward_geocode("   ")


@pytest.mark.asyncio
async def test_forward_geocode_without_match_is_not_found() -> None:
    service = build_service(lambda _: httpx.Response(200, json={"documents": [], "meta": {"total_count": 0}}))

    with pytest.raises(NotFound):
        await service.forward_geocode("없는주소 999")


@pytest.mark.asyncio
async def test_distance_km_is_rounded_haversine() -> None:
    service = build_service(lambda _: httpx.Response(500))

    result = await service.distance_km(37.5665, 126.9780, 37.4979, 127.0276)

    assert result.distance_km == pytest.approx(8.79, abs=0.05)
