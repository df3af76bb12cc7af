from __future__ import annotations

from functools import lru_cache

from devkit.config import FinderSettings, load_settings
from facility_sources.clients.kakao_local import KakaoLocalClient
from facility_sources.clients.public_data import PublicDataClient
from facility_sources.clients.symptom_classifier import SymptomClassifierClient
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import SearchMode
from facility_sources.providers.category_search import CategorySearchAdapter
from facility_sources.providers.factory import build_fallback_chain
from facility_sources.providers.fallback import FallbackChain
from facility_sources.regions import RegionTable, load_region_table
from geo_engine.models import GeoPoint

from api.services.facility_service import AggregationService
from api.services.geo_service import GeoService
from api.services.phone_backfill import PhoneBackfiller

_settings = load_settings()
_gateway_metrics = InMemoryGatewayMetricsCollector()
_region_table = load_region_table()


# Clients are built on first use: a missing key raises MisconfiguredCredentials
# for that request only, and lru_cache does not memoize the failure.
@lru_cache(maxsize=1)
def _public_data_client() -> PublicDataClient:
    return PublicDataClient(
        service_key=_settings.PUBLIC_DATA_API_KEY,
        base_url=_settings.PUBLIC_DATA_BASE_URL,
        connect_timeout_seconds=_settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
        read_timeout_seconds=_settings.UPSTREAM_READ_TIMEOUT_SECONDS,
        metrics=_gateway_metrics,
    )


@lru_cache(maxsize=1)
def _kakao_client() -> KakaoLocalClient:
    return KakaoLocalClient(
        api_key=_settings.KAKAO_REST_API_KEY,
        base_url=_settings.KAKAO_BASE_URL,
        connect_timeout_seconds=_settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
        read_timeout_seconds=_settings.UPSTREAM_READ_TIMEOUT_SECONDS,
        metrics=_gateway_metrics,
    )


@lru_cache(maxsize=1)
def _symptom_classifier() -> SymptomClassifierClient:
    return SymptomClassifierClient(
        api_key=_settings.AI_GATEWAY_API_KEY,
        base_url=_settings.AI_GATEWAY_BASE_URL,
        model=_settings.AI_MODEL,
        connect_timeout_seconds=_settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
        metrics=_gateway_metrics,
    )


def _build_chain(mode: SearchMode) -> FallbackChain:
    return build_fallback_chain(
        mode,
        public_data=_public_data_client(),
        kakao=_kakao_client(),
        metrics=_gateway_metrics,
        min_match_confidence=_settings.MIN_MATCH_CONFIDENCE,
    )


async def _lookup_phone(name: str, near: GeoPoint | None) -> str | None:
    return await CategorySearchAdapter(_kakao_client()).lookup_phone(name, near)


_geo_service = GeoService(kakao_client_provider=_kakao_client)
_aggregation_service = AggregationService(
    chain_factory=_build_chain,
    region_table=_region_table,
    geocoder=_geo_service,
    phone_backfiller=PhoneBackfiller(
        _lookup_phone,
        concurrency=_settings.ENRICHMENT_CONCURRENCY,
        metrics=_gateway_metrics,
    ),
    metrics=_gateway_metrics,
    max_results=_settings.MAX_RESULTS,
    default_radius_km=_settings.DEFAULT_RADIUS_KM,
)


def get_settings() -> FinderSettings:
    return _settings


def get_gateway_metrics() -> InMemoryGatewayMetricsCollector:
    return _gateway_metrics


def get_region_table() -> RegionTable:
    return _region_table


def get_geo_service() -> GeoService:
    return _geo_service


def get_aggregation_service() -> AggregationService:
    return _aggregation_service


def get_symptom_classifier() -> SymptomClassifierClient:
    return _symptom_classifier()
