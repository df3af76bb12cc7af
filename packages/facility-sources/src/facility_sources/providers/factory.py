from __future__ import annotations

from facility_sources.clients.kakao_local import KakaoLocalClient
from facility_sources.clients.public_data import PublicDataClient
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import SearchMode
from facility_sources.providers.base import FacilitySourceAdapter
from facility_sources.providers.category_search import CategorySearchAdapter
from facility_sources.providers.fallback import FallbackChain
from facility_sources.providers.radius_search import RadiusSearchAdapter
from facility_sources.providers.regional_board import RegionalBoardAdapter


def build_adapters(
    mode: SearchMode,
    public_data: PublicDataClient,
    kakao: KakaoLocalClient,
    metrics: InMemoryGatewayMetricsCollector | None = None,
    min_match_confidence: float = 0.6,
) -> list[FacilitySourceAdapter]:
    if mode is SearchMode.EMERGENCY:
        return [
            RegionalBoardAdapter(public_data, min_match_confidence=min_match_confidence, metrics=metrics),
            RadiusSearchAdapter(public_data, mode=SearchMode.EMERGENCY),
            CategorySearchAdapter(kakao, mode=SearchMode.EMERGENCY),
        ]
    if mode is SearchMode.HOSPITAL:
        return [
            RadiusSearchAdapter(public_data, mode=SearchMode.HOSPITAL),
            CategorySearchAdapter(kakao, mode=SearchMode.HOSPITAL),
        ]
    raise ValueError(f"Unsupported search mode: {mode}")


def build_fallback_chain(
    mode: SearchMode,
    public_data: PublicDataClient,
    kakao: KakaoLocalClient,
    metrics: InMemoryGatewayMetricsCollector | None = None,
    min_match_confidence: float = 0.6,
) -> FallbackChain:
    adapters = build_adapters(mode, public_data, kakao, metrics=metrics, min_match_confidence=min_match_confidence)
    return FallbackChain(adapters, metrics=metrics)
