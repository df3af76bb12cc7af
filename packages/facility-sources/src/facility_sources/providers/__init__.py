from facility_sources.providers.base import FacilitySourceAdapter
from facility_sources.providers.category_search import CategorySearchAdapter
from facility_sources.providers.factory import build_adapters, build_fallback_chain
from facility_sources.providers.fallback import ChainResult, FallbackChain
from facility_sources.providers.radius_search import EndpointVariant, ParamStyle, RadiusSearchAdapter
from facility_sources.providers.regional_board import RegionalBoardAdapter

__all__ = [
    "CategorySearchAdapter",
    "ChainResult",
    "EndpointVariant",
    "FacilitySourceAdapter",
    "FallbackChain",
    "ParamStyle",
    "RadiusSearchAdapter",
    "RegionalBoardAdapter",
    "build_adapters",
    "build_fallback_chain",
]
