from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from devkit.timezone import configure_kst_timezone


class FinderSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "er-finder-api"

    PUBLIC_DATA_API_KEY: str | None = None
    KAKAO_REST_API_KEY: str | None = None
    AI_GATEWAY_API_KEY: str | None = None

    PUBLIC_DATA_BASE_URL: str = "https://apis.data.go.kr"
    KAKAO_BASE_URL: str = "https://dapi.kakao.com"
    AI_GATEWAY_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    AI_MODEL: str = "google/gemini-2.5-flash"

    UPSTREAM_CONNECT_TIMEOUT_SECONDS: float = 2.0
    UPSTREAM_READ_TIMEOUT_SECONDS: float = 8.0
    AGGREGATION_TIMEOUT_SECONDS: float = 20.0

    MAX_RESULTS: int = 30
    DEFAULT_RADIUS_KM: float = 5.0
    ENRICHMENT_CONCURRENCY: int = 5
    MIN_MATCH_CONFIDENCE: float = 0.6

    def missing_keys(self, *names: str) -> list[str]:
        missing: list[str] = []
        for name in names:
            value = getattr(self, name, None)
            if value is None or not str(value).strip():
                missing.append(name)
        return missing


def load_settings(service_name: str = "er-finder-api") -> FinderSettings:
    configure_kst_timezone()
    return FinderSettings(SERVICE_NAME=service_name)
