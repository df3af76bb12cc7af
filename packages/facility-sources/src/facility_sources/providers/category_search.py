from __future__ import annotations

import logging
from typing import Any

from facility_sources.clients.kakao_local import MAX_PAGE_SIZE, KakaoLocalClient
from facility_sources.core.exceptions import EmptyResult, InvalidInput
from facility_sources.core.models import (
    FacilityCategory,
    FacilityRecord,
    SearchMode,
    SourceRequest,
    surrogate_id,
)
from facility_sources.providers.base import FacilitySourceAdapter
from facility_sources.providers.fields import to_point, to_str
from facility_sources.rules.categories import classify_map_place
from facility_sources.rules.matching import name_similarity
from geo_engine.models import GeoPoint

logger = logging.getLogger(__name__)

HOSPITAL_CATEGORY_CODE = "HP8"
EMERGENCY_KEYWORD = "응급실"
DEFAULT_MAX_PAGES = 5
PHONE_LOOKUP_RADIUS_KM = 2.0


class CategorySearchAdapter(FacilitySourceAdapter):
    """Map-provider place search; the last resort of every chain."""

    def __init__(
        self,
        client: KakaoLocalClient,
        mode: SearchMode = SearchMode.HOSPITAL,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self._client = client
        self._mode = mode
        self._max_pages = max_pages
        self.name = "keyword_search" if mode is SearchMode.EMERGENCY else "category_search"

    def supports(self, request: SourceRequest) -> bool:
        return request.point is not None

    async def fetch(self, request: SourceRequest) -> list[FacilityRecord]:
        if request.point is None:
            raise InvalidInput("place search requires coordinates")
        documents = await self._collect(request.point, request.radius_km, request.num_of_rows)
        if not documents:
            raise EmptyResult(f"no places within {request.radius_km}km")
        return [self._to_record(document) for document in documents]

    async def _collect(self, point: GeoPoint, radius_km: float, limit: int) -> list[dict[str, Any]]:
        documents: list[dict[str, Any]] = []
        for page in range(1, self._max_pages + 1):
            if self._mode is SearchMode.EMERGENCY:
                batch, is_end = await self._client.search_keyword(
                    EMERGENCY_KEYWORD, point=point, radius_km=radius_km, page=page, size=MAX_PAGE_SIZE
                )
            else:
                batch, is_end = await self._client.search_category(
                    HOSPITAL_CATEGORY_CODE, point=point, radius_km=radius_km, page=page, size=MAX_PAGE_SIZE
                )
            documents.extend(batch)
            if is_end or not batch or len(documents) >= limit:
                break
        return documents[:limit]

    def _to_record(self, document: dict[str, Any]) -> FacilityRecord:
        name = to_str(document.get("place_name"))
        if self._mode is SearchMode.EMERGENCY:
            category = FacilityCategory.EMERGENCY_ROOM
        else:
            category = classify_map_place(name, to_str(document.get("category_name")))
        return FacilityRecord(
            id=to_str(document.get("id")) or surrogate_id(),
            name=name,
            address=to_str(document.get("road_address_name")) or to_str(document.get("address_name")),
            coordinates=to_point(document.get("y"), document.get("x")),
            category=category,
            source=self.name,
            phone=to_str(document.get("phone")) or None,
        )

    async def lookup_phone(self, name: str, near: GeoPoint | None) -> str | None:
        """Phone of the best-named place near ``near``; ``None`` when nothing matches."""
        documents, _ = await self._client.search_keyword(
            name,
            point=near,
            radius_km=PHONE_LOOKUP_RADIUS_KM if near is not None else None,
            size=5,
        )
        best_phone = None
        best_score = 0.0
        for document in documents:
            phone = to_str(document.get("phone"))
            if not phone:
                continue
            score = name_similarity(name, to_str(document.get("place_name")))
            if score > best_score:
                best_phone, best_score = phone, score
        return best_phone
