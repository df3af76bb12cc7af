from __future__ import annotations

import asyncio
import logging
from typing import Any

from facility_sources.clients.public_data import PublicDataClient
from facility_sources.core.exceptions import EmptyResult, UnsupportedRegion, UpstreamError
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import (
    BedInfo,
    FacilityCategory,
    FacilityRecord,
    ResolvedRegion,
    SearchMode,
    SourceRequest,
    surrogate_id,
)
from facility_sources.providers.base import FacilitySourceAdapter
from facility_sources.providers.fields import format_board_timestamp, pick, to_int, to_point, to_str
from facility_sources.rules.matching import match_by_code_then_name

logger = logging.getLogger(__name__)

FACILITY_LIST_PATH = "/B552657/ErmctInfoInqireService/getEgytListInfoInqire"
BED_STATUS_PATH = "/B552657/ErmctInfoInqireService/getEmrrmRltmUsefulSckbdInfoInqire"

BED_AVAILABLE = "가능"
BED_UNAVAILABLE = "불가"


def to_bed_info(row: dict[str, Any]) -> BedInfo:
    # hvec is the count of free ER beds and goes negative when the ER is over capacity.
    available = to_int(row.get("hvec"))
    return BedInfo(
        total_beds=to_int(pick(row, "hvs01", "hperyn")),
        available_beds=available,
        status=BED_AVAILABLE if available > 0 else BED_UNAVAILABLE,
        last_updated=format_board_timestamp(row.get("hvidate")),
    )


class RegionalBoardAdapter(FacilitySourceAdapter):
    """Emergency rooms of one region joined with their real-time bed board."""

    name = "regional_board"

    def __init__(
        self,
        client: PublicDataClient,
        min_match_confidence: float = 0.6,
        metrics: InMemoryGatewayMetricsCollector | None = None,
    ) -> None:
        self._client = client
        self._min_match_confidence = min_match_confidence
        self._metrics = metrics

    def supports(self, request: SourceRequest) -> bool:
        return request.mode is SearchMode.EMERGENCY and request.region is not None

    async def fetch(self, request: SourceRequest) -> list[FacilityRecord]:
        if request.region is None:
            raise UnsupportedRegion("regional board requires a resolved region")
        params = self._region_params(request.region, request.num_of_rows)
        facility_rows, bed_rows = await asyncio.gather(
            self._client.fetch_items(FACILITY_LIST_PATH, params),
            self._fetch_bed_rows(params),
        )
        if not facility_rows:
            raise EmptyResult(f"no emergency rooms listed for {request.region.long_name}")
        return self._merge(facility_rows, bed_rows)

    # E-Gen boards are keyed by the STAGE1/STAGE2 names, not by the admin or HIRA region codes.
    @staticmethod
    def _region_params(region: ResolvedRegion, num_of_rows: int) -> dict[str, Any]:
        params: dict[str, Any] = {"STAGE1": region.long_name, "pageNo": 1, "numOfRows": num_of_rows}
        if region.district:
            params["STAGE2"] = region.district
        return params

    async def _fetch_bed_rows(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            return await self._client.fetch_items(BED_STATUS_PATH, params)
        except UpstreamError as exc:
            logger.warning(
                "bed_board_unavailable",
                extra={"adapter": self.name, "error_code": exc.code, "stage1": params.get("STAGE1")},
            )
            if self._metrics:
                self._metrics.increment_enrichment_failure("bed_info")
            return []

    def _merge(self, facility_rows: list[dict[str, Any]], bed_rows: list[dict[str, Any]]) -> list[FacilityRecord]:
        beds_by_code = {to_str(row.get("hpid")): row for row in bed_rows if to_str(row.get("hpid"))}
        # Name matching only sees bed rows no listed facility claims by hpid, and each row joins once.
        facility_hpids = {to_str(row.get("hpid")) for row in facility_rows} - {""}
        unclaimed = [row for row in bed_rows if to_str(row.get("hpid")) not in facility_hpids]
        name_matched: set[int] = set()
        records: list[FacilityRecord] = []
        for row in facility_rows:
            hpid = to_str(row.get("hpid"))
            name = to_str(row.get("dutyName"))
            bed_info = None
            confidence = None
            match = match_by_code_then_name(
                code=hpid,
                name=name,
                by_code=beds_by_code,
                candidates=[bed for bed in unclaimed if id(bed) not in name_matched],
                name_of=lambda bed: to_str(bed.get("dutyName")),
            )
            if match is not None and match.confidence >= self._min_match_confidence:
                bed_info = to_bed_info(match.item)
                confidence = match.confidence
                if match.method == "name":
                    name_matched.add(id(match.item))
            elif match is not None:
                logger.info(
                    "bed_match_rejected",
                    extra={"hpid": hpid, "name": name, "confidence": round(match.confidence, 3)},
                )
            phone = to_str(pick(row, "dutyTel3", "dutyTel1")) or None
            if phone is None and match is not None and bed_info is not None:
                phone = to_str(match.item.get("dutyTel3")) or None
            records.append(
                FacilityRecord(
                    id=hpid or surrogate_id(),
                    name=name,
                    address=to_str(row.get("dutyAddr")),
                    coordinates=to_point(pick(row, "wgs84Lat", "latitude"), pick(row, "wgs84Lon", "longitude")),
                    category=FacilityCategory.EMERGENCY_ROOM,
                    source=self.name,
                    phone=phone,
                    bed_info=bed_info,
                    bed_match_confidence=confidence,
                )
            )
        return records
