from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from facility_sources.core.exceptions import UpstreamError
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import FacilityRecord
from geo_engine.models import GeoPoint

logger = logging.getLogger(__name__)

PhoneLookup = Callable[[str, GeoPoint | None], Awaitable[str | None]]


class PhoneBackfiller:
    """Fills missing phone numbers with bounded concurrency; a failed lookup leaves ``None``."""

    def __init__(
        self,
        lookup: PhoneLookup,
        concurrency: int = 5,
        metrics: InMemoryGatewayMetricsCollector | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._lookup = lookup
        self._concurrency = concurrency
        self._metrics = metrics

    async def backfill(self, records: list[FacilityRecord]) -> list[FacilityRecord]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _fill(record: FacilityRecord) -> FacilityRecord:
            if record.phone:
                return record
            async with semaphore:
                try:
                    phone = await self._lookup(record.name, record.coordinates)
                except UpstreamError as exc:
                    logger.info(
                        "phone_backfill_failed",
                        extra={"facility_id": record.id, "error_code": exc.code},
                    )
                    if self._metrics:
                        self._metrics.increment_enrichment_failure("phone")
                    return record
            return replace(record, phone=phone) if phone else record

        return list(await asyncio.gather(*(_fill(record) for record in records)))
