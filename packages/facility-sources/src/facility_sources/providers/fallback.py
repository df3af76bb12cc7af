from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from facility_sources.core.exceptions import (
    AdapterAttempt,
    EmptyResult,
    NoDataAvailable,
    UnsupportedRegion,
    UpstreamError,
)
from facility_sources.core.metrics import InMemoryGatewayMetricsCollector
from facility_sources.core.models import FacilityRecord, SourceRequest
from facility_sources.providers.base import FacilitySourceAdapter

logger = logging.getLogger(__name__)


@dataclass
class ChainResult:
    source: str
    records: list[FacilityRecord]
    attempts: list[AdapterAttempt] = field(default_factory=list)


class FallbackChain:
    """Try adapters in priority order until one yields records.

    Upstream failures are collected as attempts and the next adapter runs. An
    adapter whose records are empty, or become empty once ``accept`` is applied,
    counts as an ``EMPTY_RESULT`` attempt.
    ``MisconfiguredCredentials`` and other non-upstream errors propagate at once.
    """

    def __init__(
        self,
        adapters: list[FacilitySourceAdapter],
        metrics: InMemoryGatewayMetricsCollector | None = None,
    ) -> None:
        self._adapters = list(adapters)
        self._metrics = metrics

    @property
    def adapter_names(self) -> list[str]:
        return [adapter.name for adapter in self._adapters]

    async def run(
        self,
        request: SourceRequest,
        accept: Callable[[FacilityRecord], bool] | None = None,
    ) -> ChainResult:
        attempts: list[AdapterAttempt] = []
        for adapter in self._adapters:
            if not adapter.supports(request):
                logger.debug("adapter_skipped", extra={"adapter": adapter.name, "mode": request.mode.value})
                continue
            try:
                records = await adapter.fetch(request)
            except (UpstreamError, UnsupportedRegion) as exc:
                self._fail(attempts, adapter.name, exc)
                continue
            if accept is not None:
                records = [record for record in records if accept(record)]
            if not records:
                self._fail(attempts, adapter.name, EmptyResult(f"{adapter.name} returned no usable records"))
                continue
            self._record(adapter.name, "success")
            return ChainResult(source=adapter.name, records=records, attempts=attempts)

        if self._metrics:
            self._metrics.increment_chain_exhausted()
        logger.error(
            "fallback_chain_exhausted",
            extra={"mode": request.mode.value, "attempts": [attempt.summary() for attempt in attempts]},
        )
        raise NoDataAvailable(attempts)

    def _fail(self, attempts: list[AdapterAttempt], adapter: str, exc: UpstreamError | UnsupportedRegion) -> None:
        attempts.append(AdapterAttempt(adapter=adapter, error_code=exc.code, detail=exc.details or exc.message))
        self._record(adapter, exc.code)
        logger.warning(
            "adapter_attempt_failed",
            extra={"adapter": adapter, "error_code": exc.code, "error_message": exc.message},
        )

    def _record(self, adapter: str, outcome: str) -> None:
        if self._metrics:
            self._metrics.record_attempt(adapter=adapter, outcome=outcome)
