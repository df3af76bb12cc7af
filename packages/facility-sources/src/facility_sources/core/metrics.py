from __future__ import annotations

from collections import defaultdict


class InMemoryGatewayMetricsCollector:
    def __init__(self) -> None:
        self.adapter_attempts_total: dict[tuple[str, str], int] = defaultdict(int)
        self.provider_http_errors_total: dict[tuple[str, str], int] = defaultdict(int)
        self.enrichment_failures_total: dict[str, int] = defaultdict(int)
        self.chain_exhausted_total = 0
        self.returned_records_total = 0

    def record_attempt(self, adapter: str, outcome: str) -> None:
        self.adapter_attempts_total[(adapter, outcome)] += 1

    def increment_provider_http_error(self, provider: str, code: int | str) -> None:
        self.provider_http_errors_total[(provider, str(code))] += 1

    def increment_enrichment_failure(self, field: str) -> None:
        self.enrichment_failures_total[field] += 1

    def increment_chain_exhausted(self) -> None:
        self.chain_exhausted_total += 1

    def add_returned_records(self, count: int) -> None:
        if count > 0:
            self.returned_records_total += count
