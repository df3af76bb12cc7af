from __future__ import annotations

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from facility_sources.core.metrics import InMemoryGatewayMetricsCollector


class GatewayPrometheusExporter:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._adapter_attempts = Gauge(
            "gateway_adapter_attempts_total",
            "Upstream adapter attempts grouped by adapter and outcome",
            labelnames=("adapter", "outcome"),
            registry=self._registry,
        )
        self._http_errors = Gauge(
            "gateway_provider_http_errors_total",
            "Provider HTTP errors grouped by provider and code",
            labelnames=("provider", "code"),
            registry=self._registry,
        )
        self._enrichment_failures = Gauge(
            "gateway_enrichment_failures_total",
            "Per-record enrichment failures grouped by field",
            labelnames=("field",),
            registry=self._registry,
        )
        self._chain_exhausted = Gauge(
            "gateway_fallback_exhausted_total",
            "Queries for which every adapter failed",
            registry=self._registry,
        )
        self._returned_records = Gauge(
            "gateway_returned_records_total",
            "Facility records returned to clients",
            registry=self._registry,
        )

    def render(self, metrics: InMemoryGatewayMetricsCollector) -> str:
        for (adapter, outcome), count in metrics.adapter_attempts_total.items():
            self._adapter_attempts.labels(adapter=adapter, outcome=outcome).set(count)
        for (provider, code), count in metrics.provider_http_errors_total.items():
            self._http_errors.labels(provider=provider, code=code).set(count)
        for field, count in metrics.enrichment_failures_total.items():
            self._enrichment_failures.labels(field=field).set(count)
        self._chain_exhausted.set(metrics.chain_exhausted_total)
        self._returned_records.set(metrics.returned_records_total)
        return generate_latest(self._registry).decode("utf-8")
