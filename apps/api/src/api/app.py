from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from devkit.config import FinderSettings
from devkit.observability import configure_otel, configure_probe_access_log_filter
from facility_sources.core.exceptions import FinderError
from facility_sources.core.prometheus_exporter import GatewayPrometheusExporter

from api.dependencies import get_gateway_metrics, get_settings
from api.errors import ApiError, to_api_error
from api.middleware import ObservabilityMiddleware
from api.observability import (
    CompositeApiMetricsCollector,
    InMemoryApiMetricsCollector,
    PrometheusApiMetricsCollector,
)
from api.response import error_response, success_response
from api.routers.facilities import router as facilities_router
from api.routers.geo import router as geo_router
from api.routers.regions import router as regions_router
from api.routers.symptoms import router as symptoms_router

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("PUBLIC_DATA_API_KEY", "KAKAO_REST_API_KEY")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="ER Finder API", version="0.1.0")
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()
    app.state.api_metrics = InMemoryApiMetricsCollector()
    app.state.prom_metrics = PrometheusApiMetricsCollector()
    app.state.composite_metrics = CompositeApiMetricsCollector(
        [app.state.api_metrics, app.state.prom_metrics]
    )
    app.state.gateway_exporter = GatewayPrometheusExporter()
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)
    app.include_router(facilities_router)
    app.include_router(geo_router)
    app.include_router(regions_router)
    app.include_router(symptoms_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz(settings: FinderSettings = Depends(get_settings)) -> dict:
        missing = settings.missing_keys(*REQUIRED_KEYS)
        status = "degraded" if missing else "ready"
        return success_response({"status": status, "missing_keys": missing}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render() + app.state.gateway_exporter.render(get_gateway_metrics())
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(FinderError)
    async def handle_finder_error(request: Request, exc: FinderError) -> JSONResponse:
        api_error = to_api_error(exc)
        if api_error.status_code >= 500:
            logger.error(
                "request_failed",
                extra={"path": request.url.path, "error_code": exc.code, "details": exc.details},
            )
        return JSONResponse(
            status_code=api_error.status_code,
            content=error_response(api_error.code, api_error.message, api_error.details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=422,
            content=error_response("VALIDATION_ERROR", message),
        )

    return app


app = create_app()
