from __future__ import annotations

from dataclasses import dataclass

from facility_sources.core.exceptions import (
    EmptyResult,
    FinderError,
    InvalidInput,
    MisconfiguredCredentials,
    NoDataAvailable,
    NotFound,
    UnsupportedRegion,
    UpstreamRejected,
    UpstreamUnavailable,
)

_STATUS_BY_ERROR: tuple[tuple[type[FinderError], int], ...] = (
    (InvalidInput, 422),
    (NotFound, 404),
    (UnsupportedRegion, 400),
    (NoDataAvailable, 503),
    (UpstreamUnavailable, 502),
    (UpstreamRejected, 502),
    (EmptyResult, 404),
    (MisconfiguredCredentials, 500),
)


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int
    details: str | None = None


def to_api_error(exc: FinderError) -> ApiError:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return ApiError(exc.code, exc.message, status_code, details=exc.details)
    return ApiError(exc.code, exc.message, 500, details=exc.details)
