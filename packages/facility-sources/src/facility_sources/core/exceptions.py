from __future__ import annotations

from dataclasses import dataclass


class FinderError(Exception):
    """Base error for facility lookups."""

    code = "FINDER_ERROR"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInput(FinderError):
    """Raised when required query fields are missing or malformed."""

    code = "INVALID_INPUT"


class NotFound(FinderError):
    """Raised when geocoding yields zero results."""

    code = "NOT_FOUND"


class MisconfiguredCredentials(FinderError):
    """Raised when a required API key is absent. Never retried."""

    code = "MISCONFIGURED_CREDENTIALS"


class UnsupportedRegion(FinderError):
    """Raised when a region name has no code mapping."""

    code = "UNSUPPORTED_REGION"


class UpstreamError(FinderError):
    """Base for failures that move the fallback chain to its next adapter."""

    code = "UPSTREAM_ERROR"


class UpstreamUnavailable(UpstreamError):
    """Network failure, timeout or 5xx from a provider."""

    code = "UPSTREAM_UNAVAILABLE"


class UpstreamRejected(UpstreamError):
    """4xx, bad key/params, or a body that is not the expected JSON."""

    code = "UPSTREAM_REJECTED"


class EmptyResult(UpstreamError):
    """Provider answered 200 with no usable records."""

    code = "EMPTY_RESULT"


@dataclass(frozen=True)
class AdapterAttempt:
    adapter: str
    error_code: str
    detail: str

    def summary(self) -> str:
        return f"{self.adapter}={self.error_code}({self.detail})"


class NoDataAvailable(FinderError):
    """Raised when every adapter of a fallback chain failed."""

    code = "NO_DATA_AVAILABLE"

    def __init__(self, attempts: list[AdapterAttempt]) -> None:
        self.attempts = list(attempts)
        tried = ", ".join(attempt.adapter for attempt in self.attempts) or "none"
        super().__init__(
            f"no data provider returned facilities (tried: {tried})",
            details="; ".join(attempt.summary() for attempt in self.attempts),
        )

    @property
    def only_empty_results(self) -> bool:
        return bool(self.attempts) and all(a.error_code == EmptyResult.code for a in self.attempts)


def truncate_body(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
