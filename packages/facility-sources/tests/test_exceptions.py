from facility_sources.core.exceptions import (
    AdapterAttempt,
    EmptyResult,
    FinderError,
    NoDataAvailable,
    UpstreamError,
    UpstreamRejected,
    UpstreamUnavailable,
    truncate_body,
)


def test_upstream_errors_share_a_base() -> None:
    for error_type in (UpstreamUnavailable, UpstreamRejected, EmptyResult):
        assert issubclass(error_type, UpstreamError)
        assert issubclass(error_type, FinderError)


def test_no_data_available_message_lists_adapters() -> None:
    error = NoDataAvailable([AdapterAttempt("radius_search", "EMPTY_RESULT", "none")])

    assert error.code == "NO_DATA_AVAILABLE"
    assert "radius_search" in error.message
    assert error.details == "radius_search=EMPTY_RESULT(none)"
    assert error.only_empty_results is True


def test_no_data_available_without_attempts() -> None:
    error = NoDataAvailable([])

    assert "none" in error.message
    assert error.only_empty_results is False


def test_truncate_body() -> None:
    assert truncate_body("short") == "short"
    assert truncate_body("x" * 250) == "x" * 200 + "..."
