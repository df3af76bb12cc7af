"""Common runtime devkit for service infrastructure concerns."""

from devkit.config import FinderSettings, load_settings
from devkit.observability import configure_logging, configure_otel, configure_probe_access_log_filter
from devkit.timezone import KST_ZONE, now_kst, to_kst

__all__ = [
    "FinderSettings",
    "KST_ZONE",
    "configure_logging",
    "configure_otel",
    "configure_probe_access_log_filter",
    "load_settings",
    "now_kst",
    "to_kst",
]
