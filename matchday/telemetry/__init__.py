"""
Telemetry: Prometheus metrics for provider calls and sync jobs, optional Sentry.
"""

from matchday.telemetry.metrics import (
    get_metrics_text,
    record_job_run,
    record_provider_error,
    record_provider_request,
)
from matchday.telemetry.sentry import (
    capture_exception,
    init_sentry,
    is_sentry_enabled,
    sentry_job_context,
)

__all__ = [
    "get_metrics_text",
    "record_job_run",
    "record_provider_error",
    "record_provider_request",
    "capture_exception",
    "init_sentry",
    "is_sentry_enabled",
    "sentry_job_context",
]
