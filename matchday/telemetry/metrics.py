"""
Prometheus metrics for provider ingestion and sync jobs.

Labels are restricted to LOW-CARDINALITY values only:
- provider:     "api_football"
- entity:       "fixture", "events", "lineups"
- endpoint:     "fixtures", "fixtures/events", "fixtures/lineups"
- status_code:  "200", "404", "429", "500", "0"
- error_code:   "timeout", "request_error", "http_4xx", "http_5xx", "invalid_json"
- job:          "fixtures_sync", "events_sync"

Fixture ids, team names and URLs are never used as labels; use logs for those.
"""

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# =============================================================================
# INGESTION METRICS
# =============================================================================

provider_requests_total = Counter(
    "matchday_provider_requests_total",
    "Total requests to data providers",
    ["provider", "entity", "endpoint", "status_code"],
)

provider_errors_total = Counter(
    "matchday_provider_errors_total",
    "Total errors from data providers",
    ["provider", "entity", "error_code"],
)

provider_latency_ms = Histogram(
    "matchday_provider_latency_ms",
    "Request latency in milliseconds",
    ["provider", "entity", "endpoint"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# =============================================================================
# JOB METRICS
# =============================================================================

job_runs_total = Counter(
    "matchday_job_runs_total",
    "Sync job runs by outcome",
    ["job", "status"],
)

job_duration_ms = Histogram(
    "matchday_job_duration_ms",
    "Sync job duration in milliseconds",
    ["job"],
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000],
)

job_last_success_timestamp = Gauge(
    "matchday_job_last_success_timestamp",
    "Unix timestamp of the last successful job run",
    ["job"],
)

fixtures_synced_total = Counter(
    "matchday_fixtures_synced_total",
    "Fixture rows upserted by the today sync",
)


def record_provider_request(
    provider: str,
    entity: str,
    endpoint: str,
    status_code: int,
    latency_ms: float,
) -> None:
    """Record a provider request count and latency."""
    try:
        provider_requests_total.labels(
            provider=provider,
            entity=entity,
            endpoint=endpoint,
            status_code=str(status_code),
        ).inc()
        provider_latency_ms.labels(
            provider=provider,
            entity=entity,
            endpoint=endpoint,
        ).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record provider request metric: {e}")


def record_provider_error(provider: str, entity: str, error_code: str) -> None:
    """Record a provider error."""
    try:
        provider_errors_total.labels(
            provider=provider,
            entity=entity,
            error_code=error_code,
        ).inc()
    except Exception as e:
        logger.warning(f"Failed to record provider error metric: {e}")


def record_job_run(job: str, status: str, duration_ms: float, synced: int = 0) -> None:
    """
    Record a job run with status and duration.

    Args:
        job: Job identifier (fixtures_sync, events_sync)
        status: "ok" or "error"
        duration_ms: Job duration in milliseconds
        synced: Rows written (fixtures_sync only)
    """
    try:
        job_runs_total.labels(job=job, status=status).inc()
        if duration_ms > 0:
            job_duration_ms.labels(job=job).observe(duration_ms)
        if status == "ok":
            job_last_success_timestamp.labels(job=job).set(time.time())
            if job == "fixtures_sync" and synced:
                fixtures_synced_total.inc(synced)
    except Exception as e:
        logger.warning(f"Failed to record job run metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
