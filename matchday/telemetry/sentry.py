"""
Optional Sentry reporting for the sync job and the HTTP API.

Nothing is sent unless SENTRY_DSN is set. Outgoing events have the
API-Football key, the admin key and cookies redacted; request bodies are
dropped entirely.
"""

import logging
import os
import re
from contextlib import contextmanager
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

_REDACT_HEADERS = frozenset({"x-apisports-key", "x-api-key", "authorization", "cookie", "set-cookie"})
_SECRET_PARAM_RE = re.compile(r"(?i)\b(key|api_key|token|secret)=[^&]*")

_enabled = False


def _redact_headers(headers: dict) -> dict:
    return {name: (REDACTED if name.lower() in _REDACT_HEADERS else value) for name, value in headers.items()}


def _redact_query(query_string: str) -> str:
    return _SECRET_PARAM_RE.sub(lambda m: f"{m.group(1)}={REDACTED}", query_string)


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Strip secrets from an outgoing event."""
    request = event.get("request")
    if not request:
        return event

    if isinstance(request.get("headers"), dict):
        request["headers"] = _redact_headers(request["headers"])
    if isinstance(request.get("query_string"), str):
        request["query_string"] = _redact_query(request["query_string"])
    request.pop("data", None)
    return event


def init_sentry() -> bool:
    """
    Turn on Sentry when SENTRY_DSN is present; safe to call more than once.

    SENTRY_ENVIRONMENT (default "development") and SENTRY_TRACES_SAMPLE_RATE
    (default 0) are read from the environment as well.
    """
    global _enabled

    if _enabled:
        return True

    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("Sentry disabled: SENTRY_DSN not set")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "development")
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0")),
        send_default_pii=False,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )
    _enabled = True
    logger.info(f"Sentry enabled (environment={environment})")
    return True


def is_sentry_enabled() -> bool:
    return _enabled


@contextmanager
def sentry_job_context(job_id: str):
    """Scope for one scheduled run; an exception escaping the block is reported and re-raised."""
    if not _enabled:
        yield
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("job_id", job_id)
        try:
            yield
        except Exception as exc:
            sentry_sdk.capture_exception(exc)
            raise


def capture_exception(exc: Exception, job_id: Optional[str] = None, **extra) -> None:
    """Report a failure that the caller handles itself (sync job errors, DB errors on requests)."""
    if not _enabled:
        return

    with sentry_sdk.new_scope() as scope:
        if job_id:
            scope.set_tag("job_id", job_id)
        for key, value in extra.items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(exc)
