"""Shared request dependencies and parsing helpers for the routers."""

import logging
import re
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from matchday.errors import StoreError, UpstreamError, ValidationError
from matchday.etl.api_football import APIFootballClient
from matchday.scheduler import FixtureSyncScheduler

logger = logging.getLogger(__name__)

# Ids are stored in signed 64-bit INTEGER columns
MAX_ID = 2**63 - 1
MIN_ID = -(2**63)

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)


def _to_int(value: Any) -> Optional[int]:
    """Integer value of ``value``, or None when it is not a plain in-range integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not _INT_RE.fullmatch(text):
            return None
        number = int(text)
    if not MIN_ID <= number <= MAX_ID:
        return None
    return number


def get_api_client(request: Request) -> APIFootballClient:
    """Process-wide upstream client created in the app lifespan."""
    return request.app.state.api_client


def get_scheduler(request: Request) -> FixtureSyncScheduler:
    return request.app.state.scheduler


def parse_int_id(value: Any, name: str, default: Optional[int] = None) -> int:
    """
    Parse an id from a path, query or body value.

    Missing values fall back to ``default`` when one is given.

    Raises:
        ValidationError: the value is not an integer or is out of the 64-bit range.
    """
    if (value is None or value == "") and default is not None:
        return default
    number = _to_int(value)
    if number is None:
        raise ValidationError(f"Invalid {name}")
    return number


def parse_optional_int(value: Optional[str]) -> Optional[int]:
    """Lenient parse for optional filters: anything unparsable means "no filter"."""
    if value is None:
        return None
    return _to_int(value)


@contextmanager
def handle_failures(message: str):
    """Turn store/upstream failures inside the block into a 500 with ``message``."""
    try:
        yield
    except UpstreamError as e:
        logger.error(f"{message}: {e} (status={e.upstream_status}, body={e.body!r})")
        raise HTTPException(status_code=500, detail=message) from e
    except StoreError as e:
        logger.error(f"{message}: {e}")
        raise HTTPException(status_code=500, detail=message) from e
    except SQLAlchemyError as e:
        logger.error(f"{message}: {e}")
        raise HTTPException(status_code=500, detail=message) from e
