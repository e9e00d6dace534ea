"""Exception taxonomy shared by the sync job and the HTTP layer."""

from typing import Any, Optional


class MatchdayError(Exception):
    """Base class for application errors."""

    status_code = 500
    public_message = "Internal server error"


class ValidationError(MatchdayError):
    """Bad id format or missing required field (HTTP 400)."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.public_message = message


class UpstreamError(MatchdayError):
    """Provider returned non-2xx, unparsable body, or the request failed."""

    public_message = "Upstream provider request failed"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        # Provider status; None for network failures
        self.upstream_status = status_code
        self.body = body


class StoreError(MatchdayError):
    """Database transaction failure."""

    public_message = "Database operation failed"
