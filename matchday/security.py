"""Admin key check for manual sync triggers."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

from matchday.config import Settings, get_settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name=get_settings().ADMIN_API_KEY_HEADER, auto_error=False)


async def verify_admin_key(
    api_key: Optional[str] = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Verify the admin key for the manual sync endpoint.

    With ADMIN_API_KEY unset every request is allowed; the dashboard has no
    user accounts and the trigger is idempotent.
    """
    if not settings.ADMIN_API_KEY:
        return True

    if api_key != settings.ADMIN_API_KEY:
        logger.warning("Invalid or missing admin key on manual sync request")
        raise HTTPException(
            status_code=401,
            detail=f"Missing or invalid admin key. Provide it via {settings.ADMIN_API_KEY_HEADER} header.",
        )

    return True
