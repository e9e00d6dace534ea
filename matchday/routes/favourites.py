"""Favourite team CRUD, keyed by (user_id, team_name)."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from matchday import store
from matchday.config import Settings, get_settings
from matchday.database import get_async_session
from matchday.errors import ValidationError
from matchday.routes.deps import handle_failures, parse_int_id

router = APIRouter(prefix="/favourites", tags=["favourites"])

logger = logging.getLogger(__name__)


class FavouriteTeamRequest(BaseModel):
    # Loose types: ids arrive as numbers or numeric strings and are validated by hand
    userId: Optional[Any] = None
    teamName: Optional[Any] = None


def _require_team_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("teamName is required")
    return value


@router.get("/teams")
async def get_favourite_teams(
    userId: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    user_id = parse_int_id(userId, "userId", default=settings.DEFAULT_USER_ID)

    with handle_failures("Failed to fetch favourite teams"):
        favourites = await store.list_favourite_teams(session, user_id)

    return {"favourites": favourites}


@router.post("/teams")
async def add_favourite_team(
    body: Optional[FavouriteTeamRequest] = Body(None),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Idempotent add: posting an existing pair leaves a single row."""
    body = body or FavouriteTeamRequest()
    user_id = parse_int_id(body.userId, "userId", default=settings.DEFAULT_USER_ID)
    team_name = _require_team_name(body.teamName)

    with handle_failures("Failed to add favourite team"):
        await store.add_favourite_team(session, user_id, team_name)
        await session.commit()

    logger.info(f"Favourite added: user={user_id} team={team_name!r}")
    return {"success": True}


@router.delete("/teams")
async def remove_favourite_team(
    body: Optional[FavouriteTeamRequest] = Body(None),
    userId: Optional[str] = Query(None),
    teamName: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Idempotent remove. Accepts a JSON body or, for clients that cannot send one, query params."""
    body = body or FavouriteTeamRequest()
    raw_user_id = body.userId if body.userId is not None else userId
    raw_team_name = body.teamName if body.teamName is not None else teamName

    user_id = parse_int_id(raw_user_id, "userId", default=settings.DEFAULT_USER_ID)
    team_name = _require_team_name(raw_team_name)

    with handle_failures("Failed to remove favourite team"):
        await store.remove_favourite_team(session, user_id, team_name)
        await session.commit()

    logger.info(f"Favourite removed: user={user_id} team={team_name!r}")
    return {"success": True}
