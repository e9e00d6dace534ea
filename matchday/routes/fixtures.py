"""Fixture endpoints: today's list (cache only), events (cache or sync), lineups (passthrough)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from matchday import store
from matchday.config import Settings, get_settings, get_timezone, today_local
from matchday.database import get_async_session
from matchday.etl.api_football import APIFootballClient
from matchday.etl.pipeline import get_or_sync_fixture_events
from matchday.routes.deps import get_api_client, handle_failures, parse_int_id, parse_optional_int

router = APIRouter(prefix="/fixtures", tags=["fixtures"])

logger = logging.getLogger(__name__)


@router.get("/today")
async def get_today_fixtures(
    league: Optional[str] = Query(None, description="League id; unparsable values are ignored"),
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Today's cached fixtures in API-Football's nested shape. Never calls upstream."""
    league_id = parse_optional_int(league)

    with handle_failures("Failed to fetch today fixtures from DB"):
        rows = await store.get_fixtures_for_day(session, today_local(settings), league_id)

    tz = get_timezone(settings)
    return {"response": [store.shape_fixture(fixture, lg, tz) for fixture, lg in rows]}


@router.get("/{fixture_id}/events")
async def get_fixture_events(
    fixture_id: str,
    session: AsyncSession = Depends(get_async_session),
    client: APIFootballClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    fixture_pk = parse_int_id(fixture_id, "fixture id")

    with handle_failures("Failed to fetch events"):
        events = await get_or_sync_fixture_events(session, client, fixture_pk, settings)

    return {"response": events}


@router.get("/{fixture_id}/lineups")
async def get_fixture_lineups(
    fixture_id: str,
    client: APIFootballClient = Depends(get_api_client),
):
    """Lineups straight from API-Football; nothing is cached."""
    fixture_pk = parse_int_id(fixture_id, "fixture id")

    with handle_failures("Failed to fetch lineups"):
        lineups = await client.get_fixture_lineups(fixture_pk)

    return {"response": lineups}
