"""Cache store: reads and writes against the leagues/fixtures/events/favourites tables.

Write helpers never commit; the caller owns the transaction.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from matchday.db_utils import upsert
from matchday.etl.base import EventData, FixtureData, LeagueData
from matchday.models import Event, EventSync, FavouriteTeam, Fixture, League

logger = logging.getLogger(__name__)

# Statuses after which events can no longer change
FINISHED_STATUSES = frozenset({"FT", "AET", "PEN", "PST", "CANC", "ABD", "AWD", "WO"})


# =============================================================================
# WRITES (sync job)
# =============================================================================


async def upsert_league(session: AsyncSession, league: LeagueData) -> None:
    await upsert(session, League, league.to_row(), conflict_columns=["id"])


async def upsert_fixture(session: AsyncSession, fixture: FixtureData) -> None:
    await upsert(session, Fixture, fixture.to_row(), conflict_columns=["id"])


async def replace_fixture_events(
    session: AsyncSession,
    fixture_id: int,
    events: list[EventData],
) -> None:
    """Delete every cached event for the fixture and insert ``events`` in order."""
    await session.execute(delete(Event).where(Event.fixture_id == fixture_id))
    for event in events:
        session.add(Event(**event.to_row(fixture_id)))
    await upsert(
        session,
        EventSync,
        {"fixture_id": fixture_id, "synced_at": datetime.utcnow(), "event_count": len(events)},
        conflict_columns=["fixture_id"],
    )
    await session.flush()


# =============================================================================
# READS (HTTP API, dashboard)
# =============================================================================


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Naive [start, end) range covering ``day``."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


async def get_fixtures_for_day(
    session: AsyncSession,
    day: date,
    league_id: Optional[int] = None,
) -> list[tuple[Fixture, League]]:
    """Fixture⋈League rows kicking off on ``day``, by start_time ascending."""
    start, end = day_bounds(day)
    query = (
        select(Fixture, League)
        .join(League, Fixture.league_id == League.id)
        .where(Fixture.start_time >= start, Fixture.start_time < end)
    )
    if league_id is not None:
        query = query.where(Fixture.league_id == league_id)
    query = query.order_by(Fixture.start_time.asc(), Fixture.id.asc())

    result = await session.execute(query)
    return [(row[0], row[1]) for row in result.all()]


async def get_fixture(session: AsyncSession, fixture_id: int) -> Optional[Fixture]:
    return await session.get(Fixture, fixture_id)


async def get_fixture_events(session: AsyncSession, fixture_id: int) -> list[Event]:
    """Cached events ordered by (time_elapsed, id); NULL minutes first."""
    result = await session.execute(
        select(Event)
        .where(Event.fixture_id == fixture_id)
        .order_by(Event.time_elapsed.asc().nulls_first(), Event.id.asc())
    )
    return list(result.scalars().all())


async def get_event_sync(session: AsyncSession, fixture_id: int) -> Optional[EventSync]:
    return await session.get(EventSync, fixture_id)


def events_cache_is_fresh(
    marker: Optional[EventSync],
    fixture: Optional[Fixture],
    ttl_seconds: int,
    now: Optional[datetime] = None,
) -> bool:
    """Whether cached events can be served without calling upstream.

    Never-synced fixtures are always stale. Finished fixtures never go stale;
    anything else is refreshed once the marker is older than ``ttl_seconds``.
    """
    if marker is None:
        return False
    if fixture is not None and fixture.status_short in FINISHED_STATUSES:
        return True
    now = now or datetime.utcnow()
    return (now - marker.synced_at).total_seconds() < ttl_seconds


async def list_favourite_teams(session: AsyncSession, user_id: int) -> list[str]:
    result = await session.execute(
        select(FavouriteTeam.team_name)
        .where(FavouriteTeam.user_id == user_id)
        .order_by(FavouriteTeam.team_name.asc())
    )
    return list(result.scalars().all())


async def add_favourite_team(session: AsyncSession, user_id: int, team_name: str) -> None:
    """Idempotent add; an existing (user_id, team_name) pair is left alone."""
    await upsert(
        session,
        FavouriteTeam,
        {"user_id": user_id, "team_name": team_name},
        conflict_columns=["user_id", "team_name"],
        update_columns=[],
    )


async def remove_favourite_team(session: AsyncSession, user_id: int, team_name: str) -> None:
    """Idempotent remove; deleting a missing pair is a no-op."""
    await session.execute(
        delete(FavouriteTeam).where(
            FavouriteTeam.user_id == user_id,
            FavouriteTeam.team_name == team_name,
        )
    )


# =============================================================================
# RESPONSE SHAPING (API-Football-compatible JSON)
# =============================================================================


def serialize_kickoff(start_time: Optional[datetime], tz: tzinfo) -> Optional[str]:
    if start_time is None:
        return None
    return start_time.replace(tzinfo=tz).isoformat()


def shape_fixture(fixture: Fixture, league: League, tz: tzinfo) -> dict:
    """Nest a cached row the way /fixtures responses are nested upstream."""
    return {
        "fixture": {
            "id": fixture.id,
            "status": {
                "short": fixture.status_short,
                "long": fixture.status_long,
                "elapsed": fixture.status_elapsed,
            },
            "date": serialize_kickoff(fixture.start_time, tz),
        },
        "league": {
            "id": league.id,
            "name": league.name,
            "country": league.country,
            "logo": league.logo,
            "flag": league.flag,
        },
        "teams": {
            "home": {"name": fixture.home_team, "logo": fixture.home_logo},
            "away": {"name": fixture.away_team, "logo": fixture.away_logo},
        },
        "goals": {
            "home": fixture.home_goals,
            "away": fixture.away_goals,
        },
    }


def shape_event(event: Event) -> dict:
    return {
        "time": {"elapsed": event.time_elapsed},
        "team": {"name": event.team_name},
        "player": {"name": event.player_name},
        "type": event.type,
        "detail": event.detail,
    }
