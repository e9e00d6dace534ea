"""Shared fixtures: in-memory database, mocked upstream client, HTTP client against the app."""

from datetime import datetime, time
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from matchday.config import Settings, get_settings, today_local
from matchday.database import create_engine, create_session_factory, get_async_session, init_db
from matchday.main import app
from matchday.models import Fixture, League
from matchday.routes.deps import get_api_client, get_scheduler


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        API_FOOTBALL_KEY="test-key",
        TIMEZONE="UTC",
        SCHEDULER_ENABLED=False,
        EVENTS_CACHE_TTL_SECONDS=60,
        DEFAULT_USER_ID=1,
    )


@pytest.fixture
def today(settings):
    return today_local(settings)


@pytest_asyncio.fixture
async def engine():
    engine = create_engine("sqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def api_client():
    """Upstream client double; every fetch returns an empty list unless a test says otherwise."""
    client = MagicMock()
    client.get_fixtures_by_date = AsyncMock(return_value=[])
    client.get_fixture_events = AsyncMock(return_value=[])
    client.get_fixture_lineups = AsyncMock(return_value=[])
    client.close = AsyncMock()
    return client


@pytest.fixture
def scheduler():
    scheduler = MagicMock()
    scheduler.running = False
    scheduler.last_sync_at = None
    scheduler.run_once = AsyncMock(return_value={"date": "2024-05-01", "fixtures_synced": 0})
    return scheduler


@pytest_asyncio.fixture
async def client(session_factory, api_client, settings, scheduler):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_api_client] = lambda: api_client
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_scheduler] = lambda: scheduler

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


@pytest.fixture
def add_fixture(session_factory, today):
    """Insert a league + fixture row directly; kickoff defaults to 15:00 today."""

    async def _add(
        fixture_id: int,
        league_id: int = 39,
        league_name: str = "Premier League",
        home: str = "Arsenal",
        away: str = "Chelsea",
        kickoff: datetime | None = None,
        status_short: str = "NS",
        status_elapsed: int | None = None,
        home_goals: int | None = None,
        away_goals: int | None = None,
    ) -> Fixture:
        async with session_factory() as session:
            if await session.get(League, league_id) is None:
                session.add(League(id=league_id, name=league_name, country="England"))
                await session.flush()
            fixture = Fixture(
                id=fixture_id,
                league_id=league_id,
                home_team=home,
                away_team=away,
                start_time=kickoff or datetime.combine(today, time(15, 0)),
                status_short=status_short,
                status_elapsed=status_elapsed,
                home_goals=home_goals,
                away_goals=away_goals,
            )
            session.add(fixture)
            await session.commit()
            return fixture

    return _add


@pytest.fixture
def fixture_item():
    """Build an API-Football /fixtures response item."""

    def _item(
        fixture_id: int = 1001,
        date: str = "2024-05-01T19:00:00+00:00",
        league_id: int = 39,
        league_name: str = "Premier League",
        home: str = "Arsenal",
        away: str = "Chelsea",
        short: str = "NS",
        elapsed: int | None = None,
        home_goals: int | None = None,
        away_goals: int | None = None,
    ) -> dict:
        return {
            "fixture": {
                "id": fixture_id,
                "date": date,
                "status": {"short": short, "long": "Not Started" if short == "NS" else short, "elapsed": elapsed},
            },
            "league": {
                "id": league_id,
                "name": league_name,
                "country": "England",
                "logo": f"https://media.api-sports.io/football/leagues/{league_id}.png",
                "flag": "",
            },
            "teams": {
                "home": {"name": home, "logo": "https://media.api-sports.io/football/teams/42.png"},
                "away": {"name": away, "logo": ""},
            },
            "goals": {"home": home_goals, "away": away_goals},
        }

    return _item
