"""ETL pipeline: API-Football -> leagues/fixtures/events tables."""

import logging
import time
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from matchday import store
from matchday.config import Settings, get_settings, get_timezone, today_local
from matchday.errors import StoreError, UpstreamError
from matchday.etl.api_football import APIFootballClient
from matchday.etl.base import PayloadError, parse_event, parse_fixture, parse_league
from matchday.telemetry import capture_exception, record_job_run

logger = logging.getLogger(__name__)


class ETLPipeline:
    """Writes provider payloads into the cache store.

    Each sync runs in a single transaction on ``session``: all rows become
    visible together or not at all.
    """

    def __init__(
        self,
        client: APIFootballClient,
        session: AsyncSession,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.session = session
        self.settings = settings or get_settings()
        self.tz = get_timezone(self.settings)

    async def sync_fixtures_for_day(self, day: date) -> int:
        """
        Upsert every league and fixture the provider lists for ``day``.

        Returns the number of fixtures written.

        Raises:
            UpstreamError: the provider call failed (nothing was written).
            StoreError: an item failed to parse or persist; the batch is rolled back.
        """
        items = await self.client.get_fixtures_by_date(day)
        logger.info(f"Fixtures sync: received {len(items)} fixtures for {day.isoformat()}")

        try:
            for item in items:
                league = parse_league(item)
                fixture = parse_fixture(item, self.tz)
                await store.upsert_league(self.session, league)
                await store.upsert_fixture(self.session, fixture)
            await self.session.commit()
        except (PayloadError, SQLAlchemyError, TypeError, ValueError) as e:
            await self.session.rollback()
            raise StoreError(f"Fixtures batch for {day.isoformat()} rolled back: {e}") from e

        return len(items)

    async def sync_fixture_events(self, fixture_id: int) -> list[dict]:
        """
        Replace the cached events of one fixture with the provider's current list.

        Returns the raw provider events.

        Raises:
            UpstreamError: the provider call failed (cache untouched).
            StoreError: the replace transaction failed and was rolled back.
        """
        raw_events = await self.client.get_fixture_events(fixture_id)

        try:
            events = [parse_event(item) for item in raw_events]
            await store.replace_fixture_events(self.session, fixture_id, events)
            await self.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            await self.session.rollback()
            raise StoreError(f"Events for fixture {fixture_id} rolled back: {e}") from e

        logger.info(f"Events sync: fixture {fixture_id} now has {len(events)} events")
        return raw_events


async def get_or_sync_fixture_events(
    session: AsyncSession,
    client: APIFootballClient,
    fixture_id: int,
    settings: Optional[Settings] = None,
) -> list[dict]:
    """
    Events for one fixture, from cache when fresh, otherwise synced on demand.

    A fixture synced with zero events is a cache hit until its marker expires,
    so eventless matches do not hit the provider on every request.
    """
    settings = settings or get_settings()
    marker = await store.get_event_sync(session, fixture_id)
    fixture = await store.get_fixture(session, fixture_id)

    if store.events_cache_is_fresh(marker, fixture, settings.EVENTS_CACHE_TTL_SECONDS):
        events = await store.get_fixture_events(session, fixture_id)
        return [store.shape_event(event) for event in events]

    pipeline = ETLPipeline(client, session, settings)
    return await pipeline.sync_fixture_events(fixture_id)


async def sync_today_fixtures(
    session: AsyncSession,
    client: APIFootballClient,
    settings: Optional[Settings] = None,
) -> dict:
    """
    Unattended sync of today's fixtures.

    Never raises: upstream and store failures are logged and the cycle is a
    no-op, so the next scheduled run starts from a clean state.
    """
    settings = settings or get_settings()
    today = today_local(settings)
    start_time = time.time()
    logger.info(f"Syncing fixtures for {today.isoformat()} from API-Football...")

    pipeline = ETLPipeline(client, session, settings)
    try:
        synced = await pipeline.sync_fixtures_for_day(today)
    except UpstreamError as e:
        duration_ms = (time.time() - start_time) * 1000
        record_job_run("fixtures_sync", "error", duration_ms)
        capture_exception(e, job_id="fixtures_sync")
        logger.error(f"Fixtures sync failed (upstream): {e} body={e.body!r}")
        return {"date": today.isoformat(), "fixtures_synced": 0, "error": str(e)}
    except StoreError as e:
        duration_ms = (time.time() - start_time) * 1000
        record_job_run("fixtures_sync", "error", duration_ms)
        capture_exception(e, job_id="fixtures_sync")
        logger.error(f"Fixtures sync failed (store): {e}")
        return {"date": today.isoformat(), "fixtures_synced": 0, "error": str(e)}
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        record_job_run("fixtures_sync", "error", duration_ms)
        capture_exception(e, job_id="fixtures_sync")
        logger.exception(f"Fixtures sync failed: {e}")
        return {"date": today.isoformat(), "fixtures_synced": 0, "error": str(e)}

    duration_ms = (time.time() - start_time) * 1000
    record_job_run("fixtures_sync", "ok", duration_ms, synced=synced)
    logger.info(f"Fixtures sync complete: {synced} fixtures for {today.isoformat()} in {duration_ms:.0f}ms")
    return {"date": today.isoformat(), "fixtures_synced": synced}
