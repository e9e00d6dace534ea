"""Tests for the sync pipeline: batch atomicity, event replacement, cache-or-sync."""

from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from matchday import store
from matchday.errors import StoreError, UpstreamError
from matchday.etl.pipeline import ETLPipeline, get_or_sync_fixture_events, sync_today_fixtures
from matchday.models import Event, EventSync, Fixture, League

GOAL = {
    "time": {"elapsed": 23},
    "team": {"name": "Arsenal"},
    "player": {"name": "B. Saka"},
    "type": "Goal",
    "detail": "Normal Goal",
}
CARD = {
    "time": {"elapsed": 41},
    "team": {"name": "Chelsea"},
    "player": {"name": "C. Palmer"},
    "type": "Card",
    "detail": "Yellow Card",
}


async def count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestSyncFixturesForDay:

    @pytest.mark.asyncio
    async def test_not_started_fixture_is_stored_with_null_goals(self, session, api_client, settings, fixture_item):
        api_client.get_fixtures_by_date.return_value = [fixture_item()]

        synced = await ETLPipeline(api_client, session, settings).sync_fixtures_for_day(date(2024, 5, 1))

        assert synced == 1
        fixture = await session.get(Fixture, 1001)
        assert fixture.status_short == "NS"
        assert fixture.home_goals is None
        assert fixture.away_goals is None
        assert fixture.start_time == datetime(2024, 5, 1, 19, 0)
        assert (await session.get(League, 39)).name == "Premier League"

    @pytest.mark.asyncio
    async def test_resync_updates_in_place(self, session, api_client, settings, fixture_item):
        pipeline = ETLPipeline(api_client, session, settings)

        api_client.get_fixtures_by_date.return_value = [fixture_item()]
        await pipeline.sync_fixtures_for_day(date(2024, 5, 1))
        api_client.get_fixtures_by_date.return_value = [
            fixture_item(short="2H", elapsed=67, home_goals=2, away_goals=1)
        ]
        await pipeline.sync_fixtures_for_day(date(2024, 5, 1))

        assert await count(session, Fixture) == 1
        session.expire_all()
        fixture = await session.get(Fixture, 1001)
        assert (fixture.status_short, fixture.status_elapsed) == ("2H", 67)
        assert (fixture.home_goals, fixture.away_goals) == (2, 1)

    @pytest.mark.asyncio
    async def test_bad_item_rolls_back_whole_batch(self, session, api_client, settings, fixture_item):
        broken = fixture_item(fixture_id=1003)
        broken["teams"]["away"]["name"] = None
        api_client.get_fixtures_by_date.return_value = [
            fixture_item(fixture_id=1001),
            fixture_item(fixture_id=1002),
            broken,
        ]

        with pytest.raises(StoreError):
            await ETLPipeline(api_client, session, settings).sync_fixtures_for_day(date(2024, 5, 1))

        assert await count(session, Fixture) == 0
        assert await count(session, League) == 0

    @pytest.mark.asyncio
    async def test_upstream_failure_writes_nothing(self, session, api_client, settings):
        api_client.get_fixtures_by_date.side_effect = UpstreamError("fixtures returned HTTP 500", status_code=500)

        with pytest.raises(UpstreamError):
            await ETLPipeline(api_client, session, settings).sync_fixtures_for_day(date(2024, 5, 1))

        assert await count(session, Fixture) == 0


class TestSyncTodayFixtures:
    """The unattended entry point never raises."""

    @pytest.mark.asyncio
    async def test_success_summary(self, session, api_client, settings, fixture_item, today):
        api_client.get_fixtures_by_date.return_value = [fixture_item(), fixture_item(fixture_id=1002)]

        result = await sync_today_fixtures(session, api_client, settings)

        api_client.get_fixtures_by_date.assert_awaited_once_with(today)
        assert result == {"date": today.isoformat(), "fixtures_synced": 2}

    @pytest.mark.asyncio
    async def test_upstream_error_is_swallowed(self, session, api_client, settings):
        api_client.get_fixtures_by_date.side_effect = UpstreamError("down", status_code=502, body="bad gateway")

        with patch("matchday.etl.pipeline.record_job_run") as record:
            result = await sync_today_fixtures(session, api_client, settings)

        assert result["fixtures_synced"] == 0
        assert "error" in result
        assert record.call_args.args[:2] == ("fixtures_sync", "error")

    @pytest.mark.asyncio
    async def test_store_error_is_swallowed(self, session, api_client, settings, fixture_item):
        broken = fixture_item()
        del broken["fixture"]["date"]
        api_client.get_fixtures_by_date.return_value = [broken]

        result = await sync_today_fixtures(session, api_client, settings)

        assert result["fixtures_synced"] == 0
        assert "rolled back" in result["error"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_swallowed(self, session, api_client, settings):
        api_client.get_fixtures_by_date.side_effect = RuntimeError("boom")

        result = await sync_today_fixtures(session, api_client, settings)

        assert result["error"] == "boom"


class TestSyncFixtureEvents:

    @pytest.mark.asyncio
    async def test_replaces_events_and_returns_raw_list(self, session, api_client, settings, add_fixture):
        await add_fixture(1001)
        pipeline = ETLPipeline(api_client, session, settings)

        api_client.get_fixture_events.return_value = [GOAL]
        await pipeline.sync_fixture_events(1001)
        api_client.get_fixture_events.return_value = [GOAL, CARD]
        raw = await pipeline.sync_fixture_events(1001)

        assert raw == [GOAL, CARD]
        assert await count(session, Event) == 2

    @pytest.mark.asyncio
    async def test_upstream_failure_leaves_cache_untouched(self, session, api_client, settings, add_fixture):
        await add_fixture(1001)
        pipeline = ETLPipeline(api_client, session, settings)
        api_client.get_fixture_events.return_value = [GOAL]
        await pipeline.sync_fixture_events(1001)

        api_client.get_fixture_events.side_effect = UpstreamError("timeout")
        with pytest.raises(UpstreamError):
            await pipeline.sync_fixture_events(1001)

        assert await count(session, Event) == 1

    @pytest.mark.asyncio
    async def test_store_failure_after_delete_keeps_previous_events(self, session, api_client, settings, add_fixture):
        await add_fixture(1001)
        pipeline = ETLPipeline(api_client, session, settings)
        api_client.get_fixture_events.return_value = [GOAL]
        await pipeline.sync_fixture_events(1001)

        api_client.get_fixture_events.return_value = [GOAL, CARD]
        with patch("matchday.store.upsert", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(StoreError):
                await pipeline.sync_fixture_events(1001)

        events = await store.get_fixture_events(session, 1001)
        assert [(e.time_elapsed, e.player_name) for e in events] == [(23, "B. Saka")]
        assert (await store.get_event_sync(session, 1001)).event_count == 1


class TestGetOrSyncFixtureEvents:

    @pytest.mark.asyncio
    async def test_first_request_syncs_second_is_served_from_cache(self, session, api_client, settings, add_fixture):
        await add_fixture(1001, status_short="2H", status_elapsed=50)
        api_client.get_fixture_events.return_value = [GOAL]

        first = await get_or_sync_fixture_events(session, api_client, 1001, settings)
        second = await get_or_sync_fixture_events(session, api_client, 1001, settings)

        assert first == [GOAL]
        assert second == [store.shape_event(e) for e in await store.get_fixture_events(session, 1001)]
        assert second[0]["player"]["name"] == "B. Saka"
        assert api_client.get_fixture_events.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_event_fixture_is_not_refetched_within_ttl(self, session, api_client, settings, add_fixture):
        await add_fixture(1001)

        await get_or_sync_fixture_events(session, api_client, 1001, settings)
        result = await get_or_sync_fixture_events(session, api_client, 1001, settings)

        assert result == []
        assert api_client.get_fixture_events.await_count == 1

    @pytest.mark.asyncio
    async def test_stale_marker_on_live_fixture_refetches(self, session, api_client, settings, add_fixture):
        await add_fixture(1001, status_short="2H", status_elapsed=70)
        session.add(EventSync(fixture_id=1001, synced_at=datetime.utcnow() - timedelta(minutes=10), event_count=0))
        await session.commit()
        api_client.get_fixture_events.return_value = [GOAL, CARD]

        result = await get_or_sync_fixture_events(session, api_client, 1001, settings)

        assert result == [GOAL, CARD]
        api_client.get_fixture_events.assert_awaited_once_with(1001)

    @pytest.mark.asyncio
    async def test_finished_fixture_with_old_marker_is_served_from_cache(self, session, api_client, settings, add_fixture):
        await add_fixture(1001, status_short="FT", home_goals=1, away_goals=0)
        session.add(EventSync(fixture_id=1001, synced_at=datetime.utcnow() - timedelta(days=1), event_count=0))
        await session.commit()

        result = await get_or_sync_fixture_events(session, api_client, 1001, settings)

        assert result == []
        api_client.get_fixture_events.assert_not_awaited()
