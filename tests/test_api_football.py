"""Tests for the API-Football client against an in-process mock transport."""

from datetime import date

import httpx
import pytest

from matchday.errors import UpstreamError
from matchday.etl.api_football import APIFootballClient


def make_client(settings, handler) -> APIFootballClient:
    return APIFootballClient(settings, transport=httpx.MockTransport(handler))


class TestRequestShape:
    """URL, query and auth header."""

    @pytest.mark.asyncio
    async def test_fixtures_by_date_request(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-apisports-key")
            return httpx.Response(200, json={"response": [{"fixture": {"id": 1}}]})

        async with make_client(settings, handler) as client:
            items = await client.get_fixtures_by_date(date(2024, 5, 1))

        assert seen["url"] == "https://v3.football.api-sports.io/fixtures?date=2024-05-01"
        assert seen["key"] == "test-key"
        assert items == [{"fixture": {"id": 1}}]

    @pytest.mark.asyncio
    async def test_events_and_lineups_use_fixture_param(self, settings):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append((request.url.path, request.url.params.get("fixture")))
            return httpx.Response(200, json={"response": []})

        async with make_client(settings, handler) as client:
            await client.get_fixture_events(1001)
            await client.get_fixture_lineups(1001)

        assert paths == [("/fixtures/events", "1001"), ("/fixtures/lineups", "1001")]


class TestResponseHandling:
    """Status codes, bodies and transport failures."""

    @pytest.mark.asyncio
    async def test_missing_response_field_is_empty_list(self, settings):
        async with make_client(settings, lambda r: httpx.Response(200, json={})) as client:
            assert await client.get_fixture_events(1) == []

    @pytest.mark.asyncio
    async def test_errors_object_yields_empty_list(self, settings):
        body = {"errors": {"token": "Error/Missing application key"}, "response": []}
        async with make_client(settings, lambda r: httpx.Response(200, json=body)) as client:
            assert await client.get_fixtures_by_date(date(2024, 5, 1)) == []

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status_and_body(self, settings):
        async with make_client(settings, lambda r: httpx.Response(503, text="maintenance")) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_fixture_lineups(1)

        assert exc_info.value.upstream_status == 503
        assert exc_info.value.body == "maintenance"

    @pytest.mark.asyncio
    async def test_long_error_body_is_truncated(self, settings):
        async with make_client(settings, lambda r: httpx.Response(500, text="x" * 2000)) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_fixture_events(1)

        assert len(exc_info.value.body) == 500

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, settings):
        async with make_client(settings, lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(UpstreamError):
                await client.get_fixture_events(1)

    @pytest.mark.asyncio
    async def test_network_failure_raises_without_status(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(settings, handler) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get_fixtures_by_date(date(2024, 5, 1))

        assert exc_info.value.upstream_status is None

    @pytest.mark.asyncio
    async def test_timeout_raises(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(settings, handler) as client:
            with pytest.raises(UpstreamError, match="Timeout"):
                await client.get_fixture_events(1)
