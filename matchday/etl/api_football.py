"""API-Football client (API-Sports direct, ``x-apisports-key`` auth)."""

import logging
import time
from datetime import date
from typing import Optional

import httpx

from matchday.config import Settings, get_settings
from matchday.errors import UpstreamError
from matchday.telemetry import record_provider_error, record_provider_request

logger = logging.getLogger(__name__)

PROVIDER = "api_football"

# endpoint -> telemetry entity label
_ENTITIES = {
    "fixtures": "fixture",
    "fixtures/events": "events",
    "fixtures/lineups": "lineups",
}


class APIFootballClient:
    """Thin GET wrapper around API-Football.

    No caching, no retry and no rate-limit handling: every failure surfaces as
    UpstreamError and callers decide what to do with it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.API_FOOTBALL_BASE_URL.rstrip("/")
        self.client = httpx.AsyncClient(
            headers={"x-apisports-key": settings.API_FOOTBALL_KEY},
            timeout=settings.API_FOOTBALL_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "APIFootballClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    async def fetch(self, path: str, params: Optional[dict] = None) -> dict:
        """
        GET ``path`` with query ``params`` and return the parsed JSON body.

        Raises:
            UpstreamError: non-2xx status, network failure, or a body that is not JSON.
        """
        endpoint = path.strip("/")
        entity = _ENTITIES.get(endpoint, "other")
        url = f"{self.base_url}/{endpoint}"

        start_time = time.time()
        try:
            response = await self.client.get(url, params=params)
        except httpx.TimeoutException as e:
            latency_ms = (time.time() - start_time) * 1000
            record_provider_request(PROVIDER, entity, endpoint, 0, latency_ms)
            record_provider_error(PROVIDER, entity, "timeout")
            logger.error(f"Timeout calling {endpoint} {params}: {e}")
            raise UpstreamError(f"Timeout calling {endpoint}") from e
        except httpx.RequestError as e:
            latency_ms = (time.time() - start_time) * 1000
            record_provider_request(PROVIDER, entity, endpoint, 0, latency_ms)
            record_provider_error(PROVIDER, entity, "request_error")
            logger.error(f"Request error calling {endpoint} {params}: {e}")
            raise UpstreamError(f"Request to {endpoint} failed: {e}") from e

        latency_ms = (time.time() - start_time) * 1000
        record_provider_request(PROVIDER, entity, endpoint, response.status_code, latency_ms)

        if not response.is_success:
            body = response.text[:500]
            error_code = "http_4xx" if response.status_code < 500 else "http_5xx"
            record_provider_error(PROVIDER, entity, error_code)
            logger.error(f"HTTP {response.status_code} from {endpoint} {params}: {body}")
            raise UpstreamError(
                f"{endpoint} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            record_provider_error(PROVIDER, entity, "invalid_json")
            logger.error(f"Invalid JSON from {endpoint}: {response.text[:500]}")
            raise UpstreamError(
                f"{endpoint} returned a non-JSON body",
                status_code=response.status_code,
                body=response.text[:500],
            ) from e

        logger.debug(f"GET {endpoint} {params} -> {response.status_code} in {latency_ms:.0f}ms")
        return data

    async def _fetch_response(self, path: str, params: dict) -> list:
        data = await self.fetch(path, params)
        if not isinstance(data, dict):
            return []
        if data.get("errors"):
            # 200 with an errors object (bad key, plan limits); response is empty
            logger.error(f"API error from {path}: {data['errors']}")
        return data.get("response") or []

    async def get_fixtures_by_date(self, day: date) -> list[dict]:
        """
        Fetch ALL fixtures for a calendar date.

        Uses: GET /fixtures?date=YYYY-MM-DD (1 single API call)
        """
        return await self._fetch_response("/fixtures", {"date": day.strftime("%Y-%m-%d")})

    async def get_fixture_events(self, fixture_id: int) -> list[dict]:
        """Fetch goals, cards, substitutions and VAR decisions for a fixture."""
        return await self._fetch_response("/fixtures/events", {"fixture": fixture_id})

    async def get_fixture_lineups(self, fixture_id: int) -> list[dict]:
        """Fetch formation, starting XI and substitutes for both teams."""
        return await self._fetch_response("/fixtures/lineups", {"fixture": fixture_id})
