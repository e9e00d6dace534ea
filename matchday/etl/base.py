"""Data transfer objects and parsers for API-Football payloads."""

from dataclasses import asdict, dataclass
from datetime import datetime, tzinfo
from typing import Any, Optional


class PayloadError(ValueError):
    """Raised when an upstream item lacks a field we cannot store without."""


@dataclass
class LeagueData:
    """Data transfer object for league information."""

    id: int
    name: str
    country: Optional[str]
    logo: Optional[str] = None
    flag: Optional[str] = None

    def to_row(self) -> dict:
        return asdict(self)


@dataclass
class FixtureData:
    """Data transfer object for fixture information."""

    id: int
    league_id: int
    home_team: str
    away_team: str
    start_time: datetime  # naive, server-local
    status_short: str
    status_long: Optional[str]
    status_elapsed: Optional[int]  # Current minute for live matches
    home_goals: Optional[int]
    away_goals: Optional[int]
    home_logo: Optional[str] = None
    away_logo: Optional[str] = None

    def to_row(self) -> dict:
        return asdict(self)


@dataclass
class EventData:
    """Data transfer object for a single match event."""

    time_elapsed: Optional[int]
    team_name: Optional[str]
    player_name: Optional[str]
    type: Optional[str]
    detail: Optional[str]

    def to_row(self, fixture_id: int) -> dict:
        return {"fixture_id": fixture_id, **asdict(self)}


def _required(container: dict, key: str, where: str) -> Any:
    value = container.get(key)
    if value is None or value == "":
        raise PayloadError(f"missing {where}.{key}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    # API-Football sends "" for absent logos/flags
    if value is None or value == "":
        return None
    return str(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


def parse_kickoff(date_str: str, tz: tzinfo) -> datetime:
    """Convert an ISO-8601 kickoff to a naive datetime in ``tz``."""
    try:
        kickoff = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as e:
        raise PayloadError(f"invalid fixture.date {date_str!r}") from e

    if kickoff.tzinfo is None:
        # Provider dates always carry an offset; treat bare values as local already
        return kickoff
    return kickoff.astimezone(tz).replace(tzinfo=None)


def parse_league(item: dict) -> LeagueData:
    """Parse ``item["league"]`` into LeagueData."""
    league = item.get("league") or {}
    return LeagueData(
        id=int(_required(league, "id", "league")),
        name=str(_required(league, "name", "league")),
        country=_optional_str(league.get("country")),
        logo=_optional_str(league.get("logo")),
        flag=_optional_str(league.get("flag")),
    )


def parse_fixture(item: dict, tz: tzinfo) -> FixtureData:
    """Parse an API fixture response item into FixtureData.

    Null elapsed time and goal counts stay ``None`` (no sentinel values).
    """
    fixture_info = item.get("fixture") or {}
    league = item.get("league") or {}
    teams = item.get("teams") or {}
    home = teams.get("home") or {}
    away = teams.get("away") or {}
    goals = item.get("goals") or {}
    status = fixture_info.get("status") or {}

    return FixtureData(
        id=int(_required(fixture_info, "id", "fixture")),
        league_id=int(_required(league, "id", "league")),
        home_team=str(_required(home, "name", "teams.home")),
        home_logo=_optional_str(home.get("logo")),
        away_team=str(_required(away, "name", "teams.away")),
        away_logo=_optional_str(away.get("logo")),
        start_time=parse_kickoff(_required(fixture_info, "date", "fixture"), tz),
        status_short=status.get("short") or "NS",
        status_long=_optional_str(status.get("long")),
        status_elapsed=_optional_int(status.get("elapsed")),
        home_goals=_optional_int(goals.get("home")),
        away_goals=_optional_int(goals.get("away")),
    )


def parse_event(item: dict) -> EventData:
    """Parse an /fixtures/events item. Every field is optional."""
    return EventData(
        time_elapsed=_optional_int((item.get("time") or {}).get("elapsed")),
        team_name=_optional_str((item.get("team") or {}).get("name")),
        player_name=_optional_str((item.get("player") or {}).get("name")),
        type=_optional_str(item.get("type")),
        detail=_optional_str(item.get("detail")),
    )
