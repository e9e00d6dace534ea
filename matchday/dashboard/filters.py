"""
Dashboard list logic: pure functions over the /fixtures/today response items.

Nothing here touches the database or the network; the page loads fixtures and
favourites once and every filter change is predicate composition over that
in-memory list.
"""

from typing import Callable, Iterable, Optional

# Status codes API-Football uses while a match is in progress
LIVE_STATUS_SHORT = frozenset({"1H", "HT", "2H", "ET", "BT", "P", "SUSP", "INT", "LIVE"})

TABS = ("today", "live")

FixturePredicate = Callable[[dict], bool]


def is_live(item: dict) -> bool:
    return ((item.get("fixture") or {}).get("status") or {}).get("short") in LIVE_STATUS_SHORT


def format_status(item: dict) -> str:
    """FT -> "FT", live -> "67'" (or "LIVE" with no minute), otherwise the short code."""
    status = (item.get("fixture") or {}).get("status") or {}
    short = status.get("short") or ""
    if short == "FT":
        return "FT"
    if short in LIVE_STATUS_SHORT:
        elapsed = status.get("elapsed")
        return f"{elapsed}'" if elapsed else "LIVE"
    return short


def derive_leagues(fixtures: Iterable[dict]) -> list[dict]:
    """Unique leagues present in ``fixtures``, sorted by name."""
    leagues: dict[int, dict] = {}
    for item in fixtures:
        league = item.get("league") or {}
        league_id = league.get("id")
        if league_id is None or league_id in leagues:
            continue
        leagues[league_id] = {
            "id": league_id,
            "name": league.get("name") or "",
            "country": league.get("country"),
        }
    return sorted(leagues.values(), key=lambda lg: lg["name"].lower())


def team_names(item: dict) -> tuple[Optional[str], Optional[str]]:
    teams = item.get("teams") or {}
    return (teams.get("home") or {}).get("name"), (teams.get("away") or {}).get("name")


def by_tab(tab: str) -> Optional[FixturePredicate]:
    if tab == "live":
        return is_live
    return None


def by_league(league_id: Optional[int]) -> Optional[FixturePredicate]:
    if league_id is None:
        return None
    return lambda item: (item.get("league") or {}).get("id") == league_id


def by_favourites(enabled: bool, favourites: Iterable[str]) -> Optional[FixturePredicate]:
    if not enabled:
        return None
    names = set(favourites)

    def predicate(item: dict) -> bool:
        home, away = team_names(item)
        return home in names or away in names

    return predicate


def filter_fixtures(
    fixtures: list[dict],
    tab: str = "today",
    league_id: Optional[int] = None,
    favourites_only: bool = False,
    favourites: Iterable[str] = (),
) -> list[dict]:
    """Apply tab, league and favourites predicates; input order is preserved."""
    predicates = [
        p for p in (
            by_tab(tab),
            by_league(league_id),
            by_favourites(favourites_only, favourites),
        )
        if p is not None
    ]
    return [item for item in fixtures if all(p(item) for p in predicates)]


def find_selected(visible: list[dict], fixture_id: Optional[int]) -> Optional[dict]:
    """The selected fixture, or None when it is not in the visible list."""
    if fixture_id is None:
        return None
    for item in visible:
        if (item.get("fixture") or {}).get("id") == fixture_id:
            return item
    return None


def split_lineups(lineups: list[dict], home_name: Optional[str], away_name: Optional[str]) -> tuple[Optional[dict], Optional[dict]]:
    """
    Pick the home and away lineup entries.

    Matches by team name first, then falls back to provider order
    (first = home, second = away).
    """
    if not lineups:
        return None, None

    home = next((lu for lu in lineups if (lu.get("team") or {}).get("name") == home_name), lineups[0])
    away = next(
        (lu for lu in lineups if (lu.get("team") or {}).get("name") == away_name and lu is not home),
        None,
    )
    if away is None and len(lineups) > 1:
        away = lineups[1] if lineups[1] is not home else lineups[0]
    return home, away
