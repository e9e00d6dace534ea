"""
Dashboard routes.

GET  /dashboard                    - fixtures list with filters and match details
POST /dashboard/favourites/toggle  - add/remove a favourite team, then redirect back
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from matchday import store
from matchday.config import Settings, get_settings, get_timezone, today_local
from matchday.dashboard.filters import TABS, derive_leagues, filter_fixtures, find_selected
from matchday.dashboard.views import dashboard_url, render_dashboard, render_match_details
from matchday.database import get_async_session
from matchday.errors import StoreError, UpstreamError, ValidationError
from matchday.etl.api_football import APIFootballClient
from matchday.etl.pipeline import get_or_sync_fixture_events
from matchday.routes.deps import get_api_client, parse_optional_int

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

logger = logging.getLogger(__name__)


async def _load_details(
    session: AsyncSession,
    client: APIFootballClient,
    fixture_id: int,
    settings: Settings,
) -> tuple[Optional[list[dict]], Optional[list[dict]]]:
    """Events and lineups for the detail view; a failed section comes back as None."""
    events: Optional[list[dict]] = None
    lineups: Optional[list[dict]] = None

    try:
        events = await get_or_sync_fixture_events(session, client, fixture_id, settings)
    except (UpstreamError, StoreError, SQLAlchemyError) as e:
        logger.warning(f"[DASHBOARD] Events unavailable for fixture {fixture_id}: {e}")

    try:
        lineups = await client.get_fixture_lineups(fixture_id)
    except UpstreamError as e:
        logger.warning(f"[DASHBOARD] Lineups unavailable for fixture {fixture_id}: {e}")

    return events, lineups


@router.get("", response_class=HTMLResponse)
async def dashboard(
    tab: str = "today",
    league: Optional[str] = None,
    favourites: Optional[str] = None,
    fixture: Optional[str] = None,
    mode: str = "panel",
    session: AsyncSession = Depends(get_async_session),
    client: APIFootballClient = Depends(get_api_client),
    settings: Settings = Depends(get_settings),
):
    state = {
        "tab": tab if tab in TABS else "today",
        "league": parse_optional_int(league),
        "favourites_only": favourites in ("1", "true", "on"),
        "mode": mode if mode in ("panel", "modal") else "panel",
    }

    tz = get_timezone(settings)
    rows = await store.get_fixtures_for_day(session, today_local(settings))
    fixtures = [store.shape_fixture(fx, lg, tz) for fx, lg in rows]
    favourite_teams = await store.list_favourite_teams(session, settings.DEFAULT_USER_ID)

    visible = filter_fixtures(
        fixtures,
        tab=state["tab"],
        league_id=state["league"],
        favourites_only=state["favourites_only"],
        favourites=favourite_teams,
    )

    selected = find_selected(visible, parse_optional_int(fixture))
    details_html = ""
    if selected is not None:
        selected_id = selected["fixture"]["id"]
        state["fixture"] = selected_id
        events, lineups = await _load_details(session, client, selected_id, settings)
        details_html = render_match_details(
            selected,
            events,
            lineups,
            mode=state["mode"],
            close_url=dashboard_url(**{k: v for k, v in state.items() if k != "fixture"}),
        )

    return HTMLResponse(
        content=render_dashboard(visible, derive_leagues(fixtures), favourite_teams, state, details_html)
    )


@router.post("/favourites/toggle")
async def toggle_favourite(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Flip a team's favourite state for the default user (303 back to the dashboard)."""
    form = await request.form()
    team_name = str(form.get("teamName") or "").strip()
    redirect_to = str(form.get("redirect") or "/dashboard")
    if not redirect_to.startswith("/dashboard"):
        redirect_to = "/dashboard"

    if not team_name:
        raise ValidationError("teamName is required")

    user_id = settings.DEFAULT_USER_ID
    current = await store.list_favourite_teams(session, user_id)
    if team_name in current:
        await store.remove_favourite_team(session, user_id, team_name)
        action = "removed"
    else:
        await store.add_favourite_team(session, user_id, team_name)
        action = "added"
    await session.commit()

    logger.info(f"[DASHBOARD] Favourite {action}: user={user_id} team={team_name!r}")
    return RedirectResponse(url=redirect_to, status_code=303)
