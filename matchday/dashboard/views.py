"""HTML rendering for the matchday dashboard."""

import html
from typing import Optional
from urllib.parse import urlencode

from matchday.dashboard.filters import format_status, is_live, split_lineups, team_names

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
        background: #0f172a;
        color: #e2e8f0;
        padding: 24px;
    }
    h1 { font-size: 22px; margin-bottom: 16px; }
    a { color: inherit; text-decoration: none; }
    .toolbar { display: flex; gap: 12px; align-items: center; margin-bottom: 16px; flex-wrap: wrap; }
    .tab { padding: 6px 14px; border-radius: 999px; border: 1px solid #334155; }
    .tab.active { background: #2563eb; border-color: #2563eb; }
    select, button { background: #1e293b; color: #e2e8f0; border: 1px solid #334155; border-radius: 6px; padding: 6px 10px; }
    .layout { display: flex; gap: 16px; align-items: flex-start; }
    .list { flex: 1; }
    .fixture { display: flex; align-items: center; gap: 12px; padding: 10px 12px; border-bottom: 1px solid #1e293b; }
    .fixture.selected { background: #1e293b; }
    .fixture .league { width: 160px; color: #94a3b8; font-size: 12px; }
    .fixture .teams { flex: 1; }
    .fixture .score { width: 60px; text-align: center; font-weight: 600; }
    .fixture .status { width: 56px; text-align: center; font-size: 12px; color: #94a3b8; }
    .fixture .status.live { color: #22c55e; font-weight: 600; }
    .star { background: none; border: none; cursor: pointer; font-size: 16px; color: #64748b; padding: 0; }
    .star.on { color: #facc15; }
    .details { width: 560px; background: #1e293b; border-radius: 10px; padding: 16px; }
    .details h2 { font-size: 16px; margin-bottom: 12px; }
    .details h3 { font-size: 13px; color: #94a3b8; margin: 12px 0 6px; text-transform: uppercase; }
    .columns { display: flex; gap: 16px; }
    .columns > div { flex: 1; }
    .muted { color: #64748b; font-size: 13px; }
    .event, .player { font-size: 13px; padding: 2px 0; }
    .overlay { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.6); display: flex; align-items: center; justify-content: center; }
    .overlay .details { max-height: 90vh; overflow-y: auto; }
    .close { float: right; color: #94a3b8; }
"""


def _e(value) -> str:
    return html.escape("" if value is None else str(value))


def dashboard_url(
    tab: str = "today",
    league: Optional[int] = None,
    favourites_only: bool = False,
    fixture: Optional[int] = None,
    mode: str = "panel",
) -> str:
    """Build a /dashboard URL carrying the current filter state."""
    params: dict[str, str] = {}
    if tab != "today":
        params["tab"] = tab
    if league is not None:
        params["league"] = str(league)
    if favourites_only:
        params["favourites"] = "1"
    if fixture is not None:
        params["fixture"] = str(fixture)
    if mode != "panel":
        params["mode"] = mode
    query = urlencode(params)
    return f"/dashboard?{query}" if query else "/dashboard"


def _score(item: dict) -> str:
    goals = item.get("goals") or {}
    home, away = goals.get("home"), goals.get("away")
    if home is None and away is None:
        return "-"
    return f"{_e(home if home is not None else '-')} - {_e(away if away is not None else '-')}"


def _favourite_button(team: Optional[str], favourites: set[str], redirect_to: str) -> str:
    if not team:
        return ""
    on = team in favourites
    return (
        '<form method="post" action="/dashboard/favourites/toggle" style="display:inline">'
        f'<input type="hidden" name="teamName" value="{_e(team)}">'
        f'<input type="hidden" name="redirect" value="{_e(redirect_to)}">'
        f'<button class="star{" on" if on else ""}" title="{"Remove" if on else "Add"} favourite">'
        f'{"&#9733;" if on else "&#9734;"}</button></form>'
    )


def render_fixture_row(item: dict, favourites: set[str], state: dict, selected: bool) -> str:
    fixture = item.get("fixture") or {}
    league = item.get("league") or {}
    home, away = team_names(item)
    here = dashboard_url(**state)
    select_url = dashboard_url(**{**state, "fixture": fixture.get("id")})
    status_class = "status live" if is_live(item) else "status"

    return f"""
        <div class="fixture{' selected' if selected else ''}">
            <div class="league">{_e(league.get("name"))}</div>
            <div class="teams">
                {_favourite_button(home, favourites, here)} {_e(home)}
                <span class="muted">vs</span>
                {_e(away)} {_favourite_button(away, favourites, here)}
            </div>
            <a class="score" href="{_e(select_url)}">{_score(item)}</a>
            <div class="{status_class}">{_e(format_status(item))}</div>
        </div>"""


def _render_events(events: Optional[list[dict]]) -> str:
    if events is None:
        return '<p class="muted">Events unavailable.</p>'
    if not events:
        return '<p class="muted">No events yet.</p>'
    rows = []
    for ev in events:
        minute = (ev.get("time") or {}).get("elapsed")
        team = (ev.get("team") or {}).get("name")
        player = (ev.get("player") or {}).get("name")
        detail = ev.get("detail")
        rows.append(
            f'<div class="event">{_e(minute)}\' {_e(ev.get("type"))}'
            f'{" (" + _e(detail) + ")" if detail else ""}: {_e(player)} '
            f'<span class="muted">{_e(team)}</span></div>'
        )
    return "\n".join(rows)


def _render_lineup(lineup: Optional[dict], fallback_name: Optional[str]) -> str:
    if lineup is None:
        return f"<h3>{_e(fallback_name)}</h3><p class=\"muted\">No lineup.</p>"
    team = (lineup.get("team") or {}).get("name") or fallback_name
    formation = lineup.get("formation")
    players = []
    for entry in lineup.get("startXI") or []:
        player = entry.get("player") or {}
        number = player.get("number")
        players.append(
            f'<div class="player">{_e(number) + ". " if number is not None else ""}{_e(player.get("name"))}'
            f' <span class="muted">{_e(player.get("pos"))}</span></div>'
        )
    return (
        f"<h3>{_e(team)}{' (' + _e(formation) + ')' if formation else ''}</h3>"
        + ("\n".join(players) or '<p class="muted">No starting XI.</p>')
    )


def render_match_details(
    item: dict,
    events: Optional[list[dict]],
    lineups: Optional[list[dict]],
    mode: str = "panel",
    close_url: str = "/dashboard",
) -> str:
    """
    Events and lineups for one fixture.

    ``mode="panel"`` renders an inline side panel, ``mode="modal"`` wraps the
    same markup in a full-screen overlay. ``None`` for events or lineups means
    the fetch failed and an "unavailable" note is shown instead.
    """
    home, away = team_names(item)

    if lineups is None:
        lineups_html = '<p class="muted">Lineups unavailable.</p>'
    else:
        home_lineup, away_lineup = split_lineups(lineups, home, away)
        lineups_html = (
            '<div class="columns">'
            f"<div>{_render_lineup(home_lineup, home)}</div>"
            f"<div>{_render_lineup(away_lineup, away)}</div>"
            "</div>"
        )

    body = f"""
        <div class="details">
            <a class="close" href="{_e(close_url)}">&times;</a>
            <h2>{_e(home)} {_score(item)} {_e(away)} <span class="muted">{_e(format_status(item))}</span></h2>
            <div class="columns">
                <div>
                    <h3>Events</h3>
                    {_render_events(events)}
                </div>
                <div>
                    <h3>Lineups</h3>
                    {lineups_html}
                </div>
            </div>
        </div>"""

    if mode == "modal":
        return f'<div class="overlay">{body}</div>'
    return body


def render_dashboard(
    visible: list[dict],
    leagues: list[dict],
    favourites: list[str],
    state: dict,
    details_html: str = "",
) -> str:
    """Full dashboard page. ``state`` holds the active tab/league/favourites/mode filters."""
    favourite_set = set(favourites)
    selected_id = state.get("fixture")
    filter_state = {k: v for k, v in state.items() if k != "fixture"}

    tabs = "".join(
        f'<a class="tab{" active" if state.get("tab", "today") == tab else ""}" '
        f'href="{_e(dashboard_url(**{**filter_state, "tab": tab}))}">{label}</a>'
        for tab, label in (("today", "Today"), ("live", "Live"))
    )

    league_options = ['<option value="all">All leagues</option>']
    for lg in leagues:
        chosen = " selected" if state.get("league") == lg["id"] else ""
        league_options.append(f'<option value="{_e(lg["id"])}"{chosen}>{_e(lg["name"])}</option>')

    rows = "".join(
        render_fixture_row(
            item,
            favourite_set,
            filter_state,
            selected=(item.get("fixture") or {}).get("id") == selected_id,
        )
        for item in visible
    ) or '<p class="muted" style="padding:12px">No fixtures.</p>'

    mode = state.get("mode", "panel")
    other_mode = "modal" if mode == "panel" else "panel"
    mode_toggle = (
        f'<a class="tab mode-toggle" href="{_e(dashboard_url(**{**state, "mode": other_mode}))}">'
        f'Details: {"overlay" if other_mode == "modal" else "side panel"}</a>'
    )
    panel = details_html if details_html and mode == "panel" else ""
    overlay = details_html if details_html and mode == "modal" else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Matchday</title>
    <style>{_STYLE}</style>
</head>
<body>
    <h1>Matchday</h1>
    <form class="toolbar" method="get" action="/dashboard">
        {tabs}
        {mode_toggle}
        <input type="hidden" name="tab" value="{_e(state.get("tab", "today"))}">
        <input type="hidden" name="mode" value="{_e(mode)}">
        <select name="league" onchange="this.form.submit()">{"".join(league_options)}</select>
        <label><input type="checkbox" name="favourites" value="1"{" checked" if state.get("favourites_only") else ""}
            onchange="this.form.submit()"> Favourites only</label>
    </form>
    <div class="layout">
        <div class="list">{rows}</div>
        {panel}
    </div>
    {overlay}
</body>
</html>"""
