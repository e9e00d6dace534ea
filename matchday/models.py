"""Database models using SQLModel."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class League(SQLModel, table=True):
    """Competition metadata, only ever seen inside fixture payloads."""

    __tablename__ = "leagues"

    id: int = Field(
        primary_key=True,
        sa_column_kwargs={"autoincrement": False},
        description="API-Football league ID",
    )
    name: str = Field(max_length=255)
    country: Optional[str] = Field(default=None, max_length=100)
    logo: Optional[str] = Field(default=None, max_length=500)
    flag: Optional[str] = Field(default=None, max_length=500)


class Fixture(SQLModel, table=True):
    """A single match; status and goals are overwritten on every sync."""

    __tablename__ = "fixtures"

    id: int = Field(
        primary_key=True,
        sa_column_kwargs={"autoincrement": False},
        description="API-Football fixture ID",
    )
    league_id: int = Field(foreign_key="leagues.id", index=True)

    home_team: str = Field(max_length=255)
    home_logo: Optional[str] = Field(default=None, max_length=500)
    away_team: str = Field(max_length=255)
    away_logo: Optional[str] = Field(default=None, max_length=500)

    start_time: datetime = Field(
        sa_type=DateTime(timezone=False),
        index=True,
        description="Kickoff, naive server-local time",
    )

    status_short: str = Field(max_length=20, default="NS", description="NS, 1H, HT, FT, ...")
    status_long: Optional[str] = Field(default=None, max_length=100)
    status_elapsed: Optional[int] = Field(default=None, description="NULL before kickoff")

    home_goals: Optional[int] = Field(default=None, description="NULL if not played")
    away_goals: Optional[int] = Field(default=None, description="NULL if not played")


class Event(SQLModel, table=True):
    """Match event (goal, card, substitution). Replaced wholesale per fixture."""

    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    fixture_id: int = Field(foreign_key="fixtures.id", index=True)
    time_elapsed: Optional[int] = Field(default=None)
    team_name: Optional[str] = Field(default=None, max_length=255)
    player_name: Optional[str] = Field(default=None, max_length=255)
    type: Optional[str] = Field(default=None, max_length=50, description="Goal, Card, subst, Var")
    detail: Optional[str] = Field(default=None, max_length=255)


class EventSync(SQLModel, table=True):
    """Marks that a fixture's events were fetched, even when upstream had none."""

    __tablename__ = "event_syncs"

    fixture_id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    synced_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime(timezone=False))  # naive UTC
    event_count: int = Field(default=0)


class FavouriteTeam(SQLModel, table=True):
    """Per-user favourite, keyed by team display name."""

    __tablename__ = "favourite_teams"
    __table_args__ = (
        UniqueConstraint("user_id", "team_name", name="uq_favourite_user_team"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    team_name: str = Field(max_length=255)
