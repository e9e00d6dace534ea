"""Upsert helper shared by the sync job and the favourites endpoints."""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

_NATIVE_UPSERT_DIALECTS = ("postgresql", "sqlite")


def _insert_for(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    return insert


async def upsert(
    session: AsyncSession,
    model: type[SQLModel],
    values: dict[str, Any],
    conflict_columns: list[str],
    update_columns: Optional[list[str]] = None,
) -> None:
    """
    Insert ``values`` or, when a row with the same ``conflict_columns`` exists,
    overwrite ``update_columns`` on it (all other columns by default).

    Pass ``update_columns=[]`` to insert only when absent.

    PostgreSQL and SQLite get a single INSERT ... ON CONFLICT; anything else
    falls back to SELECT then INSERT/UPDATE inside the caller's transaction.

    Example:
        await upsert(session, Fixture, fixture.to_row(), conflict_columns=["id"])
    """
    if update_columns is None:
        update_columns = [name for name in values if name not in conflict_columns]

    dialect_name = session.get_bind().dialect.name
    if dialect_name in _NATIVE_UPSERT_DIALECTS:
        stmt = _insert_for(dialect_name)(model).values(**values)
        if update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict_columns,
                set_={name: stmt.excluded[name] for name in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
        await session.execute(stmt)
        return

    logger.debug(f"Upsert on {model.__name__} via SELECT fallback ({dialect_name})")
    result = await session.execute(
        select(model).where(*(getattr(model, name) == values[name] for name in conflict_columns))
    )
    row = result.scalar_one_or_none()
    if row is None:
        session.add(model(**values))
    else:
        for name in update_columns:
            setattr(row, name, values[name])
    await session.flush()
