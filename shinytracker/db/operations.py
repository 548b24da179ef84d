"""
Database CRUD operations for shiny hunts.

Provides async functions for creating, reading, updating, and deleting
hunts, plus the aggregate stats query.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shinytracker.models.db import ShinyHuntDB

# Columns a client may overwrite through a partial update
UPDATABLE_FIELDS = frozenset({"encounter_count", "completed", "completed_at", "target_count"})


@dataclass
class HuntTotals:
    """Aggregates over every stored hunt."""

    active_count: int
    completed_count: int
    total_encounters: int
    avg_encounters: float | None
    luckiest: ShinyHuntDB | None
    longest: ShinyHuntDB | None


async def list_hunts(session: AsyncSession) -> list[ShinyHuntDB]:
    """All hunts, most recently started first."""
    result = await session.execute(
        select(ShinyHuntDB).order_by(ShinyHuntDB.started_at.desc(), ShinyHuntDB.id.desc())
    )
    return list(result.scalars().all())


async def get_hunt(session: AsyncSession, hunt_id: int) -> ShinyHuntDB | None:
    return await session.get(ShinyHuntDB, hunt_id)


async def create_hunt(
    session: AsyncSession,
    species_name: str,
    game: str,
    sprite_url: str = "",
    types: list[str] | None = None,
    target_count: int | None = None,
) -> ShinyHuntDB:
    """
    Insert a new hunt.

    The id and started_at are assigned by the database; the row is
    refreshed so both are populated on return.
    """
    hunt = ShinyHuntDB(
        species_name=species_name,
        game=game,
        sprite_url=sprite_url,
        types=list(types or []),
        encounter_count=0,
        target_count=target_count,
        completed=False,
    )
    session.add(hunt)
    await session.flush()
    await session.refresh(hunt)
    return hunt


async def update_hunt(
    session: AsyncSession, hunt_id: int, fields: dict[str, Any]
) -> ShinyHuntDB | None:
    """
    Overwrite the given fields of a hunt.

    Returns None if the hunt does not exist.

    Raises:
        ValueError: If no updatable field is given
    """
    changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
    if not changes:
        raise ValueError("No fields to update")

    hunt = await get_hunt(session, hunt_id)
    if hunt is None:
        return None

    for name, value in changes.items():
        setattr(hunt, name, value)
    await session.flush()
    return hunt


async def delete_hunt(session: AsyncSession, hunt_id: int) -> bool:
    """
    Delete a hunt.

    Returns True if a row was deleted, False if it did not exist.
    """
    result = await session.execute(delete(ShinyHuntDB).where(ShinyHuntDB.id == hunt_id))
    # rowcount is available on DELETE results; type stubs incomplete for async
    return bool(result.rowcount)  # type: ignore[attr-defined]


async def get_hunt_totals(session: AsyncSession) -> HuntTotals:
    """Compute collection-wide aggregates in the database."""
    completed = ShinyHuntDB.completed.is_(True)
    totals = (
        await session.execute(
            select(
                func.count().filter(ShinyHuntDB.completed.is_(False)),
                func.count().filter(completed),
                func.coalesce(func.sum(ShinyHuntDB.encounter_count), 0),
                func.avg(ShinyHuntDB.encounter_count).filter(completed),
            )
        )
    ).one()

    luckiest = await session.execute(
        select(ShinyHuntDB)
        .where(completed)
        .order_by(ShinyHuntDB.encounter_count.asc(), ShinyHuntDB.id.asc())
        .limit(1)
    )
    longest = await session.execute(
        select(ShinyHuntDB)
        .where(completed)
        .order_by(ShinyHuntDB.encounter_count.desc(), ShinyHuntDB.id.asc())
        .limit(1)
    )

    return HuntTotals(
        active_count=int(totals[0]),
        completed_count=int(totals[1]),
        total_encounters=int(totals[2]),
        avg_encounters=float(totals[3]) if totals[3] is not None else None,
        luckiest=luckiest.scalar_one_or_none(),
        longest=longest.scalar_one_or_none(),
    )
