"""
Stats API endpoint.

Server-side aggregates over all stored hunts.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from shinytracker.db import get_hunt_totals
from shinytracker.db.database import get_session
from shinytracker.models.db import ShinyHuntDB

router = APIRouter(prefix="/api/stats", tags=["stats"])


class HuntHighlight(BaseModel):
    species_name: str
    encounter_count: int


class StatsResponse(BaseModel):
    """Aggregates; averages and highlights cover completed hunts only."""

    active_count: int = 0
    completed_count: int = 0
    total_encounters: int = 0
    avg_encounters: float | None = None
    luckiest: HuntHighlight | None = None
    longest: HuntHighlight | None = None


def _highlight(hunt: ShinyHuntDB | None) -> HuntHighlight | None:
    if hunt is None:
        return None
    return HuntHighlight(species_name=hunt.species_name, encounter_count=hunt.encounter_count)


@router.get("", response_model=StatsResponse)
async def get_stats(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatsResponse:
    totals = await get_hunt_totals(session)
    return StatsResponse(
        active_count=totals.active_count,
        completed_count=totals.completed_count,
        total_encounters=totals.total_encounters,
        avg_encounters=totals.avg_encounters,
        luckiest=_highlight(totals.luckiest),
        longest=_highlight(totals.longest),
    )
