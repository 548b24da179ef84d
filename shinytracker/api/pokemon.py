"""
Species reference endpoints.

Proxies PokeAPI so clients never call it directly. Upstream failures
degrade to empty results instead of errors.
"""

import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from shinytracker.services.pokeapi import PokeApiError, fetch_species, species_list_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pokemon", tags=["pokemon"])


class SpeciesResult(BaseModel):
    """Exact lookup result."""

    name: str
    sprite: str = ""
    types: list[str] = Field(default_factory=list)
    id: int


class SpeciesListEntry(BaseModel):
    name: str
    id: int
    sprite: str = ""


@router.get("/search", response_model=list[SpeciesResult])
async def search_species(q: str = Query(default="")) -> list[SpeciesResult]:
    """Exact-name lookup. Returns an empty list on a miss."""
    if not q.strip():
        return []

    try:
        species = await fetch_species(q)
    except (PokeApiError, KeyError, TypeError, ValueError) as e:
        logger.warning("Species search for %r failed: %s", q, e)
        return []

    return [SpeciesResult(**species)] if species else []


@router.get("/list", response_model=list[SpeciesListEntry])
async def list_species() -> list[SpeciesListEntry]:
    """Full species list, cached for a day. Empty if PokeAPI is down."""
    entries = await species_list_cache.get()
    return [SpeciesListEntry(**entry) for entry in entries]
