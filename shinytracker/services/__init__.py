"""
Shiny Tracker server services.

Upstream species data for the hunt server.
"""

from shinytracker.services.pokeapi import (
    PokeApiError,
    SpeciesListCache,
    fetch_species,
    fetch_species_list,
    species_list_cache,
)

__all__ = [
    "PokeApiError",
    "SpeciesListCache",
    "fetch_species",
    "fetch_species_list",
    "species_list_cache",
]
