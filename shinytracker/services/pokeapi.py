"""
PokeAPI access for the hunt server.

Exact-name species lookups and the full species list. The list is cached
in process: it changes only when new games ship.
"""

import logging
import re
import time
from typing import Any

import httpx

from shinytracker.config import settings

logger = logging.getLogger(__name__)

SHINY_SPRITE_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/shiny/{id}.png"
)

_ID_FROM_URL = re.compile(r"/pokemon/(\d+)/?$")


class PokeApiError(Exception):
    """Raised when PokeAPI cannot be reached or answers with an error."""

    pass


async def fetch_species(name: str, *, base_url: str | None = None) -> dict[str, Any] | None:
    """
    Look up one species by exact name.

    Args:
        name: Species name, case-insensitive

    Returns:
        {name, sprite, types, id}, or None if PokeAPI has no such species

    Raises:
        PokeApiError: If the request fails for any other reason
    """
    url = f"{(base_url or settings.pokeapi_url).rstrip('/')}/pokemon/{name.strip().lower()}"
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            response = await client.get(url)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        raise PokeApiError(f"Species lookup failed: HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise PokeApiError(f"Species lookup failed: {e}") from e

    sprites = data.get("sprites") or {}
    return {
        "name": data["name"],
        "sprite": sprites.get("front_shiny") or sprites.get("front_default") or "",
        "types": [t["type"]["name"] for t in data.get("types", [])],
        "id": data["id"],
    }


async def fetch_species_list(
    *, base_url: str | None = None, limit: int | None = None
) -> list[dict[str, Any]]:
    """
    Fetch the full species list as [{name, id, sprite}].

    Raises:
        PokeApiError: If the request fails
    """
    url = f"{(base_url or settings.pokeapi_url).rstrip('/')}/pokemon"
    params = {"limit": str(limit or settings.species_list_limit)}
    try:
        async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        raise PokeApiError(f"Species list failed: HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise PokeApiError(f"Species list failed: {e}") from e

    entries: list[dict[str, Any]] = []
    for index, item in enumerate(data.get("results", [])):
        match = _ID_FROM_URL.search(item.get("url", ""))
        species_id = int(match.group(1)) if match else index + 1
        entries.append(
            {
                "name": item["name"],
                "id": species_id,
                "sprite": SHINY_SPRITE_URL.format(id=species_id),
            }
        )
    return entries


class SpeciesListCache:
    """Time-bounded in-memory cache of the species list."""

    def __init__(self, ttl_seconds: int) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: list[dict[str, Any]] = []
        self._fetched_at = 0.0

    async def get(self) -> list[dict[str, Any]]:
        """
        Cached list, refetched once the TTL has passed.

        Returns an empty list if PokeAPI is down and nothing is cached yet.
        """
        if self._entries and time.monotonic() - self._fetched_at < self.ttl_seconds:
            return self._entries

        try:
            entries = await fetch_species_list()
        except PokeApiError as e:
            logger.warning("Could not refresh species list: %s", e)
            return self._entries

        if entries:
            self._entries = entries
            self._fetched_at = time.monotonic()
        return self._entries

    def clear(self) -> None:
        self._entries = []
        self._fetched_at = 0.0


species_list_cache = SpeciesListCache(ttl_seconds=settings.species_cache_ttl_seconds)
