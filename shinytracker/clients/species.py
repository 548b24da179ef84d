"""
Client for the species reference service.

Read-only lookups used when starting a hunt. The full species list is
near-static, so it is cached in the local store for a long TTL.
"""

import logging
from datetime import datetime, timedelta
from typing import Any

import httpx

from shinytracker.models.hunt import utcnow
from shinytracker.models.species import SpeciesEntry, SpeciesInfo
from shinytracker.sync.connectivity import ConnectivityMonitor
from shinytracker.sync.store import LocalStore

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


class SpeciesClient:
    """Species lookups with a TTL-cached full list."""

    def __init__(
        self,
        base_url: str,
        store: LocalStore,
        monitor: ConnectivityMonitor,
        *,
        ttl_seconds: int = 24 * 60 * 60,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.monitor = monitor
        self.ttl = timedelta(seconds=ttl_seconds)
        self.timeout = timeout
        self._http_client = http_client
        self._entries: list[SpeciesEntry] | None = None
        self._fetched_at: datetime | None = None

    async def lookup(self, name: str) -> SpeciesInfo | None:
        """Exact-name lookup. Any failure yields None."""
        name = name.strip().lower()
        if not name or not self.monitor.online:
            return None
        try:
            data = await self._get_json("/pokemon/search", params={"q": name})
            if not data:
                return None
            return SpeciesInfo.from_dict(data[0])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("Species lookup for %r failed: %s", name, e)
            return None

    async def list_all(self) -> list[SpeciesEntry]:
        """
        Full species list.

        Served from the local cache while it is younger than the TTL. An
        empty or failed upstream answer never replaces the cache.
        """
        if self._entries is None:
            self._entries, self._fetched_at = self.store.load_species()

        fresh = self._fetched_at is not None and utcnow() - self._fetched_at < self.ttl
        if (self._entries and fresh) or not self.monitor.online:
            return self._entries

        try:
            data = await self._get_json("/pokemon/list")
            entries = [SpeciesEntry.from_dict(item) for item in data]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.warning("Species list fetch failed: %s", e)
            return self._entries

        if entries:
            self._entries = entries
            self._fetched_at = utcnow()
            self.store.save_species(entries, self._fetched_at)
        return self._entries

    async def search(self, query: str, limit: int = 10) -> list[SpeciesInfo]:
        """
        Substring search over the cached list.

        Falls back to an exact remote lookup when nothing in the list
        matches.
        """
        query = query.strip().lower()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        entries = await self.list_all()
        matches = [entry for entry in entries if query in entry.name][:limit]
        if matches:
            return [SpeciesInfo(name=e.name, id=e.id, sprite=e.sprite) for e in matches]

        found = await self.lookup(query)
        return [found] if found else []

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        if self._http_client is not None:
            response = await self._http_client.get(url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()
