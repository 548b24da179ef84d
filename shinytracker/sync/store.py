"""
Local durable store.

Persists the hunt collection and the pending-operation queue as two
independent JSON blobs, plus the cached species list.

INVARIANTS:
- load() never raises: missing or corrupt data yields empty collections.
- Each blob is replaced atomically (write to a temp file, then rename),
  so the last fully written snapshot always wins.
"""

import json
import logging
import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from shinytracker.models.hunt import HuntRecord, format_timestamp, parse_timestamp
from shinytracker.models.operation import PendingOperation
from shinytracker.models.species import SpeciesEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

HUNTS_FILE = "hunts.json"
PENDING_FILE = "pending_ops.json"
SPECIES_FILE = "species.json"


class LocalStore:
    """File-backed snapshot of client state."""

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = Path(state_dir)

    @property
    def hunts_path(self) -> Path:
        return self.state_dir / HUNTS_FILE

    @property
    def pending_path(self) -> Path:
        return self.state_dir / PENDING_FILE

    @property
    def species_path(self) -> Path:
        return self.state_dir / SPECIES_FILE

    def load(self) -> tuple[list[HuntRecord], list[PendingOperation]]:
        """
        Reconstruct the last saved snapshot.

        Each blob is read independently: a corrupt queue does not discard
        the hunts and vice versa.
        """
        records = self._load_list(self.hunts_path, HuntRecord.from_dict)
        ops = self._load_list(self.pending_path, PendingOperation.from_dict)
        return records, ops

    def save(self, records: list[HuntRecord], ops: list[PendingOperation]) -> None:
        """Persist both collections."""
        self._write_json(self.hunts_path, [record.to_dict() for record in records])
        self._write_json(self.pending_path, [op.to_dict() for op in ops])

    def load_species(self) -> tuple[list[SpeciesEntry], datetime | None]:
        """Cached species list and when it was fetched (None if absent)."""
        data = self._read_json(self.species_path)
        if not isinstance(data, dict):
            return [], None
        try:
            fetched_at = parse_timestamp(data.get("fetched_at"))
            entries = [SpeciesEntry.from_dict(item) for item in data.get("entries", [])]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding corrupt species cache %s: %s", self.species_path, e)
            return [], None
        return entries, fetched_at

    def save_species(self, entries: list[SpeciesEntry], fetched_at: datetime) -> None:
        self._write_json(
            self.species_path,
            {
                "fetched_at": format_timestamp(fetched_at),
                "entries": [entry.to_dict() for entry in entries],
            },
        )

    def _load_list(self, path: Path, parse: Callable[[Any], T]) -> list[T]:
        data = self._read_json(path)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Discarding %s: expected a list, got %s", path, type(data).__name__)
            return []
        try:
            return [parse(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding corrupt state file %s: %s", path, e)
            return []

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read state file %s: %s", path, e)
            return None

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, path)
