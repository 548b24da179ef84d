"""
Hunt records and their identifiers.

A hunt lives in exactly one of two id spaces:
- ServerId: assigned by the remote authority, stable.
- PendingId: assigned locally while offline, always negative, so it can
  never collide with a server id.

INVARIANT: a record is server-backed iff its id is a ServerId.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (or pass through a datetime)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_timestamp(value: datetime | None) -> str | None:
    """Format a datetime as ISO-8601, keeping None as None."""
    return value.isoformat() if value is not None else None


@dataclass(frozen=True, slots=True)
class ServerId:
    """Identifier assigned by the remote authority."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class PendingId:
    """Temporary identifier for a hunt that never reached the server."""

    value: int

    def __post_init__(self) -> None:
        if self.value >= 0:
            raise ValueError(f"Pending ids must be negative, got {self.value}")

    def __str__(self) -> str:
        return f"pending{self.value}"


HuntId = ServerId | PendingId


def hunt_id_to_json(hunt_id: HuntId) -> dict[str, int]:
    """Encode an id as a tagged JSON object."""
    if isinstance(hunt_id, ServerId):
        return {"server": hunt_id.value}
    return {"pending": hunt_id.value}


def hunt_id_from_json(data: Any) -> HuntId:
    """
    Decode a tagged JSON id.

    Raises:
        ValueError: If the value is not a tagged id object
    """
    if isinstance(data, dict) and len(data) == 1:
        ((tag, value),) = data.items()
        if tag == "server" and isinstance(value, int):
            return ServerId(value)
        if tag == "pending" and isinstance(value, int):
            return PendingId(value)
    raise ValueError(f"Not a hunt id: {data!r}")


@dataclass(slots=True)
class NewHunt:
    """
    User input for starting a hunt.

    Attributes:
        species_name: Pokémon species (e.g., "pikachu")
        game: Game title the hunt takes place in (e.g., "Yellow")
        sprite_url: Sprite shown on the hunt card
        types: Elemental types in display order
        target_count: Optional encounter goal, used for progress display
    """

    species_name: str
    game: str
    sprite_url: str = ""
    types: list[str] = field(default_factory=list)
    target_count: int | None = None

    def __post_init__(self) -> None:
        if not self.species_name or not self.game:
            raise ValueError("A hunt needs both a species and a game")
        if self.target_count is not None and self.target_count <= 0:
            raise ValueError(f"Target count must be positive, got {self.target_count}")

    def to_api(self) -> dict[str, Any]:
        """Request body for the remote create call."""
        return {
            "species_name": self.species_name,
            "game": self.game,
            "sprite_url": self.sprite_url,
            "types": list(self.types),
            "target_count": self.target_count,
        }


@dataclass(slots=True)
class HuntRecord:
    """
    One shiny hunting session.

    Descriptive fields (species, game, sprite, types, target, started_at)
    are set once at creation. encounter_count and the completion pair are
    the only fields the user edits.

    INVARIANT: encounter_count >= 0.
    INVARIANT: completed_at is set iff completed is True.
    """

    id: HuntId
    species_name: str
    game: str
    sprite_url: str = ""
    types: list[str] = field(default_factory=list)
    encounter_count: int = 0
    target_count: int | None = None
    completed: bool = False
    completed_at: datetime | None = None
    started_at: datetime = field(default_factory=utcnow)

    @property
    def is_local_only(self) -> bool:
        """True if this record has no remote counterpart yet."""
        return isinstance(self.id, PendingId)

    @classmethod
    def from_new_hunt(cls, hunt_id: PendingId, new_hunt: NewHunt) -> "HuntRecord":
        """Synthesize a local-only record for a hunt created offline."""
        return cls(
            id=hunt_id,
            species_name=new_hunt.species_name,
            game=new_hunt.game,
            sprite_url=new_hunt.sprite_url,
            types=list(new_hunt.types),
            target_count=new_hunt.target_count,
        )

    def apply_payload(self, payload: dict[str, Any]) -> None:
        """Apply a partial update payload (wire form) to this record."""
        if "encounter_count" in payload:
            self.encounter_count = max(0, int(payload["encounter_count"]))
        if "completed" in payload:
            self.completed = bool(payload["completed"])
        if "completed_at" in payload:
            self.completed_at = parse_timestamp(payload["completed_at"])
        if "target_count" in payload:
            self.target_count = payload["target_count"]

    def wire_fields(self, names: Iterable[str]) -> dict[str, Any]:
        """Current values of the named editable fields, wire form."""
        editable = {
            "encounter_count": self.encounter_count,
            "completed": self.completed,
            "completed_at": format_timestamp(self.completed_at),
            "target_count": self.target_count,
        }
        return {name: editable[name] for name in names if name in editable}

    def to_dict(self) -> dict[str, Any]:
        """Persisted form, with a tagged id."""
        return {
            "id": hunt_id_to_json(self.id),
            "species_name": self.species_name,
            "game": self.game,
            "sprite_url": self.sprite_url,
            "types": list(self.types),
            "encounter_count": self.encounter_count,
            "target_count": self.target_count,
            "completed": self.completed,
            "completed_at": format_timestamp(self.completed_at),
            "started_at": format_timestamp(self.started_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HuntRecord":
        """Rebuild a record from its persisted form."""
        return cls._from_fields(hunt_id_from_json(data["id"]), data)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "HuntRecord":
        """Build a server-backed record from a remote authority response."""
        return cls._from_fields(ServerId(int(data["id"])), data)

    @classmethod
    def _from_fields(cls, hunt_id: HuntId, data: dict[str, Any]) -> "HuntRecord":
        types = data.get("types") or []
        if not isinstance(types, list):
            raise ValueError(f"types must be a list, got {type(types).__name__}")
        return cls(
            id=hunt_id,
            species_name=str(data["species_name"]),
            game=str(data["game"]),
            sprite_url=data.get("sprite_url") or "",
            types=[str(t) for t in types],
            encounter_count=max(0, int(data.get("encounter_count") or 0)),
            target_count=data.get("target_count"),
            completed=bool(data.get("completed", False)),
            completed_at=parse_timestamp(data.get("completed_at")),
            started_at=parse_timestamp(data.get("started_at")) or utcnow(),
        )
