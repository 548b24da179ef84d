from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class SpeciesEntry:
    """One entry of the full species list (for autocomplete)."""

    name: str
    id: int
    sprite: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "id": self.id, "sprite": self.sprite}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeciesEntry":
        return cls(name=str(data["name"]), id=int(data["id"]), sprite=data.get("sprite") or "")


@dataclass(frozen=True, slots=True)
class SpeciesInfo:
    """Exact-name lookup result, enough to start a hunt."""

    name: str
    id: int
    sprite: str = ""
    types: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeciesInfo":
        return cls(
            name=str(data["name"]),
            id=int(data["id"]),
            sprite=data.get("sprite") or "",
            types=[str(t) for t in data.get("types") or []],
        )
