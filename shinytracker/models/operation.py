"""
Pending operations: mutations not yet confirmed by the remote authority.

Creation is never queued; a hunt created offline stays local-only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shinytracker.models.hunt import (
    HuntId,
    HuntRecord,
    format_timestamp,
    hunt_id_from_json,
    hunt_id_to_json,
)


class OperationKind(str, Enum):
    """Kind of deferred mutation."""

    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True)
class PendingOperation:
    """
    A deferred mutation against one hunt.

    Attributes:
        kind: Update or Delete
        target_id: Id (pending or server) of the affected hunt
        payload: Fields to overwrite, wire form. Empty for Delete.
        attempts: Failed transient replays so far
    """

    kind: OperationKind
    target_id: HuntId
    payload: dict[str, Any] = field(default_factory=dict)
    attempts: int = 0

    @classmethod
    def update(cls, target_id: HuntId, payload: dict[str, Any]) -> "PendingOperation":
        if not payload:
            raise ValueError("An update needs at least one field")
        return cls(kind=OperationKind.UPDATE, target_id=target_id, payload=dict(payload))

    @classmethod
    def delete(cls, target_id: HuntId) -> "PendingOperation":
        return cls(kind=OperationKind.DELETE, target_id=target_id)

    @property
    def fields(self) -> frozenset[str]:
        """Field names this operation writes."""
        return frozenset(self.payload)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target_id": hunt_id_to_json(self.target_id),
            "payload": dict(self.payload),
            "attempts": self.attempts,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingOperation":
        payload = data.get("payload") or {}
        if not isinstance(payload, dict):
            raise ValueError(f"payload must be an object, got {type(payload).__name__}")
        return cls(
            kind=OperationKind(data["kind"]),
            target_id=hunt_id_from_json(data["target_id"]),
            payload=payload,
            attempts=int(data.get("attempts", 0)),
        )


def counter_payload(record: HuntRecord) -> dict[str, Any]:
    """Full current encounter count (never a delta)."""
    return {"encounter_count": record.encounter_count}


def completion_payload(record: HuntRecord) -> dict[str, Any]:
    """The completed flag and its timestamp, always together."""
    return {
        "completed": record.completed,
        "completed_at": format_timestamp(record.completed_at),
    }
