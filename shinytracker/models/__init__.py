from shinytracker.models.hunt import (
    HuntId,
    HuntRecord,
    NewHunt,
    PendingId,
    ServerId,
    format_timestamp,
    hunt_id_from_json,
    hunt_id_to_json,
    parse_timestamp,
    utcnow,
)
from shinytracker.models.operation import (
    OperationKind,
    PendingOperation,
    completion_payload,
    counter_payload,
)
from shinytracker.models.species import SpeciesEntry, SpeciesInfo

__all__ = [
    "HuntId",
    "HuntRecord",
    "NewHunt",
    "OperationKind",
    "PendingId",
    "PendingOperation",
    "ServerId",
    "SpeciesEntry",
    "SpeciesInfo",
    "completion_payload",
    "counter_payload",
    "format_timestamp",
    "hunt_id_from_json",
    "hunt_id_to_json",
    "parse_timestamp",
    "utcnow",
]
