from shinytracker.db.database import get_session, init_db
from shinytracker.db.operations import (
    UPDATABLE_FIELDS,
    HuntTotals,
    create_hunt,
    delete_hunt,
    get_hunt,
    get_hunt_totals,
    list_hunts,
    update_hunt,
)

__all__ = [
    "UPDATABLE_FIELDS",
    "HuntTotals",
    "create_hunt",
    "delete_hunt",
    "get_hunt",
    "get_hunt_totals",
    "get_session",
    "init_db",
    "list_hunts",
    "update_hunt",
]
