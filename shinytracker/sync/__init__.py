from shinytracker.sync.connectivity import ConnectivityMonitor
from shinytracker.sync.engine import DrainReport, SyncEngine
from shinytracker.sync.projector import (
    GAME_ODDS,
    HuntProgress,
    HuntStats,
    OddsBand,
    active_hunts,
    found_hunts,
    project_progress,
    project_stats,
)
from shinytracker.sync.queue import OperationQueue
from shinytracker.sync.store import LocalStore

__all__ = [
    "GAME_ODDS",
    "ConnectivityMonitor",
    "DrainReport",
    "HuntProgress",
    "HuntStats",
    "LocalStore",
    "OddsBand",
    "OperationQueue",
    "SyncEngine",
    "active_hunts",
    "found_hunts",
    "project_progress",
    "project_stats",
]
