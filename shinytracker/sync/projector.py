"""
State projector.

Pure functions deriving every user-visible aggregate from the current hunt
collection. Nothing here is cached: callers recompute from scratch after
each state change.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from shinytracker.models.hunt import HuntRecord

# Base shiny odds denominator per game; None means no shiny mechanic
GAME_ODDS: dict[str, int | None] = {
    "Red/Blue": None,
    "Yellow": None,
    "Gold/Silver": 8192,
    "Crystal": 8192,
    "Ruby/Sapphire": 8192,
    "Emerald": 8192,
    "FireRed/LeafGreen": 8192,
    "Diamond/Pearl": 8192,
    "Platinum": 8192,
    "HeartGold/SoulSilver": 8192,
    "Black/White": 8192,
    "Black 2/White 2": 8192,
    "X/Y": 4096,
    "Omega Ruby/Alpha Sapphire": 4096,
    "Sun/Moon": 4096,
    "Ultra Sun/Ultra Moon": 4096,
    "Sword/Shield": 4096,
    "Brilliant Diamond/Shining Pearl": 4096,
    "Legends: Arceus": 4096,
    "Scarlet/Violet": 4096,
}


class OddsBand(str, Enum):
    """How likely a shiny should have appeared by now."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class HuntStats:
    """Collection-wide aggregates."""

    hunts_started: int
    active_count: int
    found_count: int
    total_encounters: int
    average_encounters: int | None
    luckiest: HuntRecord | None
    longest: HuntRecord | None


@dataclass(frozen=True, slots=True)
class HuntProgress:
    """Per-hunt derived values shown on a hunt card."""

    base_odds: int | None
    probability: float | None
    band: OddsBand | None
    progress_percent: int | None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def active_hunts(records: Sequence[HuntRecord]) -> list[HuntRecord]:
    """Hunts still in progress, in collection order."""
    return [record for record in records if not record.completed]


def found_hunts(records: Sequence[HuntRecord]) -> list[HuntRecord]:
    """Completed hunts, in collection order."""
    return [record for record in records if record.completed]


def project_stats(records: Sequence[HuntRecord]) -> HuntStats:
    """
    Compute collection aggregates.

    The average covers found shinies only and is rounded to a whole
    encounter count. Luckiest/longest keep the first record on ties.
    """
    found = found_hunts(records)
    found_total = sum(record.encounter_count for record in found)

    return HuntStats(
        hunts_started=len(records),
        active_count=len(records) - len(found),
        found_count=len(found),
        total_encounters=sum(record.encounter_count for record in records),
        average_encounters=_round_half_up(found_total / len(found)) if found else None,
        luckiest=min(found, key=lambda r: r.encounter_count) if found else None,
        longest=max(found, key=lambda r: r.encounter_count) if found else None,
    )


def shiny_probability(count: int, odds: int | None) -> float:
    """
    Chance (percent) of at least one shiny in `count` encounters.

    Returns 0.0 when there is no shiny mechanic or no encounters yet.
    """
    if not odds or count <= 0:
        return 0.0
    return (1 - (1 - 1 / odds) ** count) * 100


def odds_band(count: int, odds: int | None) -> OddsBand | None:
    if not odds:
        return None
    probability = shiny_probability(count, odds)
    if probability >= 75:
        return OddsBand.HIGH
    if probability >= 40:
        return OddsBand.MEDIUM
    return OddsBand.LOW


def progress_percent(count: int, target: int | None) -> int | None:
    """Progress toward the target count, capped at 100."""
    if not target:
        return None
    return min(100, _round_half_up(count / target * 100))


def project_progress(record: HuntRecord) -> HuntProgress:
    odds = GAME_ODDS.get(record.game)
    return HuntProgress(
        base_odds=odds,
        probability=shiny_probability(record.encounter_count, odds) if odds else None,
        band=odds_band(record.encounter_count, odds),
        progress_percent=progress_percent(record.encounter_count, record.target_count),
    )
