"""
One-shot sync of the local hunt snapshot.

Loads the local store, replays the pending queue against the remote
authority and refreshes from it, then logs the resulting stats.

Usage:
    python -m shinytracker.jobs.sync_hunts --state-dir ~/.shinytracker
    python -m shinytracker.jobs.sync_hunts --offline
"""

import argparse
import asyncio
import logging
from pathlib import Path

from shinytracker.clients.hunts import HuntsClient
from shinytracker.config import settings
from shinytracker.sync.connectivity import ConnectivityMonitor
from shinytracker.sync.engine import DrainReport, SyncEngine
from shinytracker.sync.store import LocalStore

logger = logging.getLogger(__name__)


async def run_sync(state_dir: Path, api_url: str, *, online: bool = True) -> DrainReport:
    """
    Drain and refresh once.

    Args:
        state_dir: Local store directory
        api_url: Remote authority base URL
        online: If False, only report what is cached locally

    Returns:
        Drain outcome (all zeros when offline or nothing was queued)
    """
    monitor = ConnectivityMonitor(online=online)
    engine = SyncEngine(
        HuntsClient(api_url, timeout=settings.request_timeout),
        LocalStore(state_dir),
        monitor,
    )
    logger.info(
        "Loaded %d hunts and %d pending operations from %s",
        len(engine.records),
        len(engine.queue),
        state_dir,
    )

    report = DrainReport()
    if online and engine.queue:
        # drain() ends with its own refresh
        report = await engine.drain()
    elif online:
        await engine.reconcile()
    await engine.flush()

    stats = engine.stats
    logger.info(
        "Hunts: %d active, %d found, %d encounters total; %d operations still pending",
        stats.active_count,
        stats.found_count,
        stats.total_encounters,
        len(engine.queue),
    )
    return report


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Sync local shiny hunts with the server")
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=settings.state_dir,
        help="Directory holding the local hunt snapshot",
    )
    parser.add_argument(
        "--api-url",
        default=settings.api_base_url,
        help="Hunt server API base URL",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not contact the server; only report local state",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_sync(args.state_dir, args.api_url, online=not args.offline))


if __name__ == "__main__":
    main()
