"""
Offline-first sync engine.

Owns the in-memory hunt collection and the pending-operation queue, and is
the only writer of either. Every user action follows the same pattern:

1. Apply the mutation locally, unconditionally (optimistic update).
2. Persist both collections.
3. Notify listeners so derived views are recomputed.
4. Push the change to the remote authority if online; queue it otherwise,
   or when the push fails transiently.

INVARIANTS:
- Updates always carry the full current field value, read when the request
  is issued, never a delta. Replays are idempotent in any order.
- Remote update responses are never adopted into local state.
- A failed full refresh leaves the local collection untouched.
- Local-only records (PendingId) are never replaced by a refresh.
- Remote failures never escape an action, a drain or a refresh.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from shinytracker.clients.hunts import HuntsRemote, RemoteError, RemoteRejected
from shinytracker.config import settings
from shinytracker.models.hunt import HuntId, HuntRecord, NewHunt, PendingId, utcnow
from shinytracker.models.operation import (
    OperationKind,
    PendingOperation,
    completion_payload,
    counter_payload,
)
from shinytracker.sync.connectivity import ConnectivityMonitor
from shinytracker.sync.projector import HuntStats, project_stats
from shinytracker.sync.queue import OperationQueue
from shinytracker.sync.store import LocalStore

logger = logging.getLogger(__name__)

StateListener = Callable[["SyncEngine"], None]
Confirm = Callable[[HuntRecord], bool]


@dataclass
class DrainReport:
    """Outcome of one drain pass."""

    sent: int = 0
    requeued: int = 0
    dropped: int = 0


class SyncEngine:
    """
    Coordinates local state, the operation queue and the remote authority.

    Args:
        remote: Remote hunt authority
        store: Local durable store; its snapshot is loaded immediately
        monitor: Connectivity monitor; reconnects trigger drain + refresh
        debounce_seconds: Delay before a counter change is pushed
        max_attempts: Transient failures tolerated per queued operation
    """

    def __init__(
        self,
        remote: HuntsRemote,
        store: LocalStore,
        monitor: ConnectivityMonitor,
        *,
        debounce_seconds: float | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.remote = remote
        self.store = store
        self.monitor = monitor
        self.debounce_seconds = (
            settings.counter_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.max_attempts = settings.max_sync_attempts if max_attempts is None else max_attempts

        records, ops = store.load()
        self.records: list[HuntRecord] = records
        self.queue = OperationQueue(ops)
        self.syncing = False

        self._draining = False
        self._listeners: list[StateListener] = []
        self._counter_pushes: dict[HuntId, asyncio.Task[None]] = {}
        # Sent but not yet acknowledged: direct pushes and the drain snapshot
        self._pushes_in_flight: list[PendingOperation] = []
        self._in_flight: list[PendingOperation] = []
        self._next_pending = self._lowest_pending_id(records, ops) - 1

        monitor.on_reconnect(self.handle_reconnect)
        monitor.on_disconnect(self._notify)

    # --- State access ---

    @property
    def online(self) -> bool:
        return self.monitor.online

    @property
    def stats(self) -> HuntStats:
        return project_stats(self.records)

    def get(self, hunt_id: HuntId) -> HuntRecord | None:
        return next((record for record in self.records if record.id == hunt_id), None)

    def subscribe(self, listener: StateListener) -> None:
        """Register a callback run after every state change."""
        self._listeners.append(listener)

    # --- Reconciliation ---

    async def reconcile(self) -> bool:
        """
        Replace server-backed records with the remote authority's full set.

        Local-only records are kept and placed first. Still-queued updates
        are laid over the fetched records and hunts with a queued delete are
        left out. Fields with a push still out keep their local value, so
        unacknowledged local changes never regress.

        Returns:
            True if the refresh succeeded
        """
        if not self.online:
            return False

        try:
            fetched = await self.remote.list_hunts()
        except RemoteError as e:
            logger.warning("Refresh failed, keeping cached hunts: %s", e)
            return False

        local_only = [record for record in self.records if record.is_local_only]
        merged: list[HuntRecord] = []
        for record in fetched:
            if self.queue.has_delete(record.id) or self._deleting(record.id):
                continue
            for op in self.queue.for_target(record.id):
                record.apply_payload(op.payload)
            current = self.get(record.id)
            if current is not None:
                record.apply_payload(current.wire_fields(self._unacknowledged_fields(record.id)))
            merged.append(record)

        self.records = local_only + merged
        self._commit()
        logger.debug("Refreshed %d hunts (%d local-only)", len(merged), len(local_only))
        return True

    async def create_record(self, new_hunt: NewHunt) -> HuntRecord:
        """
        Start a hunt.

        Tries the remote create first when online. On any failure the hunt
        is created locally with a fresh pending id. Creation is never
        queued or retried.
        """
        record: HuntRecord | None = None
        if self.online:
            try:
                record = await self.remote.create_hunt(new_hunt)
            except RemoteError as e:
                logger.warning("Remote create failed, keeping hunt local: %s", e)

        if record is None:
            record = HuntRecord.from_new_hunt(self._allocate_pending_id(), new_hunt)

        self.records.insert(0, record)
        self._commit()
        return record

    # --- Mutation actions ---

    async def adjust_counter(self, hunt_id: HuntId, delta: int) -> HuntRecord | None:
        """Add `delta` to the encounter count, clamped at zero."""
        record = self.get(hunt_id)
        if record is None:
            return None

        record.encounter_count = max(0, record.encounter_count + delta)
        self._commit()

        if not self.online:
            self._enqueue(PendingOperation.update(hunt_id, counter_payload(record)))
        elif self.debounce_seconds > 0:
            self._schedule_counter_push(hunt_id)
        else:
            await self._push_update(hunt_id, counter_payload)
        return record

    async def mark_complete(
        self, hunt_id: HuntId, confirm: Confirm | None = None
    ) -> HuntRecord | None:
        """Mark a hunt as found. A declined confirmation changes nothing."""
        return await self._set_completed(hunt_id, True, confirm)

    async def unmark_complete(self, hunt_id: HuntId) -> HuntRecord | None:
        return await self._set_completed(hunt_id, False, None)

    async def delete_record(self, hunt_id: HuntId, confirm: Confirm | None = None) -> bool:
        """
        Remove a hunt.

        Local-only hunts never reached the server, so their removal sends
        nothing and drops any operations queued against them.

        Returns:
            True if the hunt was removed
        """
        record = self.get(hunt_id)
        if record is None:
            return False
        if confirm is not None and not confirm(record):
            return False

        self.records = [r for r in self.records if r.id != hunt_id]
        self._cancel_counter_push(hunt_id)
        self.queue.discard_target(hunt_id)
        self._commit()

        if record.is_local_only:
            return True

        op = PendingOperation.delete(hunt_id)
        if not self.online:
            self._enqueue(op)
            return True

        self._pushes_in_flight.append(op)
        try:
            await self.remote.delete_hunt(hunt_id)
        except RemoteRejected as e:
            if e.status_code != 404:
                logger.warning("Delete of hunt %s rejected: %s", hunt_id, e)
        except RemoteError as e:
            logger.warning("Delete of hunt %s failed, queueing: %s", hunt_id, e)
            self._enqueue(op)
        finally:
            self._pushes_in_flight.remove(op)
        return True

    # --- Queue drain ---

    async def drain(self) -> DrainReport:
        """
        Replay queued operations against the remote authority.

        The queue is taken and cleared up front, so operations enqueued while
        the drain runs form a fresh queue. Taken operations stay persisted
        until each one is sent or dropped, so an interrupted drain resumes
        after a restart. Failed operations are put back unless a newer
        operation already covers them. A full refresh follows.
        """
        report = DrainReport()
        if not self.online or self._draining or not self.queue:
            return report

        self._draining = True
        self.syncing = True
        self._in_flight = self.queue.take_all()
        self._commit()
        logger.info("Syncing %d pending operations", len(self._in_flight))

        try:
            while self._in_flight:
                await self._replay(self._in_flight[0], report)
                self._in_flight.pop(0)
                self._commit()
        finally:
            # Interrupted: whatever was not replayed goes back behind newer ops
            for op in self._in_flight:
                self.queue.requeue(op)
            self._in_flight = []
            self._draining = False
            self.syncing = False
            self._commit()

        logger.info(
            "Sync finished: %d sent, %d requeued, %d dropped",
            report.sent,
            report.requeued,
            report.dropped,
        )
        await self.reconcile()
        return report

    async def handle_reconnect(self) -> None:
        """Offline -> online: drain the queue, then refresh."""
        self._notify()
        if self.queue:
            # drain() ends with its own refresh
            await self.drain()
        else:
            await self.reconcile()

    async def flush(self) -> None:
        """Wait until every scheduled counter push has run."""
        while self._counter_pushes:
            await asyncio.gather(*self._counter_pushes.values(), return_exceptions=True)

    # --- Internals ---

    async def _replay(self, op: PendingOperation, report: DrainReport) -> None:
        try:
            if op.kind is OperationKind.DELETE:
                await self.remote.delete_hunt(op.target_id)
            else:
                await self.remote.update_hunt(op.target_id, self._replay_payload(op))
            report.sent += 1
        except RemoteRejected as e:
            if op.kind is OperationKind.DELETE and e.status_code == 404:
                report.sent += 1
                return
            logger.warning("Dropping %s for hunt %s: %s", op.kind.value, op.target_id, e)
            report.dropped += 1
        except RemoteError as e:
            op.attempts += 1
            if op.attempts >= self.max_attempts:
                logger.warning(
                    "Dropping %s for hunt %s after %d attempts: %s",
                    op.kind.value,
                    op.target_id,
                    op.attempts,
                    e,
                )
                report.dropped += 1
                return
            if op.kind is OperationKind.UPDATE:
                # Carry the current values; the stored payload may be stale
                op.payload = self._replay_payload(op)
            if self.queue.requeue(op):
                report.requeued += 1

    def _replay_payload(self, op: PendingOperation) -> dict[str, Any]:
        record = self.get(op.target_id)
        if record is None:
            return op.payload
        return record.wire_fields(op.fields) or op.payload

    async def _set_completed(
        self, hunt_id: HuntId, completed: bool, confirm: Confirm | None
    ) -> HuntRecord | None:
        record = self.get(hunt_id)
        if record is None:
            return None
        if record.completed == completed:
            return record
        if confirm is not None and not confirm(record):
            return record

        record.completed = completed
        record.completed_at = utcnow() if completed else None
        self._commit()

        if self.online:
            await self._push_update(hunt_id, completion_payload)
        else:
            self._enqueue(PendingOperation.update(hunt_id, completion_payload(record)))
        return record

    async def _push_update(
        self, hunt_id: HuntId, build_payload: Callable[[HuntRecord], dict[str, Any]]
    ) -> None:
        record = self.get(hunt_id)
        if record is None:
            return

        op = PendingOperation.update(hunt_id, build_payload(record))
        if not self.online:
            self._enqueue(op)
            return

        self._pushes_in_flight.append(op)
        try:
            await self.remote.update_hunt(hunt_id, op.payload)
        except RemoteRejected as e:
            logger.warning("Update of hunt %s rejected: %s", hunt_id, e)
        except RemoteError as e:
            logger.warning("Update of hunt %s failed, queueing: %s", hunt_id, e)
            # Re-read: the hunt may have changed or gone while the request was out
            current = self.get(hunt_id)
            if current is not None:
                self._enqueue(PendingOperation.update(hunt_id, build_payload(current)))
        finally:
            self._pushes_in_flight.remove(op)

    def _schedule_counter_push(self, hunt_id: HuntId) -> None:
        self._cancel_counter_push(hunt_id)
        self._counter_pushes[hunt_id] = asyncio.create_task(self._debounced_counter_push(hunt_id))

    async def _debounced_counter_push(self, hunt_id: HuntId) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
            await self._push_update(hunt_id, counter_payload)
        finally:
            if self._counter_pushes.get(hunt_id) is asyncio.current_task():
                del self._counter_pushes[hunt_id]

    def _cancel_counter_push(self, hunt_id: HuntId) -> None:
        task = self._counter_pushes.pop(hunt_id, None)
        if task is not None:
            task.cancel()

    def _unacknowledged(self, hunt_id: HuntId) -> list[PendingOperation]:
        return [op for op in self._pushes_in_flight + self._in_flight if op.target_id == hunt_id]

    def _deleting(self, hunt_id: HuntId) -> bool:
        return any(op.kind is OperationKind.DELETE for op in self._unacknowledged(hunt_id))

    def _unacknowledged_fields(self, hunt_id: HuntId) -> set[str]:
        """Fields whose local value the server may not have seen yet."""
        fields: set[str] = set()
        if hunt_id in self._counter_pushes:
            fields.add("encounter_count")
        for op in self._unacknowledged(hunt_id):
            fields.update(op.fields)
        return fields

    def _enqueue(self, op: PendingOperation) -> None:
        self.queue.enqueue(op)
        self._commit()

    def _commit(self) -> None:
        # Ops taken by a running drain stay on disk until sent or dropped
        self.store.save(self.records, self._in_flight + self.queue.to_list())
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def _allocate_pending_id(self) -> PendingId:
        hunt_id = PendingId(self._next_pending)
        self._next_pending -= 1
        return hunt_id

    @staticmethod
    def _lowest_pending_id(records: list[HuntRecord], ops: list[PendingOperation]) -> int:
        ids = [record.id for record in records] + [op.target_id for op in ops]
        return min((i.value for i in ids if isinstance(i, PendingId)), default=0)
