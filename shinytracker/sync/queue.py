"""
Operation queue with coalescing.

INVARIANTS:
- At most one queued Update writes a given (target_id, field) pair.
  A newer Update strips the overlapping fields from older ones; an
  Update left with no fields is removed.
- A Delete for an id supersedes and removes every other queued operation
  for that id.
- Enqueue order is preserved for everything that survives coalescing.
"""

from collections.abc import Iterator

from shinytracker.models.hunt import HuntId
from shinytracker.models.operation import OperationKind, PendingOperation


class OperationQueue:
    """Ordered log of mutations awaiting remote confirmation."""

    def __init__(self, ops: list[PendingOperation] | None = None) -> None:
        self._ops: list[PendingOperation] = []
        for op in ops or []:
            self.enqueue(op)

    def __len__(self) -> int:
        return len(self._ops)

    def __iter__(self) -> Iterator[PendingOperation]:
        return iter(self._ops)

    def __bool__(self) -> bool:
        return bool(self._ops)

    def to_list(self) -> list[PendingOperation]:
        """Copy of the queue in order."""
        return list(self._ops)

    def for_target(self, target_id: HuntId) -> list[PendingOperation]:
        return [op for op in self._ops if op.target_id == target_id]

    def has_delete(self, target_id: HuntId) -> bool:
        return any(
            op.kind is OperationKind.DELETE and op.target_id == target_id for op in self._ops
        )

    def enqueue(self, op: PendingOperation) -> None:
        """Append an operation, coalescing away anything it supersedes."""
        if op.kind is OperationKind.DELETE:
            self._ops = [queued for queued in self._ops if queued.target_id != op.target_id]
            self._ops.append(op)
            return

        if self.has_delete(op.target_id):
            # The hunt is already gone; nothing left to update
            return

        coalesced: list[PendingOperation] = []
        for queued in self._ops:
            if queued.target_id == op.target_id and queued.fields & op.fields:
                remaining = {k: v for k, v in queued.payload.items() if k not in op.fields}
                if not remaining:
                    continue
                queued.payload = remaining
            coalesced.append(queued)
        coalesced.append(op)
        self._ops = coalesced

    def requeue(self, op: PendingOperation) -> bool:
        """
        Put back an operation whose replay failed.

        Unlike enqueue(), a requeued operation never overwrites newer
        state: fields already covered by a queued Update (or an id with a
        queued Delete) are dropped from it first.

        Returns:
            True if anything was re-appended
        """
        if self.has_delete(op.target_id):
            return False

        if op.kind is OperationKind.DELETE:
            self.enqueue(op)
            return True

        newer_fields: set[str] = set()
        for queued in self.for_target(op.target_id):
            newer_fields.update(queued.fields)

        stale = {k: v for k, v in op.payload.items() if k not in newer_fields}
        if not stale:
            return False
        op.payload = stale
        self._ops.append(op)
        return True

    def discard_target(self, target_id: HuntId) -> int:
        """Remove every operation for an id. Returns how many were removed."""
        before = len(self._ops)
        self._ops = [op for op in self._ops if op.target_id != target_id]
        return before - len(self._ops)

    def take_all(self) -> list[PendingOperation]:
        """Snapshot and clear the queue in one step."""
        ops, self._ops = self._ops, []
        return ops
