"""
Per-client queue of requests waiting to be batched.
"""

from __future__ import annotations

import threading
import typing as t

import structlog

from diffbot.batching.pending import PendingResult

log = structlog.get_logger(__name__)

Batch = list[PendingResult[t.Any]]
Planner = t.Callable[..., list[Batch]]


class PendingQueue:
    """
    Ordered collection of queued ``PendingResult`` guarded by one lock.

    Insertion order is submission order. Every operation is a single short
    critical section; the lock is never held while a batch is on the network.
    """

    def __init__(self) -> None:
        self._items: list[PendingResult[t.Any]] = []
        self._condition = threading.Condition()

    def enqueue(self, *, result: PendingResult[t.Any]) -> None:
        with self._condition:
            if self._contains(result=result):
                raise ValueError(f"{result!r} is already queued")
            self._items.append(result)
            pending_count = len(self._items)
        log.debug(
            event="Queued request for batch",
            relative_url=result.descriptor.relative_url,
            pending_count=pending_count,
        )

    def drain_prefix(self, *, max_count: int) -> list[PendingResult[t.Any]]:
        """
        Remove and return up to ``max_count`` items from the front.

        Parameters
        ----------
        max_count : int
            Maximum number of items to drain.

        Returns
        -------
        list[PendingResult]
            Drained items in queue order.
        """
        with self._condition:
            drained = self._items[:max_count]
            del self._items[: len(drained)]
            return drained

    def return_to_front(self, *, items: t.Sequence[PendingResult[t.Any]]) -> None:
        """
        Put a drained batch back ahead of anything queued meanwhile.

        Parameters
        ----------
        items : typing.Sequence[PendingResult]
            Items of a batch whose call failed, in their batch order.
        """
        with self._condition:
            returned = [
                item for item in items if not item.done() and not self._contains(result=item)
            ]
            self._items[:0] = returned
            pending_count = len(self._items)
            self._condition.notify_all()
        if returned:
            log.debug(
                event="Returned batch to queue",
                returned_count=len(returned),
                pending_count=pending_count,
            )

    def take(self, *, initiator: PendingResult[t.Any], planner: Planner) -> list[Batch]:
        """
        Atomically plan and remove batches that include ``initiator``.

        Parameters
        ----------
        initiator : PendingResult
            Result whose caller triggers the batch.
        planner : Planner
            Pure function called with ``items`` (a snapshot of the queue) and
            ``initiator``, returning the batches to claim.

        Returns
        -------
        list[Batch]
            Planned batches, empty when ``initiator`` is no longer queued.
        """
        with self._condition:
            if not self._contains(result=initiator):
                return []
            batches = planner(items=list(self._items), initiator=initiator)
            claimed = {id(item) for batch in batches for item in batch}
            self._items = [item for item in self._items if id(item) not in claimed]
            return batches

    def wait_until_settled(
        self, *, result: PendingResult[t.Any], timeout: float | None = None
    ) -> bool:
        """
        Block until ``result`` is resolved or back in the queue.

        Used by a thread whose request is part of a batch another thread is
        sending. The lock is released while waiting.

        Parameters
        ----------
        result : PendingResult
            Result to watch.
        timeout : float | None, optional
            Maximum wait in seconds.

        Returns
        -------
        bool
            ``False`` if the wait timed out.
        """
        with self._condition:
            return self._condition.wait_for(
                predicate=lambda: result.done() or self._contains(result=result),
                timeout=timeout,
            )

    def notify(self) -> None:
        """Wake threads waiting for results of a settled batch."""
        with self._condition:
            self._condition.notify_all()

    def snapshot(self) -> list[PendingResult[t.Any]]:
        with self._condition:
            return list(self._items)

    def size(self) -> int:
        with self._condition:
            return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, result: object) -> bool:
        with self._condition:
            return self._contains(result=result)

    def _contains(self, *, result: object) -> bool:
        return any(item is result for item in self._items)
