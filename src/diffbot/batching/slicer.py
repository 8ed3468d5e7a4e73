"""
Pure functions partitioning queued requests into bounded batches.

Slicers never touch the queue: they receive a snapshot and return the batches
to claim. ``PendingQueue.take`` applies the result atomically.
"""

from __future__ import annotations

import typing as t

T = t.TypeVar("T")


def slice_single(*, items: t.Sequence[T], initiator: T, max_batch_request: int) -> list[list[T]]:
    """
    Form exactly one batch: the initiator plus up to ``max_batch_request - 1``
    other items taken from the front of the queue.

    Parameters
    ----------
    items : typing.Sequence[T]
        Queue snapshot in submission order.
    initiator : T
        Item whose caller triggers the batch.
    max_batch_request : int
        Maximum number of items per batch.

    Returns
    -------
    list[list[T]]
        A single batch, or no batch when ``initiator`` is not in ``items``.
    """
    if not _contains(items=items, item=initiator):
        return []
    others = [item for item in items if item is not initiator][: max_batch_request - 1]
    return [[initiator, *others]]


def slice_concurrent(
    *,
    items: t.Sequence[T],
    initiator: T,
    max_batch_request: int,
    concurrent_batch_request: int,
) -> list[list[T]]:
    """
    Form up to ``concurrent_batch_request`` batches sent in parallel.

    The first batch holds up to ``max_batch_request - 1`` items from the front
    of the queue followed by the initiator, so the initiator always travels
    in the first batch. Later batches are filled from what remains, each up
    to ``max_batch_request`` items. Leftovers stay queued.

    Parameters
    ----------
    items : typing.Sequence[T]
        Queue snapshot in submission order.
    initiator : T
        Item whose caller triggers the batches.
    max_batch_request : int
        Maximum number of items per batch.
    concurrent_batch_request : int
        Maximum number of batches in flight at once.

    Returns
    -------
    list[list[T]]
        Batches in dispatch order, empty when ``initiator`` is not in ``items``.
    """
    if not _contains(items=items, item=initiator):
        return []
    others = [item for item in items if item is not initiator]
    head = max_batch_request - 1
    batches = [[*others[:head], initiator]]
    remaining = others[head:]
    while remaining and len(batches) < concurrent_batch_request:
        batches.append(remaining[:max_batch_request])
        remaining = remaining[max_batch_request:]
    return batches


def _contains(*, items: t.Sequence[T], item: T) -> bool:
    return any(candidate is item for candidate in items)
