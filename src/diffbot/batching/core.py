"""
Batch coordination for queued Diffbot requests.

There is no background worker: the thread awaiting an unresolved result sends
the batch that contains it (sender pays). Threads whose requests were swept
into a batch another thread is sending wait for that batch to settle.
"""

from __future__ import annotations

import functools
import typing as t
import uuid
from concurrent.futures import Future

import structlog

from diffbot.batching.correlator import BodyParser, correlate, fail_unanswered
from diffbot.batching.dispatcher import BatchDispatcher
from diffbot.batching.pending import PendingResult
from diffbot.batching.queue import Batch, PendingQueue, Planner
from diffbot.batching.slicer import slice_concurrent, slice_single
from diffbot.config import DiffbotSettings
from diffbot.exceptions import BatchError, DiffbotError
from diffbot.models import BatchResponse
from diffbot.parsing import parse_body
from diffbot.request import RequestDescriptor
from diffbot.utils.logging import logging_context

log = structlog.get_logger(__name__)


class Batcher:
    """
    Drive the enqueue, slice, send and correlate lifecycle of one client.

    Parameters
    ----------
    queue : PendingQueue
        Queue owned by the client.
    dispatcher : BatchDispatcher
        Sender of combined calls.
    settings : DiffbotSettings
        Client settings, read each time a batch is planned.
    parse : BodyParser, optional
        Body parser used by correlation.

    Notes
    -----
    A batch is all or nothing with respect to the queue: either every member
    is resolved, one sub-response at a time, or the batch goes back to the
    front of the queue with no member resolved.
    """

    def __init__(
        self,
        *,
        queue: PendingQueue,
        dispatcher: BatchDispatcher,
        settings: DiffbotSettings,
        parse: BodyParser = parse_body,
    ) -> None:
        self._queue = queue
        self._dispatcher = dispatcher
        self._settings = settings
        self._parse = parse

    def enqueue(self, *, descriptor: RequestDescriptor) -> PendingResult[t.Any]:
        pending: PendingResult[t.Any] = PendingResult(descriptor=descriptor, batcher=self)
        self._queue.enqueue(result=pending)
        return pending

    def await_result(self, *, pending: PendingResult[t.Any]) -> t.Any:
        """
        Return the outcome of ``pending``, sending batches until it resolves.

        Parameters
        ----------
        pending : PendingResult
            Result to wait for.

        Returns
        -------
        typing.Any
            Parsed value.

        Raises
        ------
        BatchError
            If a batch call this thread sent for ``pending`` failed.
        DiffbotError
            The per-item error stored on ``pending``.
        """
        while not pending.done():
            if self.run_batch(initiator=pending):
                continue
            # In flight in a batch sent by another thread
            self._queue.wait_until_settled(result=pending)
        return pending.outcome()

    def run_batch(self, *, initiator: PendingResult[t.Any]) -> bool:
        """
        Send the batch, or batches, containing ``initiator``.

        Parameters
        ----------
        initiator : PendingResult
            Queued result whose caller pays for the call.

        Returns
        -------
        bool
            ``False`` when ``initiator`` was not queued and nothing was sent.

        Raises
        ------
        BatchError
            If the call carrying ``initiator`` failed.
        """
        batches = self._queue.take(initiator=initiator, planner=self._planner())
        if not batches:
            return False

        with logging_context(batch_id=str(object=uuid.uuid4())):
            log.info(
                event="Dispatching batches",
                batch_count=len(batches),
                request_count=sum(len(batch) for batch in batches),
                pending_count=self._queue.size(),
            )
            if len(batches) == 1:
                self._dispatch_sync(batch=batches[0])
            else:
                self._dispatch_concurrent(initiator=initiator, batches=batches)
        return True

    def _planner(self) -> Planner:
        settings = self._settings
        if settings.concurrent:
            return functools.partial(
                slice_concurrent,
                max_batch_request=settings.max_batch_request,
                concurrent_batch_request=settings.concurrent_batch_request,
            )
        return functools.partial(slice_single, max_batch_request=settings.max_batch_request)

    def _dispatch_sync(self, *, batch: Batch) -> None:
        try:
            responses = self._dispatcher.send(batch=batch)
        except DiffbotError as error:
            log.warning(event="Batch request failed", batch_size=len(batch), error=str(object=error))
            self._queue.return_to_front(items=batch)
            raise BatchError(error) from error
        except BaseException:
            self._queue.return_to_front(items=batch)
            raise
        self._settle(batch=batch, responses=responses)

    def _dispatch_concurrent(self, *, initiator: PendingResult[t.Any], batches: list[Batch]) -> None:
        futures: list[Future[list[BatchResponse]]] = []
        unexpected: BaseException | None = None
        for batch in batches:
            try:
                futures.append(self._dispatcher.send_async(batch=batch))
            except BaseException as error:
                # Batches after this one were never submitted
                unexpected = error
                break

        failed: list[Batch] = []
        initiator_error: DiffbotError | None = None

        for batch, future in zip(batches, futures):
            try:
                responses = future.result()
            except DiffbotError as error:
                log.warning(
                    event="Batch request failed",
                    batch_size=len(batch),
                    error=str(object=error),
                )
                failed.append(batch)
                if any(pending is initiator for pending in batch):
                    initiator_error = error
                continue
            except BaseException as error:
                failed.append(batch)
                unexpected = unexpected or error
                continue
            self._settle(batch=batch, responses=responses)
        failed.extend(batches[len(futures) :])

        if failed:
            self._queue.return_to_front(items=[pending for batch in failed for pending in batch])
        if unexpected is not None:
            raise unexpected
        if initiator_error is not None:
            raise BatchError(initiator_error) from initiator_error

    def _settle(self, *, batch: Batch, responses: list[BatchResponse]) -> None:
        try:
            resolved = correlate(responses=responses, batch=batch, parse=self._parse)
            missing = fail_unanswered(batch=batch)
            log.debug(event="Settled batch", resolved_count=resolved, missing_count=missing)
        finally:
            # Wakes waiting threads; requeues members left unresolved by an unexpected error
            self._queue.return_to_front(items=batch)

    def pending(self) -> list[PendingResult[t.Any]]:
        return self._queue.snapshot()

    def pending_count(self) -> int:
        return self._queue.size()

    def close(self) -> None:
        self._dispatcher.close()
