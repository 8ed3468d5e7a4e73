"""
Set-once placeholders for queued requests.
"""

from __future__ import annotations

import threading
import typing as t
from enum import StrEnum

from diffbot.exceptions import DiffbotError, ResolutionError
from diffbot.request import RequestDescriptor

if t.TYPE_CHECKING:
    from diffbot.batching.core import Batcher

T = t.TypeVar("T")


class ResolutionState(StrEnum):
    UNRESOLVED = "unresolved"
    SUCCESS = "success"
    FAILURE = "failure"


class PendingResult(t.Generic[T]):
    """
    Future outcome of exactly one queued request.

    The state moves from ``UNRESOLVED`` to ``SUCCESS`` or ``FAILURE`` once and
    never changes afterwards.

    Parameters
    ----------
    descriptor : RequestDescriptor
        Request whose outcome this placeholder holds.
    batcher : Batcher
        Coordinator able to send the batch containing this request.
    """

    def __init__(self, *, descriptor: RequestDescriptor, batcher: Batcher) -> None:
        self._descriptor = descriptor
        self._batcher = batcher
        self._lock = threading.Lock()
        self._state = ResolutionState.UNRESOLVED
        self._value: T | None = None
        self._error: DiffbotError | None = None

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._descriptor

    @property
    def state(self) -> ResolutionState:
        with self._lock:
            return self._state

    def done(self) -> bool:
        return self.state is not ResolutionState.UNRESOLVED

    def set_result(self, *, value: T) -> None:
        """
        Resolve with a parsed value.

        Raises
        ------
        ResolutionError
            If the placeholder is already resolved.
        """
        with self._lock:
            self._ensure_unresolved()
            self._value = value
            self._state = ResolutionState.SUCCESS

    def set_error(self, *, error: DiffbotError) -> None:
        """
        Resolve with a per-item failure.

        Raises
        ------
        ResolutionError
            If the placeholder is already resolved.
        """
        with self._lock:
            self._ensure_unresolved()
            self._error = error
            self._state = ResolutionState.FAILURE

    def _ensure_unresolved(self) -> None:
        if self._state is not ResolutionState.UNRESOLVED:
            raise ResolutionError(
                f"Pending result for {self._descriptor.relative_url} is already {self._state}"
            )

    def outcome(self) -> T:
        """
        Read the resolved value without triggering any network call.

        Returns
        -------
        T
            Parsed value.

        Raises
        ------
        DiffbotError
            The per-item error stored at resolution.
        ResolutionError
            If the placeholder is still unresolved.
        """
        with self._lock:
            if self._state is ResolutionState.UNRESOLVED:
                raise ResolutionError(
                    f"Pending result for {self._descriptor.relative_url} is not resolved yet"
                )
            if self._error is not None:
                # Shared instance; drop frames from earlier reads
                raise self._error.with_traceback(None)
            return t.cast(T, self._value)

    def result(self) -> T:
        """
        Return the outcome, sending a batch call first when still unresolved.

        The calling thread sends the batch containing this request, together
        with other queued requests up to the batch size. If another thread is
        already sending it, the call waits for that batch to settle.

        Returns
        -------
        T
            Parsed value.

        Raises
        ------
        BatchError
            If the batch call this thread sent failed. The request stays queued.
        DiffbotError
            The per-item error returned by Diffbot for this request.
        """
        return self._batcher.await_result(pending=self)

    def __repr__(self) -> str:
        return f"<PendingResult {self._descriptor.kind} {self._descriptor.relative_url} {self.state}>"
