"""
Sends one batch as a single combined call to the Diffbot batch API.
"""

from __future__ import annotations

import threading
import typing as t
from concurrent.futures import Future, ThreadPoolExecutor

import httpx
import structlog
from pydantic import ValidationError

from diffbot.batching.pending import PendingResult
from diffbot.config import DiffbotSettings
from diffbot.constants import BATCH, HTTP_OK, HTTP_UNAUTHORIZED
from diffbot.exceptions import AuthorizationError, ServerError
from diffbot.models import (
    BatchRequest,
    BatchResponse,
    batch_request_list_adapter,
    batch_response_list_adapter,
)
from diffbot.transport import DEFAULT_HEADERS, build_timeout

log = structlog.get_logger(__name__)


def build_batch_query(*, batch: t.Sequence[PendingResult[t.Any]]) -> str:
    """
    Encode a batch as the JSON value of the ``batch`` query parameter.

    Parameters
    ----------
    batch : typing.Sequence[PendingResult]
        Batch members in order.

    Returns
    -------
    str
        JSON array of ``{"method", "relative_url"}`` objects, one per member.
    """
    requests = [
        BatchRequest(
            method=pending.descriptor.method,
            relative_url=pending.descriptor.relative_url,
        )
        for pending in batch
    ]
    return batch_request_list_adapter.dump_json(requests).decode()


class BatchDispatcher:
    """
    Issue exactly one HTTP call per batch.

    The dispatcher never resolves pending results and never touches the
    queue. Any failure raised from ``send`` means no member of the batch was
    consumed.

    Parameters
    ----------
    http_client : httpx.Client
        Client used for every call.
    auth : httpx.Auth
        Token authentication.
    settings : DiffbotSettings
        Client settings, read on every call.
    """

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        auth: httpx.Auth,
        settings: DiffbotSettings,
    ) -> None:
        self._http_client = http_client
        self._auth = auth
        self._settings = settings
        self._executor: ThreadPoolExecutor | None = None
        self._executor_workers = 0
        self._executor_lock = threading.Lock()

    def send(self, *, batch: t.Sequence[PendingResult[t.Any]]) -> list[BatchResponse]:
        """
        Send a batch and return its sub-responses.

        Parameters
        ----------
        batch : typing.Sequence[PendingResult]
            Non-empty batch.

        Returns
        -------
        list[BatchResponse]
            Sub-responses, in whatever order Diffbot returned them.

        Raises
        ------
        AuthorizationError
            If Diffbot rejected the token.
        ServerError
            On transport failure, timeout, non-success status or an
            unreadable response body.
        """
        if not batch:
            raise ValueError("Cannot send an empty batch")

        log.debug(
            event="Sending batch request",
            batch_size=len(batch),
            endpoint=self._settings.batch_endpoint,
        )
        try:
            response = self._http_client.post(
                url=self._settings.batch_endpoint,
                params={BATCH: build_batch_query(batch=batch)},
                headers=DEFAULT_HEADERS,
                auth=self._auth,
                timeout=build_timeout(seconds=self._settings.batch_request_timeout),
            )
        except httpx.TimeoutException as error:
            log.warning(event="Batch request timed out", batch_size=len(batch))
            raise ServerError(f"The batch request timed out: {error}") from error
        except httpx.TransportError as error:
            log.warning(
                event="Batch request transport error",
                batch_size=len(batch),
                error=str(object=error),
            )
            raise ServerError(f"The batch request could not be sent: {error}") from error

        if response.status_code == HTTP_UNAUTHORIZED:
            raise AuthorizationError("Not authorized API token.")
        if response.status_code != HTTP_OK:
            raise ServerError(response.reason_phrase, status_code=response.status_code)

        try:
            responses = batch_response_list_adapter.validate_json(response.content)
        except ValidationError as error:
            raise ServerError(
                f"The batch response cannot be read: {error}",
                status_code=response.status_code,
            ) from error

        log.debug(
            event="Received batch response",
            batch_size=len(batch),
            response_count=len(responses),
        )
        return responses

    def send_async(
        self, *, batch: t.Sequence[PendingResult[t.Any]]
    ) -> Future[list[BatchResponse]]:
        """
        Send a batch on a worker thread.

        Parameters
        ----------
        batch : typing.Sequence[PendingResult]
            Non-empty batch.

        Returns
        -------
        concurrent.futures.Future[list[BatchResponse]]
            Handle whose ``result()`` returns the sub-responses or raises the
            same errors as ``send``.
        """
        # Submitting under the lock keeps a resize from shutting the pool down in between
        with self._executor_lock:
            return self._get_executor().submit(self.send, batch=list(batch))

    def _get_executor(self) -> ThreadPoolExecutor:
        workers = self._settings.concurrent_batch_request
        if self._executor is None or self._executor_workers != workers:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
            self._executor = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="diffbot-batch"
            )
            self._executor_workers = workers
        return self._executor

    def close(self) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
                self._executor_workers = 0
