"""
Match batch sub-responses back to the pending results that produced them.

Diffbot returns no correlation id: a sub-response only echoes the relative
URL of its sub-request. Among members sharing a relative URL, the earliest
unresolved member is resolved first.
"""

from __future__ import annotations

import typing as t

import structlog

from diffbot.batching.pending import PendingResult
from diffbot.constants import CONTENT_TYPE, HTTP_OK
from diffbot.exceptions import DiffbotError, ParseError, ServerError
from diffbot.models import BatchResponse, Model
from diffbot.parsing import parse_body
from diffbot.request import RequestDescriptor, ResultKind

log = structlog.get_logger(__name__)

BodyParser = t.Callable[..., Model]


def correlate(
    *,
    responses: t.Iterable[BatchResponse],
    batch: t.Sequence[PendingResult[t.Any]],
    parse: BodyParser = parse_body,
) -> int:
    """
    Resolve batch members from the sub-responses of their batch call.

    Parameters
    ----------
    responses : typing.Iterable[BatchResponse]
        Sub-responses in any order.
    batch : typing.Sequence[PendingResult]
        Batch members in submission order.
    parse : BodyParser, optional
        Body parser called with ``kind``, ``body`` and ``content_type``.

    Returns
    -------
    int
        Number of members resolved.
    """
    resolved = 0
    for response in responses:
        pending = _first_unresolved(batch=batch, relative_url=response.relative_url)
        if pending is None:
            log.debug(
                event="Ignoring unmatched batch sub-response",
                relative_url=response.relative_url,
                code=response.code,
            )
            continue
        try:
            value = _parse_sub_response(
                response=response, descriptor=pending.descriptor, parse=parse
            )
        except DiffbotError as error:
            log.debug(
                event="Batch sub-response failed",
                relative_url=response.relative_url,
                error=str(object=error),
            )
            pending.set_error(error=error)
        else:
            pending.set_result(value=value)
        resolved += 1
    return resolved


def fail_unanswered(*, batch: t.Sequence[PendingResult[t.Any]]) -> int:
    """
    Fail members the batch response did not answer.

    Parameters
    ----------
    batch : typing.Sequence[PendingResult]
        Batch members after correlation.

    Returns
    -------
    int
        Number of members failed.
    """
    missing = [pending for pending in batch if not pending.done()]
    if not missing:
        return 0
    log.error(event="Missing batch sub-responses", missing_count=len(missing))
    for pending in missing:
        pending.set_error(
            error=ServerError(
                f"The batch response has no sub-response for {pending.descriptor.relative_url}"
            )
        )
    return len(missing)


def _first_unresolved(
    *, batch: t.Sequence[PendingResult[t.Any]], relative_url: str
) -> PendingResult[t.Any] | None:
    for pending in batch:
        if pending.descriptor.relative_url == relative_url and not pending.done():
            return pending
    return None


def _parse_sub_response(
    *, response: BatchResponse, descriptor: RequestDescriptor, parse: BodyParser
) -> Model:
    if response.code != HTTP_OK:
        raise ServerError(response.body, status_code=response.code)
    if not response.headers:
        raise ParseError(f"The sub-response for {response.relative_url} has no headers")

    header = response.first_header(CONTENT_TYPE)
    content_type = header.value if header is not None else None
    if content_type is None and descriptor.kind is not ResultKind.FRONTPAGE:
        raise ParseError(f"The sub-response for {response.relative_url} has no content type")
    return parse(kind=descriptor.kind, body=response.body, content_type=content_type)
