"""
Decode single-call and batch sub-response bodies into result models.

Both paths share ``parse_body`` so a batch sub-response is parsed exactly as
the same request would be on its own.
"""

from __future__ import annotations

import json
import typing as t
import xml.etree.ElementTree as ET

import structlog
from pydantic import ValidationError

from diffbot.constants import APPLICATION_JSON, ERROR, ERROR_CODE, MESSAGE, STATUS_CODE
from diffbot.exceptions import APIError, ParseError
from diffbot.models import Frontpage, Model
from diffbot.request import MODEL_BY_KIND, ResultKind

log = structlog.get_logger(__name__)


def parse_body(*, kind: ResultKind, body: str, content_type: str | None) -> Model:
    """
    Parse a response body according to the declared result kind.

    Parameters
    ----------
    kind : ResultKind
        Declared result kind of the request.
    body : str
        Raw response text.
    content_type : str | None
        Content type of the response. Frontpage answers in XML unless it
        reports an error, in which case it answers in JSON.

    Returns
    -------
    Model
        Parsed result of the model class matching ``kind``.

    Raises
    ------
    APIError
        If the body is an error reported by Diffbot.
    ParseError
        If the body cannot be decoded.
    """
    if kind is ResultKind.FRONTPAGE:
        if content_type is not None and APPLICATION_JSON in content_type.lower():
            raise _frontpage_error(body=body)
        return parse_dml(body=body)
    return _parse_json(kind=kind, body=body)


def _parse_json(*, kind: ResultKind, body: str) -> Model:
    try:
        payload = json.loads(s=body)
    except json.JSONDecodeError as error:
        raise ParseError(f"The {kind} response is not valid JSON: {error}") from error
    if not isinstance(payload, dict):
        raise ParseError(f"The {kind} response is not a JSON object")
    if ERROR_CODE in payload:
        raise APIError(str(payload.get(ERROR, "")), error_code=_as_int(payload[ERROR_CODE]))

    model_cls = MODEL_BY_KIND[kind]
    try:
        return model_cls.model_validate(payload)
    except ValidationError as error:
        raise ParseError(f"The {kind} response cannot be parsed: {error}") from error


def _frontpage_error(*, body: str) -> Exception:
    try:
        payload = json.loads(s=body)
        return APIError(str(payload[MESSAGE]), error_code=_as_int(payload[STATUS_CODE]))
    except (json.JSONDecodeError, TypeError, KeyError, ValueError) as error:
        return ParseError(f"The frontpage error response cannot be parsed: {error}")


def _as_int(value: t.Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as error:
        raise ParseError(f"Invalid error code: {value!r}") from error


def parse_dml(*, body: str) -> Frontpage:
    """
    Parse a Frontpage DML document.

    ``<info>`` children become the ``info`` fields. Each ``<item>`` keeps its
    attributes and child elements; its own text is the item text.

    Parameters
    ----------
    body : str
        DML document.

    Returns
    -------
    Frontpage
        Parsed frontpage.

    Raises
    ------
    ParseError
        If the document is not well-formed or does not match the model.
    """
    try:
        root = ET.fromstring(text=body)
    except ET.ParseError as error:
        raise ParseError(f"The frontpage response is not valid XML: {error}") from error

    payload: dict[str, t.Any] = {}
    info = root.find("info")
    if info is not None:
        payload["info"] = _element_fields(element=info)
    items = [_element_fields(element=item) for item in root.iter("item")]
    if items:
        payload["items"] = items

    try:
        frontpage = Frontpage.model_validate(payload)
    except ValidationError as error:
        raise ParseError(f"The frontpage response cannot be parsed: {error}") from error
    log.debug(event="Parsed frontpage", url=frontpage.url, item_count=len(items))
    return frontpage


def _element_fields(*, element: ET.Element) -> dict[str, t.Any]:
    fields: dict[str, t.Any] = dict(element.attrib)
    for child in element:
        fields[child.tag] = (child.text or "").strip()
    text = (element.text or "").strip()
    if text:
        fields.setdefault("text", text)
    return fields
