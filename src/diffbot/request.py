"""
Request descriptors and the per-endpoint request builders.

A builder collects query parameters through fluent ``with_*`` calls. Once
``execute()`` or ``queue()`` is called it is frozen into a
``RequestDescriptor`` whose relative URL is the batch correlation key.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote, urlencode, urlsplit

from diffbot.constants import (
    ARTICLE_ENDPOINT,
    CLASSIFIER_ENDPOINT,
    FIELDS,
    FORMAT,
    FRONTPAGE_ENDPOINT,
    IMAGE_ENDPOINT,
    MODE,
    PRODUCT_ENDPOINT,
    STATS,
    TIMEOUT,
    URL,
)
from diffbot.models import Article, Classified, Frontpage, Images, Model, PageType, Products

if t.TYPE_CHECKING:
    from diffbot.batching.pending import PendingResult
    from diffbot.client import Diffbot

M = t.TypeVar("M", bound=Model)

# Characters Diffbot expects unescaped in query values.
_QUERY_SAFE = ":/*(),"


class ResultKind(StrEnum):
    ARTICLE = "article"
    FRONTPAGE = "frontpage"
    IMAGE = "image"
    PRODUCT = "product"
    CLASSIFIER = "classifier"


MODEL_BY_KIND: dict[ResultKind, type[Model]] = {
    ResultKind.ARTICLE: Article,
    ResultKind.FRONTPAGE: Frontpage,
    ResultKind.IMAGE: Images,
    ResultKind.PRODUCT: Products,
    ResultKind.CLASSIFIER: Classified,
}


def build_relative_url(*, endpoint: str, params: t.Mapping[str, str]) -> str:
    """
    Build the path and encoded query of a request, without host or token.

    Parameters
    ----------
    endpoint : str
        Absolute endpoint URL.
    params : typing.Mapping[str, str]
        Query parameters in insertion order.

    Returns
    -------
    str
        Relative URL such as ``/v2/article?url=http://a.com/b&fields=*``.
    """
    path = urlsplit(url=endpoint).path
    if not params:
        return path
    query = urlencode(query=list(params.items()), quote_via=quote, safe=_QUERY_SAFE)
    return f"{path}?{query}"


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Immutable description of one logical call.

    Parameters
    ----------
    method : str
        HTTP method, ``"GET"`` or ``"POST"``.
    origin : str
        Scheme and host of the endpoint, e.g. ``https://api.diffbot.com``.
    relative_url : str
        Path and encoded query. Used to correlate batch sub-responses.
    kind : ResultKind
        Declared result kind selecting the response parser.
    read_timeout : float | None
        Read timeout in seconds for the single-call path, ``None`` for none.
    """

    method: t.Literal["GET", "POST"]
    origin: str
    relative_url: str
    kind: ResultKind
    read_timeout: float | None = None

    @classmethod
    def build(
        cls,
        *,
        endpoint: str,
        params: t.Mapping[str, str],
        kind: ResultKind,
        read_timeout: float | None = None,
        method: t.Literal["GET", "POST"] = "GET",
    ) -> "RequestDescriptor":
        parts = urlsplit(url=endpoint)
        return cls(
            method=method,
            origin=f"{parts.scheme}://{parts.netloc}",
            relative_url=build_relative_url(endpoint=endpoint, params=params),
            kind=kind,
            read_timeout=read_timeout,
        )

    @property
    def absolute_url(self) -> str:
        return f"{self.origin}{self.relative_url}"


class DiffbotRequest(t.Generic[M]):
    """
    Base builder for a call to one Diffbot API.

    Parameters
    ----------
    client : Diffbot
        Client executing or queueing the request.
    url : str
        Web page to analyze.
    """

    kind: t.ClassVar[ResultKind]
    endpoint: t.ClassVar[str]

    def __init__(self, *, client: Diffbot, url: str) -> None:
        self._client = client
        self._params: dict[str, str] = {URL: url}
        self._read_timeout: float | None = client.read_timeout

    def _set(self, *, name: str, value: str) -> t.Self:
        self._params[name] = value
        return self

    def descriptor(self) -> RequestDescriptor:
        """
        Freeze the request into a descriptor.

        Returns
        -------
        RequestDescriptor
            Descriptor carrying the relative URL built from current parameters.
        """
        return RequestDescriptor.build(
            endpoint=self.endpoint,
            params=self._params,
            kind=self.kind,
            read_timeout=self._read_timeout,
        )

    def execute(self) -> M:
        """
        Call the API synchronously.

        Returns
        -------
        M
            Parsed result.

        Raises
        ------
        AuthorizationError
            If the developer token is not recognized or revoked.
        ServerError
            If Diffbot answers with a non-success status or cannot be reached.
        APIError
            If Diffbot reports an error while processing the request.
        ParseError
            If the response cannot be parsed.
        """
        return t.cast(M, self._client.execute(descriptor=self.descriptor()))

    def queue(self) -> PendingResult[M]:
        """
        Add the request to the client's batch queue.

        Returns
        -------
        PendingResult[M]
            Placeholder resolved by the next batch call that includes it.
        """
        return self._client.enqueue(descriptor=self.descriptor())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.descriptor().relative_url}>"


class _ExtractionRequest(DiffbotRequest[M]):
    def with_fields(self, fields: str) -> t.Self:
        """
        Limit or expand the fields returned, e.g. ``"meta,links,images(*)"``.

        Parameters
        ----------
        fields : str
            Diffbot ``fields`` expression.

        Returns
        -------
        typing.Self
            This request.
        """
        return self._set(name=FIELDS, value=fields)

    def with_timeout(self, timeout_ms: int) -> t.Self:
        """
        Override the Diffbot-side timeout of 5000ms and the local read timeout.

        Parameters
        ----------
        timeout_ms : int
            Timeout in milliseconds.

        Returns
        -------
        typing.Self
            This request.
        """
        self._read_timeout = timeout_ms / 1000
        return self._set(name=TIMEOUT, value=str(timeout_ms))


class ArticleRequest(_ExtractionRequest[Article]):
    kind = ResultKind.ARTICLE
    endpoint = ARTICLE_ENDPOINT


class ImagesRequest(_ExtractionRequest[Images]):
    kind = ResultKind.IMAGE
    endpoint = IMAGE_ENDPOINT


class ProductsRequest(_ExtractionRequest[Products]):
    kind = ResultKind.PRODUCT
    endpoint = PRODUCT_ENDPOINT


class ClassifierRequest(_ExtractionRequest[Classified]):
    kind = ResultKind.CLASSIFIER
    endpoint = CLASSIFIER_ENDPOINT

    def with_mode(self, page_type: PageType) -> t.Self:
        """Only extract content for pages of ``page_type``; classify the others."""
        return self._set(name=MODE, value=str(page_type))

    def with_stats(self) -> t.Self:
        """Return classification scores for every page type."""
        return self._set(name=STATS, value="")


class FrontpageRequest(DiffbotRequest[Frontpage]):
    kind = ResultKind.FRONTPAGE
    endpoint = FRONTPAGE_ENDPOINT

    def __init__(self, *, client: Diffbot, url: str) -> None:
        super().__init__(client=client, url=url)
        self._set(name=FORMAT, value="xml")
