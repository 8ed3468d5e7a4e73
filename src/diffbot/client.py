"""
Diffbot API client.
"""

from __future__ import annotations

import typing as t

import httpx
import structlog
from pydantic import ValidationError

from diffbot.batching.core import Batcher
from diffbot.batching.dispatcher import BatchDispatcher
from diffbot.batching.pending import PendingResult
from diffbot.batching.queue import PendingQueue
from diffbot.config import DiffbotSettings, resolve_token
from diffbot.constants import (
    CONTENT_TYPE,
    DEFAULT_BATCH_REQUEST_TIMEOUT,
    DEFAULT_CONCURRENT_BATCH_REQUEST,
    DEFAULT_MAX_BATCH_REQUEST,
    DEFAULT_READ_TIMEOUT,
    HTTP_UNAUTHORIZED,
)
from diffbot.exceptions import AuthorizationError, ConfigurationError, ServerError
from diffbot.models import Model
from diffbot.parsing import parse_body
from diffbot.request import (
    ArticleRequest,
    ClassifierRequest,
    FrontpageRequest,
    ImagesRequest,
    ProductsRequest,
    RequestDescriptor,
)
from diffbot.transport import DEFAULT_HEADERS, TokenAuth, build_timeout

log = structlog.get_logger(__name__)


class Diffbot:
    """
    Entry point of the Diffbot APIs.

    Requests are either executed immediately with ``execute()`` or queued with
    ``queue()``. Queued requests are sent together through the batch API the
    first time one of their results is read.

    Parameters
    ----------
    token : str | None, optional
        Developer token. Read from ``DIFFBOT_TOKEN`` when omitted.
    max_batch_request : int, optional
        Maximum number of requests per batch call, from 1 to 50.
    batch_request_timeout : float, optional
        Timeout of a batch call in seconds, ``0`` for none.
    read_timeout : float, optional
        Timeout of a single call in seconds, ``0`` for none.
    concurrent_batch_request : int, optional
        Maximum number of batch calls sent in parallel when a result is read.
    http_client : httpx.Client | None, optional
        Client used for every call. Created, and closed by ``close()``, when
        omitted.

    Raises
    ------
    ConfigurationError
        If no token is available or a limit is out of range.

    Examples
    --------
    >>> with Diffbot(token="...") as diffbot:
    ...     pending = [diffbot.article(url).queue() for url in urls]
    ...     articles = [result.result() for result in pending]
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        max_batch_request: int = DEFAULT_MAX_BATCH_REQUEST,
        batch_request_timeout: float = DEFAULT_BATCH_REQUEST_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        concurrent_batch_request: int = DEFAULT_CONCURRENT_BATCH_REQUEST,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._token = resolve_token(token=token)
        try:
            self._settings = DiffbotSettings(
                max_batch_request=max_batch_request,
                batch_request_timeout=batch_request_timeout,
                read_timeout=read_timeout,
                concurrent_batch_request=concurrent_batch_request,
            )
        except ValidationError as error:
            raise ConfigurationError(str(object=error)) from error

        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.Client()
        self._auth = TokenAuth(token=self._token)
        self._batcher = Batcher(
            queue=PendingQueue(),
            dispatcher=BatchDispatcher(
                http_client=self._http_client,
                auth=self._auth,
                settings=self._settings,
            ),
            settings=self._settings,
        )
        log.debug(
            event="Initialized Diffbot client",
            max_batch_request=max_batch_request,
            batch_request_timeout=batch_request_timeout,
            read_timeout=read_timeout,
            concurrent_batch_request=concurrent_batch_request,
        )

    @property
    def settings(self) -> DiffbotSettings:
        return self._settings

    @property
    def max_batch_request(self) -> int:
        return self._settings.max_batch_request

    @max_batch_request.setter
    def max_batch_request(self, value: int) -> None:
        self._update(name="max_batch_request", value=value)

    @property
    def batch_request_timeout(self) -> float:
        return self._settings.batch_request_timeout

    @batch_request_timeout.setter
    def batch_request_timeout(self, value: float) -> None:
        self._update(name="batch_request_timeout", value=value)

    @property
    def read_timeout(self) -> float:
        return self._settings.read_timeout

    @read_timeout.setter
    def read_timeout(self, value: float) -> None:
        self._update(name="read_timeout", value=value)

    @property
    def concurrent_batch_request(self) -> int:
        return self._settings.concurrent_batch_request

    @concurrent_batch_request.setter
    def concurrent_batch_request(self, value: int) -> None:
        self._update(name="concurrent_batch_request", value=value)

    def _update(self, *, name: str, value: t.Any) -> None:
        try:
            setattr(self._settings, name, value)
        except ValidationError as error:
            raise ConfigurationError(str(object=error)) from error

    def article(self, url: str) -> ArticleRequest:
        """Build a request to the Article API for ``url``."""
        return ArticleRequest(client=self, url=url)

    def frontpage(self, url: str) -> FrontpageRequest:
        """Build a request to the Frontpage API for ``url``."""
        return FrontpageRequest(client=self, url=url)

    def images(self, url: str) -> ImagesRequest:
        """Build a request to the Image API for ``url``."""
        return ImagesRequest(client=self, url=url)

    def products(self, url: str) -> ProductsRequest:
        """Build a request to the Product API for ``url``."""
        return ProductsRequest(client=self, url=url)

    def classifier(self, url: str) -> ClassifierRequest:
        """Build a request to the Page Classifier API for ``url``."""
        return ClassifierRequest(client=self, url=url)

    def execute(self, *, descriptor: RequestDescriptor) -> Model:
        """
        Send one request immediately, outside of any batch.

        Parameters
        ----------
        descriptor : RequestDescriptor
            Request to send.

        Returns
        -------
        Model
            Parsed result.

        Raises
        ------
        AuthorizationError
            If the token is rejected.
        ServerError
            On transport failure, timeout or non-success status.
        APIError
            If Diffbot reports an error for the request.
        ParseError
            If the response cannot be parsed.
        """
        log.debug(event="Executing request", relative_url=descriptor.relative_url)
        try:
            response = self._http_client.request(
                method=descriptor.method,
                url=descriptor.absolute_url,
                headers=DEFAULT_HEADERS,
                auth=self._auth,
                timeout=build_timeout(seconds=descriptor.read_timeout),
            )
        except httpx.TimeoutException as error:
            raise ServerError(f"The request timed out: {error}") from error
        except httpx.TransportError as error:
            raise ServerError(f"The request could not be sent: {error}") from error

        if response.status_code == HTTP_UNAUTHORIZED:
            raise AuthorizationError("Not authorized API token.")
        if not response.is_success:
            raise ServerError(response.reason_phrase, status_code=response.status_code)
        return parse_body(
            kind=descriptor.kind,
            body=response.text,
            content_type=response.headers.get(CONTENT_TYPE),
        )

    def enqueue(self, *, descriptor: RequestDescriptor) -> PendingResult[t.Any]:
        """
        Queue a request for the next batch call.

        Parameters
        ----------
        descriptor : RequestDescriptor
            Request to queue.

        Returns
        -------
        PendingResult
            Placeholder whose ``result()`` sends the batch when needed.
        """
        return self._batcher.enqueue(descriptor=descriptor)

    def pending(self) -> list[PendingResult[t.Any]]:
        """Return the queued requests, in submission order."""
        return self._batcher.pending()

    def pending_count(self) -> int:
        return self._batcher.pending_count()

    def close(self) -> None:
        self._batcher.close()
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> "Diffbot":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Diffbot pending={self.pending_count()} max_batch_request={self.max_batch_request}>"
