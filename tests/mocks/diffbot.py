"""
In-memory emulation of the Diffbot single-call and batch APIs.
"""

import json
import threading
import typing as t

import httpx

TOKEN = "test-token"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
XML_CONTENT_TYPE = "text/xml; charset=UTF-8"


def article_payload(*, url: str) -> dict[str, t.Any]:
    return {
        "type": "article",
        "url": url,
        "resolvedUrl": url,
        "title": f"Title of {url}",
        "text": "Body text.",
        "author": "Jane Doe",
        "tags": ["news"],
    }


def images_payload(*, url: str) -> dict[str, t.Any]:
    return {
        "type": "image",
        "url": url,
        "title": f"Images of {url}",
        "images": [{"url": f"{url}/cat.png", "pixelHeight": 480, "pixelWidth": 640}],
    }


def products_payload(*, url: str) -> dict[str, t.Any]:
    return {
        "type": "product",
        "url": url,
        "products": [{"title": "Blue shoe", "offerPrice": "$10.00", "regularPrice": "$12.00"}],
    }


def classifier_payload(*, url: str, stats: bool) -> dict[str, t.Any]:
    payload = {**article_payload(url=url), "human_language": "en"}
    if stats:
        payload["stats"] = {"confidence": 0.9, "types": {"article": 0.9, "product": 0.1}}
    return payload


def frontpage_dml(*, url: str) -> str:
    return (
        "<dml>"
        '<info id="1">'
        "<title>Front page</title>"
        f"<sourceURL>{url}</sourceURL>"
        "<sourceType>html</sourceType>"
        "<numItems>2</numItems>"
        "<numSpamItems>0</numSpamItems>"
        "</info>"
        f'<item id="11" type="STORY" sp="0.1" sr="4" fresh="0.5" img="{url}/a.png">'
        "<title>First story</title>"
        f"<link>{url}/first</link>"
        "<pubDate>Sat, 11 Jan 2014 10:32:00 GMT</pubDate>"
        "<textSummary>Summary</textSummary>"
        "</item>"
        '<item id="12" type="LINK">'
        "<title>Second story</title>"
        f"<link>{url}/second</link>"
        "</item>"
        "</dml>"
    )


class FakeDiffbotAPI:
    """
    Emulate the subset of the Diffbot APIs used in tests.

    Pages whose URL contains ``"error"`` are answered with an application
    error. Single calls and batch calls are recorded, and a few knobs make
    batch calls fail, time out or block.
    """

    def __init__(self, *, token: str = TOKEN) -> None:
        self.token = token
        self.batch_calls: list[list[str]] = []
        self.single_calls: list[httpx.URL] = []
        self.fail_next_batches = 0
        self.timeout_next_batches = 0
        self.unauthorized = False
        self.reverse_responses = False
        self.malformed_batch_body = False
        self.dropped_relative_urls: set[str] = set()
        self.failing_relative_urls: set[str] = set()
        self.overrides: dict[str, dict[str, t.Any]] = {}
        self.batch_gate: threading.Event | None = None
        self.batch_started = threading.Event()
        self._lock = threading.Lock()

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(handler=self.handler)

    def _page_response(self, *, path: str, params: httpx.QueryParams) -> tuple[int, str, str]:
        """
        Build the response of one page request.

        Parameters
        ----------
        path : str
            Endpoint path.
        params : httpx.QueryParams
            Query parameters of the page request.

        Returns
        -------
        tuple[int, str, str]
            Status code, body and content type.
        """
        url = params.get("url", "")
        if url in self.overrides:
            override = self.overrides[url]
            return (
                override.get("code", 200),
                override.get("body", ""),
                override.get("content_type", JSON_CONTENT_TYPE),
            )
        if path == "/api/frontpage":
            if "error" in url:
                payload = {"statusCode": 500, "message": "Could not download page"}
                return 200, json.dumps(obj=payload), JSON_CONTENT_TYPE
            return 200, frontpage_dml(url=url), XML_CONTENT_TYPE
        if "error" in url:
            payload = {"error": "Could not download page (404)", "errorCode": 404}
            return 200, json.dumps(obj=payload), JSON_CONTENT_TYPE

        builders: dict[str, t.Callable[[], dict[str, t.Any]]] = {
            "/v2/article": lambda: article_payload(url=url),
            "/v2/image": lambda: images_payload(url=url),
            "/v2/product": lambda: products_payload(url=url),
            "/v2/analyze": lambda: classifier_payload(url=url, stats="stats" in params),
        }
        if path not in builders:
            return 404, json.dumps(obj={"error": "not found"}), JSON_CONTENT_TYPE
        return 200, json.dumps(obj=builders[path]()), JSON_CONTENT_TYPE

    def _handle_batch(self, *, request: httpx.Request) -> httpx.Response:
        sub_requests = json.loads(s=request.url.params["batch"])
        relative_urls = [sub_request["relative_url"] for sub_request in sub_requests]
        with self._lock:
            self.batch_calls.append(relative_urls)
            timeout = self.timeout_next_batches > 0
            if timeout:
                self.timeout_next_batches -= 1
            fail = self.fail_next_batches > 0
            if fail:
                self.fail_next_batches -= 1
            fail = fail or bool(self.failing_relative_urls.intersection(relative_urls))
        self.batch_started.set()
        if self.batch_gate is not None:
            self.batch_gate.wait(timeout=5)

        if timeout:
            raise httpx.ReadTimeout("Read timed out", request=request)
        if fail:
            return httpx.Response(status_code=500, text="Internal Server Error")
        if self.malformed_batch_body:
            return httpx.Response(status_code=200, text="<html>not json</html>")

        sub_responses = []
        for relative_url in relative_urls:
            if relative_url in self.dropped_relative_urls:
                continue
            page_url = httpx.URL(f"https://api.diffbot.com{relative_url}")
            code, body, content_type = self._page_response(
                path=page_url.path, params=page_url.params
            )
            sub_responses.append(
                {
                    "relative_url": relative_url,
                    "code": code,
                    "body": body,
                    "headers": [{"name": "Content-Type", "value": content_type}],
                }
            )
        if self.reverse_responses:
            sub_responses.reverse()
        return httpx.Response(status_code=200, json=sub_responses)

    def _handle_single(self, *, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.single_calls.append(request.url)
        code, body, content_type = self._page_response(
            path=request.url.path, params=request.url.params
        )
        return httpx.Response(
            status_code=code, text=body, headers={"Content-Type": content_type}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        """
        Dispatch incoming requests to mock handlers.

        Parameters
        ----------
        request : httpx.Request
            Incoming HTTP request.

        Returns
        -------
        httpx.Response
            Mock response.
        """
        if self.unauthorized or request.url.params.get("token") != self.token:
            return httpx.Response(
                status_code=401,
                json={"statusCode": 401, "message": "Not authorized API token."},
            )
        if request.method == "POST" and request.url.path == "/api/batch":
            return self._handle_batch(request=request)
        if request.method == "GET":
            return self._handle_single(request=request)
        return httpx.Response(status_code=405, json={"error": "method not allowed"})
