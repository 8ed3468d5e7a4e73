import typing as t

import httpx
import pytest

from diffbot.client import Diffbot
from tests.mocks.diffbot import TOKEN, FakeDiffbotAPI


@pytest.fixture(autouse=True)
def test_set_env(monkeypatch):
    monkeypatch.setenv("DIFFBOT_TOKEN", TOKEN)


@pytest.fixture
def fake_api() -> FakeDiffbotAPI:
    """
    Create a fake Diffbot API.
    """
    return FakeDiffbotAPI()


@pytest.fixture
def http_client(fake_api: FakeDiffbotAPI) -> t.Iterator[httpx.Client]:
    """
    Create an HTTP client routed to the fake Diffbot API.

    Yields
    ------
    httpx.Client
        Client using a mock transport.
    """
    with httpx.Client(transport=fake_api.transport()) as client:
        yield client


@pytest.fixture
def make_client(http_client: httpx.Client) -> t.Iterator[t.Callable[..., Diffbot]]:
    """
    Build Diffbot clients sharing the fake API, closed after the test.

    Yields
    ------
    typing.Callable[..., Diffbot]
        Factory accepting the ``Diffbot`` keyword arguments.
    """
    clients: list[Diffbot] = []

    def factory(**kwargs: t.Any) -> Diffbot:
        client = Diffbot(http_client=http_client, **kwargs)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def client(make_client: t.Callable[..., Diffbot]) -> Diffbot:
    return make_client()
