"""
HTTP plumbing shared by the single-call and batch paths.
"""

from __future__ import annotations

import typing as t

import httpx

from diffbot.constants import TOKEN, USER_AGENT

DEFAULT_HEADERS = {"User-Agent": USER_AGENT}


class TokenAuth(httpx.Auth):
    """
    Attach the developer token to every outbound request as a query parameter.

    Parameters
    ----------
    token : str
        Diffbot developer token.
    """

    def __init__(self, *, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> t.Generator[httpx.Request, httpx.Response, None]:
        request.url = request.url.copy_merge_params(params={TOKEN: self._token})
        yield request


def build_timeout(*, seconds: float | None) -> httpx.Timeout:
    """
    Build an httpx timeout where ``0`` or ``None`` means no timeout.

    Parameters
    ----------
    seconds : float | None
        Timeout in seconds.

    Returns
    -------
    httpx.Timeout
        Timeout applied to connect, read, write and pool phases.
    """
    return httpx.Timeout(timeout=seconds or None)
