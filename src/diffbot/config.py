"""
Client settings and token resolution.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from diffbot.constants import (
    BATCH_ENDPOINT,
    DEFAULT_BATCH_REQUEST_TIMEOUT,
    DEFAULT_CONCURRENT_BATCH_REQUEST,
    DEFAULT_MAX_BATCH_REQUEST,
    DEFAULT_READ_TIMEOUT,
    MAX_BATCH_REQUEST_LIMIT,
    TOKEN_ENV_VAR,
)
from diffbot.exceptions import ConfigurationError


class DiffbotSettings(BaseModel):
    """
    Tunable limits of a client, validated on construction and assignment.

    Attributes
    ----------
    max_batch_request : int
        Maximum number of requests per batch call, from 1 to 50.
    batch_request_timeout : float
        Timeout of a batch call in seconds, ``0`` for none.
    read_timeout : float
        Read timeout of a single call in seconds, ``0`` for none.
    concurrent_batch_request : int
        Maximum number of batch calls in flight at once. ``1`` sends one
        batch at a time from the calling thread.
    batch_endpoint : str
        URL of the batch API.
    """

    model_config = ConfigDict(validate_assignment=True)

    max_batch_request: int = Field(
        default=DEFAULT_MAX_BATCH_REQUEST, ge=1, le=MAX_BATCH_REQUEST_LIMIT
    )
    batch_request_timeout: float = Field(default=DEFAULT_BATCH_REQUEST_TIMEOUT, ge=0)
    read_timeout: float = Field(default=DEFAULT_READ_TIMEOUT, ge=0)
    concurrent_batch_request: int = Field(default=DEFAULT_CONCURRENT_BATCH_REQUEST, ge=1)
    batch_endpoint: str = BATCH_ENDPOINT

    @property
    def concurrent(self) -> bool:
        return self.concurrent_batch_request > 1


def resolve_token(*, token: str | None) -> str:
    """
    Return the developer token, falling back to the environment.

    Parameters
    ----------
    token : str | None
        Explicit token. When ``None``, ``DIFFBOT_TOKEN`` is read from the
        environment or a ``.env`` file.

    Returns
    -------
    str
        Non-empty token.

    Raises
    ------
    ConfigurationError
        If no non-empty token is available.
    """
    if token is None:
        load_dotenv()
        token = os.getenv(TOKEN_ENV_VAR)
    if not token or not token.strip():
        raise ConfigurationError(
            f"A Diffbot developer token is required. Either pass it through the token "
            f"parameter or set the {TOKEN_ENV_VAR} environment variable."
        )
    return token
