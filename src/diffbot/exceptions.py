"""
Diffbot-specific runtime exceptions.
"""

from __future__ import annotations


class DiffbotError(Exception):
    """Base exception for every error raised by the SDK."""


class ConfigurationError(DiffbotError, ValueError):
    """
    Invalid construction or configuration argument.

    Notes
    -----
    Raised synchronously by the call that violates the precondition and
    never retried or wrapped.
    """


class AuthorizationError(DiffbotError):
    """The Diffbot service rejected the developer token."""


class ServerError(DiffbotError):
    """
    Non-success HTTP status or transport failure.

    Parameters
    ----------
    message : str
        Status reason, sub-response body or transport error description.
    status_code : int | None, optional
        HTTP status code, ``None`` when the call never got a response.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(DiffbotError):
    """A response body could not be decoded into the declared result kind."""


class APIError(DiffbotError):
    """
    Well-formed response whose body reports an application-level error.

    Parameters
    ----------
    message : str
        Error message reported by Diffbot.
    error_code : int
        Error code reported by Diffbot.
    """

    def __init__(self, message: str, *, error_code: int) -> None:
        super().__init__(message)
        self.error_code = error_code


class BatchError(DiffbotError):
    """
    The combined batch call itself failed.

    Raised only to the caller that triggered the batch. The members of the
    failed batch are back in the queue, unresolved.

    Parameters
    ----------
    error : DiffbotError
        Authorization or server error raised by the combined call.
    """

    def __init__(self, error: DiffbotError) -> None:
        super().__init__(f"The batch request failed: {error}")
        self.error = error


class ResolutionError(RuntimeError):
    """A pending result was resolved twice or read before resolution."""
