"""
Exception hierarchy:

    HTTPError
    ├── InvalidURL
    │   └── UnsupportedProtocol
    ├── ConnectError
    ├── TLSError
    │   └── TLSUnavailable
    ├── RequestError
    └── ResponseParseError
"""

from __future__ import annotations

import typing

__all__ = [
    "ConnectError",
    "HTTPError",
    "InvalidURL",
    "RequestError",
    "ResponseParseError",
    "TLSError",
    "TLSUnavailable",
    "UnsupportedProtocol",
]


class HTTPError(Exception):
    """Base class for every error raised by a single fetch."""

    def __init__(self, message: str, *, url: typing.Optional[str] = None) -> None:
        super().__init__(message)
        self._url = url

    @property
    def url(self) -> str:
        if self._url is None:
            raise RuntimeError("The .url property has not been set.")
        return self._url

    @url.setter
    def url(self, url: str) -> None:
        self._url = url


class InvalidURL(HTTPError):
    """Malformed URL, missing host or a port that cannot be deduced."""


class UnsupportedProtocol(InvalidURL):
    """The URL scheme is neither ``http`` nor ``https``."""


class ConnectError(HTTPError):
    """Failed to resolve or connect to the remote host."""


class TLSError(HTTPError):
    """TLS handshake or certificate verification failed."""


class TLSUnavailable(TLSError):
    """An ``https`` URL was requested but TLS is disabled or unsupported."""


class RequestError(HTTPError):
    """Writing the request, reading the response or encoding the body failed."""


class ResponseParseError(HTTPError):
    """The peer answered with something that is not an HTTP response."""
