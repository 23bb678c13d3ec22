# ruff: noqa: I001
from .__version__ import __description__, __title__, __version__
from ._client import Client, fetch, get, post
from ._config import READ_BUFFER_SIZE, TLS_AVAILABLE, USER_AGENT, create_ssl_context
from ._exceptions import (
    ConnectError,
    HTTPError,
    InvalidURL,
    RequestError,
    ResponseParseError,
    TLSError,
    TLSUnavailable,
    UnsupportedProtocol,
)
from ._models import GET, POST, Method, Response
from ._parser import parse_response
from ._request import build_request
from ._transports import TCPTransport, TLSTransport

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "minihttp" command requires the CLI extra. '
            'Install it with: pip install "minihttp[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
