from __future__ import annotations

import logging
import typing

from ._config import TLS_AVAILABLE, USER_AGENT, create_ssl_context
from ._exceptions import HTTPError, TLSUnavailable, UnsupportedProtocol
from ._models import Method, Response
from ._parser import parse_response
from ._request import build_request
from ._transports import TCPTransport, TLSTransport, Transport, receive_all, send_all
from ._urlparse import resolve_url

if typing.TYPE_CHECKING:
    from ._config import VerifyTypes

__all__ = ["Client", "fetch", "get", "post"]

logger = logging.getLogger("minihttp")


class Client:
    """Configuration for one-shot requests.

    A client never keeps a connection around: every :meth:`fetch` opens its
    own connection, sends exactly one request, reads until the server closes
    and then drops the connection. It is therefore safe to share a client
    between any number of concurrent tasks.

    Parameters
    ----------
    verify:
        TLS verification for ``https`` URLs, see
        :func:`~minihttp.create_ssl_context`.
    tls:
        Set to ``False`` to refuse ``https`` URLs with
        :class:`~minihttp.TLSUnavailable` instead of connecting.
    user_agent:
        Value of the ``User-Agent`` request header.
    """

    def __init__(
        self,
        *,
        verify: VerifyTypes = True,
        tls: bool = True,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.user_agent = user_agent
        self._transports: dict[str, Transport] = {"http": TCPTransport()}
        if tls and TLS_AVAILABLE:
            self._transports["https"] = TLSTransport(create_ssl_context(verify))

    @property
    def tls_enabled(self) -> bool:
        return "https" in self._transports

    def _transport_for_scheme(self, scheme: str) -> Transport:
        transport = self._transports.get(scheme)
        if transport is not None:
            return transport
        if scheme == "https":
            raise TLSUnavailable(
                "TLS support is not enabled. Create the client with tls=True "
                "on a Python build that includes the ssl module."
            )
        raise UnsupportedProtocol(f"Unsupported scheme: {scheme}")

    async def fetch(
        self,
        method: Method | str,
        url: str,
        body: typing.Any = None,
    ) -> Response:
        """Send one request to ``url`` and return the parsed response.

        Raises a subclass of :class:`~minihttp.HTTPError` on failure. Nothing
        is retried.
        """
        method = Method.coerce(method)
        try:
            response = await self._fetch(method, url, body)
        except HTTPError as exc:
            if exc._url is None:
                exc.url = url
            raise

        logger.info(
            'HTTP Request: %s %s "%s %d %s"',
            method.value,
            url,
            response.http_version,
            response.status_code,
            response.reason_phrase,
        )
        return response

    async def _fetch(self, method: Method, url: str, body: typing.Any) -> Response:
        parsed, port = resolve_url(url)
        transport = self._transport_for_scheme(parsed.scheme)
        request = build_request(
            method,
            parsed.host_header,
            parsed.target,
            body,
            user_agent=self.user_agent,
        )

        stream = await transport.connect(parsed.host, port)
        async with stream:
            await send_all(stream, request)
            data = await receive_all(stream)

        return parse_response(data)

    async def get(self, url: str) -> Response:
        return await self.fetch(Method.GET, url)

    async def post(self, url: str, body: typing.Any = None) -> Response:
        return await self.fetch(Method.POST, url, body)


async def fetch(
    method: Method | str,
    url: str,
    body: typing.Any = None,
    *,
    verify: VerifyTypes = True,
    tls: bool = True,
    user_agent: str = USER_AGENT,
) -> Response:
    """Send a single request with a throwaway :class:`Client`.

    >>> response = await minihttp.fetch("GET", "http://httpbin.org/get")
    >>> response.status_code
    200
    """
    client = Client(verify=verify, tls=tls, user_agent=user_agent)
    return await client.fetch(method, url, body)


async def get(url: str, **kwargs: typing.Any) -> Response:
    return await fetch(Method.GET, url, **kwargs)


async def post(url: str, body: typing.Any = None, **kwargs: typing.Any) -> Response:
    return await fetch(Method.POST, url, body, **kwargs)
