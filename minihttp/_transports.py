from __future__ import annotations

import logging
import typing

import anyio
from anyio.abc import ByteStream
from anyio.streams.tls import TLSStream

from ._config import READ_BUFFER_SIZE
from ._exceptions import ConnectError, RequestError, TLSError

if typing.TYPE_CHECKING:
    from ssl import SSLContext

__all__ = ["TCPTransport", "TLSTransport", "Transport", "receive_all", "send_all"]

logger = logging.getLogger("minihttp")

# ``ssl.SSLError`` is an ``OSError`` subclass, so this also covers TLS streams.
_STREAM_ERRORS = (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError)


def _describe(exc: BaseException) -> str:
    # anyio's stream errors carry no message; the OS error is their cause.
    text = str(exc)
    if text:
        return text
    if exc.__cause__ is not None:
        return _describe(exc.__cause__)
    return type(exc).__name__


class Transport(typing.Protocol):
    async def connect(self, host: str, port: int) -> ByteStream: ...


class TCPTransport:
    """Plaintext connections."""

    async def connect(self, host: str, port: int) -> ByteStream:
        logger.debug("connect_tcp.started host=%r port=%d", host, port)
        try:
            stream = await anyio.connect_tcp(host, port)
        except OSError as exc:
            raise ConnectError(f"Failed to connect to {host}: {exc}") from exc
        logger.debug("connect_tcp.complete host=%r port=%d", host, port)
        return stream


class TLSTransport(TCPTransport):
    """TCP connections wrapped in TLS, with ``host`` used for SNI and
    certificate hostname checks."""

    def __init__(self, ssl_context: SSLContext) -> None:
        self.ssl_context = ssl_context

    async def connect(self, host: str, port: int) -> ByteStream:
        stream = await super().connect(host, port)
        logger.debug("start_tls.started server_hostname=%r", host)
        try:
            tls_stream = await TLSStream.wrap(
                stream,
                hostname=host,
                ssl_context=self.ssl_context,
                standard_compatible=False,
            )
        except (*_STREAM_ERRORS, anyio.EndOfStream) as exc:
            await anyio.aclose_forcefully(stream)
            raise TLSError(f"TLS handshake failed: {_describe(exc)}") from exc
        except BaseException:
            await anyio.aclose_forcefully(stream)
            raise
        logger.debug("start_tls.complete server_hostname=%r", host)
        return tls_stream


async def send_all(stream: ByteStream, data: bytes) -> None:
    logger.debug("send_request.started bytes=%d", len(data))
    try:
        await stream.send(data)
    except _STREAM_ERRORS as exc:
        raise RequestError(f"Failed to write request: {_describe(exc)}") from exc
    logger.debug("send_request.complete")


async def receive_all(stream: ByteStream, max_bytes: int = READ_BUFFER_SIZE) -> bytes:
    """Read until the peer closes the connection.

    End of stream is the only stop condition; ``Content-Length`` is ignored.
    """
    buffer = bytearray()
    while True:
        try:
            chunk = await stream.receive(max_bytes)
        except anyio.EndOfStream:
            break
        except _STREAM_ERRORS as exc:
            raise RequestError(f"Failed to read response: {_describe(exc)}") from exc
        if not chunk:
            break
        buffer += chunk
    logger.debug("receive_response.complete bytes=%d", len(buffer))
    return bytes(buffer)
