import contextlib
import json
import os
import socket
import struct
import threading
import time
import typing

import anyio
import pytest
import trustme
from anyio.abc import SocketAttribute
from uvicorn.config import Config
from uvicorn.server import Server


# Every fetch runs on the asyncio backend; trio is not exercised.
@pytest.fixture
def anyio_backend():
    return "asyncio"


ENVIRONMENT_VARIABLES = {
    "SSL_CERT_FILE",
    "SSL_CERT_DIR",
}


@pytest.fixture(scope="function", autouse=True)
def clean_environ():
    """Keeps os.environ clean for every test without having to mock os.environ"""
    original_environ = os.environ.copy()
    os.environ.clear()
    os.environ.update(
        {
            k: v
            for k, v in original_environ.items()
            if k not in ENVIRONMENT_VARIABLES and k.lower() not in ENVIRONMENT_VARIABLES
        }
    )
    yield
    os.environ.clear()
    os.environ.update(original_environ)


Message = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[Message]]
Send = typing.Callable[
    [typing.Dict[str, typing.Any]], typing.Coroutine[None, None, None]
]
Scope = typing.Dict[str, typing.Any]


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    if scope["path"].startswith("/status"):
        await status_code(scope, receive, send)
    elif scope["path"].startswith("/echo_body"):
        await echo_body(scope, receive, send)
    elif scope["path"].startswith("/echo_request"):
        await echo_request(scope, receive, send)
    elif scope["path"].startswith("/json"):
        await hello_world_json(scope, receive, send)
    elif scope["path"].startswith("/no_content"):
        await no_content(scope, receive, send)
    else:
        await hello_world(scope, receive, send)


async def _respond(
    send: Send, status: int, content_type: bytes, body: bytes
) -> None:
    # An explicit content-length keeps uvicorn from switching to chunked
    # transfer-encoding, which the client does not decode.
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [
                [b"content-type", content_type],
                [b"content-length", str(len(body)).encode()],
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})


async def _read_body(receive: Receive) -> bytes:
    body = b""
    more_body = True
    while more_body:
        message = await receive()
        body += message.get("body", b"")
        more_body = message.get("more_body", False)
    return body


async def hello_world(scope: Scope, receive: Receive, send: Send) -> None:
    await _respond(send, 200, b"text/plain", b"Hello, world!")


async def hello_world_json(scope: Scope, receive: Receive, send: Send) -> None:
    await _respond(send, 200, b"application/json", b'{"Hello": "world!"}')


async def no_content(scope: Scope, receive: Receive, send: Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": 204,
            "headers": [[b"x-empty", b"yes"]],
        }
    )
    await send({"type": "http.response.body", "body": b""})


async def status_code(scope: Scope, receive: Receive, send: Send) -> None:
    code = int(scope["path"].replace("/status/", ""))
    await _respond(send, code, b"text/plain", b"Hello, world!")


async def echo_body(scope: Scope, receive: Receive, send: Send) -> None:
    body = await _read_body(receive)
    await _respond(send, 200, b"text/plain", body)


async def echo_request(scope: Scope, receive: Receive, send: Send) -> None:
    body = await _read_body(receive)
    payload = {
        "method": scope["method"],
        "path": scope["path"],
        "query_string": scope["query_string"].decode(),
        "headers": [[name.decode(), value.decode()] for name, value in scope["headers"]],
        "body": body.decode("utf-8"),
    }
    await _respond(send, 200, b"application/json", json.dumps(payload).encode())


@pytest.fixture(scope="session")
def cert_authority():
    return trustme.CA()


@pytest.fixture(scope="session")
def localhost_cert(cert_authority):
    return cert_authority.issue_cert("localhost", "127.0.0.1")


@pytest.fixture(scope="session")
def ca_cert_pem_file(cert_authority):
    with cert_authority.cert_pem.tempfile() as tmp:
        yield tmp


@pytest.fixture(scope="session")
def cert_pem_file(localhost_cert):
    with localhost_cert.cert_chain_pems[0].tempfile() as tmp:
        yield tmp


@pytest.fixture(scope="session")
def cert_private_key_file(localhost_cert):
    with localhost_cert.private_key_pem.tempfile() as tmp:
        yield tmp


class TestServer(Server):
    __test__ = False

    def install_signal_handlers(self) -> None:
        # Signal handlers can only be installed from the main thread.
        pass

    @property
    def port(self) -> int:
        return self.servers[0].sockets[0].getsockname()[1]

    @property
    def url(self) -> str:
        protocol = "https" if self.config.is_ssl else "http"
        host = "localhost" if self.config.is_ssl else self.config.host
        return f"{protocol}://{host}:{self.port}"


def serve_in_thread(server: TestServer) -> typing.Iterator[TestServer]:
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    try:
        deadline = time.monotonic() + 10
        while not server.started:
            if time.monotonic() > deadline or not thread.is_alive():
                raise RuntimeError("Server failed to start within 10 seconds")
            time.sleep(1e-3)
        yield server
    finally:
        server.should_exit = True
        thread.join(timeout=5)


def _config(**kwargs: typing.Any) -> Config:
    return Config(
        app=app,
        lifespan="off",
        loop="asyncio",
        http="h11",
        host="127.0.0.1",
        port=0,
        log_level="warning",
        **kwargs,
    )


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    yield from serve_in_thread(TestServer(config=_config()))


@pytest.fixture(scope="session")
def https_server(
    cert_pem_file: str, cert_private_key_file: str
) -> typing.Iterator[TestServer]:
    config = _config(ssl_certfile=cert_pem_file, ssl_keyfile=cert_private_key_file)
    yield from serve_in_thread(TestServer(config=config))


class RawServer(typing.NamedTuple):
    url: str
    requests: typing.List[bytes]


def _content_length(head: bytes) -> int:
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b":")
        if name.strip().lower() == b"content-length":
            return int(value.strip())
    return 0


@contextlib.asynccontextmanager
async def _serve_raw(*chunks: bytes, delay: float = 0.0) -> typing.AsyncIterator[RawServer]:
    """Serve a canned byte response, one chunk per send, then close.

    The whole request is read first so that closing the socket never
    resets the connection under unread request bytes.
    """
    requests: typing.List[bytes] = []

    async def handle(stream) -> None:
        async with stream:
            data = b""
            while b"\r\n\r\n" not in data:
                data += await stream.receive()
            head, _, body = data.partition(b"\r\n\r\n")
            remaining = _content_length(head) - len(body)
            while remaining > 0:
                chunk = await stream.receive()
                data += chunk
                remaining -= len(chunk)
            requests.append(data)
            for chunk in chunks:
                await stream.send(chunk)
                if delay:
                    await anyio.sleep(delay)

    listener = await anyio.create_tcp_listener(local_host="127.0.0.1")
    port = listener.extra(SocketAttribute.local_port)
    async with listener, anyio.create_task_group() as tg:
        tg.start_soon(listener.serve, handle)
        yield RawServer(url=f"http://127.0.0.1:{port}", requests=requests)
        tg.cancel_scope.cancel()


@pytest.fixture
def raw_server():
    """Factory for one-shot servers that answer with canned bytes."""
    return _serve_raw


@contextlib.contextmanager
def _serve_then_reset(*chunks: bytes) -> typing.Iterator[str]:
    """Send the chunks, then abort the connection with a TCP reset.

    ``SO_LINGER`` with a zero timeout makes ``close()`` send RST instead
    of FIN, so the client sees a connection error rather than a clean EOF.
    """
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(5)
    port = listener.getsockname()[1]

    def handle() -> None:
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        data = b""
        while b"\r\n\r\n" not in data:
            received = conn.recv(4096)
            if not received:
                break
            data += received
        for chunk in chunks:
            conn.sendall(chunk)
        time.sleep(0.05)
        conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
        conn.close()

    thread = threading.Thread(target=handle, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        thread.join(timeout=5)
        listener.close()


@pytest.fixture
def resetting_server():
    """Factory for servers that reset the connection mid-response."""
    return _serve_then_reset
