from __future__ import annotations

import json
import typing

from ._config import USER_AGENT
from ._exceptions import RequestError
from ._models import Method

CRLF = "\r\n"


def encode_json(body: typing.Any) -> bytes:
    """Serialize ``body`` as compact UTF-8 JSON. ``None`` means no payload."""
    if body is None:
        return b""
    try:
        text = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise RequestError(f"JSON serialization failed: {exc}") from exc
    return text.encode("utf-8")


def build_request(
    method: Method | str,
    host: str,
    target: str,
    body: typing.Any = None,
    *,
    user_agent: str = USER_AGENT,
) -> bytes:
    """Serialize a single HTTP/1.1 request.

    ``host`` goes into the ``Host`` header verbatim and ``target`` is the
    path, including any query string. GET requests never carry a body.
    """
    method = Method.coerce(method)

    lines = [
        f"{method.value} {target} HTTP/1.1",
        f"Host: {host}",
        f"User-Agent: {user_agent}",
    ]

    if method is Method.GET:
        lines.append("Connection: close")
        payload = b""
    else:
        payload = encode_json(body)
        lines.append("Content-Type: application/json")
        lines.append(f"Content-Length: {len(payload)}")
        lines.append("Connection: close")

    head = CRLF.join(lines) + CRLF + CRLF
    try:
        return head.encode("latin-1") + payload
    except UnicodeEncodeError as exc:
        raise RequestError(f"Request head is not latin-1 encodable: {exc}") from exc
