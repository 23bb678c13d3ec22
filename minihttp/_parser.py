from __future__ import annotations

import re

from ._exceptions import ResponseParseError
from ._models import Response

HEADER_BODY_SEPARATOR = "\r\n\r\n"

_STATUS_CODE_REGEX = re.compile(r"[0-9]+")


def _splitlines_http(text: str) -> list[str]:
    """Split on ``\\n``, dropping one trailing ``\\r`` from every line.

    ``str.splitlines()`` would also break on ``\\r``, form feeds and Unicode
    separators, none of which terminate a line in an HTTP header block.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _parse_status_line(line: str) -> tuple[str, int, str]:
    parts = line.split(None, 2)
    if len(parts) < 2:
        raise ResponseParseError(f"Invalid status line: {line!r}")

    http_version, code = parts[0], parts[1]
    if not _STATUS_CODE_REGEX.fullmatch(code):
        raise ResponseParseError(f"Invalid status code: {code!r}")

    reason_phrase = parts[2].strip() if len(parts) == 3 else ""
    return http_version, int(code), reason_phrase


def parse_response(data: bytes | str) -> Response:
    """Parse a complete, already buffered HTTP/1.x response.

    No length accounting is done: the body is whatever follows the first
    blank line, and an empty body becomes ``None``.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = data

    head, _, rest = text.partition(HEADER_BODY_SEPARATOR)
    body = rest or None

    lines = _splitlines_http(head)
    if not lines:
        raise ResponseParseError("Missing status line")

    http_version, status_code, reason_phrase = _parse_status_line(lines[0])

    headers: dict[str, str] = {}
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep:
            continue
        headers[name.strip().lower()] = value.strip()

    return Response(
        status_code,
        headers,
        body,
        reason_phrase=reason_phrase,
        http_version=http_version,
    )
