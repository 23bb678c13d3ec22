from __future__ import annotations

import enum
import json
import types
import typing

__all__ = ["GET", "POST", "Method", "Response"]


class Method(str, enum.Enum):
    """The request methods this client knows how to serialize."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def coerce(cls, value: Method | str) -> Method:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        raise ValueError(f"Unsupported HTTP method: {value!r}. Expected one of GET, POST.")

    def __str__(self) -> str:
        return self.value


GET = Method.GET
POST = Method.POST


class Response:
    """The parsed result of one request/response transaction.

    Instances are read-only. Header names are stored lower-cased, so use
    :meth:`header` (or lower-case keys) when looking them up.
    """

    __slots__ = ("_status_code", "_reason_phrase", "_http_version", "_headers", "_body")

    def __init__(
        self,
        status_code: int,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        body: typing.Optional[str] = None,
        *,
        reason_phrase: str = "",
        http_version: str = "HTTP/1.1",
    ) -> None:
        object.__setattr__(self, "_status_code", status_code)
        object.__setattr__(self, "_reason_phrase", reason_phrase)
        object.__setattr__(self, "_http_version", http_version)
        object.__setattr__(
            self,
            "_headers",
            types.MappingProxyType({k.lower(): v for k, v in (headers or {}).items()}),
        )
        object.__setattr__(self, "_body", body)

    def __setattr__(self, name: str, value: typing.Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def parse(cls, data: bytes | str) -> Response:
        from ._parser import parse_response

        return parse_response(data)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def reason_phrase(self) -> str:
        return self._reason_phrase

    @property
    def http_version(self) -> str:
        return self._http_version

    @property
    def headers(self) -> typing.Mapping[str, str]:
        return self._headers

    @property
    def body(self) -> typing.Optional[str]:
        return self._body

    @property
    def is_success(self) -> bool:
        return 200 <= self._status_code < 300

    def header(self, name: str) -> typing.Optional[str]:
        return self._headers.get(name.lower())

    def json(self) -> typing.Any:
        if self._body is None:
            raise ValueError("Response has no body to decode")
        return json.loads(self._body)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Response):
            return NotImplemented
        return (
            self._status_code == other._status_code
            and self._reason_phrase == other._reason_phrase
            and self._http_version == other._http_version
            and dict(self._headers) == dict(other._headers)
            and self._body == other._body
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        status = f"{self._status_code} {self._reason_phrase}".rstrip()
        return f"<Response [{status}]>"
