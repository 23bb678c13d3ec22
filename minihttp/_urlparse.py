from __future__ import annotations

import ipaddress
import re
import typing

import idna

from ._exceptions import InvalidURL

MAX_URL_LENGTH = 65536
MAX_PORT = 65535

DEFAULT_PORTS = {"ftp": 21, "http": 80, "https": 443, "ws": 80, "wss": 443}

UNRESERVED_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
SUB_DELIMS = "!$&'()*+,;="

PERCENT_ENCODED_REGEX = re.compile("%[A-Fa-f0-9]{2}")

_ALWAYS_EXCLUDED = (0x20, 0x22, 0x3C, 0x3E)
_PATH_EXCLUDED = _ALWAYS_EXCLUDED + (0x23, 0x3F, 0x60, 0x7B, 0x7D)
_USERINFO_EXTRA = (0x2F, 0x3B, 0x3D, 0x40, 0x5B, 0x5C, 0x5D, 0x5E, 0x7C)


def _safe_chars(*excluded: int) -> str:
    excluded_set = set(excluded)
    return "".join(chr(i) for i in range(0x20, 0x7F) if i not in excluded_set)


FRAG_SAFE = _safe_chars(*_ALWAYS_EXCLUDED, 0x60)
QUERY_SAFE = _safe_chars(*_ALWAYS_EXCLUDED, 0x23)
PATH_SAFE = _safe_chars(*_PATH_EXCLUDED)
USERINFO_SAFE = _safe_chars(*_PATH_EXCLUDED, *_USERINFO_EXTRA)

URL_REGEX = re.compile(
    r"(?:(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*):)?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<path>[^?#]*)"
    r"(?:\?(?P<query>[^#]*))?"
    r"(?:#(?P<fragment>.*))?"
)

AUTHORITY_REGEX = re.compile(
    r"(?:(?P<userinfo>.*)@)?(?P<host>(\[.*\]|[^:@]*)):?(?P<port>.*)?"
)

IPv4_STYLE_HOSTNAME = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")
IPv6_STYLE_HOSTNAME = re.compile(r"^\[.*\]$")


class ParseResult(typing.NamedTuple):
    scheme: str
    userinfo: str
    host: str
    port: int | None
    path: str
    query: str | None
    fragment: str | None

    @property
    def host_header(self) -> str:
        return f"[{self.host}]" if ":" in self.host else self.host

    @property
    def port_or_default(self) -> int | None:
        if self.port is not None:
            return self.port
        return DEFAULT_PORTS.get(self.scheme)

    @property
    def target(self) -> str:
        """The request target: path plus query string, never the fragment."""
        if self.query is None:
            return self.path
        return f"{self.path}?{self.query}"

    def __str__(self) -> str:
        authority = "".join([
            f"{self.userinfo}@" if self.userinfo else "",
            self.host_header,
            f":{self.port}" if self.port is not None else "",
        ])
        return "".join([
            f"{self.scheme}:" if self.scheme else "",
            f"//{authority}" if authority else "",
            self.path,
            f"?{self.query}" if self.query is not None else "",
            f"#{self.fragment}" if self.fragment is not None else "",
        ])


def _validate_non_printable(value: str, label: str) -> None:
    if any(char.isascii() and not char.isprintable() for char in value):
        char = next(c for c in value if c.isascii() and not c.isprintable())
        raise InvalidURL(f"Invalid non-printable ASCII character in {label}, {char!r} at position {value.find(char)}.")


def urlparse(url: str) -> ParseResult:
    """Split an absolute URL into normalised components.

    Only syntax is checked here; whether the URL can actually be fetched
    is decided by :func:`resolve_url`.
    """
    if len(url) > MAX_URL_LENGTH:
        raise InvalidURL("URL too long")

    url = url.strip()
    _validate_non_printable(url, "URL")

    url_dict = URL_REGEX.match(url).groupdict()  # type: ignore[union-attr]

    scheme = url_dict["scheme"] or ""
    authority = url_dict["authority"]
    path = url_dict["path"] or ""
    query = url_dict["query"]
    frag = url_dict["fragment"]

    if not scheme:
        raise InvalidURL("Relative URL without a base")

    authority_dict = AUTHORITY_REGEX.match(authority or "").groupdict()  # type: ignore[union-attr]

    userinfo = authority_dict["userinfo"] or ""
    host = authority_dict["host"] or ""
    port = authority_dict["port"]

    parsed_scheme = scheme.lower()
    parsed_host = encode_host(host)
    parsed_port = normalize_port(port)

    has_authority = authority is not None
    if has_authority and path and not path.startswith("/"):
        raise InvalidURL("For absolute URLs, path must be empty or begin with '/'")
    if has_authority:
        path = normalize_path(path) or "/"

    return ParseResult(
        parsed_scheme,
        quote(userinfo, safe=USERINFO_SAFE),
        parsed_host,
        parsed_port,
        quote(path, safe=PATH_SAFE),
        None if query is None else quote(query, safe=QUERY_SAFE),
        None if frag is None else quote(frag, safe=FRAG_SAFE),
    )


def resolve_url(url: str) -> tuple[ParseResult, int]:
    """Parse ``url`` and return it with the port a connection should use."""
    parsed = urlparse(url)
    if not parsed.host:
        raise InvalidURL("Missing host", url=url)
    port = parsed.port_or_default
    if port is None:
        raise InvalidURL("Missing port", url=url)
    return parsed, port


def encode_host(host: str) -> str:
    if not host:
        return ""

    if IPv4_STYLE_HOSTNAME.match(host):
        try:
            ipaddress.IPv4Address(host)
        except ipaddress.AddressValueError:
            raise InvalidURL(f"Invalid IPv4 address: {host!r}")
        return host

    if IPv6_STYLE_HOSTNAME.match(host):
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ipaddress.AddressValueError:
            raise InvalidURL(f"Invalid IPv6 address: {host!r}")
        return host[1:-1]

    if host.isascii():
        if any(c in host for c in ' <>"`{}|\\^'):
            raise InvalidURL(f"Invalid character in host: {host!r}")
        return quote(host.lower(), safe=SUB_DELIMS)

    try:
        return idna.encode(host.lower(), uts46=True).decode("ascii")
    except idna.IDNAError:
        raise InvalidURL(f"Invalid IDNA hostname: {host!r}")


def normalize_port(port: str | None) -> int | None:
    if not port:
        return None
    if not port.isascii() or not port.isdigit():
        raise InvalidURL(f"Invalid port: {port!r}")
    port_as_int = int(port)
    if port_as_int > MAX_PORT:
        raise InvalidURL(f"Invalid port: {port!r}")
    return port_as_int


def normalize_path(path: str) -> str:
    if "." not in path:
        return path
    components = path.split("/")
    if "." not in components and ".." not in components:
        return path
    output: list[str] = []
    for component in components:
        if component == "..":
            if output and output != [""]:
                output.pop()
        elif component != ".":
            output.append(component)
    return "/".join(output)


def _percent_encode(string: str) -> str:
    return "".join(f"%{byte:02X}" for byte in string.encode("utf-8"))


def percent_encoded(string: str, safe: str) -> str:
    non_escaped = UNRESERVED_CHARACTERS + safe
    if not string.rstrip(non_escaped):
        return string
    return "".join(c if c in non_escaped else _percent_encode(c) for c in string)


def quote(string: str, safe: str) -> str:
    parts: list[str] = []
    pos = 0
    for match in re.finditer(PERCENT_ENCODED_REGEX, string):
        start, end = match.start(), match.end()
        if start != pos:
            parts.append(percent_encoded(string[pos:start], safe=safe))
        parts.append(match.group(0))
        pos = end
    if pos != len(string):
        parts.append(percent_encoded(string[pos:], safe=safe))
    return "".join(parts)
