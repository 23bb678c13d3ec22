"""
Error Handling
==============

Every failure is raised as one subclass of ``minihttp.HTTPError``:

    HTTPError
    ├── InvalidURL
    │   └── UnsupportedProtocol
    ├── ConnectError
    ├── TLSError
    │   └── TLSUnavailable
    ├── RequestError
    └── ResponseParseError
"""

import anyio

import minihttp


async def main() -> None:
    # ── UnsupportedProtocol ──────────────────────────────────────────────
    try:
        await minihttp.get("ftp://example.org/resource")
    except minihttp.UnsupportedProtocol as exc:
        print(f"  Caught: {exc}  (url={exc.url})")

    # ── TLS switched off ─────────────────────────────────────────────────
    client = minihttp.Client(tls=False)
    try:
        await client.get("https://example.org/")
    except minihttp.TLSUnavailable as exc:
        print(f"  Caught: {exc}")

    # ── Nobody listening ─────────────────────────────────────────────────
    try:
        await minihttp.get("http://127.0.0.1:1/")
    except minihttp.ConnectError as exc:
        print(f"  Caught ConnectError: {exc}")

    # ── Status codes are not errors ──────────────────────────────────────
    try:
        response = await minihttp.get("http://httpbin.org/status/503")
    except minihttp.HTTPError as exc:
        print(f"  Caught {type(exc).__name__}: {exc}")
    else:
        print(f"  503 is a response, not an exception: is_success={response.is_success}")


if __name__ == "__main__":
    anyio.run(main)
