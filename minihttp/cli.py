from __future__ import annotations

import contextlib
import json
import logging
import sys
import time
import typing

import anyio
import click

# ---------------------------------------------------------------------------
# Rich output helpers (graceful fallback when rich is not installed)
# ---------------------------------------------------------------------------

try:
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.syntax import Syntax
    from rich.text import Text

    HAS_RICH = True
except ImportError:  # pragma: no cover
    HAS_RICH = False

if typing.TYPE_CHECKING:
    from ._models import Response


def _status_color(status_code: int) -> str:
    """Return a rich color name based on HTTP status category."""
    if status_code < 200:
        return "cyan"
    elif status_code < 300:
        return "green"
    elif status_code < 400:
        return "yellow"
    elif status_code < 500:
        return "red"
    else:
        return "bold red"


def is_binary_body(body: str) -> bool:
    return "\0" in body


def _pretty_json(body: str) -> str | None:
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return None
    return json.dumps(data, indent=4, ensure_ascii=False)


def _status_line(response: Response) -> str:
    return f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()


# ---------------------------------------------------------------------------
# Plain-text formatter (used with --no-color or when rich is missing)
# ---------------------------------------------------------------------------


def format_response_plain(response: Response) -> str:
    lines: list[str] = [_status_line(response)]

    for key, value in response.headers.items():
        lines.append(f"{key}: {value}")

    lines.append("")

    body = response.body
    if body:
        if is_binary_body(body):
            lines.append(f"<{len(body.encode('utf-8'))} bytes of binary data>")
        elif "application/json" in (response.header("content-type") or ""):
            lines.append(_pretty_json(body) or body)
        else:
            lines.append(body)

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Rich formatter
# ---------------------------------------------------------------------------


def print_response_rich(console: Console, response: Response) -> None:
    """Pretty-print a response using rich."""
    color = _status_color(response.status_code)

    status_line = Text()
    status_line.append(f"{response.http_version} ", style="bold dim")
    status_line.append(f"{response.status_code}", style=f"bold {color}")
    if response.reason_phrase:
        status_line.append(f" {response.reason_phrase}", style=color)
    console.print(status_line)

    for key, value in response.headers.items():
        header_text = Text()
        header_text.append(f"{key}", style="dim cyan")
        header_text.append(": ", style="dim")
        header_text.append(value)
        console.print(header_text)

    console.print()

    body = response.body
    if body:
        if is_binary_body(body):
            console.print(
                f"[dim]<{len(body.encode('utf-8'))} bytes of binary data>[/dim]"
            )
        elif "application/json" in (response.header("content-type") or ""):
            formatted = _pretty_json(body)
            if formatted is not None:
                console.print(Syntax(formatted, "json", theme="monokai"))
            else:
                console.print(body, markup=False)
        else:
            console.print(body, markup=False)


@contextlib.contextmanager
def _log_to_stderr(use_rich: bool) -> typing.Iterator[None]:
    logger = logging.getLogger("minihttp")
    if use_rich:
        handler: logging.Handler = RichHandler(console=Console(stderr=True), show_path=False)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s [%(name)s] %(message)s"))
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="A minimal HTTP/1.1 client for single GET and POST requests.")
@click.argument("url")
@click.option(
    "-m",
    "--method",
    default="GET",
    type=click.Choice(["GET", "POST"], case_sensitive=False),
    help="HTTP method.",
)
@click.option(
    "-j", "--json-data", "json_body", default=None, help="JSON data to send with POST."
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log connection events to stderr.")
@click.option(
    "--insecure", is_flag=True, default=False, help="Skip TLS certificate verification."
)
@click.option(
    "--cacert",
    default=None,
    type=click.Path(exists=True, dir_okay=True),
    help="CA bundle file or directory used to verify the server.",
)
@click.option("--no-tls", is_flag=True, default=False, help="Refuse https:// URLs.")
@click.option(
    "--timing", is_flag=True, default=False, help="Show total request time."
)
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    url: str,
    method: str,
    json_body: str | None,
    verbose: bool,
    insecure: bool,
    cacert: str | None,
    no_tls: bool,
    timing: bool,
    no_color: bool,
) -> None:
    import minihttp as _minihttp_mod

    use_rich = HAS_RICH and not no_color and sys.stdout.isatty()

    body: typing.Any = None
    if json_body is not None:
        try:
            body = json.loads(json_body)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(str(exc), param_hint="'-j' / '--json-data'")

    verify: typing.Any = True
    if insecure:
        verify = False
    elif cacert is not None:
        verify = cacert

    log_context = _log_to_stderr(use_rich) if verbose else contextlib.nullcontext()

    try:
        with log_context:
            client = _minihttp_mod.Client(verify=verify, tls=not no_tls)
            start_time = time.monotonic()
            response = anyio.run(client.fetch, method.upper(), url, body)
            elapsed_ms = (time.monotonic() - start_time) * 1000
    except _minihttp_mod.HTTPError as exc:
        if use_rich:
            console = Console(stderr=True)
            console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=False)
        sys.exit(1)

    if use_rich:
        console = Console()
        print_response_rich(console, response)
        if timing:
            console.print()
            console.print(f"[dim]⏱  Total: {elapsed_ms:.1f}ms[/dim]")
    else:
        click.echo(format_response_plain(response))
        if timing:
            click.echo()
            click.echo(f"Total: {elapsed_ms:.1f}ms")

    if response.status_code >= 300:
        sys.exit(1)
