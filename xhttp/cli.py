"""CLI application and commands for xhttp."""

from __future__ import annotations

import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Any

import httpx
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from xhttp.client import Client
from xhttp.config import CONFIG_FILE, DEFAULT_HEADERS, Method, get_timeout, get_verify, load_config, save_config
from xhttp.decoding import Ref, parse_json
from xhttp.errors import XHTTPError
from xhttp.options import (
    Option,
    with_delete_uri_flag,
    with_headers,
    with_logger,
    with_params,
    with_response,
    with_timeout,
    with_tls_config,
)

logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        try:
            print(f"xhttp {version('xhttp')}")
        except PackageNotFoundError:
            from xhttp import __version__  # noqa: PLC0415

            print(f"xhttp {__version__}")
        raise typer.Exit


app = typer.Typer(
    name="xhttp",
    help="Send GET/POST/PUT/DELETE requests and print the decoded response.",
    no_args_is_help=True,
)


@app.callback()
def _main(
    _version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit."),
    ] = False,
) -> None:
    """Send GET/POST/PUT/DELETE requests and print the decoded response."""


console = Console()

ParamOpt = Annotated[list[str] | None, typer.Option("--param", "-p", help="Parameter KEY=VALUE (repeatable)")]
HeaderOpt = Annotated[list[str] | None, typer.Option("--header", "-H", help="Header 'Name: value' (repeatable)")]
DataOpt = Annotated[str | None, typer.Option("--data", "-d", help="JSON object merged into the parameters")]
TimeoutOpt = Annotated[float | None, typer.Option("--timeout", "-t", help="Timeout in seconds")]
InsecureOpt = Annotated[bool, typer.Option("--insecure", "-k", help="Skip TLS certificate verification")]
IncludeOpt = Annotated[bool, typer.Option("--include", "-i", help="Show status line and response headers")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Log request traces")]


def _parse_params(items: list[str] | None, data: str | None) -> dict[str, Any] | None:
    """Build the parameter map from --data and --param; None when neither was given."""
    if not items and data is None:
        return None

    params: dict[str, Any] = {}
    if data is not None:
        try:
            decoded = json.loads(data)
        except json.JSONDecodeError as e:
            console.print(f"[red]Error: --data is not valid JSON: {escape(str(e))}[/red]")
            raise typer.Exit(1) from e
        if not isinstance(decoded, dict):
            console.print("[red]Error: --data must be a JSON object[/red]")
            raise typer.Exit(1)
        params.update(decoded)

    for item in items or []:
        if "=" not in item:
            console.print(f"[red]Error: Use format KEY=VALUE (got '{escape(item)}')[/red]")
            raise typer.Exit(1)
        key, value = item.split("=", 1)
        params[key.strip()] = value
    return params


def _parse_headers(items: list[str] | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in items or []:
        if ":" not in item:
            console.print(f"[red]Error: Use format 'Name: value' (got '{escape(item)}')[/red]")
            raise typer.Exit(1)
        name, value = item.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


def _display_response(resp: httpx.Response, include: bool) -> None:
    if include:
        console.print(f"[bold]{resp.http_version} {resp.status_code} {escape(resp.reason_phrase)}[/bold]")
        table = Table(show_header=False, box=None)
        table.add_column("Header", style="cyan")
        table.add_column("Value")
        for name, value in resp.headers.items():
            table.add_row(name, value)
        console.print(table)
        console.print()

    if not resp.content:
        return
    ok, data = parse_json(resp.content)
    if ok:
        console.print_json(data=data)
    else:
        console.print(resp.text, markup=False, highlight=False)


def _run(
    method: Method,
    url: str,
    params: dict[str, Any] | None,
    headers: list[str] | None,
    timeout: float | None,
    insecure: bool,
    include: bool,
    verbose: bool,
    extra: list[Option] | None = None,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    client = Client.from_config()
    capture: Ref[httpx.Response] = Ref(httpx.Response)
    opts: list[Option] = [with_response(capture), with_headers(_parse_headers(headers))]
    if timeout is not None:
        opts.append(with_timeout(timeout))
    if insecure:
        opts.append(with_tls_config(False))
    if verbose:
        opts.append(with_logger(logger))
    opts.extend(extra or [])

    try:
        if method is Method.GET:
            client.get(url, None, *opts)
        elif method is Method.POST:
            client.post(url, params, None, *opts)
        elif method is Method.PUT:
            client.put(url, params, None, *opts)
        else:
            client.delete(url, params, None, *opts)
    except XHTTPError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    if capture.value is not None:
        _display_response(capture.value, include)


@app.command()
def get(
    url: Annotated[str, typer.Argument(help="Request URL")],
    param: ParamOpt = None,
    header: HeaderOpt = None,
    timeout: TimeoutOpt = None,
    insecure: InsecureOpt = False,
    include: IncludeOpt = False,
    verbose: VerboseOpt = False,
) -> None:
    """GET a URL, parameters go into the query string."""
    params = _parse_params(param, None) or {}
    _run(Method.GET, url, None, header, timeout, insecure, include, verbose, [with_params(params)])


@app.command()
def post(
    url: Annotated[str, typer.Argument(help="Request URL")],
    param: ParamOpt = None,
    data: DataOpt = None,
    header: HeaderOpt = None,
    timeout: TimeoutOpt = None,
    insecure: InsecureOpt = False,
    include: IncludeOpt = False,
    verbose: VerboseOpt = False,
) -> None:
    """POST parameters as a JSON body."""
    _run(Method.POST, url, _parse_params(param, data), header, timeout, insecure, include, verbose)


@app.command()
def put(
    url: Annotated[str, typer.Argument(help="Request URL")],
    param: ParamOpt = None,
    data: DataOpt = None,
    header: HeaderOpt = None,
    timeout: TimeoutOpt = None,
    insecure: InsecureOpt = False,
    include: IncludeOpt = False,
    verbose: VerboseOpt = False,
) -> None:
    """PUT parameters as a JSON body."""
    _run(Method.PUT, url, _parse_params(param, data), header, timeout, insecure, include, verbose)


@app.command()
def delete(
    url: Annotated[str, typer.Argument(help="Request URL")],
    param: ParamOpt = None,
    data: DataOpt = None,
    header: HeaderOpt = None,
    timeout: TimeoutOpt = None,
    insecure: InsecureOpt = False,
    include: IncludeOpt = False,
    verbose: VerboseOpt = False,
    no_delete_query: Annotated[
        bool, typer.Option("--no-delete-query", help="Send parameters only in the JSON body")
    ] = False,
) -> None:
    """DELETE with parameters in the JSON body and the query string."""
    extra = [with_delete_uri_flag(False)] if no_delete_query else []
    _run(Method.DELETE, url, _parse_params(param, data), header, timeout, insecure, include, verbose, extra)


@app.command()
def config(
    show: Annotated[bool, typer.Option("--show", help="Show current config")] = False,
    set_timeout: Annotated[float | None, typer.Option("--set-timeout", help="Set default timeout in seconds")] = None,
    set_header: Annotated[str | None, typer.Option("--set-header", help="Set default header (NAME=VALUE)")] = None,
    insecure: Annotated[
        bool | None, typer.Option("--insecure/--secure", help="Disable or enable TLS verification by default")
    ] = None,
) -> None:
    """Manage configuration."""
    if set_timeout is not None:
        if set_timeout <= 0:
            console.print("[red]Error: Timeout must be positive[/red]")
            raise typer.Exit(1)
        cfg = load_config()
        cfg.setdefault("client", {})["timeout"] = set_timeout
        save_config(cfg)
        console.print(f"[green]Timeout set to {set_timeout}s in {CONFIG_FILE}[/green]")
        return

    if set_header:
        if "=" not in set_header:
            console.print("[red]Error: Use format NAME=VALUE (e.g., Authorization=Bearer abc)[/red]")
            raise typer.Exit(1)
        name, value = set_header.split("=", 1)
        cfg = load_config()
        cfg.setdefault("headers", {})[name.strip()] = value.strip()
        save_config(cfg)
        console.print(f"[green]Header {escape(name.strip())} saved to {CONFIG_FILE}[/green]")
        return

    if insecure is not None:
        cfg = load_config()
        cfg.setdefault("client", {})["verify"] = not insecure
        save_config(cfg)
        state = "disabled" if insecure else "enabled"
        console.print(f"[green]TLS verification {state}[/green]")
        return

    if show or (set_timeout is None and not set_header and insecure is None):
        cfg = load_config()
        console.print(f"[bold]Config file:[/bold] {CONFIG_FILE}")
        console.print(f"[bold]Config exists:[/bold] {CONFIG_FILE.exists()}")
        console.print(f"[bold]Timeout:[/bold] {get_timeout(cfg)}s")
        console.print(f"[bold]Verify TLS:[/bold] {get_verify(cfg)}")

        console.print()
        console.print("[bold]Headers:[/bold]")
        configured = cfg.get("headers", {})
        merged = {**DEFAULT_HEADERS, **(configured if isinstance(configured, dict) else {})}
        for name, value in merged.items():
            source = "[dim](default)[/dim]" if name not in configured else ""
            console.print(f"  {escape(name)}: {escape(str(value))} {source}".rstrip())


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    sys.exit(main())
