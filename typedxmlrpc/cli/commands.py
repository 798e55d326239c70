"""CLI commands for typedxmlrpc.

Entry point ``typedxmlrpc``: ``call`` sends one XML-RPC request and prints the
decoded result, ``config`` shows the effective settings.
"""

from __future__ import annotations

import base64
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from typedxmlrpc import __version__
from typedxmlrpc.cli.logging_utils import configure_console_logging, ensure_rotating_log_file
from typedxmlrpc.client import Client
from typedxmlrpc.config.loader import get_config_path, load_config
from typedxmlrpc.convert import to_python
from typedxmlrpc.errors import MalformedResponse, MethodFault, TransportFailure, UnsupportedType
from typedxmlrpc.messages import Fault

app = typer.Typer(
    name="typedxmlrpc",
    help="typedxmlrpc - typed XML-RPC client",
    no_args_is_help=True,
)

console = Console()

EXIT_FAULT = 1
EXIT_TRANSPORT = 2
EXIT_MALFORMED = 3
EXIT_BAD_ARGUMENT = 4


def version_callback(value: bool):
    if value:
        console.print(f"typedxmlrpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """typedxmlrpc - typed XML-RPC client."""
    pass


def parse_value(raw: str) -> Any:
    """Parse CLI input value as JSON if possible; fallback to string."""
    text = raw.strip()
    if text == "":
        return ""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return raw


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return base64.b64encode(obj).decode("ascii")
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")


def _print_values(values: list[Any]) -> None:
    payload = [to_python(v) for v in values]
    console.print_json(data=payload[0] if len(payload) == 1 else payload, default=_json_default)


@app.command()
def call(
    method: str = typer.Argument(..., help="Remote method name, e.g. examples.add"),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments: JSON values or plain strings"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Endpoint URL (overrides config)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Timeout in seconds"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    show_fault: bool = typer.Option(False, "--show-fault", help="Print fault structs instead of failing"),
    verbose: bool = typer.Option(False, "--verbose", help="Log request/response at DEBUG"),
    log_file: bool = typer.Option(False, "--log-file", help="Also log to ~/.typedxmlrpc/logs/call.log"),
) -> None:
    """Call a remote XML-RPC method and print its result."""
    configure_console_logging(verbose)
    if log_file:
        ensure_rotating_log_file("call", level="DEBUG" if verbose else "INFO")

    try:
        config = load_config(config_path)
        overrides: dict[str, Any] = {}
        if url:
            overrides["server_uri"] = url
        if timeout is not None:
            overrides["timeout_seconds"] = timeout
        if overrides:
            config = type(config).model_validate({**config.model_dump(), **overrides})
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(EXIT_BAD_ARGUMENT)

    params = [parse_value(a) for a in (args or [])]
    with Client.from_config(config) as client:
        try:
            if show_fault:
                response = client.try_call(method, *params)
                if isinstance(response, Fault):
                    console.print(f"[yellow]Fault {response.fault_code}:[/yellow] {escape(response.fault_string)}")
                _print_values(list(response.params))
                return
            _print_values(client.call(method, *params))
        except UnsupportedType as exc:
            console.print(f"[red]Bad argument:[/red] {escape(exc.message)}")
            raise typer.Exit(EXIT_BAD_ARGUMENT)
        except MethodFault as exc:
            console.print(f"[red]Fault {exc.fault_code}:[/red] {escape(exc.fault_string or '')}")
            raise typer.Exit(EXIT_FAULT)
        except TransportFailure as exc:
            console.print(f"[red]Transport failure:[/red] {escape(exc.message)}")
            raise typer.Exit(EXIT_TRANSPORT)
        except MalformedResponse as exc:
            console.print(f"[red]Malformed response:[/red] {escape(exc.message)}")
            raise typer.Exit(EXIT_MALFORMED)


config_app = typer.Typer(help="Show client configuration")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Print the effective configuration."""
    path = config_path or get_config_path()
    try:
        config = load_config(path)
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(EXIT_BAD_ARGUMENT)
    data = config.model_dump()
    if data.get("headers"):
        data["headers"] = {k: "***" for k in data["headers"]}
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[dim](defaults)[/dim]'}")
    console.print_json(data=data)


if __name__ == "__main__":
    app()
