"""Main CLI application."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from tunnelroute import __version__
from tunnelroute.core.config.store import JsonConfigStore
from tunnelroute.core.logging import setup_logging
from tunnelroute.core.models.config import Settings

# Create main app
app = typer.Typer(
    name="tunnelroute",
    help="Selective SOCKS5 tunnel routing for outbound HTTP",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


class _State:
    settings: Settings | None = None
    config_path: Path | None = None


state = _State()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]tunnelroute[/bold blue] v{__version__}")
        raise typer.Exit()


def _settings() -> Settings:
    return state.settings or Settings()


def _store() -> JsonConfigStore:
    return JsonConfigStore(_settings().store_path)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings YAML file"),
    ] = None,
) -> None:
    """tunnelroute - route selected HTTP traffic through a SOCKS5 tunnel."""
    try:
        state.settings = Settings.from_yaml(config) if config else Settings()
        state.config_path = config
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Invalid settings: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging(state.settings.log_level, state.settings.log_structured)


@app.command()
def status(
    direct: Annotated[
        bool,
        typer.Option("--direct", "-d", help="Also show the IP seen without the tunnel"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the raw JSON report"),
    ] = False,
) -> None:
    """Test the tunnel now and list local tunnel sockets."""
    from tunnelroute.cli.commands.tunnel import run_status

    if not run_status(_store(), _settings(), direct=direct, as_json=as_json):
        raise typer.Exit(1)


@app.command()
def route(
    url: Annotated[str, typer.Argument(help="Target URL to evaluate")],
) -> None:
    """Show whether a URL would be routed through the tunnel."""
    from tunnelroute.cli.commands.tunnel import show_route

    show_route(_store(), _settings(), url)


@app.command()
def config(
    action: Annotated[
        str,
        typer.Argument(help="Action: show, init, set"),
    ],
    host: Annotated[
        str | None,
        typer.Option("--host", help="Tunnel host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Tunnel SOCKS port", min=1, max=65535),
    ] = None,
    debug: Annotated[
        str | None,
        typer.Option("--debug", help="Debug logging of routed requests (on/off)"),
    ] = None,
    route_all: Annotated[
        str | None,
        typer.Option("--route-all", help="Route every request through the tunnel (on/off)"),
    ] = None,
    domains: Annotated[
        list[str] | None,
        typer.Option("--domain", help="Whitelisted domain (repeatable, replaces the list)"),
    ] = None,
) -> None:
    """Manage tunnel routing settings."""
    from tunnelroute.cli.commands.tunnel import init_config, set_config, show_config

    store = _store()

    if action == "show":
        show_config(store)

    elif action == "init":
        init_config(store)

    elif action == "set":
        values: dict[str, object] = {}
        if host is not None:
            values["tunnel_host"] = host
        if port is not None:
            values["tunnel_port"] = port
        if debug is not None:
            values["debug_mode"] = debug
        if route_all is not None:
            values["route_all"] = route_all
        if domains is not None:
            values["whitelist_domains"] = domains
        set_config(store, values)

    else:
        console.print(f"[red]Unknown action: {escape(action)}[/red]")
        console.print("Available actions: show, init, set")
        raise typer.Exit(1)


@app.command()
def serve(
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Port to listen on"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-h", help="Host to bind to"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", help="Enable auto-reload for development"),
    ] = False,
) -> None:
    """Start the operator API."""
    import uvicorn

    settings = _settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("[bold green]Starting tunnelroute API[/bold green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    if not settings.operator_token:
        console.print("[yellow]  No operator token set: /api/tunnel/* will reject every request[/yellow]")
    console.print()

    if reload:
        from tunnelroute.api.app import SETTINGS_FILE_ENV

        # The reloader imports the factory in a fresh process
        if state.config_path:
            os.environ[SETTINGS_FILE_ENV] = str(state.config_path.resolve())
        uvicorn.run(
            "tunnelroute.api:create_app",
            host=host,
            port=port,
            reload=True,
            factory=True,
        )
        return

    from tunnelroute.api.app import create_app

    uvicorn.run(create_app(settings=settings), host=host, port=port)


def main() -> None:
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
