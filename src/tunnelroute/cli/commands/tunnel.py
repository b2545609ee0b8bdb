"""Tunnel command implementations."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tunnelroute.core.config.store import ensure_defaults, save_settings
from tunnelroute.core.models.tunnel import ProxyConfig, RequestDescriptor
from tunnelroute.core.routing import augment, extract_host, should_route
from tunnelroute.core.status import TunnelStatusService
from tunnelroute.plugins.tunnel.health import TunnelHealthChecker

if TYPE_CHECKING:
    from tunnelroute.core.config.store import ConfigStore
    from tunnelroute.core.models.config import Settings

console = Console()


def run_status(store: ConfigStore, settings: Settings, *, direct: bool, as_json: bool) -> bool:
    """Run the tunnel status check and print the report.

    Returns:
        True when the tunnel is operational.
    """
    service = TunnelStatusService(store, checker=TunnelHealthChecker(settings.ip_echo_url))
    report = service.test_tunnel(include_direct=direct)
    status = report["tunnel_status"]
    ok = status["status"] == "success"

    if as_json:
        console.print_json(json.dumps(report))
        return ok

    config = ProxyConfig.from_store(store)
    lines = [f"[bold]Status:[/bold] {escape(status['message'])}"]
    if ok:
        lines.append(f"[bold]External IP:[/bold] {status['external_ip'] or 'unknown'}")
    if direct:
        lines.append(f"[bold]Direct IP:[/bold] {report.get('direct_ip') or 'unknown'}")
    console.print(
        Panel(
            "\n".join(lines),
            title=f"Tunnel {config.proxy_url}",
            border_style="green" if ok else "red",
        )
    )

    tunnels = report["active_tunnels"]
    if tunnels:
        console.print("[bold]Active tunnels:[/bold]")
        for line in tunnels:
            console.print(f"  {line}", markup=False, highlight=False)
    else:
        console.print("[dim]No active tunnel sockets found[/dim]")

    return ok


def show_route(store: ConfigStore, settings: Settings, url: str) -> bool:
    """Print the routing decision and hints for url."""
    config = ProxyConfig.from_store(store)
    route = should_route(url, config)
    descriptor = augment(RequestDescriptor(url=url), route, config, ca_bundle=settings.ca_bundle)

    table = Table(title=f"Routing for {escape(url)}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Host", escape(extract_host(url) or "-"))
    table.add_row("Route through tunnel", "yes" if route else "no")
    for key, value in sorted(descriptor.transport.items()):
        table.add_row(key, escape(str(value)))

    console.print(table)
    return route


def show_config(store: ConfigStore) -> dict[str, Any]:
    """Print the current tunnel settings."""
    data = ProxyConfig.from_store(store).to_dict()
    console.print("[bold]Tunnel configuration:[/bold]")
    console.print_json(data=data)
    return data


def init_config(store: ConfigStore) -> list[str]:
    """Write defaults for every missing setting."""
    written = ensure_defaults(store)
    if written:
        console.print(f"[green]Initialized: {', '.join(written)}[/green]")
    else:
        console.print("[dim]Configuration already complete[/dim]")
    return written


def set_config(store: ConfigStore, values: dict[str, Any]) -> dict[str, Any]:
    """Save the given settings."""
    if not values:
        console.print("[yellow]Nothing to change[/yellow]")
        return {}
    changed = save_settings(store, values)
    console.print(f"[green]Saved: {', '.join(sorted(changed))}[/green]")
    return changed
