"""``beaconkeep probe`` — check whether the token is directly readable.

Only reports presence; the token itself is never printed.
"""

from __future__ import annotations

import typer
from rich.console import Console

from beaconkeep.bridge.gateways import KeychainTokenProbe
from beaconkeep.config import CompanionConfig

console = Console()


def probe_cmd(
    service: str = typer.Option(None, help="Keychain service name to look up."),
    binary: str = typer.Option(None, help="Keychain tool executable."),
) -> None:
    """Probe the OS keychain for the search party token."""
    settings = CompanionConfig()
    probe = KeychainTokenProbe(
        service or settings.keychain_service,
        binary=binary or settings.keychain_binary,
        timeout=settings.probe_timeout_seconds,
    )
    raw = probe.fetch_token()
    if raw is None:
        console.print(
            "[yellow]Direct token access unavailable[/yellow], the helper is required."
        )
        return
    try:
        raw.decode(settings.token_encoding)
    except UnicodeDecodeError:
        console.print(f"[red]Token found but not valid {settings.token_encoding}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Direct token access available[/bold green] ({len(raw)} bytes)")
