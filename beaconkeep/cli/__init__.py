"""BeaconKeep CLI — Typer application with Rich output."""
