"""CLI: scout-envelope config show|set-device|set-destination|reset"""

import click
from rich.console import Console

from scout_envelope.ids import get_or_create_device_id

console = Console()


def _load_config() -> dict:
    from scout_envelope.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from scout_envelope.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Local device settings."""


@config.command("show")
def config_show():
    """Show the device id and default destination."""
    cfg = _load_config()
    device_id = get_or_create_device_id(cfg.get("device_id"))
    destination = cfg.get("destination", "")
    console.print(f"device_id: {device_id}")
    console.print(f"destination: {destination or '(broadcast)'}")


@config.command("set-device")
@click.argument("device_id")
def config_set_device(device_id: str):
    """Use DEVICE_ID as the origin of built envelopes."""
    if not device_id.strip():
        raise click.BadParameter("device id may not be empty")
    _save_config({**_load_config(), "device_id": device_id})
    console.print(f"[green]Device id set to {device_id}[/green]")


@config.command("set-destination")
@click.argument("destination", required=False, default="")
def config_set_destination(destination: str):
    """Default DESTINATION for built envelopes (omit for broadcast)."""
    _save_config({**_load_config(), "destination": destination})
    console.print(f"[green]Default destination: {destination or '(broadcast)'}[/green]")


@config.command("reset")
def config_reset():
    """Clear saved settings."""
    _save_config({})
    console.print("[green]Settings cleared.[/green]")
