"""CLI: scout-envelope build status|request|scout-data"""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape

from scout_envelope.ids import get_or_create_device_id, utc_now
from scout_envelope.models.envelope import MessageEnvelope, format_timestamp

console = Console(stderr=True)


def _load_config() -> dict:
    from scout_envelope.cli.main import _load_config
    return _load_config()


def _origin(origin: Optional[str]) -> str:
    return get_or_create_device_id(origin or _load_config().get("device_id"))


def _destination(destination: Optional[str]) -> str:
    if destination is not None:
        return destination
    return _load_config().get("destination", "")


def _json_object(value: str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{what} is not valid JSON: {e.msg}")
    if not isinstance(data, dict):
        raise click.BadParameter(f"{what} must be a JSON object")
    return data


def _emit(env: MessageEnvelope) -> None:
    violations = env.validate_payload()
    for v in violations:
        console.print(f"[yellow]warning: {escape(v)}[/yellow]")
    click.echo(env.to_json())


@click.group()
def build():
    """Print a new envelope as wire JSON."""


@build.command("status")
@click.argument("battery_level", type=int)
@click.option("--to", "destination", default=None, help="Destination device id (default: broadcast)")
@click.option("--from", "origin", default=None, help="Origin device id (default: this device)")
def build_status(battery_level: int, destination: Optional[str], origin: Optional[str]):
    """Heartbeat carrying BATTERY_LEVEL (0-100)."""
    if not 0 <= battery_level <= 100:
        console.print(f"[yellow]warning: battery level {battery_level} outside 0-100[/yellow]")
    _emit(MessageEnvelope.status(battery_level, _origin(origin), _destination(destination)))


@build.command("request")
@click.argument("message_type")
@click.option("--extra", default=None, help="JSON object merged into the payload")
@click.option("--responds-to", default=None, help="Message id this request answers")
@click.option("--to", "destination", default=None, help="Destination device id (default: broadcast)")
@click.option("--from", "origin", default=None, help="Origin device id (default: this device)")
def build_request(
    message_type: str,
    extra: Optional[str],
    responds_to: Optional[str],
    destination: Optional[str],
    origin: Optional[str],
):
    """Ask the peer for MESSAGE_TYPE."""
    _emit(MessageEnvelope.request(
        message_type,
        _origin(origin),
        _destination(destination),
        extra=_json_object(extra, "--extra") if extra else None,
        responds_to=responds_to,
    ))


@build.command("scout-data")
@click.argument("scout_id")
@click.argument("data")
@click.option("--submitted", default=None, help="When the scout saved the data (default: now)")
@click.option("--to", "destination", default=None, help="Destination device id (default: broadcast)")
@click.option("--from", "origin", default=None, help="Origin device id (default: this device)")
def build_scout_data(
    scout_id: str,
    data: str,
    submitted: Optional[str],
    destination: Optional[str],
    origin: Optional[str],
):
    """Submit DATA (a JSON object) recorded by SCOUT_ID."""
    _emit(MessageEnvelope.scout_data(
        submitted or format_timestamp(utc_now()),
        scout_id,
        _origin(origin),
        _destination(destination),
        _json_object(data, "DATA"),
    ))
