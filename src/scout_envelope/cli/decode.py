"""CLI: scout-envelope kinds, validate, decode"""

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scout_envelope.models.kinds import MessageKind
from scout_envelope.transport.envelope import decode_envelope
from scout_envelope.validation import validate

console = Console()


@click.command("kinds")
def kinds_cmd():
    """List message kinds and their payload fields."""
    table = Table(title="Message kinds")
    table.add_column("type")
    table.add_column("field")
    table.add_column("logical type")
    table.add_column("optional")
    table.add_column("nullable")
    for kind in MessageKind:
        first = True
        for name, spec in kind.payload_schema.items():
            table.add_row(
                kind.value if first else "",
                name,
                spec.logical_type,
                "yes" if spec.optional else "no",
                "yes" if spec.nullable else "no",
            )
            first = False
    console.print(table)


@click.command("validate")
@click.argument("kind")
@click.argument("payload")
@click.option("--strict", is_flag=True, help="Also report keys the schema does not declare")
def validate_cmd(kind: str, payload: str, strict: bool):
    """Check a JSON PAYLOAD against KIND's schema."""
    resolved = MessageKind.lookup(kind)
    if resolved is None:
        console.print(f"[red]unknown message type: {escape(kind)}[/red]")
        raise SystemExit(2)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        console.print(f"[red]Payload is not valid JSON: {escape(e.msg)}[/red]")
        raise SystemExit(2)
    if not isinstance(data, dict):
        console.print("[red]Payload must be a JSON object[/red]")
        raise SystemExit(2)

    violations = validate(resolved, data, strict=strict)
    if not violations:
        console.print(f"[green]Valid {resolved.value} payload[/green]")
        return
    for v in violations:
        console.print(f"[yellow]- {escape(v)}[/yellow]")
    raise SystemExit(1)


@click.command("decode")
@click.argument("source", type=click.File("rb"), default="-")
@click.option("--json-output", "--json", is_flag=True, help="Print the decoded envelope as wire JSON")
def decode_cmd(source, json_output: bool):
    """Decode one wire message from SOURCE (stdin by default)."""
    raw = source.read()
    result = decode_envelope(raw)
    env = result.envelope

    if json_output:
        click.echo(env.to_json())
    elif result.ok:
        console.print(f"[green]{env.kind.value}[/green] {escape(env.message_id)}")
        console.print(f"[dim]from {escape(env.origin or '?')} to {escape(env.destination or '(broadcast)')} at {env.timestamp.isoformat()}[/dim]")
        if env.responds_to:
            console.print(f"[dim]responds to {escape(env.responds_to)}[/dim]")
        console.print_json(data=env.to_dict()["payload"])
    else:
        console.print(f"[red]Parse error:[/red] {escape(result.error)}")

    if not result.ok:
        raise SystemExit(1)
