"""
scout-envelope CLI — `scout-envelope` command.

Commands:
  scout-envelope kinds                     List message kinds and their schemas
  scout-envelope validate <kind> <json>    Check a payload against a kind
  scout-envelope decode [file]             Decode one wire message
  scout-envelope build <kind> ...          Print a new envelope
  scout-envelope config <cmd>              Show or change local settings
"""

import json
import logging
from pathlib import Path

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install scout-envelope[cli]")

from scout_envelope import __version__
from scout_envelope.ids import CONFIG_DIR

console = Console()
CONFIG_FILE = CONFIG_DIR / "config.json"


def _config_path() -> Path:
    return CONFIG_FILE


def _load_config() -> dict:
    try:
        cfg = json.loads(_config_path().read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def _save_config(cfg: dict) -> None:
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log decoder activity to stderr")
def main(verbose: bool):
    """scout-envelope — inspect, build and decode device message envelopes."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# Register subcommands from separate modules
from scout_envelope.cli.build import build
from scout_envelope.cli.config import config
from scout_envelope.cli.decode import decode_cmd, kinds_cmd, validate_cmd

main.add_command(kinds_cmd)
main.add_command(validate_cmd)
main.add_command(decode_cmd)
main.add_command(build)
main.add_command(config)


if __name__ == "__main__":
    main()
