"""
Identity and clock collaborators.

``generate_message_id`` and ``utc_now`` are the defaults the envelope and the
decoder call; both are safe to call from any thread. The device id is the
stable ``origin`` this machine stamps on outgoing envelopes.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".scout_envelope"
DEVICE_ID_FILE = CONFIG_DIR / "device_id"


def generate_message_id() -> str:
    """Globally-unique opaque id (UUID v4 text)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_or_create_device_id(provided: Optional[str] = None, path: Optional[Path] = None) -> str:
    if provided:
        return provided
    path = path or DEVICE_ID_FILE
    try:
        device_id = path.read_text().strip()
        if device_id:
            return device_id
    except FileNotFoundError:
        pass
    device_id = str(uuid.uuid4())
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(device_id)
    except OSError as e:
        logger.warning(f"Could not persist device id to {path}: {e}")
    return device_id
