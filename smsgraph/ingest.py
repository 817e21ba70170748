"""Load normalized messages from a JSON file.

Importers for SMS backups, chat exports and mailboxes write a JSON array of
message records; this module turns that array into Message objects.

Record shape:
    {"other_party_id": "+15550100", "other_party_name": "Alice",
     "body": "See you at the game", "direction": "outgoing"}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from contracts.messages import Direction, Message
from smsgraph.errors import ValidationError, validation_required, validation_type_error

logger = logging.getLogger(__name__)

# Spellings used by the various importers
DIRECTION_ALIASES: dict[str, Direction] = {
    "outgoing": Direction.OUTGOING,
    "sent": Direction.OUTGOING,
    "out": Direction.OUTGOING,
    "incoming": Direction.INCOMING,
    "received": Direction.INCOMING,
    "in": Direction.INCOMING,
}


def parse_direction(value: Any) -> Direction:
    """Parse a direction string, accepting importer aliases."""
    if isinstance(value, Direction):
        return value
    if not isinstance(value, str):
        raise validation_type_error("direction", value, "string")
    try:
        return DIRECTION_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValidationError(
            f"Unknown message direction: {value!r}",
            field="direction",
            value=value,
            expected="one of " + ", ".join(sorted(DIRECTION_ALIASES)),
        ) from None


def message_from_dict(record: dict[str, Any]) -> Message:
    """Build a Message from one JSON record."""
    if not isinstance(record, dict):
        raise validation_type_error("message", record, "object")

    other_party_id = record.get("other_party_id")
    if other_party_id in (None, ""):
        raise validation_required("other_party_id")

    name = record.get("other_party_name")
    body = record.get("body")
    return Message(
        other_party_id=str(other_party_id),
        other_party_name=None if name is None else str(name),
        body="" if body is None else str(body),
        direction=parse_direction(record.get("direction", Direction.INCOMING.value)),
    )


def load_messages(path: Path | str) -> list[Message]:
    """Read a JSON array of message records.

    Args:
        path: Path to the JSON file.

    Returns:
        Messages in file order.

    Raises:
        ValidationError: If the file is unreadable, not JSON, not an array,
            or contains an invalid record.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise ValidationError(f"Cannot read messages from {path}: {e}", cause=e) from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}", cause=e) from e

    if not isinstance(raw, list):
        raise validation_type_error("messages", raw, "array")

    messages = [message_from_dict(record) for record in raw]
    logger.info("Loaded %d messages from %s", len(messages), path)
    return messages
