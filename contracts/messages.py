"""Normalized message records consumed by the graph builder.

Importers (SMS XML, chat JSON, mbox) implement against these contracts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Direction(str, Enum):
    """Which side of the conversation wrote the message."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"


@dataclass(frozen=True)
class Message:
    """One message exchanged between the owner and another party.

    Importers have already deduplicated records and resolved direction, so
    the other party is the recipient of an outgoing message and the sender
    of an incoming one.

    Attributes:
        other_party_id: Phone number, email or handle of the other party.
        other_party_name: Resolved display name, if any.
        body: Message text content.
        direction: Whether the owner sent or received the message.
    """

    other_party_id: str
    other_party_name: str | None
    body: str
    direction: Direction = Direction.INCOMING

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if not self.other_party_id:
            msg = "other_party_id must be non-empty"
            raise ValueError(msg)
