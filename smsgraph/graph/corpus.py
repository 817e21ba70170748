"""Corpus collection for topic detection.

Walks the message set once, counting every message exchanged with each
contact (these counts become Self-Contact link weights) and gathering the
significant message bodies that are later sampled and sent to the oracle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from contracts.messages import Message

logger = logging.getLogger(__name__)

DEFAULT_MIN_MESSAGE_LENGTH = 10

# Placeholder some importers emit when the address book has no entry
UNKNOWN_NAME = "(Unknown)"


@dataclass
class ContactCorpus:
    """Messages exchanged with a single contact.

    Attributes:
        contact_id: Other-party identifier (phone, email, handle).
        name: Display name, falling back to the identifier.
        message_count: Every message exchanged, in both directions,
            regardless of body length.
        texts: Significant bodies in input order.
    """

    contact_id: str
    name: str
    message_count: int = 0
    texts: list[str] = field(default_factory=list)


@dataclass
class CorpusCollection:
    """Result of a collection pass.

    Attributes:
        self_id: Identifier of the message owner.
        self_count: Total messages exchanged with anyone but Self.
        contacts: Contact corpora keyed by contact id, in first-seen order.
        global_texts: Significant bodies of all contacts, populated only
            when global topic detection is enabled.
    """

    self_id: str
    self_count: int = 0
    contacts: dict[str, ContactCorpus] = field(default_factory=dict)
    global_texts: list[str] = field(default_factory=list)

    @property
    def significant_count(self) -> int:
        """Number of bodies that entered any contact corpus."""
        return sum(len(c.texts) for c in self.contacts.values())


def display_name(contact_id: str, name: str | None) -> str:
    """Return the name to show for a contact, falling back to its id."""
    if name is None or not name.strip() or name == UNKNOWN_NAME:
        return contact_id
    return name


def is_significant(body: str | None, min_length: int = DEFAULT_MIN_MESSAGE_LENGTH) -> bool:
    """Return True if a body is long enough to be worth topic analysis."""
    return bool(body and body.strip()) and len(body) > min_length


def collect_corpora(
    messages: Iterable[Message],
    self_id: str,
    *,
    min_message_length: int = DEFAULT_MIN_MESSAGE_LENGTH,
    collect_global: bool = False,
) -> CorpusCollection:
    """Group messages by contact and build the text pools for the oracle.

    Args:
        messages: Normalized messages in input order.
        self_id: Owner identifier; messages addressed to it are skipped.
        min_message_length: Bodies must be strictly longer than this.
        collect_global: Also pool significant bodies into one shared corpus.

    Returns:
        CorpusCollection with per-contact counts and texts.
    """
    collection = CorpusCollection(self_id=self_id)
    skipped_self = 0

    for msg in messages:
        contact_id = msg.other_party_id
        if contact_id == self_id:
            skipped_self += 1
            continue

        corpus = collection.contacts.get(contact_id)
        if corpus is None:
            corpus = ContactCorpus(
                contact_id=contact_id,
                name=display_name(contact_id, msg.other_party_name),
            )
            collection.contacts[contact_id] = corpus

        corpus.message_count += 1
        collection.self_count += 1

        if is_significant(msg.body, min_message_length):
            corpus.texts.append(msg.body)
            if collect_global:
                collection.global_texts.append(msg.body)

    if skipped_self:
        logger.debug("Skipped %d self-addressed messages", skipped_self)
    logger.info(
        "Collected %d messages from %d contacts (%d significant)",
        collection.self_count,
        len(collection.contacts),
        collection.significant_count,
    )
    return collection
