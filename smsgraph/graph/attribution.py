"""Attribution of message volume to (contact, topic) pairs.

The oracle only names topics; how much each contact talked about a topic is
estimated here by counting corpus messages that mention the topic label.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from smsgraph.topics.normalizer import NormalizedTopic

logger = logging.getLogger(__name__)


def count_topic_messages(texts: Sequence[str], label: str) -> int:
    """Count messages containing label as a case-insensitive substring."""
    needle = label.casefold()
    return sum(1 for text in texts if needle in text.casefold())


def fallback_share(corpus_size: int, topic_count: int) -> int:
    """Messages credited to a topic the oracle named but the text never mentions.

    The corpus is split evenly across the topics detected for it, rounding
    up, with a floor of 1. This overstates topics the oracle made up; it is
    an approximation kept behind this function so it can be replaced.
    """
    return max(1, math.ceil(corpus_size / max(topic_count, 1)))


@dataclass
class TopicAttribution:
    """Accumulated topic counts across all contacts.

    Keys are canonical topic keys. All dicts keep first-seen order, which
    is the tie-break order when topics are ranked.

    Attributes:
        labels: Display label per key (first contributor wins).
        frequency: Global message count per key.
        contact_counts: Per-contact count per key.
    """

    labels: dict[str, str] = field(default_factory=dict)
    frequency: dict[str, int] = field(default_factory=dict)
    contact_counts: dict[str, dict[str, int]] = field(default_factory=dict)

    def add(self, contact_id: str, topic: NormalizedTopic, count: int) -> None:
        """Credit count messages of topic to contact_id."""
        if count <= 0:
            return
        self.labels.setdefault(topic.key, topic.label)
        self.frequency[topic.key] = self.frequency.get(topic.key, 0) + count
        per_contact = self.contact_counts.setdefault(contact_id, {})
        per_contact[topic.key] = per_contact.get(topic.key, 0) + count

    def contributors(self, key: str) -> list[tuple[str, int]]:
        """Return (contact_id, count) pairs for a topic, in contact order."""
        return [
            (contact_id, counts[key])
            for contact_id, counts in self.contact_counts.items()
            if key in counts
        ]

    def topics_for(self, contact_id: str) -> list[tuple[str, int]]:
        """Return (key, count) pairs for a contact, highest count first."""
        counts = self.contact_counts.get(contact_id, {})
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)

    @property
    def topic_count(self) -> int:
        """Number of distinct topics with at least one attribution."""
        return len(self.frequency)


def attribute_contact_topics(
    attribution: TopicAttribution,
    contact_id: str,
    texts: Sequence[str],
    topics: Sequence[NormalizedTopic],
) -> None:
    """Attribute a contact's own detected topics to that contact.

    Topics with no literal mention in the corpus receive fallback_share.
    """
    for topic in topics:
        count = count_topic_messages(texts, topic.label)
        if count == 0:
            count = fallback_share(len(texts), len(topics))
            logger.debug("Topic '%s': no literal match, fallback %d", topic.label, count)
        else:
            logger.debug("Topic '%s': %d messages", topic.label, count)
        attribution.add(contact_id, topic, count)


def attribute_global_topics(
    attribution: TopicAttribution,
    contact_id: str,
    texts: Sequence[str],
    topics: Sequence[NormalizedTopic],
) -> None:
    """Attribute topics detected over the global corpus to one contact.

    Only literal mentions count; a global topic absent from this contact's
    messages is not attributed to the contact at all.
    """
    for topic in topics:
        attribution.add(contact_id, topic, count_topic_messages(texts, topic.label))
