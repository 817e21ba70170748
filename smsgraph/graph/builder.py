"""Graph builder for the contact/topic relationship network.

Builds a three-tier graph from normalized messages: a single Self node,
one node per contact linked to Self, and topic nodes linked to the contacts
that discussed them. Topic detection is delegated to an injected
TopicOracle; when the oracle is missing or unavailable the graph contains
only the Self/Contact tier.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar

from contracts.messages import Message
from contracts.oracle import TopicOracle
from smsgraph.config import GraphConfig, ModeProfile, TopicMode
from smsgraph.graph.attribution import (
    TopicAttribution,
    attribute_contact_topics,
    attribute_global_topics,
)
from smsgraph.graph.corpus import CorpusCollection, collect_corpora
from smsgraph.graph.sampling import prompt_samples, sample_corpus
from smsgraph.topics.normalizer import NormalizedTopic, normalize_topics

logger = logging.getLogger(__name__)

TOPIC_ID_PREFIX = "topic_"


class NodeGroup(IntEnum):
    """Node tier, serialized as the ``group`` field."""

    SELF = 0
    CONTACT = 1
    TOPIC = 2


@dataclass
class SelfNode:
    """The message owner. Exactly one per graph.

    Attributes:
        id: Owner identifier.
        name: Display name.
        weight: Total messages exchanged with all contacts.
    """

    group: ClassVar[NodeGroup] = NodeGroup.SELF

    id: str
    name: str
    weight: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "name": self.name, "group": int(self.group), "value": self.weight}


@dataclass
class ContactNode:
    """A person the owner exchanged messages with.

    Attributes:
        id: Other-party identifier.
        name: Display name.
        weight: Total messages exchanged with this contact.
        topics: Display-only list of associated topic labels.
    """

    group: ClassVar[NodeGroup] = NodeGroup.CONTACT

    id: str
    name: str
    weight: int = 0
    topics: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "group": int(self.group),
            "value": self.weight,
        }
        if self.topics:
            data["topics"] = list(self.topics)
        return data


@dataclass
class TopicNode:
    """A conversational topic.

    Attributes:
        id: Generated ``topic_<n>`` identifier.
        name: Display label of the topic.
        weight: Messages attributed to the topic across all contacts.
    """

    group: ClassVar[NodeGroup] = NodeGroup.TOPIC

    id: str
    name: str
    weight: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"id": self.id, "name": self.name, "group": int(self.group), "value": self.weight}


GraphNode = SelfNode | ContactNode | TopicNode


@dataclass
class GraphLink:
    """A weighted link between two nodes.

    Attributes:
        source: Source node ID (Self for contact links, a contact for topic links).
        target: Target node ID.
        weight: Message count carried by the link.
    """

    source: str
    target: str
    weight: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"source": self.source, "target": self.target, "value": self.weight}


@dataclass
class GraphData:
    """Complete graph data structure.

    Attributes:
        nodes: Self node first, then contacts, then topics.
        links: Self-Contact links, then Contact-Topic links.
    """

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[GraphLink] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph."""
        return len(self.nodes)

    @property
    def link_count(self) -> int:
        """Number of links in the graph."""
        return len(self.links)

    @property
    def contact_count(self) -> int:
        """Number of contact nodes."""
        return sum(1 for n in self.nodes if n.group is NodeGroup.CONTACT)

    @property
    def topic_count(self) -> int:
        """Number of topic nodes."""
        return sum(1 for n in self.nodes if n.group is NodeGroup.TOPIC)

    def summary(self) -> dict[str, int]:
        """Counts used in logs and CLI output."""
        return {
            "nodes": self.node_count,
            "contacts": self.contact_count,
            "topics": self.topic_count,
            "links": self.link_count,
        }


def _topic_ids(reserved: set[str]) -> Iterator[str]:
    """Yield topic_1, topic_2, ... skipping ids already taken by other nodes."""
    n = 1
    while True:
        candidate = f"{TOPIC_ID_PREFIX}{n}"
        if candidate not in reserved:
            yield candidate
        n += 1


def rank_topics(
    attribution: TopicAttribution,
    profile: ModeProfile,
    min_topic_messages: int,
) -> list[str]:
    """Return the keys of topics that survive filtering, most frequent first.

    Ties keep first-seen order.
    """
    kept = [
        key
        for key, frequency in attribution.frequency.items()
        if frequency > 0 and profile.keeps_topic(frequency, min_topic_messages)
    ]
    return sorted(kept, key=lambda key: attribution.frequency[key], reverse=True)


def assemble_graph(
    collection: CorpusCollection,
    attribution: TopicAttribution,
    profile: ModeProfile,
    *,
    self_name: str = "You",
    min_topic_messages: int = 5,
) -> GraphData:
    """Turn collected counts and topic attributions into nodes and links.

    Args:
        collection: Corpus collection holding Self/Contact counts.
        attribution: Topic counts per contact (may be empty).
        profile: Mode profile selecting the topic filter and the length of
            the contact topic lists.
        self_name: Display name of the Self node.
        min_topic_messages: Unlimited-mode frequency floor.

    Returns:
        GraphData ready for serialization.
    """
    graph = GraphData()
    graph.nodes.append(
        SelfNode(id=collection.self_id, name=self_name, weight=collection.self_count)
    )

    for corpus in collection.contacts.values():
        ranked = [attribution.labels[key] for key, _ in attribution.topics_for(corpus.contact_id)]
        if profile.contact_topic_limit is not None:
            ranked = ranked[: profile.contact_topic_limit]
        graph.nodes.append(
            ContactNode(
                id=corpus.contact_id,
                name=corpus.name,
                weight=corpus.message_count,
                topics=ranked,
            )
        )
        graph.links.append(
            GraphLink(
                source=collection.self_id,
                target=corpus.contact_id,
                weight=corpus.message_count,
            )
        )

    kept = rank_topics(attribution, profile, min_topic_messages)
    filtered = attribution.topic_count - len(kept)
    if filtered:
        reason = (
            f"<{min_topic_messages} messages"
            if profile.mode is TopicMode.UNLIMITED
            else "zero-value"
        )
        logger.info("Filtered out %d topics (%s)", filtered, reason)

    reserved = {node.id for node in graph.nodes}
    ids = _topic_ids(reserved)
    for key in kept:
        topic_id = next(ids)
        graph.nodes.append(
            TopicNode(id=topic_id, name=attribution.labels[key], weight=attribution.frequency[key])
        )
        for contact_id, count in attribution.contributors(key):
            graph.links.append(GraphLink(source=contact_id, target=topic_id, weight=count))

    logger.info("Created %d topic nodes", len(kept))
    return graph


class GraphBuilder:
    """Builder for the contact/topic relationship graph.

    Runs the whole pipeline for one message set: corpus collection,
    sampling, topic extraction, normalization, attribution and assembly.
    A builder holds no graph state between builds.

    Example:
        >>> builder = GraphBuilder(GraphConfig(self_id="+15550100"), oracle=stub)
        >>> graph = builder.build(messages)
        >>> graph.summary()
        {'nodes': 6, 'contacts': 3, 'topics': 2, 'links': 6}
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        oracle: TopicOracle | None = None,
    ) -> None:
        """Initialize the graph builder.

        Args:
            config: Build settings (defaults to GraphConfig()).
            oracle: Topic oracle; None builds the Self/Contact tier only.
        """
        self.config = config or GraphConfig()
        self.oracle = oracle

    @property
    def profile(self) -> ModeProfile:
        """Mode profile of the configured topic mode."""
        return self.config.profile

    def _oracle_available(self) -> bool:
        """Decide once per build whether topic detection runs."""
        if not self.config.detect_topics:
            logger.info("Topic detection disabled")
            return False
        if self.oracle is None:
            logger.warning("No topic oracle configured. Generating basic contact graph only.")
            return False
        try:
            available = self.oracle.is_available()
        except Exception as e:
            logger.warning("Topic oracle probe raised: %s", e)
            available = False
        if not available:
            logger.warning("Topic oracle not available. Generating basic contact graph only.")
        return available

    def detect_topics(self, texts: Sequence[str]) -> list[NormalizedTopic]:
        """Sample a corpus, query the oracle and normalize its labels.

        Any exception from the oracle is logged and treated as "no topics".
        """
        if self.oracle is None or not texts:
            return []

        profile = self.profile
        samples = prompt_samples(sample_corpus(texts, profile), profile)
        try:
            candidates = self.oracle.extract_topics(
                samples, profile.requested_topics, profile.mode
            )
        except Exception as e:
            logger.error("AI topic detection failed: %s", e)
            return []

        topics = normalize_topics(candidates or [])
        if profile.truncate_to_requested:
            topics = topics[: profile.requested_topics]
        logger.info("AI detected %d topics (after deduplication)", len(topics))
        return topics

    def _attribute_per_contact(
        self, collection: CorpusCollection, attribution: TopicAttribution
    ) -> None:
        with_text = [c for c in collection.contacts.values() if c.texts]
        for i, corpus in enumerate(with_text, start=1):
            logger.info("Analyzing topics for contact %d/%d: %s", i, len(with_text), corpus.name)
            topics = self.detect_topics(corpus.texts)
            attribute_contact_topics(attribution, corpus.contact_id, corpus.texts, topics)

    def _attribute_global(
        self, collection: CorpusCollection, attribution: TopicAttribution
    ) -> None:
        if not collection.global_texts:
            return
        topics = self.detect_topics(collection.global_texts)
        logger.info(
            "Detected %d global topics from %d messages",
            len(topics),
            len(collection.global_texts),
        )
        for corpus in collection.contacts.values():
            if corpus.texts:
                attribute_global_topics(attribution, corpus.contact_id, corpus.texts, topics)

    def build(self, messages: Iterable[Message]) -> GraphData:
        """Build the relationship graph for a message set.

        Args:
            messages: Normalized messages.

        Returns:
            GraphData with Self, Contact and (when available) Topic nodes.
        """
        config = self.config
        logger.info(
            "Generating network graph (mode: %s, split by contact: %s)",
            config.topic_mode.value,
            config.split_by_contact,
        )

        use_oracle = self._oracle_available()
        collection = collect_corpora(
            messages,
            config.self_id,
            min_message_length=config.min_message_length,
            collect_global=use_oracle and not config.split_by_contact,
        )

        attribution = TopicAttribution()
        if use_oracle:
            if config.split_by_contact:
                self._attribute_per_contact(collection, attribution)
            else:
                self._attribute_global(collection, attribution)
        else:
            logger.warning("Skipping topic detection - oracle not available")

        graph = assemble_graph(
            collection,
            attribution,
            self.profile,
            self_name=config.self_name,
            min_topic_messages=config.min_topic_messages,
        )
        summary = graph.summary()
        logger.info(
            "Graph summary: %d total nodes (%d contacts, %d topics), %d links",
            summary["nodes"],
            summary["contacts"],
            summary["topics"],
            summary["links"],
        )
        return graph


def build_graph(
    messages: Iterable[Message],
    config: GraphConfig | None = None,
    oracle: TopicOracle | None = None,
) -> GraphData:
    """Convenience function to build a relationship graph.

    Args:
        messages: Normalized messages.
        config: Build settings.
        oracle: Topic oracle; None builds the Self/Contact tier only.

    Returns:
        GraphData for the message set.
    """
    return GraphBuilder(config, oracle).build(messages)
