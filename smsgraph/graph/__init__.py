"""Graph data module for relationship visualization.

Provides corpus collection, sampling, topic attribution, graph assembly
and JSON export for the Self/Contact/Topic network.
"""

from smsgraph.graph.attribution import (
    TopicAttribution,
    count_topic_messages,
    fallback_share,
)
from smsgraph.graph.builder import (
    ContactNode,
    GraphBuilder,
    GraphData,
    GraphLink,
    GraphNode,
    NodeGroup,
    SelfNode,
    TopicNode,
    assemble_graph,
    build_graph,
)
from smsgraph.graph.corpus import (
    ContactCorpus,
    CorpusCollection,
    collect_corpora,
)
from smsgraph.graph.export import export_to_json, graph_to_json
from smsgraph.graph.sampling import (
    prompt_samples,
    sample_cap,
    sample_corpus,
    sample_indices,
)

__all__ = [
    # Builder
    "GraphBuilder",
    "GraphData",
    "GraphLink",
    "GraphNode",
    "NodeGroup",
    "SelfNode",
    "ContactNode",
    "TopicNode",
    "assemble_graph",
    "build_graph",
    # Corpus
    "ContactCorpus",
    "CorpusCollection",
    "collect_corpora",
    # Sampling
    "sample_cap",
    "sample_indices",
    "sample_corpus",
    "prompt_samples",
    # Attribution
    "TopicAttribution",
    "count_topic_messages",
    "fallback_share",
    # Export
    "export_to_json",
    "graph_to_json",
]
