"""Topic extraction: the Ollama oracle client and label normalization."""

from smsgraph.topics.normalizer import (
    SYNONYM_RULES,
    NormalizedTopic,
    canonical_key,
    clean_label,
    normalize_topics,
)
from smsgraph.topics.oracle import (
    OllamaTopicOracle,
    build_topic_prompt,
    parse_topic_response,
)

__all__ = [
    "SYNONYM_RULES",
    "NormalizedTopic",
    "canonical_key",
    "clean_label",
    "normalize_topics",
    "OllamaTopicOracle",
    "build_topic_prompt",
    "parse_topic_response",
]
