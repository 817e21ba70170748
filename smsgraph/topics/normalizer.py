"""Topic label normalization and deduplication.

The oracle's labels are noisy: decorated with quotes and bullets, repeated
with different casing, or phrased slightly differently ("covid shot" vs
"COVID vaccine"). This module turns raw candidates into a list of
NormalizedTopic, one per canonical key, keeping the first-seen spelling as
the display label.

Collapsing only happens through the explicit SYNONYM_RULES table; there is
no fuzzy or embedding-based merging.

Usage:
    from smsgraph.topics.normalizer import normalize_topics

    topics = normalize_topics(["COVID-19", "covid", "Work Project", "work stuff"])
    # [NormalizedTopic(key="covid", label="COVID-19"),
    #  NormalizedTopic(key="work", label="Work Project")]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_LABEL_LENGTH = 3
MAX_LABEL_LENGTH = 30

# Whitespace, quotes, list bullets and trailing punctuation models like to add
TRIM_CHARS = " \t\r\n\"'`.-*•“”‘’"

_LIST_NUMBER_RE = re.compile(r"^\d+[.)]\s+")
_WHITESPACE_RE = re.compile(r"\s+")

# Ordered (pattern, replacement) pairs applied to the lower-cased label
SYNONYM_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bcovid[- ]?19\b"), "covid"),
    (re.compile(r"\bcoronavirus\b"), "covid"),
    (re.compile(r"\s(?:shot|shots|vaccination|vaccinations|jab|jabs)\b"), " vaccine"),
    (re.compile(r"\s(?:project|projects|stuff|things)$"), ""),
)


@dataclass(frozen=True)
class NormalizedTopic:
    """A deduplicated topic.

    Attributes:
        key: Canonical key used to detect near-duplicates.
        label: First-seen original-cased label, used for display and for
            matching message text.
    """

    key: str
    label: str


def clean_label(raw: str) -> str:
    """Strip decoration from a raw candidate label.

    Removes surrounding whitespace, quotes, bullets and list numbering,
    repeating until nothing changes so the result is stable.
    """
    label = raw
    while True:
        cleaned = _LIST_NUMBER_RE.sub("", label.strip(TRIM_CHARS)).strip(TRIM_CHARS)
        if cleaned == label:
            return cleaned
        label = cleaned


def canonical_key(
    label: str,
    rules: Sequence[tuple[re.Pattern[str], str]] = SYNONYM_RULES,
) -> str:
    """Compute the canonical key of a cleaned label."""
    key = label.lower()
    for pattern, replacement in rules:
        key = pattern.sub(replacement, key)
    return _WHITESPACE_RE.sub(" ", key).strip()


def is_valid_length(label: str) -> bool:
    """Return True if a cleaned label has an acceptable length."""
    return MIN_LABEL_LENGTH <= len(label) <= MAX_LABEL_LENGTH


def normalize_topics(
    candidates: Iterable[str],
    rules: Sequence[tuple[re.Pattern[str], str]] = SYNONYM_RULES,
) -> list[NormalizedTopic]:
    """Clean, filter and collapse raw candidate labels.

    Steps, in order: clean each label, drop labels outside the allowed
    length, drop case-insensitive exact duplicates, compute canonical keys
    and keep the first label per key. Input order is preserved.

    Running this on the labels of its own output returns the same topics.

    Args:
        candidates: Raw labels from the oracle.
        rules: Synonym table; defaults to SYNONYM_RULES.

    Returns:
        One NormalizedTopic per canonical key, in first-seen order.
    """
    seen_labels: set[str] = set()
    by_key: dict[str, NormalizedTopic] = {}
    dropped = 0

    for raw in candidates:
        label = clean_label(raw)
        if not is_valid_length(label):
            dropped += 1
            continue

        folded = label.lower()
        if folded in seen_labels:
            continue
        seen_labels.add(folded)

        key = canonical_key(label, rules)
        if not key or key in by_key:
            continue
        by_key[key] = NormalizedTopic(key=key, label=label)

    if dropped:
        logger.debug("Dropped %d topic labels with invalid length", dropped)
    return list(by_key.values())
