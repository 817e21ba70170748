"""Budget-bounded subsampling of a corpus.

Large corpora are thinned with a fixed stride so the oracle sees messages
from the whole time range rather than just the beginning. Selection depends
only on the corpus length and the cap, never on message content.
"""

from __future__ import annotations

from collections.abc import Sequence

from smsgraph.config import ModeProfile, TopicMode, profile_for


def sample_cap(n: int, mode: TopicMode | ModeProfile) -> int:
    """Return how many messages may be sampled from a corpus of size n."""
    profile = mode if isinstance(mode, ModeProfile) else profile_for(mode)
    for bound, cap in profile.sample_steps:
        if bound is None or n <= bound:
            return n if cap is None else cap
    return n


def sample_indices(n: int, cap: int) -> list[int]:
    """Return the corpus indices selected for a corpus of size n.

    Args:
        n: Corpus size.
        cap: Maximum number of indices to select.

    Returns:
        All indices when n <= cap, otherwise ``cap`` indices spaced by
        ``n // cap`` starting at 0.
    """
    if n <= cap:
        return list(range(n))
    stride = n // cap
    return [i * stride for i in range(cap)]


def sample_corpus(corpus: Sequence[str], mode: TopicMode | ModeProfile) -> list[str]:
    """Select the messages of a corpus to send to the oracle."""
    cap = sample_cap(len(corpus), mode)
    return [corpus[i] for i in sample_indices(len(corpus), cap)]


def prompt_samples(samples: Sequence[str], mode: TopicMode | ModeProfile) -> list[str]:
    """Cut sampled messages down to what fits in one oracle prompt."""
    profile = mode if isinstance(mode, ModeProfile) else profile_for(mode)
    return list(samples[: profile.prompt_sample_limit])

