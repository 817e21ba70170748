"""Topic oracle interface.

The oracle is an external, fallible text-analysis service that proposes
topic labels for a corpus of message texts. The graph builder only codes
against this protocol so tests can inject a deterministic stub.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from smsgraph.config import TopicMode


class TopicOracle(Protocol):
    """Interface for topic extraction."""

    def is_available(self) -> bool:
        """Check whether the oracle can serve requests.

        Implementations probe at most once and cache the answer for the
        lifetime of the instance.

        Returns:
            True if extraction calls may be attempted.
        """
        ...

    def extract_topics(
        self,
        samples: list[str],
        requested_count: int,
        mode: TopicMode,
    ) -> list[str]:
        """Propose raw topic labels for the given message samples.

        Args:
            samples: Ordered message texts to analyze.
            requested_count: Topic count to ask for (used in legacy mode).
            mode: Topic mode selecting the instruction wording.

        Returns:
            Raw candidate labels, possibly empty. Implementations return an
            empty list instead of raising when a call fails.
        """
        ...
