"""Contract interfaces for smsgraph.

Importers and topic oracle implementations code against these contracts,
not against the graph builder's internals.
"""

from contracts.messages import Direction, Message
from contracts.oracle import TopicOracle

__all__ = [
    # Messages
    "Direction",
    "Message",
    # Oracle
    "TopicOracle",
]
