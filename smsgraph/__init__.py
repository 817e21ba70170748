"""smsgraph - Contact and topic relationship graphs from personal messages.

Builds a Self/Contact/Topic network from normalized messages, using a local
Ollama model to name conversation topics.
"""

__version__ = "1.0.0"
