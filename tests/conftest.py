"""Pytest configuration for smsgraph tests.

Provides a scripted topic oracle so graph builds never reach a real
Ollama server, plus helpers for building message lists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import pytest

from contracts.messages import Direction, Message
from smsgraph.config import GraphConfig, TopicMode, reset_config


class StubOracle:
    """Topic oracle returning scripted labels.

    Args:
        topics: Labels returned for every call, or a callable receiving
            the samples and returning labels.
        available: Answer to the availability probe.
        error: Exception raised from extract_topics instead of answering.
    """

    def __init__(
        self,
        topics: list[str] | Callable[[list[str]], list[str]] | None = None,
        *,
        available: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.topics = topics or []
        self.available = available
        self.error = error
        self.calls: list[tuple[list[str], int, TopicMode]] = []
        self.probes = 0

    def is_available(self) -> bool:
        self.probes += 1
        return self.available

    def extract_topics(
        self, samples: list[str], requested_count: int, mode: TopicMode
    ) -> list[str]:
        self.calls.append((list(samples), requested_count, mode))
        if self.error is not None:
            raise self.error
        if callable(self.topics):
            return self.topics(samples)
        return list(self.topics)


def make_messages(
    contact_id: str,
    bodies: list[str],
    name: str | None = None,
    direction: Direction = Direction.INCOMING,
) -> list[Message]:
    """Build messages exchanged with one contact."""
    return [
        Message(
            other_party_id=contact_id,
            other_party_name=name,
            body=body,
            direction=direction,
        )
        for body in bodies
    ]


@pytest.fixture
def message_factory() -> Callable[..., list[Message]]:
    """Factory building messages for one contact."""
    return make_messages


@pytest.fixture
def config() -> GraphConfig:
    """Default config with a fixed owner id."""
    return GraphConfig(self_id="me")


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Reset the config singleton between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _capture_logs(caplog):
    """Capture smsgraph logs at DEBUG so log assertions see everything."""
    caplog.set_level(logging.DEBUG, logger="smsgraph")
    yield
