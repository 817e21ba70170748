"""smsgraph Configuration System.

Loads and validates configuration from ~/.smsgraph/config.json.
Uses Pydantic for schema validation with sensible defaults.

The topic mode is a single enum resolved to a ModeProfile, which carries
every mode-dependent constant (sampling caps, prompt size, requested topic
count, topic filter, contact topic list length).

Usage:
    from smsgraph.config import get_config, profile_for

    config = get_config()
    profile = profile_for(config.topic_mode)
    print(profile.requested_topics)
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".smsgraph" / "config.json"


class TopicMode(str, Enum):
    """How aggressively topics are requested and filtered."""

    LEGACY = "legacy"
    UNLIMITED = "unlimited"


@dataclass(frozen=True)
class ModeProfile:
    """Mode-dependent constants for one TopicMode.

    Attributes:
        mode: The mode this profile describes.
        sample_steps: (max_corpus_size, cap) pairs; the first step whose
            bound is >= N gives the cap. A bound of None means "no bound",
            a cap of None means "keep the whole corpus".
        prompt_sample_limit: Max sampled messages joined into one prompt.
        requested_topics: Topic count asked of the oracle.
        contact_topic_limit: Max display topics per contact (None = all).
        truncate_to_requested: Whether oracle output is cut to
            requested_topics after normalization.
    """

    mode: TopicMode
    sample_steps: tuple[tuple[int | None, int | None], ...]
    prompt_sample_limit: int
    requested_topics: int
    contact_topic_limit: int | None
    truncate_to_requested: bool

    def keeps_topic(self, frequency: int, min_topic_messages: int) -> bool:
        """Return True if a topic with this global frequency survives filtering."""
        if self.mode is TopicMode.UNLIMITED:
            return frequency >= min_topic_messages
        return frequency > 0


LEGACY_PROFILE = ModeProfile(
    mode=TopicMode.LEGACY,
    sample_steps=((500, None), (2000, 500), (5000, 1000), (None, 2000)),
    prompt_sample_limit=100,
    requested_topics=20,
    contact_topic_limit=10,
    truncate_to_requested=True,
)

UNLIMITED_PROFILE = ModeProfile(
    mode=TopicMode.UNLIMITED,
    sample_steps=((500, None), (1000, 750), (3000, 1500), (None, 2500)),
    prompt_sample_limit=200,
    requested_topics=50,
    contact_topic_limit=None,
    truncate_to_requested=False,
)

_PROFILES: dict[TopicMode, ModeProfile] = {
    TopicMode.LEGACY: LEGACY_PROFILE,
    TopicMode.UNLIMITED: UNLIMITED_PROFILE,
}


def profile_for(mode: TopicMode | str) -> ModeProfile:
    """Resolve a TopicMode (or its string value) to its ModeProfile."""
    return _PROFILES[TopicMode(mode)]


class OracleConfig(BaseModel):
    """Connection settings for the Ollama topic oracle.

    Attributes:
        base_url: Ollama server address.
        model: Model used for topic extraction.
        timeout_seconds: Bound on a single extraction call.
        probe_timeout_seconds: Bound on the availability probe.
        temperature: Sampling temperature sent with each request.
        num_predict: Max tokens the model may produce per request.
    """

    base_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    timeout_seconds: float = Field(default=120.0, gt=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    num_predict: int = Field(default=200, ge=1)


class GraphConfig(BaseModel):
    """Settings for one graph build.

    Attributes:
        self_id: Identifier of the message owner; messages whose other party
            equals this id are skipped.
        self_name: Display name of the Self node.
        topic_mode: Legacy (top-N, keep any positive topic) or unlimited
            (no cap, keep topics with >= min_topic_messages).
        split_by_contact: Detect topics per contact (True) or once over a
            global corpus (False).
        detect_topics: Set False to skip the oracle entirely.
        min_topic_messages: Unlimited-mode topic frequency floor.
        min_message_length: Bodies must be strictly longer than this to
            enter a corpus.
        oracle: Oracle connection settings.
    """

    self_id: str = "self"
    self_name: str = "You"
    topic_mode: TopicMode = TopicMode.UNLIMITED
    split_by_contact: bool = True
    detect_topics: bool = True
    min_topic_messages: int = Field(default=5, ge=1)
    min_message_length: int = Field(default=10, ge=0)
    oracle: OracleConfig = Field(default_factory=OracleConfig)

    @property
    def profile(self) -> ModeProfile:
        """ModeProfile for the configured topic mode."""
        return profile_for(self.topic_mode)


_config: GraphConfig | None = None
_config_lock = threading.Lock()


def load_config(config_path: Path | None = None) -> GraphConfig:
    """Load configuration from file, return defaults if missing/invalid.

    Args:
        config_path: Optional path to config file. Defaults to ~/.smsgraph/config.json.

    Returns:
        GraphConfig instance with loaded or default values.
    """
    path = config_path or CONFIG_PATH

    if not path.exists():
        logger.debug("Config file not found at %s, using defaults", path)
        return GraphConfig()

    try:
        with path.open(encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in config file %s: %s, using defaults", path, e)
        return GraphConfig()
    except OSError as e:
        logger.warning("Cannot read config file %s: %s, using defaults", path, e)
        return GraphConfig()

    try:
        return GraphConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Config validation failed: %s, using defaults", e)
        return GraphConfig()


def save_config(config: GraphConfig, config_path: Path | None = None) -> bool:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to config file. Defaults to ~/.smsgraph/config.json.

    Returns:
        True if saved successfully, False otherwise.
    """
    path = config_path or CONFIG_PATH

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with path.open("w", encoding="utf-8") as f:
            json.dump(config.model_dump(mode="json"), f, indent=2)

        # self_id is a phone number or address
        os.chmod(path, 0o600)

        logger.debug("Configuration saved to %s", path)
        return True

    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        return False


def get_config() -> GraphConfig:
    """Get singleton configuration instance.

    Uses double-check locking for thread safety.

    Returns:
        Shared GraphConfig instance.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_config()
    return _config


def reset_config() -> None:
    """Reset singleton configuration for testing."""
    global _config
    with _config_lock:
        _config = None
