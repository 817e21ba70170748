"""Ollama-backed topic oracle.

Formats a deterministic topic-extraction prompt, sends it to a locally
hosted Ollama server and splits the reply into raw candidate labels.

The client is fail-open: an unreachable server or a failed call yields no
topics instead of an exception, so the contact graph is always produced.
No retries are attempted.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import requests

from smsgraph.config import OracleConfig, TopicMode
from smsgraph.errors import ErrorCode, OracleRequestError

logger = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[,\n]")

PROMPT_SEPARATOR = "\n---\n"

_GROUPING_RULES = """\
Group similar topics together (e.g., 'COVID-19', 'covid', 'coronavirus' -> use 'COVID-19')
Use consistent naming (e.g., 'COVID vaccine' not 'covid shot', 'covid vaccination')
Be specific but not redundant (avoid 'work', 'project', 'work project' - pick one)
Use 2-3 words per topic maximum
Provide ONLY a comma-separated list, nothing else"""

_GOOD_EXAMPLES = """\
Examples of GOOD topics:
- 'work project' (not 'work', 'project', 'work stuff')
- 'COVID-19' (not 'covid', 'coronavirus', 'pandemic')
- 'weekend plans' (not 'weekend', 'plans', 'Saturday')
- 'health update' (not 'health', 'medical', 'doctor visit')"""


def _numbered(rules: list[str]) -> str:
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))


def build_topic_prompt(samples: list[str], requested_count: int, mode: TopicMode) -> str:
    """Build the extraction prompt for a list of message samples.

    The wording depends only on the arguments, so identical inputs always
    produce identical prompts.

    Args:
        samples: Message texts to list in the prompt.
        requested_count: Topic count for the legacy "top N" instruction.
        mode: Topic mode selecting the instruction wording.

    Returns:
        Prompt text.
    """
    rules = _GROUPING_RULES.splitlines()
    conversation = PROMPT_SEPARATOR.join(samples)

    if TopicMode(mode) is TopicMode.UNLIMITED:
        header = (
            "Analyze these conversation messages and identify ALL significant "
            "topics discussed (no limit)."
        )
        rules = [
            "Include EVERY meaningful topic that appears multiple times",
            *rules,
            "NO LIMIT on number of topics - include everything meaningful",
        ]
        footer = "ALL Topics (comma-separated, NO LIMIT):"
    else:
        header = (
            "Analyze these conversation messages and identify the top "
            f"{requested_count} main topics discussed."
        )
        footer = "Topics (comma-separated):"

    return (
        f"{header}\n\n"
        f"IMPORTANT RULES:\n{_numbered(rules)}\n\n"
        f"{_GOOD_EXAMPLES}\n\n"
        f"Conversation samples:\n{conversation}\n\n"
        f"{footer}"
    )


def parse_topic_response(response: str | None) -> list[str]:
    """Split an oracle reply into raw candidate labels.

    Args:
        response: Comma and/or newline delimited reply text.

    Returns:
        Non-empty, whitespace-trimmed pieces in reply order. Cleaning and
        deduplication are left to the normalizer.
    """
    if not response:
        return []
    return [piece.strip() for piece in _SPLIT_RE.split(response) if piece.strip()]


class OllamaTopicOracle:
    """Topic oracle talking to an Ollama server over HTTP.

    Example:
        >>> oracle = OllamaTopicOracle(OracleConfig(model="llama3.2"))
        >>> if oracle.is_available():
        ...     topics = oracle.extract_topics(samples, 50, TopicMode.UNLIMITED)
    """

    def __init__(
        self,
        config: OracleConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the oracle client.

        Args:
            config: Connection settings (defaults to localhost:11434).
            session: Optional requests session to use.
        """
        self._config = config or OracleConfig()
        self._base_url = self._config.base_url.rstrip("/")
        self._session = session or requests.Session()
        self._available: bool | None = None

    @property
    def model(self) -> str:
        """Model used for extraction."""
        return self._config.model

    def is_available(self) -> bool:
        """Probe the server once and cache the answer."""
        if self._available is not None:
            return self._available

        try:
            response = self._session.get(
                f"{self._base_url}/api/tags",
                timeout=self._config.probe_timeout_seconds,
            )
            self._available = response.ok
        except requests.RequestException as e:
            logger.debug("Ollama probe failed: %s", e)
            self._available = False

        if self._available:
            logger.info("Ollama detected and available at %s", self._base_url)
        else:
            logger.warning("Ollama not available at %s", self._base_url)
        return self._available

    def list_models(self) -> list[str]:
        """Return the names of models installed on the server, [] on failure."""
        try:
            response = self._session.get(
                f"{self._base_url}/api/tags",
                timeout=self._config.probe_timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug("Could not list Ollama models: %s", e)
            return []

        models = data.get("models", []) if isinstance(data, dict) else []
        return [m["name"] for m in models if isinstance(m, dict) and m.get("name")]

    def generate(self, prompt: str) -> str:
        """Send one non-streaming generation request.

        Args:
            prompt: Prompt text.

        Returns:
            The ``response`` field of the reply.

        Raises:
            OracleRequestError: On connection failure, timeout, HTTP error
                or a malformed reply.
        """
        payload: dict[str, Any] = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self._config.temperature,
                "num_predict": self._config.num_predict,
            },
        }

        try:
            response = self._session.post(
                f"{self._base_url}/api/generate",
                json=payload,
                timeout=self._config.timeout_seconds,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise OracleRequestError(
                "Topic extraction timed out",
                timeout_seconds=self._config.timeout_seconds,
                base_url=self._base_url,
                model_name=self._config.model,
                cause=e,
            ) from e
        except requests.RequestException as e:
            raise OracleRequestError(
                f"Topic extraction request failed: {e}",
                base_url=self._base_url,
                model_name=self._config.model,
                cause=e,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise OracleRequestError(
                "Oracle returned a non-JSON reply",
                base_url=self._base_url,
                model_name=self._config.model,
                code=ErrorCode.ORC_BAD_RESPONSE,
                cause=e,
            ) from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise OracleRequestError(
                "Oracle reply has no 'response' text",
                base_url=self._base_url,
                model_name=self._config.model,
                code=ErrorCode.ORC_BAD_RESPONSE,
            )
        return text

    def extract_topics(
        self,
        samples: list[str],
        requested_count: int,
        mode: TopicMode,
    ) -> list[str]:
        """Ask the model for topic labels; returns [] on any failure."""
        if not samples:
            return []

        prompt = build_topic_prompt(samples, requested_count, mode)
        logger.info("Analyzing %d messages for topic detection", len(samples))

        try:
            reply = self.generate(prompt)
        except OracleRequestError as e:
            logger.error("AI topic detection failed: %s (code: %s)", e.message, e.code.value)
            return []

        candidates = parse_topic_response(reply)
        logger.debug("Oracle proposed %d raw topics", len(candidates))
        return candidates
