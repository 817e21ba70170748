"""Tests for the Ollama topic oracle (smsgraph/topics/oracle.py)."""

from unittest.mock import MagicMock

import pytest
import requests

from smsgraph.config import OracleConfig, TopicMode
from smsgraph.errors import ErrorCode, OracleRequestError
from smsgraph.topics.oracle import (
    PROMPT_SEPARATOR,
    OllamaTopicOracle,
    build_topic_prompt,
    parse_topic_response,
)


def _response(status: int = 200, payload=None, json_error: Exception | None = None):
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


class TestBuildTopicPrompt:
    """Tests for prompt construction."""

    def test_unlimited_wording(self):
        prompt = build_topic_prompt(["a", "b"], 50, TopicMode.UNLIMITED)
        assert "identify ALL significant topics discussed (no limit)" in prompt
        assert "NO LIMIT on number of topics" in prompt
        assert prompt.endswith("ALL Topics (comma-separated, NO LIMIT):")

    def test_legacy_wording(self):
        prompt = build_topic_prompt(["a", "b"], 20, TopicMode.LEGACY)
        assert "identify the top 20 main topics discussed." in prompt
        assert "NO LIMIT" not in prompt
        assert prompt.endswith("Topics (comma-separated):")

    def test_samples_joined_with_separator(self):
        prompt = build_topic_prompt(["first message", "second message"], 20, TopicMode.LEGACY)
        assert f"first message{PROMPT_SEPARATOR}second message" in prompt

    def test_deterministic(self):
        samples = ["hello there", "see you soon"]
        assert build_topic_prompt(samples, 50, "unlimited") == build_topic_prompt(
            list(samples), 50, TopicMode.UNLIMITED
        )

    def test_rules_numbered(self):
        prompt = build_topic_prompt(["a"], 20, TopicMode.LEGACY)
        assert "IMPORTANT RULES:\n1. Group similar topics together" in prompt


class TestParseTopicResponse:
    """Tests for parse_topic_response."""

    def test_commas_and_newlines(self):
        assert parse_topic_response("work, travel\nhealth update,\n\n gym ") == [
            "work",
            "travel",
            "health update",
            "gym",
        ]

    def test_empty(self):
        assert parse_topic_response("") == []
        assert parse_topic_response(None) == []
        assert parse_topic_response(" , ,\n") == []


class TestIsAvailable:
    """Tests for the availability probe."""

    def test_available(self, session):
        session.get.return_value = _response(200, {"models": []})
        oracle = OllamaTopicOracle(OracleConfig(base_url="http://ollama:11434/"), session)

        assert oracle.is_available() is True
        session.get.assert_called_once_with("http://ollama:11434/api/tags", timeout=5.0)

    def test_probe_cached(self, session):
        session.get.return_value = _response(200, {})
        oracle = OllamaTopicOracle(session=session)

        oracle.is_available()
        oracle.is_available()

        assert session.get.call_count == 1

    def test_connection_error(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        assert OllamaTopicOracle(session=session).is_available() is False

    def test_http_error_status(self, session):
        session.get.return_value = _response(500)
        assert OllamaTopicOracle(session=session).is_available() is False


class TestListModels:
    """Tests for list_models."""

    def test_names(self, session):
        session.get.return_value = _response(
            200, {"models": [{"name": "llama3.2:latest"}, {"name": "mistral"}, {}]}
        )
        assert OllamaTopicOracle(session=session).list_models() == ["llama3.2:latest", "mistral"]

    def test_failure(self, session):
        session.get.side_effect = requests.ConnectionError("refused")
        assert OllamaTopicOracle(session=session).list_models() == []


class TestGenerate:
    """Tests for the generation request."""

    def test_payload(self, session):
        session.post.return_value = _response(200, {"response": "work, travel"})
        config = OracleConfig(model="mistral", temperature=0.5, num_predict=64, timeout_seconds=30)

        text = OllamaTopicOracle(config, session).generate("prompt text")

        assert text == "work, travel"
        session.post.assert_called_once_with(
            "http://localhost:11434/api/generate",
            json={
                "model": "mistral",
                "prompt": "prompt text",
                "stream": False,
                "options": {"temperature": 0.5, "num_predict": 64},
            },
            timeout=30,
        )

    def test_timeout(self, session):
        session.post.side_effect = requests.Timeout("slow")

        with pytest.raises(OracleRequestError) as exc_info:
            OllamaTopicOracle(session=session).generate("p")

        assert exc_info.value.code == ErrorCode.ORC_TIMEOUT
        assert exc_info.value.details["timeout_seconds"] == 120.0

    def test_http_error(self, session):
        session.post.return_value = _response(404)

        with pytest.raises(OracleRequestError) as exc_info:
            OllamaTopicOracle(session=session).generate("p")

        assert exc_info.value.code == ErrorCode.ORC_REQUEST_FAILED

    def test_non_json_reply(self, session):
        session.post.return_value = _response(200, json_error=ValueError("not json"))

        with pytest.raises(OracleRequestError) as exc_info:
            OllamaTopicOracle(session=session).generate("p")

        assert exc_info.value.code == ErrorCode.ORC_BAD_RESPONSE

    def test_missing_response_field(self, session):
        session.post.return_value = _response(200, {"done": True})

        with pytest.raises(OracleRequestError) as exc_info:
            OllamaTopicOracle(session=session).generate("p")

        assert exc_info.value.code == ErrorCode.ORC_BAD_RESPONSE


class TestExtractTopics:
    """Tests for extract_topics."""

    def test_returns_candidates(self, session):
        session.post.return_value = _response(200, {"response": "Work Project, COVID-19\ngym"})

        topics = OllamaTopicOracle(session=session).extract_topics(
            ["some message"], 50, TopicMode.UNLIMITED
        )

        assert topics == ["Work Project", "COVID-19", "gym"]
        prompt = session.post.call_args.kwargs["json"]["prompt"]
        assert "some message" in prompt

    def test_no_samples_no_request(self, session):
        assert OllamaTopicOracle(session=session).extract_topics([], 50, TopicMode.UNLIMITED) == []
        session.post.assert_not_called()

    @pytest.mark.parametrize(
        "failure",
        [requests.Timeout("slow"), requests.ConnectionError("refused")],
    )
    def test_failures_yield_no_topics(self, session, failure):
        session.post.side_effect = failure
        oracle = OllamaTopicOracle(session=session)
        assert oracle.extract_topics(["msg"], 20, TopicMode.LEGACY) == []

    def test_bad_reply_yields_no_topics(self, session):
        session.post.return_value = _response(200, json_error=ValueError("not json"))
        oracle = OllamaTopicOracle(session=session)
        assert oracle.extract_topics(["msg"], 20, TopicMode.LEGACY) == []

    def test_model_property(self):
        assert OllamaTopicOracle(OracleConfig(model="phi3")).model == "phi3"
