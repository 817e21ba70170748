"""Tests for JSON export (smsgraph/graph/export.py)."""

import json
from unittest.mock import patch

import pytest

from conftest import make_messages
from smsgraph.config import GraphConfig
from smsgraph.errors import ErrorCode, GraphExportError
from smsgraph.graph.builder import (
    ContactNode,
    GraphData,
    GraphLink,
    SelfNode,
    TopicNode,
    build_graph,
)
from smsgraph.graph.export import export_to_json, graph_to_json, write_atomic


@pytest.fixture
def graph() -> GraphData:
    return GraphData(
        nodes=[
            SelfNode(id="me", name="You", weight=12),
            ContactNode(id="alice", name='Alice "Al" O\'Neil', weight=9, topics=["Football"]),
            ContactNode(id="bob", name="Bob\\Robert", weight=3),
            TopicNode(id="topic_1", name="Football", weight=6),
        ],
        links=[
            GraphLink("me", "alice", 9),
            GraphLink("me", "bob", 3),
            GraphLink("alice", "topic_1", 6),
        ],
    )


class TestGraphToJson:
    """Tests for graph_to_json."""

    def test_parses_back_to_same_structure(self, graph):
        data = json.loads(graph_to_json(graph))
        assert data == graph.to_dict()

    def test_escapes_names(self, graph):
        """Quotes and backslashes in names survive the round trip."""
        data = json.loads(graph_to_json(graph))
        assert data["nodes"][1]["name"] == 'Alice "Al" O\'Neil'
        assert data["nodes"][2]["name"] == "Bob\\Robert"

    def test_topics_key_only_on_contacts_with_topics(self, graph):
        data = json.loads(graph_to_json(graph))
        assert data["nodes"][1]["topics"] == ["Football"]
        assert "topics" not in data["nodes"][2]
        assert "topics" not in data["nodes"][0]

    def test_one_entity_per_line(self, graph):
        lines = graph_to_json(graph).splitlines()
        assert lines[0] == "{"
        assert lines[1] == '  "nodes": ['
        assert lines[2] == '    {"id": "me", "name": "You", "group": 0, "value": 12},'
        assert lines[5] == '    {"id": "topic_1", "name": "Football", "group": 2, "value": 6}'
        assert lines[6] == "  ],"
        assert lines[-1] == "}"

    def test_non_ascii_names(self):
        """Non-ASCII names are written as \\u escapes."""
        graph = GraphData(nodes=[SelfNode(id="me", name="Zoë", weight=0)])
        text = graph_to_json(graph)
        assert text.isascii()
        assert json.loads(text)["nodes"][0]["name"] == "Zoë"

    def test_lone_surrogate_is_escaped(self):
        """A name holding half of a surrogate pair still renders as JSON."""
        graph = GraphData(nodes=[SelfNode(id="me", name="Al\ud83dce", weight=0)])
        text = graph_to_json(graph)
        assert "\\ud83d" in text
        assert json.loads(text)["nodes"][0]["name"] == "Al\ud83dce"

    def test_empty_links(self):
        text = graph_to_json(GraphData(nodes=[SelfNode(id="me", name="You")]))
        assert json.loads(text)["links"] == []


class TestExportToJson:
    """Tests for export_to_json."""

    def test_returns_string_without_path(self, graph):
        assert json.loads(export_to_json(graph))["links"][2]["value"] == 6

    def test_writes_file(self, graph, tmp_path):
        path = tmp_path / "network_graph.json"

        text = export_to_json(graph, path)

        assert path.read_text(encoding="utf-8") == text
        assert list(tmp_path.iterdir()) == [path]

    def test_overwrites_existing_file(self, graph, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("old", encoding="utf-8")

        export_to_json(graph, str(path))

        assert json.loads(path.read_text(encoding="utf-8"))["nodes"][0]["id"] == "me"

    def test_missing_directory_raises(self, graph, tmp_path):
        path = tmp_path / "missing" / "graph.json"

        with pytest.raises(GraphExportError) as exc_info:
            export_to_json(graph, path)

        assert exc_info.value.code == ErrorCode.EXP_WRITE_FAILED
        assert exc_info.value.details["path"] == str(path)


class TestWriteAtomic:
    """Tests for write_atomic."""

    def test_failed_replace_keeps_previous_file(self, tmp_path):
        """A failed write leaves the old artifact and no temp files."""
        path = tmp_path / "graph.json"
        path.write_text("previous", encoding="utf-8")

        with patch("smsgraph.graph.export.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(GraphExportError, match="disk full"):
                write_atomic(path, "new content")

        assert path.read_text(encoding="utf-8") == "previous"
        assert list(tmp_path.iterdir()) == [path]

    def test_unencodable_content_raises_export_error(self, tmp_path):
        """Text the encoding cannot represent fails as an export error."""
        path = tmp_path / "graph.json"

        with pytest.raises(GraphExportError) as exc_info:
            write_atomic(path, "Al\ud83dce")

        assert exc_info.value.code == ErrorCode.EXP_WRITE_FAILED
        assert isinstance(exc_info.value.cause, UnicodeError)
        assert list(tmp_path.iterdir()) == []


class TestExportImportedNames:
    """Names decoded from message files reach the artifact intact."""

    def test_contact_name_with_lone_surrogate(self, tmp_path):
        messages = make_messages("alice", ["see you at the game"], name="Al\ud83dce")
        graph = build_graph(messages, GraphConfig(self_id="me"))
        path = tmp_path / "g.json"

        export_to_json(graph, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["nodes"][1]["name"] == "Al\ud83dce"
