"""JSON export of the relationship graph.

Writes the node/link document read by the force-directed viewer:

    {
      "nodes": [
        {"id": "...", "name": "...", "group": 0, "value": 42},
        ...
      ],
      "links": [
        {"source": "...", "target": "...", "value": 7},
        ...
      ]
    }

One entity per line, in the order the builder committed them. Files are
written atomically: a failed write leaves any previous artifact untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from smsgraph.errors import GraphExportError
from smsgraph.graph.builder import GraphData

logger = logging.getLogger(__name__)


def _entity_lines(entities: list[dict]) -> list[str]:
    lines = [f"    {json.dumps(entity)}" for entity in entities]
    return [line + ("," if i < len(lines) - 1 else "") for i, line in enumerate(lines)]


def graph_to_json(graph: GraphData) -> str:
    """Render a graph as the viewer's JSON document.

    Args:
        graph: Graph data to render.

    Returns:
        JSON text ending with a newline.
    """
    data = graph.to_dict()
    lines = ["{", '  "nodes": [']
    lines.extend(_entity_lines(data["nodes"]))
    lines.extend(["  ],", '  "links": ['])
    lines.extend(_entity_lines(data["links"]))
    lines.extend(["  ]", "}"])
    return "\n".join(lines) + "\n"


def write_atomic(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write content to path using temp file + rename.

    Raises:
        GraphExportError: If the file cannot be written.
    """
    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise GraphExportError(f"Cannot write graph to {path}: {e}", path=str(path), cause=e) from e

    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        os.replace(tmp_path, path)
    except (OSError, UnicodeError) as e:
        Path(tmp_path).unlink(missing_ok=True)
        raise GraphExportError(f"Cannot write graph to {path}: {e}", path=str(path), cause=e) from e
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def export_to_json(graph: GraphData, path: Path | str | None = None) -> str:
    """Export graph to JSON format.

    Args:
        graph: Graph data to export
        path: Optional file path to write to

    Returns:
        JSON string representation

    Raises:
        GraphExportError: If path is given and the file cannot be written.
    """
    json_str = graph_to_json(graph)

    if path:
        path = Path(path)
        write_atomic(path, json_str)
        logger.info(
            "Exported graph to %s (%d nodes, %d links)",
            path,
            graph.node_count,
            graph.link_count,
        )

    return json_str
