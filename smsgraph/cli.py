"""Command-line interface for smsgraph.

Usage:
    python -m smsgraph build messages.json -o graph.json --self-id +15550100
    python -m smsgraph build messages.json -o graph.json --mode legacy --global-topics
    python -m smsgraph build messages.json -o graph.json --no-topics
    python -m smsgraph models --ollama-url http://localhost:11434
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

from smsgraph import __version__
from smsgraph.config import GraphConfig, TopicMode, load_config
from smsgraph.errors import (
    ConfigurationError,
    GraphExportError,
    OracleError,
    OracleUnavailableError,
    SmsGraphError,
    ValidationError,
)
from smsgraph.graph.builder import GraphBuilder, GraphData
from smsgraph.graph.export import export_to_json
from smsgraph.ingest import load_messages
from smsgraph.topics.oracle import OllamaTopicOracle

console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _format_error(error: SmsGraphError) -> None:
    """Display an smsgraph error with a hint on how to fix it."""
    console.print(f"[red]Error: {error.message}[/red]")

    if isinstance(error, GraphExportError):
        console.print("[yellow]Check that the output directory exists and is writable.[/yellow]")
    elif isinstance(error, ValidationError):
        field = error.details.get("field")
        if field:
            console.print(f"[yellow]Problem field: {field}[/yellow]")
        console.print(
            "[yellow]Messages must be a JSON array of objects with other_party_id, "
            "other_party_name, body and direction.[/yellow]"
        )
    elif isinstance(error, OracleError):
        console.print("[yellow]Make sure Ollama is running: https://ollama.ai[/yellow]")


def apply_overrides(config: GraphConfig, args: argparse.Namespace) -> GraphConfig:
    """Return a copy of config with command-line options applied."""
    updates: dict[str, object] = {}
    if args.self_id is not None:
        updates["self_id"] = args.self_id
    if args.self_name is not None:
        updates["self_name"] = args.self_name
    if args.mode is not None:
        updates["topic_mode"] = TopicMode(args.mode)
    if args.global_topics:
        updates["split_by_contact"] = False
    if args.no_topics:
        updates["detect_topics"] = False
    if args.min_topic_messages is not None:
        updates["min_topic_messages"] = args.min_topic_messages

    oracle_updates: dict[str, object] = {}
    if args.ollama_url is not None:
        oracle_updates["base_url"] = args.ollama_url
    if args.model is not None:
        oracle_updates["model"] = args.model
    if oracle_updates:
        updates["oracle"] = config.oracle.model_copy(update=oracle_updates)

    try:
        return GraphConfig.model_validate({**config.model_dump(), **updates})
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid option: {e}", cause=e) from e


def print_summary(graph: GraphData, output: Path) -> None:
    """Print a table of node and link counts."""
    summary = graph.summary()
    table = Table(title="Network graph")
    table.add_column("Item")
    table.add_column("Count", justify="right")
    table.add_row("Self", "1")
    table.add_row("Contacts", str(summary["contacts"]))
    table.add_row("Topics", str(summary["topics"]))
    table.add_row("Links", str(summary["links"]))
    console.print(table)
    console.print(f"[green]Graph written to {output}[/green]")


def cmd_build(args: argparse.Namespace) -> int:
    """Build a graph from a messages file and write it as JSON."""
    config = apply_overrides(load_config(args.config), args)
    messages = load_messages(args.messages)

    oracle = OllamaTopicOracle(config.oracle) if config.detect_topics else None
    graph = GraphBuilder(config, oracle).build(messages)
    export_to_json(graph, args.output)

    print_summary(graph, args.output)
    return 0


def _is_model(installed: str, model: str) -> bool:
    """Match an installed model name, with or without its tag, to a configured one."""
    return installed == model or installed.split(":", 1)[0] == model


def cmd_models(args: argparse.Namespace) -> int:
    """List the models installed on the Ollama server."""
    config = apply_overrides(load_config(args.config), args)
    oracle = OllamaTopicOracle(config.oracle)
    if not oracle.is_available():
        raise OracleUnavailableError(
            f"Ollama is not reachable at {config.oracle.base_url}",
            base_url=config.oracle.base_url,
            model_name=oracle.model,
        )

    models = oracle.list_models()
    table = Table(title=f"Models at {config.oracle.base_url}")
    table.add_column("Model")
    table.add_column("Used for topics", justify="center")
    for name in models:
        table.add_row(name, "[green]yes[/green]" if _is_model(name, oracle.model) else "")
    console.print(table)

    if not any(_is_model(name, oracle.model) for name in models):
        console.print(
            f"[yellow]Model {oracle.model!r} is not installed. "
            f"Run: ollama pull {oracle.model}[/yellow]"
        )
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="smsgraph",
        description="Build a contact/topic relationship graph from personal messages.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"smsgraph {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="build a graph JSON file from messages")
    build.add_argument("messages", type=Path, help="JSON array of normalized messages")
    build.add_argument(
        "-o", "--output", type=Path, default=Path("network_graph.json"), help="output JSON path"
    )
    build.add_argument("--config", type=Path, default=None, help="config file path")
    build.add_argument("--self-id", default=None, help="identifier of the message owner")
    build.add_argument("--self-name", default=None, help="display name of the owner node")
    build.add_argument(
        "--mode",
        choices=[m.value for m in TopicMode],
        default=None,
        help="topic mode (unlimited: no cap, min-count filter; legacy: top-N)",
    )
    build.add_argument(
        "--global-topics",
        action="store_true",
        help="detect topics once over all messages instead of per contact",
    )
    build.add_argument(
        "--no-topics", action="store_true", help="skip topic detection entirely"
    )
    build.add_argument(
        "--min-topic-messages",
        type=int,
        default=None,
        help="minimum messages for a topic in unlimited mode",
    )
    build.add_argument("--ollama-url", default=None, help="Ollama server address")
    build.add_argument("--model", default=None, help="Ollama model name")
    build.set_defaults(func=cmd_build)

    models = subparsers.add_parser("models", help="list models installed on the Ollama server")
    models.add_argument("--config", type=Path, default=None, help="config file path")
    models.add_argument("--ollama-url", default=None, help="Ollama server address")
    models.add_argument("--model", default=None, help="Ollama model name")
    models.set_defaults(
        func=cmd_models,
        self_id=None,
        self_name=None,
        mode=None,
        global_topics=False,
        no_topics=False,
        min_topic_messages=None,
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. Uses sys.argv if None.

    Returns:
        Exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


def run() -> NoReturn:
    """Entry point that handles errors and exit."""
    try:
        exit_code = main()
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/dim]")
        exit_code = 130
    except SmsGraphError as e:
        _format_error(e)
        logger.debug("smsgraph error", exc_info=True)
        exit_code = 1

    sys.exit(exit_code)
