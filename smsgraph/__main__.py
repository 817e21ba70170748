"""Entry point for python -m smsgraph execution.

    python -m smsgraph build messages.json -o graph.json --self-id +15550100
    python -m smsgraph --help
"""

from smsgraph.cli import run

if __name__ == "__main__":
    run()
