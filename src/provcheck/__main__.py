"""Entry point for running provcheck as a module.

This allows the CLI to be invoked with ``python -m provcheck``.
"""

from .cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
