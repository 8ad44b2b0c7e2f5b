"""podlogkeeper command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``podlogkeeper`` script).
"""

from podlogkeeper.cli.main import cli

__all__ = ["cli"]
