"""kotsreporting command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kotsreporting`` script).
"""

from kotsreporting.cli.main import cli

__all__ = ["cli"]
