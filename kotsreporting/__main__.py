"""Entry point for `python -m kotsreporting`.

Usage:
    python -m kotsreporting -n kots export --app-slug my-app
    python -m kotsreporting distribution
"""

from __future__ import annotations

from kotsreporting.cli import cli

cli()
