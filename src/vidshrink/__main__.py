"""Allow ``python -m vidshrink`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m vidshrink`` behaves identically to the ``vidshrink``
console script.
"""

from __future__ import annotations

from vidshrink.cli.app import cli

if __name__ == "__main__":
    cli()
