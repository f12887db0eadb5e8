"""Process exit statuses returned by ``vidshrink``.

:func:`vidshrink.cli.app.cli` is the only place that turns these into
``sys.exit`` calls; ``main`` and ``run_doctor`` return them.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The video was compressed, or ``doctor`` found nothing wrong."""

GENERAL_ERROR: int = 1
"""A :class:`~vidshrink.exceptions.VidshrinkError` was reported, or a doctor check failed."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""

UNEXPECTED_ERROR: int = 2
"""Any other exception; printed with its type name and a request to report it."""
