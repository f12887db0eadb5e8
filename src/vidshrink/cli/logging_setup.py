"""Root logger configuration for the command line.

Library modules only create ``logging.getLogger(__name__)`` loggers;
handlers are attached here, once, by the CLI.  Rich renders the records
when it is installed, otherwise a plain stderr handler is used.
"""

from __future__ import annotations

import logging

from vidshrink.cli.console import get_rich_console
from vidshrink.exceptions import EnvironmentError

_PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_MARK = "_vidshrink_handler"


def configure_logging(verbose: bool = False) -> None:
    """Attach the vidshrink handler to the root logger, replacing an earlier one.

    ``verbose`` enables DEBUG records, which include every ffmpeg log
    line; otherwise only warnings and errors are shown.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)

    try:
        from rich.logging import RichHandler

        handler: logging.Handler = RichHandler(
            console=get_rich_console(),
            show_path=False,
            markup=False,
            rich_tracebacks=verbose,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    except (ModuleNotFoundError, EnvironmentError):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))

    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)
    root.setLevel(level)
