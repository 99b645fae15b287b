"""Logging setup: standard :mod:`logging` rendered through rich."""

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "nerdchat"


def configure_logging(level: str = "WARNING") -> None:
    """Attach a stderr :class:`RichHandler` to the ``nerdchat`` logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger("nerdchat")
    logger.setLevel(level.upper())
    if any(getattr(h, "name", None) == _HANDLER_NAME for h in logger.handlers):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.name = _HANDLER_NAME
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
