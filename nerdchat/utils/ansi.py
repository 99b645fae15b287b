"""Colour and styling helpers built on :mod:`rich`."""

import os
from rich.console import Console


console = Console()


class Ansi:
    """Lightweight collection of style names used throughout the app."""

    BOLD = "bold"

    FG_BLUE = "blue"
    FG_GREEN = "green"
    FG_MAGENTA = "magenta"
    FG_YELLOW = "yellow"
    FG_RED = "red"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return *text* wrapped in rich markup unless ``NO_COLOR`` is set."""
        if os.getenv("NO_COLOR") is not None:
            return text
        style = " ".join(codes)
        return f"[{style}]{text}[/]"


def system_note(text: str) -> str:
    """Format a status line the way every system message is shown."""
    return Ansi.style(text, Ansi.FG_YELLOW)


# Common labels used throughout the application
USER_LABEL = Ansi.style("USER", Ansi.FG_BLUE, Ansi.BOLD)
ASSISTANT_LABEL = Ansi.style("ASSISTANT", Ansi.FG_GREEN, Ansi.BOLD)
SYSTEM_LABEL = Ansi.style("SYSTEM", Ansi.FG_YELLOW, Ansi.BOLD)
ERROR_LABEL = Ansi.style("error", Ansi.FG_RED, Ansi.BOLD)
ROLE_LABELS = {
    "user": USER_LABEL,
    "assistant": ASSISTANT_LABEL,
    "system": SYSTEM_LABEL,
}
