"""Spinner shown while a provider request is in flight."""
from __future__ import annotations

from yaspin import yaspin


class Spinner:
    """Display a small spinner while work is done."""

    def __init__(self, text: str = ""):
        self._started = False
        self._spinner = yaspin(text=text)

    def start(self) -> None:
        if self._started:
            return
        self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._spinner.stop()
        self._started = False
