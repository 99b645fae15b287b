"""Input port used for every blocking prompt.

The controller never calls :func:`input` directly. It asks an
:class:`InputPort`, which is the console in normal use and a
:class:`ScriptedInput` in tests.
"""
from __future__ import annotations

from typing import Iterable, List, Protocol

from ..core.errors import ValidationError
from .ansi import console


class InputPort(Protocol):
    def ask(self, prompt: str, *, secret: bool = False) -> str:
        ...


class ConsoleInput:
    """Read answers from the terminal through the shared rich console."""

    def ask(self, prompt: str, *, secret: bool = False) -> str:
        return console.input(prompt, password=secret)


class ScriptedInput:
    """Replay a fixed list of answers; raise :class:`EOFError` once exhausted."""

    def __init__(self, answers: Iterable[str]):
        self._answers: List[str] = list(answers)
        self.prompts: List[str] = []

    def ask(self, prompt: str, *, secret: bool = False) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError("no scripted input left")
        return self._answers.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._answers)


def parse_index(text: str, size: int) -> int:
    """Return *text* as an index into a list of *size* items.

    Only plain non-negative integers are accepted (no sign, no whitespace
    inside the number).
    """
    value = text.strip()
    if not value.isdecimal():
        raise ValidationError("Invalid choice. Please enter a valid number.", value=text)
    index = int(value)
    if index >= size:
        raise ValidationError("Invalid choice. Please enter a valid number.", value=text)
    return index
