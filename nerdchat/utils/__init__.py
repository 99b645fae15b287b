from .ansi import (
    Ansi,
    USER_LABEL,
    ASSISTANT_LABEL,
    ERROR_LABEL,
    SYSTEM_LABEL,
    ROLE_LABELS,
    console,
    system_note,
)
from .spinner import Spinner

__all__ = [
    "Ansi",
    "USER_LABEL",
    "ASSISTANT_LABEL",
    "ERROR_LABEL",
    "SYSTEM_LABEL",
    "ROLE_LABELS",
    "console",
    "system_note",
    "Spinner",
]
