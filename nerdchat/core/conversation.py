"""Conversation history and its on-disk persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = "chat_history.json"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Build a message from its JSON form.

        Raises ``ValueError`` for an unknown role and ``TypeError`` for a
        non-string content field.
        """
        content = data["content"]
        if not isinstance(content, str):
            raise TypeError(f"message content must be a string, got {type(content).__name__}")
        return cls(role=Role(data["role"]), content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class Conversation:
    """Immutable, ordered sequence of :class:`Message`.

    ``append`` hands back a new conversation; a value already given to a
    caller never changes underneath it.
    """

    __slots__ = ("_messages",)

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: Tuple[Message, ...] = tuple(messages)

    def append(self, message: Message) -> "Conversation":
        return Conversation(self._messages + (message,))

    def add_user_message(self, content: str) -> "Conversation":
        return self.append(Message(Role.USER, content))

    def add_assistant_message(self, content: str) -> "Conversation":
        return self.append(Message(Role.ASSISTANT, content))

    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._messages

    def to_payload(self) -> List[Dict[str, str]]:
        """Return the list of role/content dicts sent to providers and saved to disk."""
        return [m.to_dict() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Conversation):
            return NotImplemented
        return self._messages == other._messages

    def __hash__(self) -> int:
        return hash(self._messages)

    def __repr__(self) -> str:
        return f"Conversation({list(self._messages)!r})"


class ConversationStore:
    """Represents the conversation history stored as a JSON file on disk."""

    def __init__(self, path: Union[str, Path] = DEFAULT_HISTORY_FILE) -> None:
        self.path = Path(path)

    def load(self) -> Conversation:
        """Read the persisted conversation.

        A missing, unreadable or malformed file yields an empty conversation;
        starting fresh is always a valid state.
        """
        if not self.path.exists():
            return Conversation()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise TypeError("history file must contain a JSON array")
            return Conversation(Message.from_dict(item) for item in data)
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return Conversation()

    def persist(self, conversation: Conversation) -> None:
        """Overwrite the file with the complete conversation."""
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(
            json.dumps(conversation.to_payload(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(self.path)
        logger.debug("Saved %d messages to %s", len(conversation), self.path)

    def clear(self) -> Conversation:
        """Remove the persisted copy and return the empty conversation."""
        self.path.unlink(missing_ok=True)
        logger.debug("Removed history file %s", self.path)
        return Conversation()
