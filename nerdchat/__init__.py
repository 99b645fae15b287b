"""NerdChat: interactive terminal chat with DeepSeek and OpenAI models.

Features
--------
1. Conversation persistence: the history is rewritten to ``chat_history.json``
   after every turn and restored on the next start.
2. Provider switching: `/openai` and `/deepseek` change backend mid-conversation;
   `/models` picks another model from the current one.
3. Failed API calls never end the session: the error text is recorded as the
   assistant's reply.

Run `python -m nerdchat` or the `nerdchat` console script.
"""
# Re-export useful symbols for convenience
from .core import (
    Conversation,
    ConversationStore,
    Message,
    Role,
    SessionContext,
    get_provider,
)
from .core.client import ChatClient
from .cli import ChatCLI, run_cli

__version__ = "0.1.0"

__all__ = [
    "Conversation",
    "ConversationStore",
    "Message",
    "Role",
    "SessionContext",
    "get_provider",
    "ChatClient",
    "ChatCLI",
    "run_cli",
]
