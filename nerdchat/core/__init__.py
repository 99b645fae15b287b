from .conversation import Conversation, ConversationStore, Message, Role
from .errors import ConfigError, NerdChatError, ProviderError, TransportError, ValidationError
from .providers import PROVIDERS, ChatProvider, DeepSeekProvider, OpenAIProvider, get_provider
from .session import SessionContext, ensure_credential
# client and catalog pull in the UI helpers and are imported from their modules.

__all__ = [
    "Conversation",
    "ConversationStore",
    "Message",
    "Role",
    "ConfigError",
    "NerdChatError",
    "ProviderError",
    "TransportError",
    "ValidationError",
    "PROVIDERS",
    "ChatProvider",
    "DeepSeekProvider",
    "OpenAIProvider",
    "get_provider",
    "SessionContext",
    "ensure_credential",
]
