"""Provider adapter: one chat-completions call per user turn."""

from __future__ import annotations

import logging
from typing import Any, Dict

from .conversation import Conversation
from .providers import ChatProvider
from ..utils import Spinner

logger = logging.getLogger(__name__)


class ChatClient:
    """Send a conversation to a provider and return the assistant's reply.

    Exactly one request is made per call; failures are raised as
    :class:`~nerdchat.core.errors.TransportError` or
    :class:`~nerdchat.core.errors.ProviderError` for the caller to record.
    """

    def __init__(self, show_spinner: bool = True):
        self.show_spinner = show_spinner

    @staticmethod
    def _body(completion: Any) -> Dict[str, Any]:
        """Return the raw JSON body of an SDK completion object."""
        if isinstance(completion, dict):
            return completion
        return completion.model_dump()

    def send(
        self,
        provider: ChatProvider,
        model: str,
        conversation: Conversation,
        credential: str,
    ) -> str:
        request = provider.build_request(conversation, model)
        logger.debug(
            "POST %s/chat/completions model=%s messages=%d",
            provider.base_url,
            model,
            len(request["messages"]),
        )

        spinner = Spinner(text="thinking") if self.show_spinner else None
        with provider.translate_errors():
            if spinner is not None:
                spinner.start()
            try:
                completion = provider.client(credential).chat.completions.create(**request)
            finally:
                if spinner is not None:
                    spinner.stop()

        return provider.parse_response(self._body(completion))
