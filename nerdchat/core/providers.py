"""Provider capability interface and the two supported backends.

Both backends speak the OpenAI chat-completions protocol, so each one is an
:class:`openai.OpenAI` client pointed at a different base URL. A provider
knows how to shape a request, how to read a response body and how to list
its models; the actual call is made by :class:`~nerdchat.core.client.ChatClient`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import openai
from openai import OpenAI

from .config import DEFAULT_TIMEOUT, Settings
from .conversation import Conversation
from .errors import ConfigError, ProviderError, TransportError

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class ChatProvider(ABC):
    """One remote chat-completion service."""

    name: str = ""
    display_name: str = ""
    env_var: str = ""
    default_base_url: str = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client_factory: ClientFactory = OpenAI,
    ):
        self.base_url = base_url or self.default_base_url
        self.timeout = timeout
        self._client_factory = client_factory

    @property
    def no_response_text(self) -> str:
        return f"(No response from {self.display_name}.)"

    def client(self, credential: str) -> Any:
        """Return an SDK client authorised with *credential* (sent as a bearer token)."""
        return self._client_factory(
            api_key=credential,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    def build_request(self, conversation: Conversation, model: str) -> Dict[str, Any]:
        return {"model": model, "messages": conversation.to_payload()}

    def parse_response(self, body: Dict[str, Any]) -> str:
        """Extract the assistant reply from a chat-completions body.

        An ``error.message`` field raises :class:`ProviderError`. A valid body
        without content gives the placeholder text so the turn is still
        recorded.
        """
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            raise ProviderError(str(error["message"]), provider=self.name)

        choices = body.get("choices") or []
        content = None
        if choices and isinstance(choices[0], dict):
            message = choices[0].get("message") or {}
            if isinstance(message, dict):
                content = message.get("content")
        if not content:
            return self.no_response_text
        return content

    @abstractmethod
    def list_models(self, credential: Optional[str]) -> List[str]:
        """Return the selectable model identifiers, in display order."""

    @contextmanager
    def translate_errors(self) -> Iterator[None]:
        """Map SDK exceptions onto :class:`TransportError` / :class:`ProviderError`."""
        try:
            yield
        except openai.APIConnectionError as exc:
            logger.warning("%s transport failure: %s", self.display_name, exc)
            raise TransportError(str(exc) or "connection failed", provider=self.name) from exc
        except openai.APIStatusError as exc:
            message = _error_message(exc.body) or exc.message
            logger.warning("%s returned HTTP %s: %s", self.display_name, exc.status_code, message)
            raise ProviderError(message, provider=self.name) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r})"


def _error_message(body: Any) -> Optional[str]:
    # The SDK usually unwraps {"error": {...}} already, but not for every server.
    if not isinstance(body, dict):
        return None
    if body.get("message"):
        return str(body["message"])
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None


class DeepSeekProvider(ChatProvider):
    name = "deepseek"
    display_name = "DeepSeek"
    env_var = "DEEPSEEK_API_KEY"
    default_base_url = "https://api.deepseek.com"

    MODELS = ["deepseek-chat", "deepseek-reasoner"]

    def list_models(self, credential: Optional[str]) -> List[str]:
        return list(self.MODELS)


class OpenAIProvider(ChatProvider):
    name = "openai"
    display_name = "OpenAI"
    env_var = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com/v1"

    def list_models(self, credential: Optional[str]) -> List[str]:
        if not credential:
            raise ProviderError("OpenAI model listing requires an API key", provider=self.name)
        logger.debug("Fetching model list from %s", self.base_url)
        with self.translate_errors():
            page = self.client(credential).models.list()
            return sorted(model.id for model in page)


PROVIDERS: Dict[str, type] = {
    DeepSeekProvider.name: DeepSeekProvider,
    OpenAIProvider.name: OpenAIProvider,
}
# Order of the startup menu: [0] DeepSeek, [1] OpenAI
PROVIDER_ORDER = [DeepSeekProvider.name, OpenAIProvider.name]


def get_provider(
    name: str,
    settings: Optional[Settings] = None,
    client_factory: ClientFactory = OpenAI,
) -> ChatProvider:
    """Instantiate the provider registered under *name*."""
    try:
        provider_cls = PROVIDERS[name]
    except KeyError:
        raise ConfigError(f"Unknown provider: {name}") from None
    settings = settings or Settings()
    return provider_cls(
        base_url=settings.base_urls.get(name),
        timeout=settings.timeout,
        client_factory=client_factory,
    )
