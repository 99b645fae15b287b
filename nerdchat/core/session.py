"""Session context: active provider, selected model and cached credentials."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from .errors import ConfigError
from .providers import PROVIDERS, ChatProvider

if TYPE_CHECKING:
    from ..utils.prompt import InputPort

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Everything that used to be process-wide state, in one object.

    ``credentials`` is keyed by provider name, so switching provider never
    forgets the key entered for the other one. ``environ`` is where missing
    keys are looked up before the user is asked.
    """

    provider: Optional[ChatProvider] = None
    selected_model: Optional[str] = None
    credentials: Dict[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SessionContext":
        """Seed the credential cache from each provider's environment variable."""
        env = os.environ if environ is None else environ
        credentials = {}
        for name, provider_cls in PROVIDERS.items():
            value = env.get(provider_cls.env_var)
            if value:
                credentials[name] = value
        return cls(credentials=credentials, environ=env)

    @property
    def ready(self) -> bool:
        return self.provider is not None and bool(self.selected_model)

    def switch_provider(self, provider: ChatProvider) -> None:
        logger.debug("Switching provider to %s", provider.name)
        self.provider = provider
        self.selected_model = None


def ensure_credential(context: SessionContext, provider: ChatProvider, input_port: "InputPort") -> str:
    """Return the credential for *provider*, prompting until one is entered."""
    if provider.name not in PROVIDERS:
        raise ConfigError(f"Unknown provider: {provider.name}")

    credential = context.credentials.get(provider.name)
    if credential:
        return credential

    credential = (context.environ.get(provider.env_var) or "").strip()
    while not credential:
        credential = input_port.ask(
            f"{provider.env_var} is not set. Enter your {provider.display_name} API key: ",
            secret=True,
        ).strip()
    context.credentials[provider.name] = credential
    return credential
