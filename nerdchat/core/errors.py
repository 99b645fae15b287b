"""Exception hierarchy for NerdChat.

Every error raised by the session engine inherits from :class:`NerdChatError`
so callers can either catch the whole family or a single category:

* :class:`TransportError`  - the network call itself failed
* :class:`ProviderError`   - the provider answered with an explicit error payload
* :class:`ConfigError`     - unrecognised provider or invalid configuration (fatal)
* :class:`ValidationError` - malformed interactive input (re-prompted)
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class NerdChatError(Exception):
    """Base exception for all NerdChat errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(NerdChatError):
    """Raised when the remote endpoint could not be reached."""

    def __init__(self, message: str, provider: str = ""):
        self.provider = provider
        super().__init__(message, details={"provider": provider})


class ProviderError(NerdChatError):
    """Raised when the provider responds with an error payload."""

    def __init__(self, message: str, provider: str = ""):
        self.provider = provider
        super().__init__(message, details={"provider": provider})


class ConfigError(NerdChatError):
    """Raised for an unknown provider tag or an invalid setting."""


class ValidationError(NerdChatError):
    """Raised when interactive input cannot be parsed."""

    def __init__(self, message: str, value: str = ""):
        self.value = value
        super().__init__(message, details={"value": value})
