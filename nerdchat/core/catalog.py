"""Model catalog: list a provider's models and let the user pick one."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .errors import NerdChatError, ProviderError, TransportError, ValidationError
from .session import SessionContext, ensure_credential
from ..utils import Ansi, console, system_note
from ..utils.prompt import parse_index

if TYPE_CHECKING:
    from ..utils.prompt import InputPort

logger = logging.getLogger(__name__)


def list_models(context: SessionContext, input_port: "InputPort") -> List[str]:
    """Return the model identifiers of the active provider.

    Providers with a live catalog need a credential, which is resolved (and
    possibly prompted for) first.
    """
    provider = context.provider
    if provider is None:
        raise NerdChatError("No provider selected")
    credential = ensure_credential(context, provider, input_port)
    return provider.list_models(credential)


def choose_index(options: List[str], input_port: "InputPort") -> int:
    """Prompt until the user enters a valid index into *options*."""
    while True:
        answer = input_port.ask("Select a model (enter the number): ")
        try:
            return parse_index(answer, len(options))
        except ValidationError as exc:
            console.print(system_note(exc.message))


def select_model(context: SessionContext, input_port: "InputPort") -> Optional[str]:
    """Fetch the catalog, print it and store the user's choice in *context*.

    Returns the selected model, or ``None`` when the catalog could not be
    fetched; the previous selection is left untouched in that case.
    """
    provider = context.provider
    if provider is None:
        raise NerdChatError("No provider selected")

    console.print(
        system_note(f"Fetching available models for provider: {provider.display_name.upper()}...")
    )
    try:
        models = list_models(context, input_port)
    except (ProviderError, TransportError) as exc:
        console.print(system_note(f"{provider.display_name} Error: {exc.message}"))
        return None

    if not models:
        console.print(system_note(f"{provider.display_name} returned no models."))
        return None

    console.print(system_note(f"Available {provider.display_name} Models:"))
    for idx, model in enumerate(models):
        marker = Ansi.style(" <- current", Ansi.FG_GREEN) if model == context.selected_model else ""
        console.print(f"\\[{idx}] {model}{marker}", highlight=False)

    choice = models[choose_index(models, input_port)]
    context.selected_model = choice
    logger.debug("Selected model %s", choice)
    console.print(system_note(f"Selected model: {choice}"))
    return choice
