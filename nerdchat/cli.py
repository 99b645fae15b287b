"""Terminal chat client for DeepSeek and OpenAI models.

The controller owns the read-eval-print loop. Every turn appends the user's
message, sends the whole conversation to the active provider, appends the
reply and rewrites the history file.
"""
from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 – side-effect: history & line editing
import sys
from enum import Enum
from typing import Optional

from openai import OpenAI  # type: ignore
from rich.markup import escape
from rich.panel import Panel

from .core import (
    ConfigError,
    Conversation,
    ConversationStore,
    ProviderError,
    SessionContext,
    TransportError,
    ValidationError,
    ensure_credential,
    get_provider,
)
from .core.catalog import select_model
from .core.client import ChatClient
from .core.config import Settings
from .core.providers import PROVIDER_ORDER, PROVIDERS
from .utils import ERROR_LABEL, ROLE_LABELS, SYSTEM_LABEL, console, system_note
from .utils.log import configure_logging
from .utils.prompt import ConsoleInput, InputPort, parse_index

logger = logging.getLogger(__name__)

COMMANDS = {
    "/openai": "switch to OpenAI and pick a model",
    "/deepseek": "switch to DeepSeek and pick a model",
    "/models": "pick another model from the current provider",
    "/clear": "delete the conversation history",
    "/help": "show this list",
    "/quit": "exit",
}

COMMAND_HINT = "(Type your message, or use commands: /openai, /deepseek, /models, /clear, /quit)"


class State(Enum):
    SELECTING_PROVIDER = "selecting_provider"
    RESOLVING_CREDENTIAL = "resolving_credential"
    SELECTING_MODEL = "selecting_model"
    CHATTING = "chatting"
    FINISHED = "finished"


class ChatCLI:
    """High-level orchestration class for the interactive REPL."""

    def __init__(
        self,
        context: SessionContext,
        store: ConversationStore,
        client: ChatClient,
        input_port: Optional[InputPort] = None,
        settings: Optional[Settings] = None,
        client_factory=OpenAI,
    ):
        self.context = context
        self.store = store
        self.client = client
        self.input = input_port or ConsoleInput()
        self.settings = settings or Settings()
        self.client_factory = client_factory
        self.conversation: Conversation = store.load()
        self.state = State.SELECTING_PROVIDER

    def _set_state(self, state: State) -> None:
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    # -------------- Provider & model selection ---------------

    def choose_provider(self) -> str:
        """Ask for a provider by number until the answer is valid."""
        console.print(system_note("Select a provider:"))
        for idx, name in enumerate(PROVIDER_ORDER):
            console.print(f" \\[{idx}] {PROVIDERS[name].display_name}", highlight=False)

        while True:
            answer = self.input.ask("Enter the number of your choice: ")
            try:
                return PROVIDER_ORDER[parse_index(answer, len(PROVIDER_ORDER))]
            except ValidationError:
                console.print(system_note("Invalid choice. Please enter 0 or 1."))

    def activate_provider(self, name: str) -> None:
        """Make *name* the active provider, then resolve its key and a model."""
        provider = get_provider(name, self.settings, client_factory=self.client_factory)
        self.context.switch_provider(provider)
        self.resolve_and_select()

    def resolve_and_select(self) -> None:
        provider = self.context.provider
        self._set_state(State.RESOLVING_CREDENTIAL)
        ensure_credential(self.context, provider, self.input)
        self._set_state(State.SELECTING_MODEL)
        if select_model(self.context, self.input) is None:
            console.print(system_note("No model selected. Use /models to try again."))
        self._set_state(State.CHATTING)

    def start(self) -> None:
        """Drive the session from provider selection up to the chat state."""
        if self.context.provider is None:
            self._set_state(State.SELECTING_PROVIDER)
            self.activate_provider(self.choose_provider())
        elif not self.context.selected_model:
            self.resolve_and_select()
        else:
            self._set_state(State.CHATTING)

    # ---------------- Rendering ---------------

    def render(self) -> None:
        """Print the banner, the conversation so far and the command hint."""
        provider = self.context.provider
        provider_name = provider.display_name.upper() if provider else "-"
        model = self.context.selected_model or "-"
        console.print(
            Panel.fit(f"NerdChat CLI (Provider: {provider_name}, Model: {model})", style="bold magenta")
        )
        for message in self.conversation:
            self._print_message(message.role.value, message.content)
        console.print()
        console.print(system_note(COMMAND_HINT))

    @staticmethod
    def _print_message(role: str, content: str) -> None:
        label = ROLE_LABELS.get(role, SYSTEM_LABEL)
        console.print(f"{label}: {escape(content)}")

    # ---------------- Command handling ---------------

    def handle_command(self, line: str) -> bool:
        """Handle slash commands. Return False to exit REPL."""
        cmd = line.strip()

        if cmd == "/quit":
            console.print(system_note("Goodbye!"))
            self._set_state(State.FINISHED)
            return False

        elif cmd in ("/openai", "/deepseek"):
            name = cmd[1:]
            console.print(system_note(f"Switched to {PROVIDERS[name].display_name}. Now select a model."))
            self.activate_provider(name)

        elif cmd == "/models":
            if self.context.provider is None:
                console.print(system_note("No provider selected. Use /openai or /deepseek."))
            else:
                self._set_state(State.SELECTING_MODEL)
                select_model(self.context, self.input)
                self._set_state(State.CHATTING)

        elif cmd == "/clear":
            self.conversation = self.store.clear()
            console.print(system_note("Conversation history cleared."))

        elif cmd == "/help":
            for name, description in COMMANDS.items():
                console.print(f"  {name:<10} {description}", highlight=False)

        else:
            console.print(system_note(f"Unknown command: {escape(cmd)}"))

        return True

    # ---------------- Chat turn ---------------

    def chat_turn(self, text: str) -> None:
        """Run one turn: user message, provider call, assistant message, save."""
        provider = self.context.provider
        model = self.context.selected_model
        if provider is None or not model:
            console.print(system_note("No model selected. Use /models to pick one first."))
            return

        self.conversation = self.conversation.add_user_message(text)
        credential = ensure_credential(self.context, provider, self.input)
        try:
            reply = self.client.send(provider, model, self.conversation, credential)
        except (ProviderError, TransportError) as exc:
            reply = f"{provider.display_name} Error: {exc.message}"
            console.print(f"{ERROR_LABEL} {escape(reply)}")
        else:
            self._print_message("assistant", reply)

        self.conversation = self.conversation.add_assistant_message(reply)
        self.store.persist(self.conversation)

    # ---------------- Interaction loop ---------------

    def repl(self) -> int:
        """Run the interactive loop and return the process exit code."""
        try:
            self.start()
        except (EOFError, KeyboardInterrupt):
            console.print("\n" + system_note("Goodbye!"))
            return 0

        self.render()
        while True:
            try:
                line = self.input.ask("Message> ").strip()
                if not line:
                    continue
                if line.startswith("/"):
                    if not self.handle_command(line):
                        break
                    continue
                self.chat_turn(line)
            except (EOFError, KeyboardInterrupt):
                console.print("\n" + system_note("Goodbye!"))
                self._set_state(State.FINISHED)
                break
        return 0


# ---------------------------------------------------------------------------
# Entrypoint helpers (keeping it separate simplifies __main__ handling)
# ---------------------------------------------------------------------------

def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Interactive terminal chat with DeepSeek and OpenAI models.",
        epilog="In-session commands: " + ", ".join(COMMANDS),
    )
    return parser.parse_args(argv)


def run_cli(argv=None) -> None:
    _parse_args(argv)

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        context = SessionContext.from_env()
        store = ConversationStore(settings.history_file)
        cli = ChatCLI(context, store, ChatClient(), settings=settings)
        code = cli.repl()
    except ConfigError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":  # pragma: no cover
    run_cli()
