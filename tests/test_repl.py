import io
import json
import os
from unittest.mock import patch

import httpx
import openai

from .test_base import BaseChatCLITest, fake_completion, reply_body
from nerdchat import Conversation, Message, Role
from nerdchat.cli import State, run_cli


class TestREPL(BaseChatCLITest):
    def test_repl_basic_interaction(self):
        """One turn from an empty history ends up on disk"""
        self.mock_sdk.chat.completions.create.return_value = fake_completion(reply_body("hi there"))
        cli = self.make_cli(["hello", "/quit"])

        self.assertEqual(cli.repl(), 0)

        expected = [Message(Role.USER, "hello"), Message(Role.ASSISTANT, "hi there")]
        self.assertEqual(list(cli.conversation), expected)
        self.assertEqual(
            json.loads(self.history_path.read_text(encoding="utf-8")),
            [{"role": "user", "content": "hello"}, {"role": "assistant", "content": "hi there"}],
        )
        self.assertEqual(cli.state, State.FINISHED)

    def test_error_payload_is_recorded(self):
        """A provider error becomes the assistant's reply and the loop goes on"""
        self.mock_sdk.chat.completions.create.side_effect = [
            fake_completion({"error": {"message": "rate limited"}}),
            fake_completion(reply_body("better now")),
        ]
        cli = self.make_cli(["hello", "again", "/quit"])

        self.assertEqual(cli.repl(), 0)

        contents = [m.content for m in cli.conversation]
        self.assertEqual(contents, ["hello", "OpenAI Error: rate limited", "again", "better now"])
        self.assertEqual(len(self.store.load()), 4)

    def test_transport_error_is_recorded(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.mock_sdk.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        cli = self.make_cli(["hello", "/quit"])

        cli.repl()

        self.assertEqual(cli.conversation[-1].role, Role.ASSISTANT)
        self.assertTrue(cli.conversation[-1].content.startswith("OpenAI Error:"))

    def test_history_is_restored_and_extended(self):
        self.mock_sdk.chat.completions.create.return_value = fake_completion(reply_body("second answer"))
        self.store.persist(Conversation().add_user_message("first").add_assistant_message("answer"))
        cli = self.make_cli(["second", "/quit"])

        cli.repl()

        sent = self.mock_sdk.chat.completions.create.call_args.kwargs["messages"]
        self.assertEqual([m["content"] for m in sent], ["first", "answer", "second"])
        self.assertIn("USER: first", self.printed())
        self.assertEqual(len(self.store.load()), 4)

    def test_startup_selects_provider_and_model(self):
        """Provider, key and model are asked for in order before chatting"""
        context = self.make_context(provider=None, model=None, credentials={})
        cli = self.make_cli(["7", "x", "0", "sk-deep", "abc", "1", "/quit"], context=context)

        self.assertEqual(cli.repl(), 0)

        self.assertEqual(cli.context.provider.name, "deepseek")
        self.assertEqual(cli.context.selected_model, "deepseek-reasoner")
        self.assertEqual(cli.context.credentials["deepseek"], "sk-deep")
        self.assertEqual(self.printed().count("Invalid choice. Please enter 0 or 1."), 2)
        self.assertEqual(self.input.remaining, 0)

    def test_chat_without_model_is_refused(self):
        context = self.make_context(provider="openai", model=None)
        cli = self.make_cli(["hello", "/quit"], context=context)

        # no model selected and no way to fetch one
        request = httpx.Request("GET", "https://api.openai.com/v1/models")
        self.mock_sdk.models.list.side_effect = openai.APIConnectionError(request=request)

        cli.repl()

        self.assertEqual(len(cli.conversation), 0)
        self.mock_sdk.chat.completions.create.assert_not_called()
        self.assertIn("Use /models", self.printed())

    def test_blank_lines_and_end_of_input(self):
        cli = self.make_cli(["", "   "])

        self.assertEqual(cli.repl(), 0)

        self.mock_sdk.chat.completions.create.assert_not_called()
        self.assertEqual(cli.state, State.FINISHED)
        self.assertFalse(self.history_path.exists())

    def test_blank_key_at_startup_is_asked_again(self):
        """Leaving the key prompt empty asks again instead of ending the session"""
        self.mock_sdk.models.list.return_value = [type("Model", (), {"id": "gpt-4o"})]
        context = self.make_context(provider=None, model=None, credentials={})
        cli = self.make_cli(["1", "", "", "sk-typed", "0", "/quit"], context=context)

        self.assertEqual(cli.repl(), 0)

        self.assertEqual(cli.context.selected_model, "gpt-4o")
        self.assertEqual(cli.context.credentials["openai"], "sk-typed")
        key_prompts = [p for p in self.input.prompts if "OPENAI_API_KEY is not set" in p]
        self.assertEqual(len(key_prompts), 3)
        self.assertEqual(self.input.remaining, 0)

    def test_blank_key_on_provider_switch(self):
        self.mock_sdk.models.list.return_value = [type("Model", (), {"id": "gpt-4o"})]
        context = self.make_context(provider="deepseek", model="deepseek-chat",
                                    credentials={"deepseek": "sk-deep"})
        cli = self.make_cli(["", "sk-typed", "0"], context=context)

        self.assertTrue(cli.handle_command("/openai"))

        self.assertEqual(cli.context.provider.name, "openai")
        self.assertEqual(cli.context.selected_model, "gpt-4o")
        self.assertEqual(cli.state, State.CHATTING)
        self.assertEqual(self.input.remaining, 0)


class TestRunCli(BaseChatCLITest):
    def setUp(self):
        super().setUp()
        logging_patcher = patch("nerdchat.cli.configure_logging")
        self.mock_configure_logging = logging_patcher.start()
        self.addCleanup(logging_patcher.stop)
        os.environ["NERDCHAT_HISTORY_FILE"] = str(self.history_path)

    @patch("builtins.input")
    def test_quit_exits_with_zero(self, mock_input):
        os.environ["DEEPSEEK_API_KEY"] = "sk-deep"
        mock_input.side_effect = ["0", "0", "/quit"]

        with self.assertRaises(SystemExit) as ctx:
            run_cli([])

        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("Goodbye!", self.printed())
        self.mock_configure_logging.assert_called_once_with("WARNING")

    def test_config_error_exits_with_one(self):
        os.environ["NERDCHAT_TIMEOUT"] = "soon"

        with patch("sys.stderr", new_callable=io.StringIO) as stderr:
            with self.assertRaises(SystemExit) as ctx:
                run_cli([])

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("NERDCHAT_TIMEOUT", stderr.getvalue())
