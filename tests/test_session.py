import os

from .test_base import BaseChatCLITest
from nerdchat import SessionContext
from nerdchat.core import ConfigError, ensure_credential
from nerdchat.core.providers import OpenAIProvider
from nerdchat.utils.prompt import ScriptedInput


class BogusProvider(OpenAIProvider):
    name = "bogus"


class TestSessionContext(BaseChatCLITest):
    def test_from_env_seeds_credentials(self):
        context = SessionContext.from_env({"OPENAI_API_KEY": "sk-env", "DEEPSEEK_API_KEY": ""})
        self.assertEqual(context.credentials, {"openai": "sk-env"})
        self.assertEqual(context.environ["OPENAI_API_KEY"], "sk-env")
        self.assertIsNone(context.provider)
        self.assertFalse(context.ready)

    def test_switch_provider_unsets_model(self):
        context = self.make_context(provider="openai", model="gpt-4o")
        self.assertTrue(context.ready)

        context.switch_provider(self.make_provider("deepseek"))

        self.assertEqual(context.provider.name, "deepseek")
        self.assertIsNone(context.selected_model)
        self.assertFalse(context.ready)


class TestCredentials(BaseChatCLITest):
    def test_cached_credential_is_returned(self):
        context = self.make_context(credentials={"openai": "sk-cached"})
        port = ScriptedInput([])
        self.assertEqual(ensure_credential(context, self.make_provider("openai"), port), "sk-cached")
        self.assertEqual(port.prompts, [])

    def test_environment_credential_on_demand(self):
        context = self.make_context(credentials={}, environ={"DEEPSEEK_API_KEY": "sk-from-env"})
        port = ScriptedInput([])

        self.assertEqual(ensure_credential(context, self.make_provider("deepseek"), port), "sk-from-env")
        self.assertEqual(context.credentials["deepseek"], "sk-from-env")

    def test_injected_environment_isolates_sessions(self):
        """Only the context's own environment is consulted"""
        os.environ["DEEPSEEK_API_KEY"] = "sk-process"
        context = self.make_context(credentials={}, environ={})
        port = ScriptedInput(["sk-typed"])

        self.assertEqual(ensure_credential(context, self.make_provider("deepseek"), port), "sk-typed")
        self.assertEqual(len(port.prompts), 1)

    def test_blank_answers_are_asked_again(self):
        context = self.make_context(credentials={})
        port = ScriptedInput(["", "   ", "sk-typed"])

        self.assertEqual(ensure_credential(context, self.make_provider("openai"), port), "sk-typed")
        self.assertEqual(len(port.prompts), 3)
        self.assertEqual(context.credentials["openai"], "sk-typed")

    def test_prompt_once_and_cache(self):
        """A missing key is asked for once and then reused"""
        context = self.make_context(credentials={})
        port = ScriptedInput(["  sk-typed  "])
        provider = self.make_provider("deepseek")

        self.assertEqual(ensure_credential(context, provider, port), "sk-typed")
        self.assertEqual(ensure_credential(context, provider, port), "sk-typed")
        self.assertEqual(len(port.prompts), 1)
        self.assertIn("DEEPSEEK_API_KEY is not set", port.prompts[0])

    def test_credentials_are_scoped_per_provider(self):
        context = self.make_context(credentials={"openai": "sk-openai"})
        port = ScriptedInput(["sk-deepseek"])

        ensure_credential(context, self.make_provider("deepseek"), port)

        self.assertEqual(context.credentials, {"openai": "sk-openai", "deepseek": "sk-deepseek"})

    def test_unknown_provider(self):
        context = self.make_context(credentials={})
        with self.assertRaises(ConfigError):
            ensure_credential(context, BogusProvider(), ScriptedInput([]))
