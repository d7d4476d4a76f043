from unittest.mock import patch

from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase, override_settings

from question_bank.helpers.llm_utils import (
    LLMQuotaExceededError,
    LLMRateLimitedError,
    LLMUpstreamError,
    get_llm_client,
    reset_llm_client,
)
from question_bank.tests.fakes import sdk_backed_client, status_error, timeout_error


class LanguageModelClientTests(SimpleTestCase):
    def test_returns_stripped_content(self):
        client, sdk = sdk_backed_client(reply="  Olá!  ")
        self.assertEqual(client.complete([{"role": "user", "content": "oi"}]), "Olá!")
        kwargs = sdk.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertEqual(kwargs["messages"], [{"role": "user", "content": "oi"}])

    def test_429_is_rate_limited(self):
        client, _ = sdk_backed_client(error=status_error(429))
        with self.assertRaises(LLMRateLimitedError) as ctx:
            client.complete([])
        self.assertEqual(ctx.exception.status_code, 429)

    def test_402_is_quota_exceeded(self):
        client, _ = sdk_backed_client(error=status_error(402))
        with self.assertRaises(LLMQuotaExceededError):
            client.complete([])

    def test_other_status_is_generic_failure(self):
        client, _ = sdk_backed_client(error=status_error(503))
        with self.assertRaises(LLMUpstreamError) as ctx:
            client.complete([])
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertNotIsInstance(ctx.exception, (LLMRateLimitedError, LLMQuotaExceededError))

    def test_timeout_is_generic_failure(self):
        client, _ = sdk_backed_client(error=timeout_error())
        with self.assertRaises(LLMUpstreamError):
            client.complete([])

    def test_missing_content_is_generic_failure(self):
        client, _ = sdk_backed_client(reply=None)
        with self.assertRaises(LLMUpstreamError):
            client.complete([])


class GetLLMClientTests(SimpleTestCase):
    def setUp(self):
        reset_llm_client()

    def tearDown(self):
        reset_llm_client()

    @override_settings(LLM_API_KEY=None)
    def test_missing_key_is_configuration_error(self):
        with self.assertRaises(ImproperlyConfigured):
            get_llm_client()

    @override_settings(LLM_API_KEY="sk-test", LLM_BASE_URL="https://llm.test/v1", LLM_TIMEOUT_SECONDS=12.0)
    def test_client_is_built_once_without_retries(self):
        with patch("question_bank.helpers.llm_utils.OpenAI") as openai_cls:
            first = get_llm_client()
            second = get_llm_client()
        self.assertIs(first, second)
        openai_cls.assert_called_once_with(
            api_key="sk-test", base_url="https://llm.test/v1", timeout=12.0, max_retries=0
        )
