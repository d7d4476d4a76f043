# llm_utils.py

import logging

import openai
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from openai import OpenAI

logger = logging.getLogger(__name__)


class LLMError(Exception):
    # Base class for classified upstream failures
    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class LLMRateLimitedError(LLMError):
    """Upstream answered 429: the caller should wait and retry."""


class LLMQuotaExceededError(LLMError):
    """Upstream answered 402: credits or quota are exhausted."""


class LLMUpstreamError(LLMError):
    """Any other upstream failure (non-2xx, timeout, malformed reply)."""


def classify_status_error(exc):
    # Map an OpenAI SDK status error onto the taxonomy above
    status_code = getattr(exc, 'status_code', None)
    body = getattr(exc, 'body', None)
    if status_code is None and getattr(exc, 'response', None) is not None:
        status_code = exc.response.status_code

    if status_code == 429:
        return LLMRateLimitedError(str(exc), status_code=429, body=body)
    if status_code == 402:
        return LLMQuotaExceededError(str(exc), status_code=402, body=body)
    return LLMUpstreamError(str(exc), status_code=status_code, body=body)


class LanguageModelClient:
    """
    Thin wrapper over an OpenAI-compatible chat completions endpoint.

    Handlers receive an instance through get_llm_client() so tests can swap in
    a fake. No retries are attempted here: failures are classified and raised
    for the handler to report.
    """

    def __init__(self, api_key=None, base_url=None, model=None, timeout=None, client=None):
        self.model = model or settings.LLM_MODEL
        if client is None:
            client = OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS,
                max_retries=0,
            )
        self._client = client

    def complete(self, messages, **kwargs):
        # Send chat messages and return the assistant text.
        # Parameters:
        # - messages: chat message list in OpenAI format
        # - kwargs: extra chat completion parameters (temperature, max_tokens, ...)
        params = {
            "model": self.model,
            "messages": messages,
        }
        params.update(kwargs)
        try:
            response = self._client.chat.completions.create(**params)
        except openai.APIStatusError as e:
            raise classify_status_error(e) from e
        except openai.APITimeoutError as e:
            raise LLMUpstreamError(f"Tempo limite excedido ao chamar o modelo: {e}") from e
        except openai.APIError as e:
            raise LLMUpstreamError(str(e)) from e

        content = None
        if getattr(response, 'choices', None):
            message = response.choices[0].message
            content = getattr(message, 'content', None)

        if not content or not content.strip():
            raise LLMUpstreamError("Resposta inválida da API", body=str(response))
        return content.strip()


_client = None


def get_llm_client():
    # Process-wide client built from settings on first use
    global _client
    if _client is None:
        if not settings.LLM_API_KEY:
            raise ImproperlyConfigured("LLM_API_KEY não configurada")
        _client = LanguageModelClient(
            api_key=settings.LLM_API_KEY,
            base_url=settings.LLM_BASE_URL,
            model=settings.LLM_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
        logger.info(f"Language model client ready (model={settings.LLM_MODEL})")
    return _client


def reset_llm_client():
    global _client
    _client = None
