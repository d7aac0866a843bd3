"""
OpenAI-compatible model client

Covers the OpenAI API itself, OpenAI-compatible gateways (LiteLLM, Azure-style proxies)
and LMStudio.
"""

import os

import openai
from openai import OpenAI

from prompt_agent_core.domain.value_objects import ModelResponse
from prompt_agent_core.infrastructure.model_clients.base import ModelClient, RetryMixin

LMSTUDIO_PREFIX = "lmstudio/"
OPENAI_PREFIX = "openai/"


class OpenAICompatibleClient(RetryMixin, ModelClient):
    """Client using the OpenAI chat completions API"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 4096,
    ):
        """
        Args:
            model_name: Model name (e.g. gpt-4o-mini, openai/my-deployment, lmstudio/qwen2.5-7b)
            base_url: API endpoint (falls back to LMSTUDIO_BASE_URL / OPENAI_BASE_URL env vars)
            api_key: API key (falls back to LMSTUDIO_API_KEY / OPENAI_API_KEY env vars)
            timeout_seconds: Request timeout in seconds (default: 120)
            max_retries: Maximum number of retries (default: 3)
            retry_delay_seconds: Base delay for exponential backoff (default: 1.0)
            max_tokens: Maximum number of output tokens (default: 4096)
        """
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

        # Configuration priority: argument > environment variable > default value
        if model_name.startswith(LMSTUDIO_PREFIX):
            self.api_model_name = model_name.removeprefix(LMSTUDIO_PREFIX)
            base_url = base_url or os.environ.get("LMSTUDIO_BASE_URL", "http://localhost:1234/v1")
            api_key = api_key or os.environ.get("LMSTUDIO_API_KEY", "lm-studio")
        else:
            self.api_model_name = model_name.removeprefix(OPENAI_PREFIX)
            base_url = base_url or os.environ.get("OPENAI_BASE_URL")
            api_key = api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY is not set")

        self.base_url = base_url
        self.client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout_seconds)

    def invoke(self, system_prompt: str, question: str, temperature: float) -> ModelResponse:
        """
        Send a system prompt and question and retrieve the response

        The system prompt becomes the system message; an empty one is left out.
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": question})

        def _call() -> ModelResponse:
            response, latency_ms = self._timed(
                lambda: self.client.chat.completions.create(
                    model=self.api_model_name,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=self.max_tokens,
                )
            )
            usage = response.usage
            return ModelResponse(
                output=(response.choices[0].message.content or "").strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=(usage.prompt_tokens or 0) if usage else 0,
                output_tokens=(usage.completion_tokens or 0) if usage else 0,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(
                openai.APIConnectionError,
                openai.RateLimitError,
                openai.InternalServerError,
            ),
        )
