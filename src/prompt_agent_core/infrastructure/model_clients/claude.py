"""
Anthropic Claude model client
"""

import os

from anthropic import Anthropic, APIConnectionError, InternalServerError, RateLimitError

from prompt_agent_core.domain.value_objects import ModelResponse
from prompt_agent_core.infrastructure.model_clients.base import ModelClient, RetryMixin

# The Messages API accepts temperatures in [0, 1]
_MAX_TEMPERATURE = 1.0


class ClaudeClient(RetryMixin, ModelClient):
    """Claude client using the Anthropic API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 4096,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-sonnet-4-5-20250929)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            timeout_seconds: Request timeout in seconds (default: 120)
            max_retries: Maximum number of retries (default: 3)
            retry_delay_seconds: Base delay for exponential backoff (default: 1.0)
            max_tokens: Maximum number of output tokens (default: 4096)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds)

    def invoke(self, system_prompt: str, question: str, temperature: float) -> ModelResponse:
        """
        Send a system prompt and question and retrieve the response

        The system prompt is omitted from the request when empty, and the
        temperature is capped at 1.0 for this provider.
        """
        kwargs = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": min(temperature, _MAX_TEMPERATURE),
            "messages": [{"role": "user", "content": question}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        def _call() -> ModelResponse:
            response, latency_ms = self._timed(lambda: self.client.messages.create(**kwargs))
            text_blocks = [block.text for block in response.content or [] if getattr(block, "text", None)]
            usage = getattr(response, "usage", None)
            return ModelResponse(
                output="".join(text_blocks).strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=getattr(usage, "input_tokens", 0) or 0,
                output_tokens=getattr(usage, "output_tokens", 0) or 0,
            )

        return self._with_retry(
            _call,
            retryable_exceptions=(APIConnectionError, RateLimitError, InternalServerError),
        )
