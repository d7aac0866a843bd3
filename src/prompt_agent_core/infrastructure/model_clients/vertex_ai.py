"""
Gemini model client (Google GenAI SDK against Vertex AI)
"""

import os

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai import errors as genai_errors
from google.genai.types import GenerateContentConfig, HttpOptions

from prompt_agent_core.domain.value_objects import ModelResponse
from prompt_agent_core.infrastructure.model_clients.base import ModelClient, RetryMixin

# The GenAI SDK raises its own ServerError for 5xx; older transports surface api_core errors
_RETRYABLE = (
    genai_errors.ServerError,
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
    google_exceptions.ResourceExhausted,
)


class VertexAIClient(RetryMixin, ModelClient):
    """Gemini client; the system prompt travels as system_instruction"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Gemini model (e.g. gemini-2.5-flash)
            project_id: GCP project (default: GCP_PROJECT_ID)
            location: Vertex AI region (default: GCP_LOCATION, then "global")
            timeout_seconds: Per-request timeout
            max_retries: Attempts per invoke() before the error propagates
            retry_delay_seconds: Base delay for exponential backoff
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or os.environ.get("GCP_LOCATION", "global")
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # HttpOptions takes the timeout in milliseconds
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )

    def invoke(self, system_prompt: str, question: str, temperature: float) -> ModelResponse:
        config = GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_prompt or None,
        )

        def _call() -> ModelResponse:
            response, latency_ms = self._timed(
                lambda: self.client.models.generate_content(
                    model=self.model_name,
                    contents=question,
                    config=config,
                )
            )
            usage = getattr(response, "usage_metadata", None)
            return ModelResponse(
                output=(response.text or "").strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
                output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            )

        return self._with_retry(_call, retryable_exceptions=_RETRYABLE)
