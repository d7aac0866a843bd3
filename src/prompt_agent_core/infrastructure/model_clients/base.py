"""
Model client base class and retry mixin

Every backend exposes the same call shape: a system prompt as instruction context,
a question as the single user turn, and a sampling temperature.
"""

import logging
import time
from abc import ABC, abstractmethod

from prompt_agent_core.domain.value_objects import ModelResponse

logger = logging.getLogger(__name__)


class RetryMixin:
    """Exponential backoff retry. Subclasses set self.max_retries and self.retry_delay_seconds."""

    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    def _with_retry(self, fn, retryable_exceptions=(Exception,)):
        """
        Call fn, retrying transient provider errors.

        Attempt n (0-based) that fails is followed by a sleep of
        retry_delay_seconds * 2**n, except after the last attempt.

        Args:
            fn: Zero-argument callable performing one provider request
            retryable_exceptions: Exception types treated as transient

        Returns:
            The return value of fn()

        Raises:
            ValueError: If max_retries is less than 1
            Exception: The last transient error once every attempt failed,
                or any non-transient error immediately
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

        model_name = getattr(self, "model_name", type(self).__name__)
        for attempt in range(self.max_retries):
            try:
                return fn()
            except retryable_exceptions as e:
                if attempt == self.max_retries - 1:
                    logger.error("%s: giving up after %d attempts: %s", model_name, self.max_retries, e)
                    raise
                delay = self.retry_delay_seconds * 2 ** attempt
                logger.warning(
                    "%s: attempt %d/%d failed (%s), retrying in %.1fs",
                    model_name, attempt + 1, self.max_retries, e, delay,
                )
                time.sleep(delay)


class ModelClient(ABC):
    """Abstract base class for model clients"""

    model_name: str

    @abstractmethod
    def invoke(self, system_prompt: str, question: str, temperature: float) -> ModelResponse:
        """Send the system prompt as instruction context and the question as the user turn"""
        pass

    @staticmethod
    def _timed(request):
        """Run one provider request; returns (raw response, latency in ms)."""
        start_time = time.time()
        raw = request()
        return raw, int((time.time() - start_time) * 1000)
