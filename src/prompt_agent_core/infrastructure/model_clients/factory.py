"""
Model client factory

Creates the appropriate client instance based on the model name.
"""

from __future__ import annotations

from prompt_agent_core.optimizer_config import OptimizerConfig, load_config
from prompt_agent_core.infrastructure.model_clients.base import ModelClient
from prompt_agent_core.infrastructure.model_clients.claude import ClaudeClient
from prompt_agent_core.infrastructure.model_clients.openai_compatible import (
    LMSTUDIO_PREFIX,
    OpenAICompatibleClient,
)
from prompt_agent_core.infrastructure.model_clients.vertex_ai import VertexAIClient


def create_client(
    model_name: str,
    config: OptimizerConfig | None = None,
    timeout_seconds: int | None = None,
) -> ModelClient:
    """
    Create the appropriate client based on the model name

    Args:
        model_name: Model name
        config: OptimizerConfig (loads from env if not provided)
        timeout_seconds: Overrides config.isolation.timeout_seconds (e.g. for the judge)

    Returns:
        ModelClient: The appropriate client instance
    """
    if config is None:
        config = load_config()

    timeout = timeout_seconds or config.isolation.timeout_seconds
    retries = config.isolation.max_retries
    retry_delay = config.isolation.retry_delay_seconds

    if model_name.startswith(LMSTUDIO_PREFIX):
        return OpenAICompatibleClient(
            model_name,
            base_url=config.lmstudio.base_url,
            api_key=config.lmstudio.api_key,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
    elif model_name.startswith("claude"):
        return ClaudeClient(model_name, timeout_seconds=timeout, max_retries=retries, retry_delay_seconds=retry_delay)
    elif model_name.startswith("gemini"):
        return VertexAIClient(model_name, timeout_seconds=timeout, max_retries=retries, retry_delay_seconds=retry_delay)
    else:
        return OpenAICompatibleClient(
            model_name,
            base_url=config.openai.base_url,
            api_key=config.openai.api_key,
            timeout_seconds=timeout,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )


def create_judge_client(config: OptimizerConfig | None = None) -> ModelClient:
    """Create the client for the judge model, with the judge's own timeout and retries"""
    if config is None:
        config = load_config()
    judge_config = OptimizerConfig.from_dict(config.to_dict())
    judge_config.isolation.max_retries = config.judge.max_retries
    return create_client(
        config.judge.judge_model,
        judge_config,
        timeout_seconds=config.judge.timeout_seconds,
    )
