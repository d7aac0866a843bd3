"""
Model client package

Provides a unified interface to each LLM provider.
"""

from prompt_agent_core.infrastructure.model_clients.base import ModelClient
from prompt_agent_core.infrastructure.model_clients.factory import create_client, create_judge_client
from prompt_agent_core.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "create_client", "create_judge_client"]
