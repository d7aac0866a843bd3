"""
Domain Layer

Defines constants, entities, value objects and the strategy table that form the core
of the optimization loop.
Has no dependencies on external libraries.
"""

from prompt_agent_core.domain.constants import (
    DEFAULT_AGENT_MODEL,
    DEFAULT_EXECUTION_COUNT,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_MAX_ROUNDS,
    DEFAULT_TARGET_SCORE,
    DEFAULT_TEMPERATURE,
    FALLBACK_SCORE,
)
from prompt_agent_core.domain.entities import (
    EvaluationRecord,
    HealthCheckResult,
    PromptProject,
    PromptVersion,
    TestCase,
    TestResult,
    TrackerSummary,
)
from prompt_agent_core.domain.strategy import (
    STRATEGY_DESCRIPTIONS,
    STRATEGY_INSTRUCTIONS,
    Strategy,
)
from prompt_agent_core.domain.value_objects import (
    AgentResponse,
    DifferenceAnalysis,
    ModelResponse,
    ResponseCluster,
    RewriteResult,
    UserFeedback,
)

__all__ = [
    # constants
    "DEFAULT_AGENT_MODEL",
    "DEFAULT_EXECUTION_COUNT",
    "DEFAULT_JUDGE_MODEL",
    "DEFAULT_MAX_ROUNDS",
    "DEFAULT_TARGET_SCORE",
    "DEFAULT_TEMPERATURE",
    "FALLBACK_SCORE",
    # entities
    "EvaluationRecord",
    "HealthCheckResult",
    "PromptProject",
    "PromptVersion",
    "TestCase",
    "TestResult",
    "TrackerSummary",
    # strategy
    "STRATEGY_DESCRIPTIONS",
    "STRATEGY_INSTRUCTIONS",
    "Strategy",
    # value objects
    "AgentResponse",
    "DifferenceAnalysis",
    "ModelResponse",
    "ResponseCluster",
    "RewriteResult",
    "UserFeedback",
]
