"""
Domain Entities

Defines the primary data structures used by the optimization loop.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime

from prompt_agent_core.domain.constants import (
    DEFAULT_EXECUTION_COUNT,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
)
from prompt_agent_core.domain.strategy import Strategy
from prompt_agent_core.domain.value_objects import AgentResponse


@dataclass(frozen=True)
class TestCase:
    """Per-round input: the prompt under test and how to exercise it"""
    system_prompt: str
    question: str
    expected_answer: str = ""
    execution_count: int = DEFAULT_EXECUTION_COUNT
    temperature: float = DEFAULT_TEMPERATURE
    case_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    __test__ = False  # not a pytest class

    def __post_init__(self):
        if self.execution_count < 1:
            raise ValueError("execution_count must be at least 1")
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}"
            )

    def with_system_prompt(self, system_prompt: str) -> "TestCase":
        """Next round's test case: prompt replaced, everything else carried over"""
        return replace(self, system_prompt=system_prompt)


@dataclass
class TestResult:
    """Judge verdict for one round of executions"""
    responses: list[AgentResponse]
    stability_score: int
    correctness_score: int
    evaluation_report: str = ""
    suggestions: list[str] = field(default_factory=list)
    optimized_prompt: str | None = None
    parsed: bool = True
    executed_at: str = field(default_factory=lambda: datetime.now().isoformat())

    __test__ = False

    @property
    def average_score(self) -> int:
        return (self.stability_score + self.correctness_score) // 2


@dataclass(frozen=True)
class EvaluationRecord:
    """Outcome of one completed round"""
    round: int
    stability_score: int
    correctness_score: int
    average_score: int
    previous_prompt: str
    optimized_prompt: str
    timestamp: str


@dataclass
class TrackerSummary:
    """Summary of a session's round history"""
    total_rounds: int = 0
    initial_score: int = 0
    current_score: int = 0
    best_score: int = 0
    best_round: int = 0
    total_improvement: int = 0
    current_strategy: Strategy = Strategy.STANDARD
    strategy_description: str = Strategy.STANDARD.description


@dataclass
class HealthCheckResult:
    """Health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None


@dataclass
class PromptProject:
    """A named group of prompt versions"""
    name: str
    project_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    current_version_id: str | None = None
    version_count: int = 0


@dataclass
class PromptVersion:
    """One saved version of a prompt, optionally with its scores"""
    project_id: str
    version_number: int
    system_prompt: str
    question: str
    expected_answer: str
    stability_score: int | None = None
    correctness_score: int | None = None
    tags: list[str] = field(default_factory=list)
    note: str = ""
    version_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def is_best(self) -> bool:
        return "best" in self.tags

    @property
    def is_production(self) -> bool:
        return "production" in self.tags
