"""
Domain Value Objects

Defines immutable data structures representing values such as model responses,
single execution outcomes, and guided-mode artifacts.
"""

from dataclasses import dataclass, field


@dataclass
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class AgentResponse:
    """Outcome of one execution of a test case"""
    index: int
    content: str
    elapsed_ms: int
    success: bool
    error: str | None = None

    def __post_init__(self):
        if self.index < 1:
            raise ValueError("index must be 1 or greater")
        if self.elapsed_ms < 0:
            raise ValueError("elapsed_ms must be non-negative")


@dataclass
class ResponseCluster:
    """A group of responses sharing the same style"""
    name: str
    description: str
    indices: list[int] = field(default_factory=list)
    preview: str = ""


@dataclass
class DifferenceAnalysis:
    """Style clustering of one round's responses"""
    clusters: list[ResponseCluster] = field(default_factory=list)
    summary: str = ""
    suggested_directions: list[str] = field(default_factory=list)

    def cluster_names(self) -> list[str]:
        return [c.name for c in self.clusters]


@dataclass(frozen=True)
class UserFeedback:
    """Operator feedback for a guided round"""
    selected_cluster: str | None = None
    custom_feedback: str | None = None

    @property
    def has_feedback(self) -> bool:
        return bool(
            (self.selected_cluster and self.selected_cluster.strip())
            or (self.custom_feedback and self.custom_feedback.strip())
        )


@dataclass
class RewriteResult:
    """Prompt produced by the feedback-guided rewriter"""
    optimized_prompt: str
    changes: str = ""
    from_fallback: bool = False
