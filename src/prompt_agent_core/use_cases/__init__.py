"""
Use Cases Layer

Aggregates the optimization logic and provides the use cases called from the runner.
"""

from prompt_agent_core.use_cases.execution import (
    execute_once,
    execute_parallel,
)
from prompt_agent_core.use_cases.strategy_tracker import (
    StrategyTracker,
    TrendSignals,
    count_consecutive_declines,
    derive_strategy,
    detect_trends,
)
from prompt_agent_core.use_cases.optimization import (
    TERMINAL_STATES,
    GuidedSession,
    OptimizationSession,
    RoundOutcome,
    SessionState,
    SessionStateError,
)
from prompt_agent_core.use_cases.health_check import (
    HEALTH_CHECK_PROMPT,
    health_check_model,
    run_health_check,
)

__all__ = [
    # execution
    "execute_once",
    "execute_parallel",
    # strategy tracker
    "StrategyTracker",
    "TrendSignals",
    "count_consecutive_declines",
    "derive_strategy",
    "detect_trends",
    # optimization
    "TERMINAL_STATES",
    "GuidedSession",
    "OptimizationSession",
    "RoundOutcome",
    "SessionState",
    "SessionStateError",
    # health_check
    "HEALTH_CHECK_PROMPT",
    "health_check_model",
    "run_health_check",
]
