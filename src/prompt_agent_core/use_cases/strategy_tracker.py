"""
Strategy Tracker (meta-evaluator)

Keeps a session's round history and re-derives the evaluator strategy after every
recorded round from the most recent rounds.

Transition priority (first match wins):
1. two or more consecutive declines       -> CONSERVATIVE
2. stagnation over 3+ rounds              -> AGGRESSIVE
3. stability well below correctness       -> STABILITY_FOCUS
4. correctness well below stability       -> CORRECTNESS_FOCUS
5. non-standard and a clear improvement   -> STANDARD
6. otherwise unchanged
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from prompt_agent_core.domain.constants import (
    CONSECUTIVE_DECLINE_THRESHOLD,
    HISTORY_WINDOW,
    MAX_SCORE,
    MIN_ROUNDS_FOR_ANALYSIS,
    MIN_SCORE,
    RECOVERY_MARGIN,
    SKEW_MARGIN,
    STAGNATION_DELTA,
    STAGNATION_MIN_ROUNDS,
)
from prompt_agent_core.domain.entities import EvaluationRecord, TestResult, TrackerSummary
from prompt_agent_core.domain.strategy import Strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendSignals:
    """Trend flags computed over the recent window"""
    consecutive_declines: int
    stagnant: bool
    stability_deficit: bool
    correctness_deficit: bool
    improvement: int | None  # newest average minus the previous one


def count_consecutive_declines(window: list[EvaluationRecord]) -> int:
    """Walk back from the newest round counting strict decreases of the average score."""
    declines = 0
    for i in range(len(window) - 1, 0, -1):
        if window[i].average_score < window[i - 1].average_score:
            declines += 1
        else:
            break
    return declines


def detect_trends(window: list[EvaluationRecord]) -> TrendSignals:
    """Compute the trend flags for a non-empty window (oldest first)."""
    newest = window[-1]
    stagnant = (
        len(window) >= STAGNATION_MIN_ROUNDS
        and abs(newest.average_score - window[0].average_score) < STAGNATION_DELTA
    )
    improvement = newest.average_score - window[-2].average_score if len(window) >= 2 else None
    return TrendSignals(
        consecutive_declines=count_consecutive_declines(window),
        stagnant=stagnant,
        stability_deficit=newest.stability_score < newest.correctness_score - SKEW_MARGIN,
        correctness_deficit=newest.correctness_score < newest.stability_score - SKEW_MARGIN,
        improvement=improvement,
    )


def derive_strategy(history: list[EvaluationRecord], current: Strategy) -> Strategy:
    """
    Derive the next strategy from the raw round history.

    Stateless apart from the current strategy, which only matters for the
    return-to-standard rule.

    Args:
        history: All recorded rounds, oldest first
        current: The strategy active before the newest round was recorded

    Returns:
        Strategy: The strategy to use for the next evaluation
    """
    if len(history) < MIN_ROUNDS_FOR_ANALYSIS:
        return current

    signals = detect_trends(history[-HISTORY_WINDOW:])

    if signals.consecutive_declines >= CONSECUTIVE_DECLINE_THRESHOLD:
        return Strategy.CONSERVATIVE
    if signals.stagnant:
        return Strategy.AGGRESSIVE
    if signals.stability_deficit:
        return Strategy.STABILITY_FOCUS
    if signals.correctness_deficit:
        return Strategy.CORRECTNESS_FOCUS
    if (
        current != Strategy.STANDARD
        and signals.improvement is not None
        and signals.improvement > RECOVERY_MARGIN
    ):
        return Strategy.STANDARD
    return current


class StrategyTracker:
    """
    Per-session round history and active strategy

    Owned by exactly one optimization session, which records rounds one at a
    time.
    """

    def __init__(self) -> None:
        self._history: list[EvaluationRecord] = []
        self._strategy = Strategy.STANDARD

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def history(self) -> tuple[EvaluationRecord, ...]:
        return tuple(self._history)

    def instructions(self) -> str:
        """Instruction fragment for the next evaluator call (empty for STANDARD)."""
        return self._strategy.instructions

    def record_result(self, result: TestResult, previous_prompt: str, optimized_prompt: str) -> EvaluationRecord:
        """Record a round from the evaluator's TestResult."""
        return self.record_round(
            result.stability_score,
            result.correctness_score,
            previous_prompt,
            optimized_prompt,
        )

    def record_round(
        self,
        stability_score: int,
        correctness_score: int,
        previous_prompt: str = "",
        optimized_prompt: str = "",
    ) -> EvaluationRecord:
        """
        Append one completed round and re-derive the strategy.

        Args:
            stability_score: Stability score (0-100)
            correctness_score: Correctness score (0-100)
            previous_prompt: Prompt used in this round
            optimized_prompt: Prompt produced for the next round

        Returns:
            EvaluationRecord: The appended record

        Raises:
            ValueError: If a score is outside 0-100
        """
        for name, value in (("stability_score", stability_score), ("correctness_score", correctness_score)):
            if not MIN_SCORE <= value <= MAX_SCORE:
                raise ValueError(f"{name} must be between {MIN_SCORE} and {MAX_SCORE}: {value}")

        record = EvaluationRecord(
            round=len(self._history) + 1,
            stability_score=stability_score,
            correctness_score=correctness_score,
            average_score=(stability_score + correctness_score) // 2,
            previous_prompt=previous_prompt,
            optimized_prompt=optimized_prompt,
            timestamp=datetime.now().isoformat(),
        )
        self._history.append(record)
        logger.info(
            "Recorded round %d: stability=%d, correctness=%d, avg=%d",
            record.round, record.stability_score, record.correctness_score, record.average_score,
        )

        previous_strategy = self._strategy
        self._strategy = derive_strategy(self._history, previous_strategy)
        if self._strategy != previous_strategy:
            if self._strategy in (Strategy.CONSERVATIVE, Strategy.AGGRESSIVE):
                logger.warning("Strategy changed: %s -> %s", previous_strategy.value, self._strategy.value)
            else:
                logger.info("Strategy changed: %s -> %s", previous_strategy.value, self._strategy.value)
        return record

    def summary(self) -> TrackerSummary:
        """Summarize the history (all zeros when no round has been recorded)."""
        if not self._history:
            return TrackerSummary()

        first = self._history[0]
        last = self._history[-1]
        best = max(self._history, key=lambda r: r.average_score)
        return TrackerSummary(
            total_rounds=len(self._history),
            initial_score=first.average_score,
            current_score=last.average_score,
            best_score=best.average_score,
            best_round=best.round,
            total_improvement=last.average_score - first.average_score,
            current_strategy=self._strategy,
            strategy_description=self._strategy.description,
        )

    def reset(self) -> None:
        """Clear the history and return to the STANDARD strategy."""
        self._history.clear()
        self._strategy = Strategy.STANDARD
        logger.info("Strategy tracker reset to standard")
