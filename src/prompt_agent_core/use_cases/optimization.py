"""
Optimization Sessions

Top-level control loop. Each round runs the test case in parallel, has the judge
evaluate the responses, records the scores with the strategy tracker and moves on to
the rewritten prompt.

Two session types:
- OptimizationSession: automatic; stops on the target score or the round budget
- GuidedSession: pauses after clustering the responses until the operator resumes it
  with feedback, and stops only when the operator ends it
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from prompt_agent_core.cancellation import CancellationToken, OptimizationCancelled
from prompt_agent_core.domain.constants import DEFAULT_MAX_ROUNDS, DEFAULT_TARGET_SCORE
from prompt_agent_core.domain.entities import EvaluationRecord, TestCase, TestResult
from prompt_agent_core.domain.strategy import Strategy
from prompt_agent_core.domain.value_objects import (
    AgentResponse,
    DifferenceAnalysis,
    UserFeedback,
)
from prompt_agent_core.infrastructure.model_clients.base import ModelClient
from prompt_agent_core.judging.difference_analyzer import DifferenceAnalyzer
from prompt_agent_core.judging.feedback_rewriter import FeedbackRewriter
from prompt_agent_core.judging.response_evaluator import ResponseEvaluator
from prompt_agent_core.use_cases.execution import execute_parallel
from prompt_agent_core.use_cases.strategy_tracker import StrategyTracker

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle of an optimization session."""
    IDLE = "idle"
    RUNNING = "running"
    AWAITING_FEEDBACK = "awaiting_feedback"
    STOPPED_ON_TARGET = "stopped_on_target"
    STOPPED_ON_BUDGET = "stopped_on_budget"
    STOPPED_ON_GUIDED_EXIT = "stopped_on_guided_exit"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({
    SessionState.STOPPED_ON_TARGET,
    SessionState.STOPPED_ON_BUDGET,
    SessionState.STOPPED_ON_GUIDED_EXIT,
    SessionState.FAILED,
    SessionState.CANCELLED,
})


class SessionStateError(Exception):
    """Operation not allowed in the session's current state"""
    pass


@dataclass
class RoundOutcome:
    """Everything produced by one completed round"""
    record: EvaluationRecord
    test_result: TestResult
    strategy: Strategy  # strategy that biased this round's evaluation
    analysis: DifferenceAnalysis | None = None
    feedback: UserFeedback | None = None
    changes: str = ""


@dataclass
class _PendingRound:
    test_case: TestCase
    responses: list[AgentResponse]
    test_result: TestResult
    analysis: DifferenceAnalysis
    strategy: Strategy


class _SessionBase:
    """State shared by automatic and guided sessions"""

    def __init__(
        self,
        agent_client: ModelClient,
        judge_client: ModelClient,
        *,
        max_workers: int | None = None,
        cancel_token: CancellationToken | None = None,
        on_round: Callable[[RoundOutcome], None] | None = None,
    ) -> None:
        self._agent_client = agent_client
        self._evaluator = ResponseEvaluator(judge_client)
        self._max_workers = max_workers
        self._cancel_token = cancel_token or CancellationToken()
        self._on_round = on_round
        self.tracker = StrategyTracker()
        self.rounds: list[RoundOutcome] = []
        self.state = SessionState.IDLE
        self.error: str | None = None
        self.current_test_case: TestCase | None = None

    @property
    def history(self) -> tuple[EvaluationRecord, ...]:
        return self.tracker.history

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def cancel(self) -> None:
        """Request cooperative cancellation; the interrupted round is not recorded."""
        self._cancel_token.cancel()

    def _start(self, test_case: TestCase) -> None:
        if self.state != SessionState.IDLE:
            raise SessionStateError(f"Session already started (state: {self.state.value})")
        self.current_test_case = test_case
        self.state = SessionState.RUNNING

    def _execute_and_evaluate(self, test_case: TestCase) -> tuple[list[AgentResponse], TestResult, Strategy]:
        strategy = self.tracker.strategy
        responses = execute_parallel(
            self._agent_client,
            test_case,
            cancel_token=self._cancel_token,
            max_workers=self._max_workers,
        )
        result = self._evaluator.evaluate(
            test_case,
            responses,
            strategy_instructions=self.tracker.instructions(),
            cancel_token=self._cancel_token,
        )
        return responses, result, strategy

    def _complete_round(self, outcome: RoundOutcome) -> None:
        self.rounds.append(outcome)
        self.current_test_case = self.current_test_case.with_system_prompt(outcome.record.optimized_prompt)
        if self._on_round is not None:
            self._on_round(outcome)

    def _stop_on_error(self, error: Exception) -> None:
        if isinstance(error, OptimizationCancelled):
            logger.info("Session cancelled after %d completed rounds", len(self.rounds))
            self.state = SessionState.CANCELLED
            return
        logger.error("Session failed after %d completed rounds: %s", len(self.rounds), error)
        self.state = SessionState.FAILED
        self.error = str(error) or type(error).__name__


class OptimizationSession(_SessionBase):
    """
    Automatic optimization loop

    Round 1 uses the caller's test case; every later round replaces the system prompt
    with the previous round's optimized prompt (the unchanged prompt when the judge
    proposed none). Stops when the average score reaches target_score or after
    max_rounds rounds.
    """

    def __init__(
        self,
        agent_client: ModelClient,
        judge_client: ModelClient,
        *,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        target_score: int = DEFAULT_TARGET_SCORE,
        max_workers: int | None = None,
        cancel_token: CancellationToken | None = None,
        on_round: Callable[[RoundOutcome], None] | None = None,
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        super().__init__(
            agent_client,
            judge_client,
            max_workers=max_workers,
            cancel_token=cancel_token,
            on_round=on_round,
        )
        self.max_rounds = max_rounds
        self.target_score = target_score

    def run(self, test_case: TestCase) -> SessionState:
        """
        Run rounds until a stop condition is met.

        Args:
            test_case: Round 1 input

        Returns:
            SessionState: The terminal state reached

        Raises:
            SessionStateError: If the session was already started
        """
        self._start(test_case)
        try:
            for _ in range(self.max_rounds):
                outcome = self._run_round(self.current_test_case)
                if outcome.record.average_score >= self.target_score:
                    logger.info(
                        "Target score %d reached in round %d (avg=%d)",
                        self.target_score, outcome.record.round, outcome.record.average_score,
                    )
                    self.state = SessionState.STOPPED_ON_TARGET
                    break
            else:
                logger.info("Round budget of %d exhausted", self.max_rounds)
                self.state = SessionState.STOPPED_ON_BUDGET
        except Exception as e:
            self._stop_on_error(e)
        return self.state

    def _run_round(self, test_case: TestCase) -> RoundOutcome:
        responses, result, strategy = self._execute_and_evaluate(test_case)
        self._cancel_token.raise_if_cancelled()

        next_prompt = result.optimized_prompt or test_case.system_prompt
        record = self.tracker.record_result(result, test_case.system_prompt, next_prompt)
        outcome = RoundOutcome(record=record, test_result=result, strategy=strategy)
        self._complete_round(outcome)
        return outcome


class GuidedSession(_SessionBase):
    """
    Human-in-the-loop optimization

    Each round executes and evaluates the test case (for the scores), clusters the
    successful responses by style and then pauses in AWAITING_FEEDBACK. resume()
    rewrites the prompt from the operator's feedback and completes the round;
    next_round() starts the following one; end() stops the session at any boundary.
    """

    def __init__(
        self,
        agent_client: ModelClient,
        judge_client: ModelClient,
        *,
        max_workers: int | None = None,
        cancel_token: CancellationToken | None = None,
        on_round: Callable[[RoundOutcome], None] | None = None,
    ) -> None:
        super().__init__(
            agent_client,
            judge_client,
            max_workers=max_workers,
            cancel_token=cancel_token,
            on_round=on_round,
        )
        self._analyzer = DifferenceAnalyzer(judge_client)
        self._rewriter = FeedbackRewriter(judge_client)
        self._pending: _PendingRound | None = None

    @property
    def pending_analysis(self) -> DifferenceAnalysis | None:
        return self._pending.analysis if self._pending is not None else None

    @property
    def pending_result(self) -> TestResult | None:
        return self._pending.test_result if self._pending is not None else None

    def start(self, test_case: TestCase) -> DifferenceAnalysis | None:
        """
        Run the first round up to the feedback pause.

        Returns:
            The round's clustering, or None if the session stopped (see state/error)
        """
        self._start(test_case)
        return self._begin_round()

    def next_round(self) -> DifferenceAnalysis | None:
        """Run the next round up to the feedback pause."""
        if self.state != SessionState.RUNNING:
            raise SessionStateError(f"Cannot start a round in state {self.state.value}")
        return self._begin_round()

    def resume(self, feedback: UserFeedback) -> RoundOutcome | None:
        """
        Complete the paused round with the operator's feedback.

        Without feedback (no cluster and no text) the rewriter is not invoked and the
        round is recorded with the prompt unchanged.

        Returns:
            The completed round, or None if the session stopped (see state/error)

        Raises:
            SessionStateError: If the session is not awaiting feedback
        """
        if self.state != SessionState.AWAITING_FEEDBACK or self._pending is None:
            raise SessionStateError(f"Session is not awaiting feedback (state: {self.state.value})")

        pending = self._pending
        self.state = SessionState.RUNNING
        try:
            changes = ""
            next_prompt = pending.test_case.system_prompt
            if feedback.has_feedback:
                rewrite = self._rewriter.rewrite(
                    pending.test_case,
                    pending.responses,
                    feedback,
                    analysis=pending.analysis,
                    cancel_token=self._cancel_token,
                )
                next_prompt = rewrite.optimized_prompt
                changes = rewrite.changes
            else:
                logger.info("No feedback given; keeping the prompt unchanged")
            self._cancel_token.raise_if_cancelled()
        except Exception as e:
            self._pending = None
            self._stop_on_error(e)
            return None

        self._pending = None
        record = self.tracker.record_result(pending.test_result, pending.test_case.system_prompt, next_prompt)
        outcome = RoundOutcome(
            record=record,
            test_result=pending.test_result,
            strategy=pending.strategy,
            analysis=pending.analysis,
            feedback=feedback,
            changes=changes,
        )
        try:
            self._complete_round(outcome)
        except Exception as e:
            self._stop_on_error(e)
            return None
        return outcome

    def end(self) -> SessionState:
        """Stop the session; a paused round that was not resumed is discarded."""
        if self.is_finished:
            raise SessionStateError(f"Session already finished (state: {self.state.value})")
        if self._pending is not None:
            logger.info("Discarding the paused round")
            self._pending = None
        self.state = SessionState.STOPPED_ON_GUIDED_EXIT
        return self.state

    def cancel(self) -> None:
        super().cancel()
        if self.state == SessionState.AWAITING_FEEDBACK:
            self._pending = None
            self.state = SessionState.CANCELLED

    def _begin_round(self) -> DifferenceAnalysis | None:
        test_case = self.current_test_case
        try:
            responses, result, strategy = self._execute_and_evaluate(test_case)
            analysis = self._analyzer.analyze(test_case, responses, cancel_token=self._cancel_token)
            self._cancel_token.raise_if_cancelled()
        except Exception as e:
            self._stop_on_error(e)
            return None

        self._pending = _PendingRound(
            test_case=test_case,
            responses=responses,
            test_result=result,
            analysis=analysis,
            strategy=strategy,
        )
        self.state = SessionState.AWAITING_FEEDBACK
        logger.info("Round %d awaiting feedback (%d clusters)", len(self.rounds) + 1, len(analysis.clusters))
        return analysis
