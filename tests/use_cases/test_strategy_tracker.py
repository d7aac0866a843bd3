"""Tests for the strategy tracker"""

import logging

import pytest

from prompt_agent_core.domain.entities import TestResult
from prompt_agent_core.domain.strategy import Strategy
from prompt_agent_core.use_cases.strategy_tracker import (
    StrategyTracker,
    count_consecutive_declines,
    derive_strategy,
)


def _record_averages(tracker: StrategyTracker, averages: list[int]) -> None:
    """Record balanced rounds whose average equals each value"""
    for avg in averages:
        tracker.record_round(avg, avg)


class TestRecordRound:
    def test_assigns_round_numbers_and_average(self):
        tracker = StrategyTracker()
        first = tracker.record_round(80, 90, "p1", "p2")
        second = tracker.record_round(85, 90, "p2", "p3")

        assert first.round == 1
        assert second.round == 2
        assert first.average_score == 85
        assert second.average_score == 87
        assert second.previous_prompt == "p2"
        assert second.optimized_prompt == "p3"
        assert second.timestamp

    @pytest.mark.parametrize("stability,correctness", [(-1, 50), (50, 101)])
    def test_rejects_out_of_range_scores(self, stability, correctness):
        tracker = StrategyTracker()
        with pytest.raises(ValueError):
            tracker.record_round(stability, correctness)
        assert tracker.history == ()

    def test_history_is_read_only_snapshot(self):
        tracker = StrategyTracker()
        tracker.record_round(50, 50)
        assert isinstance(tracker.history, tuple)
        assert len(tracker.history) == 1

    def test_record_result(self):
        tracker = StrategyTracker()
        result = TestResult(responses=[], stability_score=70, correctness_score=60)
        record = tracker.record_result(result, "old", "new")
        assert record.average_score == 65
        assert record.previous_prompt == "old"


class TestTransitions:
    def test_starts_standard(self):
        tracker = StrategyTracker()
        assert tracker.strategy == Strategy.STANDARD
        assert tracker.instructions() == ""

    def test_single_round_never_changes_strategy(self):
        tracker = StrategyTracker()
        tracker.record_round(20, 90)
        assert tracker.strategy == Strategy.STANDARD

    def test_two_declines_go_conservative(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [80, 70, 60])
        assert tracker.strategy == Strategy.CONSERVATIVE
        assert "CONSERVATIVE" in tracker.instructions()

    def test_one_decline_is_not_enough(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [60, 80, 70])
        assert tracker.strategy == Strategy.STANDARD

    def test_stagnation_goes_aggressive(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [70, 71, 69])
        assert tracker.strategy == Strategy.AGGRESSIVE

    def test_stagnation_needs_three_rounds(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [70, 71])
        assert tracker.strategy == Strategy.STANDARD

    def test_stability_deficit(self):
        tracker = StrategyTracker()
        tracker.record_round(50, 50)
        tracker.record_round(40, 60)
        assert tracker.strategy == Strategy.STABILITY_FOCUS

    def test_correctness_deficit(self):
        tracker = StrategyTracker()
        tracker.record_round(50, 50)
        tracker.record_round(70, 50)
        assert tracker.strategy == Strategy.CORRECTNESS_FOCUS

    def test_skew_within_margin_is_ignored(self):
        tracker = StrategyTracker()
        tracker.record_round(50, 50)
        tracker.record_round(50, 65)
        assert tracker.strategy == Strategy.STANDARD

    def test_declines_take_priority_over_skew(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [80, 70])
        tracker.record_round(40, 60)
        assert tracker.strategy == Strategy.CONSERVATIVE

    def test_stagnation_takes_priority_over_skew(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [60, 60])
        tracker.record_round(50, 70)
        assert tracker.strategy == Strategy.AGGRESSIVE

    def test_recovery_returns_to_standard(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [80, 70, 60])
        assert tracker.strategy == Strategy.CONSERVATIVE
        tracker.record_round(70, 70)
        assert tracker.strategy == Strategy.STANDARD

    def test_small_improvement_keeps_strategy(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [80, 70, 60, 65])
        assert tracker.strategy == Strategy.CONSERVATIVE

    def test_only_recent_window_is_considered(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [90, 50, 51, 50, 51, 50])
        assert tracker.strategy == Strategy.AGGRESSIVE

    def test_strategy_change_is_logged(self, caplog):
        tracker = StrategyTracker()
        with caplog.at_level(logging.WARNING, logger="prompt_agent_core.use_cases.strategy_tracker"):
            _record_averages(tracker, [80, 70, 60])
        assert "conservative" in caplog.text


class TestDeriveStrategy:
    def test_is_a_pure_function_of_history(self):
        source = StrategyTracker()
        _record_averages(source, [80, 70, 60])
        history = list(source.history)

        assert derive_strategy(history, Strategy.STANDARD) == Strategy.CONSERVATIVE
        assert derive_strategy(history, Strategy.AGGRESSIVE) == Strategy.CONSERVATIVE

    def test_returns_current_for_short_history(self):
        assert derive_strategy([], Strategy.AGGRESSIVE) == Strategy.AGGRESSIVE

    def test_count_consecutive_declines(self):
        source = StrategyTracker()
        _record_averages(source, [50, 90, 80, 70])
        assert count_consecutive_declines(list(source.history)) == 2


class TestSummaryAndReset:
    def test_empty_summary(self):
        summary = StrategyTracker().summary()
        assert summary.total_rounds == 0
        assert summary.best_round == 0
        assert summary.current_strategy == Strategy.STANDARD

    def test_summary(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [60, 80, 75])
        summary = tracker.summary()

        assert summary.total_rounds == 3
        assert summary.initial_score == 60
        assert summary.current_score == 75
        assert summary.best_score == 80
        assert summary.best_round == 2
        assert summary.total_improvement == 15
        assert summary.strategy_description == tracker.strategy.description

    def test_reset(self):
        tracker = StrategyTracker()
        _record_averages(tracker, [80, 70, 60])
        tracker.reset()
        assert tracker.history == ()
        assert tracker.strategy == Strategy.STANDARD
