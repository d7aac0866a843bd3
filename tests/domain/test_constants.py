"""Tests for domain constants"""

from prompt_agent_core.domain.constants import (
    CONSECUTIVE_DECLINE_THRESHOLD,
    DEFAULT_EXECUTION_COUNT,
    DEFAULT_TEMPERATURE,
    FALLBACK_SCORE,
    HISTORY_WINDOW,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    PREVIEW_LENGTH,
    RECOVERY_MARGIN,
    SKEW_MARGIN,
    STAGNATION_DELTA,
    STAGNATION_MIN_ROUNDS,
)


class TestConstants:
    def test_defaults_within_bounds(self):
        assert DEFAULT_EXECUTION_COUNT >= 1
        assert MIN_TEMPERATURE <= DEFAULT_TEMPERATURE <= MAX_TEMPERATURE

    def test_tracker_thresholds(self):
        assert HISTORY_WINDOW == 5
        assert CONSECUTIVE_DECLINE_THRESHOLD == 2
        assert STAGNATION_MIN_ROUNDS == 3
        assert STAGNATION_DELTA == 3
        assert SKEW_MARGIN == 15
        assert RECOVERY_MARGIN == 5

    def test_fallback_score_is_neutral(self):
        assert FALLBACK_SCORE == 50

    def test_preview_length(self):
        assert PREVIEW_LENGTH == 100
