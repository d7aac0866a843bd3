"""Tests for the strategy table"""

from prompt_agent_core.domain.strategy import (
    STRATEGY_DESCRIPTIONS,
    STRATEGY_INSTRUCTIONS,
    Strategy,
)


class TestStrategyTable:
    def test_every_strategy_has_description_and_instructions(self):
        for strategy in Strategy:
            assert strategy in STRATEGY_DESCRIPTIONS
            assert strategy in STRATEGY_INSTRUCTIONS

    def test_standard_has_no_instructions(self):
        assert Strategy.STANDARD.instructions == ""

    def test_non_standard_strategies_have_instructions(self):
        for strategy in Strategy:
            if strategy is Strategy.STANDARD:
                continue
            assert strategy.instructions.strip()

    def test_instruction_headings(self):
        assert "CONSERVATIVE" in Strategy.CONSERVATIVE.instructions
        assert "AGGRESSIVE" in Strategy.AGGRESSIVE.instructions
        assert "STABILITY" in Strategy.STABILITY_FOCUS.instructions
        assert "CORRECTNESS" in Strategy.CORRECTNESS_FOCUS.instructions

    def test_string_values(self):
        assert Strategy("conservative") is Strategy.CONSERVATIVE
        assert Strategy.STABILITY_FOCUS.value == "stability_focus"
