"""Tests for domain entities and value objects"""

import dataclasses

import pytest

from prompt_agent_core.domain.entities import (
    EvaluationRecord,
    PromptVersion,
    TestCase,
    TestResult,
    TrackerSummary,
)
from prompt_agent_core.domain.strategy import Strategy
from prompt_agent_core.domain.value_objects import (
    AgentResponse,
    DifferenceAnalysis,
    ResponseCluster,
    UserFeedback,
)


class TestTestCase:
    def test_defaults(self):
        case = TestCase(system_prompt="Answer tersely", question="2+2?")
        assert case.expected_answer == ""
        assert case.execution_count == 3
        assert case.temperature == 0.7
        assert case.case_id

    def test_rejects_zero_execution_count(self):
        with pytest.raises(ValueError, match="execution_count"):
            TestCase(system_prompt="p", question="q", execution_count=0)

    @pytest.mark.parametrize("temperature", [-0.1, 2.1])
    def test_rejects_temperature_out_of_range(self, temperature):
        with pytest.raises(ValueError, match="temperature"):
            TestCase(system_prompt="p", question="q", temperature=temperature)

    def test_accepts_temperature_bounds(self):
        assert TestCase(system_prompt="p", question="q", temperature=0.0).temperature == 0.0
        assert TestCase(system_prompt="p", question="q", temperature=2.0).temperature == 2.0

    def test_with_system_prompt_carries_other_fields(self):
        case = TestCase(
            system_prompt="v1", question="q", expected_answer="a",
            execution_count=5, temperature=1.2,
        )
        nxt = case.with_system_prompt("v2")
        assert nxt.system_prompt == "v2"
        assert nxt.question == "q"
        assert nxt.expected_answer == "a"
        assert nxt.execution_count == 5
        assert nxt.temperature == 1.2
        assert nxt.case_id == case.case_id
        assert case.system_prompt == "v1"

    def test_is_immutable(self):
        case = TestCase(system_prompt="p", question="q")
        with pytest.raises(dataclasses.FrozenInstanceError):
            case.system_prompt = "other"


class TestAgentResponse:
    def test_failure_fields(self):
        r = AgentResponse(index=2, content="", elapsed_ms=15, success=False, error="timeout")
        assert r.success is False
        assert r.error == "timeout"

    def test_rejects_index_below_one(self):
        with pytest.raises(ValueError, match="index"):
            AgentResponse(index=0, content="x", elapsed_ms=1, success=True)

    def test_rejects_negative_elapsed(self):
        with pytest.raises(ValueError, match="elapsed_ms"):
            AgentResponse(index=1, content="x", elapsed_ms=-1, success=True)


class TestUserFeedback:
    def test_empty(self):
        assert UserFeedback().has_feedback is False

    def test_blank_strings_are_not_feedback(self):
        assert UserFeedback(selected_cluster="  ", custom_feedback="\n").has_feedback is False

    def test_selected_cluster_only(self):
        assert UserFeedback(selected_cluster="Concise").has_feedback is True

    def test_custom_text_only(self):
        assert UserFeedback(custom_feedback="shorter please").has_feedback is True


class TestTestResult:
    def test_average_score_is_integer_mean(self):
        result = TestResult(responses=[], stability_score=85, correctness_score=90)
        assert result.average_score == 87
        assert result.parsed is True


class TestEvaluationRecord:
    def test_asdict(self):
        record = EvaluationRecord(
            round=1, stability_score=80, correctness_score=60, average_score=70,
            previous_prompt="a", optimized_prompt="b", timestamp="ts",
        )
        assert dataclasses.asdict(record)["average_score"] == 70


class TestTrackerSummary:
    def test_defaults(self):
        summary = TrackerSummary()
        assert summary.total_rounds == 0
        assert summary.current_strategy == Strategy.STANDARD
        assert summary.strategy_description == Strategy.STANDARD.description


class TestPromptVersion:
    def test_tag_properties(self):
        version = PromptVersion(
            project_id="p", version_number=1, system_prompt="s",
            question="q", expected_answer="a", tags=["best", "production"],
        )
        assert version.is_best is True
        assert version.is_production is True


class TestDifferenceAnalysis:
    def test_cluster_names(self):
        analysis = DifferenceAnalysis(clusters=[
            ResponseCluster(name="Concise", description="", indices=[1]),
            ResponseCluster(name="Detailed", description="", indices=[2]),
        ])
        assert analysis.cluster_names() == ["Concise", "Detailed"]
