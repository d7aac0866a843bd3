"""
Response Evaluator

Sends the full set of run outputs to a judge model and parses its verdict into a
TestResult (stability, correctness, report, suggestions, rewritten prompt).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_agent_core.infrastructure.model_clients.base import ModelClient

from prompt_agent_core.cancellation import CancellationToken
from prompt_agent_core.domain.constants import (
    FALLBACK_SCORE,
    JUDGE_TEMPERATURE,
    MAX_SCORE,
    MIN_SCORE,
)
from prompt_agent_core.domain.entities import TestCase, TestResult
from prompt_agent_core.domain.value_objects import AgentResponse
from prompt_agent_core.judging.json_extract import extract_json_object, get_field

logger = logging.getLogger(__name__)

PARSE_FAILURE_SUGGESTION = "Could not parse the evaluation result; see the full report"

EVALUATOR_SYSTEM_PROMPT = "\n".join([
    "You are an expert prompt evaluator. You analyse the results of running the same",
    "system prompt several times against a language model and assess:",
    "1. Stability: how consistent the outputs are across runs (0-100)",
    "2. Correctness: how well the outputs match the expected answer (0-100)",
    "3. Suggestions: how to improve the system prompt to get better results",
    "4. Optimized prompt: the complete system prompt rewritten according to your suggestions",
    "",
    "Reply in JSON with exactly this shape:",
    "{",
    '    "stabilityScore": 85,',
    '    "correctnessScore": 90,',
    '    "evaluationReport": "Detailed evaluation report...",',
    '    "suggestions": ["Suggestion 1", "Suggestion 2"],',
    '    "optimizedPrompt": "The complete optimized system prompt..."',
    "}",
])


class ResponseEvaluator:
    """
    Judge-model evaluator for one round of executions

    The instruction text sent to the judge is prefixed with the active strategy's
    instruction fragment, so the judge's emphasis follows the session history.
    """

    def __init__(self, judge_client: ModelClient) -> None:
        self._client = judge_client

    def evaluate(
        self,
        test_case: TestCase,
        responses: list[AgentResponse],
        *,
        strategy_instructions: str = "",
        cancel_token: CancellationToken | None = None,
    ) -> TestResult:
        """
        Have the judge model evaluate the responses

        Args:
            test_case: The test case that produced the responses
            responses: All responses of the round, ordered by index
            strategy_instructions: Instruction fragment of the active strategy
            cancel_token: Cancellation signal checked before the judge call

        Returns:
            TestResult (neutral 50/50 scores when the verdict cannot be parsed)

        Raises:
            OptimizationCancelled: When cancel_token is set
            Exception: Transport errors from the judge client
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        logger.info("Evaluating %d responses for test case %s", len(responses), test_case.case_id)
        response = self._client.invoke(
            self._build_system_prompt(strategy_instructions),
            self._build_prompt(test_case, responses),
            JUDGE_TEMPERATURE,
        )
        result = self._parse_verdict(response.output, responses)
        logger.info(
            "Evaluation completed. Stability: %d, Correctness: %d",
            result.stability_score, result.correctness_score,
        )
        return result

    @staticmethod
    def _build_system_prompt(strategy_instructions: str) -> str:
        """Strategy fragment first, then the evaluator instructions"""
        if not strategy_instructions:
            return EVALUATOR_SYSTEM_PROMPT
        return f"{strategy_instructions}\n{EVALUATOR_SYSTEM_PROMPT}"

    @staticmethod
    def _build_prompt(test_case: TestCase, responses: list[AgentResponse]) -> str:
        parts: list[str] = [
            "## Test case",
            "",
            "### System prompt",
            "```",
            test_case.system_prompt,
            "```",
            "",
            "### Question",
            test_case.question,
            "",
            "### Expected answer",
            test_case.expected_answer or "(none given)",
            "",
            "## Execution results",
            "",
        ]
        for r in responses:
            parts.append(f"### Execution {r.index} ({r.elapsed_ms}ms)")
            if r.success:
                parts.append("```")
                parts.append(r.content)
                parts.append("```")
            else:
                parts.append(f"**Execution failed**: {r.error}")
            parts.append("")
        parts.append(
            "Analyse the results above and give the stability score, the correctness score, "
            "a detailed report, suggestions and the optimized prompt."
        )
        return "\n".join(parts)

    def _parse_verdict(self, raw: str, responses: list[AgentResponse]) -> TestResult:
        """
        Build a TestResult from the judge reply

        Falls back to neutral scores with the raw text as the report when no JSON object
        can be extracted or the scores are missing or not numeric.
        """
        data = extract_json_object(raw)
        if data is not None:
            try:
                stability = self._clamp(get_field(data, "stabilityScore"))
                correctness = self._clamp(get_field(data, "correctnessScore"))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Judge verdict has invalid scores: %s", raw[:200])
            else:
                optimized = get_field(data, "optimizedPrompt")
                return TestResult(
                    responses=list(responses),
                    stability_score=stability,
                    correctness_score=correctness,
                    evaluation_report=str(get_field(data, "evaluationReport") or ""),
                    suggestions=_as_string_list(get_field(data, "suggestions")),
                    optimized_prompt=optimized.strip() if isinstance(optimized, str) and optimized.strip() else None,
                )
        else:
            logger.warning("Failed to parse judge verdict: %s", (raw or "")[:200])

        return TestResult(
            responses=list(responses),
            stability_score=FALLBACK_SCORE,
            correctness_score=FALLBACK_SCORE,
            evaluation_report=raw,
            suggestions=[PARSE_FAILURE_SUGGESTION],
            optimized_prompt=None,
            parsed=False,
        )

    @staticmethod
    def _clamp(value) -> int:
        """Clamp a score to the range 0-100"""
        if value is None or isinstance(value, bool):
            raise TypeError("score is missing")
        return max(MIN_SCORE, min(MAX_SCORE, int(round(float(value)))))


def _as_string_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]
