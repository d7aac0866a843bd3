"""
Feedback-Guided Rewriter

Turns the operator's preferred style and free-text feedback into one rewritten
system prompt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_agent_core.infrastructure.model_clients.base import ModelClient

from prompt_agent_core.cancellation import CancellationToken
from prompt_agent_core.domain.constants import JUDGE_TEMPERATURE, REWRITE_SAMPLE_SIZE
from prompt_agent_core.domain.entities import TestCase
from prompt_agent_core.domain.value_objects import (
    AgentResponse,
    DifferenceAnalysis,
    RewriteResult,
    UserFeedback,
)
from prompt_agent_core.judging.json_extract import extract_json_object, get_field

logger = logging.getLogger(__name__)

REWRITER_SYSTEM_PROMPT = "\n".join([
    "You are an expert prompt engineer. Rewrite the system prompt so that the model's",
    "answers follow the user's feedback. Keep everything the feedback does not ask to change.",
    "",
    "Reply in JSON with exactly this shape:",
    "{",
    '    "optimizedPrompt": "The complete rewritten system prompt...",',
    '    "changes": "Short description of what changed"',
    "}",
])


class FeedbackRewriter:
    """Judge-model prompt rewrite steered by operator feedback"""

    def __init__(self, judge_client: ModelClient) -> None:
        self._client = judge_client

    def rewrite(
        self,
        test_case: TestCase,
        responses: list[AgentResponse],
        feedback: UserFeedback,
        *,
        analysis: DifferenceAnalysis | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> RewriteResult:
        """
        Ask the judge model for a prompt reflecting the feedback

        Callers must not invoke this without feedback (see UserFeedback.has_feedback).

        Args:
            test_case: The current test case
            responses: The round's responses (only the first few successful ones are sent)
            feedback: Operator feedback
            analysis: The round's clustering, used to describe the selected cluster
            cancel_token: Cancellation signal checked before the judge call

        Returns:
            RewriteResult (the unmodified prompt when the verdict cannot be parsed)

        Raises:
            ValueError: When feedback is empty
            OptimizationCancelled: When cancel_token is set
            Exception: Transport errors from the judge client
        """
        if not feedback.has_feedback:
            raise ValueError("feedback must select a cluster or contain custom text")
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        samples = [r for r in responses if r.success][:REWRITE_SAMPLE_SIZE]
        response = self._client.invoke(
            REWRITER_SYSTEM_PROMPT,
            self._build_prompt(test_case, samples, feedback, analysis),
            JUDGE_TEMPERATURE,
        )
        return self._parse_rewrite(response.output, test_case.system_prompt)

    @staticmethod
    def _build_prompt(
        test_case: TestCase,
        samples: list[AgentResponse],
        feedback: UserFeedback,
        analysis: DifferenceAnalysis | None,
    ) -> str:
        parts: list[str] = [
            "## Current system prompt",
            "```",
            test_case.system_prompt,
            "```",
            "",
            "## Question",
            test_case.question,
            "",
        ]
        if samples:
            parts.append("## Sample responses")
            parts.append("")
            for r in samples:
                parts.append(f"### Response {r.index}")
                parts.append("```")
                parts.append(r.content)
                parts.append("```")
                parts.append("")

        parts.append("## User feedback")
        if feedback.selected_cluster and feedback.selected_cluster.strip():
            parts.append(f"Preferred style: {feedback.selected_cluster.strip()}")
            cluster = None
            if analysis is not None:
                cluster = next(
                    (c for c in analysis.clusters if c.name == feedback.selected_cluster.strip()),
                    None,
                )
            if cluster is not None and cluster.description:
                parts.append(f"Style description: {cluster.description}")
        if feedback.custom_feedback and feedback.custom_feedback.strip():
            parts.append(f"Additional feedback: {feedback.custom_feedback.strip()}")
        parts.append("")
        parts.append("Rewrite the system prompt accordingly.")
        return "\n".join(parts)

    @staticmethod
    def _parse_rewrite(raw: str, original_prompt: str) -> RewriteResult:
        data = extract_json_object(raw)
        if data is not None:
            optimized = get_field(data, "optimizedPrompt")
            if isinstance(optimized, str) and optimized.strip():
                return RewriteResult(
                    optimized_prompt=optimized.strip(),
                    changes=str(get_field(data, "changes") or ""),
                )

        logger.warning("Failed to parse rewrite verdict, keeping the original prompt: %s", (raw or "")[:200])
        return RewriteResult(optimized_prompt=original_prompt, from_fallback=True)
