"""
Difference Clustering Analyzer

Asks the judge model to group one round's successful responses into named style
clusters, for the operator to choose from in guided mode.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_agent_core.infrastructure.model_clients.base import ModelClient

from prompt_agent_core.cancellation import CancellationToken
from prompt_agent_core.domain.constants import (
    FALLBACK_CLUSTER_NAME,
    JUDGE_TEMPERATURE,
    PREVIEW_LENGTH,
    UNGROUPED_CLUSTER_NAME,
)
from prompt_agent_core.domain.entities import TestCase
from prompt_agent_core.domain.value_objects import (
    AgentResponse,
    DifferenceAnalysis,
    ResponseCluster,
)
from prompt_agent_core.judging.json_extract import extract_json_object, get_field

logger = logging.getLogger(__name__)

ANALYZER_SYSTEM_PROMPT = "\n".join([
    "You are an expert at comparing language model outputs.",
    "Group the numbered responses into 2-3 clusters by answer style",
    "(for example: concise, detailed, step-by-step, formal).",
    "Every response index must belong to exactly one cluster.",
    "",
    "Reply in JSON with exactly this shape:",
    "{",
    '    "clusters": [',
    '        {"name": "Concise", "description": "Short direct answers", "indices": [1, 3]},',
    '        {"name": "Detailed", "description": "Explains the reasoning", "indices": [2]}',
    "    ],",
    '    "summary": "How the responses differ...",',
    '    "suggestedDirections": ["Direction 1", "Direction 2"]',
    "}",
])


def make_preview(content: str, limit: int = PREVIEW_LENGTH) -> str:
    """Truncate content to limit characters, marking truncation with an ellipsis"""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


class DifferenceAnalyzer:
    """Judge-model style clustering of successful responses"""

    def __init__(self, judge_client: ModelClient) -> None:
        self._client = judge_client

    def analyze(
        self,
        test_case: TestCase,
        responses: list[AgentResponse],
        *,
        cancel_token: CancellationToken | None = None,
    ) -> DifferenceAnalysis:
        """
        Cluster the successful responses by style

        Failed responses are excluded from the judge input and from every cluster. The
        clusters partition the successful indices: an index the judge repeats stays in
        its first cluster, and indices it leaves out are gathered in a final cluster.

        Args:
            test_case: The test case that produced the responses
            responses: All responses of the round
            cancel_token: Cancellation signal checked before the judge call

        Returns:
            DifferenceAnalysis (a single catch-all cluster when the verdict cannot be parsed)

        Raises:
            OptimizationCancelled: When cancel_token is set
            Exception: Transport errors from the judge client
        """
        successful = [r for r in responses if r.success]
        if not successful:
            logger.warning("No successful responses to cluster")
            return DifferenceAnalysis(summary="All executions failed; nothing to compare.")

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        response = self._client.invoke(
            ANALYZER_SYSTEM_PROMPT,
            self._build_prompt(test_case, successful),
            JUDGE_TEMPERATURE,
        )
        return self._parse_analysis(response.output, successful)

    @staticmethod
    def _build_prompt(test_case: TestCase, responses: list[AgentResponse]) -> str:
        parts: list[str] = [
            "## System prompt",
            "```",
            test_case.system_prompt,
            "```",
            "",
            "## Question",
            test_case.question,
            "",
            "## Responses",
            "",
        ]
        for r in responses:
            parts.append(f"### Response {r.index}")
            parts.append("```")
            parts.append(r.content)
            parts.append("```")
            parts.append("")
        parts.append("Group these responses by style.")
        return "\n".join(parts)

    def _parse_analysis(self, raw: str, responses: list[AgentResponse]) -> DifferenceAnalysis:
        by_index = {r.index: r for r in responses}
        data = extract_json_object(raw)

        clusters: list[ResponseCluster] = []
        assigned: set[int] = set()
        if data is not None:
            items = get_field(data, "clusters")
            for item in items if isinstance(items, list) else []:
                if not isinstance(item, dict):
                    continue
                # An index listed in an earlier cluster stays there
                indices = [i for i in _valid_indices(get_field(item, "indices"), by_index) if i not in assigned]
                if not indices:
                    continue
                assigned.update(indices)
                clusters.append(ResponseCluster(
                    name=str(get_field(item, "name") or f"Style {len(clusters) + 1}"),
                    description=str(get_field(item, "description") or ""),
                    indices=indices,
                    preview=make_preview(by_index[indices[0]].content),
                ))

        unassigned = sorted(set(by_index) - assigned)
        if clusters and unassigned:
            logger.warning("Judge left responses %s out of every cluster", unassigned)
            clusters.append(ResponseCluster(
                name=UNGROUPED_CLUSTER_NAME,
                description="Responses the judge did not place in any style",
                indices=unassigned,
                preview=make_preview(by_index[unassigned[0]].content),
            ))

        if not clusters:
            logger.warning("Failed to parse clustering verdict: %s", (raw or "")[:200])
            indices = sorted(by_index)
            return DifferenceAnalysis(
                clusters=[ResponseCluster(
                    name=FALLBACK_CLUSTER_NAME,
                    description="The responses could not be grouped by style",
                    indices=indices,
                    preview=make_preview(by_index[indices[0]].content),
                )],
                summary=raw or "",
                suggested_directions=[],
            )

        directions = get_field(data, "suggestedDirections") or []
        return DifferenceAnalysis(
            clusters=clusters,
            summary=str(get_field(data, "summary") or ""),
            suggested_directions=[str(d) for d in directions] if isinstance(directions, list) else [str(directions)],
        )


def _valid_indices(value, by_index: dict[int, AgentResponse]) -> list[int]:
    """Keep indices that refer to a successful response, in listed order, without duplicates"""
    if not isinstance(value, list):
        return []
    indices: list[int] = []
    for v in value:
        try:
            i = int(v)
        except (TypeError, ValueError):
            continue
        if i in by_index and i not in indices:
            indices.append(i)
    return indices
