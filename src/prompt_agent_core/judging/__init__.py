"""
Judging sub-package

Judge-model components: response evaluation, style clustering and feedback-guided
rewriting, sharing one lenient JSON extractor.
"""

from prompt_agent_core.judging.json_extract import extract_json_object
from prompt_agent_core.judging.response_evaluator import (
    PARSE_FAILURE_SUGGESTION,
    ResponseEvaluator,
)
from prompt_agent_core.judging.difference_analyzer import DifferenceAnalyzer, make_preview
from prompt_agent_core.judging.feedback_rewriter import FeedbackRewriter

__all__ = [
    "extract_json_object",
    "PARSE_FAILURE_SUGGESTION",
    "ResponseEvaluator",
    "DifferenceAnalyzer",
    "make_preview",
    "FeedbackRewriter",
]
