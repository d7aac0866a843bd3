"""
Example Generator

Asks a model to invent a ready-to-run test case for a category, as a starting point
for an optimization session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_agent_core.infrastructure.model_clients.base import ModelClient

from prompt_agent_core.domain.entities import TestCase
from prompt_agent_core.judging.json_extract import extract_json_object, get_field

logger = logging.getLogger(__name__)

# Some variety between generated examples
GENERATION_TEMPERATURE = 0.9


class ExampleGenerationError(Exception):
    """Error raised when the model's example cannot be parsed"""
    pass


@dataclass(frozen=True)
class ExampleCategory:
    """Category of generated examples"""
    category_id: str
    name: str
    description: str


CATEGORIES: list[ExampleCategory] = [
    ExampleCategory("math", "Math", "Arithmetic, equation solving, numeric reasoning"),
    ExampleCategory("logic", "Logic", "Reasoning puzzles, conditionals, relationship analysis"),
    ExampleCategory("translation", "Translation", "Translating between languages, text conversion"),
    ExampleCategory("summary", "Summarization", "Summarizing articles, extracting key points"),
    ExampleCategory("code", "Code generation", "Writing code, implementing algorithms"),
    ExampleCategory("creative", "Creative writing", "Stories, marketing copy"),
    ExampleCategory("qa", "Question answering", "Knowledge questions, customer support dialogue"),
]

GENERATOR_SYSTEM_PROMPT = "\n".join([
    "You create test cases for evaluating system prompts.",
    "Given a category, invent one creative but practical example with a system prompt,",
    "a question for the model, and the expected answer (keep it short and checkable).",
    "",
    "Reply in JSON with exactly this shape:",
    "{",
    '    "systemPrompt": "...",',
    '    "question": "...",',
    '    "expectedAnswer": "..."',
    "}",
])


def get_category(category_id: str) -> ExampleCategory:
    """
    Look up a category by id.

    Raises:
        ValueError: If the category does not exist
    """
    for category in CATEGORIES:
        if category.category_id == category_id:
            return category
    raise ValueError(
        f"Unknown category: {category_id} (available: {[c.category_id for c in CATEGORIES]})"
    )


def generate_example(category_id: str, model_client: ModelClient) -> TestCase:
    """
    Generate a test case for the category.

    Args:
        category_id: Category id (see CATEGORIES)
        model_client: Client used for generation

    Returns:
        TestCase: Generated test case with default execution count and temperature

    Raises:
        ValueError: If the category does not exist
        ExampleGenerationError: If the reply has no usable JSON object
    """
    category = get_category(category_id)
    logger.info("Generating example for category: %s", category.name)

    response = model_client.invoke(
        GENERATOR_SYSTEM_PROMPT,
        f"Category: {category.name} ({category.description})",
        GENERATION_TEMPERATURE,
    )
    data = extract_json_object(response.output)
    if data is None:
        raise ExampleGenerationError(f"Failed to parse generated example: {response.output[:200]}")

    system_prompt = get_field(data, "systemPrompt")
    question = get_field(data, "question")
    if not isinstance(system_prompt, str) or not isinstance(question, str) or not question.strip():
        raise ExampleGenerationError("Generated example is missing systemPrompt or question")

    return TestCase(
        system_prompt=system_prompt.strip(),
        question=question.strip(),
        expected_answer=str(get_field(data, "expectedAnswer") or "").strip(),
    )
