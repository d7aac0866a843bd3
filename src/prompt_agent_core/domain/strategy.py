"""
Evaluator Strategy

Closed set of strategies that bias the judge model, with their description and
instruction-fragment lookup tables.
"""

from enum import Enum


class Strategy(str, Enum):
    """Active bias applied to the next evaluation."""
    STANDARD = "standard"
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"
    STABILITY_FOCUS = "stability_focus"
    CORRECTNESS_FOCUS = "correctness_focus"

    @property
    def description(self) -> str:
        return STRATEGY_DESCRIPTIONS[self]

    @property
    def instructions(self) -> str:
        return STRATEGY_INSTRUCTIONS[self]


STRATEGY_DESCRIPTIONS: dict[Strategy, str] = {
    Strategy.STANDARD: "Standard mode: balanced optimization",
    Strategy.CONSERVATIVE: "Conservative mode: small, incremental edits",
    Strategy.AGGRESSIVE: "Aggressive mode: try bold new directions",
    Strategy.STABILITY_FOCUS: "Stability first: reduce output variance",
    Strategy.CORRECTNESS_FOCUS: "Correctness first: improve answer quality",
}

STRATEGY_INSTRUCTIONS: dict[Strategy, str] = {
    Strategy.STANDARD: "",
    Strategy.CONSERVATIVE: "\n".join([
        "## Current strategy: CONSERVATIVE",
        "",
        "Previous rewrites lowered the scores. Be conservative:",
        "- Make only the smallest necessary changes",
        "- Keep the core structure of the original prompt",
        "- Fix one problem at a time",
        "- When in doubt, leave it unchanged",
        "",
    ]),
    Strategy.AGGRESSIVE: "\n".join([
        "## Current strategy: AGGRESSIVE",
        "",
        "Scores have stagnated and need a breakthrough:",
        "- Try a completely different way of phrasing the instructions",
        "- Rethink the structure of the prompt",
        "- Add new constraints or examples",
        "- Do not be afraid of large changes",
        "",
    ]),
    Strategy.STABILITY_FOCUS: "\n".join([
        "## Current strategy: STABILITY FIRST",
        "",
        "The stability score is low. Focus on:",
        "- Reducing variation between outputs",
        "- Adding explicit format requirements",
        "- Limiting the length and scope of the answer",
        "- Using more specific instruction wording",
        "",
    ]),
    Strategy.CORRECTNESS_FOCUS: "\n".join([
        "## Current strategy: CORRECTNESS FIRST",
        "",
        "The correctness score is low. Focus on:",
        "- Improving the accuracy of the answer",
        "- Adding more context and constraints",
        "- Stating the expected answer format explicitly",
        "- Considering adding examples",
        "",
    ]),
}
