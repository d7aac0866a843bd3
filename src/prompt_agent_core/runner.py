"""
prompt-agent-core CLI Runner

Minimal CLI for running a prompt optimization session.

Usage:
    python -m prompt_agent_core.runner --system-prompt "Answer tersely" --question "2+2?" --expected-answer 4
    python -m prompt_agent_core.runner --system-prompt-file prompt.txt --question "..." --max-rounds 8 --target-score 95

Guided mode (choose a response style every round, "q" to stop):
    python -m prompt_agent_core.runner --system-prompt "..." --question "..." --guided

Generate the test case from a category:
    python -m prompt_agent_core.runner --example-category math
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from prompt_agent_core.domain.entities import EvaluationRecord, TestCase
from prompt_agent_core.domain.value_objects import DifferenceAnalysis, UserFeedback
from prompt_agent_core.example_generator import CATEGORIES, generate_example
from prompt_agent_core.infrastructure.model_clients.base import ModelClient
from prompt_agent_core.infrastructure.model_clients.factory import create_client, create_judge_client
from prompt_agent_core.optimizer_config import OptimizerConfig, load_config
from prompt_agent_core.prompt_versions import PromptVersionStore
from prompt_agent_core.use_cases.health_check import run_health_check
from prompt_agent_core.use_cases.optimization import (
    GuidedSession,
    OptimizationSession,
    RoundOutcome,
    SessionState,
)

QUIT_COMMANDS = ("q", "quit", "exit")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="prompt-agent-core: Iteratively test and optimize a system prompt",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--system-prompt", help="System prompt to optimize")
    source.add_argument("--system-prompt-file", help="File containing the system prompt")
    source.add_argument(
        "--example-category",
        choices=[c.category_id for c in CATEGORIES],
        help="Generate the test case from a category instead",
    )
    parser.add_argument("--question", default=None, help="Question sent as the user turn")
    parser.add_argument("--expected-answer", default="", help="Expected answer (optional)")
    parser.add_argument(
        "--execution-count",
        type=int,
        default=None,
        help="Parallel executions per round (default: OPTIMIZER_EXECUTION_COUNT from .env)",
    )
    parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Sampling temperature 0.0-2.0 (default: OPTIMIZER_TEMPERATURE from .env)",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Round budget in automatic mode (default: OPTIMIZER_MAX_ROUNDS from .env)",
    )
    parser.add_argument(
        "--target-score",
        type=int,
        default=None,
        help="Stop once the average score reaches this value (default: OPTIMIZER_TARGET_SCORE from .env)",
    )
    parser.add_argument("--agent-model", default=None, help="Model under test (default: AGENT_MODEL)")
    parser.add_argument("--judge-model", default=None, help="Judge model (default: JUDGE_MODEL)")
    parser.add_argument("--guided", action="store_true", help="Choose the response style every round")
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory for the round history CSV and prompt versions (default: results)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log library messages to stderr")
    args = parser.parse_args(argv)
    if args.example_category is None and not args.question:
        parser.error("--question is required unless --example-category is given")
    return args


def history_to_dataframe(records: list[EvaluationRecord]) -> pd.DataFrame:
    """Round history as a DataFrame (one row per round)."""
    columns = list(EvaluationRecord.__dataclass_fields__)
    return pd.DataFrame([asdict(r) for r in records], columns=columns)


def _save_history(records: list[EvaluationRecord], history_path: Path) -> None:
    """Save the round history to CSV."""
    history_path.parent.mkdir(parents=True, exist_ok=True)
    history_to_dataframe(records).to_csv(history_path, index=False)


def _apply_overrides(config: OptimizerConfig, args: argparse.Namespace) -> OptimizerConfig:
    if args.agent_model:
        config.execution.agent_model = args.agent_model
    if args.judge_model:
        config.judge.judge_model = args.judge_model
    if args.execution_count:
        config.execution.execution_count = args.execution_count
    if args.temperature is not None:
        config.execution.temperature = args.temperature
    if args.max_rounds:
        config.loop.max_rounds = args.max_rounds
    if args.target_score is not None:
        config.loop.target_score = args.target_score
    return config


def _print_round(outcome: RoundOutcome) -> None:
    record = outcome.record
    failed = sum(1 for r in outcome.test_result.responses if not r.success)
    print(
        f"[Round {record.round}] stability={record.stability_score} "
        f"correctness={record.correctness_score} avg={record.average_score} "
        f"| strategy={outcome.strategy.value}"
        + (f" | {failed} failed executions" if failed else "")
    )
    for suggestion in outcome.test_result.suggestions:
        print(f"  - {suggestion}")
    if outcome.changes:
        print(f"  Changes: {outcome.changes}")
    print()


def _print_analysis(analysis: DifferenceAnalysis) -> None:
    if analysis.summary:
        print(f"  {analysis.summary}\n")
    for i, cluster in enumerate(analysis.clusters, start=1):
        print(f"  {i}. {cluster.name} (responses {cluster.indices})")
        if cluster.description:
            print(f"     {cluster.description}")
        print(f"     > {cluster.preview}")
    if analysis.suggested_directions:
        print("  Suggested directions:")
        for direction in analysis.suggested_directions:
            print(f"    - {direction}")
    print()


def _read_feedback(analysis: DifferenceAnalysis) -> UserFeedback | None:
    """Ask for a cluster number and free text; None means the operator quit."""
    selected = None
    while True:
        choice = input("Preferred style number (Enter to skip, q to finish): ").strip()
        if choice.lower() in QUIT_COMMANDS:
            return None
        if not choice:
            break
        if choice.isdigit() and 1 <= int(choice) <= len(analysis.clusters):
            selected = analysis.clusters[int(choice) - 1].name
            break
        print(f"  Enter a number between 1 and {len(analysis.clusters)}, or press Enter to skip.")
    custom = input("Additional feedback (Enter to skip): ").strip()
    return UserFeedback(selected_cluster=selected, custom_feedback=custom or None)


def _run_guided(session: GuidedSession, test_case: TestCase) -> SessionState:
    analysis = session.start(test_case)
    while analysis is not None:
        result = session.pending_result
        print(
            f"=== Round {len(session.rounds) + 1}: stability={result.stability_score} "
            f"correctness={result.correctness_score} ===\n"
        )
        _print_analysis(analysis)
        feedback = _read_feedback(analysis)
        if feedback is None:
            return session.end()
        if session.resume(feedback) is None:
            break
        analysis = session.next_round()
    return session.state


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = _apply_overrides(load_config(), args)
    agent_model = config.execution.agent_model
    judge_model = config.judge.judge_model

    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(args.output_dir)
    history_path = output_dir / f"history_{run_id}.csv"
    versions_path = output_dir / f"versions_{run_id}.json"

    # Step 1: Health check (the judge is probed with the judge's own timeout and retries)
    def health_check_client(model_name: str) -> ModelClient:
        if model_name == judge_model:
            return create_judge_client(config)
        return create_client(model_name, config)

    results = run_health_check(agent_model, judge_model, health_check_client)
    if not all(r.success for r in results):
        print("ERROR: Model health check failed. Exiting.")
        sys.exit(1)

    agent_client = create_client(agent_model, config)
    judge_client = create_judge_client(config)

    # Step 2: Build the test case
    if args.example_category:
        print(f"=== Generating example ({args.example_category}) ===\n")
        generated = generate_example(args.example_category, judge_client)
        system_prompt, question, expected = generated.system_prompt, generated.question, generated.expected_answer
    else:
        system_prompt = (
            Path(args.system_prompt_file).read_text(encoding="utf-8")
            if args.system_prompt_file
            else args.system_prompt
        )
        question, expected = args.question, args.expected_answer

    test_case = TestCase(
        system_prompt=system_prompt,
        question=question,
        expected_answer=expected,
        execution_count=config.execution.execution_count,
        temperature=config.execution.temperature,
    )
    print(f"  Agent model:  {agent_model}")
    print(f"  Judge model:  {judge_model}")
    print(f"  Executions:   {test_case.execution_count} @ temperature {test_case.temperature}")
    print(f"  Question:     {test_case.question}")
    print()

    store = PromptVersionStore()
    project = store.create_project(f"run {run_id}")

    def on_round(outcome: RoundOutcome) -> None:
        _print_round(outcome)
        store.save_round(project.project_id, outcome.record, test_case)

    # Step 3: Optimize
    if args.guided:
        print("=== Guided Optimization ===\n")
        session = GuidedSession(
            agent_client, judge_client,
            max_workers=config.execution.max_workers,
            on_round=on_round,
        )
        try:
            state = _run_guided(session, test_case)
        except KeyboardInterrupt:
            session.cancel()
            state = session.state if session.is_finished else session.end()
    else:
        print(f"=== Optimizing (max {config.loop.max_rounds} rounds, target {config.loop.target_score}) ===\n")
        session = OptimizationSession(
            agent_client, judge_client,
            max_rounds=config.loop.max_rounds,
            target_score=config.loop.target_score,
            max_workers=config.execution.max_workers,
            on_round=on_round,
        )
        state = session.run(test_case)

    # Step 4: Summary
    summary = session.tracker.summary()
    print("=== Summary ===\n")
    print(f"  Final state:       {state.value}")
    if session.error:
        print(f"  Error:             {session.error}")
    print(f"  Rounds:            {summary.total_rounds}")
    print(f"  Initial / current: {summary.initial_score} / {summary.current_score}")
    print(f"  Best:              {summary.best_score} (round {summary.best_round})")
    print(f"  Strategy:          {summary.strategy_description}")
    print()
    if session.current_test_case is not None and session.history:
        print("=== Latest prompt ===\n")
        print(session.current_test_case.system_prompt)
        print()

    # Step 5: Save outputs
    if session.history:
        best = max(session.history, key=lambda r: r.average_score)
        best_version = next(
            v for v in store.list_versions(project.project_id) if v.note == f"Round {best.round}"
        )
        store.update_version_tags(project.project_id, best_version.version_id, ["best"])

        _save_history(list(session.history), history_path)
        versions_path.write_text(json.dumps(store.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        print("=== Output ===\n")
        print(f"  History:  {history_path}")
        print(f"  Versions: {versions_path}")
        print()

    if state in (SessionState.FAILED, SessionState.CANCELLED):
        sys.exit(1)


if __name__ == "__main__":
    main()
