"""
Health Check

Probes the model under test and the judge model before a session starts. The judge
probe also asks for a JSON object, since every judge step depends on one.
"""

from typing import Callable

from prompt_agent_core.domain.constants import JUDGE_TEMPERATURE
from prompt_agent_core.domain.entities import HealthCheckResult
from prompt_agent_core.infrastructure.model_clients.base import ModelClient
from prompt_agent_core.judging.json_extract import extract_json_object


HEALTH_CHECK_SYSTEM_PROMPT = "You are a connectivity probe."
HEALTH_CHECK_PROMPT = "Reply with only 'OK' if you can read this message."
JUDGE_HEALTH_CHECK_PROMPT = 'Reply with only this JSON object: {"status": "ok"}'


def health_check_model(
    model_name: str,
    create_client_fn: Callable[[str], ModelClient],
    expect_json: bool = False,
) -> HealthCheckResult:
    """
    Execute a health check for a single model.

    Args:
        model_name: Name of the model to check
        create_client_fn: Function to create a model client
        expect_json: Require the reply to contain a JSON object (judge probe)

    Returns:
        HealthCheckResult: Health check result
    """
    prompt = JUDGE_HEALTH_CHECK_PROMPT if expect_json else HEALTH_CHECK_PROMPT
    try:
        client = create_client_fn(model_name)
        response = client.invoke(HEALTH_CHECK_SYSTEM_PROMPT, prompt, JUDGE_TEMPERATURE)
    except Exception as e:
        return HealthCheckResult(model_name=model_name, success=False, latency_ms=None, error=str(e))

    error = None
    if not response.output:
        error = f"{model_name} returned an empty response"
    elif expect_json and extract_json_object(response.output) is None:
        error = f"{model_name} did not reply with a JSON object: {response.output[:100]}"

    return HealthCheckResult(
        model_name=model_name,
        success=error is None,
        latency_ms=response.latency_ms,
        error=error,
    )


def run_health_check(
    agent_model: str,
    judge_model: str,
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> list[HealthCheckResult]:
    """
    Check the model under test and the judge, printing progress.

    A model serving both roles is probed once, with the judge probe.

    Args:
        agent_model: Model under test
        judge_model: Judge model
        create_client_fn: Client factory (default: model_clients.factory.create_client)

    Returns:
        list[HealthCheckResult]: One result per distinct model, agent first
    """
    if create_client_fn is None:
        from prompt_agent_core.infrastructure.model_clients.factory import create_client
        create_client_fn = create_client

    probes = {agent_model: False}
    probes[judge_model] = True

    print("=== Model Health Check ===\n")
    results = []
    for model_name, expect_json in probes.items():
        role = "judge" if expect_json else "agent"
        print(f"  [{role}] {model_name}... ", end="", flush=True)
        result = health_check_model(model_name, create_client_fn, expect_json=expect_json)
        results.append(result)

        if result.success:
            print(f"OK ({result.latency_ms}ms)")
        else:
            print("FAILED")
            print(f"    Error: {result.error[:100] if result.error else 'Unknown error'}")

    print()
    return results
