"""
Execution

Runs a test case against the model under test: one isolated call per execution,
fanned out in parallel and returned in execution-index order.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from prompt_agent_core.cancellation import CancellationToken
from prompt_agent_core.domain.entities import TestCase
from prompt_agent_core.domain.value_objects import AgentResponse
from prompt_agent_core.infrastructure.model_clients.base import ModelClient

logger = logging.getLogger(__name__)

CANCELLED_ERROR = "Cancelled before execution"


def execute_once(
    model_client: ModelClient,
    test_case: TestCase,
    index: int,
    cancel_token: CancellationToken | None = None,
) -> AgentResponse:
    """
    Execute the test case once.

    Never raises for transport or model errors: the failure is recorded in the
    returned AgentResponse so one bad execution cannot abort the batch.

    Args:
        model_client: Client for the model under test
        test_case: Test case to execute
        index: Execution index (1-based)
        cancel_token: Cancellation signal checked before the call

    Returns:
        AgentResponse: Execution outcome
    """
    start_time = time.time()

    if cancel_token is not None and cancel_token.cancelled:
        return AgentResponse(index=index, content="", elapsed_ms=0, success=False, error=CANCELLED_ERROR)

    try:
        response = model_client.invoke(test_case.system_prompt, test_case.question, test_case.temperature)
    except Exception as e:
        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.error("Execution %d failed after %dms: %s", index, elapsed_ms, e)
        return AgentResponse(
            index=index,
            content="",
            elapsed_ms=elapsed_ms,
            success=False,
            error=str(e) or type(e).__name__,
        )

    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info("Execution %d completed in %dms", index, elapsed_ms)
    return AgentResponse(index=index, content=response.output, elapsed_ms=elapsed_ms, success=True)


def execute_parallel(
    model_client: ModelClient,
    test_case: TestCase,
    cancel_token: CancellationToken | None = None,
    max_workers: int | None = None,
) -> list[AgentResponse]:
    """
    Execute the test case execution_count times in parallel.

    Waits for every execution regardless of individual failures and returns the
    responses sorted by execution index, not completion order.

    Args:
        model_client: Client for the model under test
        test_case: Test case to execute
        cancel_token: Cancellation signal shared by all executions
        max_workers: Upper bound on concurrent executions (default: execution_count)

    Returns:
        list[AgentResponse]: Exactly execution_count responses, index 1..N

    Raises:
        OptimizationCancelled: When cancel_token was set during the batch
    """
    count = test_case.execution_count
    workers = min(count, max_workers) if max_workers else count
    logger.info("Starting parallel execution of %d runs", count)

    results: list[AgentResponse] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(execute_once, model_client, test_case, index, cancel_token): index
            for index in range(1, count + 1)
        }
        for future in as_completed(futures):
            results.append(future.result())

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()

    failures = sum(1 for r in results if not r.success)
    logger.info("All %d executions completed (%d failed)", count, failures)
    return sorted(results, key=lambda r: r.index)
