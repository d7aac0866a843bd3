"""Tests for the model health check"""

from unittest.mock import MagicMock

from prompt_agent_core.domain.value_objects import ModelResponse
from prompt_agent_core.use_cases.health_check import (
    JUDGE_HEALTH_CHECK_PROMPT,
    health_check_model,
    run_health_check,
)


def _client_returning(output: str, latency_ms: int = 42):
    client = MagicMock()
    client.invoke.return_value = ModelResponse(output=output, latency_ms=latency_ms, model_name="m")
    return client


def _well_behaved_client():
    """Answers the plain probe with OK and the judge probe with JSON"""
    def invoke(system_prompt, question, temperature):
        output = '{"status": "ok"}' if question == JUDGE_HEALTH_CHECK_PROMPT else "OK"
        return ModelResponse(output=output, latency_ms=42, model_name="m")

    client = MagicMock()
    client.invoke.side_effect = invoke
    return client


class TestHealthCheckModel:
    def test_success(self):
        result = health_check_model("gpt-4o-mini", lambda name: _client_returning("OK"))
        assert result.success is True
        assert result.latency_ms == 42
        assert result.error is None

    def test_client_creation_error(self):
        def failing_factory(name):
            raise ValueError("OPENAI_API_KEY is not set")

        result = health_check_model("gpt-4o-mini", failing_factory)
        assert result.success is False
        assert result.latency_ms is None
        assert "OPENAI_API_KEY" in result.error

    def test_invoke_error(self):
        client = MagicMock()
        client.invoke.side_effect = ConnectionError("unreachable")
        result = health_check_model("gpt-4o-mini", lambda name: client)
        assert result.success is False
        assert result.error == "unreachable"

    def test_empty_output_is_failure(self):
        result = health_check_model("gpt-4o-mini", lambda name: _client_returning(""))
        assert result.success is False
        assert "empty" in result.error

    def test_judge_probe_requires_json(self):
        result = health_check_model("gpt-4o", lambda name: _client_returning("OK"), expect_json=True)
        assert result.success is False
        assert "JSON" in result.error
        assert result.latency_ms == 42

    def test_judge_probe_accepts_json_in_prose(self):
        client = _client_returning('Sure: {"status": "ok"}')
        result = health_check_model("gpt-4o", lambda name: client, expect_json=True)
        assert result.success is True
        assert client.invoke.call_args.args[1] == JUDGE_HEALTH_CHECK_PROMPT


class TestRunHealthCheck:
    def test_checks_agent_and_judge(self, capsys):
        created = []

        def factory(name):
            created.append(name)
            return _well_behaved_client()

        results = run_health_check("gpt-4o-mini", "gpt-4o", factory)

        assert [r.model_name for r in results] == ["gpt-4o-mini", "gpt-4o"]
        assert all(r.success for r in results)
        assert created == ["gpt-4o-mini", "gpt-4o"]
        out = capsys.readouterr().out
        assert "[agent] gpt-4o-mini... OK (42ms)" in out
        assert "[judge] gpt-4o... OK (42ms)" in out

    def test_same_model_checked_once_as_judge(self):
        client = _well_behaved_client()
        results = run_health_check("gpt-4o", "gpt-4o", lambda name: client)
        assert len(results) == 1
        assert client.invoke.call_args.args[1] == JUDGE_HEALTH_CHECK_PROMPT

    def test_failure_is_printed(self, capsys):
        def factory(name):
            raise RuntimeError("boom")

        results = run_health_check("a", "b", factory)

        assert not any(r.success for r in results)
        out = capsys.readouterr().out
        assert "FAILED" in out
        assert "Error: boom" in out
