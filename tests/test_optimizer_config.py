"""Tests for optimizer configuration"""

import pytest

from prompt_agent_core.optimizer_config import (
    ExecutionConfig,
    OptimizerConfig,
    load_config,
)

_ENV_KEYS = [
    "AGENT_MODEL", "JUDGE_MODEL", "OPTIMIZER_EXECUTION_COUNT", "OPTIMIZER_TEMPERATURE",
    "OPTIMIZER_MAX_WORKERS", "JUDGE_TIMEOUT_SECONDS", "JUDGE_MAX_RETRIES",
    "OPTIMIZER_MAX_ROUNDS", "OPTIMIZER_TARGET_SCORE", "OPTIMIZER_TIMEOUT_SECONDS",
    "OPTIMIZER_MAX_RETRIES", "OPTIMIZER_RETRY_DELAY_SECONDS", "OPENAI_BASE_URL",
    "OPENAI_API_KEY", "LMSTUDIO_BASE_URL", "LMSTUDIO_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.execution.agent_model == "gpt-4o-mini"
        assert config.execution.execution_count == 3
        assert config.execution.temperature == 0.7
        assert config.judge.judge_model == "gpt-4o"
        assert config.loop.max_rounds == 5
        assert config.loop.target_score == 90
        assert config.isolation.max_retries == 3
        assert config.openai.api_key is None
        assert config.lmstudio.base_url == "http://localhost:1234/v1"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("AGENT_MODEL", "claude-haiku-4-5")
        monkeypatch.setenv("OPTIMIZER_EXECUTION_COUNT", "7")
        monkeypatch.setenv("OPTIMIZER_TEMPERATURE", "1.1")
        monkeypatch.setenv("OPTIMIZER_TARGET_SCORE", "80")
        monkeypatch.setenv("OPTIMIZER_RETRY_DELAY_SECONDS", "0.5")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        config = load_config()

        assert config.execution.agent_model == "claude-haiku-4-5"
        assert config.execution.execution_count == 7
        assert config.execution.temperature == 1.1
        assert config.loop.target_score == 80
        assert config.isolation.retry_delay_seconds == 0.5
        assert config.openai.api_key == "sk-test"

    def test_invalid_int(self, monkeypatch):
        monkeypatch.setenv("OPTIMIZER_MAX_ROUNDS", "many")
        with pytest.raises(ValueError, match="OPTIMIZER_MAX_ROUNDS"):
            load_config()

    def test_invalid_float(self, monkeypatch):
        monkeypatch.setenv("OPTIMIZER_TEMPERATURE", "warm")
        with pytest.raises(ValueError, match="OPTIMIZER_TEMPERATURE"):
            load_config()


class TestSerialization:
    def test_round_trip(self):
        config = OptimizerConfig(execution=ExecutionConfig(agent_model="lmstudio/qwen", execution_count=4))
        restored = OptimizerConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_without_wrapper_key(self):
        config = OptimizerConfig.from_dict({"loop": {"max_rounds": 2, "target_score": 70}})
        assert config.loop.max_rounds == 2
        assert config.judge.judge_model == "gpt-4o"
