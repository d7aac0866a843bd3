"""
Optimizer Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from prompt_agent_core.domain.constants import (
    DEFAULT_AGENT_MODEL,
    DEFAULT_EXECUTION_COUNT,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_MAX_ROUNDS,
    DEFAULT_TARGET_SCORE,
    DEFAULT_TEMPERATURE,
)


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str | None) -> str | None:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class ExecutionConfig:
    """Model-under-test execution configuration"""
    agent_model: str = DEFAULT_AGENT_MODEL
    execution_count: int = DEFAULT_EXECUTION_COUNT
    temperature: float = DEFAULT_TEMPERATURE
    max_workers: int = 10


@dataclass
class JudgeConfig:
    """Judge model configuration"""
    judge_model: str = DEFAULT_JUDGE_MODEL
    timeout_seconds: int = 60
    max_retries: int = 2


@dataclass
class LoopConfig:
    """Optimization loop stop conditions"""
    max_rounds: int = DEFAULT_MAX_ROUNDS
    target_score: int = DEFAULT_TARGET_SCORE


@dataclass
class IsolationConfig:
    """Per-call isolation configuration"""
    timeout_seconds: int = 120
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class OpenAIConfig:
    """OpenAI (or OpenAI-compatible gateway) configuration"""
    base_url: str | None = None
    api_key: str | None = None


@dataclass
class LMStudioConfig:
    """LMStudio (OpenAI-compatible local LLM) configuration"""
    base_url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"


@dataclass
class OptimizerConfig:
    """Overall optimizer configuration"""
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    isolation: IsolationConfig = field(default_factory=IsolationConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    lmstudio: LMStudioConfig = field(default_factory=LMStudioConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"optimizer_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "OptimizerConfig":
        """Create from dictionary (handles presence/absence of optimizer_config key)"""
        config_data = data.get("optimizer_config", data)
        return cls(
            execution=ExecutionConfig(**config_data.get("execution", {})),
            judge=JudgeConfig(**config_data.get("judge", {})),
            loop=LoopConfig(**config_data.get("loop", {})),
            isolation=IsolationConfig(**config_data.get("isolation", {})),
            openai=OpenAIConfig(**config_data.get("openai", {})),
            lmstudio=LMStudioConfig(**config_data.get("lmstudio", {})),
        )


def load_config() -> OptimizerConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        OptimizerConfig
    """
    execution = ExecutionConfig(
        agent_model=_env_str("AGENT_MODEL", DEFAULT_AGENT_MODEL),
        execution_count=_env_int("OPTIMIZER_EXECUTION_COUNT", DEFAULT_EXECUTION_COUNT),
        temperature=_env_float("OPTIMIZER_TEMPERATURE", DEFAULT_TEMPERATURE),
        max_workers=_env_int("OPTIMIZER_MAX_WORKERS", 10),
    )
    judge = JudgeConfig(
        judge_model=_env_str("JUDGE_MODEL", DEFAULT_JUDGE_MODEL),
        timeout_seconds=_env_int("JUDGE_TIMEOUT_SECONDS", 60),
        max_retries=_env_int("JUDGE_MAX_RETRIES", 2),
    )
    loop = LoopConfig(
        max_rounds=_env_int("OPTIMIZER_MAX_ROUNDS", DEFAULT_MAX_ROUNDS),
        target_score=_env_int("OPTIMIZER_TARGET_SCORE", DEFAULT_TARGET_SCORE),
    )
    isolation = IsolationConfig(
        timeout_seconds=_env_int("OPTIMIZER_TIMEOUT_SECONDS", 120),
        max_retries=_env_int("OPTIMIZER_MAX_RETRIES", 3),
        retry_delay_seconds=_env_float("OPTIMIZER_RETRY_DELAY_SECONDS", 1.0),
    )
    openai = OpenAIConfig(
        base_url=_env_str("OPENAI_BASE_URL", None),
        api_key=_env_str("OPENAI_API_KEY", None),
    )
    lmstudio = LMStudioConfig(
        base_url=_env_str("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
        api_key=_env_str("LMSTUDIO_API_KEY", "lm-studio"),
    )
    return OptimizerConfig(
        execution=execution,
        judge=judge,
        loop=loop,
        isolation=isolation,
        openai=openai,
        lmstudio=lmstudio,
    )
