"""
Domain Constants

Centrally manages constants shared across the optimization loop.
"""

# Test case defaults
DEFAULT_EXECUTION_COUNT = 3
DEFAULT_TEMPERATURE = 0.7
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0

# Score range (both axes)
MIN_SCORE = 0
MAX_SCORE = 100

# Neutral scores used when the judge reply cannot be parsed
FALLBACK_SCORE = 50

# Default models
DEFAULT_AGENT_MODEL = "gpt-4o-mini"
DEFAULT_JUDGE_MODEL = "gpt-4o"

# Optimization loop defaults
DEFAULT_MAX_ROUNDS = 5
DEFAULT_TARGET_SCORE = 90

# Strategy tracker thresholds
MIN_ROUNDS_FOR_ANALYSIS = 2
HISTORY_WINDOW = 5
CONSECUTIVE_DECLINE_THRESHOLD = 2
STAGNATION_MIN_ROUNDS = 3
STAGNATION_DELTA = 3
SKEW_MARGIN = 15
RECOVERY_MARGIN = 5

# Guided mode
PREVIEW_LENGTH = 100
REWRITE_SAMPLE_SIZE = 2
FALLBACK_CLUSTER_NAME = "All responses"
UNGROUPED_CLUSTER_NAME = "Other responses"

# Judge calls use a fixed temperature for reproducibility
JUDGE_TEMPERATURE = 0.0
