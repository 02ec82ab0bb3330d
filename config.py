"""Configuration settings for the Japp vocabulary generation pipeline."""

import os
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

# Base paths
PROJECT_ROOT = Path(__file__).parent
OUTPUT_DIR = PROJECT_ROOT / "generated"
CHECKPOINTS_DIR = PROJECT_ROOT / "checkpoints"
PROMPTS_DIR = PROJECT_ROOT / "japp" / "prompts"
LOGS_DIR = PROJECT_ROOT / "logs"

# Environment (.env at the project root, if any)
load_dotenv(PROJECT_ROOT / ".env")


def get_output_path(timestamp: datetime | None = None) -> Path:
    """Generate batch output path with datetime suffix.

    Args:
        timestamp: Datetime to use for suffix. If None, uses current time.

    Returns:
        Path like generated/vocabulary_20260131_143022.json
    """
    if timestamp is None:
        timestamp = datetime.now()
    suffix = timestamp.strftime("%Y%m%d_%H%M%S")
    return OUTPUT_DIR / f"vocabulary_{suffix}.json"


def get_api_key() -> str | None:
    """Return the chat-completion API key, or None when unset or blank."""
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


# Checkpoint files
BATCH_CHECKPOINT = CHECKPOINTS_DIR / "batch_progress.json"

# Prompt templates
VOCABULARY_GENERATION_PROMPT = PROMPTS_DIR / "vocabulary_generation.txt"

# Chat-completion API settings
API_KEY_ENV_VARS = ("GROQ_API_KEY", "NEXT_PUBLIC_GROQ_API_KEY")
GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
GROQ_MODEL = "llama3-8b-8192"
GROQ_TEMPERATURE = 0.7
GROQ_MAX_TOKENS = 2000
REQUEST_TIMEOUT = 30.0  # seconds

# Generation settings
WORD_COUNT = 10
SOURCE_LANGUAGE = "German"
TARGET_LANGUAGE = "Japanese"

# Batch settings
DRY_RUN_LIMIT = 3
SAVE_EVERY = 10
CONSECUTIVE_FAILURE_THRESHOLD = 2
