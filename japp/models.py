"""Pydantic data models for the Japp vocabulary generation pipeline."""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

import config


class Connectivity(str, Enum):
    """Network state reported by the host environment."""

    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"


class FailureKind(str, Enum):
    """Category of a failed generation."""

    INVALID_TOPIC = "invalid_topic"
    CONFIGURATION = "configuration"
    CONNECTIVITY = "connectivity"
    TRANSPORT = "transport"
    MALFORMED_CONTENT = "malformed_content"
    INTERNAL = "internal"


class GeneratorSettings(BaseModel):
    """Settings injected into the vocabulary generator."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    api_url: str = config.GROQ_API_URL
    model: str = config.GROQ_MODEL
    temperature: float = config.GROQ_TEMPERATURE
    max_tokens: int = config.GROQ_MAX_TOKENS
    timeout: float = config.REQUEST_TIMEOUT
    word_count: int = config.WORD_COUNT
    source_language: str = config.SOURCE_LANGUAGE
    target_language: str = config.TARGET_LANGUAGE

    @classmethod
    def from_env(cls, **overrides: Any) -> "GeneratorSettings":
        """Build settings with the API key resolved from the environment."""
        overrides.setdefault("api_key", config.get_api_key())
        return cls(**overrides)


class VocabularyTopic(BaseModel):
    """The topic a vocabulary list is generated for."""

    text: str

    @field_validator("text")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("topic must not be empty")
        return value


class GeneratedVocabularyRecord(BaseModel):
    """A single validated vocabulary entry returned by the AI.

    All fields are stripped; the three required ones must not be empty and an
    empty logographic_script becomes None.
    """

    model_config = ConfigDict(frozen=True)

    source_word: str
    pronunciation: str  # romanized, e.g. "aka"
    phonetic_script: str  # kana
    logographic_script: Optional[str] = None  # kanji, when the word has one

    @field_validator("source_word", "pronunciation", "phonetic_script")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("logographic_script")
    @classmethod
    def _strip_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class Success(BaseModel):
    """Generation succeeded with at least one record."""

    ok: Literal[True] = True
    records: list[GeneratedVocabularyRecord] = Field(min_length=1)


class Failure(BaseModel):
    """Generation failed; `reason` is safe to show to the user."""

    ok: Literal[False] = False
    reason: str
    kind: FailureKind
    diagnostic: Optional[dict[str, Any]] = None


PipelineResult = Union[Success, Failure]


class TopicVocabulary(BaseModel):
    """Batch output entry: the records generated for one topic."""

    topic: str
    records: list[GeneratedVocabularyRecord]


class CheckpointData(BaseModel):
    """Checkpoint data for resuming an interrupted batch run.

    Processed topics are not tracked here: they are the topics already
    present in the output file.
    """

    output_path: Optional[str] = None
    failed_topics: list[str] = Field(default_factory=list)
