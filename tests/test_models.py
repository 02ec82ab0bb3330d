"""Tests for the data models and settings."""

import pytest
from pydantic import ValidationError

import config
from japp.models import (
    Failure,
    FailureKind,
    GeneratedVocabularyRecord,
    GeneratorSettings,
    Success,
    VocabularyTopic,
)


def test_success_requires_records() -> None:
    with pytest.raises(ValidationError):
        Success(records=[])


def test_failure_shape() -> None:
    failure = Failure(reason="offline", kind=FailureKind.CONNECTIVITY)

    assert failure.ok is False
    assert failure.diagnostic is None


def test_record_is_immutable() -> None:
    record = GeneratedVocabularyRecord(source_word="rot", pronunciation="aka", phonetic_script="あか")

    with pytest.raises(ValidationError):
        record.source_word = "blau"


def test_record_fields_are_stripped() -> None:
    record = GeneratedVocabularyRecord(
        source_word=" rot ", pronunciation="aka\n", phonetic_script=" あか", logographic_script=" 赤 "
    )

    assert record.source_word == "rot"
    assert record.pronunciation == "aka"
    assert record.phonetic_script == "あか"
    assert record.logographic_script == "赤"


def test_record_rejects_empty_required_fields() -> None:
    with pytest.raises(ValidationError):
        GeneratedVocabularyRecord(source_word="rot", pronunciation="  ", phonetic_script="あか")

    with pytest.raises(ValidationError):
        GeneratedVocabularyRecord(source_word="", pronunciation="aka", phonetic_script="あか")


def test_record_blank_logographic_script_is_none() -> None:
    record = GeneratedVocabularyRecord(
        source_word="rot", pronunciation="aka", phonetic_script="あか", logographic_script="   "
    )

    assert record.logographic_script is None


def test_topic_is_stripped() -> None:
    assert VocabularyTopic(text="  colors \n").text == "colors"

    with pytest.raises(ValidationError):
        VocabularyTopic(text="   ")


def test_settings_defaults() -> None:
    settings = GeneratorSettings()

    assert settings.api_key is None
    assert settings.api_url == "https://api.groq.com/openai/v1/chat/completions"
    assert settings.temperature == 0.7
    assert settings.max_tokens == 2000
    assert settings.word_count == 10
    assert settings.timeout == config.REQUEST_TIMEOUT


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setenv("NEXT_PUBLIC_GROQ_API_KEY", " public-key ")

    assert GeneratorSettings.from_env().api_key == "public-key"

    monkeypatch.setenv("GROQ_API_KEY", "server-key")
    assert GeneratorSettings.from_env().api_key == "server-key"
    assert GeneratorSettings.from_env(api_key="explicit").api_key == "explicit"


def test_settings_from_env_without_key(monkeypatch) -> None:
    for name in config.API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    assert GeneratorSettings.from_env().api_key is None

    monkeypatch.setenv("GROQ_API_KEY", "   ")
    assert GeneratorSettings.from_env().api_key is None
