"""Chat-completion API wrapper for vocabulary generation."""

from pathlib import Path
from typing import Any, Optional

import httpx

import config
from japp.json_repair import JSONRepairError, parse_with_fallbacks
from japp.logger import get_logger
from japp.models import FailureKind, GeneratedVocabularyRecord, GeneratorSettings

REQUIRED_FIELDS = ("source_word", "pronunciation", "phonetic_script")


class VocabularyGenerationError(Exception):
    """Raised when vocabulary generation fails.

    `reason` is short and safe to show to the user; `diagnostic` holds
    details (status codes, raw bodies, parser errors) meant for logs only.
    """

    kind = FailureKind.TRANSPORT

    def __init__(self, reason: str, diagnostic: Optional[dict[str, Any]] = None):
        super().__init__(reason)
        self.reason = reason
        self.diagnostic = diagnostic


class InvalidTopicError(VocabularyGenerationError):
    """Raised when the topic is empty."""

    kind = FailureKind.INVALID_TOPIC


class ConfigurationError(VocabularyGenerationError):
    """Raised when the API key is not configured."""

    kind = FailureKind.CONFIGURATION


class ConnectivityError(VocabularyGenerationError):
    """Raised when the host environment reports no network."""

    kind = FailureKind.CONNECTIVITY


class TransportError(VocabularyGenerationError):
    """Raised when the HTTP call fails or returns a non-success status."""

    kind = FailureKind.TRANSPORT

    def __str__(self) -> str:
        if self.diagnostic and "status_code" in self.diagnostic:
            return f"{self.reason} (HTTP {self.diagnostic['status_code']}: {self.diagnostic.get('body', '')})"
        return self.reason


class MalformedContentError(VocabularyGenerationError):
    """Raised when the AI reply cannot be turned into vocabulary records."""

    kind = FailureKind.MALFORMED_CONTENT


def load_prompt_template(path: Path = config.VOCABULARY_GENERATION_PROMPT) -> str:
    """Load the prompt template from file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def build_prompt(topic: str, settings: GeneratorSettings, template: str | None = None) -> str:
    """
    Fill the vocabulary prompt template for a topic.

    Args:
        topic: Stripped, non-empty topic
        settings: Generator settings (word count and languages)
        template: Prompt template; loaded from the prompts directory if None

    Returns:
        The prompt to send as the user message
    """
    if template is None:
        template = load_prompt_template()
    return template.format(
        topic=topic,
        count=settings.word_count,
        source_language=settings.source_language,
        target_language=settings.target_language,
    )


def build_request_body(prompt: str, settings: GeneratorSettings) -> dict:
    """Build the chat-completion request body."""
    return {
        "model": settings.model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
    }


def request_completion(prompt: str, settings: GeneratorSettings, client: httpx.Client) -> dict:
    """
    Send one chat-completion request. No retries.

    Args:
        prompt: The user message
        settings: Generator settings with a non-empty api_key
        client: HTTP client to send the request with

    Returns:
        Decoded JSON response body

    Raises:
        TransportError: On network errors or non-2xx responses
        MalformedContentError: If a 2xx body is not JSON
    """
    logger = get_logger()

    try:
        response = client.post(
            settings.api_url,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
            },
            json=build_request_body(prompt, settings),
            timeout=settings.timeout,
        )
    except httpx.HTTPError as e:
        raise TransportError(
            "AI service request failed",
            diagnostic={"error": f"{type(e).__name__}: {e}"},
        ) from e

    if not response.is_success:
        raise TransportError(
            "AI service request failed",
            diagnostic={"status_code": response.status_code, "body": response.text},
        )

    try:
        data = response.json()
    except ValueError as e:
        raise MalformedContentError(
            "no content returned",
            diagnostic={"status_code": response.status_code, "body": response.text},
        ) from e

    logger.debug(f"AI response: {data}")
    return data


def extract_content(data: Any) -> str:
    """
    Extract the reply text from `choices[0].message.content`.

    Raises:
        MalformedContentError: If the field is missing or empty
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None

    if not isinstance(content, str) or not content.strip():
        raise MalformedContentError("no content returned", diagnostic={"response": data})

    return content


def parse_content(content: str) -> list:
    """
    Parse the reply text into a JSON array.

    Raises:
        MalformedContentError: If no strategy parses it, or it is not an array
    """
    logger = get_logger()

    try:
        parsed = parse_with_fallbacks(content)
    except JSONRepairError as e:
        logger.warning(f"Could not parse AI reply: {e}")
        logger.debug(f"Raw AI reply: {content}")
        raise MalformedContentError(
            "invalid JSON format returned by AI",
            diagnostic={"content": content, "parse_errors": e.errors},
        ) from e

    if not isinstance(parsed, list):
        raise MalformedContentError("AI response is not an array", diagnostic={"content": content})

    return parsed


def _clean_text(value: Any) -> str | None:
    """Return the stripped string, or None if not a non-empty string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_records(items: list) -> list[GeneratedVocabularyRecord]:
    """
    Validate parsed items into vocabulary records.

    Items missing a required field (or holding an empty one) are dropped.
    All kept fields are stripped; an empty or non-string
    logographic_script becomes None.

    Args:
        items: Parsed JSON array

    Returns:
        Valid records, in input order
    """
    records = []
    for item in items:
        if not isinstance(item, dict):
            continue
        fields = {name: _clean_text(item.get(name)) for name in REQUIRED_FIELDS}
        if not all(fields.values()):
            continue
        records.append(
            GeneratedVocabularyRecord(
                **fields,
                logographic_script=_clean_text(item.get("logographic_script")),
            )
        )
    return records
