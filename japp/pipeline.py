"""Vocabulary generation pipeline: topic in, validated records or a failure out."""

from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from japp.groq_client import (
    ConfigurationError,
    ConnectivityError,
    InvalidTopicError,
    MalformedContentError,
    VocabularyGenerationError,
    build_prompt,
    extract_content,
    load_prompt_template,
    parse_content,
    parse_records,
    request_completion,
)
from japp.japanese import check_record
from japp.logger import get_logger
from japp.models import (
    Connectivity,
    Failure,
    FailureKind,
    GeneratedVocabularyRecord,
    GeneratorSettings,
    PipelineResult,
    Success,
    VocabularyTopic,
)

ConnectivityProbe = Callable[[], Connectivity]


class VocabularyGenerator:
    """Generates vocabulary records for a topic with one chat-completion call.

    The generator holds no per-call state and may be shared between callers.
    """

    def __init__(
        self,
        settings: GeneratorSettings,
        client: Optional[httpx.Client] = None,
        connectivity: Optional[ConnectivityProbe] = None,
        prompt_template: Optional[str] = None,
    ):
        """
        Initialize the generator.

        Args:
            settings: API key, endpoint and generation settings
            client: HTTP client to reuse; a fresh one is opened per call if None
            connectivity: Optional probe reporting the host's network state
            prompt_template: Prompt template; loaded from the prompts directory if None
        """
        self.settings = settings
        self.client = client
        self.connectivity = connectivity
        self.prompt_template = (
            prompt_template if prompt_template is not None else load_prompt_template()
        )

    def generate(self, topic: str) -> PipelineResult:
        """
        Generate vocabulary for a topic.

        Never raises: every error becomes a Failure.

        Args:
            topic: Free-text topic, e.g. "colors"

        Returns:
            Success with at least one record, or Failure with a reason
        """
        logger = get_logger()

        try:
            records = self._generate(topic)
        except VocabularyGenerationError as e:
            logger.error(f"AI generation failed for {topic!r}: {e}")
            return Failure(reason=e.reason, kind=e.kind, diagnostic=e.diagnostic)
        except Exception as e:
            logger.error(f"Unexpected AI generation error for {topic!r}: {e}", exc_info=True)
            return Failure(
                reason="unexpected error during AI generation",
                kind=FailureKind.INTERNAL,
                diagnostic={"error": f"{type(e).__name__}: {e}"},
            )

        logger.info(f"Generated {len(records)} cards for {topic!r}")
        return Success(records=records)

    def _generate(self, topic: str) -> list[GeneratedVocabularyRecord]:
        logger = get_logger()

        try:
            topic = VocabularyTopic(text=topic).text
        except ValidationError as e:
            raise InvalidTopicError("topic is required", diagnostic={"error": str(e)}) from e

        if not self.settings.api_key or not self.settings.api_key.strip():
            raise ConfigurationError("credential not configured")

        if self.connectivity is not None and self.connectivity() == Connectivity.OFFLINE:
            raise ConnectivityError("offline")

        prompt = build_prompt(topic, self.settings, self.prompt_template)
        logger.debug(f"Requesting {self.settings.word_count} words for {topic!r} from {self.settings.model}")

        if self.client is not None:
            data = request_completion(prompt, self.settings, self.client)
        else:
            with httpx.Client(timeout=self.settings.timeout) as client:
                data = request_completion(prompt, self.settings, client)

        content = extract_content(data)
        items = parse_content(content)
        records = parse_records(items)

        if not records:
            raise MalformedContentError(
                "no valid cards found in AI response",
                diagnostic={"content": content},
            )

        dropped = len(items) - len(records)
        if dropped:
            logger.warning(f"Dropped {dropped} invalid cards from AI response for {topic!r}")

        for record in records:
            for warning in check_record(record):
                logger.warning(f"  {record.source_word}: {warning}")

        return records


def generate(
    topic: str,
    settings: Optional[GeneratorSettings] = None,
    client: Optional[httpx.Client] = None,
    connectivity: Optional[ConnectivityProbe] = None,
) -> PipelineResult:
    """
    Generate vocabulary for a topic with a one-off generator.

    Args:
        topic: Free-text topic
        settings: Generator settings; resolved from the environment if None
        client: Optional HTTP client to reuse
        connectivity: Optional network-state probe

    Returns:
        Success or Failure
    """
    if settings is None:
        settings = GeneratorSettings.from_env()
    return VocabularyGenerator(settings, client=client, connectivity=connectivity).generate(topic)
