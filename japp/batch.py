"""Batch generation: generate vocabulary for every topic in a file."""

import json
from pathlib import Path

import pandas as pd
from tqdm import tqdm

import config
from japp.checkpoint import CheckpointManager
from japp.logger import get_logger
from japp.models import Failure, FailureKind, TopicVocabulary
from japp.pipeline import VocabularyGenerator

CSV_COLUMNS = ["topic", "source_word", "pronunciation", "phonetic_script", "logographic_script"]


def load_topics(path: Path) -> list[str]:
    """
    Load topics from a text file (one topic per line).

    Blank lines and lines starting with '#' are skipped; duplicates are
    dropped keeping the first occurrence.
    """
    topics = []
    seen = set()
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            topic = line.strip()
            if not topic or topic.startswith("#") or topic in seen:
                continue
            seen.add(topic)
            topics.append(topic)
    return topics


def load_output(path: Path) -> list[TopicVocabulary]:
    """Load previously generated batch output from JSON."""
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [TopicVocabulary(**item) for item in data]


def save_output(entries: list[TopicVocabulary], path: Path) -> None:
    """Save batch output to JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([e.model_dump() for e in entries], f, ensure_ascii=False, indent=2)


def export_csv(entries: list[TopicVocabulary], path: Path) -> pd.DataFrame:
    """
    Flatten batch output to one CSV row per card.

    Args:
        entries: Generated vocabulary per topic
        path: CSV file to write

    Returns:
        The exported DataFrame
    """
    rows = [
        {"topic": entry.topic, **record.model_dump()}
        for entry in entries
        for record in entry.records
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)

    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return df


class BatchResumeError(Exception):
    """A batch run cannot be resumed."""


def _resolve_output_path(
    checkpoint: CheckpointManager, output_path: Path | None, resume: bool
) -> Path:
    """
    Pick the output file for a run and record it in the checkpoint.

    A fresh run discards the old checkpoint. A resumed run keeps writing to
    the file of the checkpointed run unless output_path names another one.
    """
    if not resume:
        output_path = output_path or config.get_output_path()
        checkpoint.start(output_path)
        return output_path

    if output_path is None:
        output_path = checkpoint.output_path
        if output_path is None:
            raise BatchResumeError(
                f"No checkpointed run found in {checkpoint.checkpoint_path}; "
                "pass --output with the file of the run to resume"
            )
    else:
        checkpoint.load().output_path = str(output_path)
        checkpoint.save()
    return output_path


def run_batch(
    topics_path: Path,
    generator: VocabularyGenerator,
    output_path: Path | None = None,
    checkpoint_path: Path | None = None,
    csv_path: Path | None = None,
    resume: bool = False,
    dry_run: bool = False,
) -> list[TopicVocabulary]:
    """
    Generate vocabulary for every topic in a file.

    Args:
        topics_path: Text file with one topic per line
        generator: Vocabulary generator to call for each topic
        output_path: Path to save JSON output. If None, a fresh run uses a
            timestamped file and a resumed run uses the checkpointed run's file.
        checkpoint_path: Checkpoint file for resumable runs. If None, uses config.BATCH_CHECKPOINT.
        csv_path: Optional path for a flattened CSV export
        resume: Whether to resume from checkpoint and existing output
        dry_run: If True, only process a small number of topics

    Returns:
        Generated vocabulary per topic

    Raises:
        BatchResumeError: resume was requested but no output file is known
    """
    logger = get_logger()

    checkpoint = CheckpointManager(checkpoint_path or config.BATCH_CHECKPOINT)
    output_path = _resolve_output_path(checkpoint, output_path, resume)

    topics = load_topics(topics_path)
    logger.info(f"Loaded {len(topics)} topics from {topics_path}")

    entries = load_output(output_path) if resume else []
    entries_dict = {e.topic: e for e in entries}
    if resume:
        logger.info(f"  Resuming {output_path}: {len(entries_dict)} topics already done")

    if dry_run:
        topics = topics[: config.DRY_RUN_LIMIT]
        logger.info(f"  Dry run: processing {len(topics)} topics")

    topics = [t for t in topics if t not in entries_dict]

    if not topics:
        logger.info("  No topics to process (all already completed)")
        return entries

    total = len(topics)
    consecutive_failures = 0
    generated = 0

    try:
        for i, topic in enumerate(tqdm(topics, desc="  Generating")):
            logger.debug(f"  [{i+1}/{total}] Processing: {topic}")
            result = generator.generate(topic)

            if isinstance(result, Failure):
                checkpoint.mark_failed(topic)
                logger.error(f"  [{i+1}/{total}] Failed: {topic} - {result.reason}")

                # Repeated transport errors usually mean rate limiting or an outage
                if result.kind == FailureKind.TRANSPORT:
                    consecutive_failures += 1
                    if consecutive_failures >= config.CONSECUTIVE_FAILURE_THRESHOLD:
                        logger.error(
                            f"  Stopping after {consecutive_failures} consecutive transport errors"
                        )
                        break
                else:
                    consecutive_failures = 0
            else:
                entries_dict[topic] = TopicVocabulary(topic=topic, records=result.records)
                checkpoint.clear_failed(topic)
                generated += 1
                consecutive_failures = 0

            if (i + 1) % config.SAVE_EVERY == 0:
                save_output(list(entries_dict.values()), output_path)
                logger.debug(f"  Checkpoint saved: {len(entries_dict)} topics")
    finally:
        save_output(list(entries_dict.values()), output_path)

    result_entries = list(entries_dict.values())

    logger.info(f"  Saved {len(result_entries)} topics to: {output_path}")
    logger.info(f"  Successfully processed: {generated}")
    logger.info(f"  Failed: {checkpoint.failed_count}")

    failed = checkpoint.get_failed_topics()
    if failed:
        logger.warning(f"Failed topics ({len(failed)}): {', '.join(failed[:5])}")
        if len(failed) > 5:
            logger.warning(f"  ... and {len(failed) - 5} more")

    if csv_path is not None:
        df = export_csv(result_entries, csv_path)
        logger.info(f"  Exported {len(df)} cards to: {csv_path}")

    return result_entries
