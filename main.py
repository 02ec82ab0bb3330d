#!/usr/bin/env python3
"""Japp vocabulary generation - command line entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path

import config
from japp.batch import BatchResumeError, run_batch
from japp.logger import setup_logger
from japp.models import Failure, GeneratorSettings
from japp.pipeline import VocabularyGenerator


def format_record(record) -> str:
    """Format a record as one line: source word, kana, kanji, romaji."""
    kanji = f" [{record.logographic_script}]" if record.logographic_script else ""
    return f"{record.source_word}: {record.phonetic_script}{kanji} ({record.pronunciation})"


def cmd_generate(args, generator: VocabularyGenerator, logger) -> int:
    result = generator.generate(args.topic)

    if isinstance(result, Failure):
        logger.error(f"Generation failed: {result.reason}")
        return 1

    if args.json:
        print(json.dumps([r.model_dump() for r in result.records], ensure_ascii=False, indent=2))
    else:
        for record in result.records:
            logger.info(format_record(record))
    return 0


def cmd_batch(args, generator: VocabularyGenerator, logger) -> int:
    logger.info("=" * 60)
    logger.info("Japp Batch Vocabulary Generation")
    logger.info("=" * 60)
    if args.resume:
        logger.info("Mode: Resume from checkpoint")
    if args.dry_run:
        logger.info(f"Mode: Dry run ({config.DRY_RUN_LIMIT} topics)")

    try:
        run_batch(
            topics_path=args.topics_file,
            generator=generator,
            output_path=args.output,
            csv_path=args.csv,
            resume=args.resume,
            dry_run=args.dry_run,
        )
    except BatchResumeError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Batch interrupted by user.")
        logger.info("Progress has been saved. Use --resume to continue the same output file.")
        return 1
    except Exception as e:
        logger.error(f"Batch error: {e}", exc_info=True)
        return 1

    logger.info("=" * 60)
    logger.info("Batch completed.")
    logger.info("=" * 60)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Japp AI vocabulary generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate vocabulary for one topic
  python main.py generate colors

  # Generate for every topic in a file, with CSV export
  python main.py batch topics.txt --csv generated/cards.csv

  # Resume an interrupted batch
  python main.py batch topics.txt --resume
        """,
    )
    parser.add_argument("--verbose", action="store_true", help="Show debug output on the console")

    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate vocabulary for one topic")
    gen.add_argument("topic", help="Topic, e.g. 'colors'")
    gen.add_argument("--json", action="store_true", help="Print records as JSON")
    gen.set_defaults(func=cmd_generate)

    batch = subparsers.add_parser("batch", help="Generate vocabulary for a file of topics")
    batch.add_argument("topics_file", type=Path, help="Text file with one topic per line")
    batch.add_argument(
        "--output",
        type=Path,
        help="JSON output path (default: timestamped, or the checkpointed file with --resume)",
    )
    batch.add_argument("--csv", type=Path, help="Also export cards to this CSV file")
    batch.add_argument("--resume", action="store_true", help="Resume the last run from its checkpoint")
    batch.add_argument(
        "--dry-run",
        action="store_true",
        help=f"Process only {config.DRY_RUN_LIMIT} topics for testing",
    )
    batch.set_defaults(func=cmd_batch)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = GeneratorSettings.from_env()
    if not settings.api_key:
        logger.warning(f"No API key found; set one of {', '.join(config.API_KEY_ENV_VARS)}")

    generator = VocabularyGenerator(settings)
    return args.func(args, generator, logger)


if __name__ == "__main__":
    sys.exit(main())
