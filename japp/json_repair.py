"""Lenient JSON extraction from free-form LLM replies.

Each strategy takes the raw reply text and either returns the parsed value or
raises ValueError (json.JSONDecodeError is a subclass). Strategies are tried in
order by parse_with_fallbacks until one succeeds; a RecursionError from deeply
nested input counts as a failed strategy too.
"""

import json
import re
from typing import Any, Callable, Sequence

from japp.logger import get_logger

ParseStrategy = Callable[[str], Any]

_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```", re.IGNORECASE)
_NON_PRINTABLE_ASCII_RE = re.compile(r"[^\x20-\x7E]")


class JSONRepairError(ValueError):
    """Raised when no strategy could parse the reply."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        details = "; ".join(f"{name}: {error}" for name, error in errors.items())
        super().__init__(f"All JSON parse strategies failed ({details})")


def strip_code_fence(content: str) -> str:
    """Remove markdown code-block delimiters and surrounding whitespace."""
    return _FENCE_RE.sub("", content).strip()


def strip_comments(text: str) -> str:
    """
    Remove // line comments and /* */ block comments outside of strings.

    Args:
        text: JSON-like text

    Returns:
        Text with comments removed
    """
    out = []
    i = 0
    in_string = False
    length = len(text)

    while i < length:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
        elif char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = length if newline == -1 else newline
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = length if close == -1 else close + 2
        else:
            out.append(char)
            i += 1

    return "".join(out)


def find_bracket_pairs(text: str) -> dict[int, int]:
    """
    Match every `[` with its closing `]` in one pass.

    Scanning starts at the first `[`; brackets inside JSON strings are
    ignored. A `[` that is never closed has no entry.

    Returns:
        Mapping of opening index to closing index
    """
    pairs = {}
    stack = []
    in_string = False
    escaped = False

    start = text.find("[")
    if start == -1:
        return pairs

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "[":
            stack.append(i)
        elif char == "]" and stack:
            pairs[stack.pop()] = i

    return pairs


def parse_strict(content: str) -> Any:
    """Stage A: drop a code fence, then parse as-is."""
    return json.loads(strip_code_fence(content))


def parse_trimmed(content: str) -> Any:
    """Stage B: cut surrounding prose and comments, then parse."""
    text = strip_code_fence(content)

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise ValueError("No JSON object or array start found")
    start = min(starts)
    end = max(text.rfind("}"), text.rfind("]"))
    if end < start:
        raise ValueError("No JSON object or array end found")

    return json.loads(strip_comments(text[start : end + 1]))


def parse_ascii_brackets(content: str) -> Any:
    """Stage C: keep printable ASCII only and parse the first well-formed array."""
    text = _NON_PRINTABLE_ASCII_RE.sub("", content)
    pairs = find_bracket_pairs(text)

    for start in sorted(pairs):
        try:
            return json.loads(text[start : pairs[start] + 1])
        except json.JSONDecodeError:
            continue

    raise ValueError("No well-formed JSON array found")


DEFAULT_STRATEGIES: tuple[ParseStrategy, ...] = (
    parse_strict,
    parse_trimmed,
    parse_ascii_brackets,
)


def parse_with_fallbacks(
    content: str,
    strategies: Sequence[ParseStrategy] = DEFAULT_STRATEGIES,
) -> Any:
    """
    Parse an LLM reply, trying each strategy in order.

    Args:
        content: Raw reply text
        strategies: Parse strategies, most strict first

    Returns:
        The first successfully parsed value

    Raises:
        JSONRepairError: If every strategy fails
    """
    logger = get_logger()
    errors = {}

    for strategy in strategies:
        try:
            return strategy(content)
        except (ValueError, RecursionError) as e:
            errors[strategy.__name__] = str(e) or type(e).__name__
            logger.debug(f"{strategy.__name__} failed: {e}")

    raise JSONRepairError(errors)
