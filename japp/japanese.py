"""Japanese script helpers used to sanity-check generated vocabulary."""

import re
import unicodedata

import pykakasi

from japp.models import GeneratedVocabularyRecord

_kakasi = pykakasi.kakasi()

_KANJI_RE = re.compile(r"[\u4e00-\u9faf]")
_KANA_RE = re.compile(r"^[\u3040-\u30ff]+$")
_ROMAJI_RE = re.compile(r"^[a-zA-Z0-9\s\-']+$")
_NON_LETTER_RE = re.compile(r"[^a-z]")
_REPEATED_VOWEL_RE = re.compile(r"([aeiou])\1+")


def has_kanji(text: str) -> bool:
    """Check whether the text contains at least one kanji."""
    return bool(_KANJI_RE.search(text))


def is_kana(text: str) -> bool:
    """Check whether the text is made of hiragana and/or katakana only."""
    return bool(_KANA_RE.match(text))


def is_valid_romaji(text: str) -> bool:
    """Check whether the text looks like romaji (latin letters, digits, spaces, - and ')."""
    return bool(_ROMAJI_RE.match(text))


def to_romaji(text: str) -> str:
    """Hepburn reading of Japanese text, e.g. "あか" -> "aka"."""
    return "".join(item["hepburn"] for item in _kakasi.convert(text))


def improve_romaji(romaji: str) -> str:
    """
    Normalize a romanized reading for comparison.

    Lowercases, drops macrons, spaces, hyphens and apostrophes, spells long
    "ou" as "o" and collapses doubled vowels, so "Tōkyō", "toukyou" and
    "Tookyoo" all become "tokyo".
    """
    text = unicodedata.normalize("NFKD", romaji.lower())
    text = _NON_LETTER_RE.sub("", text)
    text = text.replace("ou", "o")
    return _REPEATED_VOWEL_RE.sub(r"\1", text)


def check_record(record: GeneratedVocabularyRecord) -> list[str]:
    """
    Check a generated record for script mismatches.

    Args:
        record: The record to check

    Returns:
        List of warning messages (empty if the record looks right)
    """
    warnings = []
    kana = record.phonetic_script.replace(" ", "")

    if not is_kana(kana):
        warnings.append(f"phonetic_script '{record.phonetic_script}' is not kana")

    if record.logographic_script and not has_kanji(record.logographic_script):
        warnings.append(f"logographic_script '{record.logographic_script}' contains no kanji")

    if not is_valid_romaji(record.pronunciation):
        warnings.append(f"pronunciation '{record.pronunciation}' is not romaji")
    elif is_kana(kana):
        reading = to_romaji(kana)
        if improve_romaji(reading) != improve_romaji(record.pronunciation):
            warnings.append(
                f"pronunciation '{record.pronunciation}' does not match the reading '{reading}' of '{kana}'"
            )

    return warnings
