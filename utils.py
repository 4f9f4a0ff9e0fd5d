"""
Utility functions for the rateio simulator
"""
from __future__ import annotations
import os
import re
import uuid

SMALL_WORDS = {"a", "o", "e", "de", "do", "da", "dos", "das", "em", "no", "na", "por", "para", "com", "s/"}

_NON_DIGITS = re.compile(r"\D")


def new_id() -> str:
    """Mint a fresh identity"""
    return str(uuid.uuid4())


def safe_float(x, default: float = 0.0) -> float:
    """Convert value to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def format_currency(value: float) -> str:
    """Format amount as pt-BR currency text, e.g. 1234.5 -> '1.234,50'"""
    s = f"{float(value):,.2f}"
    return s.replace(",", "X").replace(".", ",").replace("X", ".")


def parse_currency(text: str) -> float:
    """
    Parse user-typed currency text.
    The two rightmost digits are always cents; any other character is a separator.
    Unparseable input gives 0.
    """
    if not text:
        return 0.0
    digits = _NON_DIGITS.sub("", str(text))
    if not digits:
        return 0.0
    return int(digits) / 100


def format_currency_input(text: str) -> str:
    """Re-format raw typed text using cents-based parsing"""
    return format_currency(parse_currency(text))


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def to_title_case(text: str) -> str:
    """Title-case a description keeping Portuguese connectives lowercase"""
    if not text:
        return ""
    words = []
    for i, word in enumerate(text.lower().split(" ")):
        if "-" in word:
            words.append("-".join(_capitalize(w) for w in word.split("-")))
        elif i > 0 and word in SMALL_WORDS:
            words.append(word)
        else:
            words.append(_capitalize(word))
    return " ".join(words)


def app_dir() -> str:
    """
    Get application data directory: ~/Library/Application Support/RateioTrabalhista
    Creates directory if it doesn't exist.
    """
    base = os.path.expanduser("~/Library/Application Support")
    path = os.path.join(base, "RateioTrabalhista")
    os.makedirs(path, exist_ok=True)
    return path
