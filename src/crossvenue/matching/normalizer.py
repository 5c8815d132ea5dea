"""
Title normalisation for cross-venue matching.

Turns a market title into a canonical term set plus auxiliary signals
(year, all-caps ticker, capitalised entity runs, numeric tokens, bracket range).
All functions are pure; ``normalize_market_title`` is memoised per title.

Usage:
    from crossvenue.matching.normalizer import normalize_market_title

    norm = normalize_market_title("GDP growth in 2025? 2.1 to 2.5")
    norm.terms       # ('gdp', 'growth', '2025')
    norm.bracket     # BracketRange(low=2.1, high=2.5, kind='range')
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, List, Optional, Tuple

from .rules import BASE_EVENT_STRIP, BRACKET_RULES, first_match


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

STOP_WORDS: FrozenSet[str] = frozenset({
    "will", "the", "a", "an", "in", "on", "at", "by", "for", "to", "of", "be",
    "is", "are", "was", "were", "do", "does", "did", "have", "has", "had",
    "yes", "no", "or", "and", "but", "if", "then", "than", "this", "that",
    "what", "which", "who", "whom", "when", "where", "why", "how",
    "before", "after", "during", "between", "above", "below",
})

_PUNCT = re.compile(r"[^a-z0-9\s]")
_YEAR = re.compile(r"\b(202[4-9]|203[0-9])\b")
_TICKER = re.compile(r"\b([A-Z]{2,5})\b")
_ENTITY = re.compile(r"\b[A-Z][A-Za-z]+(?:\s+[A-Z][A-Za-z]+)*")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")

# Capitalised words that start a question rather than name something
_LEADING_WORDS: FrozenSet[str] = STOP_WORDS | {"can", "could", "would", "should"}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BracketRange:
    """
    Numeric bracket parsed from a title.

    ``kind`` is "range", "above" (high is +inf) or "below" (low is -inf).
    """

    low: float
    high: float
    kind: str

    @property
    def width(self) -> float:
        return self.high - self.low


@dataclass(frozen=True)
class NormalizedTitle:
    """Everything the index, gate and scorer need from one title."""

    title: str
    terms: Tuple[str, ...]
    base_event: str
    base_terms: Tuple[str, ...]
    year: Optional[str]
    ticker: Optional[str]
    entities: Tuple[str, ...]
    numbers: Tuple[str, ...]
    bracket: Optional[BracketRange]


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def _tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation, remove stop words and short tokens."""
    text = _PUNCT.sub(" ", text.lower())
    return [t for t in text.split() if len(t) > 2 and t not in STOP_WORDS]


def extract_terms(title: str) -> List[str]:
    return _tokenize(title)


def extract_base_event(title: str) -> str:
    """
    Strip bracket and threshold numbers from a title.

    "GDP growth in 2025? 2.1 to 2.5" -> "gdp growth in 2025"
    """
    text = title.lower()
    for pattern in BASE_EVENT_STRIP:
        text = pattern.sub(" ", text)
    text = _PUNCT.sub(" ", text)
    return " ".join(text.split())


def extract_base_terms(title: str) -> List[str]:
    return _tokenize(extract_base_event(title))


def extract_year(title: str) -> Optional[str]:
    match = _YEAR.search(title)
    return match.group(1) if match else None


def extract_ticker(title: str) -> Optional[str]:
    """First 2-5 letter all-caps token (BTC, GDP, NFL), lower-cased."""
    match = _TICKER.search(title)
    return match.group(1).lower() if match else None


def extract_entities(title: str) -> List[str]:
    """Capitalised word runs with leading question words dropped, lower-cased."""
    entities: List[str] = []
    for match in _ENTITY.finditer(title):
        words = match.group(0).split()
        while words and words[0].lower() in _LEADING_WORDS:
            words.pop(0)
        if words:
            entity = " ".join(words).lower()
            if entity not in entities:
                entities.append(entity)
    return entities


def extract_numbers(title: str) -> List[str]:
    return _NUMBER.findall(title)


def extract_bracket(title: str) -> Optional[BracketRange]:
    """Parse the first bracket shape found by the ordered bracket rules."""
    found = first_match(BRACKET_RULES, title.lower())
    if found is None:
        return None

    rule, match = found
    if rule.outcome == "range":
        low, high = float(match.group(1)), float(match.group(2))
        if low > high:
            low, high = high, low
        return BracketRange(low, high, "range")
    if rule.outcome == "above":
        return BracketRange(float(match.group(1)), math.inf, "above")
    return BracketRange(-math.inf, float(match.group(1)), "below")


@lru_cache(maxsize=65536)
def normalize_market_title(title: str) -> NormalizedTitle:
    base_event = extract_base_event(title)
    return NormalizedTitle(
        title=title,
        terms=tuple(extract_terms(title)),
        base_event=base_event,
        base_terms=tuple(_tokenize(base_event)),
        year=extract_year(title),
        ticker=extract_ticker(title),
        entities=tuple(extract_entities(title)),
        numbers=tuple(extract_numbers(title)),
        bracket=extract_bracket(title),
    )


def jaccard(a, b) -> float:
    """Jaccard similarity of two iterables treated as sets (0 when both empty)."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
