"""
Primary-entity validation for market pairs.

Two titles may share most of their words and still describe different
contracts: a different politician, coin, economic indicator, price target,
year or bracket. Each check here returns a reason code on conflict so the
compatibility gate can veto the pair.

Usage:
    from crossvenue.matching.entities import validate_entities

    reason = validate_entities(title_a, title_b)   # None when compatible
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from crossvenue.config import MatchingSettings

from .normalizer import extract_bracket, extract_year

# ---------------------------------------------------------------------------
# Entity dictionaries
# ---------------------------------------------------------------------------

POLITICAL_FIGURES: Dict[str, List[str]] = {
    "trump": ["trump", "donald trump", "donald j trump", "djt"],
    "biden": ["biden", "joe biden", "joseph biden"],
    "harris": ["harris", "kamala harris", "kamala"],
    "desantis": ["desantis", "ron desantis"],
    "obama": ["obama", "barack obama"],
    "vance": ["vance", "jd vance", "j.d. vance"],
    "pence": ["pence", "mike pence"],
    "newsom": ["newsom", "gavin newsom"],
    "haley": ["haley", "nikki haley"],
    "ramaswamy": ["ramaswamy", "vivek"],
}

CRYPTO_ASSETS: Dict[str, List[str]] = {
    "btc": ["btc", "bitcoin"],
    "eth": ["eth", "ethereum"],
    "sol": ["sol", "solana"],
    "xrp": ["xrp"],
    "doge": ["doge", "dogecoin"],
    "ada": ["ada", "cardano"],
}

ECONOMIC_INDICATORS: Dict[str, List[str]] = {
    "gdp": ["gdp", "gross domestic product"],
    "inflation": ["inflation", "cpi", "consumer price index"],
    "unemployment": ["unemployment", "jobless", "jobs report"],
    "interest_rate": ["interest rate", "fed rate", "federal funds rate", "fomc"],
    "pce": ["pce", "personal consumption"],
}


def _compile_aliases(table: Dict[str, List[str]]) -> List[Tuple[str, Pattern[str]]]:
    """One word-bounded alternation per canonical name, in table order."""
    compiled = []
    for canonical, aliases in table.items():
        alternation = "|".join(re.escape(a) for a in sorted(aliases, key=len, reverse=True))
        compiled.append((canonical, re.compile(r"\b(?:" + alternation + r")\b", re.IGNORECASE)))
    return compiled


_FIGURE_PATTERNS = _compile_aliases(POLITICAL_FIGURES)
_CRYPTO_PATTERNS = _compile_aliases(CRYPTO_ASSETS)
_INDICATOR_PATTERNS = _compile_aliases(ECONOMIC_INDICATORS)


def _first_canonical(patterns: List[Tuple[str, Pattern[str]]], title: str) -> Optional[str]:
    for canonical, pattern in patterns:
        if pattern.search(title):
            return canonical
    return None


def extract_political_figure(title: str) -> Optional[str]:
    return _first_canonical(_FIGURE_PATTERNS, title)


def extract_crypto_asset(title: str) -> Optional[str]:
    return _first_canonical(_CRYPTO_PATTERNS, title)


def extract_economic_indicator(title: str) -> Optional[str]:
    return _first_canonical(_INDICATOR_PATTERNS, title)


# ---------------------------------------------------------------------------
# Numeric targets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NumericTarget:
    value: float
    kind: str  # "price" or "percent"


_PRICE = re.compile(r"(\$)?(\d[\d,]*(?:\.\d+)?)\s*([km])?\b", re.IGNORECASE)
_PERCENT = re.compile(
    r"(?:above|below|reach|hit|exceed|over|under)\s*(\d+(?:\.\d+)?)\s*%", re.IGNORECASE
)
_NEGATIVE = re.compile(r"\bnegative\b", re.IGNORECASE)
_MULTIPLIERS = {"k": 1_000.0, "m": 1_000_000.0}


def extract_numeric_target(title: str) -> Optional[NumericTarget]:
    """
    Main numeric target of a title.

    Prices ("$100k", "100,000", "$95,000") take precedence and must be at
    least 1000; bare four-digit years are not prices. Otherwise a threshold
    percentage ("above 2.5%", "reach 3%"), where "negative" reads as 0%.
    """
    for match in _PRICE.finditer(title):
        dollar, digits, suffix = match.groups()
        value = float(digits.replace(",", ""))
        if (
            not dollar and not suffix and "," not in digits
            and re.fullmatch(r"\d{4}", digits) and 1900 <= value <= 2100
        ):
            continue
        if suffix:
            value *= _MULTIPLIERS[suffix.lower()]
        if value >= 1000:
            return NumericTarget(value, "price")

    match = _PERCENT.search(title)
    if match:
        return NumericTarget(float(match.group(1)), "percent")
    if _NEGATIVE.search(title):
        return NumericTarget(0.0, "percent")
    return None


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def validate_primary_entities(title_a: str, title_b: str) -> bool:
    """False when both titles name a different politician, coin or indicator."""
    for extract in (extract_political_figure, extract_crypto_asset, extract_economic_indicator):
        a, b = extract(title_a), extract(title_b)
        if a and b and a != b:
            return False
    return True


def validate_numeric_targets(
    title_a: str,
    title_b: str,
    settings: Optional[MatchingSettings] = None,
) -> bool:
    settings = settings or MatchingSettings()
    target_a = extract_numeric_target(title_a)
    target_b = extract_numeric_target(title_b)

    if target_a is None or target_b is None:
        return True
    # Different kinds may still be related questions
    if target_a.kind != target_b.kind:
        return True

    if target_a.kind == "price":
        low, high = sorted((target_a.value, target_b.value))
        return high / low <= 1.0 + settings.price_tolerance
    return abs(target_a.value - target_b.value) <= settings.percent_tolerance


def validate_years(title_a: str, title_b: str) -> bool:
    year_a, year_b = extract_year(title_a), extract_year(title_b)
    return not (year_a and year_b and year_a != year_b)


def are_mutually_exclusive(
    title_a: str,
    title_b: str,
    settings: Optional[MatchingSettings] = None,
) -> bool:
    """
    True when both titles carry range brackets that cannot both resolve YES.

    Touching ranges ("2.0 to 2.5" vs "2.5 to 3.0") are separate brackets.
    Above/below pairs are left to the semantic-conflict check.
    """
    settings = settings or MatchingSettings()
    a, b = extract_bracket(title_a), extract_bracket(title_b)
    if a is None or b is None or a.kind != "range" or b.kind != "range":
        return False

    gap = min(abs(a.high - b.low), abs(b.high - a.low))
    if gap < settings.adjacent_gap and (a.high <= b.low or b.high <= a.low):
        return True
    return a.high < b.low or b.high < a.low


def validate_entities(
    title_a: str,
    title_b: str,
    settings: Optional[MatchingSettings] = None,
) -> Optional[str]:
    """Run all entity checks in order; return the first failing reason code."""
    if not validate_primary_entities(title_a, title_b):
        return "entity_conflict"
    if not validate_numeric_targets(title_a, title_b, settings):
        return "numeric_conflict"
    if not validate_years(title_a, title_b):
        return "year_conflict"
    if are_mutually_exclusive(title_a, title_b, settings):
        return "mutually_exclusive"
    return None
