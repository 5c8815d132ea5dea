"""
Coarse market categories used by the scorer.

Keyword classification into economic / political / crypto / sports buckets.
Each keyword is compiled once into a word-bounded pattern; the bucket with the
most keyword hits wins. Titles with no keyword hits fall back to the sports
detector (team names, sport and major-event patterns).

Usage:
    from crossvenue.matching.categories import categorize_market

    categorize_market("Will CPI exceed 3% in 2025?")   # "economic"
    categorize_market("Chiefs vs Bills Winner?")       # "sports"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Pattern

from .sports import is_sports_market


# Default categories
CATEGORIES: Dict[str, List[str]] = {
    "economic": [
        "gdp", "inflation", "cpi", "pce", "unemployment", "jobless", "payrolls",
        "interest rate", "fed", "fomc", "rate cut", "rate hike", "recession",
        "treasury", "yield", "s&p", "nasdaq", "dow", "stock", "earnings",
    ],
    "political": [
        "trump", "biden", "harris", "vance", "desantis", "newsom", "haley",
        "election", "democrat", "republican", "congress", "senate", "house",
        "president", "governor", "nominee", "primary", "vote", "poll",
    ],
    "crypto": [
        "bitcoin", "btc", "ethereum", "eth", "solana", "sol", "xrp",
        "dogecoin", "doge", "cardano", "crypto", "token", "etf",
    ],
    "sports": [
        "nba", "nfl", "mlb", "nhl", "ncaa", "soccer", "football", "basketball",
        "baseball", "hockey", "tennis", "ufc", "super bowl", "world series",
        "stanley cup", "championship", "playoffs", "mvp",
    ],
}


@dataclass
class MarketCategorizer:
    """
    Keyword-based bucket classifier.

    Args:
        categories: Mapping of bucket name to keywords (defaults to CATEGORIES)
        sports_fallback: Use the sports detector when no keyword matches
    """

    categories: Dict[str, List[str]] = field(default_factory=lambda: dict(CATEGORIES))
    sports_fallback: bool = True
    _patterns: Dict[str, List[Pattern[str]]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        self._patterns = {
            category: [
                re.compile(r"\b" + re.escape(kw.lower()) + r"\b")
                for kw in keywords
            ]
            for category, keywords in self.categories.items()
        }

    def scores(self, title: str) -> Dict[str, int]:
        """Keyword hit count per bucket (buckets without hits omitted)."""
        title_lower = title.lower()
        found: Dict[str, int] = {}
        for category, patterns in self._patterns.items():
            hits = sum(1 for p in patterns if p.search(title_lower))
            if hits:
                found[category] = hits
        return found

    def classify(self, title: str) -> Optional[str]:
        if not title:
            return None
        found = self.scores(title)
        if found:
            # Ties resolve to the first bucket in declaration order
            return max(found, key=lambda k: found[k])
        if self.sports_fallback and is_sports_market(title):
            return "sports"
        return None


_DEFAULT = MarketCategorizer()


@lru_cache(maxsize=65536)
def categorize_market(title: str) -> Optional[str]:
    """Quick categorization with the default buckets."""
    return _DEFAULT.classify(title)
