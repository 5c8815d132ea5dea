"""
Cross-venue market matching.

Normalises titles, indexes venue-B markets, vetoes incompatible pairs,
scores the rest and greedily assigns one-to-one matches.
"""

from .normalizer import BracketRange, NormalizedTitle, normalize_market_title
from .market_index import IndexCache, MarketIndex
from .compatibility import REASON_CODES, check_compatibility
from .scorer import MatchCandidate, MatchScorer, MatchStrategy, ScoreBreakdown
from .matcher import CrossPlatformMatcher, MatchStats
from .categories import CATEGORIES, MarketCategorizer, categorize_market

__all__ = [
    "BracketRange",
    "NormalizedTitle",
    "normalize_market_title",
    "IndexCache",
    "MarketIndex",
    "REASON_CODES",
    "check_compatibility",
    "MatchCandidate",
    "MatchScorer",
    "MatchStrategy",
    "ScoreBreakdown",
    "CrossPlatformMatcher",
    "MatchStats",
    "CATEGORIES",
    "MarketCategorizer",
    "categorize_market",
]
