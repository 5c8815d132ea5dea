"""
Multi-factor similarity scoring for gated market pairs.

Seven components in [0, 1] (title, base event, bracket, entity, ticker, time,
category) plus a sports score for pairs where both titles are sports markets.
The strategy is chosen once per pair and the weighted overall score is
clamped to [0, 1].

Usage:
    from crossvenue.matching.scorer import MatchScorer

    scorer = MatchScorer()
    breakdown = scorer.score(market_a, market_b)
    if scorer.accepts(breakdown):
        ...
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from enum import Enum
from typing import Dict, Optional

import numpy as np

from crossvenue.config import MatchingSettings
from crossvenue.models import Market

from .categories import categorize_market
from .compatibility import days_apart
from .normalizer import BracketRange, NormalizedTitle, jaccard, normalize_market_title
from .sports import sports_match_score, sports_profile


class MatchStrategy(str, Enum):
    GENERIC = "generic"
    SPORTS = "sports"


# Entity kinds and their weight in the entity score
ENTITY_WEIGHTS: Dict[str, float] = {
    "entities": 3.0,
    "tickers": 2.0,
    "years": 2.0,
    "numbers": 1.0,
}

# Order of the weighted components in the overall score
_COMPONENTS = ("title", "entity", "ticker", "time", "category", "bracket")


@dataclass(frozen=True)
class ScoreBreakdown:
    """Component scores for one pair."""

    strategy: MatchStrategy
    title: float
    base_event: float
    bracket: float
    entity: float
    ticker: float
    time: float
    category: float
    sports: float = 0.0
    effective_title: float = 0.0
    bonuses: Dict[str, float] = field(default_factory=dict)
    overall: float = 0.0

    def describe(self) -> str:
        parts = [f"title {self.effective_title:.0%}", f"entity {self.entity:.0%}"]
        if self.ticker:
            parts.append(f"ticker {self.ticker:.0%}")
        if self.bracket:
            parts.append(f"bracket {self.bracket:.0%}")
        if self.strategy is MatchStrategy.SPORTS:
            parts.append(f"sports {self.sports:.0%}")
        parts.extend(f"+{name}" for name in self.bonuses)
        return ", ".join(parts)


@dataclass(frozen=True)
class MatchCandidate:
    """A venue-B market scored against one venue-A market."""

    market: Market
    breakdown: ScoreBreakdown
    reason: str = ""

    @property
    def score(self) -> float:
        return self.breakdown.overall


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------

def _entity_words(norm: NormalizedTitle) -> set:
    return {word for entity in norm.entities for word in entity.split()}


def entity_score(norm_a: NormalizedTitle, norm_b: NormalizedTitle) -> float:
    """Weighted Jaccard over entity kinds present in both titles."""
    kinds = {
        "entities": (_entity_words(norm_a), _entity_words(norm_b)),
        "tickers": ({norm_a.ticker} - {None}, {norm_b.ticker} - {None}),
        "years": ({norm_a.year} - {None}, {norm_b.year} - {None}),
        "numbers": (set(norm_a.numbers), set(norm_b.numbers)),
    }
    total = 0.0
    weight_present = 0.0
    for kind, (set_a, set_b) in kinds.items():
        if set_a and set_b:
            weight = ENTITY_WEIGHTS[kind]
            total += weight * jaccard(set_a, set_b)
            weight_present += weight
    return total / weight_present if weight_present else 0.0


def _ticker_key(market: Market) -> str:
    raw = market.slug or ""
    return "".join(ch for ch in raw.lower() if ch.isalnum())


def ticker_score(market_a: Market, market_b: Market) -> float:
    """
    Similarity of venue short identifiers (market slug / event ticker).

    Markets without a slug score 0; a capitalised word in the title is an
    entity signal, not an identifier.

    Exact 1.0, containment 0.8, a longest common substring covering at
    least 60% of the shorter key scores 0.7 scaled by that coverage.
    """
    key_a = _ticker_key(market_a)
    key_b = _ticker_key(market_b)
    if not key_a or not key_b:
        return 0.0
    if key_a == key_b:
        return 1.0
    if key_a in key_b or key_b in key_a:
        return 0.8

    shorter = min(len(key_a), len(key_b))
    match = SequenceMatcher(None, key_a, key_b, autojunk=False).find_longest_match(
        0, len(key_a), 0, len(key_b)
    )
    coverage = match.size / shorter
    if coverage >= 0.6:
        return 0.7 * coverage
    return 0.0


def bracket_score(a: Optional[BracketRange], b: Optional[BracketRange]) -> float:
    """
    Agreement of two brackets.

    Two ranges score their overlap divided by the narrower width; two
    thresholds of the same direction score one minus their relative gap.
    """
    if a is None or b is None or a.kind != b.kind:
        return 0.0

    if a.kind == "range":
        overlap = min(a.high, b.high) - max(a.low, b.low)
        if overlap < 0:
            return 0.0
        width = min(a.width, b.width)
        if width <= 0:
            return 1.0
        return float(min(overlap / width, 1.0))

    threshold_a = a.low if a.kind == "above" else a.high
    threshold_b = b.low if b.kind == "above" else b.high
    scale = max(abs(threshold_a), abs(threshold_b))
    if scale == 0:
        return 1.0
    return float(max(0.0, 1.0 - abs(threshold_a - threshold_b) / scale))


def time_score(market_a: Market, market_b: Market, window_days: float = 3.0) -> float:
    days = days_apart(market_a, market_b)
    if days is None or window_days <= 0:
        return 0.0
    return max(0.0, 1.0 - days / window_days)


def category_score(title_a: str, title_b: str) -> float:
    cat_a = categorize_market(title_a)
    return 1.0 if cat_a is not None and cat_a == categorize_market(title_b) else 0.0


def choose_strategy(title_a: str, title_b: str) -> MatchStrategy:
    if sports_profile(title_a).is_sports and sports_profile(title_b).is_sports:
        return MatchStrategy.SPORTS
    return MatchStrategy.GENERIC


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------

class MatchScorer:
    """
    Weighted pair scorer.

    Args:
        settings: Weights, bonuses and thresholds (defaults to MatchingSettings())
    """

    def __init__(self, settings: Optional[MatchingSettings] = None):
        self.settings = settings or MatchingSettings()
        weights = self.settings.weights
        self._weights = np.array([float(weights.get(name, 0.0)) for name in _COMPONENTS])

    def score(self, market_a: Market, market_b: Market) -> ScoreBreakdown:
        s = self.settings
        norm_a = normalize_market_title(market_a.title)
        norm_b = normalize_market_title(market_b.title)

        strategy = choose_strategy(market_a.title, market_b.title)
        title = jaccard(norm_a.terms, norm_b.terms)
        base_event = jaccard(norm_a.base_terms, norm_b.base_terms)
        sports = (
            sports_match_score(market_a.title, market_b.title)
            if strategy is MatchStrategy.SPORTS else 0.0
        )
        effective = max(title, base_event, sports)

        entity = entity_score(norm_a, norm_b)
        ticker = ticker_score(market_a, market_b)
        time = time_score(market_a, market_b, s.time_window_days)
        category = category_score(market_a.title, market_b.title)
        bracket = bracket_score(norm_a.bracket, norm_b.bracket)

        components = np.array([effective, entity, ticker, time, category, bracket])
        overall = float(np.dot(self._weights, components))

        bonuses: Dict[str, float] = {}
        if sports >= s.sports_bonus_threshold:
            bonuses["sports"] = s.sports_bonus
        if base_event >= s.base_event_bonus_threshold:
            bonuses["base_event"] = s.base_event_bonus
        if bracket >= s.bracket_bonus_threshold:
            bonuses["bracket"] = s.bracket_bonus
        overall += sum(bonuses.values())

        overall = float(np.clip(overall, 0.0, 1.0))
        if math.isnan(overall):
            overall = 0.0

        return ScoreBreakdown(
            strategy=strategy,
            title=title,
            base_event=base_event,
            bracket=bracket,
            entity=entity,
            ticker=ticker,
            time=time,
            category=category,
            sports=sports,
            effective_title=effective,
            bonuses=bonuses,
            overall=overall,
        )

    def passes_prefilter(self, breakdown: ScoreBreakdown) -> bool:
        """Reject pairs with weak wording unless ticker or sports signals are strong."""
        s = self.settings
        return not (
            breakdown.effective_title < s.min_effective_title
            and breakdown.ticker < s.min_ticker_bypass
            and breakdown.sports < s.min_sports_bypass
        )

    def accepts(self, breakdown: ScoreBreakdown) -> bool:
        return self.passes_prefilter(breakdown) and breakdown.overall >= self.settings.match_threshold

    def get_parameters(self) -> Dict:
        """Return current configuration for reproducibility."""
        return {
            "weights": dict(zip(_COMPONENTS, self._weights.tolist())),
            "match_threshold": self.settings.match_threshold,
            "min_effective_title": self.settings.min_effective_title,
        }
