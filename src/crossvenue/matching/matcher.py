"""
Cross-platform market matcher.

Pairs venue-A markets with equivalent venue-B markets: the inverted index
proposes candidates, the compatibility gate vetoes contradictions, the scorer
ranks what is left, and a greedy pass assigns each venue-B market at most once.

Usage:
    from crossvenue.matching.matcher import CrossPlatformMatcher

    matcher = CrossPlatformMatcher()
    matches = matcher.match(polymarket_markets, kalshi_markets)
    # matches is a list of CrossPlatformMatch sorted by score
    print(matcher.last_stats.rejections.most_common(3))
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from crossvenue.config import MatchingSettings
from crossvenue.models import CrossPlatformMatch, Market

from .compatibility import check_compatibility
from .market_index import IndexCache, MarketIndex
from .scorer import MatchCandidate, MatchScorer


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

@dataclass
class MatchStats:
    """Aggregate counters for one matching pass."""

    markets_a: int = 0
    skipped_no_end_time: int = 0
    skipped_already_matched: int = 0
    candidates_evaluated: int = 0
    matched: int = 0
    rejections: Counter = field(default_factory=Counter)

    def to_dict(self) -> Dict:
        return {
            "markets_a": self.markets_a,
            "skipped_no_end_time": self.skipped_no_end_time,
            "skipped_already_matched": self.skipped_already_matched,
            "candidates_evaluated": self.candidates_evaluated,
            "matched": self.matched,
            "rejections": dict(self.rejections),
        }


# ---------------------------------------------------------------------------
# Main matcher
# ---------------------------------------------------------------------------

class CrossPlatformMatcher:
    """
    Match markets across two venues.

    Greedy by arrival order: each venue-A market takes its best unused
    venue-B candidate, so the result is not a global optimum.

    Args:
        settings: Matching thresholds and weights (default: MatchingSettings())
        logger: Logger for pass summaries and per-candidate rejections
    """

    def __init__(
        self,
        settings: Optional[MatchingSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings or MatchingSettings()
        self.scorer = MatchScorer(self.settings)
        self.logger = logger or logging.getLogger("crossvenue.matcher")
        self.last_stats = MatchStats()

    def match(
        self,
        markets_a: Sequence[Market],
        markets_b: Sequence[Market],
        cache: Optional[IndexCache] = None,
    ) -> List[CrossPlatformMatch]:
        """
        Match every venue-A market against a venue-B snapshot.

        Args:
            markets_a: Venue-A markets, processed in the given order
            markets_b: Venue-B snapshot to index
            cache: Optional caller-owned index cache, rebuilt only when the
                   venue-B id set changed

        Returns:
            List of CrossPlatformMatch sorted by score (descending, stable).
        """
        if cache is not None:
            cache.rebuild_if_stale(markets_b)
            index = cache.index
        else:
            index = MarketIndex.build(markets_b)

        return self._run(markets_a, index, used_b=set(), matched_a=set())

    def match_incremental(
        self,
        new_markets_a: Sequence[Market],
        index_b: MarketIndex,
        existing_matches: Iterable[CrossPlatformMatch],
    ) -> List[CrossPlatformMatch]:
        """
        Match newly seen venue-A markets without disturbing earlier matches.

        Venue-B markets already used by ``existing_matches`` are unavailable
        and venue-A markets already matched are skipped. Only the additional
        matches are returned.
        """
        existing = list(existing_matches)
        used_b = {m.market_b.id for m in existing}
        matched_a = {m.market_a.id for m in existing}
        return self._run(new_markets_a, index_b, used_b=used_b, matched_a=matched_a)

    # -------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------

    def _run(
        self,
        markets_a: Sequence[Market],
        index: MarketIndex,
        used_b: Set[str],
        matched_a: Set[str],
    ) -> List[CrossPlatformMatch]:
        stats = MatchStats()
        matches: List[CrossPlatformMatch] = []

        for market_a in markets_a:
            stats.markets_a += 1
            if market_a.end_time is None:
                stats.skipped_no_end_time += 1
                continue
            if market_a.id in matched_a:
                stats.skipped_already_matched += 1
                continue

            best = self._best_candidate(market_a, index, used_b, stats)
            if best is None:
                continue

            used_b.add(best.market.id)
            matched_a.add(market_a.id)
            matches.append(CrossPlatformMatch(
                market_a=market_a,
                market_b=best.market,
                score=best.score,
                reason=best.reason,
            ))

        matches.sort(key=lambda m: m.score, reverse=True)
        stats.matched = len(matches)
        self.last_stats = stats

        self.logger.info(
            f"Matched {stats.matched}/{stats.markets_a} markets "
            f"({stats.candidates_evaluated} candidates, "
            f"{sum(stats.rejections.values())} rejected)"
        )
        if stats.rejections:
            self.logger.debug(f"Rejections by reason: {dict(stats.rejections)}")
        return matches

    def _best_candidate(
        self,
        market_a: Market,
        index: MarketIndex,
        used_b: Set[str],
        stats: MatchStats,
    ) -> Optional[MatchCandidate]:
        best: Optional[MatchCandidate] = None

        for market_b in index.find_candidates(market_a, self.settings.min_shared_terms):
            if market_b.id in used_b:
                continue
            stats.candidates_evaluated += 1

            reason = check_compatibility(market_a, market_b, self.settings)
            if reason:
                stats.rejections[reason] += 1
                self.logger.debug(f"Rejected {market_a.id} vs {market_b.id}: {reason}")
                continue

            breakdown = self.scorer.score(market_a, market_b)
            if not self.scorer.accepts(breakdown):
                stats.rejections["below_threshold"] += 1
                continue

            # Strictly greater replaces; ties keep the earlier candidate
            if best is None or breakdown.overall > best.score:
                best = MatchCandidate(market_b, breakdown, breakdown.describe())

        return best

    def get_parameters(self) -> Dict:
        """Return current configuration for reproducibility."""
        params = self.scorer.get_parameters()
        params["min_shared_terms"] = self.settings.min_shared_terms
        params["time_window_days"] = self.settings.time_window_days
        return params
