"""
Inverted index for fast candidate generation.

Instead of comparing every venue-A market with every venue-B market, venue-B
markets are indexed by normalised term, base-event term, year and ticker.
A lookup counts shared postings and returns only plausible candidates.

Usage:
    from crossvenue.matching.market_index import IndexCache, MarketIndex

    index = MarketIndex.build(kalshi_markets)
    candidates = index.find_candidates(polymarket_market)

    cache = IndexCache()
    cache.rebuild_if_stale(kalshi_markets)   # True on first call
    cache.index.find_candidates(polymarket_market)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from crossvenue.models import Market

from .normalizer import normalize_market_title

logger = logging.getLogger(__name__)


class MarketIndex:
    """
    Term, base-event, year and ticker postings over one market snapshot.

    Postings are insertion-ordered dicts used as ordered sets, so candidate
    order is deterministic for a given build order.
    """

    def __init__(self) -> None:
        self.term_index: Dict[str, Dict[str, None]] = defaultdict(dict)
        self.base_event_index: Dict[str, Dict[str, None]] = defaultdict(dict)
        self.year_index: Dict[str, Dict[str, None]] = defaultdict(dict)
        self.ticker_index: Dict[str, Dict[str, None]] = defaultdict(dict)
        self.markets: Dict[str, Market] = {}
        self.market_terms: Dict[str, Tuple[str, ...]] = {}
        self.market_base_terms: Dict[str, Tuple[str, ...]] = {}
        self._market_year: Dict[str, Optional[str]] = {}
        self._market_ticker: Dict[str, Optional[str]] = {}

    @classmethod
    def build(cls, markets: Iterable[Market]) -> "MarketIndex":
        index = cls()
        for market in markets:
            index.add(market)
        return index

    def __len__(self) -> int:
        return len(self.markets)

    def __contains__(self, market_id: str) -> bool:
        return market_id in self.markets

    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self.markets)

    def get(self, market_id: str) -> Optional[Market]:
        return self.markets.get(market_id)

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------

    def add(self, market: Market) -> None:
        """Index a market; re-adding an id replaces its previous postings."""
        if market.id in self.markets:
            self.remove(market.id)

        norm = normalize_market_title(market.title)
        self.markets[market.id] = market
        self.market_terms[market.id] = norm.terms
        self.market_base_terms[market.id] = norm.base_terms
        self._market_year[market.id] = norm.year
        self._market_ticker[market.id] = norm.ticker

        for term in norm.terms:
            self.term_index[term][market.id] = None
        for term in norm.base_terms:
            self.base_event_index[term][market.id] = None
        if norm.year:
            self.year_index[norm.year][market.id] = None
        if norm.ticker:
            self.ticker_index[norm.ticker][market.id] = None

    def remove(self, market_id: str) -> None:
        """Drop a market from every posting list. Unknown ids are ignored."""
        if market_id not in self.markets:
            return

        for term in self.market_terms.pop(market_id, ()):
            self._discard(self.term_index, term, market_id)
        for term in self.market_base_terms.pop(market_id, ()):
            self._discard(self.base_event_index, term, market_id)
        year = self._market_year.pop(market_id, None)
        if year:
            self._discard(self.year_index, year, market_id)
        ticker = self._market_ticker.pop(market_id, None)
        if ticker:
            self._discard(self.ticker_index, ticker, market_id)
        del self.markets[market_id]

    @staticmethod
    def _discard(postings: Dict[str, Dict[str, None]], key: str, market_id: str) -> None:
        ids = postings.get(key)
        if ids is None:
            return
        ids.pop(market_id, None)
        if not ids:
            del postings[key]

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------

    def find_candidates(self, market: Market, min_shared_terms: int = 2) -> List[Market]:
        """
        Markets sharing enough terms with ``market``.

        A market qualifies when it shares at least ``min_shared_terms`` terms
        in the term index or in the base-event index. A market with the same
        year or ticker needs only one shared term; one sharing no term is
        never returned. Term-index hits come first, then base-event hits, each
        in index insertion order.
        """
        norm = normalize_market_title(market.title)

        boosted: Dict[str, None] = {}
        if norm.year and norm.year in self.year_index:
            boosted.update(self.year_index[norm.year])
        if norm.ticker and norm.ticker in self.ticker_index:
            boosted.update(self.ticker_index[norm.ticker])

        term_counts = self._count(self.term_index, norm.terms)
        base_counts = self._count(self.base_event_index, norm.base_terms)

        candidates: List[Market] = []
        seen = set()
        for counts in (term_counts, base_counts):
            for market_id, count in counts.items():
                if market_id in seen:
                    continue
                if count >= min_shared_terms or market_id in boosted:
                    candidates.append(self.markets[market_id])
                    seen.add(market_id)
        return candidates

    @staticmethod
    def _count(postings: Dict[str, Dict[str, None]], terms: Sequence[str]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for term in dict.fromkeys(terms):
            for market_id in postings.get(term, ()):
                counts[market_id] = counts.get(market_id, 0) + 1
        return counts


class IndexCache:
    """
    Caller-owned holder for the venue-B index.

    The held index is replaced, never mutated, when the snapshot's id set
    changes, so a reference obtained earlier stays consistent.
    """

    def __init__(self) -> None:
        self.index: Optional[MarketIndex] = None
        self._ids: FrozenSet[str] = frozenset()

    def rebuild_if_stale(self, markets: Sequence[Market]) -> bool:
        """Rebuild the index if the id set differs. Returns True when rebuilt."""
        ids = frozenset(m.id for m in markets)
        if self.index is not None and ids == self._ids:
            return False

        self.index = MarketIndex.build(markets)
        self._ids = ids
        logger.info(f"Rebuilt market index: {len(self.index)} markets")
        return True

    def clear(self) -> None:
        self.index = None
        self._ids = frozenset()
