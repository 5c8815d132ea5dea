"""
Price refresh: order-book state and latest-quote bookkeeping.

``OrderbookManager`` keeps per-market order books built from snapshots and
sequenced deltas (price levels in cents) and exposes best prices as
probabilities. ``PriceBook`` collects ``PriceUpdate`` events, keeps the latest
quote per (market, side) and produces freshly priced Market snapshots.

Usage:
    from crossvenue.arbitrage.price_book import OrderbookManager, PriceBook

    books = OrderbookManager()
    books.apply_snapshot(OrderbookSnapshot.from_message(msg))

    prices = PriceBook()
    prices.update_many(books.price_updates("KXGDP-25-T2.5"))
    priced = prices.apply(kalshi_markets)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from crossvenue.models import CrossPlatformMatch, Market, PriceSource, Side, as_utc

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Price updates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PriceUpdate:
    """
    One quote for one side of one market.

    Raises ValueError when the probability is outside [0, 1]. A naive
    timestamp is taken to be UTC.
    """

    market_id: str
    side: Side
    probability: float
    source: PriceSource
    timestamp: datetime
    liquidity: Optional[float] = None  # dollars available at this price

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(
                f"Probability for {self.market_id} side {self.side.value} "
                f"must be within [0, 1], got {self.probability}"
            )
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))


class PriceBook:
    """
    Latest quote per (market, side).

    A newer timestamp always wins. At equal timestamps an order-book quote
    replaces a last-trade quote, never the reverse.

    Args:
        logger: Logger for rejected updates (default: crossvenue.price_book)
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("crossvenue.price_book")
        self._quotes: Dict[Tuple[str, Side], PriceUpdate] = {}

    def __len__(self) -> int:
        return len(self._quotes)

    def update(self, update: PriceUpdate) -> bool:
        """Record a quote. Returns False when an existing quote takes priority."""
        key = (update.market_id, update.side)
        current = self._quotes.get(key)
        if current is not None and not self._supersedes(update, current):
            self.logger.debug(
                f"Ignored {update.source.value} quote for {update.market_id}/{update.side.value} "
                f"at {update.timestamp.isoformat()}"
            )
            return False
        self._quotes[key] = update
        return True

    def update_many(self, updates: Iterable[PriceUpdate]) -> int:
        return sum(1 for u in updates if self.update(u))

    @staticmethod
    def _supersedes(new: PriceUpdate, old: PriceUpdate) -> bool:
        if new.timestamp != old.timestamp:
            return new.timestamp > old.timestamp
        return new.source is PriceSource.ORDERBOOK and old.source is PriceSource.LAST_TRADE

    def quote(self, market_id: str, side: Side) -> Optional[PriceUpdate]:
        return self._quotes.get((market_id, side))

    def apply_to_market(self, market: Market) -> Market:
        """Return ``market`` with its quoted sides replaced, or unchanged."""
        quote_a = self.quote(market.id, Side.A)
        quote_b = self.quote(market.id, Side.B)
        if quote_a is None and quote_b is None:
            return market

        changes: Dict[str, Any] = {}
        quotes = [q for q in (quote_a, quote_b) if q is not None]
        if quote_a is not None:
            changes["side_a"] = replace(market.side_a, probability=quote_a.probability)
        if quote_b is not None:
            changes["side_b"] = replace(market.side_b, probability=quote_b.probability)

        timestamps = [q.timestamp for q in quotes]
        if market.prices_updated_at is not None:
            timestamps.append(as_utc(market.prices_updated_at))
        changes["prices_updated_at"] = max(timestamps)

        depths = [q.liquidity for q in quotes if q.liquidity is not None]
        if depths:
            changes["liquidity"] = min(depths)
        return replace(market, **changes)

    def apply(self, markets: Sequence[Market]) -> List[Market]:
        """New priced snapshot; the input markets are not modified."""
        return [self.apply_to_market(m) for m in markets]

    def apply_to_matches(self, matches: Iterable[CrossPlatformMatch]) -> List[CrossPlatformMatch]:
        """Re-price both legs of every match, keeping score and reason."""
        return [
            replace(
                m,
                market_a=self.apply_to_market(m.market_a),
                market_b=self.apply_to_market(m.market_b),
            )
            for m in matches
        ]

    def clear(self) -> None:
        self._quotes.clear()


# ---------------------------------------------------------------------------
# Order books
# ---------------------------------------------------------------------------

@dataclass
class OrderbookLevel:
    price: int  # cents (0-100)
    quantity: float  # contracts


@dataclass(frozen=True)
class OrderbookSnapshot:
    """Full book state for one market."""

    market_id: str
    yes: Tuple[Tuple[int, float], ...]
    no: Tuple[Tuple[int, float], ...]
    seq: int

    @classmethod
    def from_message(cls, msg: Dict[str, Any]) -> "OrderbookSnapshot":
        """Parse a venue message: {market_ticker, yes: [[price, qty]], no: [...], seq}."""
        return cls(
            market_id=str(msg.get("market_ticker") or msg.get("market_id")),
            yes=tuple((int(p), float(q)) for p, q in msg.get("yes") or ()),
            no=tuple((int(p), float(q)) for p, q in msg.get("no") or ()),
            seq=int(msg.get("seq", 0)),
        )


@dataclass(frozen=True)
class OrderbookDelta:
    """Quantity change at one price level."""

    market_id: str
    price: int
    delta: float  # positive = add, negative = remove
    side: str  # "yes" or "no"
    seq: int

    @classmethod
    def from_message(cls, msg: Dict[str, Any]) -> "OrderbookDelta":
        return cls(
            market_id=str(msg.get("market_ticker") or msg.get("market_id")),
            price=int(msg["price"]),
            delta=float(msg["delta"]),
            side=str(msg["side"]).lower(),
            seq=int(msg["seq"]),
        )


@dataclass
class Orderbook:
    market_id: str
    yes: List[OrderbookLevel] = field(default_factory=list)  # sorted by price descending
    no: List[OrderbookLevel] = field(default_factory=list)
    seq: int = 0
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class BestPrices:
    """Best bid on each side, as probabilities and raw cents."""

    yes: float
    no: float
    yes_raw: int
    no_raw: int
    yes_depth: float  # dollars at the best yes level
    no_depth: float
    last_updated: Optional[datetime]


class OrderbookManager:
    """
    Order-book state per market.

    Snapshots replace a book; deltas with a sequence number not above the
    book's current one are ignored; a level whose quantity drops to zero or
    below is removed. Deltas for markets without a snapshot are logged and
    dropped.
    """

    def __init__(self) -> None:
        self._books: Dict[str, Orderbook] = {}

    @staticmethod
    def _sorted_levels(levels: Iterable[Tuple[int, float]]) -> List[OrderbookLevel]:
        return sorted(
            (OrderbookLevel(int(p), float(q)) for p, q in levels),
            key=lambda level: level.price,
            reverse=True,
        )

    def apply_snapshot(self, snapshot: OrderbookSnapshot, at: Optional[datetime] = None) -> None:
        self._books[snapshot.market_id] = Orderbook(
            market_id=snapshot.market_id,
            yes=self._sorted_levels(snapshot.yes),
            no=self._sorted_levels(snapshot.no),
            seq=snapshot.seq,
            last_updated=at or _utcnow(),
        )
        logger.debug(
            f"Snapshot applied for {snapshot.market_id}: "
            f"{len(snapshot.yes)} yes levels, {len(snapshot.no)} no levels"
        )

    def apply_delta(self, delta: OrderbookDelta, at: Optional[datetime] = None) -> bool:
        """Apply an incremental update. Returns True when the book changed."""
        book = self._books.get(delta.market_id)
        if book is None:
            logger.warning(f"Delta for unknown market: {delta.market_id}")
            return False
        if delta.seq <= book.seq:
            return False
        if delta.side not in ("yes", "no"):
            logger.warning(f"Delta with unknown side {delta.side!r} for {delta.market_id}")
            return False

        levels = book.yes if delta.side == "yes" else book.no
        existing = next((lvl for lvl in levels if lvl.price == delta.price), None)
        if existing is not None:
            existing.quantity += delta.delta
            if existing.quantity <= 0:
                levels.remove(existing)
        elif delta.delta > 0:
            levels.append(OrderbookLevel(delta.price, delta.delta))
            levels.sort(key=lambda level: level.price, reverse=True)

        book.seq = delta.seq
        book.last_updated = at or _utcnow()
        return True

    def best_prices(self, market_id: str) -> Optional[BestPrices]:
        """Highest bid per side; an empty side reports 0 (no liquidity)."""
        book = self._books.get(market_id)
        if book is None:
            return None

        best_yes = book.yes[0] if book.yes else None
        best_no = book.no[0] if book.no else None
        yes_raw = best_yes.price if best_yes else 0
        no_raw = best_no.price if best_no else 0
        return BestPrices(
            yes=yes_raw / 100,
            no=no_raw / 100,
            yes_raw=yes_raw,
            no_raw=no_raw,
            yes_depth=yes_raw / 100 * best_yes.quantity if best_yes else 0.0,
            no_depth=no_raw / 100 * best_no.quantity if best_no else 0.0,
            last_updated=book.last_updated,
        )

    def price_updates(self, market_id: str) -> List[PriceUpdate]:
        """Best prices as order-book PriceUpdates for a PriceBook."""
        best = self.best_prices(market_id)
        if best is None:
            return []
        timestamp = best.last_updated or _utcnow()
        return [
            PriceUpdate(market_id, Side.A, best.yes, PriceSource.ORDERBOOK, timestamp, best.yes_depth),
            PriceUpdate(market_id, Side.B, best.no, PriceSource.ORDERBOOK, timestamp, best.no_depth),
        ]

    def tracked_markets(self) -> List[str]:
        return list(self._books)

    def is_tracking(self, market_id: str) -> bool:
        return market_id in self._books

    def remove_market(self, market_id: str) -> None:
        self._books.pop(market_id, None)

    def clear(self) -> None:
        self._books.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "markets": len(self._books),
            "total_levels": sum(len(b.yes) + len(b.no) for b in self._books.values()),
        }
