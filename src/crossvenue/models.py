"""
Core data model for cross-venue matching and arbitrage.

Markets are immutable snapshots: price refreshes produce new Market objects
via ``dataclasses.replace`` rather than mutating existing ones.

Usage:
    from crossvenue.models import Market, OutcomeSide, markets_from_dataframe

    markets = markets_from_dataframe(kalshi_df, venue="KALSHI")
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Side(str, Enum):
    """One of the two complementary contracts of a binary market."""

    A = "A"  # commonly "Yes"
    B = "B"  # commonly "No"


class PriceSource(str, Enum):
    """Where a probability quote came from."""

    ORDERBOOK = "orderbook"
    LAST_TRADE = "last_trade"


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """Return an aware timestamp; naive values are taken to be UTC."""
    if ts is None or ts.tzinfo is not None:
        return ts
    return ts.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Markets
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutcomeSide:
    """
    One outcome side of a market.

    ``probability`` is None until a price has been fetched. A probability of
    exactly 0 is the venue's no-liquidity sentinel. Values outside [0, 1]
    raise ValueError.
    """

    label: str = ""
    probability: Optional[float] = None
    instrument_id: Optional[str] = None  # token id / market ticker

    def __post_init__(self) -> None:
        if self.probability is not None and not 0.0 <= self.probability <= 1.0:
            raise ValueError(
                f"Probability for {self.label or 'outcome'} must be within [0, 1], "
                f"got {self.probability}"
            )


@dataclass(frozen=True)
class Market:
    """A tradable binary contract on one venue."""

    venue: str
    id: str
    title: str
    end_time: Optional[datetime] = None
    volume: Optional[float] = None
    slug: Optional[str] = None  # venue short identifier (market slug / event ticker)
    side_a: OutcomeSide = field(default_factory=lambda: OutcomeSide(label="Yes"))
    side_b: OutcomeSide = field(default_factory=lambda: OutcomeSide(label="No"))
    prices_updated_at: Optional[datetime] = None
    liquidity: Optional[float] = None  # dollars of depth at the quoted price

    def __repr__(self) -> str:
        return f"Market(venue={self.venue!r}, id={self.id!r}, title={self.title[:50]!r})"


_VENUE_URLS = {
    "KALSHI": "https://kalshi.com/markets/{}",
    "POLYMARKET": "https://polymarket.com/event/{}",
}


def market_url(market: Market) -> Optional[str]:
    """
    Venue page for a market, built from its slug.

    Kalshi pages fall back to the lower-cased market ticker; Polymarket needs
    the event slug. Unknown venues have no link.
    """
    template = _VENUE_URLS.get(market.venue.upper())
    if template is None:
        return None
    if market.venue.upper() == "KALSHI":
        return template.format((market.slug or market.id).lower())
    return template.format(market.slug) if market.slug else None


# ---------------------------------------------------------------------------
# Matching output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CrossPlatformMatch:
    """A venue-A market paired with the venue-B market judged equivalent."""

    market_a: Market
    market_b: Market
    score: float  # 0-1
    reason: str = ""

    @property
    def pair_id(self) -> str:
        return f"{self.market_a.id}|{self.market_b.id}"

    def __repr__(self) -> str:
        return (
            f"CrossPlatformMatch(score={self.score:.3f}, "
            f"a={self.market_a.title[:40]!r}, b={self.market_b.title[:40]!r})"
        )


# ---------------------------------------------------------------------------
# Arbitrage output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArbitrageOpportunity:
    """
    A locked arbitrage on a matched pair in one trade direction.

    Recomputed from current prices; never mutated.
    """

    id: str
    match: CrossPlatformMatch
    direction: int  # 1 = YES on A + NO on B, 2 = YES on B + NO on A
    buy_yes_on: str
    buy_no_on: str
    yes_price: float
    no_price: float
    combined_cost: float
    guaranteed_payout: float
    profit_percent: float
    profit_per_unit: float
    expiration: Optional[datetime]


@dataclass(frozen=True)
class TradeLeg:
    """One side of a two-leg trade plan."""

    action: str  # "BUY YES" or "BUY NO"
    outcome: str
    venue: str
    price: float
    instrument_id: Optional[str] = None
    order_type: str = "Limit Order"
    url: Optional[str] = None  # venue page for the market


@dataclass(frozen=True)
class TradePlan:
    """An actionable arbitrage that passed every guardrail."""

    id: str
    event: str
    leg1: TradeLeg
    leg2: TradeLeg
    expiration: Optional[datetime]
    max_size: float  # dollars
    locked_edge_percent: float
    locked_edge_dollars: float
    confidence: str  # HIGH / MEDIUM / LOW
    guardrails: Dict[str, bool] = field(default_factory=dict)
    timestamp: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Tabular loaders
# ---------------------------------------------------------------------------

_ID_COLUMNS = ("id", "market_id", "market_ticker", "ticker", "condition_id", "slug")
_TITLE_COLUMNS = ("title", "question", "name", "subtitle")
_END_COLUMNS = ("end_time", "close_time", "end_date", "expiration")


def _first_column(df: pd.DataFrame, candidates) -> Optional[str]:
    for name in candidates:
        if name in df.columns:
            return name
    return None


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, numbers.Real):
        # Epoch seconds (milliseconds when implausibly large)
        seconds = value / 1000.0 if value > 1e11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _to_probability(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    prob = float(value)
    # Cents (0-100) to probability
    if prob > 1.0:
        prob = prob / 100.0
    if prob < 0.0 or prob > 1.0:
        return None
    return prob


def _optional_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def markets_from_dataframe(df: pd.DataFrame, venue: str) -> List[Market]:
    """
    Convert a venue dump into Market records.

    Column names are normalised the same way for both venues: the id is taken
    from the first of ``id``, ``market_id``, ``market_ticker``, ``ticker``,
    ``condition_id``, ``slug``; the title from ``title``/``question``/``name``.
    Optional columns: ``end_time`` (or ``close_time``/``end_date``), ``volume``,
    ``slug``/``event_ticker``, ``yes_price``/``no_price``, ``yes_token_id``/
    ``no_token_id``, ``liquidity``, ``prices_updated_at``.

    Rows without an id or title are dropped with a warning.
    """
    if df is None or df.empty:
        return []

    id_col = _first_column(df, _ID_COLUMNS)
    title_col = _first_column(df, _TITLE_COLUMNS)
    if id_col is None or title_col is None:
        logger.warning(f"{venue}: no id/title columns in {list(df.columns)}; nothing loaded")
        return []

    end_col = _first_column(df, _END_COLUMNS)
    slug_col = _first_column(df, ("slug", "market_slug", "event_ticker"))
    if slug_col == id_col:
        slug_col = _first_column(df, ("market_slug", "event_ticker"))

    markets: List[Market] = []
    dropped = 0
    for row in df.to_dict(orient="records"):
        market_id = _optional_str(row.get(id_col))
        title = _optional_str(row.get(title_col))
        if market_id is None or title is None:
            dropped += 1
            continue

        markets.append(Market(
            venue=venue,
            id=market_id,
            title=title,
            end_time=_to_datetime(row.get(end_col)) if end_col else None,
            volume=_optional_float(row.get("volume")),
            slug=_optional_str(row.get(slug_col)) if slug_col else None,
            side_a=OutcomeSide(
                label=_optional_str(row.get("yes_label")) or "Yes",
                probability=_to_probability(row.get("yes_price")),
                instrument_id=_optional_str(row.get("yes_token_id")),
            ),
            side_b=OutcomeSide(
                label=_optional_str(row.get("no_label")) or "No",
                probability=_to_probability(row.get("no_price")),
                instrument_id=_optional_str(row.get("no_token_id")),
            ),
            prices_updated_at=_to_datetime(row.get("prices_updated_at")),
            liquidity=_optional_float(row.get("liquidity")),
        ))

    if dropped:
        logger.warning(f"{venue}: dropped {dropped} rows without id/title")
    return markets


def matches_to_dataframe(matches: List[CrossPlatformMatch]) -> pd.DataFrame:
    """Flatten matches into a DataFrame (one row per pair)."""
    if not matches:
        return pd.DataFrame()

    rows = []
    for m in matches:
        rows.append({
            "pair_id": m.pair_id,
            "venue_a": m.market_a.venue,
            "id_a": m.market_a.id,
            "title_a": m.market_a.title,
            "venue_b": m.market_b.venue,
            "id_b": m.market_b.id,
            "title_b": m.market_b.title,
            "score": m.score,
            "reason": m.reason,
        })
    return pd.DataFrame(rows)


def opportunities_to_dataframe(opportunities: List[ArbitrageOpportunity]) -> pd.DataFrame:
    """Flatten opportunities into a DataFrame sorted as given."""
    if not opportunities:
        return pd.DataFrame()

    rows = []
    for o in opportunities:
        rows.append({
            "id": o.id,
            "title_a": o.match.market_a.title,
            "title_b": o.match.market_b.title,
            "buy_yes_on": o.buy_yes_on,
            "buy_no_on": o.buy_no_on,
            "yes_price": o.yes_price,
            "no_price": o.no_price,
            "combined_cost": o.combined_cost,
            "profit_percent": o.profit_percent,
            "profit_per_unit": o.profit_per_unit,
            "expiration": o.expiration,
            "match_score": o.match.score,
        })
    return pd.DataFrame(rows)
