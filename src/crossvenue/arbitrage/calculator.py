"""
Locked-arbitrage detection on matched market pairs.

For a matched pair, buying YES on one venue and NO on the other pays exactly 1
whichever way the event resolves. When the two legs cost less than 1 together
the difference is locked profit. Both directions are checked:

    direction 1: YES on venue A + NO on venue B
    direction 2: YES on venue B + NO on venue A

``detect_arbitrage`` reports every direction with cost < 1.
``detect_arbitrage_with_guardrails`` applies freshness, fee/slippage, edge and
liquidity filters and returns sized trade plans for the cheaper direction.

Usage:
    from crossvenue.arbitrage.calculator import detect_arbitrage

    opportunities = detect_arbitrage(matches)
    plans = detect_arbitrage_with_guardrails(matches, config.guardrails)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from crossvenue.config import GuardrailSettings
from crossvenue.models import (
    ArbitrageOpportunity,
    CrossPlatformMatch,
    Market,
    TradeLeg,
    TradePlan,
    as_utc,
    market_url,
)

logger = logging.getLogger(__name__)

GUARANTEED_PAYOUT = 1.0


def _earlier_end(a: Market, b: Market) -> Optional[datetime]:
    ends = [as_utc(t) for t in (a.end_time, b.end_time) if t is not None]
    return min(ends) if ends else None


def _leg_prices(match: CrossPlatformMatch) -> Optional[Tuple[float, float, float, float]]:
    """(A yes, A no, B yes, B no), or None when any side is unpriced or zero."""
    a, b = match.market_a, match.market_b
    prices = (
        a.side_a.probability,
        a.side_b.probability,
        b.side_a.probability,
        b.side_b.probability,
    )
    # None = not fetched, 0 = no liquidity
    if any(not p for p in prices):
        return None
    return prices


def confidence_band(edge_percent: float) -> str:
    if edge_percent >= 3:
        return "HIGH"
    if edge_percent >= 1.5:
        return "MEDIUM"
    return "LOW"


# ---------------------------------------------------------------------------
# Plain detection
# ---------------------------------------------------------------------------

def _opportunity(
    match: CrossPlatformMatch,
    direction: int,
    yes_market: Market,
    no_market: Market,
    yes_price: float,
    no_price: float,
) -> ArbitrageOpportunity:
    cost = yes_price + no_price
    profit = GUARANTEED_PAYOUT - cost
    return ArbitrageOpportunity(
        id=f"arb-{match.market_a.id}-{match.market_b.id}-d{direction}",
        match=match,
        direction=direction,
        buy_yes_on=yes_market.venue,
        buy_no_on=no_market.venue,
        yes_price=yes_price,
        no_price=no_price,
        combined_cost=cost,
        guaranteed_payout=GUARANTEED_PAYOUT,
        profit_percent=profit / cost * 100,
        profit_per_unit=profit,
        expiration=_earlier_end(match.market_a, match.market_b),
    )


def detect_arbitrage(matches: Iterable[CrossPlatformMatch]) -> List[ArbitrageOpportunity]:
    """
    Find locked arbitrage on every matched pair, in both directions.

    Pairs with any unpriced or zero-priced side are skipped.

    Returns:
        Opportunities sorted by profit percent (descending).
    """
    opportunities: List[ArbitrageOpportunity] = []
    skipped = 0

    for match in matches:
        prices = _leg_prices(match)
        if prices is None:
            skipped += 1
            continue
        a_yes, a_no, b_yes, b_no = prices
        a, b = match.market_a, match.market_b

        if a_yes + b_no < GUARANTEED_PAYOUT:
            opportunities.append(_opportunity(match, 1, a, b, a_yes, b_no))
        if b_yes + a_no < GUARANTEED_PAYOUT:
            opportunities.append(_opportunity(match, 2, b, a, b_yes, a_no))

    if skipped:
        logger.debug(f"Skipped {skipped} matches with missing prices")
    opportunities.sort(key=lambda o: o.profit_percent, reverse=True)
    return opportunities


# ---------------------------------------------------------------------------
# Guardrailed detection
# ---------------------------------------------------------------------------

def _is_fresh(market: Market, now: datetime, window_seconds: float) -> bool:
    if market.prices_updated_at is None:
        return False
    return (now - as_utc(market.prices_updated_at)).total_seconds() < window_seconds


def _trade_plan(
    match: CrossPlatformMatch,
    direction: int,
    yes_market: Market,
    no_market: Market,
    edge_percent: float,
    min_depth: float,
    settings: GuardrailSettings,
) -> TradePlan:
    max_size = min(min_depth, settings.max_trade_size_dollars)
    yes_label = yes_market.side_a.label or "Yes"
    no_label = no_market.side_b.label or "No"
    updated = [
        as_utc(t) for t in (match.market_a.prices_updated_at, match.market_b.prices_updated_at)
        if t is not None
    ]

    return TradePlan(
        id=f"plan-{match.market_a.id}-{match.market_b.id}-d{direction}",
        event=match.market_a.title,
        leg1=TradeLeg(
            action="BUY YES",
            outcome=yes_label,
            venue=yes_market.venue,
            price=yes_market.side_a.probability,
            instrument_id=yes_market.side_a.instrument_id,
            url=market_url(yes_market),
        ),
        leg2=TradeLeg(
            action="BUY NO",
            outcome=f"{yes_label} (NO = {no_label})",
            venue=no_market.venue,
            price=no_market.side_b.probability,
            instrument_id=no_market.side_b.instrument_id,
            url=market_url(no_market),
        ),
        expiration=_earlier_end(match.market_a, match.market_b),
        max_size=max_size,
        locked_edge_percent=edge_percent,
        locked_edge_dollars=edge_percent / 100 * max_size,
        confidence=confidence_band(edge_percent),
        guardrails={
            "freshness": True,
            "liquidity": True,
            "mapping": True,
            "fees": True,
            "slippage": True,
            "expiry": True,
        },
        timestamp=max(updated) if updated else None,
    )


def detect_arbitrage_with_guardrails(
    matches: Iterable[CrossPlatformMatch],
    settings: Optional[GuardrailSettings] = None,
    now: Optional[datetime] = None,
) -> List[TradePlan]:
    """
    Actionable arbitrage after guardrails.

    A pair becomes a plan only when both legs were priced within the
    freshness window, the cheaper direction still costs less than 1 after
    fees and slippage, the edge reaches ``min_edge_percent`` and the thinner
    leg has at least ``min_liquidity_dollars`` of depth.

    Args:
        matches: Matched pairs with current prices
        settings: Guardrail settings (default: GuardrailSettings())
        now: Reference time for freshness (default: current UTC time)

    Returns:
        TradePlans sorted by locked edge percent (descending).
    """
    settings = settings or GuardrailSettings()
    now = as_utc(now) or datetime.now(timezone.utc)
    multiplier = 1 + (settings.fees_percent + settings.slippage_buffer_percent) / 100

    plans: List[TradePlan] = []
    for match in matches:
        prices = _leg_prices(match)
        if prices is None:
            continue
        a, b = match.market_a, match.market_b

        if not (
            _is_fresh(a, now, settings.freshness_window_seconds)
            and _is_fresh(b, now, settings.freshness_window_seconds)
        ):
            logger.debug(f"Stale prices for {match.pair_id}")
            continue

        a_yes, a_no, b_yes, b_no = prices
        cost1 = (a_yes + b_no) * multiplier
        cost2 = (b_yes + a_no) * multiplier

        if cost1 < 1 and cost1 <= cost2:
            direction, cost, yes_market, no_market = 1, cost1, a, b
        elif cost2 < 1:
            direction, cost, yes_market, no_market = 2, cost2, b, a
        else:
            continue

        edge_percent = (1 - cost) / cost * 100
        if edge_percent < settings.min_edge_percent:
            continue

        min_depth = min(a.liquidity or 0.0, b.liquidity or 0.0)
        if min_depth < settings.min_liquidity_dollars:
            continue

        plans.append(_trade_plan(
            match, direction, yes_market, no_market, edge_percent, min_depth, settings
        ))

    plans.sort(key=lambda p: p.locked_edge_percent, reverse=True)
    return plans
