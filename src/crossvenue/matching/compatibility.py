"""
Compatibility gate: an ordered chain of vetoes run before scoring.

The first failing check rejects the pair and names why. Reason codes:

    time_window            end times more than ``time_window_days`` apart
    semantic_conflict      opposite wording (under/over, win/lose, ...)
    time_period_conflict   only one title targets a sub-period (Q1, H2, ...)
    entity_conflict        different politician, coin or indicator
    numeric_conflict       price / percent targets too far apart
    year_conflict          different years
    mutually_exclusive     non-overlapping range brackets
    sports_conflict        different game, sport, event or bet
"""

from __future__ import annotations

from typing import Optional

from crossvenue.config import MatchingSettings
from crossvenue.models import Market, as_utc

from .entities import validate_entities
from .rules import SEMANTIC_CONFLICTS, TIME_PERIOD_RULES, first_outcome
from .sports import sports_markets_compatible, sports_profile

REASON_CODES = (
    "time_window",
    "semantic_conflict",
    "time_period_conflict",
    "entity_conflict",
    "numeric_conflict",
    "year_conflict",
    "mutually_exclusive",
    "sports_conflict",
)

_SECONDS_PER_DAY = 86400.0


def days_apart(a: Market, b: Market) -> Optional[float]:
    if a.end_time is None or b.end_time is None:
        return None
    return abs((as_utc(a.end_time) - as_utc(b.end_time)).total_seconds()) / _SECONDS_PER_DAY


def within_time_window(a: Market, b: Market, window_days: float = 3.0) -> bool:
    days = days_apart(a, b)
    return days is not None and days <= window_days


def has_semantic_conflict(title_a: str, title_b: str) -> bool:
    return any(pair.conflicts(title_a, title_b) for pair in SEMANTIC_CONFLICTS)


def time_period_marker(title: str) -> Optional[str]:
    return first_outcome(TIME_PERIOD_RULES, title)


def has_time_period_conflict(title_a: str, title_b: str) -> bool:
    """True when exactly one title names a quarter or half."""
    return (time_period_marker(title_a) is None) != (time_period_marker(title_b) is None)


def check_compatibility(
    market_a: Market,
    market_b: Market,
    settings: Optional[MatchingSettings] = None,
) -> Optional[str]:
    """Run the gate chain; return the first reason code, or None when compatible."""
    settings = settings or MatchingSettings()
    title_a, title_b = market_a.title, market_b.title

    if not within_time_window(market_a, market_b, settings.time_window_days):
        return "time_window"
    if has_semantic_conflict(title_a, title_b):
        return "semantic_conflict"
    if has_time_period_conflict(title_a, title_b):
        return "time_period_conflict"

    reason = validate_entities(title_a, title_b, settings)
    if reason:
        return reason

    if sports_profile(title_a).is_sports and sports_profile(title_b).is_sports:
        if not sports_markets_compatible(title_a, title_b):
            return "sports_conflict"

    return None
