"""
Shared pytest fixtures for the crossvenue test suite.

Provides:
- A Market factory with sensible defaults
- Sample venue snapshots (economic brackets, sports, politics, crypto)
- A frozen reference time for freshness checks
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional
import sys

import pytest


# Ensure src is in path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from crossvenue.config import reset_config  # noqa: E402
from crossvenue.models import Market, OutcomeSide  # noqa: E402


BASE_TIME = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts without a cached config singleton."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def now() -> datetime:
    return BASE_TIME


# =============================================================================
# Market factory
# =============================================================================

@pytest.fixture
def make_market() -> Callable[..., Market]:
    """
    Build a Market with defaults.

    Usage:
        m = make_market("a1", "Will BTC hit $100k?", venue="POLYMARKET", yes=0.4, no=0.62)
    """

    def _make(
        market_id: str,
        title: str,
        venue: str = "POLYMARKET",
        end_time: Optional[datetime] = BASE_TIME + timedelta(days=30),
        yes: Optional[float] = None,
        no: Optional[float] = None,
        slug: Optional[str] = None,
        updated_at: Optional[datetime] = None,
        liquidity: Optional[float] = None,
        yes_label: str = "Yes",
        no_label: str = "No",
    ) -> Market:
        return Market(
            venue=venue,
            id=market_id,
            title=title,
            end_time=end_time,
            slug=slug,
            side_a=OutcomeSide(label=yes_label, probability=yes, instrument_id=f"{market_id}-yes"),
            side_b=OutcomeSide(label=no_label, probability=no, instrument_id=f"{market_id}-no"),
            prices_updated_at=updated_at,
            liquidity=liquidity,
        )

    return _make


# =============================================================================
# Sample snapshots
# =============================================================================

@pytest.fixture
def venue_a_markets(make_market) -> List[Market]:
    """Venue-A snapshot covering the main matching scenarios."""
    return [
        make_market("pm-gdp", "GDP growth in 2025? 2.1 to 2.5"),
        make_market("pm-chiefs", "Chiefs vs Bills Winner?"),
        make_market("pm-cpi-under", "Will CPI be under 2% in 2026?"),
        make_market("pm-btc", "Will Bitcoin reach $100k by end of 2026?"),
        make_market("pm-no-end", "Will the Fed cut rates in March 2026?", end_time=None),
    ]


@pytest.fixture
def venue_b_markets(make_market) -> List[Market]:
    """Venue-B snapshot: one counterpart per venue-A market plus distractors."""
    return [
        make_market("ks-gdp-high", "GDP growth 2025: 3.0 to 3.5", venue="KALSHI"),
        make_market("ks-gdp", "GDP growth 2025: 2.3 to 2.6", venue="KALSHI"),
        make_market("ks-chiefs", "Kansas City Chiefs @ Buffalo Bills Moneyline", venue="KALSHI"),
        make_market("ks-cpi-over", "Will CPI be over 2% in 2026?", venue="KALSHI"),
        make_market("ks-btc", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI"),
        make_market("ks-eth", "Will Ethereum reach $100k by end of 2026?", venue="KALSHI"),
    ]
