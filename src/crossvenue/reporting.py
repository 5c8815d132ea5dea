"""
Terminal reporting for matches, opportunities and trade plans.

Renders rich tables; the engine itself never prints.

Usage:
    from crossvenue.reporting import print_matches, print_opportunities

    print_matches(matches)
    print_opportunities(opportunities)
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from crossvenue.models import ArbitrageOpportunity, CrossPlatformMatch, TradePlan


def get_console() -> Console:
    return Console()


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_cents(price: Optional[float]) -> str:
    """0.45 -> '45¢'; unpriced -> '-'."""
    if price is None:
        return "-"
    return f"{round(price * 100)}¢"


def format_profit_percent(percent: float) -> str:
    return f"+{percent:.2f}%"


def format_currency(value: float, currency: str = "$") -> str:
    """Format value as currency."""
    if value >= 0:
        return f"{currency}{value:,.2f}"
    return f"-{currency}{abs(value):,.2f}"


def _truncate(text: str, width: int = 60) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def build_match_table(matches: Sequence[CrossPlatformMatch], title: str = "Matched markets") -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Score", justify="right")
    table.add_column("Venue A")
    table.add_column("Title A")
    table.add_column("Venue B")
    table.add_column("Title B")
    table.add_column("Reason", style="dim")

    for m in matches:
        table.add_row(
            f"{m.score:.3f}",
            m.market_a.venue,
            _truncate(m.market_a.title),
            m.market_b.venue,
            _truncate(m.market_b.title),
            m.reason,
        )
    return table


def build_opportunity_table(
    opportunities: Sequence[ArbitrageOpportunity],
    title: str = "Arbitrage opportunities",
) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Event")
    table.add_column("Buy YES on")
    table.add_column("YES", justify="right")
    table.add_column("Buy NO on")
    table.add_column("NO", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Profit", justify="right", style="green")
    table.add_column("Expires")

    for o in opportunities:
        table.add_row(
            _truncate(o.match.market_a.title, 50),
            o.buy_yes_on,
            format_cents(o.yes_price),
            o.buy_no_on,
            format_cents(o.no_price),
            f"{o.combined_cost:.3f}",
            format_profit_percent(o.profit_percent),
            o.expiration.strftime("%Y-%m-%d") if o.expiration else "-",
        )
    return table


def build_trade_plan_table(plans: Sequence[TradePlan], title: str = "Trade plans") -> Table:
    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Event")
    table.add_column("Leg 1")
    table.add_column("Leg 2")
    table.add_column("Max size", justify="right")
    table.add_column("Edge", justify="right", style="green")
    table.add_column("Confidence")

    for p in plans:
        table.add_row(
            _truncate(p.event, 50),
            f"{p.leg1.action} {p.leg1.outcome} @ {format_cents(p.leg1.price)} ({p.leg1.venue})",
            f"{p.leg2.action} {p.leg2.outcome} @ {format_cents(p.leg2.price)} ({p.leg2.venue})",
            format_currency(p.max_size),
            f"{format_profit_percent(p.locked_edge_percent)} / {format_currency(p.locked_edge_dollars)}",
            p.confidence,
        )
    return table


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------

def print_matches(matches: Sequence[CrossPlatformMatch], console: Optional[Console] = None) -> None:
    (console or get_console()).print(build_match_table(matches))


def print_opportunities(
    opportunities: Sequence[ArbitrageOpportunity],
    console: Optional[Console] = None,
) -> None:
    (console or get_console()).print(build_opportunity_table(opportunities))


def print_trade_plans(plans: Sequence[TradePlan], console: Optional[Console] = None) -> None:
    (console or get_console()).print(build_trade_plan_table(plans))


def print_summary(lines: Iterable[str], title: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Print summary lines in a panel."""
    (console or get_console()).print(Panel("\n".join(lines), title=title, style="blue"))
