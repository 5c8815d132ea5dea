from datetime import datetime, timedelta, timezone

from rich.console import Console

from crossvenue.arbitrage import detect_arbitrage, detect_arbitrage_with_guardrails
from crossvenue.models import CrossPlatformMatch, Market, OutcomeSide
from crossvenue.reporting import (
    _truncate,
    build_match_table,
    build_opportunity_table,
    format_cents,
    format_currency,
    format_profit_percent,
    print_matches,
    print_opportunities,
    print_summary,
    print_trade_plans,
)


def _sample_match() -> CrossPlatformMatch:
    now = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
    a = Market(
        venue="POLYMARKET",
        id="pm-1",
        title="GDP growth in 2025? 2.1 to 2.5",
        end_time=now + timedelta(days=10),
        side_a=OutcomeSide("Yes", 0.40, "tok-yes"),
        side_b=OutcomeSide("No", 0.62, "tok-no"),
        prices_updated_at=now,
        liquidity=400.0,
    )
    b = Market(
        venue="KALSHI",
        id="KXGDP-25-T2.3",
        title="GDP growth 2025: 2.3 to 2.6",
        end_time=now + timedelta(days=10),
        side_a=OutcomeSide("Yes", 0.47, "KXGDP-25-T2.3"),
        side_b=OutcomeSide("No", 0.55, "KXGDP-25-T2.3"),
        prices_updated_at=now,
        liquidity=400.0,
    )
    return CrossPlatformMatch(a, b, score=0.93, reason="title 100%, entity 90%")


def _console() -> Console:
    return Console(record=True, width=200, force_terminal=False)


def test_format_helpers() -> None:
    assert format_cents(0.45) == "45¢"
    assert format_cents(None) == "-"
    assert format_profit_percent(5.2631) == "+5.26%"
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-3.5) == "-$3.50"


def test_truncate() -> None:
    assert _truncate("short") == "short"
    assert _truncate("x" * 80, 10) == "x" * 9 + "…"


def test_match_table_rows() -> None:
    table = build_match_table([_sample_match()])
    assert table.row_count == 1
    assert len(table.columns) == 6


def test_print_matches_and_opportunities() -> None:
    match = _sample_match()
    console = _console()

    print_matches([match], console=console)
    print_opportunities(detect_arbitrage([match]), console=console)
    output = console.export_text()

    assert "GDP growth in 2025" in output
    assert "KALSHI" in output
    assert "0.930" in output
    assert "+5.26%" in output
    assert "40¢" in output


def test_print_trade_plans() -> None:
    match = _sample_match()
    now = match.market_a.prices_updated_at + timedelta(seconds=5)
    plans = detect_arbitrage_with_guardrails([match], now=now)
    console = _console()

    print_trade_plans(plans, console=console)
    output = console.export_text()

    assert "BUY YES" in output
    assert "BUY NO" in output
    assert "$400.00" in output


def test_opportunity_table_empty() -> None:
    assert build_opportunity_table([]).row_count == 0


def test_print_summary() -> None:
    console = _console()
    print_summary(["Matches: 3", "Opportunities: 1"], title="Scan summary", console=console)
    output = console.export_text()

    assert "Matches: 3" in output
    assert "Scan summary" in output
