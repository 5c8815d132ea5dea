#!/usr/bin/env python3
"""
Match two venue dumps and report locked arbitrage.

Loads venue-A and venue-B market dumps (CSV, JSON or parquet), matches them,
prints matches / opportunities / guardrailed trade plans and optionally writes
the tables to CSV.

Usage:
    python scripts/scan_matches.py data/polymarket.csv data/kalshi.json
    python scripts/scan_matches.py a.csv b.csv --venue-a POLYMARKET --venue-b KALSHI \
        --config config/local.yaml --output-dir data/scan
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

import argparse
import logging

import pandas as pd

from crossvenue.arbitrage import detect_arbitrage, detect_arbitrage_with_guardrails
from crossvenue.config import get_config, setup_logging
from crossvenue.matching import CrossPlatformMatcher
from crossvenue.models import markets_from_dataframe, matches_to_dataframe, opportunities_to_dataframe
from crossvenue.reporting import (
    print_matches,
    print_opportunities,
    print_summary,
    print_trade_plans,
)

logger = logging.getLogger("scan_matches")


def load_dump(path: str) -> pd.DataFrame:
    """Read a venue dump by file extension."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Market dump not found: {path}")

    suffix = p.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(p)
    if suffix in (".json", ".jsonl"):
        return pd.read_json(p, lines=suffix == ".jsonl")
    if suffix == ".parquet":
        return pd.read_parquet(p)
    raise ValueError(f"Unsupported file type: {suffix}")


def main():
    parser = argparse.ArgumentParser(description="Match markets across two venues and find arbitrage")
    parser.add_argument("markets_a", help="Venue-A market dump (csv/json/jsonl/parquet)")
    parser.add_argument("markets_b", help="Venue-B market dump (csv/json/jsonl/parquet)")
    parser.add_argument("--venue-a", default="POLYMARKET", help="Venue tag for the first dump")
    parser.add_argument("--venue-b", default="KALSHI", help="Venue tag for the second dump")
    parser.add_argument("--config", default=None, help="Extra YAML config merged last")
    parser.add_argument("--output-dir", default=None, help="Write matches/opportunities CSVs here")
    parser.add_argument("--top", type=int, default=25, help="Rows to print per table")
    args = parser.parse_args()

    config = get_config(config_path=args.config)
    setup_logging(config.logging)

    markets_a = markets_from_dataframe(load_dump(args.markets_a), args.venue_a)
    markets_b = markets_from_dataframe(load_dump(args.markets_b), args.venue_b)
    logger.info(f"Loaded {len(markets_a)} {args.venue_a} and {len(markets_b)} {args.venue_b} markets")

    matcher = CrossPlatformMatcher(config.matching)
    matches = matcher.match(markets_a, markets_b)
    opportunities = detect_arbitrage(matches)
    plans = detect_arbitrage_with_guardrails(matches, config.guardrails)

    stats = matcher.last_stats
    print_summary(
        [
            f"Markets: {len(markets_a):,} {args.venue_a} / {len(markets_b):,} {args.venue_b}",
            f"Candidates evaluated: {stats.candidates_evaluated:,}",
            f"Matches: {len(matches):,}",
            f"Opportunities: {len(opportunities):,}",
            f"Trade plans: {len(plans):,}",
            "Rejections: " + ", ".join(f"{k}={v}" for k, v in stats.rejections.most_common()),
        ],
        title="Scan summary",
    )
    print_matches(matches[: args.top])
    if opportunities:
        print_opportunities(opportunities[: args.top])
    if plans:
        print_trade_plans(plans[: args.top])

    if args.output_dir:
        out = Path(args.output_dir)
        out.mkdir(parents=True, exist_ok=True)
        matches_to_dataframe(matches).to_csv(out / "matches.csv", index=False)
        opportunities_to_dataframe(opportunities).to_csv(out / "opportunities.csv", index=False)
        logger.info(f"Wrote results to {out}")


if __name__ == "__main__":
    main()
