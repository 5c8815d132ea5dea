"""Integration tests for CrossPlatformMatcher."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from crossvenue.config import MatchingSettings
from crossvenue.matching import CrossPlatformMatcher, IndexCache, MarketIndex


def _pairs(matches):
    return [(m.market_a.id, m.market_b.id) for m in matches]


@pytest.fixture
def matcher():
    return CrossPlatformMatcher()


class TestMatch:
    def test_expected_pairs(self, matcher, venue_a_markets, venue_b_markets):
        matches = matcher.match(venue_a_markets, venue_b_markets)

        assert set(_pairs(matches)) == {
            ("pm-gdp", "ks-gdp"),
            ("pm-chiefs", "ks-chiefs"),
            ("pm-btc", "ks-btc"),
        }

    def test_sorted_by_score(self, matcher, venue_a_markets, venue_b_markets):
        matches = matcher.match(venue_a_markets, venue_b_markets)

        assert _pairs(matches) == [
            ("pm-gdp", "ks-gdp"),
            ("pm-btc", "ks-btc"),
            ("pm-chiefs", "ks-chiefs"),
        ]
        assert matches[0].score == pytest.approx(0.871, abs=0.001)
        assert all(0.0 <= m.score <= 1.0 for m in matches)

    def test_reason_describes_components(self, matcher, venue_a_markets, venue_b_markets):
        matches = matcher.match(venue_a_markets, venue_b_markets)
        chiefs = next(m for m in matches if m.market_a.id == "pm-chiefs")

        assert "sports" in chiefs.reason

    def test_stats(self, matcher, venue_a_markets, venue_b_markets):
        matcher.match(venue_a_markets, venue_b_markets)
        stats = matcher.last_stats

        assert stats.markets_a == 5
        assert stats.skipped_no_end_time == 1
        assert stats.matched == 3
        assert stats.rejections["mutually_exclusive"] == 1
        assert stats.rejections["semantic_conflict"] == 1
        assert stats.rejections["entity_conflict"] >= 1
        assert stats.to_dict()["matched"] == 3

    def test_no_duplicate_b(self, make_market, matcher):
        markets_a = [
            make_market("a1", "Will Bitcoin reach $100k by end of 2026?"),
            make_market("a2", "Will Bitcoin reach $100k by end of 2026?"),
        ]
        markets_b = [make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI")]

        matches = matcher.match(markets_a, markets_b)

        assert _pairs(matches) == [("a1", "b1")]
        assert matcher.last_stats.rejections == {}

    def test_greedy_by_arrival_order(self, make_market, matcher):
        markets_a = [
            make_market("a1", "Will Bitcoin reach $100k in 2026?"),
            make_market("a2", "Will Bitcoin reach $100k by end of 2026?"),
        ]
        markets_b = [make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI")]

        # a2 is the better pair but a1 arrives first
        assert _pairs(matcher.match(markets_a, markets_b)) == [("a1", "b1")]

    def test_under_over_never_match(self, make_market, matcher):
        matches = matcher.match(
            [make_market("a1", "Will CPI be under 2% in 2026?")],
            [make_market("b1", "Will CPI be over 2% in 2026?", venue="KALSHI")],
        )
        assert matches == []

    def test_different_years_never_match(self, make_market, matcher):
        matches = matcher.match(
            [make_market("a1", "Will the Fed cut rates in 2025?")],
            [make_market("b1", "Will the Fed cut rates in 2026?", venue="KALSHI")],
        )
        assert matches == []
        assert matcher.last_stats.rejections["year_conflict"] == 1

    @pytest.mark.parametrize(
        "title_a, title_b, reason",
        [
            ("Will the NFL suspend any player in 2026?", "Will the NFL expand to 18 games in 2026?", "below_threshold"),
            ("Will US GDP be negative in 2026?", "Will US GDP exceed 3% in 2026?", "numeric_conflict"),
        ],
    )
    def test_shared_caps_word_alone_never_matches(self, make_market, matcher, title_a, title_b, reason):
        matches = matcher.match(
            [make_market("a1", title_a)],
            [make_market("b1", title_b, venue="KALSHI")],
        )
        assert matches == []
        assert matcher.last_stats.rejections == {reason: 1}

    def test_naive_end_times(self, make_market, matcher):
        end = datetime(2026, 3, 1, 12)
        matches = matcher.match(
            [make_market("a1", "Will Bitcoin reach $100k by end of 2026?", end_time=end)],
            [make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI",
                         end_time=end.replace(tzinfo=timezone.utc) + timedelta(days=1))],
        )
        assert _pairs(matches) == [("a1", "b1")]

    def test_time_window(self, make_market, matcher, now):
        matches = matcher.match(
            [make_market("a1", "Will Bitcoin reach $100k?", end_time=now)],
            [make_market("b1", "Will Bitcoin reach $100k?", venue="KALSHI", end_time=now + timedelta(days=10))],
        )
        assert matches == []
        assert matcher.last_stats.rejections["time_window"] == 1

    def test_deterministic(self, venue_a_markets, venue_b_markets):
        first = CrossPlatformMatcher().match(venue_a_markets, venue_b_markets)
        second = CrossPlatformMatcher().match(venue_a_markets, venue_b_markets)

        assert [(m.pair_id, m.score, m.reason) for m in first] == [
            (m.pair_id, m.score, m.reason) for m in second
        ]

    def test_empty_inputs(self, matcher, venue_b_markets):
        assert matcher.match([], venue_b_markets) == []
        assert matcher.match([], []) == []

    def test_logs_summary(self, matcher, venue_a_markets, venue_b_markets, caplog):
        with caplog.at_level(logging.INFO, logger="crossvenue.matcher"):
            matcher.match(venue_a_markets, venue_b_markets)
        assert "Matched 3/5 markets" in caplog.text

    def test_cache_reused(self, matcher, venue_a_markets, venue_b_markets):
        cache = IndexCache()
        first = matcher.match(venue_a_markets, venue_b_markets, cache=cache)
        index = cache.index
        second = matcher.match(venue_a_markets, venue_b_markets, cache=cache)

        assert cache.index is index
        assert _pairs(first) == _pairs(second)

    def test_get_parameters(self):
        matcher = CrossPlatformMatcher(MatchingSettings(min_shared_terms=3))
        params = matcher.get_parameters()

        assert params["min_shared_terms"] == 3
        assert params["time_window_days"] == 3.0
        assert "weights" in params


class TestMatchIncremental:
    def test_only_new_matches_returned(self, matcher, venue_a_markets, venue_b_markets, make_market):
        index = MarketIndex.build(venue_b_markets)
        existing = matcher.match(venue_a_markets[:2], venue_b_markets)
        assert set(_pairs(existing)) == {("pm-gdp", "ks-gdp"), ("pm-chiefs", "ks-chiefs")}

        new = matcher.match_incremental(venue_a_markets[2:], index, existing)

        assert _pairs(new) == [("pm-btc", "ks-btc")]

    def test_used_b_markets_unavailable(self, matcher, make_market):
        markets_b = [make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI")]
        index = MarketIndex.build(markets_b)
        existing = matcher.match([make_market("a1", "Will Bitcoin reach $100k by end of 2026?")], markets_b)

        new = matcher.match_incremental(
            [make_market("a2", "Will Bitcoin reach $100k by end of 2026?")], index, existing
        )
        assert new == []

    def test_matched_a_markets_skipped(self, matcher, make_market):
        markets_b = [
            make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI"),
            make_market("b2", "Bitcoin reach $100k by end of 2026", venue="KALSHI"),
        ]
        index = MarketIndex.build(markets_b)
        market_a = make_market("a1", "Will Bitcoin reach $100k by end of 2026?")
        existing = matcher.match([market_a], markets_b)

        assert matcher.match_incremental([market_a], index, existing) == []
        assert matcher.last_stats.skipped_already_matched == 1
