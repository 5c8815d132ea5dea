"""Unit tests for pair scoring."""

import math
from datetime import timedelta

import pytest

from crossvenue.config import MatchingSettings
from crossvenue.matching.normalizer import BracketRange, normalize_market_title
from crossvenue.matching.scorer import (
    MatchStrategy,
    MatchScorer,
    bracket_score,
    category_score,
    choose_strategy,
    entity_score,
    ticker_score,
    time_score,
)


@pytest.fixture
def scorer():
    return MatchScorer()


class TestComponents:
    def test_bracket_overlap(self):
        a = BracketRange(2.1, 2.5, "range")
        b = BracketRange(2.3, 2.6, "range")
        assert bracket_score(a, b) == pytest.approx(2 / 3)

    def test_bracket_disjoint_and_mixed(self):
        assert bracket_score(BracketRange(2.1, 2.5, "range"), BracketRange(3.0, 3.5, "range")) == 0.0
        assert bracket_score(BracketRange(3.0, math.inf, "above"), BracketRange(2.0, 2.5, "range")) == 0.0
        assert bracket_score(None, BracketRange(2.0, 2.5, "range")) == 0.0

    def test_bracket_thresholds(self):
        a = BracketRange(3.0, math.inf, "above")
        b = BracketRange(3.5, math.inf, "above")
        assert bracket_score(a, b) == pytest.approx(1 - 0.5 / 3.5)

    def test_ticker_from_slug(self, make_market):
        a = make_market("a1", "x", slug="KXGDP-25")
        b = make_market("b1", "y", slug="kxgdp25")
        assert ticker_score(a, b) == 1.0

    def test_ticker_containment(self, make_market):
        a = make_market("a1", "x", slug="btc")
        b = make_market("b1", "y", slug="btc-100k")
        assert ticker_score(a, b) == 0.8

    def test_ticker_common_substring(self, make_market):
        a = make_market("a1", "x", slug="trumpwins2028")
        b = make_market("b1", "y", slug="trumpwins28x")
        assert ticker_score(a, b) == pytest.approx(0.7 * 10 / 12)

    def test_ticker_unrelated_or_missing(self, make_market):
        assert ticker_score(make_market("a1", "x", slug="abc"), make_market("b1", "y", slug="xyz")) == 0.0
        assert ticker_score(make_market("a1", "x"), make_market("b1", "y")) == 0.0

    def test_title_caps_word_is_not_a_ticker(self, make_market):
        a = make_market("a1", "Will BTC hit $100k?")
        b = make_market("b1", "BTC above $100k")
        assert ticker_score(a, b) == 0.0
        assert ticker_score(a, make_market("b2", "BTC above $100k", slug="btc")) == 0.0

    def test_time(self, make_market, now):
        a = make_market("a1", "x", end_time=now)
        b = make_market("b1", "y", end_time=now + timedelta(days=1.5))
        assert time_score(a, b) == pytest.approx(0.5)
        assert time_score(a, make_market("b2", "y", end_time=None)) == 0.0

    def test_category(self):
        assert category_score("Will CPI exceed 3%?", "GDP growth in 2025") == 1.0
        assert category_score("Will CPI exceed 3%?", "Will Bitcoin hit $100k?") == 0.0
        assert category_score("Will it rain?", "Will it snow?") == 0.0

    def test_entity(self):
        a = normalize_market_title("GDP growth in 2025? 2.1 to 2.5")
        b = normalize_market_title("GDP growth 2025: 2.3 to 2.6")
        # entities 3*1 + ticker 2*1 + year 2*1 + numbers 1*(1/5), over weight 8
        assert entity_score(a, b) == pytest.approx(7.2 / 8)

    def test_entity_no_signals(self):
        a = normalize_market_title("will it rain tomorrow")
        b = normalize_market_title("will it snow tomorrow")
        assert entity_score(a, b) == 0.0

    def test_strategy(self):
        assert choose_strategy("Chiefs vs Bills Winner?", "Buffalo Bills @ Chiefs") is MatchStrategy.SPORTS
        assert choose_strategy("Chiefs vs Bills Winner?", "Will CPI exceed 3%?") is MatchStrategy.GENERIC


class TestMatchScorer:
    def test_sports_example(self, make_market, scorer):
        a = make_market("a1", "Chiefs vs Bills Winner?")
        b = make_market("b1", "Kansas City Chiefs @ Buffalo Bills Moneyline", venue="KALSHI")
        breakdown = scorer.score(a, b)

        assert breakdown.strategy is MatchStrategy.SPORTS
        assert breakdown.sports == pytest.approx(0.75)
        assert breakdown.effective_title == pytest.approx(0.75)
        assert breakdown.bonuses == {"sports": 0.15}
        assert breakdown.overall == pytest.approx(0.35 * 0.75 + 0.25 * 2 / 7 + 0.10 + 0.10 + 0.15)
        assert scorer.accepts(breakdown)

    def test_bracket_example(self, make_market, scorer):
        a = make_market("a1", "GDP growth in 2025? 2.1 to 2.5")
        b = make_market("b1", "GDP growth 2025: 2.3 to 2.6", venue="KALSHI")
        breakdown = scorer.score(a, b)

        assert breakdown.strategy is MatchStrategy.GENERIC
        assert breakdown.bracket == pytest.approx(0.667, abs=0.001)
        assert breakdown.base_event == pytest.approx(1.0)
        assert "base_event" in breakdown.bonuses
        assert "bracket" not in breakdown.bonuses
        assert breakdown.ticker == 0.0
        assert breakdown.overall == pytest.approx(0.35 + 0.25 * 0.9 + 0.10 + 0.10 + 0.05 * 2 / 3 + 0.0625)
        assert scorer.accepts(breakdown)

    def test_weak_wording_fails_prefilter(self, make_market, scorer):
        a = make_market("a1", "Will CPI be under 2% in 2026?")
        b = make_market("b1", "Will Bitcoin reach $100k by end of 2026?", venue="KALSHI")
        breakdown = scorer.score(a, b)

        assert breakdown.effective_title < 0.45
        assert not scorer.passes_prefilter(breakdown)
        assert not scorer.accepts(breakdown)

    def test_ticker_bypasses_prefilter(self, make_market, scorer):
        a = make_market("a1", "Some wording", slug="kxfed-25dec")
        b = make_market("b1", "Different phrasing", venue="KALSHI", slug="KXFED-25DEC")
        breakdown = scorer.score(a, b)

        assert breakdown.ticker == 1.0
        assert scorer.passes_prefilter(breakdown)

    @pytest.mark.parametrize(
        "title_a, title_b",
        [
            ("GDP growth in 2025? 2.1 to 2.5", "GDP growth 2025: 2.3 to 2.6"),
            ("Chiefs vs Bills Winner?", "Kansas City Chiefs @ Buffalo Bills Moneyline"),
            ("Will Bitcoin reach $100k by end of 2026?", "Will Bitcoin reach $100k by end of 2026?"),
            ("Will CPI be under 2% in 2026?", "Will Bitcoin reach $100k by end of 2026?"),
            ("", "Will it rain?"),
        ],
    )
    def test_scores_bounded(self, make_market, scorer, title_a, title_b):
        breakdown = scorer.score(make_market("a1", title_a), make_market("b1", title_b, venue="KALSHI"))

        for value in (
            breakdown.title, breakdown.base_event, breakdown.bracket, breakdown.entity,
            breakdown.ticker, breakdown.time, breakdown.category, breakdown.sports,
            breakdown.overall,
        ):
            assert 0.0 <= value <= 1.0

    def test_custom_threshold(self, make_market):
        strict = MatchScorer(MatchingSettings(match_threshold=0.9))
        a = make_market("a1", "Chiefs vs Bills Winner?")
        b = make_market("b1", "Kansas City Chiefs @ Buffalo Bills Moneyline", venue="KALSHI")
        assert not strict.accepts(strict.score(a, b))

    def test_describe(self, make_market, scorer):
        a = make_market("a1", "Chiefs vs Bills Winner?")
        b = make_market("b1", "Kansas City Chiefs @ Buffalo Bills Moneyline", venue="KALSHI")
        text = scorer.score(a, b).describe()

        assert "sports 75%" in text
        assert "+sports" in text

    def test_get_parameters(self, scorer):
        params = scorer.get_parameters()

        assert params["weights"]["title"] == pytest.approx(0.35)
        assert sum(params["weights"].values()) == pytest.approx(1.0)
        assert params["match_threshold"] == 0.55
