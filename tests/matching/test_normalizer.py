"""Unit tests for title normalisation and the rule tables."""

import math

import pytest

from crossvenue.matching.normalizer import (
    BracketRange,
    extract_base_event,
    extract_base_terms,
    extract_bracket,
    extract_entities,
    extract_numbers,
    extract_terms,
    extract_ticker,
    extract_year,
    jaccard,
    normalize_market_title,
)
from crossvenue.matching.rules import BET_TYPE_RULES, SEMANTIC_CONFLICTS, first_outcome


class TestTerms:
    def test_stop_words_and_short_tokens_removed(self):
        assert extract_terms("Will Bitcoin reach $100k by end of 2026?") == [
            "bitcoin", "reach", "100k", "end", "2026",
        ]

    def test_punctuation_splits_decimals(self):
        # "2.1" becomes "2" and "1", both too short to keep
        assert extract_terms("GDP growth in 2025? 2.1 to 2.5") == ["gdp", "growth", "2025"]

    def test_empty_title(self):
        assert extract_terms("") == []


class TestBaseEvent:
    def test_range_stripped(self):
        assert extract_base_event("GDP growth in 2025? 2.1 to 2.5") == "gdp growth in 2025"

    def test_threshold_stripped(self):
        assert extract_base_event("Unemployment 4% or below in 2025") == "unemployment in 2025"
        assert extract_base_event("Fed funds rate over 4.5% by June") == "fed funds rate by june"

    def test_bracket_variants_share_base_terms(self):
        a = extract_base_terms("GDP growth in 2025? 2.1 to 2.5")
        b = extract_base_terms("GDP growth 2025: 2.3 to 2.6")
        assert a == b == ["gdp", "growth", "2025"]


class TestSignals:
    def test_year(self):
        assert extract_year("Fed cuts rates in 2025?") == "2025"
        assert extract_year("World Cup 2034") == "2034"
        assert extract_year("Happened in 2019") is None

    def test_ticker(self):
        assert extract_ticker("Will BTC hit $100k?") == "btc"
        assert extract_ticker("Will Bitcoin hit $100k?") is None

    def test_entities_drop_question_words(self):
        assert extract_entities("Will Donald Trump win the 2028 election?") == ["donald trump"]
        assert extract_entities("Who wins? Kansas City Chiefs or Buffalo Bills") == [
            "kansas city chiefs", "buffalo bills",
        ]

    def test_entities_deduplicated(self):
        assert extract_entities("Lakers beat Celtics; Lakers cover") == ["lakers", "celtics"]

    def test_numbers(self):
        assert extract_numbers("GDP growth in 2025? 2.1 to 2.5") == ["2025", "2.1", "2.5"]


class TestBracket:
    def test_range(self):
        assert extract_bracket("GDP growth in 2025? 2.1 to 2.5") == BracketRange(2.1, 2.5, "range")
        assert extract_bracket("Inflation 2.0-2.5%") == BracketRange(2.0, 2.5, "range")

    def test_reversed_range_is_ordered(self):
        assert extract_bracket("Rate between 3.5 to 2.5") == BracketRange(2.5, 3.5, "range")

    def test_above(self):
        bracket = extract_bracket("CPI 3% or above")
        assert bracket.kind == "above"
        assert bracket.low == 3.0
        assert math.isinf(bracket.high)
        assert extract_bracket("Price over 50").low == 50.0

    def test_below(self):
        bracket = extract_bracket("Unemployment 4% or below")
        assert bracket.kind == "below"
        assert bracket.high == 4.0
        assert extract_bracket("Will CPI be under 2%?").high == 2.0

    def test_no_bracket(self):
        assert extract_bracket("Will the Chiefs win?") is None

    def test_width(self):
        assert BracketRange(2.1, 2.5, "range").width == pytest.approx(0.4)


class TestNormalizeMarketTitle:
    def test_fields(self):
        norm = normalize_market_title("GDP growth in 2025? 2.1 to 2.5")

        assert norm.terms == ("gdp", "growth", "2025")
        assert norm.base_event == "gdp growth in 2025"
        assert norm.year == "2025"
        assert norm.ticker == "gdp"
        assert norm.entities == ("gdp",)
        assert norm.bracket == BracketRange(2.1, 2.5, "range")

    def test_cached_per_title(self):
        title = "Will ETH flip BTC in 2027?"
        assert normalize_market_title(title) is normalize_market_title(title)


class TestJaccard:
    def test_overlap(self):
        assert jaccard(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)

    def test_both_empty(self):
        assert jaccard([], []) == 0.0

    def test_duplicates_ignored(self):
        assert jaccard(["a", "a"], ["a"]) == 1.0


class TestRuleTables:
    def test_semantic_pair_is_one_directional(self):
        under_over = SEMANTIC_CONFLICTS[0]
        assert under_over.conflicts("CPI under 2%", "CPI over 2%")
        assert under_over.conflicts("CPI over 2%", "CPI under 2%")
        assert not under_over.conflicts("CPI under 2%", "CPI under 3%")

    def test_bet_rules_first_match_wins(self):
        assert first_outcome(BET_TYPE_RULES, "chiefs -3.5 spread") == "spread"
        assert first_outcome(BET_TYPE_RULES, "over 45.5 points") == "over_under"
        assert first_outcome(BET_TYPE_RULES, "chiefs to win super bowl") == "futures"
        assert first_outcome(BET_TYPE_RULES, "weather tomorrow") is None
