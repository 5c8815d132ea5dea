"""Unit tests for keyword market categories."""

from crossvenue.matching.categories import CATEGORIES, MarketCategorizer, categorize_market


class TestCategorizeMarket:
    def test_economic_keywords(self):
        assert categorize_market("Will CPI exceed 3% in 2025?") == "economic"
        assert categorize_market("GDP growth in 2025? 2.1 to 2.5") == "economic"

    def test_political_keywords(self):
        assert categorize_market("Will Trump win the 2028 election?") == "political"

    def test_crypto_keywords(self):
        assert categorize_market("Will Bitcoin reach $100k by end of 2026?") == "crypto"

    def test_sports_keywords(self):
        assert categorize_market("NBA Finals MVP") == "sports"

    def test_sports_fallback_from_team_names(self):
        assert categorize_market("Chiefs vs Bills Winner?") == "sports"

    def test_uncategorised(self):
        assert categorize_market("Will it rain in Paris tomorrow?") is None
        assert categorize_market("") is None

    def test_keywords_are_word_bounded(self):
        # "sol" must not fire inside "solar"
        assert categorize_market("Solar eclipse visible") is None


class TestMarketCategorizer:
    def test_custom_categories(self):
        categorizer = MarketCategorizer(categories={"weather": ["rain", "snow"]}, sports_fallback=False)

        assert categorizer.classify("Will it rain in Paris?") == "weather"
        assert categorizer.classify("Chiefs vs Bills Winner?") is None

    def test_scores_count_hits(self):
        categorizer = MarketCategorizer()
        scores = categorizer.scores("Will Trump win the election vote?")

        assert scores["political"] == 3
        assert "crypto" not in scores

    def test_ties_resolve_to_first_declared(self):
        categorizer = MarketCategorizer(categories={"x": ["foo"], "y": ["bar"]})
        assert categorizer.classify("foo bar") == "x"

    def test_default_buckets(self):
        assert set(CATEGORIES) == {"economic", "political", "crypto", "sports"}
