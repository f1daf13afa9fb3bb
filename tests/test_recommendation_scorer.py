import sys
import os
import copy
from datetime import datetime, timedelta, timezone
import unittest

# 프로젝트 루트 디렉토리를 path에 추가
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stock_ratings.domain.entities.stock import StockEvent
from stock_ratings.services.recommendation_scorer import (
    FALLBACK_REASON,
    RecommendationScorer,
    ScoringTables,
    calculate_target_price_increase,
    parse_price,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_event(**overrides) -> StockEvent:
    values = dict(
        ticker="AAPL",
        company="Apple Inc.",
        action="target set by",
        brokerage="Piper Sandler",
        rating_from="",
        rating_to="",
        target_from="",
        target_to="",
        time=NOW - timedelta(hours=2),
    )
    values.update(overrides)
    return StockEvent(**values)


class TestParsePrice(unittest.TestCase):
    """가격 문자열 파싱 테스트"""

    def test_dollar_amounts(self):
        self.assertEqual(parse_price("$200.00"), 200.0)
        self.assertEqual(parse_price("$2,700.00"), 2700.0)
        self.assertEqual(parse_price("$85"), 85.0)

    def test_whitespace_and_euro(self):
        self.assertEqual(parse_price(" $ 1,050.50 "), 1050.5)
        self.assertEqual(parse_price("€42"), 42.0)

    def test_unparseable_returns_zero(self):
        self.assertEqual(parse_price(""), 0.0)
        self.assertEqual(parse_price("n/a"), 0.0)
        self.assertEqual(parse_price("nan"), 0.0)
        self.assertEqual(parse_price("inf"), 0.0)
        self.assertEqual(parse_price(None), 0.0)

    def test_target_increase(self):
        self.assertAlmostEqual(calculate_target_price_increase("$200.00", "$244.00"), 22.0)
        self.assertAlmostEqual(calculate_target_price_increase("$100", "$80"), -20.0)

    def test_target_increase_non_positive_is_zero(self):
        self.assertEqual(calculate_target_price_increase("", "$244.00"), 0.0)
        self.assertEqual(calculate_target_price_increase("$0.00", "$10.00"), 0.0)
        self.assertEqual(calculate_target_price_increase("$10.00", "-$5"), 0.0)


class TestComponentScores(unittest.TestCase):
    def setUp(self):
        self.scorer = RecommendationScorer()

    def test_action_precedence(self):
        cases = {
            "Upgraded price target": 10.0,
            "upgraded by": 10.0,
            "initiated by": 8.0,
            "Initiate coverage": 8.0,
            "target raised by": 7.0,
            "reiterated by": 6.0,
            "maintains rating": 6.0,
            "target lowered by": 3.0,
            "downgraded by": 2.0,
            "target set by": 5.0,
            "": 5.0,
        }
        for action, expected in cases.items():
            with self.subTest(action=action):
                self.assertEqual(self.scorer.get_action_score(action), expected)

    def test_rating_transition(self):
        # Neutral(3) -> Buy(4): 4*2 + (4-3)*2 = 10
        self.assertEqual(self.scorer.get_rating_improvement_score("Neutral", "Buy"), 10.0)
        # Buy(4) -> Sell(1): 1*2 + (1-4)*2 = -4
        self.assertEqual(self.scorer.get_rating_improvement_score("Buy", "Sell"), -4.0)
        # 알 수 없는 값/빈 값은 중립(3)
        self.assertEqual(self.scorer.get_rating_improvement_score("", "mystery"), 6.0)
        self.assertEqual(self.scorer.get_rating_improvement_score("  HOLD ", "Strong-Buy"), 14.0)

    def test_recency_buckets(self):
        cases = [
            (timedelta(hours=12), 10.0),
            (timedelta(days=1), 10.0),
            (timedelta(days=3), 8.0),
            (timedelta(days=20), 6.0),
            (timedelta(days=60), 4.0),
            (timedelta(days=200), 2.0),
            (-timedelta(days=2), 10.0),
        ]
        for age, expected in cases:
            with self.subTest(age=age):
                self.assertEqual(self.scorer.get_recency_score(NOW - age, NOW), expected)

    def test_recency_naive_time_is_utc(self):
        naive = (NOW - timedelta(days=3)).replace(tzinfo=None)
        self.assertEqual(self.scorer.get_recency_score(naive, NOW), 8.0)

    def test_brokerage_tiers(self):
        self.assertEqual(self.scorer.get_brokerage_score("The Goldman Sachs Group"), 10.0)
        self.assertEqual(self.scorer.get_brokerage_score("JPMorgan Chase & Co."), 10.0)
        self.assertEqual(self.scorer.get_brokerage_score("UBS Group"), 8.0)
        self.assertEqual(self.scorer.get_brokerage_score("Piper Sandler"), 6.0)
        self.assertEqual(self.scorer.get_brokerage_score(""), 5.0)
        self.assertEqual(self.scorer.get_brokerage_score("   "), 5.0)

    def test_injected_tables(self):
        scorer = RecommendationScorer(ScoringTables(top_tier_brokerages=("piper sandler",)))
        self.assertEqual(scorer.get_brokerage_score("Piper Sandler"), 10.0)
        self.assertEqual(scorer.get_brokerage_score("Goldman Sachs"), 6.0)


class TestRecommendationScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = RecommendationScorer()

    def test_end_to_end_top_signal(self):
        event = make_event(
            action="upgrade",
            rating_from="Neutral",
            rating_to="Buy",
            target_from="$200.00",
            target_to="$244.00",
            brokerage="Goldman Sachs",
        )

        result = self.scorer.score([event], 10, now=NOW)

        self.assertEqual(len(result), 1)
        self.assertIs(result[0].stock, event)
        self.assertAlmostEqual(result[0].score, 10.0)
        self.assertAlmostEqual(result[0].target_increase, 22.0)
        self.assertEqual(
            result[0].reason,
            "Recent upgrade; Rating improved to Buy; 22.0% price target increase; Rated by Goldman Sachs",
        )

    def test_fallback_reason(self):
        event = make_event(action="target lowered by", rating_from="Sell", rating_to="Sell")

        result = self.scorer.score([event], 10, now=NOW)

        # 3*0.30 + 2*0.25 + 0 + 10*0.15 + 6*0.10
        self.assertAlmostEqual(result[0].score, 3.5)
        self.assertEqual(result[0].reason, FALLBACK_REASON)
        self.assertEqual(result[0].target_increase, 0.0)

    def test_price_target_decrease(self):
        event = make_event(target_from="$100", target_to="$80")

        result = self.scorer.score([event], 10, now=NOW)

        # 5*0.30 + 6*0.25 - 10*0.20 + 10*0.15 + 6*0.10
        self.assertAlmostEqual(result[0].score, 3.1)
        self.assertIn("Recent target set by", result[0].reason)
        self.assertIn("-20.0% price target decrease", result[0].reason)

    def test_empty_input(self):
        self.assertEqual(self.scorer.score([], 10, now=NOW), [])

    def test_limit_defaults_and_truncation(self):
        events = [make_event(ticker=f"T{i}") for i in range(15)]

        self.assertEqual(len(self.scorer.score(events, 0, now=NOW)), 10)
        self.assertEqual(len(self.scorer.score(events, -3, now=NOW)), 10)
        self.assertEqual(len(self.scorer.score(events, 4, now=NOW)), 4)
        self.assertEqual(len(self.scorer.score(events[:2], 5, now=NOW)), 2)
        self.assertEqual(len(self.scorer.score(events, 100, now=NOW)), 15)

    def test_sorted_descending_and_stable(self):
        events = [
            make_event(ticker="LOW", action="downgraded by"),
            make_event(ticker="TIE1"),
            make_event(ticker="HIGH", action="upgraded by", brokerage="Barclays"),
            make_event(ticker="TIE2"),
            make_event(ticker="TIE3"),
        ]

        result = self.scorer.score(events, 10, now=NOW)

        scores = [r.score for r in result]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual([r.stock.ticker for r in result], ["HIGH", "TIE1", "TIE2", "TIE3", "LOW"])

    def test_idempotent_and_does_not_mutate_input(self):
        events = [
            make_event(ticker="A", action="upgrade", target_from="$10", target_to="$12"),
            make_event(ticker="B", rating_from="Buy", rating_to="Underweight"),
        ]
        snapshot = copy.deepcopy(events)

        first = self.scorer.score(events, 10, now=NOW)
        second = self.scorer.score(events, 10, now=NOW)

        self.assertEqual(
            [(r.stock.ticker, r.score, r.reason) for r in first],
            [(r.stock.ticker, r.score, r.reason) for r in second],
        )
        self.assertEqual(events, snapshot)

    def test_malformed_fields_do_not_raise(self):
        event = make_event(
            action=None, brokerage=None, rating_from=None, rating_to="???",
            target_from="abc", target_to="$$$", time=None,
        )

        result = self.scorer.score([event], 1, now=NOW)

        # 5*0.30 + 6*0.25 + 0 + 2*0.15 + 5*0.10
        self.assertAlmostEqual(result[0].score, 3.8)


if __name__ == '__main__':
    unittest.main()
