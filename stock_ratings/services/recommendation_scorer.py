"""
종목 추천 점수 계산 서비스

티커별 최신 등급 이벤트를 다섯 가지 요소(액션, 등급 변화, 목표가 변화,
최신성, 증권사 등급)의 가중합으로 점수화하고 상위 N개를 반환합니다.
I/O가 없는 순수 계산이며 입력 이벤트를 변경하지 않습니다.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from stock_ratings.domain.entities.stock import StockEvent, StockRecommendation

DEFAULT_LIMIT = 10
FALLBACK_REASON = "Positive outlook"

# 요소별 가중치
ACTION_WEIGHT = 0.30
RATING_WEIGHT = 0.25
TARGET_WEIGHT = 0.20
RECENCY_WEIGHT = 0.15
BROKERAGE_WEIGHT = 0.10

NEUTRAL_ACTION_SCORE = 5.0
NEUTRAL_RATING_VALUE = 3.0
EMPTY_BROKERAGE_SCORE = 5.0
DEFAULT_BROKERAGE_SCORE = 6.0
TOP_TIER_SCORE = 10.0
MID_TIER_SCORE = 8.0

TARGET_SCORE_CAP = 10.0
HIGHLIGHT_THRESHOLD = 3.0
PRICE_CHANGE_HIGHLIGHT = 5.0


@dataclass(frozen=True)
class ActionRule:
    """
    액션 분류 규칙

    any_of 중 하나라도 포함되고, all_of가 모두 포함되면 일치합니다.
    (비어 있는 조건은 항상 참)
    """
    score: float
    any_of: Tuple[str, ...] = ()
    all_of: Tuple[str, ...] = ()

    def matches(self, action: str) -> bool:
        if self.any_of and not any(word in action for word in self.any_of):
            return False
        return all(word in action for word in self.all_of)


# 위에서부터 순서대로 평가, 첫 번째 일치 규칙 적용
ACTION_RULES: Tuple[ActionRule, ...] = (
    ActionRule(10.0, any_of=("upgrade",)),
    ActionRule(8.0, any_of=("initiated", "initiate")),
    ActionRule(7.0, all_of=("target", "raised")),
    ActionRule(6.0, any_of=("reiterate", "maintain")),
    ActionRule(3.0, all_of=("target", "lowered")),
    ActionRule(2.0, any_of=("downgrade",)),
)

RATING_VALUES: Mapping[str, float] = MappingProxyType({
    "strong-buy": 5.0,
    "strong buy": 5.0,
    "buy": 4.0,
    "speculative buy": 4.0,
    "overweight": 4.0,
    "outperform": 4.0,
    "market outperform": 4.0,
    "sector outperform": 4.0,
    "positive": 4.0,
    "hold": 3.0,
    "neutral": 3.0,
    "in-line": 3.0,
    "market perform": 3.0,
    "sector perform": 3.0,
    "equal weight": 3.0,
    "equal-weight": 3.0,
    "underweight": 2.0,
    "underperform": 2.0,
    "reduce": 2.0,
    "sell": 1.0,
})

TOP_TIER_BROKERAGES: Tuple[str, ...] = (
    "goldman sachs", "morgan stanley", "jp morgan", "jpmorgan", "barclays",
)
MID_TIER_BROKERAGES: Tuple[str, ...] = (
    "citigroup", "credit suisse", "deutsche bank", "ubs", "wells fargo",
)

# (최대 경과 일수, 점수)
RECENCY_BUCKETS: Tuple[Tuple[float, float], ...] = (
    (1, 10.0),
    (7, 8.0),
    (30, 6.0),
    (90, 4.0),
)
OLDEST_RECENCY_SCORE = 2.0

_PRICE_STRIP_CHARS = ("$", "€", ",")


@dataclass(frozen=True)
class ScoringTables:
    """점수 계산에 사용하는 참조 테이블 묶음"""
    action_rules: Tuple[ActionRule, ...] = ACTION_RULES
    rating_values: Mapping[str, float] = field(default_factory=lambda: RATING_VALUES)
    top_tier_brokerages: Tuple[str, ...] = TOP_TIER_BROKERAGES
    mid_tier_brokerages: Tuple[str, ...] = MID_TIER_BROKERAGES
    recency_buckets: Tuple[Tuple[float, float], ...] = RECENCY_BUCKETS


def parse_price(price_str: str) -> float:
    """
    "$200.00", "$2,700.00", "$85" 같은 가격 문자열을 숫자로 변환합니다.

    Returns:
        파싱된 가격, 파싱할 수 없으면 0
    """
    if not price_str:
        return 0.0
    cleaned = "".join(price_str.split())
    for ch in _PRICE_STRIP_CHARS:
        cleaned = cleaned.replace(ch, "")
    try:
        price = float(cleaned)
    except ValueError:
        return 0.0
    if not math.isfinite(price):
        return 0.0
    return price


def calculate_target_price_increase(target_from: str, target_to: str) -> float:
    """목표가 변화율(%) 계산, 어느 한쪽이라도 0 이하이면 0"""
    price_from = parse_price(target_from)
    price_to = parse_price(target_to)
    if price_from <= 0 or price_to <= 0:
        return 0.0
    return (price_to - price_from) / price_from * 100


def _as_utc(value: datetime) -> datetime:
    # MongoDB에서 읽은 naive datetime은 UTC로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class RecommendationScorer:
    """종목 이벤트 가중합 점수 계산기 (상태 없음)"""

    def __init__(self, tables: Optional[ScoringTables] = None):
        self.tables = tables or ScoringTables()

    def score(
        self,
        events: Sequence[StockEvent],
        limit: int = DEFAULT_LIMIT,
        now: Optional[datetime] = None,
    ) -> List[StockRecommendation]:
        """
        이벤트 목록을 점수화하여 점수 내림차순 상위 limit개를 반환합니다.

        Args:
            events: 티커별 최신 이벤트 목록 (비어 있어도 됨)
            limit: 반환 개수, 0 이하이면 기본값 10
            now: 기준 시각, 생략하면 호출 시점에 한 번만 조회

        Returns:
            점수 내림차순 추천 목록 (동점이면 입력 순서 유지)
        """
        if limit <= 0:
            limit = DEFAULT_LIMIT
        if not events:
            return []

        now = _as_utc(now) if now is not None else datetime.now(timezone.utc)

        recommendations = []
        for event in events:
            score, reason, target_increase = self.calculate_stock_score(event, now)
            recommendations.append(StockRecommendation(
                stock=event,
                score=score,
                reason=reason,
                target_increase=target_increase,
            ))

        # sorted는 안정 정렬이므로 동점 시 입력 순서 유지
        recommendations = sorted(recommendations, key=lambda r: r.score, reverse=True)
        return recommendations[:limit]

    def calculate_stock_score(self, event: StockEvent, now: datetime) -> Tuple[float, str, float]:
        """단일 이벤트의 (점수, 사유, 목표가 변화율) 계산"""
        score = 0.0
        reasons = []

        # 1. 액션 (30%)
        action_score = self.get_action_score(event.action)
        score += action_score * ACTION_WEIGHT
        if action_score > HIGHLIGHT_THRESHOLD:
            reasons.append(f"Recent {event.action}")

        # 2. 등급 변화 (25%)
        rating_score = self.get_rating_improvement_score(event.rating_from, event.rating_to)
        score += rating_score * RATING_WEIGHT
        if rating_score > HIGHLIGHT_THRESHOLD:
            reasons.append(f"Rating improved to {event.rating_to}")

        # 3. 목표가 변화 (20%) - 10% 상승 = 5점, 20% 이상 = 10점
        target_increase = calculate_target_price_increase(event.target_from, event.target_to)
        if target_increase != 0:
            target_score = max(-TARGET_SCORE_CAP, min(TARGET_SCORE_CAP, target_increase / 2.0))
            score += target_score * TARGET_WEIGHT
            if target_increase > PRICE_CHANGE_HIGHLIGHT:
                reasons.append(f"{target_increase:.1f}% price target increase")
            elif target_increase < -PRICE_CHANGE_HIGHLIGHT:
                reasons.append(f"{target_increase:.1f}% price target decrease")

        # 4. 최신성 (15%)
        score += self.get_recency_score(event.time, now) * RECENCY_WEIGHT

        # 5. 증권사 평판 (10%)
        brokerage_score = self.get_brokerage_score(event.brokerage)
        score += brokerage_score * BROKERAGE_WEIGHT
        if brokerage_score >= MID_TIER_SCORE and event.brokerage:
            reasons.append(f"Rated by {event.brokerage}")

        reason = "; ".join(reasons) or FALLBACK_REASON
        return score, reason, target_increase

    def get_action_score(self, action: str) -> float:
        action = (action or "").lower()
        for rule in self.tables.action_rules:
            if rule.matches(action):
                return rule.score
        return NEUTRAL_ACTION_SCORE

    def get_rating_value(self, rating: str) -> float:
        rating = (rating or "").strip().lower()
        if not rating:
            return NEUTRAL_RATING_VALUE
        return self.tables.rating_values.get(rating, NEUTRAL_RATING_VALUE)

    def get_rating_improvement_score(self, rating_from: str, rating_to: str) -> float:
        """
        목표 등급 값(1~5)을 2~10 범위로 환산하고 변화량의 2배를 보너스로 더합니다.
        하향 조정이면 보너스가 음수가 되어 점수가 음수가 될 수 있습니다.
        """
        from_value = self.get_rating_value(rating_from)
        to_value = self.get_rating_value(rating_to)
        improvement_bonus = (to_value - from_value) * 2.0
        return to_value * 2.0 + improvement_bonus

    def get_recency_score(self, event_time: Optional[datetime], now: datetime) -> float:
        if event_time is None:
            return OLDEST_RECENCY_SCORE
        days_since = (now - _as_utc(event_time)).total_seconds() / 86400
        for max_days, bucket_score in self.tables.recency_buckets:
            if days_since <= max_days:
                return bucket_score
        return OLDEST_RECENCY_SCORE

    def get_brokerage_score(self, brokerage: str) -> float:
        brokerage = (brokerage or "").strip().lower()
        if not brokerage:
            return EMPTY_BROKERAGE_SCORE
        if any(name in brokerage for name in self.tables.top_tier_brokerages):
            return TOP_TIER_SCORE
        if any(name in brokerage for name in self.tables.mid_tier_brokerages):
            return MID_TIER_SCORE
        return DEFAULT_BROKERAGE_SCORE
