"""Stock 엔티티"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class StockEvent:
    """애널리스트 등급/목표가 변경 이벤트 (종목별 시점 단위)"""
    ticker: str
    company: str
    time: datetime
    target_from: str = ""
    target_to: str = ""
    action: str = ""
    brokerage: str = ""
    rating_from: str = ""
    rating_to: str = ""
    id: Optional[str] = None
    action_id: Optional[str] = None
    brokerage_id: Optional[str] = None
    rating_from_id: Optional[str] = None
    rating_to_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class LookupEntry:
    """증권사/액션/등급 용어 같은 참조 데이터"""
    name: str
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class StockRecommendation:
    """주식 추천 엔티티"""
    stock: StockEvent
    score: float
    reason: str
    target_increase: float = 0.0


@dataclass
class StockFilter:
    """종목 이벤트 조회 필터"""
    ticker: str = ""
    company: str = ""
    brokerage: str = ""
    action: str = ""
    rating_from: str = ""
    rating_to: str = ""
    sort_by: str = "time"
    sort_order: str = "desc"
    limit: int = 0
    offset: int = 0
