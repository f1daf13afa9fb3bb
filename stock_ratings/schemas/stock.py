"""
종목 등급 API 스키마 정의

API 응답용 스키마를 정의합니다.
도메인 엔티티는 stock_ratings.domain.entities.stock을 참조하세요.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from stock_ratings.domain.entities.stock import LookupEntry, StockEvent, StockRecommendation


class StockResponse(BaseModel):
    """종목 이벤트 응답 스키마"""
    id: Optional[str] = None
    ticker: str
    target_from: str = ""
    target_to: str = ""
    company: str
    action_id: Optional[str] = None
    action: Optional[str] = None
    brokerage_id: Optional[str] = None
    brokerage: Optional[str] = None
    rating_from_id: Optional[str] = None
    rating_from: Optional[str] = None
    rating_to_id: Optional[str] = None
    rating_to: Optional[str] = None
    time: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, event: StockEvent) -> "StockResponse":
        return cls(
            id=event.id,
            ticker=event.ticker,
            target_from=event.target_from,
            target_to=event.target_to,
            company=event.company,
            action_id=event.action_id,
            action=event.action or None,
            brokerage_id=event.brokerage_id,
            brokerage=event.brokerage or None,
            rating_from_id=event.rating_from_id,
            rating_from=event.rating_from or None,
            rating_to_id=event.rating_to_id,
            rating_to=event.rating_to or None,
            time=event.time,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class RecommendationResponse(BaseModel):
    """추천 항목 스키마 (목표가 변화율이 0이면 생략)"""
    stock: StockResponse
    score: float
    reason: str
    target_increase_percent: Optional[float] = None

    @classmethod
    def from_entity(cls, recommendation: StockRecommendation) -> "RecommendationResponse":
        return cls(
            stock=StockResponse.from_entity(recommendation.stock),
            score=recommendation.score,
            reason=recommendation.reason,
            target_increase_percent=recommendation.target_increase or None,
        )


class BrokerageResponse(BaseModel):
    """증권사/액션 응답 스키마"""
    id: Optional[str] = None
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entry: LookupEntry) -> "BrokerageResponse":
        return cls(id=entry.id, name=entry.name, created_at=entry.created_at, updated_at=entry.updated_at)


ActionResponse = BrokerageResponse


class RatingResponse(BaseModel):
    """등급 용어 응답 스키마"""
    id: Optional[str] = None
    term: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entry: LookupEntry) -> "RatingResponse":
        return cls(id=entry.id, term=entry.name, created_at=entry.created_at, updated_at=entry.updated_at)


class MetaData(BaseModel):
    """페이지네이션 메타데이터"""
    total: int
    limit: int
    offset: int


class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마"""
    success: bool = True
    data: List[StockResponse] = Field(default_factory=list)
    meta: MetaData
