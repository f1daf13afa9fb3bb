"""Stock Use Cases"""
import time
from typing import Dict, List, Optional
import logging

from stock_ratings.core.exceptions import DatabaseConnectionError, StockAPIError
from stock_ratings.domain.entities.stock import StockEvent, StockFilter, StockRecommendation
from stock_ratings.domain.repositories.base import LookupRepository
from stock_ratings.domain.repositories.stock_repository import IStockAPIClient, IStockRepository
from stock_ratings.services.recommendation_scorer import RecommendationScorer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 1000
RECOMMENDATION_POOL_SIZE = 1000


class StockUseCase:
    """종목 이벤트 동기화/조회/추천 Use Case"""

    def __init__(
        self,
        repository: IStockRepository,
        api_client: Optional[IStockAPIClient] = None,
        brokerage_repository: Optional[LookupRepository] = None,
        action_repository: Optional[LookupRepository] = None,
        rating_repository: Optional[LookupRepository] = None,
        scorer: Optional[RecommendationScorer] = None,
    ):
        self.repository = repository
        self.api_client = api_client
        self.brokerage_repository = brokerage_repository
        self.action_repository = action_repository
        self.rating_repository = rating_repository
        self.scorer = scorer or RecommendationScorer()

    def sync_stocks_from_api(self) -> int:
        """외부 API에서 전체 이벤트를 수집하여 저장하고 수집 건수를 반환"""
        logger.info("외부 API 종목 동기화 시작")
        started = time.monotonic()

        try:
            events = self.api_client.fetch_all_stocks()
        except StockAPIError as e:
            logger.error(f"외부 API 종목 조회 실패: {e}")
            raise

        logger.info("외부 API 종목 조회 완료", extra={"count": len(events)})

        self._resolve_lookups(events)

        try:
            inserted = self.repository.create_batch(events)
        except StockAPIError as e:
            logger.error(f"종목 이벤트 저장 실패: {e}")
            raise

        logger.info(
            "종목 동기화 완료",
            extra={
                "count": len(events),
                "inserted": inserted,
                "duration_sec": round(time.monotonic() - started, 3),
            },
        )
        return len(events)

    def _resolve_lookups(self, events: List[StockEvent]) -> None:
        """액션/증권사/등급 이름을 참조 데이터 ID로 연결 (동기화 1회 동안 캐시)"""
        caches: Dict[int, Dict[str, str]] = {}

        def resolve(repository: Optional[LookupRepository], name: str) -> Optional[str]:
            if repository is None or not name:
                return None
            cache = caches.setdefault(id(repository), {})
            if name not in cache:
                try:
                    cache[name] = repository.get_or_create(name).id
                except StockAPIError as e:
                    raise DatabaseConnectionError(f"failed to resolve '{name}': {e}") from e
            return cache[name]

        for event in events:
            event.action_id = resolve(self.action_repository, event.action)
            event.brokerage_id = resolve(self.brokerage_repository, event.brokerage)
            event.rating_from_id = resolve(self.rating_repository, event.rating_from)
            event.rating_to_id = resolve(self.rating_repository, event.rating_to)

    def get_stocks(self, filter: StockFilter) -> List[StockEvent]:
        """필터 조건으로 티커별 최신 이벤트 조회"""
        if filter.limit <= 0:
            filter.limit = DEFAULT_PAGE_LIMIT
        if filter.limit > MAX_PAGE_LIMIT:
            filter.limit = MAX_PAGE_LIMIT

        try:
            return self.repository.find_all(filter)
        except StockAPIError as e:
            logger.error(f"종목 목록 조회 실패: {e}")
            raise

    def get_stock_by_id(self, id: str) -> StockEvent:
        try:
            return self.repository.find_by_id(id)
        except StockAPIError as e:
            logger.error(f"종목 조회 실패: {e}", extra={"id": id})
            raise

    def get_stocks_by_ticker(self, ticker: str) -> List[StockEvent]:
        """티커의 전체 이력 조회 (최신순)"""
        try:
            return self.repository.find_by_ticker(ticker)
        except StockAPIError as e:
            logger.error(f"티커 이력 조회 실패: {e}", extra={"ticker": ticker})
            raise

    def get_stock_count(self, filter: StockFilter) -> int:
        try:
            return self.repository.count(filter)
        except StockAPIError as e:
            logger.error(f"종목 수 조회 실패: {e}")
            raise

    def get_recommendations(self, limit: int) -> List[StockRecommendation]:
        """티커별 최신 이벤트를 점수화하여 상위 limit개 추천 반환"""
        logger.info("종목 추천 생성", extra={"limit": limit})

        try:
            events = self.repository.find_all(StockFilter(limit=RECOMMENDATION_POOL_SIZE))
        except StockAPIError as e:
            logger.error(f"추천용 종목 조회 실패: {e}")
            raise

        if not events:
            return []

        recommendations = self.scorer.score(events, limit)
        logger.info(
            "종목 추천 생성 완료",
            extra={"total_analyzed": len(events), "returned": len(recommendations)},
        )
        return recommendations
