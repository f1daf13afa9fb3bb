"""Stock Repository 인터페이스"""
from abc import ABC, abstractmethod
from typing import List
from stock_ratings.domain.entities.stock import StockEvent, StockFilter


class IStockRepository(ABC):
    """종목 이벤트 Repository 인터페이스"""

    @abstractmethod
    def create_batch(self, events: List[StockEvent]) -> int:
        """이벤트 일괄 저장 (중복은 무시), 새로 저장된 건수 반환"""
        pass

    @abstractmethod
    def find_by_id(self, id: str) -> StockEvent:
        """ID로 이벤트 조회"""
        pass

    @abstractmethod
    def find_all(self, filter: StockFilter) -> List[StockEvent]:
        """티커별 최신 이벤트를 필터/정렬/페이지네이션하여 조회"""
        pass

    @abstractmethod
    def find_by_ticker(self, ticker: str) -> List[StockEvent]:
        """티커의 전체 이력 조회 (최신순)"""
        pass

    @abstractmethod
    def count(self, filter: StockFilter) -> int:
        """필터에 맞는 티커별 최신 이벤트 수"""
        pass


class IStockAPIClient(ABC):
    """외부 종목 등급 API 클라이언트 인터페이스"""

    @abstractmethod
    def fetch_all_stocks(self) -> List[StockEvent]:
        """모든 페이지를 순회하여 이벤트 수집"""
        pass
