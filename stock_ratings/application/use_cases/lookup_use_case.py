"""참조 데이터(증권사/액션/등급) Use Case"""
from typing import List
import logging

from stock_ratings.core.exceptions import StockAPIError
from stock_ratings.domain.entities.stock import LookupEntry
from stock_ratings.domain.repositories.base import LookupRepository

logger = logging.getLogger(__name__)


class LookupUseCase:
    """참조 데이터 조회 Use Case"""

    def __init__(self, repository: LookupRepository, label: str):
        self.repository = repository
        self.label = label

    def get_all(self) -> List[LookupEntry]:
        try:
            return self.repository.find_all()
        except StockAPIError as e:
            logger.error(f"{self.label} 목록 조회 실패: {e}")
            raise

    def get_by_id(self, id: str) -> LookupEntry:
        try:
            return self.repository.find_by_id(id)
        except StockAPIError as e:
            logger.error(f"{self.label} 조회 실패: {e}", extra={"id": id})
            raise

    def get_or_create(self, name: str) -> LookupEntry:
        """이름으로 조회하고 없으면 생성"""
        try:
            return self.repository.get_or_create(name)
        except StockAPIError as e:
            logger.error(f"{self.label} 생성 실패: {e}", extra={"lookup_name": name})
            raise
