"""Repository 기본 인터페이스"""
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, List, Optional
from stock_ratings.core.exceptions import DuplicateEntryError

T = TypeVar('T')


class LookupRepository(ABC, Generic[T]):
    """이름으로 식별되는 참조 데이터 Repository 인터페이스"""

    @abstractmethod
    def create(self, entity: T) -> T:
        """엔티티 생성"""
        pass

    @abstractmethod
    def find_by_id(self, id: str) -> T:
        """ID로 엔티티 조회 (없으면 NotFoundError)"""
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[T]:
        """이름으로 엔티티 조회"""
        pass

    @abstractmethod
    def find_all(self) -> List[T]:
        """모든 엔티티 조회"""
        pass

    def get_or_create(self, name: str) -> T:
        """이름으로 조회하고 없으면 생성"""
        existing = self.find_by_name(name)
        if existing is not None:
            return existing
        try:
            return self.create(self._new_entity(name))
        except DuplicateEntryError:
            # 동시에 생성된 경우 기존 항목 반환
            return self.find_by_name(name)

    @abstractmethod
    def _new_entity(self, name: str) -> T:
        pass
