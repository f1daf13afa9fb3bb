"""MongoDB를 사용한 참조 데이터(증권사/액션/등급) Repository 구현"""
from datetime import datetime
from typing import List, Optional
import logging

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from stock_ratings.core.exceptions import (
    DatabaseConnectionError,
    DuplicateEntryError,
    InvalidInputError,
    NotFoundError,
)
from stock_ratings.domain.entities.stock import LookupEntry
from stock_ratings.domain.repositories.base import LookupRepository
from stock_ratings.infrastructure.database.mongodb_client import (
    ACTIONS_COLLECTION,
    BROKERAGES_COLLECTION,
    RATINGS_COLLECTION,
    get_mongodb_database,
)

logger = logging.getLogger(__name__)


class MongoDBLookupRepository(LookupRepository[LookupEntry]):
    """
    이름 하나로 식별되는 컬렉션용 Repository

    brokerages/actions는 "name", ratings는 "term" 필드를 사용합니다.
    """

    def __init__(self, collection_name: str, name_field: str = "name", db: Optional[Database] = None):
        self._db = db if db is not None else get_mongodb_database()
        if self._db is None:
            raise DatabaseConnectionError("MongoDB 클라이언트를 초기화할 수 없습니다.")
        self.collection_name = collection_name
        self.name_field = name_field
        self._collection = self._db[collection_name]

    def _to_entry(self, doc) -> LookupEntry:
        return LookupEntry(
            id=str(doc["_id"]),
            name=doc[self.name_field],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def _new_entity(self, name: str) -> LookupEntry:
        return LookupEntry(name=name)

    def create(self, entity: LookupEntry) -> LookupEntry:
        now = datetime.utcnow()
        try:
            result = self._collection.insert_one({
                self.name_field: entity.name,
                "created_at": now,
                "updated_at": now,
            })
        except DuplicateKeyError as e:
            raise DuplicateEntryError(f"{self.collection_name} already exists: {entity.name}") from e
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to create {self.collection_name}: {e}") from e

        logger.info(f"{self.collection_name} 항목 생성: {entity.name}")
        return LookupEntry(id=str(result.inserted_id), name=entity.name, created_at=now, updated_at=now)

    def find_by_id(self, id: str) -> LookupEntry:
        if not ObjectId.is_valid(id):
            raise InvalidInputError(f"invalid {self.collection_name} id: {id}")
        try:
            doc = self._collection.find_one({"_id": ObjectId(id)})
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to find {self.collection_name}: {e}") from e
        if not doc:
            raise NotFoundError()
        return self._to_entry(doc)

    def find_by_name(self, name: str) -> Optional[LookupEntry]:
        try:
            doc = self._collection.find_one({self.name_field: name})
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to find {self.collection_name}: {e}") from e
        return self._to_entry(doc) if doc else None

    def find_all(self) -> List[LookupEntry]:
        try:
            docs = self._collection.find({}).sort(self.name_field, 1)
            return [self._to_entry(doc) for doc in docs]
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to query {self.collection_name}: {e}") from e


def brokerage_repository(db: Optional[Database] = None) -> MongoDBLookupRepository:
    return MongoDBLookupRepository(BROKERAGES_COLLECTION, "name", db)


def action_repository(db: Optional[Database] = None) -> MongoDBLookupRepository:
    return MongoDBLookupRepository(ACTIONS_COLLECTION, "name", db)


def rating_repository(db: Optional[Database] = None) -> MongoDBLookupRepository:
    return MongoDBLookupRepository(RATINGS_COLLECTION, "term", db)
