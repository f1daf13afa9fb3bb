"""MongoDB를 사용한 Stock Repository 구현"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import BulkWriteError, PyMongoError

from stock_ratings.core.exceptions import (
    DatabaseConnectionError,
    InvalidInputError,
    NotFoundError,
)
from stock_ratings.domain.entities.stock import StockEvent, StockFilter
from stock_ratings.domain.repositories.stock_repository import IStockRepository
from stock_ratings.infrastructure.database.mongodb_client import (
    STOCKS_COLLECTION,
    get_mongodb_database,
)

logger = logging.getLogger(__name__)

BATCH_CHUNK_SIZE = 100
DUPLICATE_KEY_CODE = 11000

# 정렬 가능 필드 (API 파라미터 -> 문서 필드)
SORT_FIELDS = {
    "ticker": "ticker",
    "company": "company",
    "time": "time",
    "rating_to": "rating_to",
    "rating_to_term": "rating_to",
    "action": "action",
    "action_name": "action",
    "brokerage": "brokerage",
    "brokerage_name": "brokerage",
    "target_to": "target_to",
}
DEFAULT_SORT_FIELD = "time"

_REF_FIELDS = ("action_id", "brokerage_id", "rating_from_id", "rating_to_id")


def _object_id_or_none(value: Optional[str]) -> Optional[ObjectId]:
    if value and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _to_document(event: StockEvent, now: datetime) -> Dict[str, Any]:
    doc = {
        "ticker": event.ticker,
        "company": event.company,
        "target_from": event.target_from,
        "target_to": event.target_to,
        "action": event.action,
        "brokerage": event.brokerage,
        "rating_from": event.rating_from,
        "rating_to": event.rating_to,
        "time": event.time,
        "created_at": now,
        "updated_at": now,
    }
    for ref in _REF_FIELDS:
        doc[ref] = _object_id_or_none(getattr(event, ref))
    return doc


def _to_stock_event(doc: Dict[str, Any]) -> StockEvent:
    refs = {ref: str(doc[ref]) if doc.get(ref) else None for ref in _REF_FIELDS}
    return StockEvent(
        id=str(doc["_id"]),
        ticker=doc["ticker"],
        company=doc.get("company", ""),
        target_from=doc.get("target_from") or "",
        target_to=doc.get("target_to") or "",
        action=doc.get("action") or "",
        brokerage=doc.get("brokerage") or "",
        rating_from=doc.get("rating_from") or "",
        rating_to=doc.get("rating_to") or "",
        time=doc["time"],
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
        **refs,
    )


def build_match(filter: StockFilter) -> Dict[str, Any]:
    """필터 조건을 MongoDB $match 조건으로 변환"""
    match: Dict[str, Any] = {}
    if filter.ticker:
        match["ticker"] = filter.ticker
    if filter.company:
        match["company"] = {"$regex": re.escape(filter.company), "$options": "i"}
    if filter.brokerage:
        match["brokerage"] = {"$regex": re.escape(filter.brokerage), "$options": "i"}
    if filter.action:
        match["action"] = filter.action
    if filter.rating_from:
        match["rating_from"] = filter.rating_from
    if filter.rating_to:
        match["rating_to"] = filter.rating_to
    return match


def latest_per_ticker_pipeline(filter: StockFilter) -> List[Dict[str, Any]]:
    """티커별 최신 이벤트만 남기는 집계 파이프라인 (필터 포함)"""
    pipeline: List[Dict[str, Any]] = [
        {"$sort": {"ticker": 1, "time": -1}},
        {"$group": {"_id": "$ticker", "doc": {"$first": "$$ROOT"}}},
        {"$replaceRoot": {"newRoot": "$doc"}},
    ]
    match = build_match(filter)
    if match:
        pipeline.append({"$match": match})
    return pipeline


class MongoDBStockRepository(IStockRepository):
    """MongoDB를 사용한 Stock Repository 구현"""

    def __init__(self, db: Optional[Database] = None):
        self._db = db if db is not None else get_mongodb_database()
        if self._db is None:
            raise DatabaseConnectionError("MongoDB 클라이언트를 초기화할 수 없습니다.")
        self._collection = self._db[STOCKS_COLLECTION]

    def create_batch(self, events: List[StockEvent]) -> int:
        """
        이벤트를 100건 단위로 나누어 저장합니다.
        (ticker, company, time)이 같은 이벤트는 이미 있으면 건너뜁니다.
        """
        if not events:
            return 0

        inserted = 0
        for start in range(0, len(events), BATCH_CHUNK_SIZE):
            chunk = events[start:start + BATCH_CHUNK_SIZE]
            inserted += self._insert_chunk(chunk)
        return inserted

    def _insert_chunk(self, chunk: List[StockEvent]) -> int:
        now = datetime.utcnow()
        docs = [_to_document(event, now) for event in chunk]
        try:
            result = self._collection.insert_many(docs, ordered=False)
            return len(result.inserted_ids)
        except BulkWriteError as e:
            details = e.details or {}
            errors = [
                err for err in details.get("writeErrors", [])
                if err.get("code") != DUPLICATE_KEY_CODE
            ]
            if errors:
                logger.error(f"이벤트 일괄 저장 중 오류 발생: {errors[0].get('errmsg')}")
                raise DatabaseConnectionError(
                    f"failed to insert batch chunk: {errors[0].get('errmsg')}"
                ) from e
            return details.get("nInserted", 0)
        except PyMongoError as e:
            logger.error(f"이벤트 일괄 저장 중 오류 발생: {e}")
            raise DatabaseConnectionError(f"failed to insert batch chunk: {e}") from e

    def find_by_id(self, id: str) -> StockEvent:
        if not ObjectId.is_valid(id):
            raise InvalidInputError(f"invalid stock id: {id}")
        try:
            doc = self._collection.find_one({"_id": ObjectId(id)})
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to find stock: {e}") from e
        if not doc:
            raise NotFoundError()
        return _to_stock_event(doc)

    def find_all(self, filter: StockFilter) -> List[StockEvent]:
        pipeline = latest_per_ticker_pipeline(filter)

        sort_field = SORT_FIELDS.get(filter.sort_by, DEFAULT_SORT_FIELD)
        direction = 1 if (filter.sort_order or "").lower() == "asc" else -1
        pipeline.append({"$sort": {sort_field: direction, "_id": 1}})

        if filter.offset > 0:
            pipeline.append({"$skip": filter.offset})
        if filter.limit > 0:
            pipeline.append({"$limit": filter.limit})

        try:
            docs = self._collection.aggregate(pipeline, allowDiskUse=True)
            return [_to_stock_event(doc) for doc in docs]
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to query stocks: {e}") from e

    def find_by_ticker(self, ticker: str) -> List[StockEvent]:
        try:
            docs = self._collection.find({"ticker": ticker}).sort("time", -1)
            events = [_to_stock_event(doc) for doc in docs]
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to query stocks by ticker: {e}") from e
        if not events:
            raise NotFoundError()
        return events

    def count(self, filter: StockFilter) -> int:
        pipeline = latest_per_ticker_pipeline(filter)
        pipeline.append({"$count": "total"})
        try:
            result = list(self._collection.aggregate(pipeline, allowDiskUse=True))
        except PyMongoError as e:
            raise DatabaseConnectionError(f"failed to count stocks: {e}") from e
        return result[0]["total"] if result else 0
