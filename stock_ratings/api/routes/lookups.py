"""증권사/액션/등급 조회 라우터 (읽기 전용)"""
from typing import Callable, Type
from fastapi import APIRouter, Depends
import logging

from stock_ratings.api.params import success_response, to_http_exception
from stock_ratings.application.dependencies import (
    get_action_use_case,
    get_brokerage_use_case,
    get_rating_use_case,
)
from stock_ratings.application.use_cases.lookup_use_case import LookupUseCase
from stock_ratings.core.exceptions import StockAPIError
from stock_ratings.schemas.stock import ActionResponse, BrokerageResponse, RatingResponse

logger = logging.getLogger(__name__)


def build_lookup_router(
    label: str,
    schema: Type,
    dependency: Callable[[], LookupUseCase],
) -> APIRouter:
    router = APIRouter()

    def dump(entry) -> dict:
        return schema.from_entity(entry).model_dump(mode="json", exclude_none=True)

    @router.get("", summary=f"{label} 목록 조회", response_model=dict)
    def list_entries(use_case: LookupUseCase = Depends(dependency)):
        try:
            entries = use_case.get_all()
        except StockAPIError as e:
            logger.error(f"{label} 목록 조회 중 오류 발생: {str(e)}")
            raise to_http_exception(e)
        return success_response(data=[dump(entry) for entry in entries])

    @router.get("/{id}", summary=f"{label} 단건 조회", response_model=dict)
    def get_entry(id: str, use_case: LookupUseCase = Depends(dependency)):
        try:
            entry = use_case.get_by_id(id)
        except StockAPIError as e:
            raise to_http_exception(e)
        return success_response(data=dump(entry))

    return router


brokerages_router = build_lookup_router("증권사", BrokerageResponse, get_brokerage_use_case)
actions_router = build_lookup_router("액션", ActionResponse, get_action_use_case)
ratings_router = build_lookup_router("등급", RatingResponse, get_rating_use_case)
