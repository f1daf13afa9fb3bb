from fastapi import APIRouter, Depends
from typing import Optional
import logging

from stock_ratings.api.params import parse_int_query, success_response, to_http_exception
from stock_ratings.application.dependencies import get_stock_use_case
from stock_ratings.application.use_cases.stock_use_case import StockUseCase
from stock_ratings.core.exceptions import StockAPIError
from stock_ratings.schemas.stock import RecommendationResponse

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_RECOMMENDATION_LIMIT = 10
MAX_RECOMMENDATION_LIMIT = 50


def normalize_limit(raw: Optional[str]) -> int:
    """limit 파라미터 정규화 (숫자가 아니거나 1 미만이면 10, 최대 50)"""
    limit = parse_int_query(raw, DEFAULT_RECOMMENDATION_LIMIT)
    if limit > MAX_RECOMMENDATION_LIMIT:
        limit = MAX_RECOMMENDATION_LIMIT
    if limit < 1:
        limit = DEFAULT_RECOMMENDATION_LIMIT
    return limit


@router.get("", summary="종목 추천 조회", response_model=dict)
def get_recommendations(
    limit: Optional[str] = None,
    use_case: StockUseCase = Depends(get_stock_use_case),
):
    """
    최근 등급/액션/목표가 변화를 점수화하여 상위 종목을 추천합니다.

    - **limit**: 추천 개수 (기본값: 10, 최대 50)
    """
    try:
        recommendations = use_case.get_recommendations(normalize_limit(limit))
    except StockAPIError as e:
        logger.error(f"종목 추천 생성 중 오류 발생: {str(e)}")
        raise to_http_exception(e)

    data = [
        RecommendationResponse.from_entity(r).model_dump(mode="json", exclude_none=True)
        for r in recommendations
    ]
    return success_response(
        data=data,
        message=(
            f"Top {len(data)} stock recommendations based on recent ratings, "
            "actions, and target prices"
        ),
    )
