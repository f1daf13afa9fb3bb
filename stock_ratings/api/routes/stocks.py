from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
import logging

from stock_ratings.api.params import parse_int_query, success_response, to_http_exception
from stock_ratings.application.dependencies import get_stock_use_case
from stock_ratings.application.use_cases.stock_use_case import StockUseCase
from stock_ratings.core.exceptions import StockAPIError
from stock_ratings.domain.entities.stock import StockFilter
from stock_ratings.schemas.stock import MetaData, PaginatedResponse, StockResponse

logger = logging.getLogger(__name__)

router = APIRouter()
ticker_router = APIRouter()


def _dump(event) -> dict:
    return StockResponse.from_entity(event).model_dump(mode="json", exclude_none=True)


@router.get("", summary="종목 이벤트 목록 조회", response_model=dict)
def get_stocks(
    ticker: Optional[str] = None,
    company: Optional[str] = None,
    brokerage: Optional[str] = None,
    action: Optional[str] = None,
    rating_from: Optional[str] = None,
    rating_to: Optional[str] = None,
    sortBy: str = "time",
    sortOrder: str = "desc",
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    use_case: StockUseCase = Depends(get_stock_use_case),
):
    """
    티커별 최신 이벤트를 조회합니다.

    - **ticker**: 티커 일치
    - **company** / **brokerage**: 부분 일치 (대소문자 무시)
    - **action** / **rating_from** / **rating_to**: 값 일치
    - **sortBy**: ticker, company, time, rating_to, action, brokerage, target_to (기본값: time)
    - **sortOrder**: asc, desc (기본값: desc)
    - **limit**: 페이지 크기 (기본값: 50, 최대 1000)
    - **offset**: 건너뛸 개수 (기본값: 0)
    """
    filter = StockFilter(
        ticker=ticker or "",
        company=company or "",
        brokerage=brokerage or "",
        action=action or "",
        rating_from=rating_from or "",
        rating_to=rating_to or "",
        sort_by=sortBy,
        sort_order=sortOrder,
        limit=parse_int_query(limit, 50),
        offset=max(parse_int_query(offset, 0), 0),
    )

    try:
        stocks = use_case.get_stocks(filter)
        total = use_case.get_stock_count(filter)
    except StockAPIError as e:
        logger.error(f"종목 목록 조회 중 오류 발생: {str(e)}")
        raise to_http_exception(e)

    response = PaginatedResponse(
        data=[StockResponse.from_entity(stock) for stock in stocks],
        meta=MetaData(total=total, limit=filter.limit, offset=filter.offset),
    )
    return response.model_dump(mode="json", exclude_none=True)


@router.post("/sync", summary="외부 API 종목 동기화", response_model=dict)
def sync_stocks(use_case: StockUseCase = Depends(get_stock_use_case)):
    """외부 API의 모든 페이지를 조회하여 저장합니다."""
    try:
        count = use_case.sync_stocks_from_api()
    except StockAPIError as e:
        logger.error(f"종목 동기화 중 오류 발생: {str(e)}")
        raise to_http_exception(e)

    return success_response(
        data={"synced_count": count},
        message="Stocks synced successfully",
    )


@router.get("/{id}", summary="종목 이벤트 단건 조회", response_model=dict)
def get_stock_by_id(id: str, use_case: StockUseCase = Depends(get_stock_use_case)):
    try:
        stock = use_case.get_stock_by_id(id)
    except StockAPIError as e:
        raise to_http_exception(e)
    return success_response(data=_dump(stock))


@ticker_router.get("/{ticker}", summary="티커 이력 조회", response_model=dict)
def get_stocks_by_ticker(ticker: str, use_case: StockUseCase = Depends(get_stock_use_case)):
    """티커의 모든 이벤트를 최신순으로 조회합니다."""
    if not ticker.strip():
        raise HTTPException(status_code=400, detail="invalid input")
    try:
        stocks = use_case.get_stocks_by_ticker(ticker)
    except StockAPIError as e:
        raise to_http_exception(e)
    return success_response(data=[_dump(stock) for stock in stocks])
