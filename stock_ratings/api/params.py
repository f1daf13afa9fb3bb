"""API 공통 파라미터/응답/예외 변환 유틸리티"""
from typing import Any, Dict, Optional

from fastapi import HTTPException

from stock_ratings.core.exceptions import (
    ExternalAPIError,
    InvalidInputError,
    NotFoundError,
    OperationTimeoutError,
    StockAPIError,
)


def parse_int_query(value: Optional[str], default: int) -> int:
    """정수 쿼리 파라미터 변환 (없거나 숫자가 아니면 기본값)"""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """{"success": true, "data": ..., "message": ...} 형태 응답 (None 필드 생략)"""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def to_http_exception(error: StockAPIError) -> HTTPException:
    """도메인 예외를 HTTP 예외로 변환"""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (ExternalAPIError, OperationTimeoutError)):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
