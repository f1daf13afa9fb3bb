"""외부 종목 등급 API 클라이언트 (next_page 커서 기반 페이지네이션)"""
import re
import time
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

import httpx

from stock_ratings.core.config import settings
from stock_ratings.core.exceptions import ExternalAPIError, OperationTimeoutError
from stock_ratings.domain.entities.stock import StockEvent
from stock_ratings.domain.repositories.stock_repository import IStockAPIClient

logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_event_time(value: Any) -> datetime:
    """ISO-8601 시간 문자열 변환 ("Z" 접미사 허용)"""
    if isinstance(value, datetime):
        return value
    if not value:
        raise ExternalAPIError("failed to decode response: missing time")
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # 나노초 단위 소수점은 마이크로초까지만 사용
    text = _FRACTION_RE.sub(r"\1", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ExternalAPIError(f"failed to decode response: invalid time {value!r}") from e


def item_to_stock_event(item: Dict[str, Any]) -> StockEvent:
    """API 응답 항목을 StockEvent로 변환"""
    return StockEvent(
        ticker=item.get("ticker", ""),
        company=item.get("company", ""),
        target_from=item.get("target_from") or "",
        target_to=item.get("target_to") or "",
        action=item.get("action") or "",
        brokerage=item.get("brokerage") or "",
        rating_from=item.get("rating_from") or "",
        rating_to=item.get("rating_to") or "",
        time=parse_event_time(item.get("time")),
    )


class StockAPIClient(IStockAPIClient):
    """외부 종목 등급 API와 통신하는 클래스"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url if base_url is not None else settings.STOCK_API_URL
        self.api_key = api_key if api_key is not None else settings.STOCK_API_KEY
        self.timeout = timeout if timeout is not None else settings.STOCK_API_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def fetch_page(self, next_page: str = "", client: Optional[httpx.Client] = None) -> Dict[str, Any]:
        """
        한 페이지를 조회합니다.

        Args:
            next_page: 이전 응답의 next_page 값 (첫 페이지는 빈 문자열)
            client: 재사용할 httpx 클라이언트 (없으면 새로 생성)

        Returns:
            {"items": [...], "next_page": "..."} 형태의 응답
        """
        params = {"next_page": next_page} if next_page else None

        if client is None:
            with self._client() as own_client:
                return self._get(own_client, params)
        return self._get(client, params)

    def _get(self, client: httpx.Client, params: Optional[Dict[str, str]]) -> Dict[str, Any]:
        try:
            response = client.get(self.base_url, params=params, headers=self._headers())
        except httpx.TimeoutException as e:
            raise OperationTimeoutError(f"external API request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalAPIError(f"external API error: {e}") from e

        if response.status_code != 200:
            raise ExternalAPIError(
                f"external API error: status {response.status_code}, body: {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalAPIError(f"failed to decode response: {e}") from e
        if not isinstance(payload, dict):
            raise ExternalAPIError("failed to decode response: unexpected payload")
        return payload

    def fetch_all_stocks(self, max_duration: Optional[float] = None) -> List[StockEvent]:
        """
        next_page가 빈 값이 될 때까지 모든 페이지를 조회합니다.

        Args:
            max_duration: 전체 수집 제한 시간(초), 초과하면 OperationTimeoutError
        """
        started = time.monotonic()
        events: List[StockEvent] = []
        next_page = ""
        pages = 0

        with self._client() as client:
            while True:
                if max_duration is not None and time.monotonic() - started > max_duration:
                    raise OperationTimeoutError("operation timeout while fetching stocks")

                payload = self.fetch_page(next_page, client=client)
                pages += 1
                for item in payload.get("items") or []:
                    events.append(item_to_stock_event(item))

                next_page = payload.get("next_page") or ""
                if not next_page:
                    break

        logger.debug(f"외부 API 수집 완료: {pages} 페이지, {len(events)}건")
        return events
