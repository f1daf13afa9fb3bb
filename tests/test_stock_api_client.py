import sys
import os
from datetime import datetime, timezone
import unittest

import httpx

# 프로젝트 루트 디렉토리를 path에 추가
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from stock_ratings.core.exceptions import ExternalAPIError, OperationTimeoutError
from stock_ratings.infrastructure.clients.stock_api_client import StockAPIClient, parse_event_time

API_URL = "https://api.example.com/swechallenge/list"


def make_item(ticker, time="2025-01-10T00:30:05.873393523Z"):
    return {
        "ticker": ticker,
        "target_from": "$4.20",
        "target_to": "$4.70",
        "company": f"{ticker} Corp",
        "action": "target raised by",
        "brokerage": "Wedbush",
        "rating_from": "Outperform",
        "rating_to": "Outperform",
        "time": time,
    }


class TestStockAPIClient(unittest.TestCase):
    def make_client(self, handler, **kwargs):
        return StockAPIClient(
            base_url=API_URL,
            api_key="secret",
            timeout=5.0,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    def test_fetch_all_follows_pagination(self):
        requests = []
        pages = {
            None: {"items": [make_item("AAPL"), make_item("MSFT")], "next_page": "MSFT"},
            "MSFT": {"items": [make_item("NVDA")], "next_page": ""},
        }

        def handler(request: httpx.Request):
            requests.append(request)
            return httpx.Response(200, json=pages[request.url.params.get("next_page")])

        events = self.make_client(handler).fetch_all_stocks()

        self.assertEqual([e.ticker for e in events], ["AAPL", "MSFT", "NVDA"])
        self.assertEqual(len(requests), 2)
        self.assertEqual(requests[0].headers["Authorization"], "Bearer secret")
        self.assertEqual(requests[0].headers["Content-Type"], "application/json")
        self.assertNotIn("next_page", requests[0].url.params)
        self.assertEqual(requests[1].url.params["next_page"], "MSFT")
        self.assertEqual(events[0].target_to, "$4.70")
        self.assertEqual(events[0].rating_from, "Outperform")

    def test_non_200_raises_external_api_error(self):
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        with self.assertRaises(ExternalAPIError) as ctx:
            self.make_client(handler).fetch_all_stocks()
        self.assertIn("status 500", str(ctx.exception))
        self.assertIn("upstream exploded", str(ctx.exception))

    def test_invalid_json_raises_external_api_error(self):
        def handler(request):
            return httpx.Response(200, text="not json")

        with self.assertRaises(ExternalAPIError):
            self.make_client(handler).fetch_page()

    def test_timeout_raises_operation_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with self.assertRaises(OperationTimeoutError):
            self.make_client(handler).fetch_all_stocks()

    def test_transport_error_raises_external_api_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(ExternalAPIError):
            self.make_client(handler).fetch_page()

    def test_max_duration_exceeded(self):
        def handler(request):
            return httpx.Response(200, json={"items": [], "next_page": "again"})

        with self.assertRaises(OperationTimeoutError):
            self.make_client(handler).fetch_all_stocks(max_duration=-1)


class TestParseEventTime(unittest.TestCase):
    def test_nanosecond_zulu_time(self):
        parsed = parse_event_time("2025-01-10T00:30:05.873393523Z")
        self.assertEqual(parsed, datetime(2025, 1, 10, 0, 30, 5, 873393, tzinfo=timezone.utc))

    def test_offset_time(self):
        parsed = parse_event_time("2025-01-10T09:30:00+09:00")
        self.assertEqual(parsed.astimezone(timezone.utc).hour, 0)

    def test_invalid_time(self):
        with self.assertRaises(ExternalAPIError):
            parse_event_time("yesterday")
        with self.assertRaises(ExternalAPIError):
            parse_event_time(None)


if __name__ == '__main__':
    unittest.main()
