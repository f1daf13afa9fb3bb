"""로깅 설정"""
import json
import logging
from datetime import datetime, timezone

# LogRecord 기본 속성 (extra 필드 구분용)
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class SafeStreamHandler(logging.StreamHandler):
    """flush 실패 시 타임아웃 에러를 무시하는 안전한 StreamHandler"""
    def flush(self):
        try:
            super().flush()
        except (TimeoutError, OSError):
            # 로깅 실패를 무시 (무한 루프 방지)
            pass


class JsonFormatter(logging.Formatter):
    """한 줄 JSON 로그 포맷터 (extra 필드 포함)"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def parse_log_level(level: str) -> int:
    """문자열 로그 레벨을 변환 (알 수 없으면 INFO)"""
    value = logging.getLevelName(str(level or "").upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "info", fmt: str = "json") -> logging.Logger:
    """
    루트 로거를 설정합니다. 여러 번 호출해도 핸들러가 중복되지 않습니다.

    Args:
        level: 로그 레벨 문자열 (debug/info/warning/error)
        fmt: "json"이면 JSON 한 줄 포맷, 그 외에는 텍스트 포맷
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, SafeStreamHandler):
            root.removeHandler(handler)

    handler = SafeStreamHandler()
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(parse_log_level(level))

    # httpx의 INFO 레벨 로그 비활성화
    logging.getLogger('httpx').setLevel(logging.WARNING)
    return root
