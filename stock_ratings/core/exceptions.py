"""
공통 예외 정의 모듈

Repository/Client 계층에서 발생시키고, Use Case에서 로깅 후 전파하며,
API 라우트에서 HTTP 상태 코드로 변환합니다.
"""


class StockAPIError(Exception):
    """서비스 예외 기본 클래스"""
    default_message = "stock api error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class NotFoundError(StockAPIError):
    """요청한 리소스를 찾을 수 없음"""
    default_message = "resource not found"


class InvalidInputError(StockAPIError):
    """잘못된 입력값"""
    default_message = "invalid input"


class DuplicateEntryError(StockAPIError):
    """이미 존재하는 항목"""
    default_message = "duplicate entry"


class DatabaseConnectionError(StockAPIError):
    """데이터베이스 연결/쓰기 오류"""
    default_message = "database connection error"


class ExternalAPIError(StockAPIError):
    """외부 API 오류"""
    default_message = "external API error"


class OperationTimeoutError(StockAPIError):
    """작업 시간 초과"""
    default_message = "operation timeout"


class ConfigurationError(StockAPIError):
    """필수 설정 누락"""
    default_message = "invalid configuration"
