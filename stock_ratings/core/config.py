from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional
from dotenv import load_dotenv

from stock_ratings.core.exceptions import ConfigurationError

# .env 파일이 있으면 환경 변수로 먼저 로드 (없어도 실패하지 않음)
load_dotenv()


def _parse_bool(v) -> bool:
    """빈 문자열/None은 False, 문자열은 true/1/yes/on 여부로 변환"""
    if v == '' or v is None:
        return False
    if isinstance(v, str):
        return v.lower() in ('true', '1', 'yes', 'on')
    return bool(v)


class Settings(BaseSettings):
    PROJECT_NAME: str = "Stock Ratings API"
    PROJECT_DESCRIPTION: str = "애널리스트 종목 등급 변경 이벤트 조회 및 추천 API"
    PROJECT_VERSION: str = "1.0.0"

    # 서버 설정
    SERVER_HOST: str = Field(default="0.0.0.0", description="서버 바인딩 호스트")
    SERVER_PORT: int = Field(default=8080, description="서버 포트")
    ENV: str = Field(default="development", description="실행 환경 (development/production)")
    DEBUG: bool = Field(default=False, description="디버그 모드 활성화 여부")

    CORS_ORIGINS: List[str] = ["*"]

    # MongoDB 설정
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB 연결 URL"
    )
    MONGODB_DATABASE: str = Field(default="stock_data", description="MongoDB 데이터베이스명")
    MONGODB_USER: Optional[str] = Field(default=None, description="MongoDB 사용자")
    MONGODB_PASSWORD: Optional[str] = Field(default=None, description="MongoDB 비밀번호")
    MONGODB_ENABLED: bool = Field(default=True, description="MongoDB 사용 여부")
    MONGODB_TIMEOUT_MS: int = Field(default=5000, description="MongoDB 연결/서버 선택 타임아웃 (ms)")

    # 외부 종목 등급 API 설정
    STOCK_API_URL: str = Field(default="", description="외부 종목 등급 API URL")
    STOCK_API_KEY: str = Field(default="", description="외부 종목 등급 API 키 (Bearer)")
    STOCK_API_TIMEOUT: float = Field(default=30.0, description="외부 API 요청 타임아웃 (초)")

    # 로깅 설정
    LOG_LEVEL: str = Field(default="info", description="로그 레벨 (debug/info/warning/error)")
    LOG_FORMAT: str = Field(default="json", description="로그 포맷 (json/text)")

    # 서버 시작 시 외부 API 동기화 실행 여부
    RUN_SYNC_ON_STARTUP: bool = Field(
        default=False,
        description="서버 시작 시 외부 API 동기화 실행 여부 (.env에서 RUN_SYNC_ON_STARTUP=true/false로 설정 가능)"
    )

    @field_validator('DEBUG', 'MONGODB_ENABLED', 'RUN_SYNC_ON_STARTUP', mode='before')
    @classmethod
    def parse_bool_fields(cls, v):
        """빈 문자열을 False로 변환"""
        return _parse_bool(v)

    @field_validator('LOG_FORMAT', mode='before')
    @classmethod
    def parse_log_format(cls, v):
        if v is None or v == '':
            return "json"
        return str(v).lower()

    def validate_required(self) -> None:
        """필수 설정값 검증 (서버 시작 시 호출)"""
        if not self.STOCK_API_KEY:
            raise ConfigurationError("STOCK_API_KEY is required")
        if not self.MONGODB_DATABASE:
            raise ConfigurationError("MONGODB_DATABASE is required")

    def get_mongodb_url(self) -> str:
        return self.MONGODB_URL

    def get_mongodb_user(self) -> Optional[str]:
        return self.MONGODB_USER

    def get_mongodb_password(self) -> Optional[str]:
        return self.MONGODB_PASSWORD

    def get_mongodb_database(self) -> str:
        return self.MONGODB_DATABASE

    def is_mongodb_enabled(self) -> bool:
        return self.MONGODB_ENABLED

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

# 싱글톤 설정 객체 생성
settings = Settings()
