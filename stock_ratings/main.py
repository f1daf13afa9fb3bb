from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import asyncio
from contextlib import asynccontextmanager
import logging

from stock_ratings.api.api import api_router
from stock_ratings.api.params import to_http_exception
from stock_ratings.core.config import settings
from stock_ratings.core.exceptions import StockAPIError
from stock_ratings.core.logging_config import setup_logging
from stock_ratings.infrastructure.database.mongodb_client import (
    close_mongodb_connections,
    get_mongodb_database,
    init_schema,
)

logger = logging.getLogger('main')


def _run_startup_sync() -> int:
    from stock_ratings.application.dependencies import get_stock_use_case
    return get_stock_use_case().sync_stocks_from_api()


async def startup():
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    settings.validate_required()
    logger.info("Stock Ratings API 시작", extra={"env": settings.ENV, "port": settings.SERVER_PORT})

    db = get_mongodb_database()
    if db is None:
        logger.warning("MongoDB에 연결할 수 없어 인덱스 초기화를 건너뜁니다.")
    else:
        init_schema(db)

    # 시작 시 외부 API 동기화 실행 (옵션으로 제어)
    if settings.RUN_SYNC_ON_STARTUP:
        logger.info("서비스 시작 시 종목 동기화를 즉시 실행합니다...")
        try:
            count = await asyncio.to_thread(_run_startup_sync)
            logger.info(f"초기 종목 동기화가 완료되었습니다. ({count}건)")
        except StockAPIError as e:
            logger.error(f"초기 종목 동기화 중 오류 발생 (앱은 계속 실행됩니다): {str(e)}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    yield
    close_mongodb_connections()
    logger.info("Stock Ratings API 종료")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API 라우터 등록 (중앙 관리 방식)
app.include_router(api_router)


@app.exception_handler(StockAPIError)
async def stock_api_error_handler(request: Request, exc: StockAPIError):
    """라우트 밖(의존성 생성 등)에서 발생한 도메인 예외 처리"""
    http_exc = to_http_exception(exc)
    logger.error(f"요청 처리 중 오류 발생: {request.url.path} - {exc}")
    return JSONResponse(status_code=http_exc.status_code, content={"success": False, "error": str(exc)})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})


@app.get("/health", tags=["system"])
def health_check():
    return {"success": True, "message": "Service is healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "stock_ratings.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_development,
        access_log=False,
    )
