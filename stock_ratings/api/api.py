from fastapi import APIRouter
from stock_ratings.api.routes.stocks import router as stocks_router, ticker_router
from stock_ratings.api.routes.recommendations import router as recommendations_router
from stock_ratings.api.routes.lookups import actions_router, brokerages_router, ratings_router

# 메인 API 라우터 생성 (/api/v1)
api_router = APIRouter(prefix="/api/v1")

# 모든 라우터 등록
api_router.include_router(stocks_router, prefix="/stocks", tags=["stocks"])
api_router.include_router(ticker_router, prefix="/stock", tags=["stocks"])
api_router.include_router(recommendations_router, prefix="/recommendations", tags=["recommendations"])
api_router.include_router(brokerages_router, prefix="/brokerages", tags=["brokerages"])
api_router.include_router(actions_router, prefix="/actions", tags=["actions"])
api_router.include_router(ratings_router, prefix="/ratings", tags=["ratings"])
