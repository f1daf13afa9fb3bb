"""Dependency Injection 설정"""
from stock_ratings.application.use_cases.lookup_use_case import LookupUseCase
from stock_ratings.application.use_cases.stock_use_case import StockUseCase
from stock_ratings.infrastructure.clients.stock_api_client import StockAPIClient
from stock_ratings.infrastructure.repositories.mongodb_lookup_repository import (
    action_repository,
    brokerage_repository,
    rating_repository,
)
from stock_ratings.infrastructure.repositories.mongodb_stock_repository import MongoDBStockRepository


def get_stock_use_case() -> StockUseCase:
    """
    Stock Use Case를 반환합니다.
    MongoDB Repository와 외부 API 클라이언트를 사용합니다.
    """
    return StockUseCase(
        repository=MongoDBStockRepository(),
        api_client=StockAPIClient(),
        brokerage_repository=brokerage_repository(),
        action_repository=action_repository(),
        rating_repository=rating_repository(),
    )


def get_brokerage_use_case() -> LookupUseCase:
    return LookupUseCase(brokerage_repository(), "증권사")


def get_action_use_case() -> LookupUseCase:
    return LookupUseCase(action_repository(), "액션")


def get_rating_use_case() -> LookupUseCase:
    return LookupUseCase(rating_repository(), "등급")
