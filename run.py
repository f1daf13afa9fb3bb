import uvicorn
from stock_ratings.core.config import settings

if __name__ == "__main__":
    # 개발 환경(ENV=development)일 때만 reload 활성화
    reload_mode = settings.is_development

    uvicorn.run(
        "stock_ratings.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=reload_mode,
        reload_dirs=["stock_ratings"] if reload_mode else None,  # 패키지 디렉토리만 감시
        access_log=False
    )
