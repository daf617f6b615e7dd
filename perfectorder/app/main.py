"""FastAPI 애플리케이션 메인 파일 (헥사고날 아키텍처)"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from perfectorder.app.routes import health, credentials, orders, sync, egress
from perfectorder.adapters.markets.http import EgressConfig, build_http_client
from perfectorder.adapters.persistence.models import create_engine_and_sessionmaker, init_models
from perfectorder.shared.config import Settings, get_settings
from perfectorder.shared.logging import get_logger, mask_url_password

logger = get_logger(__name__)


# 라우터 등록
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """FastAPI 애플리케이션 생성"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """애플리케이션 생명주기 관리"""
        # 시작시 실행
        logger.info("PerfectOrder 주문 통합 관리 시스템 시작")

        engine, session_factory = create_engine_and_sessionmaker(
            settings.database_url, echo=settings.log_level == "DEBUG"
        )
        await init_models(engine)
        logger.info(f"데이터베이스 연결: {mask_url_password(settings.database_url)}")

        app.state.settings = settings
        app.state.session_factory = session_factory
        app.state.http_client = build_http_client(EgressConfig.from_settings(settings))
        app.state.sync_locks = {}

        yield

        # 종료시 실행
        await app.state.http_client.aclose()
        await engine.dispose()
        logger.info("PerfectOrder 주문 통합 관리 시스템 종료")

    app = FastAPI(
        title="PerfectOrder",
        description="네이버 스마트스토어 / 쿠팡 주문 통합 수집 및 관리 API",
        version="2.0.0",
        lifespan=lifespan
    )

    # CORS 미들웨어
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API 라우터 등록
    api_router = APIRouter(prefix="/api/v1")

    # 라우트 등록
    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(sync.router, prefix="/users/{user_id}", tags=["sync"])
    api_router.include_router(credentials.router, prefix="/users/{user_id}/credentials", tags=["credentials"])
    api_router.include_router(orders.router, prefix="/users/{user_id}/orders", tags=["orders"])
    api_router.include_router(egress.router, prefix="/egress", tags=["egress"])

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return {
            "message": "PerfectOrder API 서버",
            "docs": "/docs",
            "health": "/api/v1/health"
        }

    return app


# 애플리케이션 인스턴스
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "perfectorder.app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower()
    )
