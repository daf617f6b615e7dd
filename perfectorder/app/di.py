"""의존성 주입 설정

엔진, 세션 팩토리, 공유 httpx 클라이언트는 앱 생명주기(main.lifespan)에서 만들어
app.state에 보관하고, 요청마다 여기서 꺼내 조립한다.
"""
import asyncio
from typing import AsyncGenerator, Dict, Mapping
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
import httpx

from perfectorder.core.entities.credential import Marketplace
from perfectorder.core.ports.market_port import MarketPort
from perfectorder.core.ports.repo_port import CredentialRepositoryPort, OrderRepositoryPort
from perfectorder.core.ports.clock_port import ClockPort
from perfectorder.core.usecases.sync_orders import SyncOrdersUseCase
from perfectorder.services.credential_service import CredentialService
from perfectorder.services.order_service import OrderService
from perfectorder.shared.config import Settings, get_settings
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)


# 데이터베이스 의존성
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """데이터베이스 세션 제공"""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_app_settings(request: Request) -> Settings:
    """앱 생성 시 넘긴 설정 (없으면 전역 설정)"""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_http_client(request: Request) -> httpx.AsyncClient:
    """앱 전체가 공유하는 외부 호출용 클라이언트"""
    return request.app.state.http_client


def get_sync_locks(request: Request) -> Dict[str, asyncio.Lock]:
    return request.app.state.sync_locks


def get_clock() -> ClockPort:
    """클록 포트 구현체"""
    from perfectorder.adapters.persistence.clock_adapter import ClockAdapter
    return ClockAdapter()


# 포트 구현체
def get_credential_repository(session: AsyncSession = Depends(get_db)) -> CredentialRepositoryPort:
    """자격증명 저장소"""
    from perfectorder.adapters.persistence.repositories import SqlCredentialRepository
    return SqlCredentialRepository(db_session=session)


def get_order_repository(session: AsyncSession = Depends(get_db)) -> OrderRepositoryPort:
    """주문 저장소"""
    from perfectorder.adapters.persistence.repositories import SqlOrderRepository
    return SqlOrderRepository(db_session=session)


def get_market_adapters(
    client: httpx.AsyncClient = Depends(get_http_client),
    clock: ClockPort = Depends(get_clock),
    settings: Settings = Depends(get_app_settings)
) -> Mapping[Marketplace, MarketPort]:
    """마켓 포트 구현체 (어댑터가 없는 마켓은 동기화에서 건너뜀)"""
    from perfectorder.adapters.markets.coupang_adapter import CoupangAdapter
    from perfectorder.adapters.markets.naver_adapter import NaverAdapter
    return {
        Marketplace.COUPANG: CoupangAdapter(
            client=client,
            clock=clock,
            base_url=settings.coupang_api_url,
            window_days=settings.coupang_window_days,
            max_pages=settings.coupang_max_pages
        ),
        Marketplace.NAVER: NaverAdapter(
            client=client,
            clock=clock,
            base_url=settings.naver_api_url,
            lookback_hours=settings.naver_lookback_hours,
            batch_size=settings.naver_detail_batch_size,
            max_list_pages=settings.naver_max_list_pages
        ),
    }


# 유즈케이스 팩토리
def get_sync_orders_usecase(
    credential_repo: CredentialRepositoryPort = Depends(get_credential_repository),
    order_repo: OrderRepositoryPort = Depends(get_order_repository),
    adapters: Mapping[Marketplace, MarketPort] = Depends(get_market_adapters),
    locks: Dict[str, asyncio.Lock] = Depends(get_sync_locks),
    settings: Settings = Depends(get_app_settings)
) -> SyncOrdersUseCase:
    """주문 동기화 유즈케이스"""
    return SyncOrdersUseCase(
        credential_repo=credential_repo,
        order_repo=order_repo,
        adapters=adapters,
        max_concurrency=settings.sync_max_concurrency,
        locks=locks
    )


def get_credential_service(
    repository: CredentialRepositoryPort = Depends(get_credential_repository)
) -> CredentialService:
    """자격증명 서비스 파사드"""
    return CredentialService(repository=repository)


def get_order_service(
    repository: OrderRepositoryPort = Depends(get_order_repository)
) -> OrderService:
    """주문 서비스 파사드"""
    return OrderService(repository=repository)
