"""SQLAlchemy 모델 (헥사고날 아키텍처)"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Index, PrimaryKeyConstraint, UniqueConstraint
from sqlalchemy.sql import func
from typing import Tuple

from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)


# 데이터베이스 모델 베이스
class Base(DeclarativeBase):
    pass


def create_engine_and_sessionmaker(database_url: str, echo: bool = False) -> Tuple[AsyncEngine, async_sessionmaker]:
    """비동기 엔진과 세션 팩토리 생성 (sqlite+aiosqlite, postgresql+asyncpg)"""
    engine = create_async_engine(database_url, echo=echo)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


async def init_models(engine: AsyncEngine) -> None:
    """테이블 생성 (없는 테이블만)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("데이터베이스 테이블 준비 완료")


# 마켓 자격증명 테이블
class MarketCredential(Base):
    __tablename__ = "market_credentials"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    market_type = Column(String, nullable=False)  # 'NAVER', 'COUPANG', '11ST', 'GMARKET', 'AUCTION'
    account_name = Column(String, nullable=False)

    # 마켓별 인증 정보 (매핑은 core.entities.credential 참고)
    vendor_id = Column(String, default="")
    access_key = Column(String, default="")
    secret_key = Column(String, default="")

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # 인덱스
    __table_args__ = (
        UniqueConstraint('user_id', 'market_type', 'account_name', name='uq_market_credentials_alias'),
        Index('ix_market_credentials_user_active', 'user_id', 'is_active'),
    )


# 주문 테이블
class OrderRecord(Base):
    __tablename__ = "orders"

    id = Column(String, nullable=False)  # 'C-123', 'N-456'
    user_id = Column(String, nullable=False)
    credential_id = Column(String, index=True, nullable=False)
    platform = Column(String, nullable=False)
    order_number = Column(String, nullable=False)
    parent_order_number = Column(String)
    status = Column(String, nullable=False, default="NEW")

    # 상품 정보
    product_id = Column(String, default="")
    product_name = Column(String, default="")
    option = Column(String, default="")
    quantity = Column(Integer, default=1)
    amount = Column(Integer, default=0)

    # 주문자 / 수취인
    orderer_name = Column(String, default="")
    orderer_phone = Column(String, default="")
    orderer_id = Column(String, default="")
    receiver_name = Column(String, default="")
    receiver_phone = Column(String, default="")
    receiver_address = Column(Text, default="")
    shipping_memo = Column(Text, default="")

    # 배송 정보
    courier = Column(String)
    invoice_number = Column(String)

    ordered_at = Column(DateTime(timezone=True))
    paid_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 인덱스
    __table_args__ = (
        PrimaryKeyConstraint('user_id', 'id', name='pk_orders'),
        UniqueConstraint('user_id', 'platform', 'order_number', name='uq_orders_vendor_number'),
        Index('ix_orders_user_status', 'user_id', 'status'),
        Index('ix_orders_user_ordered', 'user_id', 'ordered_at'),
    )
