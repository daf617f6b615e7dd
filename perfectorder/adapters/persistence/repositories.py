"""리포지토리 구현체"""
from typing import List, Optional, Sequence
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError

from perfectorder.core.ports.repo_port import CredentialRepositoryPort, OrderRepositoryPort
from perfectorder.core.entities.credential import Credential, Marketplace, secrets_from_columns
from perfectorder.core.entities.order import Order, OrderStatus
from perfectorder.core.exceptions import CredentialConflict
from perfectorder.adapters.persistence.models import MarketCredential, OrderRecord
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite는 시간대를 버리므로 UTC로 복원"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """저장 전 UTC로 변환 (KST 등 다른 시간대 값 보정)"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


class SqlCredentialRepository(CredentialRepositoryPort):
    """자격증명 리포지토리 구현체"""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def add(self, credential: Credential) -> None:
        """자격증명 저장"""
        try:
            self.db_session.add(MarketCredential(
                id=credential.id,
                user_id=credential.user_id,
                market_type=credential.marketplace.value,
                account_name=credential.alias,
                is_active=credential.is_active,
                created_at=_to_utc(credential.created_at),
                **credential.secrets.to_columns()
            ))
            await self.db_session.commit()
            logger.info(f"자격증명 저장 완료: {credential.label()}")

        except IntegrityError as e:
            # 동시 등록으로 별칭 유니크 제약에 걸린 경우
            await self.db_session.rollback()
            logger.warning(f"자격증명 저장 충돌: {credential.label()}")
            raise CredentialConflict(f"이미 사용 중인 별칭입니다: {credential.alias}") from e
        except Exception as e:
            await self.db_session.rollback()
            logger.error(f"자격증명 저장 실패: {e}")
            raise

    async def get(self, user_id: str, credential_id: str) -> Optional[Credential]:
        """ID로 조회"""
        query = select(MarketCredential).where(
            MarketCredential.user_id == user_id,
            MarketCredential.id == credential_id
        )
        result = await self.db_session.execute(query)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_by_user(
        self,
        user_id: str,
        marketplace: Optional[Marketplace] = None
    ) -> List[Credential]:
        """사용자 자격증명 목록 (등록순)"""
        query = select(MarketCredential).where(MarketCredential.user_id == user_id)
        if marketplace is not None:
            query = query.where(MarketCredential.market_type == marketplace.value)
        query = query.order_by(MarketCredential.created_at, MarketCredential.id)

        result = await self.db_session.execute(query)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_active(self, user_id: str) -> List[Credential]:
        """동기화 대상 자격증명"""
        query = select(MarketCredential).where(
            MarketCredential.user_id == user_id,
            MarketCredential.is_active == True  # noqa: E712
        ).order_by(MarketCredential.created_at, MarketCredential.id)

        result = await self.db_session.execute(query)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def set_active(self, user_id: str, credential_id: str, is_active: bool) -> bool:
        """활성 상태 변경"""
        try:
            query = update(MarketCredential).where(
                MarketCredential.user_id == user_id,
                MarketCredential.id == credential_id
            ).values(is_active=is_active)
            result = await self.db_session.execute(query)
            await self.db_session.commit()
            return result.rowcount > 0

        except Exception as e:
            await self.db_session.rollback()
            logger.error(f"자격증명 상태 변경 실패: {e}")
            raise

    async def delete(self, user_id: str, credential_id: str) -> bool:
        """삭제 (수집된 주문은 남긴다)"""
        try:
            query = delete(MarketCredential).where(
                MarketCredential.user_id == user_id,
                MarketCredential.id == credential_id
            )
            result = await self.db_session.execute(query)
            await self.db_session.commit()
            return result.rowcount > 0

        except Exception as e:
            await self.db_session.rollback()
            logger.error(f"자격증명 삭제 실패: {e}")
            raise

    def _to_entity(self, model: MarketCredential) -> Credential:
        marketplace = Marketplace(model.market_type)
        return Credential(
            id=model.id,
            user_id=model.user_id,
            marketplace=marketplace,
            alias=model.account_name,
            secrets=secrets_from_columns(marketplace, model.vendor_id, model.access_key, model.secret_key),
            is_active=bool(model.is_active),
            created_at=_as_utc(model.created_at) or datetime.now(timezone.utc),
        )


class SqlOrderRepository(OrderRepositoryPort):
    """주문 리포지토리 구현체"""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def insert_new(self, user_id: str, orders: Sequence[Order]) -> List[Order]:
        """새 주문만 추가. 이미 있는 주문은 상태와 배송 정보를 포함해 그대로 둔다"""
        # 한 번의 수집 안에서 중복되면 먼저 나온 것만 사용
        unique = {}
        for order in orders:
            unique.setdefault(order.id, order)
        if not unique:
            return []

        try:
            query = select(OrderRecord.id).where(
                OrderRecord.user_id == user_id,
                OrderRecord.id.in_(list(unique))
            )
            result = await self.db_session.execute(query)
            existing = set(result.scalars().all())

            inserted = [order for order_id, order in unique.items() if order_id not in existing]
            for order in inserted:
                self.db_session.add(self._to_model(user_id, order))
            await self.db_session.commit()

            logger.info(f"주문 저장: 신규 {len(inserted)}건, 기존 {len(existing)}건 유지")
            return inserted

        except Exception as e:
            await self.db_session.rollback()
            logger.error(f"주문 저장 실패: {e}")
            raise

    async def get(self, user_id: str, order_id: str) -> Optional[Order]:
        """주문 조회"""
        model = await self.db_session.get(OrderRecord, (user_id, order_id))
        return self._to_entity(model) if model else None

    async def get_many(self, user_id: str, order_ids: Sequence[str]) -> List[Order]:
        """여러 주문 조회 (요청 순서 유지)"""
        if not order_ids:
            return []
        query = select(OrderRecord).where(
            OrderRecord.user_id == user_id,
            OrderRecord.id.in_(list(order_ids))
        )
        result = await self.db_session.execute(query)
        by_id = {model.id: self._to_entity(model) for model in result.scalars().all()}
        return [by_id[order_id] for order_id in dict.fromkeys(order_ids) if order_id in by_id]

    async def list_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Order]:
        """주문 목록 (주문일시 최신순)"""
        query = select(OrderRecord).where(OrderRecord.user_id == user_id)
        if status is not None:
            query = query.where(OrderRecord.status == status.value)
        query = query.order_by(
            OrderRecord.ordered_at.desc(), OrderRecord.created_at.desc(), OrderRecord.id
        ).limit(limit).offset(offset)

        result = await self.db_session.execute(query)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def save_all(self, orders: Sequence[Order]) -> None:
        """상태/배송 정보 변경 저장 (한 트랜잭션)"""
        try:
            for order in orders:
                query = update(OrderRecord).where(
                    OrderRecord.user_id == order.user_id,
                    OrderRecord.id == order.id
                ).values(
                    status=order.status.value,
                    courier=order.courier,
                    invoice_number=order.invoice_number,
                    updated_at=_to_utc(order.updated_at)
                )
                await self.db_session.execute(query)
            await self.db_session.commit()
            logger.info(f"주문 {len(orders)}건 변경 저장")

        except Exception as e:
            await self.db_session.rollback()
            logger.error(f"주문 변경 저장 실패: {e}")
            raise

    def _to_model(self, user_id: str, order: Order) -> OrderRecord:
        return OrderRecord(
            id=order.id,
            user_id=user_id,
            credential_id=order.credential_id,
            platform=order.marketplace.value,
            order_number=order.order_number,
            parent_order_number=order.parent_order_number,
            status=order.status.value,
            product_id=order.product_id,
            product_name=order.product_name,
            option=order.option,
            quantity=order.quantity,
            amount=order.amount,
            orderer_name=order.orderer_name,
            orderer_phone=order.orderer_phone,
            orderer_id=order.orderer_id,
            receiver_name=order.receiver_name,
            receiver_phone=order.receiver_phone,
            receiver_address=order.receiver_address,
            shipping_memo=order.shipping_memo,
            courier=order.courier,
            invoice_number=order.invoice_number,
            ordered_at=_to_utc(order.ordered_at),
            paid_at=_to_utc(order.paid_at),
            created_at=_to_utc(order.created_at),
            updated_at=_to_utc(order.updated_at),
        )

    def _to_entity(self, model: OrderRecord) -> Order:
        return Order(
            id=model.id,
            user_id=model.user_id,
            credential_id=model.credential_id,
            marketplace=Marketplace(model.platform),
            order_number=model.order_number,
            status=OrderStatus(model.status),
            parent_order_number=model.parent_order_number,
            product_id=model.product_id or "",
            product_name=model.product_name or "",
            option=model.option or "",
            quantity=model.quantity or 1,
            amount=model.amount or 0,
            orderer_name=model.orderer_name or "",
            orderer_phone=model.orderer_phone or "",
            orderer_id=model.orderer_id or "",
            receiver_name=model.receiver_name or "",
            receiver_phone=model.receiver_phone or "",
            receiver_address=model.receiver_address or "",
            shipping_memo=model.shipping_memo or "",
            courier=model.courier,
            invoice_number=model.invoice_number,
            ordered_at=_as_utc(model.ordered_at),
            paid_at=_as_utc(model.paid_at),
            created_at=_as_utc(model.created_at) or datetime.now(timezone.utc),
            updated_at=_as_utc(model.updated_at) or datetime.now(timezone.utc),
        )
