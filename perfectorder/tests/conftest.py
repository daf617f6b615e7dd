"""테스트 공용 픽스처"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from perfectorder.adapters.persistence.clock_adapter import FixedClock
from perfectorder.core.entities.credential import (
    CoupangKeys, Credential, EsmLogin, Marketplace, NaverKeys
)
from perfectorder.core.entities.order import Order, OrderStatus
from perfectorder.core.ports.repo_port import CredentialRepositoryPort, OrderRepositoryPort

# 2024-05-20 10:30 KST
FIXED_NOW = datetime(2024, 5, 20, 1, 30, 0, tzinfo=timezone.utc)


class InMemoryCredentialRepository(CredentialRepositoryPort):
    """메모리 자격증명 저장소"""

    def __init__(self, credentials: Sequence[Credential] = ()):
        self.items: Dict[Tuple[str, str], Credential] = {(c.user_id, c.id): c for c in credentials}

    async def add(self, credential: Credential) -> None:
        self.items[(credential.user_id, credential.id)] = credential

    async def get(self, user_id: str, credential_id: str) -> Optional[Credential]:
        return self.items.get((user_id, credential_id))

    async def list_by_user(self, user_id: str, marketplace: Optional[Marketplace] = None) -> List[Credential]:
        return [
            c for (owner, _), c in self.items.items()
            if owner == user_id and (marketplace is None or c.marketplace == marketplace)
        ]

    async def list_active(self, user_id: str) -> List[Credential]:
        return [c for c in await self.list_by_user(user_id) if c.is_active]

    async def set_active(self, user_id: str, credential_id: str, is_active: bool) -> bool:
        credential = self.items.get((user_id, credential_id))
        if credential is None:
            return False
        credential.is_active = is_active
        return True

    async def delete(self, user_id: str, credential_id: str) -> bool:
        return self.items.pop((user_id, credential_id), None) is not None


class InMemoryOrderRepository(OrderRepositoryPort):
    """메모리 주문 저장소"""

    def __init__(self):
        self.items: Dict[Tuple[str, str], Order] = {}
        self.insert_calls = 0

    async def insert_new(self, user_id: str, orders: Sequence[Order]) -> List[Order]:
        self.insert_calls += 1
        inserted = []
        for order in orders:
            key = (user_id, order.id)
            if key not in self.items:
                self.items[key] = order
                inserted.append(order)
        return inserted

    async def get(self, user_id: str, order_id: str) -> Optional[Order]:
        return self.items.get((user_id, order_id))

    async def get_many(self, user_id: str, order_ids: Sequence[str]) -> List[Order]:
        return [self.items[(user_id, i)] for i in dict.fromkeys(order_ids) if (user_id, i) in self.items]

    async def list_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Order]:
        orders = [o for (owner, _), o in self.items.items() if owner == user_id]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        return orders[offset:offset + limit]

    async def save_all(self, orders: Sequence[Order]) -> None:
        for order in orders:
            self.items[(order.user_id, order.id)] = order


@pytest.fixture
def fixed_clock():
    """고정 시계 (2024-05-20 01:30 UTC)"""
    return FixedClock(FIXED_NOW)


@pytest.fixture
def coupang_credential():
    """쿠팡 자격증명 생성 함수"""
    def make(
        credential_id: str = "cred-coupang",
        user_id: str = "user-1",
        alias: str = "쿠팡 본점",
        vendor_id: str = "A00934559",
        access_key: str = "ak-coupang",
        secret_key: str = "b873secretkey",
        is_active: bool = True
    ) -> Credential:
        return Credential(
            id=credential_id,
            user_id=user_id,
            marketplace=Marketplace.COUPANG,
            alias=alias,
            secrets=CoupangKeys(vendor_id=vendor_id, access_key=access_key, secret_key=secret_key),
            is_active=is_active,
        )
    return make


@pytest.fixture
def naver_credential():
    """네이버 자격증명 생성 함수"""
    def make(
        credential_id: str = "cred-naver",
        user_id: str = "user-1",
        alias: str = "스마트스토어",
        client_id: str = "naver-client",
        client_secret: str = "naver-secret",
        is_active: bool = True
    ) -> Credential:
        return Credential(
            id=credential_id,
            user_id=user_id,
            marketplace=Marketplace.NAVER,
            alias=alias,
            secrets=NaverKeys(client_id=client_id, client_secret=client_secret),
            is_active=is_active,
        )
    return make


@pytest.fixture
def gmarket_credential():
    """지마켓 자격증명 (어댑터 없음)"""
    return Credential(
        id="cred-gmarket",
        user_id="user-1",
        marketplace=Marketplace.GMARKET,
        alias="지마켓",
        secrets=EsmLogin(username="seller", password="pw"),
    )


@pytest.fixture
def make_order():
    """주문 생성 함수"""
    def make(
        order_number: str = "1001",
        marketplace: Marketplace = Marketplace.COUPANG,
        user_id: str = "user-1",
        credential_id: str = "cred-coupang",
        status: OrderStatus = OrderStatus.NEW,
        **fields
    ) -> Order:
        return Order.from_vendor(
            marketplace,
            order_number,
            user_id=user_id,
            credential_id=credential_id,
            status=status,
            **fields
        )
    return make


@pytest.fixture
def credential_repo():
    return InMemoryCredentialRepository()


@pytest.fixture
def order_repo():
    return InMemoryOrderRepository()
