"""주문 동기화 유즈케이스

사용자의 활성 자격증명마다 마켓 주문을 동시에 수집하고, 사용자 단위 잠금 안에서
새 주문만 저장한다. 이미 저장된 주문(상태, 택배사, 송장번호)은 건드리지 않는다.
"""
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import asyncio

from perfectorder.core.ports.market_port import MarketPort
from perfectorder.core.ports.repo_port import CredentialRepositoryPort, OrderRepositoryPort
from perfectorder.core.entities.credential import Credential, Marketplace
from perfectorder.core.entities.order import Order
from perfectorder.core.entities.sync_result import SyncResult
from perfectorder.core.exceptions import AdapterError
from perfectorder.shared.logging import get_logger, log_order_sync

logger = get_logger(__name__)


def user_lock(user_id: str, locks: Dict[str, asyncio.Lock]) -> asyncio.Lock:
    """사용자별 잠금 반환"""
    lock = locks.get(user_id)
    if lock is None:
        lock = locks[user_id] = asyncio.Lock()
    return lock


class SyncOrdersUseCase:
    """주문 동기화 유즈케이스"""

    def __init__(
        self,
        credential_repo: CredentialRepositoryPort,
        order_repo: OrderRepositoryPort,
        adapters: Mapping[Marketplace, MarketPort],
        max_concurrency: int = 4,
        locks: Optional[Dict[str, asyncio.Lock]] = None
    ):
        self.credential_repo = credential_repo
        self.order_repo = order_repo
        self.adapters = dict(adapters)
        self.max_concurrency = max_concurrency
        # 앱에서는 app.state의 잠금 맵을 공유한다
        self.locks = {} if locks is None else locks

    async def sync_all(self, user_id: str) -> SyncResult:
        """활성 자격증명 전체 동기화. 저장소 오류는 그대로 전파"""
        result = SyncResult()

        credentials = await self.credential_repo.list_active(user_id)
        if not credentials:
            logger.info(f"[{user_id}] 활성 자격증명 없음, 동기화 생략")
            return result

        targets: List[Credential] = []
        for credential in credentials:
            if credential.marketplace in self.adapters:
                targets.append(credential)
            else:
                result.skipped.append(credential.id)
                log_order_sync(logger, "skipped", credential.id, {"marketplace": credential.marketplace.value})

        # 1) 수집: 자격증명별 병렬, 실패는 자격증명 단위로 기록
        semaphore = asyncio.Semaphore(self.max_concurrency)
        fetched = await asyncio.gather(*[
            self._fetch(credential, semaphore) for credential in targets
        ])

        batches: List[Tuple[Credential, Sequence[Order]]] = []
        for credential, (orders, error) in zip(targets, fetched):
            if error is not None:
                result.add_failure(credential, error)
                continue
            result.fetched_count += len(orders)
            batches.append((credential, orders))

        # 2) 병합: 사용자 잠금 안에서 순차 처리
        async with user_lock(user_id, self.locks):
            for credential, orders in batches:
                inserted = await self.order_repo.insert_new(user_id, orders)
                result.inserted_count += len(inserted)
                log_order_sync(logger, "merged", credential.id, {
                    "fetched": len(orders),
                    "inserted": len(inserted),
                })

        logger.info(
            f"[{user_id}] 동기화 완료: 수집 {result.fetched_count}건, 신규 {result.inserted_count}건, "
            f"실패 {result.failure_count}건, 건너뜀 {len(result.skipped)}건"
        )
        return result

    async def _fetch(
        self,
        credential: Credential,
        semaphore: asyncio.Semaphore
    ) -> Tuple[List[Order], Optional[Exception]]:
        """자격증명 1건 수집. 예외는 값으로 돌려준다"""
        adapter = self.adapters[credential.marketplace]
        async with semaphore:
            try:
                orders = await adapter.fetch_orders(credential)
            except AdapterError as e:
                logger.warning(f"{credential.label()} 수집 실패 ({e.kind.value}): {e.message}")
                return [], e
            except Exception as e:
                logger.error(f"{credential.label()} 수집 중 예상치 못한 오류: {e}", exc_info=True)
                return [], e

        # 다른 사용자/자격증명 값이 섞이지 않도록 소유 정보 고정
        for order in orders:
            order.user_id = credential.user_id
            order.credential_id = credential.id
        log_order_sync(logger, "fetched", credential.id, {"count": len(orders)})
        return orders, None
