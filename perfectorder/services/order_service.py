"""주문 서비스 (헥사고날 아키텍처)"""
from typing import List, Optional, Sequence, Tuple

from perfectorder.core.ports.repo_port import OrderRepositoryPort
from perfectorder.core.entities.order import Order, OrderStatus
from perfectorder.core.exceptions import OrderNotFound, PerfectOrderError
from perfectorder.shared.result import Result, success, failure
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)

# (주문 ID, 택배사, 송장번호)
DispatchRequest = Tuple[str, Optional[str], Optional[str]]


class OrderService:
    """주문 서비스 파사드

    여러 주문을 한 번에 처리할 때는 모두 검증한 뒤에만 저장한다 (하나라도 실패하면 저장 안 함).
    """

    def __init__(self, repository: OrderRepositoryPort):
        self.repository = repository

    async def get_orders(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Result[List[Order]]:
        """주문 목록 조회"""
        try:
            return success(await self.repository.list_by_user(user_id, status, limit, offset))
        except Exception as e:
            logger.error(f"주문 목록 조회 실패: {e}")
            return failure(e)

    async def confirm_orders(self, user_id: str, order_ids: Sequence[str]) -> Result[List[Order]]:
        """발주 확인 (NEW -> PENDING)"""
        try:
            orders = await self._load(user_id, order_ids)
            for order in orders:
                order.confirm()
            await self.repository.save_all(orders)
            logger.info(f"[{user_id}] 발주 확인 {len(orders)}건")
            return success(orders)

        except PerfectOrderError as e:
            logger.warning(f"발주 확인 거절: {e}")
            return failure(e)
        except Exception as e:
            logger.error(f"발주 확인 실패: {e}")
            return failure(e)

    async def dispatch_orders(self, user_id: str, requests: Sequence[DispatchRequest]) -> Result[List[Order]]:
        """송장 전송 (PENDING -> SHIPPING). 요청에 택배사/송장번호가 있으면 먼저 반영"""
        try:
            # 같은 주문이 여러 번 오면 마지막 배송 정보만 사용
            shipping = {order_id: (courier, invoice_number) for order_id, courier, invoice_number in requests}
            orders = await self._load(user_id, list(shipping))
            by_id = {order.id: order for order in orders}
            for order_id, (courier, invoice_number) in shipping.items():
                order = by_id[order_id]
                if courier is not None or invoice_number is not None:
                    order.update_shipping(courier, invoice_number)
                order.dispatch()
            await self.repository.save_all(orders)
            logger.info(f"[{user_id}] 송장 전송 {len(orders)}건")
            return success(orders)

        except PerfectOrderError as e:
            logger.warning(f"송장 전송 거절: {e}")
            return failure(e)
        except Exception as e:
            logger.error(f"송장 전송 실패: {e}")
            return failure(e)

    async def update_shipping(
        self,
        user_id: str,
        order_id: str,
        courier: Optional[str] = None,
        invoice_number: Optional[str] = None
    ) -> Result[Order]:
        """택배사/송장번호 입력 (상태는 바꾸지 않음)"""
        try:
            order = await self.repository.get(user_id, order_id)
            if order is None:
                raise OrderNotFound(f"주문을 찾을 수 없습니다: {order_id}")
            order.update_shipping(courier, invoice_number)
            await self.repository.save_all([order])
            return success(order)

        except PerfectOrderError as e:
            return failure(e)
        except Exception as e:
            logger.error(f"배송 정보 저장 실패: {e}")
            return failure(e)

    async def _load(self, user_id: str, order_ids: Sequence[str]) -> List[Order]:
        orders = await self.repository.get_many(user_id, order_ids)
        found = {order.id for order in orders}
        missing = [order_id for order_id in order_ids if order_id not in found]
        if missing:
            raise OrderNotFound(f"주문을 찾을 수 없습니다: {', '.join(missing)}")
        return orders
