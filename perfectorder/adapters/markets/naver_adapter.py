"""네이버 스마트스토어 마켓 어댑터 (커머스 API)

1) 토큰 발급 -> 2) 변경 상품주문 ID 목록 -> 3) 상품주문 상세 일괄 조회
"""
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

import httpx

from perfectorder.adapters.auth.naver_token import NaverTokenProvider, TokenInfo
from perfectorder.adapters.markets.http import parse_json, raise_for_vendor_status, send
from perfectorder.adapters.markets.normalize import join_address, parse_vendor_datetime, text, to_int
from perfectorder.core.entities.credential import Credential, Marketplace, NaverKeys
from perfectorder.core.entities.order import Order, OrderStatus
from perfectorder.core.exceptions import MappingError, MissingCredential
from perfectorder.core.ports.clock_port import KST, ClockPort
from perfectorder.core.ports.market_port import DateRange, MarketPort
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)

LAST_CHANGED_PATH = "/v1/pay-order/seller/product-orders/last-changed-statuses"
DETAIL_QUERY_PATH = "/v1/pay-order/seller/product-orders/query"

# 네이버 상품주문 상태 -> 정규화 주문 상태
NAVER_VENDOR_STATUS = {
    "PAYMENT_WAITING": OrderStatus.NEW,
    "PAYED": OrderStatus.NEW,
    "PRODUCT_PREPARE": OrderStatus.PENDING,
    "DELIVERING": OrderStatus.SHIPPING,
    "DELIVERY": OrderStatus.SHIPPING,
    "DELIVERED": OrderStatus.DELIVERED,
    "PURCHASE_DECIDED": OrderStatus.DELIVERED,
    "CANCELED": OrderStatus.CANCELLED,
    "CANCEL_REQUESTED": OrderStatus.CANCELLED,
    "CANCELED_BY_NOPAYMENT": OrderStatus.CANCELLED,
    "RETURNED": OrderStatus.RETURNED,
    "RETURN_REQUESTED": OrderStatus.RETURNED,
    "EXCHANGED": OrderStatus.RETURNED,
    "EXCHANGE_REQUESTED": OrderStatus.RETURNED,
}


def format_kst_iso(moment: datetime) -> str:
    """네이버 일시 파라미터 형식: 2024-05-20T10:30:00.000+09:00"""
    local = moment.astimezone(KST)
    return local.strftime("%Y-%m-%dT%H:%M:%S.") + f"{local.microsecond // 1000:03d}+09:00"


def chunked(items: List[str], size: int) -> List[List[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class NaverAdapter(MarketPort):
    """네이버 커머스 API 어댑터"""

    marketplace = Marketplace.NAVER

    def __init__(
        self,
        client: httpx.AsyncClient,
        clock: ClockPort,
        base_url: str = "https://api.commerce.naver.com/external",
        lookback_hours: int = 24,
        batch_size: int = 50,
        max_list_pages: int = 10
    ):
        self.client = client
        self.clock = clock
        self.base_url = base_url.rstrip('/')
        self.lookback_hours = lookback_hours
        self.batch_size = batch_size
        self.max_list_pages = max_list_pages
        self.tokens = NaverTokenProvider(client, self.base_url)

    def changed_from(self, date_range: Optional[DateRange] = None) -> datetime:
        """변경 주문 조회 시작 시각 (기간 지정 시 시작일 KST 0시)"""
        if date_range is not None:
            return datetime.combine(date_range.start, time.min, tzinfo=KST)
        return self.clock.now_kst() - timedelta(hours=self.lookback_hours)

    async def fetch_orders(
        self,
        credential: Credential,
        date_range: Optional[DateRange] = None,
        status: Optional[str] = None
    ) -> List[Order]:
        """변경된 상품주문을 조회해 정규화. status(정규화 상태)를 주면 해당 상태만 남긴다"""
        if not isinstance(credential.secrets, NaverKeys):
            raise MissingCredential(f"{credential.label()}: 네이버 API 키가 아닙니다")

        token = await self.tokens.issue_token(credential.secrets, now=self.clock.now())
        ids = await self._list_changed_ids(token, self.changed_from(date_range))
        if not ids:
            logger.info(f"{credential.label()}: 변경된 네이버 주문 없음")
            return []

        orders: List[Order] = []
        for batch in chunked(ids, self.batch_size):
            details = await self._query_details(token, batch)
            orders.extend(self.map_product_order(credential, detail) for detail in details)

        if status:
            wanted = status.strip().upper()
            orders = [o for o in orders if o.status.value == wanted]

        logger.info(f"{credential.label()}: 네이버 상품주문 {len(orders)}건 조회")
        return orders

    async def _list_changed_ids(self, token: TokenInfo, since: datetime) -> List[str]:
        ids: List[str] = []
        seen = set()
        params: Dict[str, Any] = {"lastChangedFrom": format_kst_iso(since)}

        for _ in range(self.max_list_pages):
            changes, more = await self._fetch_change_page(token, params)
            for change in changes:
                product_order_id = text(change.get("productOrderId")) if isinstance(change, dict) else ""
                if product_order_id and product_order_id not in seen:
                    seen.add(product_order_id)
                    ids.append(product_order_id)
            if not more:
                break
            params = {**params, "lastChangedFrom": more["moreFrom"]}
            if more.get("moreSequence"):
                params["moreSequence"] = more["moreSequence"]
        else:
            logger.warning(f"네이버 변경 주문 목록 최대 페이지({self.max_list_pages}) 도달")
        return ids

    async def _fetch_change_page(self, token: TokenInfo, params: Dict[str, Any]) -> Tuple[List[Any], Optional[Dict[str, Any]]]:
        response = await send(
            self.client,
            "GET",
            f"{self.base_url}{LAST_CHANGED_PATH}",
            vendor="네이버",
            params=params,
            headers={"Authorization": token.authorization},
        )
        raise_for_vendor_status(response, "네이버")

        data = parse_json(response, "네이버").get("data") or {}
        if not isinstance(data, dict):
            raise MappingError("네이버 변경 주문 응답의 data 형식 오류")
        changes = data.get("lastChangeStatuses") or []
        if not isinstance(changes, list):
            raise MappingError("네이버 lastChangeStatuses가 목록이 아닙니다")
        more = data.get("more")
        if not isinstance(more, dict) or not more.get("moreFrom"):
            more = None
        return changes, more

    async def _query_details(self, token: TokenInfo, product_order_ids: List[str]) -> List[Dict[str, Any]]:
        response = await send(
            self.client,
            "POST",
            f"{self.base_url}{DETAIL_QUERY_PATH}",
            vendor="네이버",
            json={"productOrderIds": product_order_ids},
            headers={"Authorization": token.authorization},
        )
        raise_for_vendor_status(response, "네이버")

        details = parse_json(response, "네이버").get("data") or []
        if not isinstance(details, list):
            raise MappingError("네이버 상품주문 상세 응답의 data가 목록이 아닙니다")
        return details

    @staticmethod
    def map_product_order(credential: Credential, detail: Dict[str, Any]) -> Order:
        """네이버 상품주문 상세 1건 -> 정규화 주문"""
        if not isinstance(detail, dict):
            raise MappingError(f"네이버 상품주문 형식 오류: {type(detail).__name__}")
        product_order = detail.get("productOrder") or {}
        order = detail.get("order") or {}
        product_order_id = text(product_order.get("productOrderId"))
        if not product_order_id:
            raise MappingError("네이버 상품주문에 productOrderId가 없습니다")

        vendor_status = text(product_order.get("productOrderStatus")).upper()
        status = NAVER_VENDOR_STATUS.get(vendor_status)
        if status is None:
            logger.warning(f"알 수 없는 네이버 주문 상태 {vendor_status or '(없음)'} (상품주문 {product_order_id}), NEW로 처리")
            status = OrderStatus.NEW

        shipping = product_order.get("shippingAddress") or {}
        orderer = order.get("orderer") or {}
        orderer_name = text(order.get("ordererName") or orderer.get("name")) or "구매자"

        return Order.from_vendor(
            Marketplace.NAVER,
            product_order_id,
            user_id=credential.user_id,
            credential_id=credential.id,
            status=status,
            parent_order_number=text(order.get("orderId") or product_order.get("orderId")) or None,
            product_id=text(product_order.get("productId")),
            product_name=text(product_order.get("productName")) or "상품명 미상",
            option=text(product_order.get("productOption")) or "단품",
            quantity=to_int(product_order.get("quantity"), 1) or 1,
            amount=to_int(product_order.get("totalPaymentAmount")),
            orderer_name=orderer_name,
            orderer_phone=text(order.get("ordererTel") or orderer.get("tel")),
            orderer_id=text(order.get("ordererId") or orderer.get("id")),
            receiver_name=text(shipping.get("name")) or orderer_name,
            receiver_phone=text(shipping.get("tel1")),
            receiver_address=join_address(shipping.get("baseAddress"), shipping.get("detailedAddress")),
            shipping_memo=text(product_order.get("shippingMemo")),
            courier=text(product_order.get("deliveryCompany")) or None,
            invoice_number=text(product_order.get("trackingNumber")) or None,
            ordered_at=parse_vendor_datetime(order.get("orderDate")),
            paid_at=parse_vendor_datetime(order.get("paymentDate")),
        )
