"""쿠팡 마켓 어댑터 (발주서 목록 조회)"""
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from perfectorder.adapters.auth.coupang_signer import CoupangSigner
from perfectorder.adapters.markets.http import (
    parse_json, probe_egress_ip, raise_for_vendor_status, send
)
from perfectorder.adapters.markets.normalize import join_address, parse_vendor_datetime, text, to_int
from perfectorder.core.entities.credential import CoupangKeys, Credential, Marketplace
from perfectorder.core.entities.order import Order, OrderStatus
from perfectorder.core.exceptions import MappingError, MissingCredential
from perfectorder.core.ports.clock_port import ClockPort
from perfectorder.core.ports.market_port import DateRange, MarketPort
from perfectorder.shared.logging import get_logger

logger = get_logger(__name__)

ORDERSHEETS_PATH = "/v2/providers/openapi/apis/api/v4/vendors/{vendor_id}/ordersheets"

# 화면 상태 -> 쿠팡 발주서 상태
COUPANG_QUERY_STATUS = {
    "NEW": "ACCEPT",
    "PENDING": "INSTRUCT",
    "SHIPPING": "DEPARTURE",
    "DELIVERING": "DELIVERING",
    "DELIVERED": "FINAL_DELIVERY",
    "CANCEL": "CANCEL",
    "RETURN": "RETURN",
    "EXCHANGE": "EXCHANGE",
}

# 쿠팡 발주서 상태 -> 정규화 주문 상태
COUPANG_VENDOR_STATUS = {
    "ACCEPT": OrderStatus.NEW,
    "INSTRUCT": OrderStatus.PENDING,
    "DEPARTURE": OrderStatus.SHIPPING,
    "DELIVERING": OrderStatus.SHIPPING,
    "FINAL_DELIVERY": OrderStatus.DELIVERED,
    "CANCEL": OrderStatus.CANCELLED,
    "RETURN": OrderStatus.RETURNED,
    "EXCHANGE": OrderStatus.RETURNED,
}


def to_vendor_status(status: Optional[str]) -> str:
    """조회 상태를 쿠팡 상태 코드로 변환 (기본 NEW -> ACCEPT)"""
    raw = (status or "NEW").strip().upper()
    if raw in COUPANG_QUERY_STATUS:
        return COUPANG_QUERY_STATUS[raw]
    if raw in COUPANG_VENDOR_STATUS:
        return raw
    raise ValueError(f"지원하지 않는 쿠팡 주문 상태: {status}")


class CoupangAdapter(MarketPort):
    """쿠팡 Wing Open API 어댑터"""

    marketplace = Marketplace.COUPANG

    def __init__(
        self,
        client: httpx.AsyncClient,
        clock: ClockPort,
        base_url: str = "https://api-gateway.coupang.com",
        window_days: int = 2,
        max_pages: int = 10,
        probe_ip_on_denied: bool = True
    ):
        self.client = client
        self.clock = clock
        self.base_url = base_url.rstrip('/')
        self.window_days = window_days
        self.max_pages = max_pages
        self.probe_ip_on_denied = probe_ip_on_denied

    def default_range(self) -> DateRange:
        """KST 오늘부터 window_days일 뒤까지"""
        today = self.clock.now_kst().date()
        return DateRange(today, today + timedelta(days=self.window_days))

    @staticmethod
    def build_query(date_range: DateRange, vendor_status: str, next_token: Optional[str] = None) -> str:
        """쿼리 문자열 (키 알파벳 순서, 서명과 동일한 문자열로 전송)"""
        params = [
            ("createdAtFrom", date_range.start.isoformat()),
            ("createdAtTo", date_range.end.isoformat()),
        ]
        if next_token:
            params.append(("nextToken", next_token))
        params.append(("status", vendor_status))
        return urlencode(params)

    async def fetch_orders(
        self,
        credential: Credential,
        date_range: Optional[DateRange] = None,
        status: Optional[str] = None
    ) -> List[Order]:
        """쿠팡 발주서 조회 후 정규화"""
        if not isinstance(credential.secrets, CoupangKeys):
            raise MissingCredential(f"{credential.label()}: 쿠팡 API 키가 아닙니다")

        signer = CoupangSigner(credential.secrets)
        date_range = date_range or self.default_range()
        vendor_status = to_vendor_status(status)
        path = ORDERSHEETS_PATH.format(vendor_id=signer.vendor_id)

        orders: List[Order] = []
        next_token = None
        for _ in range(self.max_pages):
            query = self.build_query(date_range, vendor_status, next_token)
            sheets, next_token = await self._fetch_page(signer, path, query)
            orders.extend(self.map_ordersheet(credential, sheet, vendor_status) for sheet in sheets)
            if not next_token:
                break
        else:
            logger.warning(f"{credential.label()}: 최대 페이지({self.max_pages}) 도달, 나머지 발주서는 다음 동기화에서 조회")

        logger.info(f"{credential.label()}: 쿠팡 발주서 {len(orders)}건 조회 ({date_range.start}~{date_range.end}, {vendor_status})")
        return orders

    async def _fetch_page(self, signer: CoupangSigner, path: str, query: str) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        signed = signer.sign_request("GET", path, query, self.clock.now())
        response = await send(
            self.client,
            "GET",
            f"{self.base_url}{path}?{query}",
            vendor="쿠팡",
            headers={
                "Authorization": signed.authorization,
                "X-Requested-By": signer.vendor_id,
                "Content-Type": "application/json;charset=UTF-8",
            },
        )

        hint = None
        if response.status_code == 403:
            hint = await self._access_denied_hint()
        raise_for_vendor_status(response, "쿠팡", access_denied_hint=hint)

        data = parse_json(response, "쿠팡")
        sheets = data.get("data")
        if sheets is None:
            sheets = []
        if not isinstance(sheets, list):
            raise MappingError(f"쿠팡 발주서 응답의 data가 목록이 아닙니다: {type(sheets).__name__}")
        return sheets, text(data.get("nextToken")) or None

    async def _access_denied_hint(self) -> Optional[str]:
        if not self.probe_ip_on_denied:
            return None
        ip = await probe_egress_ip(self.client)
        if not ip:
            return None
        return f"쿠팡 Wing > 판매자 정보 > 오픈API 키 관리에 현재 서버 IP[{ip}]를 등록해주세요."

    @staticmethod
    def map_ordersheet(credential: Credential, sheet: Dict[str, Any], queried_status: str = "ACCEPT") -> Order:
        """쿠팡 발주서 1건 -> 정규화 주문"""
        if not isinstance(sheet, dict):
            raise MappingError(f"쿠팡 발주서 형식 오류: {type(sheet).__name__}")
        order_id = text(sheet.get("orderId"))
        if not order_id:
            raise MappingError("쿠팡 발주서에 orderId가 없습니다")

        items = sheet.get("orderItems") or []
        if not isinstance(items, list):
            raise MappingError(f"쿠팡 발주서 {order_id}: orderItems가 목록이 아닙니다")
        first = items[0] if items and isinstance(items[0], dict) else {}

        orderer = sheet.get("orderer") or {}
        receiver = sheet.get("receiver") or {}

        if items:
            amount = sum(to_int(item.get("orderPrice")) for item in items if isinstance(item, dict))
            quantity = sum(to_int(item.get("shippingCount"), 1) for item in items if isinstance(item, dict))
        else:
            amount = to_int(sheet.get("orderPrice"))
            quantity = to_int(sheet.get("shippingCount"), 1)

        vendor_status = text(sheet.get("status")).upper() or queried_status
        status = COUPANG_VENDOR_STATUS.get(vendor_status)
        if status is None:
            logger.warning(f"알 수 없는 쿠팡 주문 상태 {vendor_status} (주문 {order_id}), NEW로 처리")
            status = OrderStatus.NEW

        orderer_name = text(orderer.get("name")) or "구매자"
        return Order.from_vendor(
            Marketplace.COUPANG,
            order_id,
            user_id=credential.user_id,
            credential_id=credential.id,
            status=status,
            product_id=text(first.get("vendorItemId") or sheet.get("vendorItemId")),
            product_name=text(first.get("vendorItemName") or sheet.get("vendorItemName") or first.get("sellerProductName")) or "상품명 미상",
            option=text(first.get("sellerProductItemName") or sheet.get("vendorItemPackageName")) or "단품",
            quantity=quantity or 1,
            amount=amount,
            orderer_name=orderer_name,
            orderer_phone=text(orderer.get("safeNumber")),
            orderer_id=text(orderer.get("email")),
            receiver_name=text(receiver.get("name")) or orderer_name,
            receiver_phone=text(receiver.get("safeNumber")),
            receiver_address=join_address(receiver.get("addr1"), receiver.get("addr2")),
            shipping_memo=text(sheet.get("parcelPrintMessage") or sheet.get("deliveryRequestMessage")),
            courier=text(sheet.get("deliveryCompanyName")) or None,
            invoice_number=text(sheet.get("invoiceNumber")) or None,
            ordered_at=parse_vendor_datetime(sheet.get("orderedAt")),
            paid_at=parse_vendor_datetime(sheet.get("paidAt")),
        )
