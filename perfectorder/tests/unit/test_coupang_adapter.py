"""쿠팡 어댑터 단위 테스트 (httpx.MockTransport)"""
import pytest
import httpx
from datetime import date

from perfectorder.adapters.auth.coupang_signer import build_message, sign
from perfectorder.adapters.markets.coupang_adapter import (
    COUPANG_QUERY_STATUS, COUPANG_VENDOR_STATUS, CoupangAdapter, to_vendor_status
)
from perfectorder.core.entities.credential import Marketplace
from perfectorder.core.entities.order import OrderStatus
from perfectorder.core.exceptions import (
    AccessDenied, AuthFailure, MappingError, MissingCredential, VendorRejected, VendorUnavailable
)
from perfectorder.core.ports.market_port import DateRange

ORDERSHEET = {
    "shipmentBoxId": 642538970006401429,
    "orderId": 9100041863244,
    "orderedAt": "2024-05-20T10:12:33",
    "paidAt": "2024-05-20T10:13:01",
    "status": "ACCEPT",
    "orderer": {"name": "홍길동", "email": "hong@example.com", "safeNumber": "0502-1234-5678"},
    "receiver": {"name": "김철수", "safeNumber": "0502-9876-5432", "addr1": "서울특별시 강남구 테헤란로 1", "addr2": "101동 202호"},
    "parcelPrintMessage": "문 앞에 놓아주세요",
    "orderItems": [
        {
            "vendorItemId": 3000000001,
            "vendorItemName": "무선 이어폰 화이트",
            "sellerProductItemName": "화이트",
            "shippingCount": 2,
            "orderPrice": 39800,
        },
        {
            "vendorItemId": 3000000002,
            "vendorItemName": "이어폰 케이스",
            "shippingCount": 1,
            "orderPrice": 5000,
        },
    ],
}


def make_adapter(handler, clock, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CoupangAdapter(client=client, clock=clock, base_url="https://api-gateway.coupang.com", **kwargs)


class TestStatusTables:
    """상태 변환표 테스트"""

    def test_every_vendor_status_maps_to_one_canonical_status(self):
        for vendor_status, status in COUPANG_VENDOR_STATUS.items():
            assert isinstance(status, OrderStatus), vendor_status

    @pytest.mark.parametrize("vendor_status, expected", [
        ("ACCEPT", OrderStatus.NEW),
        ("INSTRUCT", OrderStatus.PENDING),
        ("DEPARTURE", OrderStatus.SHIPPING),
        ("DELIVERING", OrderStatus.SHIPPING),
        ("FINAL_DELIVERY", OrderStatus.DELIVERED),
        ("CANCEL", OrderStatus.CANCELLED),
        ("RETURN", OrderStatus.RETURNED),
        ("EXCHANGE", OrderStatus.RETURNED),
    ])
    def test_vendor_status_table_covers_vendor_statuses(self, vendor_status, expected):
        assert COUPANG_VENDOR_STATUS[vendor_status] == expected

    @pytest.mark.parametrize("requested, vendor_status", [
        ("NEW", "ACCEPT"),
        ("PENDING", "INSTRUCT"),
        ("SHIPPING", "DEPARTURE"),
        ("DELIVERING", "DELIVERING"),
        ("DELIVERED", "FINAL_DELIVERY"),
        ("CANCEL", "CANCEL"),
        ("RETURN", "RETURN"),
        ("EXCHANGE", "EXCHANGE"),
    ])
    def test_query_status_table(self, requested, vendor_status):
        assert COUPANG_QUERY_STATUS[requested] == vendor_status

    def test_every_query_status_is_a_known_vendor_status(self):
        for vendor_status in COUPANG_QUERY_STATUS.values():
            assert vendor_status in COUPANG_VENDOR_STATUS

    def test_default_is_accept(self):
        assert to_vendor_status(None) == "ACCEPT"
        assert to_vendor_status("pending") == "INSTRUCT"
        assert to_vendor_status("FINAL_DELIVERY") == "FINAL_DELIVERY"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            to_vendor_status("LOST")


class TestCoupangAdapter:
    """쿠팡 발주서 조회 테스트"""

    @pytest.mark.asyncio
    async def test_new_orders_request_accept_and_map(self, fixed_clock, coupang_credential):
        """NEW 조회는 status=ACCEPT로 서명 요청하고 COUPANG 주문으로 정규화"""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"code": 200, "message": "OK", "data": [ORDERSHEET], "nextToken": ""})

        adapter = make_adapter(handler, fixed_clock)
        orders = await adapter.fetch_orders(coupang_credential(), status="NEW")

        assert len(seen) == 1
        request = seen[0]
        path = "/v2/providers/openapi/apis/api/v4/vendors/A00934559/ordersheets"
        query = "createdAtFrom=2024-05-20&createdAtTo=2024-05-22&status=ACCEPT"
        assert request.method == "GET"
        assert request.url.path == path
        assert request.url.query.decode() == query
        assert request.headers["X-Requested-By"] == "A00934559"

        expected_signature = sign("b873secretkey", build_message("240520T013000Z", "GET", path, query))
        assert request.headers["Authorization"] == (
            f"CEA algorithm=HmacSHA256, access-key=ak-coupang, signed-date=240520T013000Z, signature={expected_signature}"
        )

        assert len(orders) == 1
        order = orders[0]
        assert order.id == "C-9100041863244"
        assert order.marketplace == Marketplace.COUPANG
        assert order.status == OrderStatus.NEW
        assert order.user_id == "user-1"
        assert order.credential_id == "cred-coupang"
        assert order.product_id == "3000000001"
        assert order.product_name == "무선 이어폰 화이트"
        assert order.option == "화이트"
        assert order.amount == 44800
        assert order.quantity == 3
        assert order.orderer_name == "홍길동"
        assert order.orderer_phone == "0502-1234-5678"
        assert order.receiver_name == "김철수"
        assert order.receiver_address == "서울특별시 강남구 테헤란로 1 101동 202호"
        assert order.shipping_memo == "문 앞에 놓아주세요"
        assert order.ordered_at is not None and order.ordered_at.utcoffset().total_seconds() == 9 * 3600

    @pytest.mark.asyncio
    async def test_explicit_date_range(self, fixed_clock, coupang_credential):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"code": 200, "data": []})

        adapter = make_adapter(handler, fixed_clock)
        orders = await adapter.fetch_orders(
            coupang_credential(), date_range=DateRange(date(2024, 5, 1), date(2024, 5, 3)), status="DELIVERED"
        )

        assert orders == []
        assert seen[0].url.query.decode() == "createdAtFrom=2024-05-01&createdAtTo=2024-05-03&status=FINAL_DELIVERY"

    @pytest.mark.asyncio
    async def test_follows_next_token(self, fixed_clock, coupang_credential):
        """nextToken이 있으면 다음 페이지 조회"""
        second = dict(ORDERSHEET, orderId=9100041863245)
        pages = [
            {"code": 200, "data": [ORDERSHEET], "nextToken": "tok1"},
            {"code": 200, "data": [second], "nextToken": None},
        ]
        queries = []

        def handler(request):
            queries.append(request.url.query.decode())
            return httpx.Response(200, json=pages[len(queries) - 1])

        adapter = make_adapter(handler, fixed_clock)
        orders = await adapter.fetch_orders(coupang_credential())

        assert [o.id for o in orders] == ["C-9100041863244", "C-9100041863245"]
        assert "nextToken=tok1" in queries[1]
        assert queries[1].index("createdAtTo") < queries[1].index("nextToken") < queries[1].index("status")

    @pytest.mark.asyncio
    async def test_max_pages_limit(self, fixed_clock, coupang_credential):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"code": 200, "data": [], "nextToken": "again"})

        adapter = make_adapter(handler, fixed_clock, max_pages=3)
        await adapter.fetch_orders(coupang_credential())
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_401_is_auth_failure(self, fixed_clock, coupang_credential):
        def handler(request):
            return httpx.Response(401, json={"code": "ERROR", "message": "Invalid signature"})

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(AuthFailure) as exc_info:
            await adapter.fetch_orders(coupang_credential())
        assert "Invalid signature" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_403_is_access_denied_with_egress_ip(self, fixed_clock, coupang_credential):
        """403이면 현재 외부 IP를 안내에 포함"""
        def handler(request):
            if request.url.host == "api.ipify.org":
                return httpx.Response(200, json={"ip": "203.0.113.7"})
            return httpx.Response(403, json={"message": "Access denied"})

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(AccessDenied) as exc_info:
            await adapter.fetch_orders(coupang_credential())
        assert "203.0.113.7" in exc_info.value.hint

    @pytest.mark.asyncio
    async def test_403_without_ip_uses_default_hint(self, fixed_clock, coupang_credential):
        def handler(request):
            return httpx.Response(403, json={"message": "Access denied"})

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(AccessDenied) as exc_info:
            await adapter.fetch_orders(coupang_credential())
        assert exc_info.value.hint == AccessDenied.default_hint

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [429, 500, 503])
    async def test_unavailable_statuses(self, fixed_clock, coupang_credential, status_code):
        adapter = make_adapter(lambda request: httpx.Response(status_code), fixed_clock)
        with pytest.raises(VendorUnavailable):
            await adapter.fetch_orders(coupang_credential())

    @pytest.mark.asyncio
    async def test_network_error_is_unavailable(self, fixed_clock, coupang_credential):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(VendorUnavailable):
            await adapter.fetch_orders(coupang_credential())

    @pytest.mark.asyncio
    async def test_other_4xx_is_rejected(self, fixed_clock, coupang_credential):
        adapter = make_adapter(lambda request: httpx.Response(400, json={"message": "bad"}), fixed_clock)
        with pytest.raises(VendorRejected):
            await adapter.fetch_orders(coupang_credential())

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_network(self, fixed_clock, coupang_credential):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"data": []})

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(MissingCredential):
            await adapter.fetch_orders(coupang_credential(secret_key=" "))
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("access_key", ["ak-본점", "ak\u00adkey"])
    async def test_non_ascii_key_fails_before_network(self, fixed_clock, coupang_credential, access_key):
        """헤더에 실을 수 없는 문자는 네트워크 호출 전에 분류된 오류로 실패"""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"data": []})

        adapter = make_adapter(handler, fixed_clock)
        with pytest.raises(MissingCredential):
            await adapter.fetch_orders(coupang_credential(access_key=access_key))
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_list_data_is_mapping_error(self, fixed_clock, coupang_credential):
        adapter = make_adapter(lambda request: httpx.Response(200, json={"data": {"oops": 1}}), fixed_clock)
        with pytest.raises(MappingError):
            await adapter.fetch_orders(coupang_credential())


class TestOrdersheetMapping:
    """발주서 매핑 테스트"""

    def test_top_level_fallback_and_invoice(self, coupang_credential):
        sheet = {
            "orderId": 1,
            "status": "DEPARTURE",
            "vendorItemName": "단일 상품",
            "vendorItemPackageName": "기본",
            "orderPrice": 12000,
            "deliveryRequestMessage": "경비실",
            "deliveryCompanyName": "CJ대한통운",
            "invoiceNumber": "123456789012",
        }
        order = CoupangAdapter.map_ordersheet(coupang_credential(), sheet)

        assert order.status == OrderStatus.SHIPPING
        assert order.product_name == "단일 상품"
        assert order.option == "기본"
        assert order.amount == 12000
        assert order.quantity == 1
        assert order.shipping_memo == "경비실"
        assert order.courier == "CJ대한통운"
        assert order.invoice_number == "123456789012"

    def test_missing_order_id(self, coupang_credential):
        with pytest.raises(MappingError):
            CoupangAdapter.map_ordersheet(coupang_credential(), {"orderItems": []})

    def test_unknown_status_defaults_to_new(self, coupang_credential):
        order = CoupangAdapter.map_ordersheet(coupang_credential(), {"orderId": 5, "status": "MYSTERY"})
        assert order.status == OrderStatus.NEW
