"""쿠팡 HMAC 서명 단위 테스트"""
import pytest
from datetime import datetime, timezone, timedelta

from perfectorder.adapters.auth.coupang_signer import (
    CoupangSigner, build_message, format_signed_date, sign
)
from perfectorder.core.entities.credential import CoupangKeys
from perfectorder.core.exceptions import MissingCredential

PATH = "/v2/providers/openapi/apis/api/v4/vendors/A00934559/ordersheets"
QUERY = "createdAtFrom=2024-05-20&createdAtTo=2024-05-22&status=ACCEPT"
MOMENT = datetime(2024, 5, 20, 1, 30, 0, tzinfo=timezone.utc)


class TestSignedDate:
    """signed-date 형식 테스트"""

    def test_utc_format(self):
        assert format_signed_date(MOMENT) == "240520T013000Z"

    def test_converts_kst_to_utc(self):
        """KST 시각도 UTC로 변환해 서명"""
        kst = MOMENT.astimezone(timezone(timedelta(hours=9)))
        assert format_signed_date(kst) == "240520T013000Z"


class TestMessage:
    """서명 메시지 테스트"""

    def test_with_query(self):
        assert build_message("240520T013000Z", "get", PATH, QUERY) == f"240520T013000ZGET{PATH}?{QUERY}"

    def test_without_query_has_no_question_mark(self):
        assert build_message("240520T013000Z", "GET", PATH) == f"240520T013000ZGET{PATH}"


class TestCoupangSigner:
    """서명기 테스트"""

    def test_reference_vector_with_query(self):
        """사전 계산된 참조 서명과 일치"""
        message = build_message("240520T013000Z", "GET", PATH, QUERY)
        assert sign("b873secretkey", message) == "bb0d9092a7da7a39a91df47b6a6cfa0b4195a77d664ef72a41f3c0fa82e3a922"

    def test_reference_vector_without_query(self):
        message = build_message("240520T013000Z", "GET", PATH)
        assert sign("b873secretkey", message) == "6ac60f3681acc00f727472655b0618ab0c61b0fe1c6acbd2a126539413129093"

    def test_authorization_header(self):
        """CEA 헤더 형식"""
        signer = CoupangSigner(CoupangKeys("A00934559", "ak-coupang", "b873secretkey"))
        signed = signer.sign_request("GET", PATH, QUERY, MOMENT)

        assert signed.signature == "bb0d9092a7da7a39a91df47b6a6cfa0b4195a77d664ef72a41f3c0fa82e3a922"
        assert signed.authorization == (
            "CEA algorithm=HmacSHA256, access-key=ak-coupang, "
            "signed-date=240520T013000Z, "
            "signature=bb0d9092a7da7a39a91df47b6a6cfa0b4195a77d664ef72a41f3c0fa82e3a922"
        )

    def test_keys_are_sanitized_before_signing(self):
        """복사 과정에서 섞인 공백/따옴표/폭 없는 문자는 제거"""
        signer = CoupangSigner(CoupangKeys(" a00934559 ", "'ak-coupang'", "b873\u200bsecret key\n"))
        signed = signer.sign_request("GET", PATH, QUERY, MOMENT)

        assert signer.vendor_id == "A00934559"
        assert signed.signature == "bb0d9092a7da7a39a91df47b6a6cfa0b4195a77d664ef72a41f3c0fa82e3a922"
        assert "access-key=ak-coupang," in signed.authorization

    def test_fresh_signed_date_per_request(self):
        signer = CoupangSigner(CoupangKeys("A00934559", "ak", "secret"))
        first = signer.sign_request("GET", PATH, QUERY, MOMENT)
        second = signer.sign_request("GET", PATH, QUERY, MOMENT + timedelta(seconds=1))

        assert first.signed_date != second.signed_date
        assert first.signature != second.signature

    @pytest.mark.parametrize("keys", [
        CoupangKeys("", "ak", "secret"),
        CoupangKeys("A00934559", "  ", "secret"),
        CoupangKeys("A00934559", "ak", "\u200b"),
    ])
    def test_missing_field_raises(self, keys):
        """필수 값이 비면 네트워크 호출 전에 실패"""
        with pytest.raises(MissingCredential):
            CoupangSigner(keys)

    @pytest.mark.parametrize("keys", [
        CoupangKeys("A00934559", "ak-본점", "secret"),
        CoupangKeys("A00934559", "ak\u00adkey", "secret"),
        CoupangKeys("A00934559", "ak", "sécret"),
    ])
    def test_non_ascii_field_raises(self, keys):
        """ASCII 이외 문자가 섞인 키는 서명 전에 거절"""
        with pytest.raises(MissingCredential):
            CoupangSigner(keys)
