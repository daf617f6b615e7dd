"""쿠팡 Open API HMAC 서명

서명 메시지: {signed-date}{METHOD}{path}?{query}
signed-date: UTC yyMMdd'T'HHmmss'Z'
Authorization: CEA algorithm=HmacSHA256, access-key=..., signed-date=..., signature=...
"""
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone

from perfectorder.core.entities.credential import CoupangKeys
from perfectorder.core.exceptions import MissingCredential

ALGORITHM = "HmacSHA256"


def format_signed_date(moment: datetime) -> str:
    """UTC 기준 yyMMddTHHmmssZ"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%y%m%dT%H%M%SZ")


def build_message(signed_date: str, method: str, path: str, query: str = "") -> str:
    """서명 대상 문자열"""
    message = f"{signed_date}{method.upper()}{path}"
    if query:
        message += f"?{query}"
    return message


def sign(secret_key: str, message: str) -> str:
    """HMAC-SHA256 hex 서명"""
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


@dataclass(frozen=True)
class SignedRequest:
    """요청 1건에 대한 서명 결과"""
    signed_date: str
    message: str
    signature: str
    authorization: str


class CoupangSigner:
    """쿠팡 요청 서명기. 요청마다 새로 서명하며 캐시하지 않는다."""

    def __init__(self, keys: CoupangKeys):
        keys = keys.sanitized()
        missing = keys.missing_fields()
        if missing:
            raise MissingCredential(f"쿠팡 인증 정보 누락: {', '.join(missing)}")
        invalid = keys.non_ascii_fields()
        if invalid:
            raise MissingCredential(f"쿠팡 인증 정보에 사용할 수 없는 문자가 있습니다: {', '.join(invalid)}")
        self.keys = keys

    @property
    def vendor_id(self) -> str:
        return self.keys.vendor_id

    def sign_request(self, method: str, path: str, query: str, moment: datetime) -> SignedRequest:
        """요청 서명 및 Authorization 헤더 생성"""
        signed_date = format_signed_date(moment)
        message = build_message(signed_date, method, path, query)
        signature = sign(self.keys.secret_key, message)
        authorization = (
            f"CEA algorithm={ALGORITHM}, "
            f"access-key={self.keys.access_key}, "
            f"signed-date={signed_date}, "
            f"signature={signature}"
        )
        return SignedRequest(
            signed_date=signed_date,
            message=message,
            signature=signature,
            authorization=authorization,
        )
