"""마켓 자격증명 도메인 엔티티

마켓마다 필요한 인증 필드가 다르므로 마켓별 변형 타입(CoupangKeys, NaverKeys 등)을
두고, 저장소의 범용 컬럼(vendor_id / access_key / secret_key)과의 매핑은 이 모듈에서만 한다.
"""
import re
from dataclasses import dataclass, field, fields as dataclass_fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union


class Marketplace(Enum):
    """지원하는 마켓"""
    NAVER = "NAVER"
    COUPANG = "COUPANG"
    ELEVENST = "11ST"
    GMARKET = "GMARKET"
    AUCTION = "AUCTION"


class AuthMode(Enum):
    """인증 방식"""
    API_KEY = "API_KEY"
    LOGIN = "LOGIN"


_WHITESPACE = re.compile(r"\s+")
_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")
_QUOTES = re.compile("['\"“”‘’]")


def sanitize_key(value: Any) -> str:
    """API 키 정제: 공백, 폭 없는 문자, 따옴표 제거 (스프레드시트 복사 대비)"""
    if value is None:
        return ""
    text = str(value)
    text = _ZERO_WIDTH.sub("", text)
    text = _WHITESPACE.sub("", text)
    return _QUOTES.sub("", text)


def trim(value: Any) -> str:
    """로그인 정보는 앞뒤 공백만 제거"""
    if value is None:
        return ""
    return _ZERO_WIDTH.sub("", str(value)).strip()


class _Secrets:
    """마켓별 인증 정보 공통 동작"""
    marketplaces: ClassVar[Tuple[Marketplace, ...]] = ()
    auth_mode: ClassVar[AuthMode] = AuthMode.API_KEY
    identity_fields: ClassVar[Tuple[str, ...]] = ()

    def _clean(self, value: str) -> str:
        return trim(value) if self.auth_mode == AuthMode.LOGIN else sanitize_key(value)

    def sanitized(self):
        """정제된 사본 반환"""
        cleaned = {f.name: self._clean(getattr(self, f.name)) for f in dataclass_fields(self)}
        return replace(self, **cleaned)

    def missing_fields(self) -> List[str]:
        """비어 있는 필드 이름 목록"""
        return [f.name for f in dataclass_fields(self) if not getattr(self, f.name)]

    def non_ascii_fields(self) -> List[str]:
        """ASCII가 아닌 문자가 섞인 API 키 필드 (로그인 정보는 제외)"""
        if self.auth_mode == AuthMode.LOGIN:
            return []
        return [f.name for f in dataclass_fields(self) if not getattr(self, f.name).isascii()]

    def identity(self) -> Tuple[str, ...]:
        """같은 마켓 계정인지 판별하는 키"""
        return tuple(getattr(self, name) for name in self.identity_fields)


@dataclass(frozen=True)
class CoupangKeys(_Secrets):
    """쿠팡 Wing Open API 키"""
    vendor_id: str
    access_key: str
    secret_key: str

    marketplaces: ClassVar[Tuple[Marketplace, ...]] = (Marketplace.COUPANG,)
    identity_fields: ClassVar[Tuple[str, ...]] = ("vendor_id", "access_key")

    def sanitized(self) -> "CoupangKeys":
        cleaned = super().sanitized()
        return replace(cleaned, vendor_id=cleaned.vendor_id.upper())

    def to_columns(self) -> Dict[str, str]:
        return {"vendor_id": self.vendor_id, "access_key": self.access_key, "secret_key": self.secret_key}

    @classmethod
    def from_columns(cls, vendor_id: str, access_key: str, secret_key: str) -> "CoupangKeys":
        return cls(vendor_id=vendor_id or "", access_key=access_key or "", secret_key=secret_key or "")


@dataclass(frozen=True)
class NaverKeys(_Secrets):
    """네이버 커머스 API 애플리케이션 ID/시크릿"""
    client_id: str
    client_secret: str

    marketplaces: ClassVar[Tuple[Marketplace, ...]] = (Marketplace.NAVER,)
    identity_fields: ClassVar[Tuple[str, ...]] = ("client_id",)

    def to_columns(self) -> Dict[str, str]:
        return {"vendor_id": "", "access_key": self.client_id, "secret_key": self.client_secret}

    @classmethod
    def from_columns(cls, vendor_id: str, access_key: str, secret_key: str) -> "NaverKeys":
        return cls(client_id=access_key or "", client_secret=secret_key or "")


@dataclass(frozen=True)
class ElevenStKeys(_Secrets):
    """11번가 Open API 키"""
    api_key: str

    marketplaces: ClassVar[Tuple[Marketplace, ...]] = (Marketplace.ELEVENST,)
    identity_fields: ClassVar[Tuple[str, ...]] = ("api_key",)

    def to_columns(self) -> Dict[str, str]:
        return {"vendor_id": "", "access_key": self.api_key, "secret_key": ""}

    @classmethod
    def from_columns(cls, vendor_id: str, access_key: str, secret_key: str) -> "ElevenStKeys":
        return cls(api_key=access_key or "")


@dataclass(frozen=True)
class EsmLogin(_Secrets):
    """ESM PLUS (지마켓/옥션) 로그인 정보"""
    username: str
    password: str

    marketplaces: ClassVar[Tuple[Marketplace, ...]] = (Marketplace.GMARKET, Marketplace.AUCTION)
    auth_mode: ClassVar[AuthMode] = AuthMode.LOGIN
    identity_fields: ClassVar[Tuple[str, ...]] = ("username",)

    def to_columns(self) -> Dict[str, str]:
        return {"vendor_id": self.username, "access_key": "", "secret_key": self.password}

    @classmethod
    def from_columns(cls, vendor_id: str, access_key: str, secret_key: str) -> "EsmLogin":
        return cls(username=vendor_id or "", password=secret_key or "")


CredentialSecrets = Union[CoupangKeys, NaverKeys, ElevenStKeys, EsmLogin]

SECRETS_BY_MARKETPLACE = {
    Marketplace.COUPANG: CoupangKeys,
    Marketplace.NAVER: NaverKeys,
    Marketplace.ELEVENST: ElevenStKeys,
    Marketplace.GMARKET: EsmLogin,
    Marketplace.AUCTION: EsmLogin,
}


def secrets_from_fields(marketplace: Marketplace, values: Dict[str, Any]) -> CredentialSecrets:
    """입력 필드(dict)에서 마켓별 인증 정보를 만들고 정제한다. 모르는 필드는 무시."""
    secrets_type = SECRETS_BY_MARKETPLACE[marketplace]
    kwargs = {f.name: values.get(f.name) or "" for f in dataclass_fields(secrets_type)}
    return secrets_type(**kwargs).sanitized()


def secrets_from_columns(
    marketplace: Marketplace,
    vendor_id: Optional[str],
    access_key: Optional[str],
    secret_key: Optional[str]
) -> CredentialSecrets:
    """저장소 컬럼에서 마켓별 인증 정보 복원"""
    return SECRETS_BY_MARKETPLACE[marketplace].from_columns(vendor_id, access_key, secret_key)


@dataclass
class Credential:
    """마켓 자격증명 도메인 엔티티 (동기화 코어에서는 읽기 전용)"""
    id: str
    user_id: str
    marketplace: Marketplace
    alias: str
    secrets: CredentialSecrets
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.marketplace not in self.secrets.marketplaces:
            raise ValueError(
                f"{self.marketplace.value} 자격증명에 {type(self.secrets).__name__}를 사용할 수 없습니다"
            )

    @property
    def auth_mode(self) -> AuthMode:
        return self.secrets.auth_mode

    def label(self) -> str:
        """로그용 표시 이름"""
        return f"{self.marketplace.value}:{self.alias}"

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리 변환 (비밀 값은 제외)"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'marketplace': self.marketplace.value,
            'alias': self.alias,
            'auth_mode': self.auth_mode.value,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
        }
