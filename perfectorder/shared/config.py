"""애플리케이션 설정"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 데이터베이스
    database_url: str = Field(default="sqlite+aiosqlite:///./perfectorder.db")

    # 로깅
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # API 설정
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=False)

    # 마켓 API
    coupang_api_url: str = Field(default="https://api-gateway.coupang.com")
    naver_api_url: str = Field(default="https://api.commerce.naver.com/external")

    # 고정 IP 프록시 (쿠팡 IP 허용 목록용). 비어 있으면 직접 연결
    fixed_ip_proxy_url: Optional[str] = Field(default=None, validation_alias="FIXED_IP_PROXY_URL")

    # 외부 호출 타임아웃 (초)
    request_timeout: float = Field(default=15.0)
    connect_timeout: float = Field(default=5.0)

    # 쿠팡 주문 조회
    coupang_window_days: int = Field(default=2)
    coupang_max_pages: int = Field(default=10)

    # 네이버 주문 조회
    naver_lookback_hours: int = Field(default=24)
    naver_detail_batch_size: int = Field(default=50)
    naver_max_list_pages: int = Field(default=10)

    # 동기화
    sync_max_concurrency: int = Field(default=4)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("coupang_api_url", "naver_api_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL은 'http://' 또는 'https://'로 시작해야 합니다.")
        return v.rstrip("/")

    @field_validator("fixed_ip_proxy_url")
    @classmethod
    def blank_proxy_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("naver_detail_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if not 1 <= v <= 300:
            raise ValueError("naver_detail_batch_size는 1에서 300 사이여야 합니다.")
        return v

    @field_validator("sync_max_concurrency", "coupang_max_pages", "naver_max_list_pages")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("1 이상이어야 합니다.")
        return v


# 전역 설정 인스턴스
settings = Settings()


def get_settings() -> Settings:
    """설정 인스턴스 반환"""
    return settings
