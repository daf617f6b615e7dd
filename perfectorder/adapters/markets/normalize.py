"""마켓 응답 값 정규화 헬퍼"""
from datetime import datetime
from typing import Any, Optional

from perfectorder.core.ports.clock_port import KST


def parse_vendor_datetime(value: Any) -> Optional[datetime]:
    """마켓 일시 문자열 파싱. 시간대가 없으면 KST로 간주, 해석 불가면 None"""
    if not value or not isinstance(value, str):
        return None
    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=KST)
    return parsed


def to_int(value: Any, default: int = 0) -> int:
    """금액/수량 정수 변환"""
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def join_address(*parts: Any) -> str:
    """주소 조각 이어붙이기"""
    return " ".join(p for p in (text(part) for part in parts) if p)
