"""도메인 예외 정의

마켓 어댑터 오류(AdapterError 하위)는 동기화 결과에 자격증명별로 기록되고,
서비스 오류는 라우트에서 HTTP 예외로 변환된다.
"""
from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorKind(Enum):
    """어댑터 오류 분류 (운영자 조치 안내용)"""
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    AUTH_FAILURE = "AUTH_FAILURE"
    ACCESS_DENIED = "ACCESS_DENIED"
    VENDOR_UNAVAILABLE = "VENDOR_UNAVAILABLE"
    VENDOR_REJECTED = "VENDOR_REJECTED"
    MAPPING_ERROR = "MAPPING_ERROR"
    INTERNAL = "INTERNAL"


class PerfectOrderError(Exception):
    """PerfectOrder 기본 예외"""
    pass


class AdapterError(PerfectOrderError):
    """마켓 어댑터 오류"""
    kind = ErrorKind.INTERNAL
    default_hint = ""

    def __init__(self, message: str, hint: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.hint = self.default_hint if hint is None else hint
        self.status_code = status_code


class MissingCredential(AdapterError):
    """필수 인증 정보 누락 (네트워크 호출 전 실패)"""
    kind = ErrorKind.MISSING_CREDENTIAL
    default_hint = "연동 설정에서 누락된 키를 입력해주세요."


class AuthFailure(AdapterError):
    """마켓 인증 실패 (401, 잘못된 토큰/키)"""
    kind = ErrorKind.AUTH_FAILURE
    default_hint = "Access Key / Secret Key (또는 Client ID / Secret)가 정확한지 확인해주세요."


class AccessDenied(AdapterError):
    """마켓 접근 거부 (403, 주로 IP 허용 목록 문제)"""
    kind = ErrorKind.ACCESS_DENIED
    default_hint = "마켓 판매자 센터에 서버의 고정 IP를 등록해주세요."


class VendorUnavailable(AdapterError):
    """네트워크 오류, 타임아웃, 5xx"""
    kind = ErrorKind.VENDOR_UNAVAILABLE
    default_hint = "마켓 API가 응답하지 않습니다. 잠시 후 다시 동기화해주세요."


class VendorRejected(AdapterError):
    """그 외 마켓의 요청 거절 (400 등)"""
    kind = ErrorKind.VENDOR_REJECTED
    default_hint = "요청이 거절되었습니다. 조회 조건을 확인해주세요."


class MappingError(AdapterError):
    """마켓 응답 형식이 예상과 다름"""
    kind = ErrorKind.MAPPING_ERROR
    default_hint = "마켓 응답 형식이 변경되었을 수 있습니다. 관리자에게 문의해주세요."


class CredentialConflict(PerfectOrderError):
    """별칭 또는 키 중복"""
    pass


class CredentialNotFound(PerfectOrderError):
    """자격증명 없음"""
    pass


class InvalidCredential(PerfectOrderError):
    """등록 요청의 자격증명 필드 오류"""
    pass


class OrderNotFound(PerfectOrderError):
    """주문 없음"""
    pass


class InvalidStatusTransition(PerfectOrderError):
    """허용되지 않는 주문 상태 변경"""
    pass


_HTTP_STATUS = {
    CredentialConflict: status.HTTP_409_CONFLICT,
    CredentialNotFound: status.HTTP_404_NOT_FOUND,
    InvalidCredential: status.HTTP_422_UNPROCESSABLE_ENTITY,
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    InvalidStatusTransition: status.HTTP_409_CONFLICT,
}


def create_http_exception(error) -> HTTPException:
    """HTTP 예외 생성"""
    if isinstance(error, str):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error)
    for error_type, status_code in _HTTP_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
