"""구조화된 로깅 유틸리티"""
import logging
import logging.config
import re
from typing import Optional
import sys

_PROXY_PASSWORD = re.compile(r"(://[^:/@]+:)[^@]*@")


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """로거 인스턴스 반환"""

    # 기본 로그 설정
    if not level:
        level = "INFO"

    log_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'stream': sys.stdout
            }
        },
        'loggers': {
            name: {
                'handlers': ['console'],
                'level': level,
                'propagate': False
            }
        },
        'root': {
            'handlers': ['console'],
            'level': level
        }
    }

    logging.config.dictConfig(log_config)
    return logging.getLogger(name)


def mask_url_password(url: Optional[str]) -> Optional[str]:
    """URL에 포함된 비밀번호를 ****로 가림 (프록시 URL 로깅용)"""
    if not url:
        return url
    return _PROXY_PASSWORD.sub(r"\1****@", url)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """키 앞부분만 남기고 가림"""
    if not value:
        return ""
    return value[:visible] + "****"


def log_order_sync(logger: logging.Logger, action: str, credential_id: str, details: Optional[dict] = None):
    """주문 동기화 로그"""
    log_data = {
        'action': action,
        'credential_id': credential_id,
    }

    if details:
        log_data.update(details)

    logger.info(f"Order sync: {action} ({credential_id})", extra={'sync': log_data})


def log_api_request(logger: logging.Logger, method: str, endpoint: str, status_code: int, duration: float):
    """API 요청 로그"""
    log_data = {
        'http_method': method,
        'endpoint': endpoint,
        'status_code': status_code,
        'duration_ms': duration * 1000
    }

    logger.info(f"API Request: {method} {endpoint} - {status_code}", extra=log_data)
