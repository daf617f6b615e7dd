"""Result/Either 모나드 패턴"""
from typing import TypeVar, Generic, Union, Optional
from dataclasses import dataclass

T = TypeVar('T')


@dataclass
class Success(Generic[T]):
    """성공 결과"""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def get_value(self) -> T:
        return self.value

    def get_error(self) -> None:
        return None


@dataclass
class Failure(Generic[T]):
    """실패 결과

    cause에는 원인 예외를 담아 라우트에서 HTTP 상태 코드를 결정할 수 있게 한다.
    """
    error: str
    value: Optional[T] = None
    cause: Optional[Exception] = None

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def get_value(self) -> Optional[T]:
        return self.value

    def get_error(self) -> str:
        return self.error


# Union type for type hints
Result = Union[Success[T], Failure[T]]


def success(value: T) -> Result[T]:
    """성공 결과 생성"""
    return Success(value)


def failure(error: Exception, value: T = None) -> Result[T]:
    """예외로부터 실패 결과 생성"""
    return Failure(str(error), value, cause=error)
