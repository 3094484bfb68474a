"""操作结果类型

生命周期操作不向调用方抛出预期错误，而是返回 Ok 或 Err。
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from phantom.core.exceptions import ErrorKind, PhantomError

T = TypeVar("T")
E = TypeVar("E", bound=PhantomError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """成功结果"""
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """失败结果"""
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err[E]]
