"""
Option module: a Result whose only possible error is the empty marker
"""

from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

from .result import Result, map_ok

T = TypeVar('T')
U = TypeVar('U')


class EmptyOption(Exception):
    """Marker error carried by an empty Option"""
    pass


EMPTY_OPTION = EmptyOption("Optional? Value")


class Option(Generic[T]):
    """Optional value backed by a Result"""

    __slots__ = ('_result',)

    def __init__(self, result: Result[T]):
        if result.is_err and result.error is not EMPTY_OPTION:
            raise ValueError("Option can only hold the EMPTY_OPTION marker as its error")
        self._result = result

    @classmethod
    def some(cls, value: T) -> 'Option[T]':
        return cls(Result.ok(value))

    @classmethod
    def none(cls) -> 'Option[T]':
        return cls(Result.err(EMPTY_OPTION))

    @property
    def is_some(self) -> bool:
        return self._result.is_ok

    @property
    def is_none(self) -> bool:
        return self._result.is_err

    def unwrap(self) -> Tuple[Optional[T], Optional[BaseException]]:
        return self._result.unwrap()

    def do(self, on_some: Callable[[T], Any], on_none: Callable[[BaseException], Any]) -> None:
        self._result.do(on_some, on_none)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Option):
            return NotImplemented
        return self._result == other._result

    def __hash__(self) -> int:
        return hash(self._result)

    def __repr__(self) -> str:
        if self.is_some:
            return f"Option.some({self._result.unwrap()[0]!r})"
        return "Option.none()"


def map_option(f: Callable[[T], U], option: Option[T]) -> Option[U]:
    """Apply f to a present value; an empty Option stays empty"""
    return Option(map_ok(f, option._result))
