"""
Result module providing a two-state value-or-error container
"""

from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

T = TypeVar('T')
U = TypeVar('U')

_MISSING: Any = object()


class Result(Generic[T]):
    """
    Holds exactly one of a success value or an error

    Errors are Exception instances so callers can re-raise them or
    inspect their type, but they are never raised by the container itself.
    """

    __slots__ = ('_value', '_error')

    def __init__(self, value: Any = _MISSING, error: Optional[BaseException] = None):
        if error is None and value is _MISSING:
            raise ValueError("Result requires either a value or an error")
        if error is not None and value is not _MISSING:
            raise ValueError("Result cannot hold both a value and an error")
        self._value = None if value is _MISSING else value
        self._error = error

    @classmethod
    def ok(cls, value: T) -> 'Result[T]':
        """Construct a successful result"""
        return cls(value=value)

    @classmethod
    def err(cls, error: BaseException) -> 'Result[T]':
        """Construct a failed result"""
        if error is None:
            raise ValueError("Result.err requires an error")
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self._error is None

    @property
    def is_err(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def unwrap(self) -> Tuple[Optional[T], Optional[BaseException]]:
        """
        Return the (value, error) pair

        Callers must check the error before trusting the value: a failed
        result returns (None, error).
        """
        return self._value, self._error

    def do(self, on_ok: Callable[[T], Any], on_err: Callable[[BaseException], Any]) -> None:
        """
        Branch to exactly one callback

        Args:
            on_ok: Called with the value when the result is a success
            on_err: Called with the error when the result is a failure
        """
        if self._error is None:
            on_ok(self._value)
        else:
            on_err(self._error)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        if self.is_ok != other.is_ok:
            return False
        if self.is_ok:
            return self._value == other._value
        return self._error is other._error

    def __hash__(self) -> int:
        return hash((self.is_ok, id(self._error)))

    def __repr__(self) -> str:
        if self._error is None:
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"


def map_ok(f: Callable[[T], U], result: Result[T]) -> Result[U]:
    """
    Apply f to a successful value, propagating any error unchanged

    Args:
        f: Mapping function for the success value
        result: Result to map

    Returns:
        New Result holding f(value), or the original error
    """
    value, error = result.unwrap()
    if error is not None:
        return Result.err(error)
    return Result.ok(f(value))
