"""
Option and Result carriers returned by the sequence core.

Option marks a possibly-missing element (``Some(value)`` or the single
``NOTHING``), so a sequence can hold ``None`` without ambiguity. Result
marks an operation that may fail as an ordinary value
(``Success(value)`` or ``Failure(cause)``).
"""

from dataclasses import dataclass
from typing import Callable, Generic, Tuple, Type, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


class UnwrapError(Exception):
    """Raised when unwrapping an absent Option or a failed Result."""
    pass


# --------- Option ----------

@dataclass(frozen=True)
class Some(Generic[T]):
    """A present element."""
    value: T

    def is_some(self) -> bool:
        return True

    def is_nothing(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Option[U]":
        return Some(fn(self.value))

    def __repr__(self) -> str:
        return f"Some({self.value!r})"


class _Nothing:
    """The absent element. There is exactly one instance, ``NOTHING``."""

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def is_some(self) -> bool:
        return False

    def is_nothing(self) -> bool:
        return True

    def unwrap(self):
        raise UnwrapError("unwrap() called on Nothing")

    def unwrap_or(self, default):
        return default

    def map(self, fn) -> "_Nothing":
        return self

    def __repr__(self) -> str:
        return "Nothing"

    def __reduce__(self):
        return (_Nothing, ())


NOTHING = _Nothing()

Option = Union[Some[T], _Nothing]


# --------- Result ----------

@dataclass(frozen=True)
class Success(Generic[T]):
    """A computation that finished with a value."""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        return Success(fn(self.value))


@dataclass(frozen=True)
class Failure:
    """A computation that stopped; ``cause`` is the exception that stopped it."""
    cause: BaseException

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self):
        raise UnwrapError(f"unwrap() called on Failure: {self.cause}") from self.cause

    def unwrap_or(self, default):
        return default

    def map(self, fn) -> "Failure":
        return self


Result = Union[Success[T], Failure]


def attempt(fn: Callable[[], T], *catch: Type[BaseException]) -> "Result[T]":
    """Run ``fn`` and wrap its outcome.

    Only exceptions of the ``catch`` types (``Exception`` when none are
    given) become a ``Failure``; anything else propagates.
    """
    handled: Tuple[Type[BaseException], ...] = catch or (Exception,)
    try:
        return Success(fn())
    except handled as e:
        return Failure(e)
