"""
Sequence generators built on ``unfold``.
"""

import math
from typing import Callable, Iterable, Tuple, TypeVar

from monads import NOTHING, Option, Some
from seq import Seq

T = TypeVar("T")
S = TypeVar("S")


def unfold(step: Callable[[S], Option[Tuple[T, S]]]) -> Callable[[S], Seq[T]]:
    """
    Corecursive constructor.

    ``step(state)`` returns ``Some((value, next_state))`` to emit ``value``
    and continue, or ``NOTHING`` to stop. The returned function takes the
    seed and builds the sequence; nothing runs until it is read.

        naturals = unfold(lambda n: Some((n, n + 1)))(0)
        countdown = unfold(lambda n: Some((n, n - 1)) if n > 0 else NOTHING)(5)
    """
    def build(seed: S) -> Seq[T]:
        def source():
            state = seed
            while True:
                item = step(state)
                if item.is_nothing():
                    return
                value, state = item.unwrap()
                yield value
        return Seq(source)
    return build


def range_(start: int, end=math.inf) -> Seq[int]:
    """Integers from ``start`` (inclusive) to ``end`` (exclusive); ``end`` may be infinite."""
    return unfold(lambda n: Some((n, n + 1)) if n < end else NOTHING)(start)


def _fib_step(pair: Tuple[int, int]):
    a, b = pair
    return Some((a, (b, a + b)))


# Shared, so every caller benefits from the same memoized prefix.
fib: Seq[int] = unfold(_fib_step)((0, 1))


def enumerate_(seq: Seq[T]) -> Seq[Tuple[int, T]]:
    """Pair every element with its index."""
    return range_(0).zip(seq)


def repeat(value: T, times: int) -> Seq[T]:
    return range_(0, times).map(lambda _: value)


def cycle(values: Iterable[T]) -> Seq[T]:
    """Infinite round-robin over ``values``; empty input gives an empty sequence."""
    items = list(values)

    def step(index: int):
        if not items:
            return NOTHING
        return Some((items[index], (index + 1) % len(items)))
    return unfold(step)(0)


def cycle_n(values: Iterable[T], n: int) -> Seq[T]:
    """``values`` repeated exactly ``n`` times, ``len(values) * n`` elements in all."""
    items = list(values)
    return range_(0, len(items) * n).map(lambda i: items[i % len(items)])
