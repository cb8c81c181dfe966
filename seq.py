"""
Lazy, immutable, memoizing sequences.

A ``Seq`` is built from a source factory: a zero-argument callable that
returns a fresh iterator over the logical elements every time it is
called. Elements are computed on demand and cached per instance, so
indexed access and iteration share the work. Every combinator returns a
new ``Seq`` with its own cache and never touches the sequence it was
derived from.

Sequences may be infinite. Operations that have to walk the whole
sequence come in two flavours: a capped one returning a ``Result``
(``length``, ``reverse``, ``to_list``) and an ``*_unsafe`` twin that
returns the raw value and trusts the caller to bound the input.
"""

import functools
import logging
import random
from collections import deque
from collections.abc import Sequence as SequenceABC
from typing import (
    Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple,
    TypeVar, Union,
)

from config import get_settings
from monads import NOTHING, Option, Result, Some, attempt

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")

_MISSING = object()


class InvalidSizeError(ValueError):
    """Raised when a chunk, window or page size is not a positive number."""
    pass


class SequenceTooLargeError(Exception):
    """Raised inside a bounded walk once the cap is exceeded."""

    def __init__(self, operation: str, limit: int):
        super().__init__(f"Cannot {operation} a sequence with more than {limit} elements")
        self.operation = operation
        self.limit = limit


def _require_positive(name: str, value) -> None:
    if value <= 0:
        raise InvalidSizeError(f"{name} must be greater than 0, got {value}")


def _walk(seq: "Seq[T]", start: int = 0, stop=None) -> Iterator[T]:
    """Yield ``seq[start:stop]`` through indexed access."""
    index = start
    while stop is None or index < stop:
        item = seq.get(index)
        if item.is_nothing():
            return
        yield item.value
        index += 1


class Seq(Generic[T]):
    """
    A lazy sequence over a re-enterable source factory.

    ``cache`` holds every element computed so far. It only ever grows and
    a filled slot is never rewritten, so ``get(i)`` is stable for the
    lifetime of the instance.
    """

    def __init__(self, source: Callable[[], Iterable[T]]):
        self._source = source
        self._cache: List[T] = []
        # live cursor and the position it has reached
        self._cursor: Optional[Tuple[Iterator[T], int]] = None
        self._exhausted = False

    # --------- core engine ----------
    def get(self, index: int) -> Option[T]:
        """Element at ``index``, evaluating the source only as far as needed."""
        if index < 0:
            return NOTHING
        if index >= len(self._cache) and not self._exhausted:
            self._fill(index)
        if index < len(self._cache):
            return Some(self._cache[index])
        return NOTHING

    def _fill(self, index: int) -> None:
        # detached while advancing; a nested get() on this sequence starts its own cursor
        state, self._cursor = self._cursor, None
        if state is None:
            cursor, position = iter(self._source()), 0
        else:
            cursor, position = state

        while len(self._cache) <= index:
            try:
                value = next(cursor)
            except StopIteration:
                if position >= len(self._cache):
                    self._exhausted = True
                return
            position += 1
            # positions below len(cache) are fast-forwarded, not re-stored
            if position > len(self._cache):
                self._cache.append(value)

        self._cursor = (cursor, position)

    def __iter__(self) -> Iterator[T]:
        return _walk(self)

    def values(self) -> Iterator[T]:
        return _walk(self)

    def head(self) -> Option[T]:
        return self.get(0)

    def tail(self) -> "Seq[T]":
        return self.drop(1)

    @property
    def cache_size(self) -> int:
        """Number of elements memoized so far"""
        return len(self._cache)

    def __getitem__(self, key):
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("Seq slicing does not support a step")
            return self.slice(key.start or 0, key.stop)
        item = self.get(key)
        if item.is_nothing():
            raise IndexError(f"Seq index out of range: {key}")
        return item.value

    def __repr__(self) -> str:
        shown = ", ".join(repr(value) for value in self._cache)
        if self._exhausted:
            return f"Seq([{shown}])"
        return f"Seq([{shown}, ...])" if shown else "Seq([...])"

    # --------- structural combinators (lazy) ----------
    def map(self, fn: Callable[..., U], with_index: bool = False) -> "Seq[U]":
        """Apply ``fn`` to every element; ``with_index`` also passes the position."""
        def source():
            for index, value in enumerate(self):
                yield fn(value, index) if with_index else fn(value)
        return Seq(source)

    def filter(self, pred: Callable[[T], bool]) -> "Seq[T]":
        return Seq(lambda: (value for value in self if pred(value)))

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "Seq[U]":
        """Expand each element into ``fn(element)``, exhausting it before moving on."""
        def source():
            for value in self:
                yield from fn(value)
        return Seq(source)

    def zip(self, other: Union["Seq[U]", Sequence[U]]) -> "Seq[Tuple[T, U]]":
        """Pair elements positionally, stopping at the first exhausted side."""
        other = _as_seq(other)

        def source():
            index = 0
            while True:
                left = self.get(index)
                if left.is_nothing():
                    return
                right = other.get(index)
                if right.is_nothing():
                    return
                yield (left.value, right.value)
                index += 1
        return Seq(source)

    def take(self, n) -> "Seq[T]":
        limit = max(0, n)
        return Seq(lambda: _walk(self, 0, limit))

    def drop(self, n: int) -> "Seq[T]":
        offset = max(0, n)
        return Seq(lambda: _walk(self, offset))

    def slice(self, start: int, end: Optional[int] = None) -> "Seq[T]":
        """
        Elements from ``start`` up to (not including) ``end``.

        A missing ``end`` runs to exhaustion. Negative bounds and
        ``start > end`` give an empty sequence rather than an error.
        """
        if start < 0 or (end is not None and end < start):
            return self.take(0)
        dropped = self.drop(start)
        return dropped if end is None else dropped.take(end - start)

    def append(self, value: T) -> "Seq[T]":
        def source():
            yield from self
            yield value
        return Seq(source)

    def prepend(self, value: T) -> "Seq[T]":
        def source():
            yield value
            yield from self
        return Seq(source)

    def insert_at(self, index: int, value: T) -> "Seq[T]":
        """Insert before position ``index``; ``index == length`` appends, anything else out of range is a no-op."""
        def source():
            position = 0
            for current in self:
                if position == index:
                    yield value
                yield current
                position += 1
            if position == index:
                yield value
        return Seq(source)

    def remove_at(self, index: int) -> "Seq[T]":
        def source():
            for position, current in enumerate(self):
                if position != index:
                    yield current
        return Seq(source)

    def replace_at(self, index: int, value: T) -> "Seq[T]":
        def source():
            for position, current in enumerate(self):
                yield value if position == index else current
        return Seq(source)

    def page(self, page_number: int, page_size: int) -> "Seq[T]":
        """Get a specific page of results (1-indexed)"""
        if page_number < 1:
            raise ValueError("Page number must be >= 1")
        _require_positive("page_size", page_size)
        offset = (page_number - 1) * page_size
        return self.slice(offset, offset + page_size)

    # --------- derived lazy operations ----------
    def distinct(self) -> "Seq[T]":
        return self.distinct_by(lambda value: value)

    def distinct_by(self, key_fn: Callable[[T], K]) -> "Seq[T]":
        """Keep the first element for every key. Keys must be hashable."""
        def source():
            seen = set()
            for value in self:
                key = key_fn(value)
                if key not in seen:
                    seen.add(key)
                    yield value
        return Seq(source)

    def scan(self, fn: Callable[[U, T], U], initial: U) -> "Seq[U]":
        """Running fold; one output per input, ``initial`` itself is not emitted."""
        def source():
            acc = initial
            for value in self:
                acc = fn(acc, value)
                yield acc
        return Seq(source)

    def chunk(self, size: int) -> "Seq[Seq[T]]":
        """Consecutive groups of ``size``; the last group may be shorter."""
        _require_positive("Chunk size", size)

        def source():
            bucket = []
            for value in self:
                bucket.append(value)
                if len(bucket) == size:
                    yield from_array(bucket)
                    bucket = []
            if bucket:
                yield from_array(bucket)
        return Seq(source)

    def chunk_by(self, key_fn: Callable[[T], K]) -> "Seq[Seq[T]]":
        """Group runs of adjacent elements that share a key."""
        def source():
            bucket = []
            current = None
            for value in self:
                key = key_fn(value)
                if bucket and key != current:
                    yield from_array(bucket)
                    bucket = []
                bucket.append(value)
                current = key
            if bucket:
                yield from_array(bucket)
        return Seq(source)

    def window(self, size: int) -> "Seq[Seq[T]]":
        """Sliding windows of exactly ``size`` elements, stepping by one."""
        _require_positive("Window size", size)

        def source():
            buffer = deque(maxlen=size)
            for value in self:
                buffer.append(value)
                if len(buffer) == size:
                    yield from_array(buffer)
        return Seq(source)

    def pairwise(self) -> "Seq[Tuple[T, T]]":
        def source():
            previous = _MISSING
            for value in self:
                if previous is not _MISSING:
                    yield (previous, value)
                previous = value
        return Seq(source)

    def intersperse(self, separator: T) -> "Seq[T]":
        def source():
            first = True
            for value in self:
                if not first:
                    yield separator
                yield value
                first = False
        return Seq(source)

    def slice_by(self, pred: Callable[[T], bool]) -> "Seq[Seq[T]]":
        """
        Split on every element matching ``pred``; the boundary itself is dropped.

        A leading boundary yields an empty first slice, a trailing one does
        not add an empty last slice, and an empty source yields no slices.
        """
        def source():
            bucket = []
            for value in self:
                if pred(value):
                    yield from_array(bucket)
                    bucket = []
                else:
                    bucket.append(value)
            if bucket:
                yield from_array(bucket)
        return Seq(source)

    def flatten(self) -> "Seq[Any]":
        """Concatenate a sequence of iterables, one level deep."""
        def source():
            for inner in self:
                yield from inner
        return Seq(source)

    # --------- aggregate operations (force evaluation) ----------
    def reduce(self, fn: Callable[[U, T], U], initial: U) -> U:
        return functools.reduce(fn, self, initial)

    def for_each(self, fn: Callable[[T], Any]) -> None:
        for value in self:
            fn(value)

    def find(self, pred: Callable[[T], bool]) -> Option[T]:
        for value in self:
            if pred(value):
                return Some(value)
        return NOTHING

    def last(self) -> Option[T]:
        result = NOTHING
        for value in self:
            result = Some(value)
        return result

    def is_empty(self) -> bool:
        return self.get(0).is_nothing()

    def some(self, pred: Callable[[T], bool]) -> bool:
        return any(pred(value) for value in self)

    def every(self, pred: Callable[[T], bool]) -> bool:
        return all(pred(value) for value in self)

    def none(self, pred: Callable[[T], bool]) -> bool:
        return not self.some(pred)

    def count(self, pred: Optional[Callable[[T], bool]] = None) -> int:
        if pred is None:
            return sum(1 for _ in self)
        return sum(1 for value in self if pred(value))

    def group_by(self, key_fn: Callable[[T], K]) -> Dict[K, "Seq[T]"]:
        """Group elements by key, keeping first-seen key order and element order."""
        groups: Dict[K, List[T]] = {}
        for value in self:
            groups.setdefault(key_fn(value), []).append(value)
        logger.debug(f"group_by produced {len(groups)} groups")
        return {key: from_array(values) for key, values in groups.items()}

    def partition(self, pred: Callable[[T], bool]) -> Tuple["Seq[T]", "Seq[T]"]:
        matching, rest = [], []
        for value in self:
            (matching if pred(value) else rest).append(value)
        return from_array(matching), from_array(rest)

    def starts_with(self, prefix: Union["Seq[T]", Sequence[T]]) -> bool:
        """Stops as soon as the prefix is confirmed or refuted."""
        mine = iter(self)
        for expected in _as_seq(prefix):
            actual = next(mine, _MISSING)
            if actual is _MISSING or actual != expected:
                return False
        return True

    def ends_with(self, suffix: Union["Seq[T]", Sequence[T]]) -> bool:
        """Materializes both sides; never returns on an infinite sequence."""
        full = list(self)
        end = list(_as_seq(suffix))
        if len(end) > len(full):
            return False
        return full[len(full) - len(end):] == end

    def shuffle(self, rng: Optional[random.Random] = None) -> "Seq[T]":
        """Materialize and return a uniformly permuted copy (Fisher-Yates)."""
        items = list(self)
        (rng or random).shuffle(items)
        logger.debug(f"Shuffled {len(items)} elements")
        return from_array(items)

    # --------- bounded operations ----------
    def length(self, max_size: Optional[int] = None) -> Result[int]:
        return _bounded("measure", max_size, lambda walk: sum(1 for _ in walk), self)

    def length_unsafe(self) -> int:
        return sum(1 for _ in self)

    def reverse(self, max_size: Optional[int] = None) -> "Result[Seq[T]]":
        return _bounded("reverse", max_size, lambda walk: from_array(list(walk)[::-1]), self)

    def reverse_unsafe(self) -> "Seq[T]":
        return from_array(list(self)[::-1])

    def to_list(self, max_size: Optional[int] = None) -> Result[List[T]]:
        return to_list(self, max_size)

    def to_list_unsafe(self) -> List[T]:
        return to_list_unsafe(self)


# --------- bounded walk helpers ----------
def _resolve_cap(max_size: Optional[int]) -> int:
    if max_size is None:
        return get_settings().max_size
    return max_size


def _capped(seq: Seq[T], limit: int, operation: str) -> Iterator[T]:
    for count, value in enumerate(seq, 1):
        if count > limit:
            raise SequenceTooLargeError(operation, limit)
        yield value


def _bounded(operation: str, max_size: Optional[int], compute: Callable[[Iterator[T]], U],
             seq: Seq[T]) -> Result[U]:
    limit = _resolve_cap(max_size)
    result = attempt(lambda: compute(_capped(seq, limit, operation)), SequenceTooLargeError)
    if result.is_failure():
        logger.debug(f"{operation} stopped at cap {limit}")
    return result


# --------- constructors ----------
def create(source: Callable[[], Iterable[T]]) -> Seq[T]:
    """Create a sequence from a factory returning a fresh iterator per call."""
    return Seq(source)


def from_array(values: Iterable[T]) -> Seq[T]:
    """Sequence over a shallow copy of ``values`` taken now."""
    snapshot = list(values)
    return Seq(lambda: iter(snapshot))


_EMPTY: Seq[Any] = Seq(lambda: iter(()))


def empty() -> Seq[Any]:
    """The single shared empty sequence."""
    return _EMPTY


def _as_seq(values) -> Seq[Any]:
    if isinstance(values, Seq):
        return values
    if isinstance(values, SequenceABC):
        return from_array(values)
    raise TypeError(f"Expected a Seq or a sized sequence, got {type(values).__name__}")


# --------- module-level operations ----------
def to_list(seq: Seq[T], max_size: Optional[int] = None) -> Result[List[T]]:
    """Materialize into a list, failing once more than ``max_size`` elements are seen."""
    return _bounded("convert", max_size, list, seq)


def to_list_unsafe(seq: Seq[T]) -> List[T]:
    return list(seq)


def flatten(seq: Seq[Iterable[T]]) -> Seq[T]:
    return seq.flatten()


def pairwise(seq: Seq[T]) -> Seq[Tuple[T, T]]:
    return seq.pairwise()


def distinct_by(seq: Seq[T], key_fn: Callable[[T], K]) -> Seq[T]:
    return seq.distinct_by(key_fn)


def shuffle(seq: Seq[T], rng: Optional[random.Random] = None) -> Seq[T]:
    return seq.shuffle(rng)


def intersperse(seq: Seq[T], separator: T) -> Seq[T]:
    return seq.intersperse(separator)


def slice_by(seq: Seq[T], pred: Callable[[T], bool]) -> Seq[Seq[T]]:
    return seq.slice_by(pred)
