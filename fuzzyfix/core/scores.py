# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Probability-ordered, lazily evaluated alternatives.

A `Scored[A]` is zero or more weighted alternatives in non-increasing
probability order:

  Empty              no alternatives, no reason kept
  Bad(error)         no alternatives, a diagnostic (only with error tracking)
  Best(p, x, rest)   the best remaining alternative, then a `LazyScored` tail

A `LazyScored[A]` is a suspended `Scored[A]` plus an eagerly known upper bound
`p` on everything it will ever produce. Two lazy streams can be merged by
comparing bounds, forcing a side only when its bound could beat the other
side's head. Forcing is memoised: the first force computes, later forces
return the cached value, and the suspended closure is dropped so consumed
prefixes can be collected.

Equal probabilities always prefer the left operand of `plus`; callers rely on
this for reproducible rankings.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from fuzzyfix.core import config
from fuzzyfix.core.errors import Error, NestError, OneError
from fuzzyfix.core.pr import Prob

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")
E = TypeVar("E")

# Error messages may be given as thunks so formatting is skipped when error
# tracking is off.
Message = Union[str, Callable[[], str]]


def _message(error: Message) -> str:
	return error() if callable(error) else error


@dataclass(frozen=True)
class Alt(Generic[A]):
	"""One candidate interpretation and its probability."""

	p: Prob
	x: A


@dataclass(frozen=True)
class Ok(Generic[A]):
	value: A

	def get(self) -> A:
		return self.value


@dataclass(frozen=True)
class Err:
	error: Error

	def get(self) -> Any:
		raise NoInterpretation(self.error)


Result = Union[Ok, Err]


class NoInterpretation(LookupError):
	"""Raised by `Err.get()`: the caller insisted on a value that does not exist."""

	def __init__(self, error: Error) -> None:
		super().__init__(error.prefixed(""))
		self.error = error


# ---------------------------------------------------------------------------
# Scored


class Scored(Generic[A]):
	"""Strict head of a probability-ordered stream. See module docstring."""

	__slots__ = ()

	def best(self) -> Result:
		raise NotImplementedError

	def all(self) -> Result:
		raise NotImplementedError

	def stream(self) -> Iterator[Alt[A]]:
		s: Scored[A] = self
		while isinstance(s, Best):
			yield Alt(s.p, s.x)
			s = s.rest.s

	def bias(self, q: Prob) -> "Scored[A]":
		raise NotImplementedError

	def map(self, f: Callable[[A], B]) -> "Scored[B]":
		raise NotImplementedError

	def plus(self, other: "LazyScored[A]") -> "Scored[A]":
		"""Either self or other; self is the left operand for ties."""
		raise NotImplementedError

	def bind(self, f: Callable[[A], "Scored[B]"]) -> "Scored[B]":
		"""`f` generates probabilities conditional on the chosen alternative."""
		raise NotImplementedError

	def product_with(self, other: "Scored[B]", f: Callable[[A, B], C]) -> "Scored[C]":
		"""Combine with an independent `other`; joint probability is the product."""
		raise NotImplementedError

	def filter(self, pred: Callable[[A], bool], error: Optional[Message] = None) -> "Scored[A]":
		raise NotImplementedError

	def is_empty(self) -> bool:
		return not isinstance(self, Best)

	def is_single(self) -> bool:
		return False


class _Empty(Scored[Any]):
	"""No options and no reason kept. Use the `EMPTY` singleton."""

	__slots__ = ()

	def best(self) -> Result:
		return Err(OneError("unknown failure"))

	def all(self) -> Result:
		return self.best()

	def bias(self, q: Prob) -> Scored[Any]:
		return self

	def map(self, f: Callable[[Any], B]) -> Scored[B]:
		return self

	def plus(self, other: "LazyScored[A]") -> Scored[A]:
		return other.s

	def bind(self, f: Callable[[Any], Scored[B]]) -> Scored[B]:
		return self

	def product_with(self, other: Scored[B], f: Callable[[Any, B], C]) -> Scored[C]:
		return self

	def filter(self, pred: Callable[[Any], bool], error: Optional[Message] = None) -> Scored[Any]:
		if error is not None and config.TRACK_ERRORS:
			return Bad(lambda: OneError(_message(error)))
		return self

	def __repr__(self) -> str:
		return "Empty"


EMPTY: Scored[Any] = _Empty()


class Bad(Scored[Any]):
	"""No options, with a diagnostic built on first use."""

	__slots__ = ("_error", "_thunk")

	def __init__(self, error: Union[Error, Callable[[], Error]]) -> None:
		if callable(error):
			self._error: Optional[Error] = None
			self._thunk: Optional[Callable[[], Error]] = error
		else:
			self._error = error
			self._thunk = None

	@property
	def error(self) -> Error:
		if self._error is None:
			thunk = self._thunk
			self._thunk = None
			self._error = thunk()  # type: ignore[misc]
		return self._error

	def best(self) -> Result:
		return Err(self.error)

	def all(self) -> Result:
		return Err(self.error)

	def bias(self, q: Prob) -> Scored[Any]:
		return self

	def map(self, f: Callable[[Any], B]) -> Scored[B]:
		return self

	def plus(self, other: "LazyScored[A]") -> Scored[A]:
		s = other.s
		if isinstance(s, Bad):
			return Bad(lambda: NestError("plus failed", (self.error, s.error)))
		if s is EMPTY:
			return self
		return s

	def bind(self, f: Callable[[Any], Scored[B]]) -> Scored[B]:
		return self

	def product_with(self, other: Scored[B], f: Callable[[Any, B], C]) -> Scored[C]:
		return self

	def filter(self, pred: Callable[[Any], bool], error: Optional[Message] = None) -> Scored[Any]:
		# Only a filter that explains itself keeps the old reason.
		return EMPTY if error is None else self

	def __repr__(self) -> str:
		return f"Bad({self.error.short!r})"


def _failed(bads: Sequence[Bad]) -> Scored[Any]:
	if not bads:
		return EMPTY
	if len(bads) == 1:
		return bads[0]
	return Bad(lambda: NestError("plus failed", tuple(b.error for b in bads)))


class Best(Scored[A]):
	"""The best remaining alternative `(p, x)`, then everything else in `rest`."""

	__slots__ = ("p", "x", "rest")

	def __init__(self, p: Prob, x: A, rest: "LazyScored[A]") -> None:
		self.p = p
		self.x = x
		self.rest = rest

	def best(self) -> Result:
		return Ok(self.x)

	def all(self) -> Result:
		return Ok(self.stream())

	def bias(self, q: Prob) -> Scored[A]:
		return Best(self.p * q, self.x, self.rest.bias(q))

	def map(self, f: Callable[[A], B]) -> Scored[B]:
		return Best(self.p, f(self.x), self.rest.map(f))

	def plus(self, other: "LazyScored[A]") -> Scored[A]:
		p = self.p
		if p >= other.p:
			return Best(p, self.x, self.rest.plus(other))
		s = other.s
		if not isinstance(s, Best):
			return self
		if p >= s.p:
			return Best(p, self.x, self.rest.plus(strict(s)))
		return Best(s.p, s.x, strict(self).plus(s.rest))

	def bind(self, f: Callable[[A], Scored[B]]) -> Scored[B]:
		# Alternatives whose continuation fails are skipped in a loop, so a
		# long run of failures costs no stack.
		s: Scored[A] = self
		bads: List[Bad] = []
		while isinstance(s, Best):
			fx = f(s.x).bias(s.p)
			if isinstance(fx, Best):
				return fx.plus(s.rest.bind(f))
			if isinstance(fx, Bad):
				bads.append(fx)
			s = s.rest.s
		if isinstance(s, Bad):
			bads.append(s)
		return _failed(bads)

	def product_with(self, other: Scored[B], f: Callable[[A, B], C]) -> Scored[C]:
		if not isinstance(other, Best):
			return other  # type: ignore[return-value]
		p, x, r = self.p, self.x, self.rest
		q, y, s = other.p, other.x, other.rest
		# (rest x head) + (head x rest) + (rest x rest), each bounded by p*q.
		rest = (
			r.map(lambda a: f(a, y)).bias(q)
			.plus(s.map(lambda b: f(x, b)).bias(p))
			.plus(r.product_with(s, f))
		)
		return Best(p * q, f(x, y), rest)

	def filter(self, pred: Callable[[A], bool], error: Optional[Message] = None) -> Scored[A]:
		s: Scored[A] = self
		while isinstance(s, Best):
			if pred(s.x):
				return Best(s.p, s.x, _filtered_rest(s.rest, pred))
			s = s.rest.s
		return s.filter(pred, error)

	def is_single(self) -> bool:
		return self.rest.s.is_empty()

	def __repr__(self) -> str:
		return f"Best({self.p!r}, {self.x!r}, ...)"


def _filtered_rest(rest: "LazyScored[A]", pred: Callable[[A], bool]) -> "LazyScored[A]":
	return delay(rest.p, lambda: rest.s.filter(pred))


# ---------------------------------------------------------------------------
# LazyScored


class LazyScored(Generic[A]):
	"""
	A suspended `Scored[A]` with an upper bound `p` on its probabilities.

	Invariant: `p >= ` every probability the forced value will produce.
	"""

	__slots__ = ("p", "_s")

	def __init__(self, p: Prob) -> None:
		self.p = p
		self._s: Optional[Scored[A]] = None

	@property
	def s(self) -> Scored[A]:
		s = self._s
		if s is None:
			s = self._s = self._force()
		return s

	def _force(self) -> Scored[A]:
		raise NotImplementedError

	@property
	def forced(self) -> bool:
		return self._s is not None

	def best(self) -> Result:
		return self.s.best()

	def all(self) -> Result:
		return self.s.all()

	def stream(self) -> Iterator[Alt[A]]:
		return self.s.stream()

	def bias(self, q: Prob) -> "LazyScored[A]":
		return _LazyBias(self, q)

	def map(self, f: Callable[[A], B]) -> "LazyScored[B]":
		return _LazyMap(self, f)

	def bind(self, f: Callable[[A], Scored[B]]) -> "LazyScored[B]":
		return _LazyBind(self, f)

	def plus(self, other: "LazyScored[A]") -> "LazyScored[A]":
		return _LazyPlus(self, other)

	def product_with(self, other: "LazyScored[B]", f: Callable[[A, B], C]) -> "LazyScored[C]":
		return delay(self.p * other.p, lambda: self.s.product_with(other.s, f))

	def filter(self, pred: Callable[[A], bool], error: Optional[Message] = None) -> "LazyScored[A]":
		return delay(self.p, lambda: self.s.filter(pred, error))

	def is_empty(self) -> bool:
		return self.s.is_empty()

	def is_single(self) -> bool:
		return self.s.is_single()


class _Strict(LazyScored[A]):
	__slots__ = ()

	def __init__(self, p: Prob, s: Scored[A]) -> None:
		super().__init__(p)
		self._s = s

	def _force(self) -> Scored[A]:  # pragma: no cover - always forced
		raise AssertionError("strict value has no suspension")


class _Lazy(LazyScored[A]):
	__slots__ = ("_thunk",)

	def __init__(self, p: Prob, thunk: Callable[[], Scored[A]]) -> None:
		super().__init__(p)
		self._thunk: Optional[Callable[[], Scored[A]]] = thunk

	def _force(self) -> Scored[A]:
		thunk = self._thunk
		self._thunk = None
		return thunk()  # type: ignore[misc]


class _LazyBiased(LazyScored[A]):
	__slots__ = ("_thunk", "_q")

	def __init__(self, q: Prob, thunk: Callable[[], Scored[A]]) -> None:
		super().__init__(q)
		self._q = q
		self._thunk: Optional[Callable[[], Scored[A]]] = thunk

	def _force(self) -> Scored[A]:
		thunk = self._thunk
		self._thunk = None
		return thunk().bias(self._q)  # type: ignore[misc]


class _LazyBias(LazyScored[A]):
	__slots__ = ("_x", "_q")

	def __init__(self, x: LazyScored[A], q: Prob) -> None:
		super().__init__(x.p * q)
		self._x: Optional[LazyScored[A]] = x
		self._q = q

	def _force(self) -> Scored[A]:
		x = self._x
		self._x = None
		return x.s.bias(self._q)  # type: ignore[union-attr]


class _LazyMap(LazyScored[B]):
	__slots__ = ("_x", "_f")

	def __init__(self, x: LazyScored[A], f: Callable[[A], B]) -> None:
		super().__init__(x.p)
		self._x: Optional[LazyScored[A]] = x
		self._f: Optional[Callable[[A], B]] = f

	def _force(self) -> Scored[B]:
		x, f = self._x, self._f
		self._x = self._f = None
		return x.s.map(f)  # type: ignore[union-attr, arg-type]


class _LazyPlus(LazyScored[A]):
	"""Lazy `x plus y`; `x` stays the left operand whatever the bounds say."""

	__slots__ = ("_x", "_y")

	def __init__(self, x: LazyScored[A], y: LazyScored[A]) -> None:
		super().__init__(max(x.p, y.p))
		self._x: Optional[LazyScored[A]] = x
		self._y: Optional[LazyScored[A]] = y

	def _force(self) -> Scored[A]:
		# Unwind a left-nested chain ((a + b) + c) + ... iteratively, caching
		# each inner node on the way back out.
		chain: List[_LazyPlus[A]] = [self]
		x = self._x
		while isinstance(x, _LazyPlus) and x._s is None:
			chain.append(x)
			x = x._x
		s = x.s  # type: ignore[union-attr]
		for node in reversed(chain):
			s = s.plus(node._y)  # type: ignore[arg-type]
			node._x = node._y = None
			node._s = s
		return s


class _LazyBind(LazyScored[B]):
	__slots__ = ("_x", "_f")

	def __init__(self, x: LazyScored[A], f: Callable[[A], Scored[B]]) -> None:
		super().__init__(x.p)
		self._x: Optional[LazyScored[A]] = x
		self._f: Optional[Callable[[A], Scored[B]]] = f

	def _force(self) -> Scored[B]:
		x, f = self._x, self._f
		self._x = self._f = None
		return x.s.bind(f)  # type: ignore[union-attr, arg-type]


# ---------------------------------------------------------------------------
# Constructors


def strict(s: Scored[A]) -> LazyScored[A]:
	"""Wrap an already computed `Scored` (bound = its head probability)."""
	return _Strict(s.p if isinstance(s, Best) else 0.0, s)


def delay(p: Prob, thunk: Callable[[], Scored[A]]) -> LazyScored[A]:
	"""Suspend `thunk`; `p` must bound everything it produces."""
	return _Lazy(p, thunk)


def biased(p: Prob, thunk: Callable[[], Scored[A]]) -> LazyScored[A]:
	"""Suspend `thunk` and bias its result by `p` once forced."""
	return _LazyBiased(p, thunk)


STRICT_EMPTY: LazyScored[Any] = _Strict(0.0, EMPTY)


def fail(error: Message) -> Scored[Any]:
	if config.TRACK_ERRORS:
		return Bad(lambda: OneError(_message(error)))
	return EMPTY


def known(x: A) -> Scored[A]:
	return Best(1.0, x, STRICT_EMPTY)


def single(x: A, p: Prob) -> Scored[A]:
	return Best(p, x, STRICT_EMPTY)


def uniform(p: Prob, xs: Iterable[A], error: Message) -> Scored[A]:
	"""One alternative per value at probability `p`, in the caller's order."""
	values = tuple(xs)
	if p == 0.0 or not values:
		return fail(error)

	def good(i: int) -> Scored[A]:
		if i == len(values):
			return EMPTY
		return Best(p, values[i], delay(p, lambda: good(i + 1)))

	return good(0)


def _heap_of(alts: Iterable[Alt[A]]) -> List[Tuple[Prob, int, A]]:
	# Heap keyed on (-p, arrival order): pops the most probable first and keeps
	# the caller's order among equal probabilities.
	heap = [(-alt.p, i, alt.x) for i, alt in enumerate(alts) if alt.p > 0.0]
	heapq.heapify(heap)
	return heap


def _drain(heap: List[Tuple[Prob, int, A]]) -> Scored[A]:
	if not heap:
		return EMPTY
	neg_p, _, x = heapq.heappop(heap)
	p = -neg_p
	return Best(p, x, delay(p, lambda: _drain(heap)))


def multiple(alts: Iterable[Alt[A]], error: Message) -> Scored[A]:
	"""
	Order an unordered list of alternatives lazily.

	Zero-probability alternatives are dropped. Only the head is selected up
	front; the remaining order is established as the stream is consumed.
	"""
	heap = _heap_of(alts)
	if not heap:
		return fail(error)
	return _drain(heap)


def multiple_good(alts: Iterable[Alt[A]]) -> Scored[A]:
	"""`multiple` whose failure is always the cheap `Empty`."""
	return _drain(_heap_of(alts))


def multiples(first: Iterable[Alt[A]], fallback: Callable[[], Iterable[Alt[A]]], error: Message) -> Scored[A]:
	"""`multiple(first)`, or `multiple(fallback())` if `first` has nothing usable."""
	heap = _heap_of(first)
	if not heap:
		heap = _heap_of(fallback())
		if not heap:
			return fail(error)
	return _drain(heap)


# ---------------------------------------------------------------------------
# Products


def _pair(a: A, b: B) -> Tuple[A, B]:
	return (a, b)


def product(a: Scored[A], b: Scored[B], *more: Scored[Any]) -> Scored[Tuple[Any, ...]]:
	"""Independent product of two or more scored values as a flat tuple."""
	acc: Scored[Tuple[Any, ...]] = a.product_with(b, _pair)
	for c in more:
		acc = acc.product_with(c, lambda ab, z: ab + (z,))
	return acc


def product_with(f: Callable[..., C], *scores: Scored[Any]) -> Scored[C]:
	if not scores:
		return known(f())
	if len(scores) == 1:
		return scores[0].map(f)
	return product(*scores).map(lambda xs: f(*xs))


def product_list(xs: Sequence[Scored[A]]) -> Scored[List[A]]:
	"""All-of product of a list; the result keeps the list's order."""
	acc: Scored[Tuple[A, ...]] = known(())
	for sx in reversed(xs):
		acc = sx.product_with(acc, lambda x, rest: (x,) + rest)
	return acc.map(list)


def product_option(x: Optional[Scored[A]]) -> Scored[Optional[A]]:
	if x is None:
		return known(None)
	return x


def product_fold_left(e: E, fs: Sequence[Callable[[E], Scored[Tuple[E, A]]]]) -> Scored[Tuple[E, List[A]]]:
	"""
	Thread a state through dependent scored steps.

	Each step sees the state produced by the previous chosen alternative, so
	this is a chain of binds, not an independent product.
	"""

	def go(ex: E, i: int) -> Scored[Tuple[E, Tuple[A, ...]]]:
		if i == len(fs):
			return known((ex, ()))
		return fs[i](ex).bind(lambda ea: go(ea[0], i + 1).map(lambda rs: (rs[0], (ea[1],) + rs[1])))

	return go(e, 0).map(lambda r: (r[0], list(r[1])))


def thread(xs: Iterable[A], f: Callable[[A], Scored[B]]) -> Scored[List[B]]:
	return product_list([f(x) for x in xs])


def thread_option(x: Optional[A], f: Callable[[A], Scored[B]]) -> Scored[Optional[B]]:
	return product_option(None if x is None else f(x))


def take(s: Union[Scored[A], LazyScored[A]], n: int) -> List[Alt[A]]:
	"""The first `n` alternatives (fewer if the stream ends)."""
	return list(itertools.islice(s.stream(), n))


__all__ = [
	"Alt",
	"Ok",
	"Err",
	"Result",
	"NoInterpretation",
	"Scored",
	"LazyScored",
	"Best",
	"Bad",
	"EMPTY",
	"STRICT_EMPTY",
	"Message",
	"strict",
	"delay",
	"biased",
	"fail",
	"known",
	"single",
	"uniform",
	"multiple",
	"multiple_good",
	"multiples",
	"product",
	"product_with",
	"product_list",
	"product_option",
	"product_fold_left",
	"thread",
	"thread_option",
	"take",
]
