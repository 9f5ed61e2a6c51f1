# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Types of the target statement language.

Types are small frozen values: primitives, the null type, nominal class types
(keyed by their `ClassItem`, which compares by identity) and arrays. Subtyping
walks the declared supertype chain of class items; there are no generics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterator, List, Optional

if TYPE_CHECKING:
	from fuzzyfix.items import ClassItem


class Type:
	"""Base of all types."""

	__slots__ = ()


@dataclass(frozen=True)
class PrimType(Type):
	name: str

	def __str__(self) -> str:
		return self.name


@dataclass(frozen=True)
class NullType(Type):
	def __str__(self) -> str:
		return "null"


@dataclass(frozen=True)
class ClassType(Type):
	item: "ClassItem"

	def __str__(self) -> str:
		return self.item.name


@dataclass(frozen=True)
class ArrayType(Type):
	inner: Type

	def __str__(self) -> str:
		return f"{self.inner}[]"


BOOLEAN = PrimType("boolean")
BYTE = PrimType("byte")
SHORT = PrimType("short")
CHAR = PrimType("char")
INT = PrimType("int")
LONG = PrimType("long")
FLOAT = PrimType("float")
DOUBLE = PrimType("double")
VOID = PrimType("void")
NULL = NullType()

PRIMITIVES: Dict[str, PrimType] = {t.name: t for t in (BOOLEAN, BYTE, SHORT, CHAR, INT, LONG, FLOAT, DOUBLE, VOID)}

_NUMERIC: FrozenSet[PrimType] = frozenset({BYTE, SHORT, CHAR, INT, LONG, FLOAT, DOUBLE})
_INTEGRAL: FrozenSet[PrimType] = frozenset({BYTE, SHORT, CHAR, INT, LONG})

# Widening primitive conversions (JLS 5.1.2), excluding identity.
_WIDENS_TO: Dict[PrimType, FrozenSet[PrimType]] = {
	BYTE: frozenset({SHORT, INT, LONG, FLOAT, DOUBLE}),
	SHORT: frozenset({INT, LONG, FLOAT, DOUBLE}),
	CHAR: frozenset({INT, LONG, FLOAT, DOUBLE}),
	INT: frozenset({LONG, FLOAT, DOUBLE}),
	LONG: frozenset({FLOAT, DOUBLE}),
	FLOAT: frozenset({DOUBLE}),
}


def is_numeric(t: Type) -> bool:
	return t in _NUMERIC


def is_integral(t: Type) -> bool:
	return t in _INTEGRAL


def is_reference(t: Type) -> bool:
	return isinstance(t, (ClassType, ArrayType, NullType))


def supers(t: Type) -> List[Type]:
	"""`t` followed by every supertype reachable through bases and interfaces."""
	if not isinstance(t, ClassType):
		return [t]
	out: List[Type] = []
	seen = set()
	pending: List[ClassType] = [t]
	while pending:
		ct = pending.pop(0)
		if id(ct.item) in seen:
			continue
		seen.add(id(ct.item))
		out.append(ct)
		if ct.item.base is not None:
			pending.append(ct.item.base)
		pending.extend(ct.item.interfaces)
	return out


def iter_class_supers(t: Type) -> Iterator[ClassType]:
	for s in supers(t):
		if isinstance(s, ClassType):
			yield s


def is_subtype(lo: Type, hi: Type) -> bool:
	if lo == hi:
		return True
	if isinstance(lo, NullType):
		return isinstance(hi, (ClassType, ArrayType))
	if isinstance(lo, ClassType) and isinstance(hi, ClassType):
		return any(s.item is hi.item for s in iter_class_supers(lo))
	if isinstance(lo, ArrayType) and isinstance(hi, ArrayType):
		return is_reference(lo.inner) and is_subtype(lo.inner, hi.inner)
	return False


def is_assignable(src: Type, dst: Type) -> bool:
	"""Assignment conversion without boxing: identity, widening, reference subtyping."""
	if src == dst:
		return src != VOID
	if isinstance(src, PrimType) and isinstance(dst, PrimType):
		return dst in _WIDENS_TO.get(src, frozenset())
	return is_subtype(src, dst)


def binary_numeric_promotion(a: Type, b: Type) -> Optional[PrimType]:
	if not (is_numeric(a) and is_numeric(b)):
		return None
	for wide in (DOUBLE, FLOAT, LONG):
		if a == wide or b == wide:
			return wide
	return INT


def unary_numeric_promotion(a: Type) -> Optional[PrimType]:
	if not is_numeric(a):
		return None
	if a in (BYTE, SHORT, CHAR):
		return INT
	return a  # type: ignore[return-value]


def common_type(ts: List[Type]) -> Optional[Type]:
	"""The single type every element of `ts` can be assigned to, if there is one."""
	if not ts:
		return None
	for cand in ts:
		if all(is_assignable(t, cand) for t in ts):
			return cand
	return None


def show_type(t: Type) -> str:
	return str(t)


__all__ = [
	"Type",
	"PrimType",
	"NullType",
	"ClassType",
	"ArrayType",
	"BOOLEAN",
	"BYTE",
	"SHORT",
	"CHAR",
	"INT",
	"LONG",
	"FLOAT",
	"DOUBLE",
	"VOID",
	"NULL",
	"PRIMITIVES",
	"is_numeric",
	"is_integral",
	"is_reference",
	"supers",
	"iter_class_supers",
	"is_subtype",
	"is_assignable",
	"binary_numeric_promotion",
	"unary_numeric_promotion",
	"common_type",
	"show_type",
]
