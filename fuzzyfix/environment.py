# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The name-resolution environment and the queries built on it.

An `Env` is an immutable snapshot of everything nameable at one program point:

  trie        name -> items index (exact + fuzzy lookup)
  things      name -> items with that name (in scope or merely declared)
  in_scope    item -> shadowing priority; lower is more local
  place       enclosing package / class / callable
  flags       whether `break`/`continue` have a target, active labels

Every operation returns a new `Env` that shares structure with the old one.
The external indexer produces the initial snapshot; this module only extends
it.

Queries answer "what could this name mean" as `Scored` values. They all funnel
through `Env.combined_query`: exact hits are the "no typo" reading, fuzzy hits
within the noise model's edit budget are the fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from fuzzyfix.core import config
from fuzzyfix.core import pr
from fuzzyfix.core.errors import InternalError
from fuzzyfix.core.pr import Prob
from fuzzyfix.core.scores import Alt, Message, Scored, fail, multiple, multiples, single
from fuzzyfix.core.trie import Trie, levenshtein_lookup
from fuzzyfix.items import (
	CallableItem,
	ClassItem,
	ConstructorItem,
	EnumConstantItem,
	FieldItem,
	Item,
	LOCAL_PKG,
	LocalVariableItem,
	MethodItem,
	PackageItem,
	PlaceItem,
	StaticFieldItem,
	StaticMethodItem,
	TypeItem,
	Value,
	is_member,
)
from fuzzyfix.types import ClassType, Type, VOID, iter_class_supers, is_subtype, show_type

A = TypeVar("A")


def _merge_things(base: Mapping[str, Tuple[Item, ...]], items: Iterable[Item]) -> Dict[str, Tuple[Item, ...]]:
	# Buckets are tuples in insertion order so every query is deterministic.
	merged = dict(base)
	for item in items:
		bucket = merged.get(item.name, ())
		if item not in bucket:
			merged[item.name] = bucket + (item,)
	return merged


@dataclass(frozen=True, eq=False)
class Env:
	trie: Trie[Item]
	things: Mapping[str, Tuple[Item, ...]]
	in_scope: Mapping[Item, int]
	place: PlaceItem = LOCAL_PKG
	inside_breakable: bool = False
	inside_continuable: bool = False
	labels: Tuple[str, ...] = field(default=())

	def __post_init__(self) -> None:
		if self.place is not LOCAL_PKG and self.place not in self.things.get(self.place.name, ()):
			raise InternalError(f"place {self.place.name!r} is not part of the environment")

	@classmethod
	def from_items(
		cls,
		items: Iterable[Item],
		in_scope: Optional[Mapping[Item, int]] = None,
		place: PlaceItem = LOCAL_PKG,
		inside_breakable: bool = False,
		inside_continuable: bool = False,
		labels: Iterable[str] = (),
	) -> "Env":
		"""Build an environment from scratch (indexers and tests)."""
		scope = dict(in_scope or {})
		# Items given only a priority are still nameable.
		every = list(dict.fromkeys(items))
		listed = set(every)
		every.extend(i for i in scope if i not in listed)
		return cls(
			trie=Trie((i.name, i) for i in every),
			things=_merge_things({}, every),
			in_scope=scope,
			place=place,
			inside_breakable=inside_breakable,
			inside_continuable=inside_continuable,
			labels=tuple(labels),
		)

	def _with(self, **changes: object) -> "Env":
		fields = dict(
			trie=self.trie,
			things=self.things,
			in_scope=self.in_scope,
			place=self.place,
			inside_breakable=self.inside_breakable,
			inside_continuable=self.inside_continuable,
			labels=self.labels,
		)
		fields.update(changes)
		return Env(**fields)  # type: ignore[arg-type]

	# Extension

	def add_objects(self, items: Iterable[Item], scope: Optional[Mapping[Item, int]] = None) -> "Env":
		# TODO: filter identical items declared twice under different objects (e.g. two copies of String)
		items = [i for i in dict.fromkeys(items) if i not in self.things.get(i.name, ())]
		in_scope = dict(self.in_scope)
		in_scope.update(scope or {})
		return self._with(
			trie=self.trie.add((i.name, i) for i in items),
			things=_merge_things(self.things, items),
			in_scope=in_scope,
		)

	def add_local_objects(self, items: Iterable[Item]) -> "Env":
		items = list(items)
		return self.add_objects(items, {i: 1 for i in items})

	def push_scope(self) -> "Env":
		"""Enter a block: everything visible moves one level further out."""
		return self._with(in_scope={i: n + 1 for i, n in self.in_scope.items()})

	def pop_scope(self) -> "Env":
		"""Leave a block: items declared inside it (priority 0) go out of scope."""
		return self._with(in_scope={i: n - 1 for i, n in self.in_scope.items() if n > 0})

	def move(
		self,
		place: PlaceItem,
		inside_breakable: bool,
		inside_continuable: bool,
		labels: Iterable[str],
	) -> "Env":
		return self._with(
			place=place,
			inside_breakable=inside_breakable,
			inside_continuable=inside_continuable,
			labels=tuple(labels),
		)

	def new_variable(self, name: str, ty: Type, is_final: bool = False) -> Scored[Tuple["Env", LocalVariableItem]]:
		if not isinstance(self.place, CallableItem):
			return fail("Cannot declare local variables outside of methods or constructors.")
		if any(isinstance(i, LocalVariableItem) and i.name == name for i in self.in_scope):
			return fail(lambda: f"Invalid new local variable {name}: already exists.")
		x = LocalVariableItem(name, ty, is_final)
		return single((self.add_objects([x], {x: 0}), x), pr.NEW_VARIABLE)

	def new_field(self, name: str, ty: Type, is_static: bool, is_final: bool = False) -> Scored[Tuple["Env", Value]]:
		place = self.place
		if not isinstance(place, ClassItem):
			return fail("Cannot declare fields outside of class or interface declarations.")
		if any(is_member(i) and getattr(i, "parent", None) is place and i.name == name for i in self.in_scope):
			return fail(lambda: f"Invalid new field {name}: a member with this name already exists.")
		if is_static:
			x: Value = StaticFieldItem(name, ty, place, is_final)
			p = pr.NEW_STATIC_FIELD
		else:
			x = FieldItem(name, ty, place, is_final)
			p = pr.NEW_FIELD
		return single((self.add_objects([x], {x: 0}), x), p)

	# Inspection

	def exact_local(self, name: str) -> LocalVariableItem:
		"""The one local variable called `name`. Fragile; meant for tests."""
		xs = [x for x in self.things.get(name, ()) if isinstance(x, LocalVariableItem)]
		if len(xs) == 1:
			return xs[0]
		if not xs:
			raise InternalError(f"No local variable {name}")
		raise InternalError(f"Multiple local variables {name}: {xs}")

	def item_in_scope(self, item: Item) -> bool:
		"""In scope, and not shadowed by a strictly more local item of the same name."""
		p = self.in_scope.get(item)
		if p is None:
			return False
		for other in self.things.get(item.name, ()):
			q = self.in_scope.get(other)
			if q is not None and q < p:
				return False
		return True

	# Queries

	def query(self, typed: str) -> List[Alt[Item]]:
		"""Fuzzy candidates for `typed`, weighted by the typo noise model."""
		e = pr.expected_errors(typed, config.TYPING_ERROR_RATE)
		minimum = config.MINIMUM_PROBABILITY
		max_errors = pr.poisson_quantile(e, minimum)
		out: List[Alt[Item]] = []
		for d, item in levenshtein_lookup(self.trie, typed, max_errors):
			p = pr.poisson_pdf(e, d)
			if p > minimum:
				out.append(Alt(p, item))
		return out

	def exact_query(self, typed: str) -> List[Alt[Item]]:
		e = pr.expected_errors(typed, config.TYPING_ERROR_RATE)
		p = pr.poisson_pdf(e, 0)
		return [Alt(p, i) for i in self.trie.get(typed)]

	def combined_query(
		self,
		typed: str,
		exact_prob: Prob,
		item_filter: Callable[[Item], Optional[A]],
		error: Message,
	) -> Scored[A]:
		"""
		Exact hits at `exact_prob`; if none survive `item_filter`, fuzzy hits at
		`(1 - exact_prob) * poisson_pdf(e, distance)`.

		`item_filter` maps an acceptable item to the query's result and returns
		None for items of the wrong role.
		"""

		def collect(alts: Iterable[Alt[Item]], weight: Callable[[Prob], Prob]) -> List[Alt[A]]:
			out: List[Alt[A]] = []
			for alt in alts:
				y = item_filter(alt.x)
				if y is not None:
					out.append(Alt(weight(alt.p), y))
			return out

		return multiples(
			collect(self.exact_query(typed), lambda p: exact_prob),
			lambda: collect(self.query(typed), lambda p: (1.0 - exact_prob) * p),
			error,
		)


# ---------------------------------------------------------------------------
# Role-specific queries. The env is passed explicitly.


def type_scores(name: str, env: Env) -> Scored[Type]:
	"""What could this name be, assuming it is a type?"""
	return env.combined_query(
		name,
		pr.EXACT_TYPE,
		lambda i: i.raw if isinstance(i, TypeItem) else None,
		lambda: f"Type {name} not found",
	)


def callable_scores(name: str, env: Env) -> Scored[CallableItem]:
	"""What could this name be, assuming it is a callable?"""
	return env.combined_query(
		name,
		pr.EXACT_CALLABLE,
		lambda i: i if isinstance(i, CallableItem) else None,
		lambda: f"Callable {name} not found",
	)


def value_scores(name: str, env: Env) -> Scored[Value]:
	"""What could this name be, assuming it is a value visible at this point?"""
	return env.combined_query(
		name,
		pr.EXACT_VALUE,
		lambda i: i if isinstance(i, Value) and env.item_in_scope(i) else None,
		lambda: f"Value {name} not found",
	)


def is_subitem(t: Type, item: TypeItem) -> bool:
	return is_subtype(t, item.raw)


def objects_of_item(t: TypeItem, env: Env) -> Scored[Value]:
	"""Every value whose type is `t` or a subtype of it."""
	alts = [
		Alt(pr.OBJECT_OF_ITEM, i)
		for bucket in env.things.values()
		for i in bucket
		if isinstance(i, Value) and is_subitem(i.ty, t)
	]
	return multiple(alts, lambda: f"Value of item {t.name} not found")


def member_in(f: Item, t: Type) -> bool:
	"""Is `f` declared by `t` or one of its supertypes?"""
	if not is_member(f):
		return False
	parent = getattr(f, "parent")
	return any(s.item is parent for s in iter_class_supers(t))


def type_in(f: TypeItem, t: Type) -> Type:
	"""Type of member class `f` seen from `t`; `f` must be a member of `t`."""
	if isinstance(f, ClassItem) and isinstance(f.parent, ClassItem):
		for s in iter_class_supers(t):
			if s.item is f.parent:
				return f.raw
	raise InternalError(f"type_in didn't find parent of {f.name} in {show_type(t)}")


def declares_name(i: Item, name: str, env: Env) -> bool:
	"""Does `i` declare a member called `name`?"""
	return any(is_member(f) and getattr(f, "parent") is i for f in env.things.get(name, ()))


def shadowed_in_subtype(i: Item, t: ClassType, env: Env) -> bool:
	"""Is member `i` hidden by a same-named member declared between `t` and i's parent?"""
	parent = getattr(i, "parent", None)
	if isinstance(parent, PackageItem):
		return False
	if isinstance(parent, Value):
		raise InternalError(f"container of {i.name} cannot be a value: {parent.name}")
	if not isinstance(parent, ClassItem):
		raise InternalError(f"{i.name} has no declaring class")
	if not is_subtype(t, parent.raw):
		raise InternalError(f"{show_type(t)} is not a subtype of {parent.name}")
	c = t.item
	if c is parent:
		return False
	if declares_name(c, i.name, env):
		return True
	return c.base is not None and shadowed_in_subtype(i, c.base, env)


def callable_field_scores(t: Type, name: str, env: Env) -> Scored[CallableItem]:
	"""Callables named `name` that are members of `t`."""
	return env.combined_query(
		name,
		pr.EXACT_CALLABLE_FIELD,
		lambda f: f if isinstance(f, (MethodItem, StaticMethodItem)) and member_in(f, t) else None,
		lambda: f"Type {show_type(t)} has no callable field {name}",
	)


def field_scores(t: Type, name: str, env: Env) -> Scored[Value]:
	"""Fields (static or not) named `name` that are members of `t`."""
	return env.combined_query(
		name,
		pr.EXACT_FIELD,
		lambda f: f if isinstance(f, (FieldItem, StaticFieldItem, EnumConstantItem)) and member_in(f, t) else None,
		lambda: f"Type {show_type(t)} has no field {name}",
	)


def static_field_scores(t: Type, name: str, env: Env) -> Scored[Value]:
	return env.combined_query(
		name,
		pr.EXACT_STATIC_FIELD,
		lambda f: f if isinstance(f, (StaticFieldItem, EnumConstantItem)) and member_in(f, t) else None,
		lambda: f"Type {show_type(t)} has no static field {name}",
	)


def type_field_scores(t: Type, name: str, env: Env) -> Scored[Type]:
	"""Nested types named `name` that are members of `t`."""
	return env.combined_query(
		name,
		pr.EXACT_TYPE_FIELD,
		lambda f: type_in(f, t) if isinstance(f, TypeItem) and member_in(f, t) else None,
		lambda: f"Type {show_type(t)} has no type field {name}",
	)


def constructor_scores(t: Type, env: Env) -> Scored[ConstructorItem]:
	"""Constructors of class type `t` (exact: the class is already resolved)."""
	if not isinstance(t, ClassType):
		return fail(lambda: f"Type {show_type(t)} cannot be instantiated")
	ctors = [c for c in env.things.get(t.item.name, ()) if isinstance(c, ConstructorItem) and c.parent is t.item]
	return multiple([Alt(pr.CERTAIN, c) for c in ctors], lambda: f"Type {show_type(t)} has no constructor")


def enclosing_class(env: Env) -> Optional[ClassItem]:
	place = env.place
	if isinstance(place, ClassItem):
		return place
	if isinstance(place, CallableItem):
		return getattr(place, "parent")
	return None


def return_type(env: Env) -> Scored[Type]:
	"""The return type of the ambient callable."""
	place = env.place
	if isinstance(place, (MethodItem, StaticMethodItem)):
		return single(place.ret, pr.CERTAIN)
	if isinstance(place, ConstructorItem):
		return single(VOID, pr.CERTAIN)
	if isinstance(place, PackageItem):
		return fail("Can't return from package scope")
	if isinstance(place, ClassItem):
		return fail("Can't return from class or interface scope")
	raise InternalError(f"impossible place {place!r}")


__all__ = [
	"Env",
	"type_scores",
	"callable_scores",
	"value_scores",
	"is_subitem",
	"objects_of_item",
	"member_in",
	"type_in",
	"declares_name",
	"shadowed_in_subtype",
	"callable_field_scores",
	"field_scores",
	"static_field_scores",
	"type_field_scores",
	"constructor_scores",
	"enclosing_class",
	"return_type",
]
