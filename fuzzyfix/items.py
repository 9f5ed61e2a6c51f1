# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Named entities an environment can resolve a name to.

Items compare by identity (`eq=False`): two locals called `x` of the same type
are still different variables. Items only point at their declaring parent, so
a set of items forms a closed, acyclic value graph that can be shared between
environment snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from fuzzyfix.types import ClassType, PrimType, Type


@dataclass(frozen=True, eq=False, repr=False)
class Item:
	name: str

	def __repr__(self) -> str:
		return f"{type(self).__name__}({self.name!r})"


# Packages


@dataclass(frozen=True, eq=False, repr=False)
class PackageItem(Item):
	pass


# Types


@dataclass(frozen=True, eq=False, repr=False)
class TypeItem(Item):
	@property
	def raw(self) -> Type:
		raise NotImplementedError


@dataclass(frozen=True, eq=False, repr=False)
class PrimTypeItem(TypeItem):
	ty: PrimType

	@property
	def raw(self) -> Type:
		return self.ty


@dataclass(frozen=True, eq=False, repr=False)
class ClassItem(TypeItem):
	parent: Item  # PackageItem, or the outer ClassItem for nested classes
	base: Optional[ClassType] = None
	interfaces: Tuple[ClassType, ...] = ()
	is_interface: bool = False

	@property
	def raw(self) -> ClassType:
		return ClassType(self)


# Values


@dataclass(frozen=True, eq=False, repr=False)
class Value(Item):
	@property
	def ty(self) -> Type:
		raise NotImplementedError


@dataclass(frozen=True, eq=False, repr=False)
class LocalVariableItem(Value):
	var_type: Type
	is_final: bool = False

	@property
	def ty(self) -> Type:
		return self.var_type


@dataclass(frozen=True, eq=False, repr=False)
class ParameterItem(Value):
	var_type: Type
	is_final: bool = False

	@property
	def ty(self) -> Type:
		return self.var_type


@dataclass(frozen=True, eq=False, repr=False)
class FieldItem(Value):
	var_type: Type
	parent: ClassItem
	is_final: bool = False

	@property
	def ty(self) -> Type:
		return self.var_type


@dataclass(frozen=True, eq=False, repr=False)
class StaticFieldItem(Value):
	var_type: Type
	parent: ClassItem
	is_final: bool = False

	@property
	def ty(self) -> Type:
		return self.var_type


@dataclass(frozen=True, eq=False, repr=False)
class EnumConstantItem(Value):
	parent: ClassItem

	@property
	def ty(self) -> Type:
		return self.parent.raw


@dataclass(frozen=True, eq=False, repr=False)
class ThisItem(Value):
	"""`this` of an enclosing class; the indexer adds one per class we are inside."""

	parent: ClassItem

	@property
	def ty(self) -> Type:
		return self.parent.raw


# Callables


@dataclass(frozen=True, eq=False, repr=False)
class CallableItem(Item):
	@property
	def params(self) -> Tuple[Type, ...]:
		raise NotImplementedError

	@property
	def ret(self) -> Type:
		raise NotImplementedError


@dataclass(frozen=True, eq=False, repr=False)
class MethodItem(CallableItem):
	parent: ClassItem
	ret_type: Type
	param_types: Tuple[Type, ...] = ()

	@property
	def params(self) -> Tuple[Type, ...]:
		return self.param_types

	@property
	def ret(self) -> Type:
		return self.ret_type


@dataclass(frozen=True, eq=False, repr=False)
class StaticMethodItem(CallableItem):
	parent: ClassItem
	ret_type: Type
	param_types: Tuple[Type, ...] = ()

	@property
	def params(self) -> Tuple[Type, ...]:
		return self.param_types

	@property
	def ret(self) -> Type:
		return self.ret_type


@dataclass(frozen=True, eq=False, repr=False)
class ConstructorItem(CallableItem):
	parent: ClassItem
	param_types: Tuple[Type, ...] = ()

	@property
	def params(self) -> Tuple[Type, ...]:
		return self.param_types

	@property
	def ret(self) -> Type:
		return self.parent.raw


PlaceItem = Union[PackageItem, ClassItem, CallableItem]

# The unnamed package code lives in when nothing else is known.
LOCAL_PKG = PackageItem("")

_MEMBERS = (ClassItem, FieldItem, StaticFieldItem, EnumConstantItem, MethodItem, StaticMethodItem, ConstructorItem)


def is_member(item: Item) -> bool:
	"""True if the item is declared inside a class (nested classes included)."""
	if isinstance(item, ClassItem):
		return isinstance(item.parent, ClassItem)
	return isinstance(item, _MEMBERS)


__all__ = [
	"Item",
	"PackageItem",
	"TypeItem",
	"PrimTypeItem",
	"ClassItem",
	"Value",
	"LocalVariableItem",
	"ParameterItem",
	"FieldItem",
	"StaticFieldItem",
	"EnumConstantItem",
	"ThisItem",
	"CallableItem",
	"MethodItem",
	"StaticMethodItem",
	"ConstructorItem",
	"PlaceItem",
	"LOCAL_PKG",
	"is_member",
]
