# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Denotations: resolved, typed meanings of statements and expressions.

These are what the driver ranks. They refer to items, never to names, so two
denotations are equal exactly when they mean the same thing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from fuzzyfix.items import (
	CallableItem,
	ConstructorItem,
	FieldItem,
	LocalVariableItem,
	ParameterItem,
	StaticFieldItem,
	StaticMethodItem,
	ThisItem,
	Value,
)
from fuzzyfix.types import (
	ArrayType,
	BOOLEAN,
	CHAR,
	DOUBLE,
	FLOAT,
	INT,
	LONG,
	NULL,
	Type,
)


class ExpDen:
	"""Base of expression denotations."""

	__slots__ = ()

	@property
	def ty(self) -> Type:
		raise NotImplementedError


# Literals


@dataclass(frozen=True)
class IntLit(ExpDen):
	value: int
	text: str

	@property
	def ty(self) -> Type:
		return INT


@dataclass(frozen=True)
class LongLit(ExpDen):
	value: int
	text: str

	@property
	def ty(self) -> Type:
		return LONG


@dataclass(frozen=True)
class FloatLit(ExpDen):
	value: float
	text: str

	@property
	def ty(self) -> Type:
		return FLOAT


@dataclass(frozen=True)
class DoubleLit(ExpDen):
	value: float
	text: str

	@property
	def ty(self) -> Type:
		return DOUBLE


@dataclass(frozen=True)
class CharLit(ExpDen):
	value: str
	text: str

	@property
	def ty(self) -> Type:
		return CHAR


@dataclass(frozen=True)
class StringLit(ExpDen):
	value: str
	text: str
	string_type: Type

	@property
	def ty(self) -> Type:
		return self.string_type


@dataclass(frozen=True)
class BooleanLit(ExpDen):
	value: bool

	@property
	def ty(self) -> Type:
		return BOOLEAN


@dataclass(frozen=True)
class NullLit(ExpDen):
	@property
	def ty(self) -> Type:
		return NULL


# Names


@dataclass(frozen=True)
class LocalVariableExp(ExpDen):
	item: LocalVariableItem

	@property
	def ty(self) -> Type:
		return self.item.ty


@dataclass(frozen=True)
class ParameterExp(ExpDen):
	item: ParameterItem

	@property
	def ty(self) -> Type:
		return self.item.ty


@dataclass(frozen=True)
class ThisExp(ExpDen):
	item: ThisItem

	@property
	def ty(self) -> Type:
		return self.item.ty


@dataclass(frozen=True)
class FieldExp(ExpDen):
	"""Instance field; `obj` is None for an implicit `this`."""

	obj: Optional[ExpDen]
	field: FieldItem

	@property
	def ty(self) -> Type:
		return self.field.ty


@dataclass(frozen=True)
class StaticFieldExp(ExpDen):
	field: Value  # StaticFieldItem or EnumConstantItem

	@property
	def ty(self) -> Type:
		return self.field.ty


# Calls


@dataclass(frozen=True)
class MethodCallExp(ExpDen):
	"""Instance method call; `obj` is None for an implicit `this`."""

	obj: Optional[ExpDen]
	method: CallableItem
	args: Tuple[ExpDen, ...]

	@property
	def ty(self) -> Type:
		return self.method.ret


@dataclass(frozen=True)
class StaticMethodCallExp(ExpDen):
	method: StaticMethodItem
	args: Tuple[ExpDen, ...]

	@property
	def ty(self) -> Type:
		return self.method.ret


@dataclass(frozen=True)
class NewExp(ExpDen):
	ctor: ConstructorItem
	args: Tuple[ExpDen, ...]

	@property
	def ty(self) -> Type:
		return self.ctor.ret


# Operators


@dataclass(frozen=True)
class IndexExp(ExpDen):
	array: ExpDen
	index: ExpDen

	@property
	def ty(self) -> Type:
		t = self.array.ty
		assert isinstance(t, ArrayType)
		return t.inner


@dataclass(frozen=True)
class UnaryExp(ExpDen):
	op: str
	exp: ExpDen
	result: Type

	@property
	def ty(self) -> Type:
		return self.result


@dataclass(frozen=True)
class BinaryExp(ExpDen):
	op: str
	left: ExpDen
	right: ExpDen
	result: Type

	@property
	def ty(self) -> Type:
		return self.result


@dataclass(frozen=True)
class AssignExp(ExpDen):
	"""`left op= right`; `op` is None for plain assignment."""

	op: Optional[str]
	left: ExpDen
	right: ExpDen

	@property
	def ty(self) -> Type:
		return self.left.ty


@dataclass(frozen=True)
class ArrayInitExp(ExpDen):
	elems: Tuple[ExpDen, ...]
	elem_type: Type

	@property
	def ty(self) -> Type:
		return ArrayType(self.elem_type)


# Statements


class StmtDen:
	"""Base of statement denotations."""

	__slots__ = ()


@dataclass(frozen=True)
class EmptyStmt(StmtDen):
	pass


@dataclass(frozen=True)
class ExprStmt(StmtDen):
	exp: ExpDen


@dataclass(frozen=True)
class VarStmt(StmtDen):
	var_type: Type
	decls: Tuple[Tuple[LocalVariableItem, Optional[ExpDen]], ...]


@dataclass(frozen=True)
class ReturnStmt(StmtDen):
	exp: Optional[ExpDen]


@dataclass(frozen=True)
class BreakStmt(StmtDen):
	label: Optional[str]


@dataclass(frozen=True)
class ContinueStmt(StmtDen):
	label: Optional[str]


@dataclass(frozen=True)
class BlockStmt(StmtDen):
	stmts: Tuple[StmtDen, ...]


@dataclass(frozen=True)
class IfStmt(StmtDen):
	cond: ExpDen
	then: StmtDen
	orelse: Optional[StmtDen]


@dataclass(frozen=True)
class WhileStmt(StmtDen):
	cond: ExpDen
	body: StmtDen


@dataclass(frozen=True)
class LabeledStmt(StmtDen):
	label: str
	stmt: StmtDen


Den = Union[ExpDen, StmtDen]


def is_lvalue(e: ExpDen) -> bool:
	if isinstance(e, (LocalVariableExp, ParameterExp)):
		return not e.item.is_final
	if isinstance(e, FieldExp):
		return not e.field.is_final
	if isinstance(e, StaticFieldExp):
		return isinstance(e.field, StaticFieldItem) and not e.field.is_final
	return isinstance(e, IndexExp)


def is_statement_exp(e: ExpDen) -> bool:
	"""Expressions that may stand alone as a statement."""
	return isinstance(e, (AssignExp, MethodCallExp, StaticMethodCallExp, NewExp))


def value_exp(item: Value) -> ExpDen:
	"""Denotation of a bare reference to `item` (implicit `this` for fields)."""
	if isinstance(item, LocalVariableItem):
		return LocalVariableExp(item)
	if isinstance(item, ParameterItem):
		return ParameterExp(item)
	if isinstance(item, ThisItem):
		return ThisExp(item)
	if isinstance(item, FieldItem):
		return FieldExp(None, item)
	return StaticFieldExp(item)


__all__ = [
	"ExpDen",
	"IntLit",
	"LongLit",
	"FloatLit",
	"DoubleLit",
	"CharLit",
	"StringLit",
	"BooleanLit",
	"NullLit",
	"LocalVariableExp",
	"ParameterExp",
	"ThisExp",
	"FieldExp",
	"StaticFieldExp",
	"MethodCallExp",
	"StaticMethodCallExp",
	"NewExp",
	"IndexExp",
	"UnaryExp",
	"BinaryExp",
	"AssignExp",
	"ArrayInitExp",
	"StmtDen",
	"EmptyStmt",
	"ExprStmt",
	"VarStmt",
	"ReturnStmt",
	"BreakStmt",
	"ContinueStmt",
	"BlockStmt",
	"IfStmt",
	"WhileStmt",
	"LabeledStmt",
	"Den",
	"is_lvalue",
	"is_statement_exp",
	"value_exp",
]
