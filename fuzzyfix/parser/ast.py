# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax trees for statement fragments.

Nodes carry names as typed, never resolved items, and no source locations: two
trees are equal exactly when they read the fragment the same way. Children are
tuples so trees are hashable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

# Types


class TypeAst:
	__slots__ = ()


@dataclass(frozen=True)
class TypeNameAst(TypeAst):
	name: str


@dataclass(frozen=True)
class TypeFieldAst(TypeAst):
	"""`outer.Name`: a package-qualified or nested type."""

	outer: TypeAst
	name: str


@dataclass(frozen=True)
class ArrayTypeAst(TypeAst):
	inner: TypeAst


# Expressions


class Exp:
	__slots__ = ()


@dataclass(frozen=True)
class NameAst(Exp):
	name: str


@dataclass(frozen=True)
class IntAst(Exp):
	text: str


@dataclass(frozen=True)
class FloatAst(Exp):
	text: str


@dataclass(frozen=True)
class CharAst(Exp):
	text: str


@dataclass(frozen=True)
class StringAst(Exp):
	text: str


@dataclass(frozen=True)
class BoolAst(Exp):
	value: bool


@dataclass(frozen=True)
class NullAst(Exp):
	pass


@dataclass(frozen=True)
class ThisAst(Exp):
	pass


@dataclass(frozen=True)
class FieldAst(Exp):
	obj: Exp
	name: str


@dataclass(frozen=True)
class ApplyAst(Exp):
	"""
	`fn(args)`, `fn[args]` or `fn arg`.

	`around` records which bracket was used ("()", "[]" or "" for
	juxtaposition); resolution reads each differently.
	"""

	fn: Exp
	args: Tuple[Exp, ...]
	around: str


@dataclass(frozen=True)
class ParenAst(Exp):
	exp: Exp


@dataclass(frozen=True)
class TupleAst(Exp):
	"""Comma list in parentheses ("()"), braces ("{}") or brackets ("[]")."""

	exps: Tuple[Exp, ...]
	around: str


@dataclass(frozen=True)
class NewAst(Exp):
	type: TypeAst
	args: Tuple[Exp, ...]


@dataclass(frozen=True)
class UnaryAst(Exp):
	op: str
	exp: Exp


@dataclass(frozen=True)
class BinaryAst(Exp):
	op: str
	left: Exp
	right: Exp


@dataclass(frozen=True)
class AssignAst(Exp):
	"""
	`left op= right`; `op` is None for plain `=`.

	`right` has more than one element when the right hand side is a bare comma
	list (`x = 1, 2`).
	"""

	left: Exp
	op: Optional[str]
	right: Tuple[Exp, ...]


# Statements


class Stmt:
	__slots__ = ()


@dataclass(frozen=True)
class ExpStmtAst(Stmt):
	"""One or more comma separated expressions."""

	exps: Tuple[Exp, ...]


@dataclass(frozen=True)
class VarAst(Stmt):
	type: TypeAst
	name: str
	init: Optional[Tuple[Exp, ...]]


@dataclass(frozen=True)
class ReturnAst(Stmt):
	exp: Optional[Exp]


@dataclass(frozen=True)
class BreakAst(Stmt):
	label: Optional[str]


@dataclass(frozen=True)
class ContinueAst(Stmt):
	label: Optional[str]


@dataclass(frozen=True)
class BlockAst(Stmt):
	stmts: Tuple[Stmt, ...]


@dataclass(frozen=True)
class IfAst(Stmt):
	cond: Exp
	then: Stmt
	orelse: Optional[Stmt]


@dataclass(frozen=True)
class WhileAst(Stmt):
	cond: Exp
	body: Stmt


@dataclass(frozen=True)
class LabeledAst(Stmt):
	label: str
	stmt: Stmt


# One complete reading of a fragment.
Program = Tuple[Stmt, ...]


__all__ = [
	"TypeAst",
	"TypeNameAst",
	"TypeFieldAst",
	"ArrayTypeAst",
	"Exp",
	"NameAst",
	"IntAst",
	"FloatAst",
	"CharAst",
	"StringAst",
	"BoolAst",
	"NullAst",
	"ThisAst",
	"FieldAst",
	"ApplyAst",
	"ParenAst",
	"TupleAst",
	"NewAst",
	"UnaryAst",
	"BinaryAst",
	"AssignAst",
	"Stmt",
	"ExpStmtAst",
	"VarAst",
	"ReturnAst",
	"BreakAst",
	"ContinueAst",
	"BlockAst",
	"IfAst",
	"WhileAst",
	"LabeledAst",
	"Program",
]
