# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Ambiguous parser for statement fragments.

The fragment grammar is run through Lark's Earley parser with
`ambiguity="explicit"`, so one parse yields a shared forest with `_ambig`
nodes wherever the text reads more than one way. `CollapseAmbiguities`
expands that forest into one plain tree per reading, and each tree is then
built into a `Program` (a tuple of statement ASTs).

Readings are returned in Lark's derivation order. Structurally identical
Lark trees (the same derivation reached twice through the forest) are merged
here; anything still identical after AST building is a grammar defect the
resolver reports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput
from lark.visitors import CollapseAmbiguities

from .ast import (
	ApplyAst,
	ArrayTypeAst,
	AssignAst,
	BinaryAst,
	BlockAst,
	BoolAst,
	BreakAst,
	CharAst,
	ContinueAst,
	Exp,
	ExpStmtAst,
	FieldAst,
	FloatAst,
	IfAst,
	IntAst,
	LabeledAst,
	NameAst,
	NewAst,
	NullAst,
	ParenAst,
	Program,
	ReturnAst,
	StringAst,
	Stmt,
	ThisAst,
	TupleAst,
	TypeAst,
	TypeFieldAst,
	TypeNameAst,
	UnaryAst,
	VarAst,
	WhileAst,
)

logger = logging.getLogger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	ambiguity="explicit",
	start="start",
	maybe_placeholders=False,
)


class FragmentSyntaxError(ValueError):
	"""The fragment has no reading at all under the grammar."""

	def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None) -> None:
		super().__init__(message)
		self.line = line
		self.column = column


def lex(source: str) -> List[Token]:
	"""Split `source` into grammar tokens (whitespace and comments dropped)."""
	try:
		return list(_PARSER.lex(source))
	except UnexpectedInput as err:
		raise FragmentSyntaxError(f"unexpected character at {err.line}:{err.column}", line=err.line, column=err.column) from err


def parse_tokens(tokens: Sequence[Token]) -> List[Program]:
	"""
	Every reading of a token sequence.

	Raises FragmentSyntaxError when there is none. The token values are re-joined
	with single spaces; no token of the grammar contains a separator that would
	make that lossy.
	"""
	text = " ".join(str(tok) for tok in tokens)
	try:
		forest = _PARSER.parse(text)
	except UnexpectedInput as err:
		raise FragmentSyntaxError(f"no reading of {text!r}: {err.__class__.__name__}") from err
	trees = _unique(CollapseAmbiguities().transform(forest))
	logger.debug("parsed %r: %d reading(s)", text, len(trees))
	return [_build_program(t) for t in trees]


def parse_fragment(source: str) -> List[Program]:
	return parse_tokens(lex(source))


def _unique(trees: Iterable[Tree]) -> List[Tree]:
	seen = set()
	out: List[Tree] = []
	for t in trees:
		if t in seen:
			continue
		seen.add(t)
		out.append(t)
	return out


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	return node.type


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _tokens(tree: Tree, *types: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and (not types or c.type in types)]


def _opt_name(tree: Tree) -> Optional[str]:
	names = _tokens(tree, "NAME")
	return str(names[0]) if names else None


def _build_program(tree: Tree) -> Program:
	return _build_stmts(tree.children)


def _build_stmts(children: Iterable[object]) -> Tuple[Stmt, ...]:
	# Empty statements leave no child behind; separators are anonymous tokens.
	return tuple(_build_stmt(c) for c in children if isinstance(c, Tree))


def _build_stmt(tree: Tree) -> Stmt:
	kind = _name(tree)
	kids = _trees(tree)
	if kind == "exp_stmt":
		return ExpStmtAst(_build_exp_list(kids[0]))
	if kind == "var_stmt":
		init = kids[1] if len(kids) > 1 else None
		return VarAst(_build_type(kids[0]), str(_tokens(tree, "NAME")[0]), None if init is None else _build_exp_list(init))
	if kind == "return_stmt":
		return ReturnAst(_build_exp(kids[0]) if kids else None)
	if kind == "break_stmt":
		return BreakAst(_opt_name(tree))
	if kind == "continue_stmt":
		return ContinueAst(_opt_name(tree))
	if kind == "block_stmt":
		return BlockAst(_build_stmts(tree.children))
	if kind == "if_stmt":
		cond, then, *rest = kids
		return IfAst(_build_exp(cond), _build_stmt(then), _build_stmt(rest[0]) if rest else None)
	if kind == "while_stmt":
		return WhileAst(_build_exp(kids[0]), _build_stmt(kids[1]))
	if kind == "labeled_stmt":
		return LabeledAst(str(_tokens(tree, "NAME")[0]), _build_stmt(kids[0]))
	raise TypeError(f"Unexpected statement node {kind}")


def _build_exp_list(tree: Tree) -> Tuple[Exp, ...]:
	return tuple(_build_exp(c) for c in _trees(tree))


def _build_args(tree: Optional[Tree]) -> Tuple[Exp, ...]:
	if tree is None:
		return ()
	return _build_exp_list(tree)


def _opt_tree(tree: Tree, index: int) -> Optional[Tree]:
	child = tree.children[index] if index < len(tree.children) else None
	return child if isinstance(child, Tree) else None


def _build_exp(tree: Tree) -> Exp:
	kind = _name(tree)
	kids = _trees(tree)
	if kind == "name":
		return NameAst(str(tree.children[0]))
	if kind == "int_lit":
		return IntAst(str(tree.children[0]))
	if kind == "float_lit":
		return FloatAst(str(tree.children[0]))
	if kind == "char_lit":
		return CharAst(str(tree.children[0]))
	if kind == "string_lit":
		return StringAst(str(tree.children[0]))
	if kind == "true_lit":
		return BoolAst(True)
	if kind == "false_lit":
		return BoolAst(False)
	if kind == "null_lit":
		return NullAst()
	if kind == "this_exp":
		return ThisAst()
	if kind == "field":
		return FieldAst(_build_exp(kids[0]), str(_tokens(tree, "NAME")[0]))
	if kind == "paren_apply":
		return ApplyAst(_build_exp(kids[0]), _build_args(_opt_tree(tree, 1)), "()")
	if kind == "brack_apply":
		return ApplyAst(_build_exp(kids[0]), _build_args(_opt_tree(tree, 1)), "[]")
	if kind == "juxt":
		return ApplyAst(_build_exp(kids[0]), (_build_exp(kids[1]),), "")
	if kind == "new_exp":
		return NewAst(_build_type(kids[0]), _build_args(_opt_tree(tree, 1)))
	if kind == "paren":
		return ParenAst(_build_exp(kids[0]))
	if kind == "paren_tuple":
		return TupleAst(tuple(_build_exp(k) for k in kids), "()")
	if kind == "curly_tuple":
		return TupleAst(_build_args(_opt_tree(tree, 0)), "{}")
	if kind == "brack_tuple":
		return TupleAst(_build_args(_opt_tree(tree, 0)), "[]")
	if kind == "unary":
		return UnaryAst(str(_tokens(tree)[0]), _build_exp(kids[0]))
	if kind == "binary":
		left, right = kids
		return BinaryAst(str(_tokens(tree)[0]), _build_exp(left), _build_exp(right))
	if kind == "assign":
		left, op, rhs = kids
		sym = str(op.children[0])
		return AssignAst(_build_exp(left), None if sym == "=" else sym[:-1], _build_exp_list(rhs))
	raise TypeError(f"Unexpected expression node {kind}")


def _build_type(tree: Tree) -> TypeAst:
	kind = _name(tree)
	kids = _trees(tree)
	if kind == "type_name":
		return TypeNameAst(str(tree.children[0]))
	if kind == "type_field":
		return TypeFieldAst(_build_type(kids[0]), str(_tokens(tree, "NAME")[0]))
	if kind == "array_type":
		return ArrayTypeAst(_build_type(kids[0]))
	raise TypeError(f"Unexpected type node {kind}")


__all__ = ["FragmentSyntaxError", "lex", "parse_tokens", "parse_fragment"]
