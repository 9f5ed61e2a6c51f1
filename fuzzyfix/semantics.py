# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Meaning of syntax trees: AST -> scored denotations.

Every function takes the environment explicitly and returns a `Scored` of
denotations. Ambiguity is expressed with `plus` (alternative readings, most
behind a `biased` thunk so they are only built when their bound could win),
`product`/`thread` (independent sub-terms) and `bind` (later choices that
depend on earlier ones). Statements thread the environment through
`product_fold_left` because a declaration changes what later statements see.

Readings and their weights:

  x = e            assignment to value x, or a new local (NEW_VARIABLE)
  T x = e          declaration
  f(a)             call, or indexing when f is an array (PAREN_INDEX)
  x[a]             indexing, or a call (BRACK_CALL)
  f a              call or indexing (JUXT)
  x = 1, 2         array initialiser (ARRAY_BARE); also (1, 2) and {1, 2}
"""

from __future__ import annotations

import codecs
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from fuzzyfix.core import pr
from fuzzyfix.core.scores import (
	Alt,
	Message,
	Scored,
	biased,
	fail,
	known,
	multiple,
	product,
	product_fold_left,
	strict,
	thread,
	thread_option,
)
from fuzzyfix.denotations import (
	ArrayInitExp,
	AssignExp,
	BinaryExp,
	BlockStmt,
	BooleanLit,
	BreakStmt,
	CharLit,
	ContinueStmt,
	DoubleLit,
	EmptyStmt,
	ExpDen,
	ExprStmt,
	FieldExp,
	FloatLit,
	IfStmt,
	IndexExp,
	IntLit,
	LabeledStmt,
	LongLit,
	MethodCallExp,
	NewExp,
	NullLit,
	ReturnStmt,
	StaticFieldExp,
	StaticMethodCallExp,
	StmtDen,
	StringLit,
	ThisExp,
	UnaryExp,
	VarStmt,
	WhileStmt,
	is_lvalue,
	is_statement_exp,
	value_exp,
)
from fuzzyfix.environment import (
	Env,
	callable_field_scores,
	callable_scores,
	constructor_scores,
	field_scores,
	return_type,
	static_field_scores,
	type_field_scores,
	type_scores,
	value_scores,
)
from fuzzyfix.items import (
	CallableItem,
	ClassItem,
	FieldItem,
	MethodItem,
	PackageItem,
	StaticMethodItem,
	ThisItem,
	Value,
)
from fuzzyfix.parser.ast import (
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
	ReturnAst,
	Stmt,
	StringAst,
	ThisAst,
	TupleAst,
	TypeAst,
	TypeFieldAst,
	TypeNameAst,
	UnaryAst,
	VarAst,
	WhileAst,
)
from fuzzyfix.types import (
	ArrayType,
	BOOLEAN,
	ClassType,
	INT,
	NULL,
	Type,
	VOID,
	binary_numeric_promotion,
	common_type,
	is_assignable,
	is_integral,
	is_numeric,
	is_reference,
	is_subtype,
	show_type,
	unary_numeric_promotion,
)

A = TypeVar("A")

EnvStmt = Tuple[Env, StmtDen]

_INT_MAX = 2**31 - 1
_LONG_MAX = 2**63 - 1


def _ok(x: Optional[A], error: Message) -> Scored[A]:
	return fail(error) if x is None else known(x)


def _either(first: Scored[A], q: pr.Prob, second: Callable[[], Scored[A]]) -> Scored[A]:
	"""`first`, or the reading built by `second` biased by `q`."""
	return first.plus(biased(q, second))


# ---------------------------------------------------------------------------
# Types


def _dotted(t: TypeAst) -> Optional[str]:
	if isinstance(t, TypeNameAst):
		return t.name
	if isinstance(t, TypeFieldAst):
		outer = _dotted(t.outer)
		return None if outer is None else f"{outer}.{t.name}"
	return None


def _package_type_scores(package: str, name: str, env: Env) -> Scored[Type]:
	packages = [p for p in env.things.get(package, ()) if isinstance(p, PackageItem)]
	hits = [
		Alt(pr.EXACT_TYPE, i.raw)
		for i in env.things.get(name, ())
		if isinstance(i, ClassItem) and any(i.parent is p for p in packages)
	]
	return multiple(hits, lambda: f"Package {package} has no type {name}")


def denote_type(t: TypeAst, env: Env) -> Scored[Type]:
	if isinstance(t, TypeNameAst):
		return type_scores(t.name, env)
	if isinstance(t, ArrayTypeAst):
		return denote_type(t.inner, env).map(ArrayType)
	if isinstance(t, TypeFieldAst):
		nested = denote_type(t.outer, env).bind(lambda o: type_field_scores(o, t.name, env))
		package = _dotted(t.outer)
		if package is None:
			return nested
		return nested.plus(strict(_package_type_scores(package, t.name, env)))
	raise TypeError(f"Unexpected type ast {t!r}")


def _exp_as_type(e: Exp) -> Optional[TypeAst]:
	"""`a.b.C` parsed as an expression, read as a (qualified) type name."""
	if isinstance(e, NameAst):
		return TypeNameAst(e.name)
	if isinstance(e, FieldAst):
		outer = _exp_as_type(e.obj)
		return None if outer is None else TypeFieldAst(outer, e.name)
	return None


# ---------------------------------------------------------------------------
# Conversions


def _is_string(t: Type) -> bool:
	return isinstance(t, ClassType) and t.item.name == "String"


def _string_type(env: Env) -> Optional[Type]:
	for i in env.things.get("String", ()):
		if isinstance(i, ClassItem):
			return i.raw
	return None


def coerce(e: ExpDen, target: Type) -> Optional[ExpDen]:
	"""`e` usable where `target` is expected, or None."""
	if isinstance(e, ArrayInitExp) and isinstance(target, ArrayType):
		elems = [coerce(x, target.inner) for x in e.elems]
		if any(x is None for x in elems):
			return None
		return ArrayInitExp(tuple(elems), target.inner)  # type: ignore[arg-type]
	if is_assignable(e.ty, target):
		return e
	return None


def _coerce_or_fail(e: ExpDen, target: Type) -> Scored[ExpDen]:
	return _ok(coerce(e, target), lambda: f"Can't use {show_type(e.ty)} as {show_type(target)}")


# ---------------------------------------------------------------------------
# Literals


def _int_literal(text: str) -> Optional[ExpDen]:
	digits = text.replace("_", "")
	is_long = digits[-1] in "lL"
	if is_long:
		digits = digits[:-1]
	if digits[:2] in ("0x", "0X"):
		value = int(digits[2:], 16)
	elif digits[:2] in ("0b", "0B"):
		value = int(digits[2:], 2)
	elif len(digits) > 1 and digits[0] == "0":
		if any(c in "89" for c in digits):
			return None
		value = int(digits[1:], 8)
	else:
		value = int(digits)
	if is_long:
		return LongLit(value, text) if value <= _LONG_MAX else None
	return IntLit(value, text) if value <= _INT_MAX else None


def _float_literal(text: str) -> ExpDen:
	digits = text.replace("_", "")
	if digits[-1] in "fF":
		return FloatLit(float(digits[:-1]), text)
	if digits[-1] in "dD":
		digits = digits[:-1]
	return DoubleLit(float(digits), text)


def _unescape(body: str) -> Optional[str]:
	try:
		return codecs.decode(body, "unicode_escape")
	except UnicodeError:
		return None


def _char_literal(text: str) -> Optional[ExpDen]:
	value = _unescape(text[1:-1])
	if value is None or len(value) != 1:
		return None
	return CharLit(value, text)


# ---------------------------------------------------------------------------
# Expressions


def denote_exp(e: Exp, env: Env) -> Scored[ExpDen]:
	if isinstance(e, IntAst):
		return _ok(_int_literal(e.text), lambda: f"Integer literal {e.text} out of range")
	if isinstance(e, FloatAst):
		return known(_float_literal(e.text))
	if isinstance(e, CharAst):
		return _ok(_char_literal(e.text), lambda: f"Invalid character literal {e.text}")
	if isinstance(e, StringAst):
		st = _string_type(env)
		value = _unescape(e.text[1:-1])
		if st is None or value is None:
			return fail(lambda: f"Can't denote string literal {e.text}")
		return known(StringLit(value, e.text, st))
	if isinstance(e, BoolAst):
		return known(BooleanLit(e.value))
	if isinstance(e, NullAst):
		return known(NullLit())
	if isinstance(e, ThisAst):
		return denote_this(env)
	if isinstance(e, NameAst):
		return value_scores(e.name, env).map(value_exp)
	if isinstance(e, ParenAst):
		return denote_exp(e.exp, env)
	if isinstance(e, FieldAst):
		return denote_field(e, env)
	if isinstance(e, ApplyAst):
		return denote_apply(e, env)
	if isinstance(e, NewAst):
		return denote_new(e, env)
	if isinstance(e, UnaryAst):
		return denote_exp(e.exp, env).bind(lambda x: _unary(e.op, x))
	if isinstance(e, BinaryAst):
		return product(denote_exp(e.left, env), denote_exp(e.right, env)).bind(lambda lr: _binary(e.op, lr[0], lr[1]))
	if isinstance(e, AssignAst):
		return denote_assign(e, env)
	if isinstance(e, TupleAst):
		return fail("Array initializers are only allowed on the right of an assignment or declaration")
	raise TypeError(f"Unexpected expression ast {e!r}")


def denote_this(env: Env) -> Scored[ExpDen]:
	hits = [
		Alt(pr.CERTAIN, ThisExp(i))
		for i in env.things.get("this", ())
		if isinstance(i, ThisItem) and env.item_in_scope(i)
	]
	return multiple(hits, "this is not available here")


def denote_field(e: FieldAst, env: Env) -> Scored[ExpDen]:
	def on_value(obj: ExpDen) -> Scored[ExpDen]:
		def build(f: Value) -> ExpDen:
			return FieldExp(obj, f) if isinstance(f, FieldItem) else StaticFieldExp(f)

		return field_scores(obj.ty, e.name, env).map(build)

	through_value = denote_exp(e.obj, env).bind(on_value)
	as_type = _exp_as_type(e.obj)
	if as_type is None:
		return through_value
	through_type = denote_type(as_type, env).bind(lambda t: static_field_scores(t, e.name, env)).map(StaticFieldExp)
	return through_value.plus(strict(through_type))


# Calls and indexing


Receiver = Tuple[Optional[ExpDen], CallableItem]


def _implicit_this(f: CallableItem, env: Env) -> bool:
	parent = getattr(f, "parent")
	return any(
		isinstance(i, ThisItem) and env.item_in_scope(i) and is_subtype(i.ty, parent.raw)
		for i in env.in_scope
	)


def callables(fn: Exp, env: Env) -> Scored[Receiver]:
	"""What could `fn` be as the head of a call, with its receiver."""
	if isinstance(fn, ParenAst):
		return callables(fn.exp, env)
	if isinstance(fn, NameAst):
		def unqualified(f: CallableItem) -> Scored[Receiver]:
			if isinstance(f, StaticMethodItem):
				return known((None, f))
			if isinstance(f, MethodItem) and _implicit_this(f, env):
				return known((None, f))
			return fail(lambda: f"{f.name} can't be called without a receiver here")

		return callable_scores(fn.name, env).bind(unqualified)
	if isinstance(fn, FieldAst):
		through_value = denote_exp(fn.obj, env).bind(
			lambda obj: callable_field_scores(obj.ty, fn.name, env).map(lambda f: (obj, f))
		)
		as_type = _exp_as_type(fn.obj)
		if as_type is None:
			return through_value
		through_type = denote_type(as_type, env).bind(
			lambda t: callable_field_scores(t, fn.name, env).filter(
				lambda f: isinstance(f, StaticMethodItem),
				lambda: f"{fn.name} is not static",
			)
		).map(lambda f: (None, f))
		return through_value.plus(strict(through_type))
	return fail("Not callable")


def _call(receiver: Receiver, args: Sequence[ExpDen]) -> Optional[ExpDen]:
	obj, f = receiver
	params = f.params
	if len(params) != len(args):
		return None
	converted = [coerce(a, p) for a, p in zip(args, params)]
	if any(a is None for a in converted):
		return None
	xs = tuple(converted)
	if isinstance(f, StaticMethodItem):
		return StaticMethodCallExp(f, xs)  # type: ignore[arg-type]
	if isinstance(f, MethodItem):
		return MethodCallExp(obj, f, xs)  # type: ignore[arg-type]
	return None


def call_scores(fn: Exp, args: Sequence[Exp], env: Env) -> Scored[ExpDen]:
	return product(callables(fn, env), thread(args, lambda a: denote_exp(a, env))).bind(
		lambda ra: _ok(_call(ra[0], ra[1]), lambda: f"Arguments don't match {ra[0][1].name}")
	)


def _index(array: ExpDen, indices: Sequence[ExpDen]) -> Optional[ExpDen]:
	if not indices:
		return None
	for i in indices:
		if not isinstance(array.ty, ArrayType) or unary_numeric_promotion(i.ty) != INT:
			return None
		array = IndexExp(array, i)
	return array


def index_scores(fn: Exp, args: Sequence[Exp], env: Env) -> Scored[ExpDen]:
	return product(denote_exp(fn, env), thread(args, lambda a: denote_exp(a, env))).bind(
		lambda ai: _ok(_index(ai[0], ai[1]), "Can't index")
	)


def denote_apply(e: ApplyAst, env: Env) -> Scored[ExpDen]:
	if e.around == "()":
		return _either(call_scores(e.fn, e.args, env), pr.PAREN_INDEX, lambda: index_scores(e.fn, e.args, env))
	if e.around == "[]":
		return _either(index_scores(e.fn, e.args, env), pr.BRACK_CALL, lambda: call_scores(e.fn, e.args, env))
	# Juxtaposition: `f (x)` and `x [i]` are already read as bracketed applies.
	if any(isinstance(a, ParenAst) or (isinstance(a, TupleAst) and a.around != "{}") for a in e.args):
		return fail("Bracketed juxtaposition")
	return call_scores(e.fn, e.args, env).plus(strict(index_scores(e.fn, e.args, env))).bias(pr.JUXT)


def denote_new(e: NewAst, env: Env) -> Scored[ExpDen]:
	def build(ca: Tuple[object, List[ExpDen]]) -> Scored[ExpDen]:
		ctor, args = ca
		params = ctor.params  # type: ignore[attr-defined]
		converted = [coerce(a, p) for a, p in zip(args, params)]
		if len(params) != len(args) or any(a is None for a in converted):
			return fail(lambda: f"Arguments don't match constructor of {ctor.parent.name}")  # type: ignore[attr-defined]
		return known(NewExp(ctor, tuple(converted)))  # type: ignore[arg-type]

	ctors = denote_type(e.type, env).bind(lambda t: constructor_scores(t, env))
	return product(ctors, thread(e.args, lambda a: denote_exp(a, env))).bind(build)


# Operators


def _unary(op: str, x: ExpDen) -> Scored[ExpDen]:
	t = x.ty
	if op == "!":
		return _ok(UnaryExp(op, x, BOOLEAN) if t == BOOLEAN else None, "! needs a boolean")
	if op == "~" and not is_integral(t):
		return fail(lambda: f"~ needs an integral operand, got {show_type(t)}")
	result = unary_numeric_promotion(t)
	return _ok(None if result is None else UnaryExp(op, x, result), lambda: f"{op} needs a numeric operand, got {show_type(t)}")


def _binary_type(op: str, lt: Type, rt: Type) -> Optional[Type]:
	if op == "+" and (_is_string(lt) or _is_string(rt)):
		if lt == VOID or rt == VOID:
			return None
		return lt if _is_string(lt) else rt
	if op in ("+", "-", "*", "/", "%"):
		return binary_numeric_promotion(lt, rt)
	if op in ("<", ">", "<=", ">="):
		return BOOLEAN if binary_numeric_promotion(lt, rt) is not None else None
	if op in ("==", "!="):
		if is_numeric(lt) and is_numeric(rt):
			return BOOLEAN
		if lt == BOOLEAN and rt == BOOLEAN:
			return BOOLEAN
		if is_reference(lt) and is_reference(rt) and (is_subtype(lt, rt) or is_subtype(rt, lt)):
			return BOOLEAN
		return None
	if op in ("&&", "||"):
		return BOOLEAN if lt == BOOLEAN and rt == BOOLEAN else None
	return None


def _binary(op: str, left: ExpDen, right: ExpDen) -> Scored[ExpDen]:
	result = _binary_type(op, left.ty, right.ty)
	if result is None:
		return fail(lambda: f"Can't apply {op} to {show_type(left.ty)} and {show_type(right.ty)}")
	return known(BinaryExp(op, left, right, result))


# Assignment


def _array_init(exps: Sequence[Exp], env: Env) -> Scored[ExpDen]:
	def build(xs: List[ExpDen]) -> Scored[ExpDen]:
		t = common_type([x.ty for x in xs])
		if t is None or t == VOID:
			return fail("Array elements have no common type")
		return known(ArrayInitExp(tuple(xs), t))

	return thread(exps, lambda x: denote_exp(x, env)).bind(build)


def denote_init(right: Sequence[Exp], env: Env) -> Scored[ExpDen]:
	"""Right hand side of `=`, where a comma list or tuple is an array initialiser."""
	if len(right) > 1:
		return _array_init(right, env).bias(pr.ARRAY_BARE)
	r = right[0]
	if isinstance(r, TupleAst):
		if r.around == "{}":
			return _array_init(r.exps, env)
		return _array_init(r.exps, env).bias(pr.ARRAY_PAREN if r.around == "()" else pr.ARRAY_BRACK)
	return denote_exp(r, env)


def _assign(op: Optional[str], left: ExpDen, right: ExpDen) -> Scored[ExpDen]:
	if not is_lvalue(left):
		return fail("Can't assign to a non-variable")
	if op is None:
		return _coerce_or_fail(right, left.ty).map(lambda r: AssignExp(None, left, r))
	result = _binary_type(op, left.ty, right.ty)
	if result is None or not (is_assignable(result, left.ty) or (is_numeric(result) and is_numeric(left.ty))):
		return fail(lambda: f"Can't apply {op}= to {show_type(left.ty)} and {show_type(right.ty)}")
	return known(AssignExp(op, left, right))


def denote_assign(e: AssignAst, env: Env) -> Scored[ExpDen]:
	return product(denote_exp(e.left, env), denote_init(e.right, env)).bind(lambda lr: _assign(e.op, lr[0], lr[1]))


# ---------------------------------------------------------------------------
# Statements


def _exp_stmt(e: Exp, env: Env) -> Scored[EnvStmt]:
	def build(x: ExpDen) -> Scored[EnvStmt]:
		if not is_statement_exp(x):
			return fail("Not a statement")
		return known((env, ExprStmt(x)))

	return denote_exp(e, env).bind(build)


def _declare(name: str, t: Type, init: Optional[ExpDen], env: Env) -> Scored[EnvStmt]:
	if t == VOID or t == NULL:
		return fail(lambda: f"Can't declare {name} of type {show_type(t)}")
	return env.new_variable(name, t).map(lambda ex: (ex[0], VarStmt(t, ((ex[1], init),))))


def _implicit_declaration(e: AssignAst, env: Env) -> Scored[EnvStmt]:
	name = e.left.name  # type: ignore[attr-defined]
	return denote_init(e.right, env).bind(lambda r: _declare(name, r.ty, r, env))


def denote_var(s: VarAst, env: Env) -> Scored[EnvStmt]:
	def with_type(t: Type) -> Scored[EnvStmt]:
		if s.init is None:
			return _declare(s.name, t, None, env)
		return denote_init(s.init, env).bind(lambda r: _coerce_or_fail(r, t)).bind(lambda r: _declare(s.name, t, r, env))

	return denote_type(s.type, env).bind(with_type)


def _scoped(s: Stmt, env: Env) -> Scored[EnvStmt]:
	return denote_stmt(s, env.push_scope()).map(lambda es: (es[0].pop_scope(), es[1]))


def _condition(e: Exp, env: Env) -> Scored[ExpDen]:
	return denote_exp(e, env).bind(lambda c: _coerce_or_fail(c, BOOLEAN))


def denote_stmt(s: Stmt, env: Env) -> Scored[EnvStmt]:
	if isinstance(s, ExpStmtAst):
		if len(s.exps) > 1:
			def block(xs: List[EnvStmt]) -> Scored[EnvStmt]:
				return known((env, BlockStmt(tuple(x[1] for x in xs))))

			return thread(s.exps, lambda x: _exp_stmt(x, env)).bind(block)
		e = s.exps[0]
		assigned = _exp_stmt(e, env)
		if isinstance(e, AssignAst) and e.op is None and isinstance(e.left, NameAst):
			return assigned.plus(strict(_implicit_declaration(e, env)))
		return assigned
	if isinstance(s, VarAst):
		return denote_var(s, env)
	if isinstance(s, ReturnAst):
		def ret(t: Type) -> Scored[EnvStmt]:
			if s.exp is None:
				return _ok((env, ReturnStmt(None)) if t == VOID else None, "Missing return value")
			if t == VOID:
				return fail("Can't return a value from a void callable")
			return denote_exp(s.exp, env).bind(lambda x: _coerce_or_fail(x, t)).map(lambda x: (env, ReturnStmt(x)))

		return return_type(env).bind(ret)
	if isinstance(s, BreakAst):
		ok = s.label in env.labels if s.label is not None else env.inside_breakable
		return _ok((env, BreakStmt(s.label)) if ok else None, "break outside switch or loop")
	if isinstance(s, ContinueAst):
		ok = env.inside_continuable and (s.label is None or s.label in env.labels)
		return _ok((env, ContinueStmt(s.label)) if ok else None, "continue outside of loop")
	if isinstance(s, BlockAst):
		return _sequence(s.stmts, env.push_scope()).map(lambda es: (es[0].pop_scope(), BlockStmt(tuple(es[1]))))
	if isinstance(s, IfAst):
		def branches(c: ExpDen) -> Scored[EnvStmt]:
			then = _scoped(s.then, env)
			orelse = thread_option(s.orelse, lambda o: _scoped(o, env))
			return product(then, orelse).map(lambda te: (env, IfStmt(c, te[0][1], None if te[1] is None else te[1][1])))

		return _condition(s.cond, env).bind(branches)
	if isinstance(s, WhileAst):
		inside = env.move(env.place, True, True, env.labels)

		def body(c: ExpDen) -> Scored[EnvStmt]:
			return _scoped(s.body, inside).map(
				lambda b: (b[0].move(env.place, env.inside_breakable, env.inside_continuable, env.labels), WhileStmt(c, b[1]))
			)

		return _condition(s.cond, inside).bind(body)
	if isinstance(s, LabeledAst):
		if s.label in env.labels:
			return fail(lambda: f"Label {s.label} is already in use")
		inside = env.move(env.place, env.inside_breakable, env.inside_continuable, env.labels + (s.label,))
		return denote_stmt(s.stmt, inside).map(
			lambda b: (b[0].move(env.place, env.inside_breakable, env.inside_continuable, env.labels), LabeledStmt(s.label, b[1]))
		)
	raise TypeError(f"Unexpected statement ast {s!r}")


def _sequence(stmts: Sequence[Stmt], env: Env) -> Scored[Tuple[Env, List[StmtDen]]]:
	steps = [lambda e, s=s: denote_stmt(s, e) for s in stmts]
	return product_fold_left(env, steps)


def denote_stmts(stmts: Sequence[Stmt], env: Env) -> Scored[Tuple[Env, List[StmtDen]]]:
	"""
	Denote a fragment left to right, threading the environment.

	An empty fragment means the empty statement.
	"""
	if not stmts:
		return known((env, [EmptyStmt()]))
	return _sequence(stmts, env)


__all__ = [
	"denote_type",
	"denote_exp",
	"denote_this",
	"denote_field",
	"denote_apply",
	"denote_new",
	"denote_assign",
	"denote_init",
	"denote_var",
	"denote_stmt",
	"denote_stmts",
	"callables",
	"call_scores",
	"index_scores",
	"coerce",
]
