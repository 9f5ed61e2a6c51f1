# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from fuzzyfix.base import (
	MAIN_THIS,
	MATH_ABS,
	MATH_MAX,
	MATH_PI,
	OBJECT_HASH_CODE,
	STRING,
	STRING_TYPE,
	base_environment,
	class_environment,
)
from fuzzyfix.core import pr
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
	ExprStmt,
	FloatLit,
	IndexExp,
	IntLit,
	LabeledStmt,
	LocalVariableExp,
	LongLit,
	MethodCallExp,
	NewExp,
	ReturnStmt,
	StaticFieldExp,
	StaticMethodCallExp,
	StringLit,
	ThisExp,
	UnaryExp,
	VarStmt,
	WhileStmt,
)
from fuzzyfix.items import LocalVariableItem
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
	ExpStmtAst,
	FieldAst,
	FloatAst,
	IfAst,
	IntAst,
	LabeledAst,
	NameAst,
	NewAst,
	ParenAst,
	ReturnAst,
	StringAst,
	ThisAst,
	TupleAst,
	TypeFieldAst,
	TypeNameAst,
	UnaryAst,
	VarAst,
	WhileAst,
)
from fuzzyfix.semantics import (
	denote_apply,
	denote_assign,
	denote_exp,
	denote_init,
	denote_new,
	denote_stmt,
	denote_stmts,
	denote_type,
	denote_var,
)
from fuzzyfix.types import ArrayType, BOOLEAN, DOUBLE, INT

ONE = IntAst("1")
TWO = IntAst("2")
ONE_DEN = IntLit(1, "1")
TWO_DEN = IntLit(2, "2")

X = LocalVariableItem("x", INT)
S = LocalVariableItem("s", STRING_TYPE)
XS = LocalVariableItem("xs", ArrayType(INT))


@pytest.fixture
def env():
	return base_environment().add_local_objects([X, S, XS])


def _pairs(s):
	return [(alt.p, alt.x) for alt in s.stream()]


def _only(s):
	assert s.is_single()
	return s.p, s.x


# Literals


@pytest.mark.parametrize(
	"text, want",
	[
		("0", IntLit(0, "0")),
		("0x1F", IntLit(31, "0x1F")),
		("0b101", IntLit(5, "0b101")),
		("010", IntLit(8, "010")),
		("1_000", IntLit(1000, "1_000")),
		("2147483647", IntLit(2147483647, "2147483647")),
		("2147483648L", LongLit(2147483648, "2147483648L")),
	],
)
def test_int_literals(env, text, want):
	assert _only(denote_exp(IntAst(text), env)) == (pr.CERTAIN, want)


@pytest.mark.parametrize("text", ["2147483648", "09", "9223372036854775808L"])
def test_int_literals_out_of_range(env, text):
	assert denote_exp(IntAst(text), env).is_empty()


def test_float_char_string_literals(env):
	assert denote_exp(FloatAst("1.5f"), env).x == FloatLit(1.5, "1.5f")
	assert denote_exp(FloatAst("2.0"), env).x == DoubleLit(2.0, "2.0")
	assert denote_exp(FloatAst("1e3d"), env).x == DoubleLit(1000.0, "1e3d")
	assert denote_exp(CharAst("'a'"), env).x == CharLit("a", "'a'")
	assert denote_exp(CharAst("'\\n'"), env).x == CharLit("\n", "'\\n'")
	assert denote_exp(StringAst('"hi\\n"'), env).x == StringLit("hi\n", '"hi\\n"', STRING_TYPE)


# Names, fields, calls


def test_local_variable(env):
	assert _only(denote_exp(NameAst("x"), env)) == (pr.CERTAIN, LocalVariableExp(X))


def test_static_field_through_type(env):
	p, x = _only(denote_exp(FieldAst(NameAst("Math"), "PI"), env))
	assert x == StaticFieldExp(MATH_PI)
	assert p == pytest.approx(pr.EXACT_TYPE * pr.EXACT_STATIC_FIELD)


def test_static_method_call(env):
	callee = FieldAst(NameAst("Math"), "max")
	p, x = _only(denote_apply(ApplyAst(callee, (ONE, TWO), "()"), env))
	assert x == StaticMethodCallExp(MATH_MAX, (ONE_DEN, TWO_DEN))
	assert p == pytest.approx(pr.EXACT_TYPE * pr.EXACT_CALLABLE_FIELD)


def test_unqualified_static_call(env):
	p, x = _only(denote_apply(ApplyAst(NameAst("max"), (ONE, TWO), "()"), env))
	assert x == StaticMethodCallExp(MATH_MAX, (ONE_DEN, TWO_DEN))
	assert p == pytest.approx(pr.EXACT_CALLABLE)


def test_call_arity_and_types_must_match(env):
	assert denote_apply(ApplyAst(NameAst("max"), (ONE,), "()"), env).is_empty()
	assert denote_apply(ApplyAst(NameAst("max"), (ONE, StringAst('"a"')), "()"), env).is_empty()


def test_instance_method_needs_a_receiver():
	call = ApplyAst(NameAst("hashCode"), (), "()")
	assert denote_apply(call, base_environment()).is_empty()
	p, x = _only(denote_apply(call, class_environment()))
	assert x == MethodCallExp(None, OBJECT_HASH_CODE, ())
	assert p == pytest.approx(pr.EXACT_CALLABLE)


def test_this():
	assert denote_exp(ThisAst(), base_environment()).is_empty()
	assert _only(denote_exp(ThisAst(), class_environment())) == (pr.CERTAIN, ThisExp(MAIN_THIS))


def test_brackets_index_and_paren_index(env):
	index = IndexExp(LocalVariableExp(XS), ONE_DEN)
	assert _pairs(denote_apply(ApplyAst(NameAst("xs"), (ONE,), "[]"), env))[0] == (pr.CERTAIN, index)
	p, x = _pairs(denote_apply(ApplyAst(NameAst("xs"), (ONE,), "()"), env))[0]
	assert x == index
	assert p == pytest.approx(pr.PAREN_INDEX)


def test_index_needs_an_array_and_int_index(env):
	assert denote_apply(ApplyAst(NameAst("x"), (ONE,), "[]"), env).is_empty()
	assert denote_apply(ApplyAst(NameAst("xs"), (FloatAst("1.0"),), "[]"), env).is_empty()


def test_juxtaposition(env):
	p, x = _pairs(denote_apply(ApplyAst(NameAst("abs"), (ONE,), ""), env))[0]
	assert x == StaticMethodCallExp(MATH_ABS, (ONE_DEN,))
	assert p == pytest.approx(pr.EXACT_CALLABLE * pr.JUXT)
	assert denote_apply(ApplyAst(NameAst("abs"), (ParenAst(ONE),), ""), env).is_empty()
	assert denote_apply(ApplyAst(NameAst("abs"), (TupleAst((ONE, TWO), "()"),), ""), env).is_empty()


def test_new(env):
	p, x = _only(denote_new(NewAst(TypeNameAst("String"), ()), env))
	assert isinstance(x, NewExp) and x.ty == STRING_TYPE and x.args == ()
	assert p == pytest.approx(pr.EXACT_TYPE)
	assert denote_new(NewAst(TypeNameAst("String"), (ONE,)), env).is_empty()
	assert denote_new(NewAst(TypeNameAst("int"), ()), env).is_empty()


# Types


def test_types(env):
	assert _only(denote_type(TypeNameAst("int"), env)) == (pr.EXACT_TYPE, INT)
	assert _only(denote_type(ArrayTypeAst(TypeNameAst("int")), env)) == (pr.EXACT_TYPE, ArrayType(INT))
	qualified = TypeFieldAst(TypeFieldAst(TypeNameAst("java"), "lang"), "String")
	assert _only(denote_type(qualified, env)) == (pr.EXACT_TYPE, STRING.raw)


# Operators


def test_operators(env):
	assert denote_exp(UnaryAst("!", BoolAst(True)), env).x.ty == BOOLEAN
	assert denote_exp(UnaryAst("-", NameAst("x")), env).x == UnaryExp("-", LocalVariableExp(X), INT)
	assert denote_exp(UnaryAst("!", ONE), env).is_empty()
	concat = denote_exp(BinaryAst("+", StringAst('"a"'), ONE), env).x
	assert isinstance(concat, BinaryExp) and concat.ty == STRING_TYPE
	assert denote_exp(BinaryAst("*", ONE, FloatAst("2.0")), env).x.ty == DOUBLE
	assert denote_exp(BinaryAst("<", ONE, TWO), env).x.ty == BOOLEAN
	assert denote_exp(BinaryAst("&&", ONE, TWO), env).is_empty()
	assert denote_exp(BinaryAst("==", NameAst("s"), NameAst("xs")), env).is_empty()


# Assignment and initialisers


def test_array_initialisers(env):
	bare = denote_init((ONE, TWO), env)
	assert _only(bare) == (pr.ARRAY_BARE, ArrayInitExp((ONE_DEN, TWO_DEN), INT))
	assert _only(denote_init((TupleAst((ONE, TWO), "{}"),), env))[0] == pr.CERTAIN
	assert _only(denote_init((TupleAst((ONE, TWO), "()"),), env))[0] == pr.ARRAY_PAREN
	assert _only(denote_init((TupleAst((ONE, TWO), "[]"),), env))[0] == pr.ARRAY_BRACK
	mixed = denote_init((TupleAst((ONE, FloatAst("2.0")), "{}"),), env)
	assert mixed.x.ty == ArrayType(DOUBLE)
	assert denote_init((TupleAst((ONE, StringAst('"a"')), "{}"),), env).is_empty()


def test_tuple_outside_an_initialiser_fails(env):
	assert denote_exp(TupleAst((ONE, TWO), "{}"), env).is_empty()


def test_assignments(env):
	x = LocalVariableExp(X)
	assert _only(denote_assign(AssignAst(NameAst("x"), None, (ONE,)), env)) == (pr.CERTAIN, AssignExp(None, x, ONE_DEN))
	assert denote_assign(AssignAst(NameAst("x"), None, (StringAst('"a"'),)), env).is_empty()
	assert denote_assign(AssignAst(ONE, None, (TWO,)), env).is_empty()
	# Compound assignment narrows implicitly.
	assert denote_assign(AssignAst(NameAst("x"), "+", (FloatAst("1.5"),)), env).x.op == "+"
	assert denote_assign(AssignAst(NameAst("s"), "+", (ONE,)), env).x.ty == STRING_TYPE
	init = denote_assign(AssignAst(NameAst("xs"), None, (TupleAst((ONE, TWO), "{}"),)), env)
	assert init.x == AssignExp(None, LocalVariableExp(XS), ArrayInitExp((ONE_DEN, TWO_DEN), INT))


# Statements


def test_declaration(env):
	result = denote_var(VarAst(TypeNameAst("int"), "y", (ONE,)), env)
	assert result.p == pytest.approx(pr.EXACT_TYPE * pr.NEW_VARIABLE)
	env2, stmt = result.x
	y = env2.exact_local("y")
	assert stmt == VarStmt(INT, ((y, ONE_DEN),))
	assert denote_var(VarAst(TypeNameAst("void"), "v", None), env).is_empty()
	assert denote_var(VarAst(TypeNameAst("int"), "x", None), env).is_empty()
	assert denote_var(VarAst(TypeNameAst("int"), "y", (StringAst('"a"'),)), env).is_empty()


def test_implicit_declaration_of_unknown_name(env):
	(p, (env2, stmt)), = _pairs(denote_stmt(ExpStmtAst((AssignAst(NameAst("fresh"), None, (ONE,)),)), env))
	assert p == pr.NEW_VARIABLE
	assert stmt == VarStmt(INT, ((env2.exact_local("fresh"), ONE_DEN),))


def test_sequence_threads_the_environment(env):
	stmts = [
		VarAst(TypeNameAst("int"), "y", (ONE,)),
		ExpStmtAst((AssignAst(NameAst("y"), None, (TWO,)),)),
	]
	p, (env2, dens) = _only(denote_stmts(stmts, env))
	y = env2.exact_local("y")
	assert p == pytest.approx(pr.EXACT_TYPE * pr.NEW_VARIABLE)
	assert dens == [VarStmt(INT, ((y, ONE_DEN),)), ExprStmt(AssignExp(None, LocalVariableExp(y), TWO_DEN))]


def test_empty_fragment_is_the_empty_statement(env):
	assert _only(denote_stmts([], env)) == (pr.CERTAIN, (env, [EmptyStmt()]))


def test_expression_statements(env):
	both = ExpStmtAst((AssignAst(NameAst("x"), None, (ONE,)), AssignAst(NameAst("x"), None, (TWO,))))
	_, (_, stmt) = _only(denote_stmt(both, env))
	x = LocalVariableExp(X)
	assert stmt == BlockStmt((ExprStmt(AssignExp(None, x, ONE_DEN)), ExprStmt(AssignExp(None, x, TWO_DEN))))
	assert denote_stmt(ExpStmtAst((ONE,)), env).is_empty()


def test_blocks_scope_their_declarations(env):
	block = BlockAst((VarAst(TypeNameAst("int"), "y", None),))
	_, (env2, stmt) = _only(denote_stmt(block, env))
	assert isinstance(stmt, BlockStmt)
	assert not any(i.name == "y" for i in env2.in_scope)


def test_break_and_continue_need_a_loop(env):
	assert denote_stmt(BreakAst(None), env).is_empty()
	assert denote_stmt(ContinueAst(None), env).is_empty()
	assert denote_stmt(IfAst(BoolAst(True), BreakAst(None), None), env).is_empty()
	_, (env2, stmt) = _only(denote_stmt(WhileAst(BoolAst(True), BreakAst(None)), env))
	assert stmt == WhileStmt(BooleanLit(True), BreakStmt(None))
	assert not env2.inside_breakable


def test_loop_condition_must_be_boolean(env):
	assert denote_stmt(WhileAst(ONE, BreakAst(None)), env).is_empty()
	assert denote_stmt(IfAst(NameAst("x"), ExpStmtAst((AssignAst(NameAst("x"), None, (ONE,)),)), None), env).is_empty()


def test_labels(env):
	loop = LabeledAst("outer", WhileAst(BoolAst(True), ContinueAst("outer")))
	_, (env2, stmt) = _only(denote_stmt(loop, env))
	assert stmt == LabeledStmt("outer", WhileStmt(BooleanLit(True), ContinueStmt("outer")))
	assert env2.labels == ()
	assert denote_stmt(LabeledAst("outer", WhileAst(BoolAst(True), ContinueAst("inner"))), env).is_empty()
	assert denote_stmt(LabeledAst("a", LabeledAst("a", BreakAst("a"))), env).is_empty()
	_, (_, stmt) = _only(denote_stmt(LabeledAst("a", BreakAst("a")), env))
	assert stmt == LabeledStmt("a", BreakStmt("a"))


def test_if_else(env):
	assign = ExpStmtAst((AssignAst(NameAst("x"), None, (ONE,)),))
	_, (_, stmt) = _only(denote_stmt(IfAst(BoolAst(False), assign, assign), env))
	expected = ExprStmt(AssignExp(None, LocalVariableExp(X), ONE_DEN))
	assert stmt.then == expected and stmt.orelse == expected


def test_if_without_else(env):
	assign = ExpStmtAst((AssignAst(NameAst("x"), None, (ONE,)),))
	_, (env2, stmt) = _only(denote_stmt(IfAst(BoolAst(True), assign, None), env))
	assert env2 is env
	assert stmt.then == ExprStmt(AssignExp(None, LocalVariableExp(X), ONE_DEN))
	assert stmt.orelse is None


def test_return_in_void_main(env):
	assert _only(denote_stmt(ReturnAst(None), env))[1][1] == ReturnStmt(None)
	assert denote_stmt(ReturnAst(ONE), env).is_empty()
