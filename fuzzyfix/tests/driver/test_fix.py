# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging

import pytest

from fuzzyfix.base import base_environment
from fuzzyfix.core import pr
from fuzzyfix.core.errors import DuplicateAstError
from fuzzyfix.core.scores import Bad, NoInterpretation
from fuzzyfix.denotations import AssignExp, EmptyStmt, ExprStmt, IntLit, LocalVariableExp, VarStmt
from fuzzyfix.driver import fix, fix_source
from fuzzyfix.items import LocalVariableItem
from fuzzyfix.parser import FragmentSyntaxError, lex
from fuzzyfix.parser.ast import AssignAst, ExpStmtAst, IntAst, NameAst
from fuzzyfix.types import INT


@pytest.fixture
def x():
	return LocalVariableItem("x", INT)


@pytest.fixture
def env(x):
	return base_environment().add_local_objects([x])


def _assign(name, text):
	return (ExpStmtAst((AssignAst(NameAst(name), None, (IntAst(text),)),)),)


def test_existing_local_assignment_is_certain(env, x):
	result = fix(lex("x = 1"), env)
	assert result.is_single()
	assert result.p == pr.CERTAIN
	env2, stmts = result.x
	assert env2 is env
	assert stmts == [ExprStmt(AssignExp(None, LocalVariableExp(x), IntLit(1, "1")))]


def test_existing_local_assignment_with_error_tracking(env, track_errors):
	result = fix(lex("x = 1"), env)
	assert result.is_single()
	assert result.p == pr.CERTAIN


def test_unknown_name_is_declared():
	result = fix_source("y = 1", base_environment())
	assert result.is_single()
	assert result.p == pr.NEW_VARIABLE
	env2, stmts = result.x
	assert stmts == [VarStmt(INT, ((env2.exact_local("y"), IntLit(1, "1")),))]


def test_declaration_beats_juxtaposition():
	result = fix_source("int y = 1", base_environment())
	assert result.is_single()
	assert result.p == pytest.approx(pr.EXACT_TYPE * pr.NEW_VARIABLE)
	assert isinstance(result.x[1][0], VarStmt)


def test_missing_callable_has_no_interpretation(env):
	result = fix_source("f(x)", env)
	assert result.is_empty()
	with pytest.raises(NoInterpretation):
		result.best().get()


def test_missing_callable_keeps_a_reason_when_tracking(env, track_errors):
	result = fix_source("f(x)", env)
	assert isinstance(result, Bad)
	assert "Callable f not found" in result.error.prefixed("")


def test_ties_keep_parser_order(env, x):
	first, second = _assign("x", "1"), _assign("x", "2")

	def readings(one, two):
		return fix(lex("ignored"), env, parse=lambda tokens: [one, two])

	got = [alt.x[1][0].exp.right.value for alt in readings(first, second).stream()]
	assert got == [1, 2]
	got = [alt.x[1][0].exp.right.value for alt in readings(second, first).stream()]
	assert got == [2, 1]


def test_duplicate_asts_are_an_internal_error(env, caplog):
	program = _assign("x", "1")
	with caplog.at_level(logging.ERROR, logger="fuzzyfix.driver"):
		with pytest.raises(DuplicateAstError):
			fix(lex("x = 1"), env, parse=lambda tokens: [program, program])
	assert "2 copies of ast" in caplog.text


def test_parse_failure_is_a_failed_result(env, track_errors):
	result = fix(lex("x = ;"), env)
	assert isinstance(result, Bad)
	assert result.error.short.startswith("no parse")


def test_no_candidates_is_a_failed_result(env):
	assert fix(lex("x"), env, parse=lambda tokens: []).is_empty()


def test_parse_errors_do_not_escape(env):
	def broken(tokens):
		raise FragmentSyntaxError("nope")

	assert fix(lex("x"), env, parse=broken).is_empty()


def test_unlexable_source_is_a_failed_result(env):
	assert fix_source("x = #", env).is_empty()


def test_empty_fragment(env):
	result = fix_source("", env)
	assert result.p == pr.CERTAIN
	assert result.x == (env, [EmptyStmt()])


def test_debug_logging_lists_candidates(env, caplog):
	with caplog.at_level(logging.DEBUG, logger="fuzzyfix.driver"):
		fix_source("x = 1", env)
	assert "ast:" in caplog.text


@pytest.mark.parametrize(
	"source",
	["return", "while (true) break", "{ x = 1; }", "if (true) x = 1; else x = 2", "int[] xs"],
)
def test_statements_with_optional_parts_resolve(env, source):
	result = fix_source(source, env)
	assert not result.is_empty()
	assert result.p > 0.0
