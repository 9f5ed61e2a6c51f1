# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io

import pytest

from fuzzyfix import cli
from fuzzyfix.cli import build_environment, main
from fuzzyfix.core import config
from fuzzyfix.types import ArrayType, INT


def test_resolves_assignment_to_local(capsys):
	assert main(["x = 1", "--local", "x:int"]) == 0
	out = capsys.readouterr().out.splitlines()
	assert len(out) == 1
	p, stmts = out[0].split("\t")
	assert p == "1"
	assert stmts.startswith("ExprStmt(exp=AssignExp(")
	assert "LocalVariableItem('x')" in stmts


def test_declaration_reading(capsys):
	assert main(["y = 1"]) == 0
	p, stmts = capsys.readouterr().out.splitlines()[0].split("\t")
	assert p == "0.5"
	assert stmts.startswith("VarStmt(")


def test_limit_caps_printed_readings(capsys):
	assert main(["xs(0)", "--local", "xs:int[]", "-n", "1"]) == 0
	assert len(capsys.readouterr().out.splitlines()) == 1


def test_no_interpretation(capsys):
	assert main(["f(x)", "--local", "x:int"]) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert "no interpretation" in captured.err


def test_no_interpretation_with_reasons(capsys):
	assert main(["f(x)", "--local", "x:int", "--track-errors"]) == 1
	assert config.TRACK_ERRORS
	assert "Callable f not found" in capsys.readouterr().err


def test_reads_stdin(monkeypatch, capsys):
	monkeypatch.setattr(cli.sys, "stdin", io.StringIO("x = 2"))
	assert main(["-", "--local", "x:int"]) == 0
	assert "IntLit(value=2" in capsys.readouterr().out


@pytest.mark.parametrize(
	"argv",
	[
		["x = 1", "--local", "x"],
		["x = 1", "--local", "x:Nope"],
		["x = 1", "-n", "0"],
	],
)
def test_bad_arguments_exit_with_usage_error(argv, capsys):
	with pytest.raises(SystemExit) as info:
		main(argv)
	assert info.value.code == 2
	assert "usage:" in capsys.readouterr().err


def test_build_environment_resolves_array_types():
	env = build_environment([("xs", "int[][]")])
	assert env.exact_local("xs").ty == ArrayType(ArrayType(INT))
	assert "this" in build_environment([], in_class=True).things
