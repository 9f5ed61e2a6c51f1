# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolution driver: tokens + environment -> ranked interpretations.

`fix` asks the parser for every candidate AST, refuses structurally
duplicated candidates (a parser defect that would double-count a reading),
denotes each candidate against the environment and unions the results. The
union is left-leaning, so when two candidates tie the one the parser produced
first ranks first.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, List, Sequence, Tuple

from lark import Token

from fuzzyfix.core.errors import DuplicateAstError
from fuzzyfix.core.scores import Scored, fail, strict, take
from fuzzyfix.denotations import StmtDen
from fuzzyfix.environment import Env
from fuzzyfix.parser import FragmentSyntaxError, lex, parse_tokens
from fuzzyfix.parser.ast import Program
from fuzzyfix.semantics import denote_stmts

logger = logging.getLogger(__name__)

Fix = Tuple[Env, List[StmtDen]]
Parse = Callable[[Sequence[Token]], List[Program]]

# How many meanings of each candidate to log at DEBUG.
_LOGGED_MEANINGS = 5


def _check_duplicates(asts: Sequence[Program]) -> None:
	counts = Counter(asts)
	dups = [(a, n) for a, n in counts.items() if n > 1]
	for a, n in dups:
		logger.error("%d copies of ast: %r", n, a)
	if dups:
		raise DuplicateAstError(f"parser produced {len(dups)} duplicated ast(s)")


def fix(tokens: Sequence[Token], env: Env, parse: Parse = parse_tokens) -> Scored[Fix]:
	"""
	Every interpretation of `tokens` in `env`, most probable first.

	Parse failures are a failed result, not an exception. Duplicated ASTs
	raise DuplicateAstError.
	"""
	logger.debug("fixing %s", " ".join(str(t) for t in tokens))
	try:
		asts = parse(tokens)
	except FragmentSyntaxError as err:
		reason = str(err)
		logger.debug("  no asts: %s", reason)
		return fail(lambda: f"no parse: {reason}")
	if not asts:
		logger.debug("  no asts")
		return fail("no parse")
	_check_duplicates(asts)

	first, *others = asts
	results = _meanings(first, env)
	for root in others:
		results = results.plus(strict(_meanings(root, env)))
	return results


def _meanings(root: Program, env: Env) -> Scored[Fix]:
	ds = denote_stmts(root, env)
	if logger.isEnabledFor(logging.DEBUG):
		logger.debug("  ast: %r", root)
		for alt in take(ds, _LOGGED_MEANINGS):
			logger.debug("    %s: %r", alt.p, alt.x[1])
	return ds


def fix_source(source: str, env: Env) -> Scored[Fix]:
	"""`fix` on raw text; unlexable text is a failed result."""
	try:
		tokens = lex(source)
	except FragmentSyntaxError as err:
		reason = str(err)
		logger.debug("lex failed: %s", reason)
		return fail(lambda: f"no parse: {reason}")
	return fix(tokens, env)


__all__ = ["Fix", "Parse", "fix", "fix_source"]
