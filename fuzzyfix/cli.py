# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line front end: print the most probable readings of a fragment.

	python -m fuzzyfix 'x = 1' --local x:int
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from fuzzyfix.base import base_environment, class_environment
from fuzzyfix.core import config
from fuzzyfix.core.scores import Err, take
from fuzzyfix.driver import fix_source
from fuzzyfix.environment import Env
from fuzzyfix.items import LocalVariableItem, TypeItem
from fuzzyfix.types import ArrayType, Type

logger = logging.getLogger(__name__)


def _local(spec: str) -> Tuple[str, str]:
	name, sep, type_text = spec.partition(":")
	if not sep or not name or not type_text:
		raise argparse.ArgumentTypeError(f"expected NAME:TYPE, got {spec!r}")
	return name.strip(), type_text.strip()


def _resolve_type(text: str, env: Env) -> Type:
	dims = 0
	while text.endswith("[]"):
		text = text[:-2].rstrip()
		dims += 1
	items = [i for i in env.things.get(text, ()) if isinstance(i, TypeItem)]
	if len(items) != 1:
		raise ValueError(f"unknown type {text!r}")
	t = items[0].raw
	for _ in range(dims):
		t = ArrayType(t)
	return t


def build_environment(locals_: List[Tuple[str, str]], in_class: bool = False) -> Env:
	env = class_environment() if in_class else base_environment()
	xs = [LocalVariableItem(name, _resolve_type(type_text, env)) for name, type_text in locals_]
	return env.add_local_objects(xs) if xs else env


def main(argv: Optional[List[str]] = None) -> int:
	"""
	Resolve one fragment and print up to --limit readings, best first.

	Exit status is 0 when at least one reading exists, 1 otherwise and 2 on
	bad arguments.
	"""
	parser = argparse.ArgumentParser(description="Rank the probable meanings of a Java-like statement fragment")
	parser.add_argument("fragment", help="Statement fragment to resolve ('-' reads stdin)")
	parser.add_argument(
		"--local",
		dest="locals_",
		action="append",
		type=_local,
		default=[],
		metavar="NAME:TYPE",
		help="Declare a local variable in scope (repeatable), e.g. x:int or names:String[]",
	)
	parser.add_argument("--in-class", action="store_true", help="Resolve inside an instance method (this is available)")
	parser.add_argument("-n", "--limit", type=int, default=5, help="Maximum number of readings to print (default: 5)")
	parser.add_argument(
		"--track-errors",
		action="store_true",
		help="Keep diagnostics for failed readings (slower); printed when nothing resolves",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Log parser candidates and their meanings")
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(name)s: %(message)s")
	if args.track_errors:
		config.TRACK_ERRORS = True
	if args.limit < 1:
		parser.error("--limit must be positive")

	try:
		env = build_environment(args.locals_, args.in_class)
	except ValueError as err:
		parser.error(str(err))

	source = sys.stdin.read() if args.fragment == "-" else args.fragment
	logger.debug("resolving %r with %d local(s)", source, len(args.locals_))
	results = fix_source(source, env)
	alts = take(results, args.limit)
	if not alts:
		best = results.best()
		if isinstance(best, Err) and config.TRACK_ERRORS:
			print(best.error.prefixed(""), file=sys.stderr)
		else:
			print("no interpretation", file=sys.stderr)
		return 1
	for alt in alts:
		_, stmts = alt.x
		print(f"{alt.p:.6g}\t" + "; ".join(repr(s) for s in stmts))
	return 0


__all__ = ["build_environment", "main"]
