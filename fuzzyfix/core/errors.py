# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostics carried by failed `Scored` values, plus hard internal failures.

`OneError`/`NestError` are data, not exceptions: they describe why no
interpretation was found and only exist when error tracking is on. Broken
invariants (a member whose parent is missing, an impossible place) are not
ambiguity and raise `InternalError` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class OneError:
	"""Leaf diagnostic."""

	message: str

	def prefixed(self, prefix: str) -> str:
		return prefix + self.message

	@property
	def short(self) -> str:
		return self.message


@dataclass(frozen=True)
class NestError:
	"""Aggregated diagnostic; children keep the provenance of each branch."""

	message: str
	children: Tuple["Error", ...]

	def prefixed(self, prefix: str) -> str:
		lines = [prefix + self.message]
		lines.extend(child.prefixed(prefix + "  ") for child in self.children)
		return "\n".join(lines)

	@property
	def short(self) -> str:
		return self.message


Error = Union[OneError, NestError]


class InternalError(RuntimeError):
	"""A broken invariant inside the engine (never a user-facing failure)."""


class DuplicateAstError(InternalError):
	"""The parser produced structurally equal candidate trees."""


__all__ = ["OneError", "NestError", "Error", "InternalError", "DuplicateAstError"]
