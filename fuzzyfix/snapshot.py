# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Versioned holder for the current environment.

An external indexer builds environments in its own thread and publishes them
here; resolvers read whatever snapshot is current. `Env` is immutable, so a
reader that grabbed a snapshot can keep using it while newer ones are
published. Publication swaps a single `(version, env)` pair.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from fuzzyfix.environment import Env


@dataclass(frozen=True)
class Published:
	version: int
	env: Env


class EnvSnapshot:
	"""Single-pointer publication of environment snapshots."""

	def __init__(self, env: Optional[Env] = None) -> None:
		self._cond = threading.Condition()
		self._version = 0
		self._current: Optional[Published] = None if env is None else Published(0, env)

	def publish(self, env: Env) -> Published:
		with self._cond:
			self._version += 1
			published = Published(self._version, env)
			self._current = published
			self._cond.notify_all()
			return published

	def current(self) -> Published:
		# A single attribute read; no lock needed.
		current = self._current
		if current is None:
			raise RuntimeError("No environment published")
		return current

	def wait_for(self, version: int, timeout: Optional[float] = None) -> Optional[Published]:
		"""
		Block until a snapshot at least as new as `version` is published.

		Returns None on timeout.
		"""
		with self._cond:
			ok = self._cond.wait_for(
				lambda: self._current is not None and self._current.version >= version,
				timeout,
			)
			return self._current if ok else None


__all__ = ["Published", "EnvSnapshot"]
