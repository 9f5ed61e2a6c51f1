# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Process-wide settings for the scoring engine.

Values are read once from the environment at import time. They are module
attributes rather than arguments because the hot paths of the algebra consult
them on every failure; tests flip them with `monkeypatch.setattr`.

TRACK_ERRORS
  When true, failures are `Bad` values carrying a nested diagnostic. When
  false (the default) failures collapse to the cheap `Empty` singleton.
TYPING_ERROR_RATE
  Expected typos per typed character, the mean of the noise model.
MINIMUM_PROBABILITY
  Fuzzy candidates below this probability are never generated.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

_TRUE = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str, default: bool = False) -> bool:
	raw = os.environ.get(name)
	if raw is None:
		return default
	return raw.strip().lower() in _TRUE


def _env_float(name: str, default: float) -> float:
	raw = os.environ.get(name)
	if raw is None:
		return default
	try:
		value = float(raw)
	except ValueError:
		raise ValueError(f"{name} must be a float, got {raw!r}") from None
	if not 0.0 < value <= 1.0:
		raise ValueError(f"{name} must be in (0, 1], got {value}")
	return value


TRACK_ERRORS: bool = _env_flag("FUZZYFIX_TRACK_ERRORS")
TYPING_ERROR_RATE: float = _env_float("FUZZYFIX_TYPING_ERROR_RATE", 0.1)
MINIMUM_PROBABILITY: float = _env_float("FUZZYFIX_MINIMUM_PROBABILITY", 0.01)

if TRACK_ERRORS:
	logger.warning("PERFORMANCE WARNING: error tracking is on, Scored will be slower than otherwise")


__all__ = ["TRACK_ERRORS", "TYPING_ERROR_RATE", "MINIMUM_PROBABILITY"]
