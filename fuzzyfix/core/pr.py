# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Named probabilities and the typing noise model.

We score an interpretation A of the user's input B frequentist-style, as
Pr(user types B | user means A). Only relative order matters, so none of the
constants below are normalised against each other.

The noise model treats typos as a Poisson process: a string of length n typed
at per-character error rate r contains on average e = n*r errors, and the
probability of exactly d errors is the Poisson pdf at d. The quantile bounds
how deep a fuzzy trie search has to go before every further distance falls
below the minimum probability worth generating.
"""

from __future__ import annotations

import math

Prob = float

CERTAIN: Prob = 1.0

# Exact (typo-free) name hits, per syntactic role. A correctly spelled value is
# as good as it gets; other roles leave room for a typo interpretation.
EXACT_VALUE: Prob = CERTAIN
EXACT_TYPE: Prob = 0.9
EXACT_CALLABLE: Prob = 0.9
EXACT_CALLABLE_FIELD: Prob = 0.9
EXACT_FIELD: Prob = 0.9
EXACT_STATIC_FIELD: Prob = 0.9
EXACT_TYPE_FIELD: Prob = 0.9

# Declarations the user did not spell out.
NEW_VARIABLE: Prob = 0.5
NEW_FIELD: Prob = 0.3
NEW_STATIC_FIELD: Prob = 0.2

# Ways of writing an application other than the canonical one.
PAREN_INDEX: Prob = 0.7  # x(i) meaning x[i]
BRACK_CALL: Prob = 0.4  # f[a] meaning f(a)
JUXT: Prob = 0.5  # f a meaning f(a) or f[a]

# Array initialisers written without braces.
ARRAY_PAREN: Prob = 0.8  # x = (1, 2)
ARRAY_BARE: Prob = 0.8  # x = 1, 2
ARRAY_BRACK: Prob = 0.8  # x = [1, 2]

OBJECT_OF_ITEM: Prob = 0.3


def poisson_pdf(e: float, d: int) -> Prob:
	"""Probability of exactly `d` errors when `e` are expected."""
	if d < 0:
		return 0.0
	if e <= 0.0:
		return 1.0 if d == 0 else 0.0
	return math.exp(d * math.log(e) - e - math.lgamma(d + 1))


def poisson_quantile(e: float, min_prob: Prob) -> int:
	"""
	Largest `d` with `poisson_pdf(e, d) > min_prob`, or -1 if there is none.

	The pdf rises up to its mode floor(e) and falls afterwards, so the scan
	keeps going through the rising part even if early values are below the
	threshold; it never discards a distance for having too few errors.
	"""
	mode = int(math.floor(e))
	best = -1
	d = 0
	while True:
		p = poisson_pdf(e, d)
		if p > min_prob:
			best = d
		elif d > mode:
			return best
		d += 1


def expected_errors(typed: str, rate: float) -> float:
	return len(typed) * rate


__all__ = [
	"Prob",
	"CERTAIN",
	"EXACT_VALUE",
	"EXACT_TYPE",
	"EXACT_CALLABLE",
	"EXACT_CALLABLE_FIELD",
	"EXACT_FIELD",
	"EXACT_STATIC_FIELD",
	"EXACT_TYPE_FIELD",
	"NEW_VARIABLE",
	"NEW_FIELD",
	"NEW_STATIC_FIELD",
	"PAREN_INDEX",
	"BRACK_CALL",
	"JUXT",
	"ARRAY_PAREN",
	"ARRAY_BARE",
	"ARRAY_BRACK",
	"OBJECT_OF_ITEM",
	"poisson_pdf",
	"poisson_quantile",
	"expected_errors",
]
