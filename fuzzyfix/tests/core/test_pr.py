from __future__ import annotations

import math

import pytest

from fuzzyfix.core import pr


def test_poisson_pdf_values():
	assert pr.poisson_pdf(0.3, 0) == pytest.approx(math.exp(-0.3))
	assert pr.poisson_pdf(0.3, 2) == pytest.approx(math.exp(-0.3) * 0.09 / 2)
	assert pr.poisson_pdf(0.3, -1) == 0.0
	assert pr.poisson_pdf(0.0, 0) == 1.0
	assert pr.poisson_pdf(0.0, 1) == 0.0


def test_poisson_pdf_sums_to_one():
	assert sum(pr.poisson_pdf(2.5, d) for d in range(60)) == pytest.approx(1.0)


def test_poisson_quantile_is_last_distance_above_threshold():
	e = 0.4
	q = pr.poisson_quantile(e, 0.01)
	assert q == 2
	assert pr.poisson_pdf(e, q) > 0.01
	assert pr.poisson_pdf(e, q + 1) <= 0.01


def test_poisson_quantile_scans_past_the_rising_part():
	# With many expected errors the pdf at 0 is tiny but the mode is not.
	e = 8.0
	assert pr.poisson_pdf(e, 0) < 0.01
	q = pr.poisson_quantile(e, 0.01)
	assert q > 8
	assert pr.poisson_pdf(e, q) > 0.01
	assert pr.poisson_pdf(e, q + 1) <= 0.01


def test_poisson_quantile_none_qualifies():
	assert pr.poisson_quantile(0.1, 1.0) == -1


def test_expected_errors_scale_with_length():
	assert pr.expected_errors("abcd", 0.1) == pytest.approx(0.4)
	assert pr.expected_errors("", 0.1) == 0.0


def test_exact_value_is_certain():
	assert pr.EXACT_VALUE == pr.CERTAIN == 1.0
	assert 0.0 < pr.NEW_VARIABLE < pr.CERTAIN
