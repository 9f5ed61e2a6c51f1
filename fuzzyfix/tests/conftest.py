# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from fuzzyfix.core import config


@pytest.fixture(autouse=True)
def _cheap_failures(monkeypatch) -> None:
	"""
	Tests run with error tracking off unless they ask for `track_errors`.

	FUZZYFIX_TRACK_ERRORS in the developer's shell must not change what the
	suite observes.
	"""
	monkeypatch.setattr(config, "TRACK_ERRORS", False)


@pytest.fixture
def track_errors(monkeypatch) -> None:
	monkeypatch.setattr(config, "TRACK_ERRORS", True)
