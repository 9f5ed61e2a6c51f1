# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Probability algebra, noise model and name index shared by every layer."""
