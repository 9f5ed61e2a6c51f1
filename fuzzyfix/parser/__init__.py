# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fragment parser: source text to every candidate syntax tree.

The resolver treats this package as an external supplier; `fix` accepts any
callable with the signature of `parse_tokens`.
"""

from .parser import FragmentSyntaxError, lex, parse_fragment, parse_tokens

__all__ = ["FragmentSyntaxError", "lex", "parse_fragment", "parse_tokens"]
