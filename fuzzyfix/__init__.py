# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
fuzzyfix: rank the probable meanings of broken statement fragments.

The package is layered leaves-first:

core/        probability algebra (`Scored`), noise model, trie, errors, config
types/items  the entities an environment names
environment  immutable name-resolution snapshot plus fuzzy query combinators
parser/      lark grammar producing every candidate AST for a fragment
semantics    AST -> scored denotations
driver       tokens + env -> ranked (env, statements) interpretations
"""

__version__ = "0.1.0"
