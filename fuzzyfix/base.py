# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The built-in environment every snapshot starts from.

Holds the primitive type names, a handful of `java.lang` classes and a default
`Main.main` method so that fragments typed at the top level have a callable
place to declare locals in. Items are module-level singletons: items compare
by identity, so tests and the indexer must share these exact objects.
"""

from __future__ import annotations

from typing import Dict, List

from fuzzyfix.environment import Env
from fuzzyfix.items import (
	ClassItem,
	ConstructorItem,
	Item,
	LOCAL_PKG,
	MethodItem,
	PackageItem,
	PrimTypeItem,
	StaticFieldItem,
	StaticMethodItem,
	ThisItem,
)
from fuzzyfix.types import ArrayType, BOOLEAN, CHAR, DOUBLE, INT, PRIMITIVES, VOID

JAVA_LANG = PackageItem("java.lang")

PRIM_ITEMS: Dict[str, PrimTypeItem] = {name: PrimTypeItem(name, ty) for name, ty in PRIMITIVES.items()}

OBJECT = ClassItem("Object", JAVA_LANG)
OBJECT_TYPE = OBJECT.raw
OBJECT_CTOR = ConstructorItem("Object", OBJECT)
OBJECT_EQUALS = MethodItem("equals", OBJECT, BOOLEAN, (OBJECT_TYPE,))
OBJECT_HASH_CODE = MethodItem("hashCode", OBJECT, INT)

STRING = ClassItem("String", JAVA_LANG, OBJECT_TYPE)
STRING_TYPE = STRING.raw
STRING_CTOR = ConstructorItem("String", STRING)
STRING_LENGTH = MethodItem("length", STRING, INT)
STRING_CHAR_AT = MethodItem("charAt", STRING, CHAR, (INT,))

MATH = ClassItem("Math", JAVA_LANG, OBJECT_TYPE)
MATH_PI = StaticFieldItem("PI", DOUBLE, MATH, True)
MATH_ABS = StaticMethodItem("abs", MATH, INT, (INT,))
MATH_MAX = StaticMethodItem("max", MATH, INT, (INT, INT))

MAIN = ClassItem("Main", LOCAL_PKG, OBJECT_TYPE)
MAIN_THIS = ThisItem("this", MAIN)
MAIN_METHOD = StaticMethodItem("main", MAIN, VOID, (ArrayType(STRING_TYPE),))

BASE_ITEMS: List[Item] = [
	JAVA_LANG,
	*PRIM_ITEMS.values(),
	OBJECT,
	OBJECT_CTOR,
	OBJECT_EQUALS,
	OBJECT_HASH_CODE,
	STRING,
	STRING_CTOR,
	STRING_LENGTH,
	STRING_CHAR_AT,
	MATH,
	MATH_PI,
	MATH_ABS,
	MATH_MAX,
	MAIN,
	MAIN_METHOD,
]

# Shadowing priorities: the enclosing method is the most local thing we know
# of, then its class, then packages.
BASE_SCOPE: Dict[Item, int] = {
	MAIN_METHOD: 2,
	MAIN: 3,
	JAVA_LANG: 4,
	LOCAL_PKG: 4,
}


def base_environment() -> Env:
	"""Fresh base environment positioned inside `Main.main`."""
	return Env.from_items(BASE_ITEMS, BASE_SCOPE, place=MAIN_METHOD)


def class_environment() -> Env:
	"""Base environment positioned inside an instance method of `Main`."""
	run = MethodItem("run", MAIN, VOID)
	return Env.from_items([*BASE_ITEMS, run, MAIN_THIS], {**BASE_SCOPE, run: 2, MAIN_THIS: 3}, place=run)


__all__ = [
	"JAVA_LANG",
	"PRIM_ITEMS",
	"OBJECT",
	"OBJECT_TYPE",
	"STRING",
	"STRING_TYPE",
	"STRING_LENGTH",
	"STRING_CHAR_AT",
	"MATH",
	"MATH_PI",
	"MATH_ABS",
	"MATH_MAX",
	"MAIN",
	"MAIN_THIS",
	"MAIN_METHOD",
	"BASE_ITEMS",
	"BASE_SCOPE",
	"base_environment",
	"class_environment",
]
