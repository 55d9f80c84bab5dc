# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
LocalScope: block bindings, chaining, and the parentless Address fallback.
"""

from __future__ import annotations

import pytest

from sablec.ast import Block, FunctionDef, Located, Param
from sablec.resolution import Address, Arg, GlobalVar, LocalVar, PossibleMethodCall
from sablec.scope import FunctionScope, GlobalScope, LocalScope


def _func_scope() -> FunctionScope:
	gs = GlobalScope()
	func = FunctionDef(
		name="f",
		params=[Param("arg1"), Param("arg2"), Param("arg3")],
		body=Block(statements=[]),
		loc=Located(line=1, column=1),
		scope=gs,
	)
	return FunctionScope(func)


def _local_scope() -> LocalScope:
	return LocalScope({"local1": 0, "local2": 1}, _func_scope())


def test_parentless_scope_without_locals_yields_address():
	ls = LocalScope({}, None)
	assert ls.resolve("some_var") == Address("some_var")


def test_finds_locals_by_index():
	ls = _local_scope()
	assert ls.resolve("local1") == LocalVar(0)
	assert ls.resolve("local2") == LocalVar(1)


def test_misses_reach_global_fallback():
	ls = _local_scope()
	assert ls.resolve("undefined_arg") == PossibleMethodCall("undefined_arg")
	assert ls.resolve("my_global") == PossibleMethodCall("my_global")
	assert ls.resolve("true") == GlobalVar("true")


def test_arguments_resolve_through_local_scope():
	assert _local_scope().resolve("arg2") == Arg(1)


def test_nested_blocks_shadow_outer_locals():
	outer = LocalScope.from_names(["a", "b"], GlobalScope())
	inner = LocalScope.from_names(["b"], outer)
	assert inner.resolve("b") == LocalVar(0)
	assert inner.resolve("a") == LocalVar(0)
	assert outer.resolve("b") == LocalVar(1)


def test_from_names_rejects_duplicates():
	with pytest.raises(ValueError):
		LocalScope.from_names(["a", "a"])
