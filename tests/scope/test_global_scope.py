# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
GlobalScope: predefined constants, idempotent registration, call fallback.
"""

from __future__ import annotations

from sablec.resolution import Address, GlobalVar, PossibleMethodCall
from sablec.scope import GlobalScope


def test_true_false_nil_are_globals_on_creation():
	gs = GlobalScope()
	assert set(gs.globals) == {"true", "false", "nil"}
	for name in ("true", "false", "nil"):
		assert gs.resolve(name) == GlobalVar(name)


def test_added_global_resolves_as_global():
	gs = GlobalScope()
	gs.add_global("some_global")
	assert gs.resolve("some_global") == GlobalVar("some_global")
	assert gs.has_global("some_global")


def test_unknown_name_is_possible_method_call_not_address():
	gs = GlobalScope()
	result = gs.resolve("some_global")
	assert result == PossibleMethodCall("some_global")
	assert result != Address("some_global")
	assert result != GlobalVar("some_global")


def test_add_global_is_idempotent():
	gs = GlobalScope()
	gs.add_global("g")
	gs.add_global("g")
	assert gs.globals.count("g") == 1
	assert len(gs.globals) == 4
	assert gs.add_global("true") is None
	assert len(gs.globals) == 4
