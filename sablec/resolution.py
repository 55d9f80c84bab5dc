# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolution results for free identifiers.

Every scope answers `resolve(name)` with exactly one of the values below. The
code generator switches on the concrete class (or on `kind`) to decide which
load/store instruction to emit; none of these carry behavior of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class LocalVar:
	"""Block-local binding at position `index`."""

	index: int
	kind = "lvar"

	def to_json(self) -> dict:
		return {"kind": self.kind, "index": self.index}


@dataclass(frozen=True)
class Arg:
	"""Function parameter at position `index` (0-based)."""

	index: int
	kind = "arg"

	def to_json(self) -> dict:
		return {"kind": self.kind, "index": self.index}


@dataclass(frozen=True)
class InstanceVar:
	"""Instance field at record slot `index`."""

	index: int
	kind = "ivar"

	def to_json(self) -> dict:
		return {"kind": self.kind, "index": self.index}


@dataclass(frozen=True)
class GlobalVar:
	name: str
	kind = "global"

	def to_json(self) -> dict:
		return {"kind": self.kind, "name": self.name}


@dataclass(frozen=True)
class ClassVarGlobal:
	"""
	Class variable stored as a global.

	There is no per-class storage; `key` is the mangled global name built by
	`classvar_key`.
	"""

	key: str
	kind = "cvar"

	def to_json(self) -> dict:
		return {"kind": self.kind, "key": self.key}


@dataclass(frozen=True)
class Address:
	"""Raw storage cell addressed by its own name (no scope context)."""

	name: str
	kind = "addr"

	def to_json(self) -> dict:
		return {"kind": self.kind, "name": self.name}


@dataclass(frozen=True)
class PossibleMethodCall:
	"""Not a known binding; treated as an implicit send resolved later."""

	name: str
	kind = "possible_callm"

	def to_json(self) -> dict:
		return {"kind": self.kind, "name": self.name}


Resolution = Union[LocalVar, Arg, InstanceVar, GlobalVar, ClassVarGlobal, Address, PossibleMethodCall]

CLASSVAR_PREFIX = "__classvar__"


def classvar_key(class_name: str, bare_name: str) -> str:
	"""Mangle a class variable into its global storage key."""
	return f"{CLASSVAR_PREFIX}{class_name}__{bare_name}"


__all__ = [
	"Address",
	"Arg",
	"CLASSVAR_PREFIX",
	"ClassVarGlobal",
	"GlobalVar",
	"InstanceVar",
	"LocalVar",
	"PossibleMethodCall",
	"Resolution",
	"classvar_key",
]
