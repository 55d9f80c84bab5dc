# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lexical scopes for identifier resolution.

Four scope kinds share one capability, `resolve(name) -> Resolution`. Each
answers from its own bindings or forwards the call outward, unchanged:

  LocalScope -> (enclosing scope | Address)
  FunctionScope -> defining scope
  ClassScope -> GlobalScope
  GlobalScope -> GlobalVar | PossibleMethodCall

Resolution never fails. An identifier nothing knows about becomes a
`PossibleMethodCall`, since method existence is not known during this pass.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from .ast import FunctionDef
from .resolution import (
	Address,
	Arg,
	ClassVarGlobal,
	GlobalVar,
	InstanceVar,
	LocalVar,
	PossibleMethodCall,
	Resolution,
	classvar_key,
)
from .slots import SlotAllocator

PREDEFINED_GLOBALS = ("true", "false", "nil")
SELF_DESCRIPTOR_FIELD = "@__class__"


def is_instance_var_name(name: str) -> bool:
	return name.startswith("@") and not name.startswith("@@")


def is_class_var_name(name: str) -> bool:
	return name.startswith("@@") and len(name) > 2


class GlobalScope:
	"""Module-level names; the root of every scope chain."""

	def __init__(self) -> None:
		# dict keys double as an insertion-ordered set
		self._globals: Dict[str, None] = dict.fromkeys(PREDEFINED_GLOBALS)

	@property
	def globals(self) -> Tuple[str, ...]:
		return tuple(self._globals)

	def has_global(self, name: str) -> bool:
		return name in self._globals

	def add_global(self, name: str) -> None:
		if name not in self._globals:
			self._globals[name] = None

	def resolve(self, name: str) -> Resolution:
		if name in self._globals:
			return GlobalVar(name)
		return PossibleMethodCall(name)


class FunctionScope:
	"""
	Parameters of one function.

	Anything that is not a parameter is forwarded to the scope the function was
	*declared* in (`func.scope`), not the scope it is called from.
	"""

	def __init__(self, func: FunctionDef) -> None:
		if func.scope is None:
			raise ValueError(f"function '{func.name}' has no defining scope")
		self.func = func

	@property
	def defining_scope(self) -> "Scope":
		return self.func.scope

	def has_rest_parameter(self) -> bool:
		params = self.func.params
		return bool(params) and params[-1].rest

	def resolve(self, name: str) -> Resolution:
		for index, param in enumerate(self.func.params):
			if param.name == name:
				return Arg(index)
		return self.func.scope.resolve(name)


class LocalScope:
	"""Block-local bindings; chains to an enclosing scope for misses."""

	def __init__(self, bindings: Mapping[str, int], parent: Optional["Scope"] = None) -> None:
		self.locals: Dict[str, int] = dict(bindings)
		self.parent = parent

	@classmethod
	def from_names(cls, names: Iterable[str], parent: Optional["Scope"] = None) -> "LocalScope":
		"""Number `names` from 0 in order. Duplicate names are rejected."""
		bindings: Dict[str, int] = {}
		for name in names:
			if name in bindings:
				raise ValueError(f"duplicate local '{name}'")
			bindings[name] = len(bindings)
		return cls(bindings, parent)

	def resolve(self, name: str) -> Resolution:
		index = self.locals.get(name)
		if index is not None:
			return LocalVar(index)
		if self.parent is not None:
			return self.parent.resolve(name)
		# No context at all: treat the name as directly addressable storage.
		# Reachable only by constructing a parentless LocalScope; the layout
		# pass always chains one.
		return Address(name)


class ClassScope:
	"""
	Instance fields and class variables of one class.

	With a parent, the field table starts as a copy of the parent's (same slots,
	same order) and the dispatch allocator is the parent's own instance, so
	overrides reuse the parent's offsets and new methods/fields are appended.
	"""

	def __init__(
		self,
		global_scope: GlobalScope,
		name: str,
		allocator: Optional[SlotAllocator] = None,
		parent: Optional["ClassScope"] = None,
	) -> None:
		self.global_scope = global_scope
		self.name = name
		self.parent = parent
		if parent is not None:
			if allocator is not None and allocator is not parent.allocator:
				raise ValueError(f"class '{name}' must share the dispatch allocator of '{parent.name}'")
			self.allocator = parent.allocator
			self._fields: Dict[str, int] = dict(parent._fields)
		else:
			self.allocator = allocator if allocator is not None else SlotAllocator()
			self._fields = {SELF_DESCRIPTOR_FIELD: 0}

	@property
	def instance_vars(self) -> Tuple[str, ...]:
		return tuple(self._fields)

	@property
	def instance_size(self) -> int:
		return len(self._fields)

	def field_slot(self, name: str) -> Optional[int]:
		return self._fields.get(name)

	def add_field(self, name: str) -> None:
		if name not in self._fields:
			self._fields[name] = len(self._fields)

	def resolve(self, name: str) -> Resolution:
		if is_instance_var_name(name):
			slot = self._fields.get(name)
			if slot is not None:
				return InstanceVar(slot)
		elif is_class_var_name(name):
			return ClassVarGlobal(classvar_key(self.name, name[2:]))
		return self.global_scope.resolve(name)


Scope = Union[GlobalScope, FunctionScope, LocalScope, ClassScope]


__all__ = [
	"ClassScope",
	"FunctionScope",
	"GlobalScope",
	"LocalScope",
	"PREDEFINED_GLOBALS",
	"SELF_DESCRIPTOR_FIELD",
	"Scope",
	"is_class_var_name",
	"is_instance_var_name",
]
