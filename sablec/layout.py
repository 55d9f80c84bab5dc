# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Class layout and identifier resolution over a parsed program.

One top-to-bottom pass:

  1. top-level assignment targets become globals;
  2. each class declaration, in source order, gets a `ClassScope`. A root class
     owns a fresh `SlotAllocator`; a subclass is handed its parent's allocator
     instance. Fields referenced in the class are appended, and every method
     definition and every send inside the class gets a dispatch offset;
  3. every identifier in every body is resolved against the scope chain of
     its lexical position and recorded as a `ResolvedRef`.

The result is what code generation consumes: field slots, dispatch offsets
and one `Resolution` per identifier occurrence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from . import ast
from .resolution import Resolution
from .scope import ClassScope, FunctionScope, GlobalScope, LocalScope, Scope
from .slots import BUILTIN_OFFSETS, CallSite, SlotAllocator

logger = logging.getLogger(__name__)

MAIN_CONTEXT = "<main>"


class LayoutError(ValueError):
	"""User-facing error in class declarations (unknown superclass, redefinition)."""

	def __init__(self, message: str, *, loc: ast.Located | None) -> None:
		super().__init__(message)
		self.loc = loc


@dataclass(frozen=True)
class ResolvedRef:
	loc: ast.Located
	context: str
	name: str
	result: Resolution

	def to_json(self) -> dict:
		return {
			"line": self.loc.line,
			"column": self.loc.column,
			"context": self.context,
			"name": self.name,
			"result": self.result.to_json(),
		}


@dataclass(frozen=True)
class VTableEntry:
	offset: int
	name: str
	# Class whose definition occupies the slot; None for built-in entries.
	owner: Optional[str]


@dataclass(frozen=True)
class FunctionInfo:
	"""What the prologue emitter needs to know about one function/method."""

	name: str
	owner: Optional[str]
	arity: int
	has_rest: bool


@dataclass
class ClassLayout:
	name: str
	parent: Optional["ClassLayout"]
	scope: ClassScope
	methods: List[str] = field(default_factory=list)

	@property
	def allocator(self) -> SlotAllocator:
		return self.scope.allocator

	@property
	def instance_vars(self) -> Sequence[str]:
		return self.scope.instance_vars

	@property
	def instance_size(self) -> int:
		return self.scope.instance_size

	def vtable(self) -> List[VTableEntry]:
		"""Dispatch entries visible on this class, ordered by offset."""
		entries: Dict[str, VTableEntry] = {
			name: VTableEntry(offset=offset, name=name, owner=None) for name, offset in BUILTIN_OFFSETS.items()
		}
		# Walk root-first so the nearest definition wins.
		for cls in reversed(list(self.ancestry())):
			for method in cls.methods:
				entries[method] = VTableEntry(offset=self.allocator.get_offset(method), name=method, owner=cls.name)
		return sorted(entries.values(), key=lambda entry: entry.offset)

	def ancestry(self):
		"""Yield this class, then its parent, up to the root."""
		cls: Optional[ClassLayout] = self
		while cls is not None:
			yield cls
			cls = cls.parent

	def to_json(self) -> dict:
		return {
			"name": self.name,
			"parent": self.parent.name if self.parent else None,
			"instance_size": self.instance_size,
			"fields": {name: self.scope.field_slot(name) for name in self.instance_vars},
			"vtable": [{"offset": e.offset, "name": e.name, "owner": e.owner} for e in self.vtable()],
		}


@dataclass
class ProgramLayout:
	global_scope: GlobalScope
	classes: Dict[str, ClassLayout] = field(default_factory=dict)
	functions: List[FunctionInfo] = field(default_factory=list)
	references: List[ResolvedRef] = field(default_factory=list)

	def to_json(self) -> dict:
		return {
			"globals": list(self.global_scope.globals),
			"classes": [cls.to_json() for cls in self.classes.values()],
			"functions": [
				{"name": fn.name, "owner": fn.owner, "arity": fn.arity, "rest": fn.has_rest} for fn in self.functions
			],
			"references": [ref.to_json() for ref in self.references],
		}


def build_layout(program: ast.Program) -> ProgramLayout:
	global_scope = GlobalScope()
	layout = ProgramLayout(global_scope=global_scope)

	for stmt in program.statements:
		if isinstance(stmt, ast.AssignStmt) and isinstance(stmt.target, ast.Name):
			global_scope.add_global(stmt.target.ident)

	for class_def in program.classes:
		_declare_class(layout, class_def)

	for class_def in program.classes:
		class_layout = layout.classes[class_def.name]
		_Resolver(layout, class_def.name).block(class_def.statements, class_layout.scope)
		for method in class_def.methods:
			method.scope = class_layout.scope
			_resolve_function(layout, method, owner=class_def.name)

	for func in program.functions:
		func.scope = global_scope
		_resolve_function(layout, func, owner=None)

	_Resolver(layout, MAIN_CONTEXT).block(program.statements, global_scope)

	layout.references.sort(key=lambda ref: (ref.loc.line, ref.loc.column))
	return layout


def _declare_class(layout: ProgramLayout, class_def: ast.ClassDef) -> None:
	if class_def.name in layout.classes:
		raise LayoutError(f"class '{class_def.name}' already defined", loc=class_def.loc)
	parent: Optional[ClassLayout] = None
	if class_def.superclass is not None:
		parent = layout.classes.get(class_def.superclass)
		if parent is None:
			raise LayoutError(
				f"unknown superclass '{class_def.superclass}' for class '{class_def.name}'",
				loc=class_def.loc,
			)
	if parent is None:
		scope = ClassScope(layout.global_scope, class_def.name, SlotAllocator())
	else:
		scope = ClassScope(layout.global_scope, class_def.name, parent=parent.scope)
	layout.global_scope.add_global(class_def.name)
	class_layout = ClassLayout(name=class_def.name, parent=parent, scope=scope)
	layout.classes[class_def.name] = class_layout
	logger.debug(
		"class %s%s: %d inherited field(s)",
		class_def.name,
		f" < {parent.name}" if parent else "",
		scope.instance_size,
	)

	bodies: List[ast.Stmt] = list(class_def.statements)
	for method in class_def.methods:
		bodies.extend(method.body.statements)
	exprs = list(ast.walk_exprs(bodies))

	for expr in exprs:
		if isinstance(expr, ast.InstanceVarRef) and scope.field_slot(expr.ident) is None:
			scope.add_field(expr.ident)
			logger.debug("  field %s -> slot %d", expr.ident, scope.field_slot(expr.ident))

	for method in class_def.methods:
		if method.name not in class_layout.methods:
			class_layout.methods.append(method.name)
		offset = scope.allocator.alloc_offset(method.name)
		logger.debug("  def %s -> offset %d", method.name, offset)

	for expr in exprs:
		if isinstance(expr, ast.Send):
			site = CallSite(receiver=_receiver_kind(expr.receiver), method=expr.method, extra=len(expr.args))
			scope.allocator.alloc_call_site(site)


def _receiver_kind(expr: ast.Expr) -> str:
	if isinstance(expr, ast.InstanceVarRef):
		return "ivar"
	if isinstance(expr, ast.ClassVarRef):
		return "cvar"
	if isinstance(expr, ast.Name):
		return "name"
	if isinstance(expr, ast.Literal):
		return "literal"
	return "expr"


def _resolve_function(layout: ProgramLayout, func: ast.FunctionDef, owner: Optional[str]) -> None:
	fn_scope = FunctionScope(func)
	layout.functions.append(
		FunctionInfo(name=func.name, owner=owner, arity=len(func.params), has_rest=fn_scope.has_rest_parameter())
	)
	context = f"{owner}#{func.name}" if owner else func.name
	_Resolver(layout, context).block(func.body.statements, fn_scope)


class _Resolver:
	"""Resolve every identifier under a statement list, recording the results."""

	def __init__(self, layout: ProgramLayout, context: str) -> None:
		self.layout = layout
		self.context = context

	def block(self, statements: Sequence[ast.Stmt], scope: Scope) -> None:
		for stmt in statements:
			if isinstance(stmt, ast.LetBlock):
				try:
					inner = LocalScope.from_names(stmt.names, parent=scope)
				except ValueError as exc:
					raise LayoutError(str(exc), loc=stmt.loc) from exc
				self.block(stmt.body.statements, inner)
			elif isinstance(stmt, ast.AssignStmt):
				self.expr(stmt.target, scope)
				self.expr(stmt.value, scope)
			elif isinstance(stmt, ast.ExprStmt):
				self.expr(stmt.value, scope)

	def expr(self, expr: ast.Expr, scope: Scope) -> None:
		if isinstance(expr, (ast.Name, ast.InstanceVarRef, ast.ClassVarRef)):
			self._record(expr.loc, expr.ident, scope)
		elif isinstance(expr, ast.Call):
			self._record(expr.loc, expr.func, scope)
			for arg in expr.args:
				self.expr(arg, scope)
		elif isinstance(expr, ast.Send):
			self.expr(expr.receiver, scope)
			for arg in expr.args:
				self.expr(arg, scope)
		elif isinstance(expr, ast.Binary):
			self.expr(expr.left, scope)
			self.expr(expr.right, scope)

	def _record(self, loc: ast.Located, name: str, scope: Scope) -> None:
		self.layout.references.append(ResolvedRef(loc=loc, context=self.context, name=name, result=scope.resolve(name)))


__all__ = [
	"ClassLayout",
	"FunctionInfo",
	"LayoutError",
	"MAIN_CONTEXT",
	"ProgramLayout",
	"ResolvedRef",
	"VTableEntry",
	"build_layout",
]
