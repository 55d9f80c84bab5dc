# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Surface AST produced by `sablec.parser`.

Only the shapes the layout/resolution pass needs are modelled: declarations,
assignments, `let` blocks and the expressions that can mention identifiers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class Param:
	name: str
	# `*name`: captures the remaining arguments.
	rest: bool = False


@dataclass
class Block:
	statements: List["Stmt"]


class Stmt:
	loc: Located


class Expr:
	loc: Located


@dataclass
class ExprStmt(Stmt):
	loc: Located
	value: Expr


@dataclass
class AssignStmt(Stmt):
	loc: Located
	target: Expr
	value: Expr


@dataclass
class LetBlock(Stmt):
	"""`let a, b ... end`: introduces block-local bindings numbered from 0."""

	loc: Located
	names: List[str]
	body: Block


@dataclass
class Literal(Expr):
	loc: Located
	value: object


@dataclass
class Name(Expr):
	loc: Located
	ident: str


@dataclass
class InstanceVarRef(Expr):
	loc: Located
	ident: str  # includes the leading "@"


@dataclass
class ClassVarRef(Expr):
	loc: Located
	ident: str  # includes the leading "@@"


@dataclass
class Binary(Expr):
	loc: Located
	op: str
	left: Expr
	right: Expr


@dataclass
class Call(Expr):
	"""Call with an implicit receiver: `f(a, b)`."""

	loc: Located
	func: str
	args: List[Expr]


@dataclass
class Send(Expr):
	"""Explicit-receiver send: `recv.method(a, b)`."""

	loc: Located
	receiver: Expr
	method: str
	args: List[Expr]


@dataclass
class FunctionDef:
	name: str
	params: Sequence[Param]
	body: Block
	loc: Located
	# Defining (lexical) scope; filled in by the layout pass.
	scope: Optional[Any] = None


@dataclass
class ClassDef:
	name: str
	superclass: Optional[str]
	methods: List[FunctionDef]
	statements: List[Stmt]
	loc: Located


@dataclass
class Program:
	classes: List[ClassDef] = field(default_factory=list)
	functions: List[FunctionDef] = field(default_factory=list)
	statements: List[Stmt] = field(default_factory=list)


def walk_exprs(stmts: Sequence[Stmt]):
	"""Yield every expression under `stmts` in source order (pre-order)."""
	for stmt in stmts:
		if isinstance(stmt, LetBlock):
			yield from walk_exprs(stmt.body.statements)
		elif isinstance(stmt, AssignStmt):
			yield from _walk_expr(stmt.target)
			yield from _walk_expr(stmt.value)
		elif isinstance(stmt, ExprStmt):
			yield from _walk_expr(stmt.value)


def _walk_expr(expr: Expr):
	yield expr
	if isinstance(expr, Binary):
		yield from _walk_expr(expr.left)
		yield from _walk_expr(expr.right)
	if isinstance(expr, Send):
		yield from _walk_expr(expr.receiver)
	if isinstance(expr, (Send, Call)):
		for arg in expr.args:
			yield from _walk_expr(arg)
