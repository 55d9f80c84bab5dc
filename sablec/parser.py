# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Sable parser: lark LALR grammar -> `sablec.ast`.

Syntax errors surface as lark's `UnexpectedInput` (with line/column); shape
errors found while building the AST raise `ParseError`.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import List

from lark import Lark, Token, Tree

from .ast import (
	AssignStmt,
	Binary,
	Block,
	Call,
	ClassDef,
	ClassVarRef,
	Expr,
	ExprStmt,
	FunctionDef,
	InstanceVarRef,
	LetBlock,
	Literal,
	Located,
	Name,
	Param,
	Program,
	Send,
	Stmt,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


class ParseError(ValueError):
	"""User-facing error for well-formed syntax with invalid structure."""

	def __init__(self, message: str, *, loc: Located | None) -> None:
		super().__init__(message)
		self.loc = loc


def parse_program(source: str) -> Program:
	if source and not source.endswith("\n"):
		source += "\n"
	tree = _PARSER.parse(source)
	return _build_program(tree)


def _build_program(tree: Tree) -> Program:
	program = Program()
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "class_def":
			program.classes.append(_build_class_def(child))
		elif kind == "func_def":
			program.functions.append(_build_function(child))
		else:
			program.statements.append(_build_stmt(child))
	return program


def _build_class_def(tree: Tree) -> ClassDef:
	name_token = tree.children[0]
	superclass = None
	methods: List[FunctionDef] = []
	statements: List[Stmt] = []
	for child in tree.children[1:]:
		kind = _name(child)
		if kind == "superclass":
			superclass = child.children[0].value
		elif kind == "class_body":
			for member in child.children:
				if _name(member) == "func_def":
					methods.append(_build_function(member))
				else:
					statements.append(_build_stmt(member))
	return ClassDef(
		name=name_token.value,
		superclass=superclass,
		methods=methods,
		statements=statements,
		loc=_loc(tree),
	)


def _build_function(tree: Tree) -> FunctionDef:
	loc = _loc(tree)
	name_token = tree.children[0]
	params: List[Param] = []
	body = Block(statements=[])
	for child in tree.children[1:]:
		kind = _name(child)
		if kind == "params":
			params = [_build_param(p) for p in child.children if isinstance(p, Tree)]
		elif kind == "body":
			body = _build_block(child)
	seen = set()
	for param in params:
		if param.name in seen:
			raise ParseError(f"duplicate parameter '{param.name}' in '{name_token.value}'", loc=loc)
		seen.add(param.name)
	for param in params[:-1]:
		if param.rest:
			raise ParseError(f"rest parameter '*{param.name}' must be last", loc=loc)
	return FunctionDef(name=name_token.value, params=params, body=body, loc=loc)


def _build_param(tree: Tree) -> Param:
	name_token = next(child for child in tree.children if isinstance(child, Token) and child.type == "NAME")
	return Param(name=name_token.value, rest=_name(tree) == "rest_param")


def _build_block(tree: Tree) -> Block:
	return Block(statements=[_build_stmt(child) for child in tree.children if isinstance(child, Tree)])


def _build_stmt(tree: Tree) -> Stmt:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "assign_name":
		target = tree.children[0]
		return AssignStmt(loc=loc, target=Name(loc=_loc_from_token(target), ident=target.value), value=_build_expr(tree.children[1]))
	if kind == "assign_ivar":
		target = tree.children[0]
		return AssignStmt(loc=loc, target=InstanceVarRef(loc=_loc_from_token(target), ident=target.value), value=_build_expr(tree.children[1]))
	if kind == "assign_cvar":
		target = tree.children[0]
		return AssignStmt(loc=loc, target=ClassVarRef(loc=_loc_from_token(target), ident=target.value), value=_build_expr(tree.children[1]))
	if kind == "let_block":
		names = [child.value for child in tree.children if isinstance(child, Token) and child.type == "NAME"]
		if len(set(names)) != len(names):
			raise ParseError(f"duplicate name in 'let {', '.join(names)}'", loc=loc)
		body = next(child for child in tree.children if isinstance(child, Tree) and _name(child) == "body")
		return LetBlock(loc=loc, names=names, body=_build_block(body))
	if kind == "expr_stmt":
		return ExprStmt(loc=loc, value=_build_expr(tree.children[0]))
	raise ParseError(f"unexpected statement node '{kind}'", loc=loc)


def _build_expr(node: Tree | Token) -> Expr:
	kind = _name(node)
	if kind == "name":
		token = node.children[0]
		return Name(loc=_loc_from_token(token), ident=token.value)
	if kind == "ivar":
		token = node.children[0]
		return InstanceVarRef(loc=_loc_from_token(token), ident=token.value)
	if kind == "cvar":
		token = node.children[0]
		return ClassVarRef(loc=_loc_from_token(token), ident=token.value)
	if kind == "int_lit":
		token = node.children[0]
		return Literal(loc=_loc_from_token(token), value=int(token.value))
	if kind == "string_lit":
		token = node.children[0]
		try:
			value = ast.literal_eval(token.value)
		except (SyntaxError, ValueError) as err:
			raise ParseError(f"invalid string literal {token.value}", loc=_loc_from_token(token)) from err
		return Literal(loc=_loc_from_token(token), value=value)
	if kind == "call":
		name_token, args = node.children
		return Call(loc=_loc_from_token(name_token), func=name_token.value, args=_build_args(args))
	if kind == "send":
		receiver = _build_expr(node.children[0])
		method_token = node.children[1]
		args = _build_args(node.children[2]) if len(node.children) > 2 else []
		return Send(loc=_loc_from_token(method_token), receiver=receiver, method=method_token.value, args=args)
	if kind == "binary":
		left, op, right = node.children
		return Binary(loc=_loc(node), op=op.value, left=_build_expr(left), right=_build_expr(right))
	raise ParseError(f"unexpected expression node '{kind}'", loc=_loc(node) if isinstance(node, Tree) else None)


def _build_args(tree: Tree) -> List[Expr]:
	return [_build_expr(child) for child in tree.children]


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["ParseError", "parse_program"]
