# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser: declarations, parameters, let blocks and the expression forms the
resolver walks.
"""

from __future__ import annotations

import pytest
from lark.exceptions import UnexpectedInput

from sablec import ast
from sablec.parser import ParseError, parse_program


def test_parses_class_with_superclass_and_methods():
	prog = parse_program(
		"""
class Base
end

class Point < Base
  def initialize(x, y)
    @x = x
  end

  def norm
    @x
  end
end
"""
	)
	assert [c.name for c in prog.classes] == ["Base", "Point"]
	point = prog.classes[1]
	assert point.superclass == "Base"
	assert [m.name for m in point.methods] == ["initialize", "norm"]
	assert [p.name for p in point.methods[0].params] == ["x", "y"]
	assign = point.methods[0].body.statements[0]
	assert isinstance(assign, ast.AssignStmt)
	assert isinstance(assign.target, ast.InstanceVarRef)
	assert assign.target.ident == "@x"
	assert point.loc.line == 5


def test_rest_parameter_is_marked():
	prog = parse_program("def log(fmt, *args)\n  printf(fmt, args)\nend\n")
	fn = prog.functions[0]
	assert [(p.name, p.rest) for p in fn.params] == [("fmt", False), ("args", True)]


def test_rest_parameter_must_be_last():
	with pytest.raises(ParseError):
		parse_program("def f(*a, b)\nend\n")


def test_duplicate_parameters_are_rejected():
	with pytest.raises(ParseError):
		parse_program("def f(a, a)\nend\n")


def test_top_level_statements_and_comments():
	prog = parse_program("# leading comment\nx = 1  # trailing\n\n  # indented\ny = x + 2\n")
	assert len(prog.statements) == 2
	second = prog.statements[1]
	assert isinstance(second, ast.AssignStmt)
	assert isinstance(second.value, ast.Binary)
	assert second.value.op == "+"


def test_let_block_and_nested_let():
	prog = parse_program("def f\n  let a, b\n    let c\n      c = a\n    end\n  end\nend\n")
	outer = prog.functions[0].body.statements[0]
	assert isinstance(outer, ast.LetBlock)
	assert outer.names == ["a", "b"]
	inner = outer.body.statements[0]
	assert isinstance(inner, ast.LetBlock)
	assert inner.names == ["c"]


def test_duplicate_let_names_are_rejected():
	with pytest.raises(ParseError):
		parse_program("let a, a\nend\n")


def test_sends_calls_and_class_variables():
	prog = parse_program('@@count = obj.size(1, "two") * count(x)\n')
	stmt = prog.statements[0]
	assert isinstance(stmt.target, ast.ClassVarRef)
	product = stmt.value
	assert isinstance(product, ast.Binary)
	send, call = product.left, product.right
	assert isinstance(send, ast.Send)
	assert send.method == "size"
	assert isinstance(send.receiver, ast.Name)
	assert [a.value for a in send.args] == [1, "two"]
	assert isinstance(call, ast.Call)
	assert call.func == "count"


def test_string_escapes_are_decoded():
	prog = parse_program('s = "a\\tb\\n"\n')
	assert prog.statements[0].value.value == "a\tb\n"


@pytest.mark.parametrize("literal", ['"\\x4"', '"\\N{bogus}"'])
def test_malformed_string_escape_is_rejected(literal):
	with pytest.raises(ParseError) as info:
		parse_program(f"x = {literal}\n")
	assert "invalid string literal" in str(info.value)
	assert (info.value.loc.line, info.value.loc.column) == (1, 5)


def test_send_without_arguments_and_chaining():
	prog = parse_program("a.b.c\n")
	outer = prog.statements[0].value
	assert isinstance(outer, ast.Send)
	assert outer.method == "c"
	assert outer.args == []
	assert isinstance(outer.receiver, ast.Send)
	assert outer.receiver.method == "b"


def test_source_without_trailing_newline():
	prog = parse_program("x = 1")
	assert len(prog.statements) == 1


def test_syntax_error_reports_position():
	with pytest.raises(UnexpectedInput) as info:
		parse_program("class\nend\n")
	assert info.value.line == 1
