# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
sablec: identifier resolution and dispatch-slot layout for the Sable compiler.

  resolution: tagged results returned by every scope's `resolve(name)`
  scope:      GlobalScope / FunctionScope / LocalScope / ClassScope
  slots:      SlotAllocator shared by one class hierarchy
  layout:     single pass building class layouts and resolving identifiers
  parser:     lark grammar -> AST

The CLI entrypoint is `sablec.sablec:main`.
"""

__all__ = ["ast", "layout", "parser", "resolution", "scope", "slots"]
