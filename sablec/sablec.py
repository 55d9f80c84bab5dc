# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
sablec: print class layouts and identifier resolutions for a Sable file.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from lark.exceptions import UnexpectedInput

from .diagnostics import Diagnostic, Span
from .layout import LayoutError, ProgramLayout, build_layout
from .parser import ParseError, parse_program

LOG_LEVEL_ENV = "SABLEC_LOG_LEVEL"


def analyze_file(source_path: Path) -> tuple[Optional[ProgramLayout], List[Diagnostic]]:
	"""
	Parse and lay out `source_path`.

	User errors come back as diagnostics; anything else propagates as an
	internal compiler error.
	"""
	file = str(source_path)
	try:
		source = source_path.read_text()
	except OSError as err:
		return None, [Diagnostic(message=f"cannot read source: {err.strerror or err}", phase="driver", span=Span(file=file))]
	try:
		program = parse_program(source)
	except ParseError as err:
		return None, [Diagnostic(message=str(err), phase="parser", span=Span.from_loc(err.loc, file))]
	except UnexpectedInput as err:
		span = Span(file=file, line=getattr(err, "line", None), column=getattr(err, "column", None))
		return None, [Diagnostic(message=str(err).strip(), phase="parser", span=span)]
	try:
		layout = build_layout(program)
	except LayoutError as err:
		return None, [Diagnostic(message=str(err), phase="layout", span=Span.from_loc(err.loc, file))]
	return layout, []


def format_layout(layout: ProgramLayout, dump_refs: bool) -> str:
	lines: List[str] = []
	lines.append("globals: " + ", ".join(layout.global_scope.globals))
	for cls in layout.classes.values():
		header = f"class {cls.name}"
		if cls.parent is not None:
			header += f" < {cls.parent.name}"
		lines.append(f"{header} (instance_size={cls.instance_size})")
		for name in cls.instance_vars:
			lines.append(f"  field {cls.scope.field_slot(name):>3} {name}")
		for entry in cls.vtable():
			owner = entry.owner or "builtin"
			lines.append(f"  slot  {entry.offset:>3} {entry.name} ({owner})")
	for fn in layout.functions:
		name = f"{fn.owner}#{fn.name}" if fn.owner else fn.name
		rest = " +rest" if fn.has_rest else ""
		lines.append(f"def {name}/{fn.arity}{rest}")
	if dump_refs:
		for ref in layout.references:
			lines.append(f"{ref.loc.line}:{ref.loc.column} [{ref.context}] {ref.name} -> {ref.result}")
	return "\n".join(lines)


def _configure_logging(verbose: bool) -> None:
	level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
	level = getattr(logging, level_name, None)
	if not isinstance(level, int):
		level = logging.WARNING
	logging.basicConfig(level=level, format="[%(name)s] %(levelname)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	ap = argparse.ArgumentParser(description="sablec: Sable class layout and identifier resolution")
	ap.add_argument("source", type=Path, help="Sable source file")
	ap.add_argument("--json", action="store_true", help="Print layout/diagnostics as JSON")
	ap.add_argument("--dump-refs", action="store_true", help="Also print every resolved identifier")
	ap.add_argument("-v", "--verbose", action="store_true", help="Log layout decisions to stderr")
	args = ap.parse_args(argv)

	_configure_logging(args.verbose)

	layout, diagnostics = analyze_file(args.source)
	if diagnostics:
		if args.json:
			print(json.dumps({"exit_code": 1, "diagnostics": [d.to_json() for d in diagnostics]}))
		else:
			for diag in diagnostics:
				print(diag.render(), file=sys.stderr)
		return 1

	if args.json:
		print(json.dumps({"exit_code": 0, "layout": layout.to_json()}))
	else:
		print(format_layout(layout, dump_refs=args.dump_refs))
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
