# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostics reported by the driver.

Kept minimal: a message plus phase/severity and a best-effort source span.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""Build a span from a `Located` (or anything with line/column)."""
		if loc is None:
			return cls(file=file)
		return cls(file=file, line=getattr(loc, "line", None), column=getattr(loc, "column", None))


@dataclass
class Diagnostic:
	message: str
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)

	def render(self) -> str:
		"""`file:line:col: severity: message`, with `?` for unknown parts."""
		file = self.span.file or "<input>"
		line = self.span.line if self.span.line is not None else "?"
		column = self.span.column if self.span.column is not None else "?"
		return f"{file}:{line}:{column}: {self.severity}: {self.message}"

	def to_json(self) -> dict:
		return {
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
		}


__all__ = ["Diagnostic", "Span"]
