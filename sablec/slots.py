# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dispatch-slot allocation for class hierarchies.

A `SlotAllocator` hands out integer offsets into a class's dispatch table.
Offsets are interned by dispatch name: the first request for a name gets the
current high-water mark, every later request for the same name gets that same
offset back. That is what makes an override in a subclass land on the exact
slot of the method it overrides.

Ownership: exactly one allocator per class hierarchy. The root class creates
it and every descendant `ClassScope` holds the same instance. Allocators are
never shared between independent hierarchies, and a hierarchy is compiled by
one writer at a time, in program order.

Offset space:

  [0, RESERVED_FIELD_SLOTS)                 field bookkeeping
  RESERVED_FIELD_SLOTS + 0                  `new`
  RESERVED_FIELD_SLOTS + 1                  `__send__`
  RESERVED_FIELD_SLOTS + 2                  spare built-in entry
  RESERVED_FIELD_SLOTS + 3 ...              user methods, first-requested order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

logger = logging.getLogger(__name__)

RESERVED_FIELD_SLOTS = 4
BUILTIN_DISPATCH_SLOTS = 3

NEW_METHOD = "new"
SEND_METHOD = "__send__"

BUILTIN_OFFSETS: Dict[str, int] = {
	NEW_METHOD: RESERVED_FIELD_SLOTS + 0,
	SEND_METHOD: RESERVED_FIELD_SLOTS + 1,
}


class SlotLookupError(LookupError):
	"""
	Internal compiler error: a dispatch offset was requested before allocation.

	Code generation must `alloc_offset` a name before it can `get_offset` it,
	so this is never a user-facing diagnostic.
	"""


@dataclass(frozen=True)
class CallSite:
	"""
	Compiled call-site descriptor: receiver kind, dispatch name, extra data.

	Iterates as a 3-tuple so it can stand in wherever the positional record
	form is expected.
	"""

	receiver: str
	method: str
	extra: Any = None

	def __iter__(self) -> Iterator[Any]:
		return iter((self.receiver, self.method, self.extra))


@dataclass
class SlotAllocator:
	_offsets: Dict[str, int] = field(default_factory=dict)
	_order: List[str] = field(default_factory=list)
	_max: int = RESERVED_FIELD_SLOTS + BUILTIN_DISPATCH_SLOTS

	def max(self) -> int:
		"""Lowest offset guaranteed not yet allocated."""
		return self._max

	def alloc_offset(self, name: str) -> int:
		existing = self._offsets.get(name)
		if existing is not None:
			return existing
		if name in BUILTIN_OFFSETS:
			return BUILTIN_OFFSETS[name]
		offset = self._max
		self._max += 1
		self._offsets[name] = offset
		self._order.append(name)
		logger.debug("allocated dispatch offset %d for %r", offset, name)
		return offset

	def alloc_call_site(self, site: CallSite) -> int:
		return self.alloc_offset(site.method)

	def get_offset(self, name: str) -> int:
		builtin = BUILTIN_OFFSETS.get(name)
		if builtin is not None:
			return builtin
		try:
			return self._offsets[name]
		except KeyError:
			raise SlotLookupError(f"no dispatch offset allocated for '{name}'") from None

	def get_call_site_offset(self, site: CallSite) -> int:
		return self.get_offset(site.method)

	def clean_name(self, token: str | CallSite | Tuple[Any, ...] | List[Any]) -> str:
		"""
		Normalize a bare name or a positional call descriptor to its dispatch name.

		Prefer the typed entry points (`alloc_offset` / `alloc_call_site`); this
		exists for callers that hold either shape and must key on the name.
		"""
		if isinstance(token, str):
			return token
		if isinstance(token, CallSite):
			return token.method
		if isinstance(token, (tuple, list)) and len(token) == 3 and isinstance(token[1], str):
			return token[1]
		raise TypeError(f"cannot derive a dispatch name from {token!r}")

	def offsets(self) -> List[Tuple[str, int]]:
		"""User allocations as `(name, offset)` pairs, in allocation order."""
		return [(name, self._offsets[name]) for name in self._order]

	def __contains__(self, name: object) -> bool:
		return name in self._offsets or name in BUILTIN_OFFSETS


__all__ = [
	"BUILTIN_DISPATCH_SLOTS",
	"BUILTIN_OFFSETS",
	"CallSite",
	"NEW_METHOD",
	"RESERVED_FIELD_SLOTS",
	"SEND_METHOD",
	"SlotAllocator",
	"SlotLookupError",
]
