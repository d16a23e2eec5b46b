# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lifetime-erasing normalization of type expressions.

`normalize_ty_lifetimes(ty)` is the stable string key used everywhere a type
has to be looked up by name (graph nodes, host/foreign name indexes, capability
checks). Results are memoized in a `TypeNameCache`:

- insert-or-get: a key, once stored, never changes and is never evicted,
- keys are interned strings owned by the cache, so they stay valid for as long
  as anything references them,
- a cache can be scoped to one registry construction session (each `TypeMap`
  owns one) or shared; the shared default is safe to use from several
  registries because keys depend only on structural type content.
"""

from __future__ import annotations

import sys
from typing import Dict, Optional

from .type_expr import TypeExpr, strip_lifetimes


class TypeNameCache:
	"""Memo table from type expression to its normalized, interned name."""

	def __init__(self) -> None:
		self._names: Dict[TypeExpr, str] = {}

	def normalize(self, ty: TypeExpr) -> str:
		cached = self._names.get(ty)
		if cached is not None:
			return cached
		name = sys.intern(strip_lifetimes(ty).render())
		# setdefault keeps the first stored key if another registry raced us.
		return self._names.setdefault(ty, name)

	def __contains__(self, ty: object) -> bool:
		return ty in self._names

	def __len__(self) -> int:
		return len(self._names)


_SHARED_CACHE = TypeNameCache()


def shared_name_cache() -> TypeNameCache:
	"""Process-wide default cache used when no session cache is supplied."""
	return _SHARED_CACHE


def normalize_ty_lifetimes(ty: TypeExpr, cache: Optional[TypeNameCache] = None) -> str:
	"""Render `ty` with all lifetime markers erased (`&'a str` -> `& str`)."""
	return (cache if cache is not None else _SHARED_CACHE).normalize(ty)


__all__ = ["TypeNameCache", "normalize_ty_lifetimes", "shared_name_cache"]
