# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Registered host types and unique type names.

A `TypeNode` is one concrete host type known to the registry: its expression,
its unique name and the set of capabilities (trait names) it is declared to
implement. The unique name is the normalized type name, optionally extended
with a suffix so one underlying type can appear as several logical types
(e.g. an object array carrying a particular element class).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Optional, Tuple

from typeglue.core.normalize import TypeNameCache, normalize_ty_lifetimes
from typeglue.core.type_expr import PathType, TypeExpr

# NUL never occurs in a rendered type name.
UNIQUE_NAME_SEP = "\0"


def make_unique_typename(base: str, suffix: str) -> str:
	return f"{base}{UNIQUE_NAME_SEP}{suffix}"


def make_unique_typename_if_need(base: str, suffix: Optional[str]) -> str:
	if suffix is None:
		return base
	return make_unique_typename(base, suffix)


def split_unique_typename(name: str) -> Tuple[str, Optional[str]]:
	"""Inverse of `make_unique_typename_if_need`."""
	base, sep, suffix = name.partition(UNIQUE_NAME_SEP)
	return (base, suffix) if sep else (base, None)


def display_typename(name: str) -> str:
	"""Human readable form of a unique name (`jobjectArray^Foo []`)."""
	return name.replace(UNIQUE_NAME_SEP, "^")


def capability_name(path: PathType, cache: Optional[TypeNameCache] = None) -> str:
	"""Key under which a trait bound / implemented trait is compared."""
	return normalize_ty_lifetimes(path, cache)


@dataclass(frozen=True)
class TypeNode:
	ty: TypeExpr
	normalized_name: str
	implements: FrozenSet[str] = frozenset()
	graph_idx: Optional[int] = None
	loc: Optional[object] = field(default=None, compare=False, hash=False)

	@classmethod
	def new(
		cls,
		ty: TypeExpr,
		name: Optional[str] = None,
		*,
		suffix: Optional[str] = None,
		cache: Optional[TypeNameCache] = None,
		loc: Optional[object] = None,
	) -> "TypeNode":
		"""Node for `ty`, named by its normalized name unless `name` is given."""
		base = name if name is not None else normalize_ty_lifetimes(ty, cache)
		return cls(ty=ty, normalized_name=make_unique_typename_if_need(base, suffix), loc=loc)

	def with_capabilities(self, *names: str) -> "TypeNode":
		return replace(self, implements=self.implements | frozenset(names))

	def with_graph_idx(self, idx: int) -> "TypeNode":
		return replace(self, graph_idx=idx)

	def implements_all(self, required: Iterable[str]) -> bool:
		return frozenset(required) <= self.implements

	@property
	def base_name(self) -> str:
		return split_unique_typename(self.normalized_name)[0]

	def __str__(self) -> str:
		return display_typename(self.normalized_name)


__all__ = [
	"TypeNode",
	"UNIQUE_NAME_SEP",
	"capability_name",
	"display_typename",
	"make_unique_typename",
	"make_unique_typename_if_need",
	"split_unique_typename",
]
