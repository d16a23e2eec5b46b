# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generic parameter substitution maps.

A `TyParamsSubstMap` starts with one unbound entry per declared type parameter
of a rule; unification binds entries in place, and `replace_all_types_with`
materializes a type once bindings are known. Entries keep declaration order and
are never removed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .normalize import TypeNameCache, normalize_ty_lifetimes
from .type_expr import TypeExpr


@dataclass
class SubstItem:
	ident: str
	ty: Optional[TypeExpr] = None

	@property
	def is_bound(self) -> bool:
		return self.ty is not None


class TyParamsSubstMap:
	"""Ordered parameter-name -> optional bound type mapping."""

	def __init__(self, items: Iterable[SubstItem] = ()) -> None:
		self._items: List[SubstItem] = []
		for item in items:
			self.insert(item.ident, item.ty)

	@classmethod
	def for_params(cls, names: Iterable[str]) -> "TyParamsSubstMap":
		ret = cls()
		for name in names:
			ret.insert(name, None)
		return ret

	def insert(self, ident: str, ty: Optional[TypeExpr]) -> None:
		if self._find(ident) is not None:
			raise AssertionError(f"duplicate generic parameter '{ident}' in substitution map")
		self._items.append(SubstItem(ident=ident, ty=ty))

	def _find(self, ident: str) -> Optional[SubstItem]:
		for item in self._items:
			if item.ident == ident:
				return item
		return None

	def has_param(self, ident: str) -> bool:
		return self._find(ident) is not None

	def get(self, ident: str) -> Optional[TypeExpr]:
		"""Bound value of `ident`; None when unknown or still unbound."""
		item = self._find(ident)
		return item.ty if item is not None else None

	def is_unbound(self, ident: str) -> bool:
		item = self._find(ident)
		return item is not None and item.ty is None

	def bind(self, ident: str, ty: TypeExpr) -> None:
		item = self._find(ident)
		if item is None:
			raise AssertionError(f"unknown generic parameter '{ident}'")
		if item.ty is not None:
			raise AssertionError(f"generic parameter '{ident}' is already bound")
		item.ty = ty

	def unbound(self) -> List[str]:
		return [item.ident for item in self._items if item.ty is None]

	def copy(self) -> "TyParamsSubstMap":
		return TyParamsSubstMap(SubstItem(ident=i.ident, ty=i.ty) for i in self._items)

	def as_list(self) -> List[SubstItem]:
		return list(self._items)

	def __iter__(self) -> Iterator[SubstItem]:
		return iter(self._items)

	def __len__(self) -> int:
		return len(self._items)

	def __repr__(self) -> str:
		body = ", ".join(f"{i.ident}={i.ty.render() if i.ty is not None else '?'}" for i in self._items)
		return f"TyParamsSubstMap({body})"


def replace_all_types_with(
	in_ty: TypeExpr,
	subst_map: TyParamsSubstMap,
	*,
	cache: Optional[TypeNameCache] = None,
) -> TypeExpr:
	"""
	Rewrite `in_ty`, replacing every sub-type whose normalized name is a bound
	parameter with the bound value.

	Replacement is not re-entered: a bound value that itself mentions parameter
	names (`T -> Vec<T>`) is inserted verbatim. Unbound parameters stay as
	written.
	"""

	def visit(ty: TypeExpr) -> TypeExpr:
		bound = subst_map.get(normalize_ty_lifetimes(ty, cache))
		if bound is not None:
			return bound
		return ty.map_children(visit)

	return visit(in_ty)


__all__ = ["SubstItem", "TyParamsSubstMap", "replace_all_types_with"]
