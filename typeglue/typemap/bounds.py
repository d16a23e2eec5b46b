# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capability bounds of a rule's generic parameters.

`<T: ForeignClass>` and `where T: ForeignClass` both produce a bound keyed by
`T`; a predicate on a composite type (`where Vec<T>: Clone`) is keyed by the
normalized type name instead. Relaxed bounds (`?Sized`) and lifetime bounds
impose no capability and are left out, as are parameters without bounds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

from typeglue.core.generics import Bound, Generics, TraitBound
from typeglue.core.normalize import TypeNameCache, normalize_ty_lifetimes
from typeglue.core.type_expr import TypeExpr

from .ty import capability_name


@dataclass(frozen=True)
class CapabilityBound:
	ty_param: str
	trait_names: FrozenSet[str]


def _capabilities(bounds: Sequence[Bound], cache: Optional[TypeNameCache]) -> List[str]:
	return [capability_name(b.path, cache) for b in bounds if isinstance(b, TraitBound) and not b.maybe]


def get_trait_bounds(generics: Generics, *, cache: Optional[TypeNameCache] = None) -> List[CapabilityBound]:
	# Keys keep first-seen order; bounds for the same key are merged.
	merged: Dict[str, List[str]] = {}
	for param in generics.type_params():
		names = _capabilities(param.bounds, cache)
		if names:
			merged.setdefault(param.name, []).extend(names)
	for pred in generics.where_clause:
		if not isinstance(pred.bounded, TypeExpr):
			continue
		names = _capabilities(pred.bounds, cache)
		if names:
			merged.setdefault(normalize_ty_lifetimes(pred.bounded, cache), []).extend(names)
	return [CapabilityBound(ty_param=k, trait_names=frozenset(v)) for k, v in merged.items()]


def find_trait_bound(bounds: Sequence[CapabilityBound], ty_param: str) -> Optional[CapabilityBound]:
	return next((b for b in bounds if b.ty_param == ty_param), None)


__all__ = ["CapabilityBound", "find_trait_bound", "get_trait_bounds"]
