# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generic parameter declarations (`<T: Bound, 'a>` plus `where` predicates).

These are produced by the declaration front-end for impls and by the registry
builder for `generic_arg` attributes, and consumed by the capability bound
extractor and the conversion rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from .type_expr import Lifetime, PathType, TypeExpr


class GenericParamKind(Enum):
	TYPE = auto()
	LIFETIME = auto()
	CONST = auto()


@dataclass(frozen=True)
class TraitBound:
	"""
	A capability requirement written as a trait path.

	`maybe` marks relaxed bounds such as `?Sized`; those never impose a
	requirement.
	"""

	path: PathType
	maybe: bool = False


Bound = Union[TraitBound, Lifetime]


@dataclass(frozen=True)
class GenericParam:
	name: str
	kind: GenericParamKind = GenericParamKind.TYPE
	bounds: Tuple[Bound, ...] = ()
	# Declared type of a const parameter or default of a type parameter.
	ty: Optional[TypeExpr] = None
	loc: Optional[object] = field(default=None, compare=False, hash=False)


@dataclass(frozen=True)
class WherePredicate:
	bounded: Union[TypeExpr, Lifetime]
	bounds: Tuple[Bound, ...] = ()
	loc: Optional[object] = field(default=None, compare=False, hash=False)


@dataclass(frozen=True)
class Generics:
	params: Tuple[GenericParam, ...] = ()
	where_clause: Tuple[WherePredicate, ...] = ()
	loc: Optional[object] = field(default=None, compare=False, hash=False)

	@staticmethod
	def of(*names: str) -> "Generics":
		"""Unbounded type parameters, e.g. `Generics.of("T", "E")` for `<T, E>`."""
		return Generics(params=tuple(GenericParam(name=n) for n in names))

	def type_params(self) -> List[GenericParam]:
		return [p for p in self.params if p.kind is GenericParamKind.TYPE]

	def type_param_names(self) -> List[str]:
		return [p.name for p in self.type_params()]

	def has_type_params(self) -> bool:
		return any(p.kind is GenericParamKind.TYPE for p in self.params)

	def is_empty(self) -> bool:
		return not self.params and not self.where_clause


__all__ = [
	"Bound",
	"GenericParam",
	"GenericParamKind",
	"Generics",
	"TraitBound",
	"WherePredicate",
]
