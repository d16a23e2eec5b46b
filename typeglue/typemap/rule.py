# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generic conversion rules.

A `ConversionRule` turns a family of source types (`from_ty`, mentioning the
rule's type parameters) into a family of destination types (`to_ty`).
`is_conv_possible` is a pure membership test: it never raises for a
non-matching candidate, it returns None.

Naming hints:
- `from_foreigner_hint` restricts candidates to those whose unique name carries
  the hint (with the parameter name replaced by its bound type) as suffix;
- `to_foreigner_hint` attaches such a suffix to the produced type name.
A hinted rule must declare exactly one type parameter; that is checked when
the rule is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import structlog

from typeglue.core.diagnostics import TypeMapError
from typeglue.core.generics import Generics
from typeglue.core.normalize import TypeNameCache, normalize_ty_lifetimes
from typeglue.core.type_expr import TypeExpr
from typeglue.core.type_subst import TyParamsSubstMap, replace_all_types_with

from .bounds import find_trait_bound, get_trait_bounds
from .graph import apply_code_template
from .ty import TypeNode, make_unique_typename, make_unique_typename_if_need
from .unify import try_unify

log = structlog.get_logger(__name__)

TypeLookup = Callable[[str], Optional[TypeNode]]


def _no_types(_name: str) -> Optional[TypeNode]:
	return None


@dataclass(frozen=True)
class ConversionRule:
	from_ty: TypeExpr
	to_ty: TypeExpr
	code_template: str
	generic_params: Generics
	to_foreigner_hint: Optional[str] = None
	from_foreigner_hint: Optional[str] = None
	# Source of the declaration that produced this rule.
	dependency: Optional[str] = None
	loc: Optional[object] = field(default=None, compare=False, hash=False)

	def __post_init__(self) -> None:
		for attr, hint in (("to_hint", self.to_foreigner_hint), ("from_hint", self.from_foreigner_hint)):
			if hint is not None and len(self.generic_params.type_params()) != 1:
				raise TypeMapError.at(
					f"Expect exactly one generic parameter for {attr}",
					self.generic_params.loc or self.loc,
				)

	@classmethod
	def simple(cls, from_ty: TypeExpr, to_ty: TypeExpr, generic_params: Generics) -> "ConversionRule":
		"""Rule without code template or hints, used for shape queries."""
		return cls(from_ty=from_ty, to_ty=to_ty, code_template="", generic_params=generic_params)

	def is_conv_possible(
		self,
		ty: TypeNode,
		goal_ty: Optional[TypeNode] = None,
		others: TypeLookup = _no_types,
		*,
		cache: Optional[TypeNameCache] = None,
	) -> Optional[Tuple[TypeExpr, str]]:
		"""
		Destination type and unique name when this rule accepts `ty`.

		`others` resolves a normalized type name to the registered node used for
		the capability check; `goal_ty`, when given, resolves parameters that only
		occur in the destination pattern.
		"""
		subst_map = TyParamsSubstMap.for_params(self.generic_params.type_param_names())
		log.debug(
			"conv_rule.begin",
			from_ty=self.from_ty.render(),
			to_ty=self.to_ty.render(),
			ty=ty.normalized_name,
		)
		unified = try_unify(self.from_ty, ty.ty, subst_map, cache=cache)
		if unified is None:
			return None
		subst_map = unified

		trait_bounds = get_trait_bounds(self.generic_params, cache=cache)
		has_unbound = False
		for item in subst_map:
			if item.ty is None:
				has_unbound = True
				continue
			bound = find_trait_bound(trait_bounds, item.ident)
			if bound is None:
				continue
			val_name = normalize_ty_lifetimes(item.ty, cache)
			registered = others(val_name)
			if registered is None or not registered.implements_all(bound.trait_names):
				log.debug(
					"conv_rule.trait_bounds_failed",
					param=item.ident,
					value=val_name,
					requires=sorted(bound.trait_names),
				)
				return None

		if has_unbound and goal_ty is not None:
			log.debug("conv_rule.resolve_by_goal", goal=goal_ty.normalized_name)
			resolved = try_unify(self.to_ty, goal_ty.ty, subst_map, cache=cache)
			if resolved is not None:
				subst_map = resolved

		if self.from_foreigner_hint is not None:
			item = subst_map.as_list()[0]
			if item.ty is not None:
				foreign_name = self.from_foreigner_hint.replace(item.ident, normalize_ty_lifetimes(item.ty, cache))
				clean_from_ty = normalize_ty_lifetimes(self.from_ty, cache)
				if ty.normalized_name != make_unique_typename(clean_from_ty, foreign_name):
					log.debug("conv_rule.from_hint_mismatch", expected=foreign_name, ty=ty.normalized_name)
					return None

		to_ty = replace_all_types_with(self.to_ty, subst_map, cache=cache)
		to_suffix: Optional[str] = None
		if self.to_foreigner_hint is not None:
			item = subst_map.as_list()[0]
			if item.ty is not None:
				to_suffix = self.to_foreigner_hint.replace(item.ident, normalize_ty_lifetimes(item.ty, cache))
		normalized_name = make_unique_typename_if_need(normalize_ty_lifetimes(to_ty, cache), to_suffix)
		return to_ty, normalized_name

	# Name used by the rest of the package.
	is_applicable = is_conv_possible

	def render(self, var_name: str, to_type_name: str) -> str:
		return apply_code_template(self.code_template, var_name, to_type_name)


__all__ = ["ConversionRule", "TypeLookup"]
