# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural unification of a rule pattern against a concrete type.

Only the rule's own type parameters are free; everything else in the pattern
must match the concrete type exactly (lifetimes on references are ignored,
lifetime generic arguments are compared as written).

`is_second_subst_of_first` mutates the map it is given and may leave it
partially bound on failure. `try_unify` works on a copy and only hands the
copy back when unification succeeded; rule applicability uses that form.
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from typeglue.core.normalize import TypeNameCache, normalize_ty_lifetimes
from typeglue.core.type_expr import GenericArg, PathType, RefType, SliceType, TupleType, TypeExpr
from typeglue.core.type_subst import TyParamsSubstMap

log = structlog.get_logger(__name__)


def is_second_subst_of_first(
	pattern: TypeExpr,
	concrete: TypeExpr,
	subst_map: TyParamsSubstMap,
	*,
	cache: Optional[TypeNameCache] = None,
) -> bool:
	"""
	True when `concrete` is an instance of `pattern` (e.g. `Result<T, E>` vs
	`Result<u8, u8>`), binding parameters in `subst_map` along the way.
	"""
	ident = pattern.single_ident() if isinstance(pattern, PathType) else None
	if ident is not None and subst_map.has_param(ident):
		bound = subst_map.get(ident)
		if bound is not None:
			# Repeated occurrence: must agree with the earlier binding, whatever its shape.
			return is_second_subst_of_first(bound, concrete, TyParamsSubstMap(), cache=cache)
	if isinstance(pattern, PathType) and isinstance(concrete, PathType):
		if len(pattern.segments) != len(concrete.segments):
			log.debug("unify.path_len_mismatch", pattern=pattern.render(), concrete=concrete.render())
			return False
		if ident is not None and subst_map.has_param(ident):
			subst_map.bind(ident, concrete)
			return True
		for s1, s2 in zip(pattern.segments, concrete.segments):
			if s1.name != s2.name:
				log.debug("unify.ident_mismatch", pattern=s1.name, concrete=s2.name)
				return False
			if not _unify_generic_args(s1.args, s2.args, subst_map, cache):
				return False
		return True
	if isinstance(pattern, RefType) and isinstance(concrete, RefType):
		if pattern.mutable != concrete.mutable:
			log.debug("unify.mutability_mismatch", pattern=pattern.render(), concrete=concrete.render())
			return False
		return is_second_subst_of_first(pattern.elem, concrete.elem, subst_map, cache=cache)
	if isinstance(pattern, SliceType) and isinstance(concrete, SliceType):
		return is_second_subst_of_first(pattern.elem, concrete.elem, subst_map, cache=cache)
	if isinstance(pattern, TupleType) and isinstance(concrete, TupleType):
		if len(pattern.elems) != len(concrete.elems):
			log.debug("unify.tuple_len_mismatch", pattern=pattern.render(), concrete=concrete.render())
			return False
		for p, c in zip(pattern.elems, concrete.elems):
			if not is_second_subst_of_first(p, c, subst_map, cache=cache):
				return False
		return True
	ret = pattern == concrete
	log.debug("unify.equality", pattern=pattern.render(), concrete=concrete.render(), result=ret)
	return ret


def _unify_generic_args(
	args1: Sequence[GenericArg],
	args2: Sequence[GenericArg],
	subst_map: TyParamsSubstMap,
	cache: Optional[TypeNameCache],
) -> bool:
	if len(args1) != len(args2):
		log.debug("unify.generic_args_len_mismatch", pattern_len=len(args1), concrete_len=len(args2))
		return False
	for a1, a2 in zip(args1, args2):
		if not (isinstance(a1, TypeExpr) and isinstance(a2, TypeExpr)):
			if a1 != a2:
				log.debug("unify.generic_arg_mismatch", pattern=str(a1), concrete=str(a2))
				return False
			continue
		name = normalize_ty_lifetimes(a1, cache)
		if subst_map.has_param(name):
			bound = subst_map.get(name)
			if bound is None:
				subst_map.bind(name, a2)
				continue
			if not is_second_subst_of_first(bound, a2, TyParamsSubstMap(), cache=cache):
				return False
			continue
		if not is_second_subst_of_first(a1, a2, subst_map, cache=cache):
			return False
	return True


def try_unify(
	pattern: TypeExpr,
	concrete: TypeExpr,
	subst_map: TyParamsSubstMap,
	*,
	cache: Optional[TypeNameCache] = None,
) -> Optional[TyParamsSubstMap]:
	"""Unify on a private copy of `subst_map`; the copy is returned on success."""
	attempt = subst_map.copy()
	if not is_second_subst_of_first(pattern, concrete, attempt, cache=cache):
		return None
	return attempt


__all__ = ["is_second_subst_of_first", "try_unify"]
