# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shape queries on host types, built from ad-hoc conversion rules."""

from __future__ import annotations

from typing import Optional, Tuple

from typeglue.core.generics import Generics
from typeglue.core.type_expr import PathType, RefType, SliceType, TypeExpr, list_lifetimes
from typeglue.core.type_subst import TyParamsSubstMap, replace_all_types_with
from typeglue.parser.ast import fn_arg_type
from typeglue.parser.parser import parse_type

from .rule import ConversionRule
from .ty import TypeNode
from .unify import try_unify

_T = PathType.named("T")
_E = PathType.named("E")


def _extract(from_ty: TypeExpr, to_ty: TypeExpr, generics: Generics, ty: TypeNode) -> Optional[TypeExpr]:
	found = ConversionRule.simple(from_ty, to_ty, generics).is_conv_possible(ty)
	return found[0] if found is not None else None


def if_option_return_some_type(ty: TypeNode) -> Optional[TypeExpr]:
	return _extract(PathType.named("Option", [_T]), _T, Generics.of("T"), ty)


def if_vec_return_elem_type(ty: TypeNode) -> Optional[TypeExpr]:
	return _extract(PathType.named("Vec", [_T]), _T, Generics.of("T"), ty)


def if_result_return_ok_err_types(ty: TypeNode) -> Optional[Tuple[TypeExpr, TypeExpr]]:
	result_ty = PathType.named("Result", [_T, _E])
	generics = Generics.of("T", "E")
	ok_ty = _extract(result_ty, _T, generics, ty)
	if ok_ty is None:
		return None
	err_ty = _extract(result_ty, _E, generics, ty)
	if err_ty is None:
		return None
	return ok_ty, err_ty


def if_ty_result_return_ok_type(ty: TypeExpr) -> Optional[TypeExpr]:
	"""Like `if_result_return_ok_err_types`, for a bare type expression."""
	subst_map = try_unify(PathType.named("Result", [_T, _E]), ty, TyParamsSubstMap.for_params(["T", "E"]))
	if subst_map is None:
		return None
	return replace_all_types_with(_T, subst_map)


def check_if_smart_pointer_return_inner_type(ty: TypeNode, smart_ptr_name: str) -> Optional[TypeExpr]:
	"""`Foo` out of `Rc<Foo>` when `smart_ptr_name` is "Rc"."""
	return _extract(parse_type(f"{smart_ptr_name}<T>"), _T, Generics.of("T"), ty)


def if_type_slice_return_elem_type(ty: TypeExpr, accept_mut_slice: bool) -> Optional[TypeExpr]:
	"""Element type of `&[T]` (or `&mut [T]` when `accept_mut_slice`)."""
	if not isinstance(ty, RefType):
		return None
	if ty.mutable and not accept_mut_slice:
		return None
	if isinstance(ty.elem, SliceType):
		return ty.elem.elem
	return None


__all__ = [
	"check_if_smart_pointer_return_inner_type",
	"fn_arg_type",
	"if_option_return_some_type",
	"if_result_return_ok_err_types",
	"if_ty_result_return_ok_type",
	"if_type_slice_return_elem_type",
	"if_vec_return_elem_type",
	"list_lifetimes",
]
