# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Conversion registry: unification, generic rules and registry construction."""

from .bounds import CapabilityBound, find_trait_bound, get_trait_bounds
from .builder import TypeMapBuilder, build_type_map, parse_type_map
from .decls import (
	CastImplDecl,
	ConvMacroDecl,
	ConvTraitDecl,
	DerefImplDecl,
	ForeignTypeEntry,
	ForeignTypesMapDecl,
	SupportCodeDecl,
	decode_items,
)
from .graph import TypeConvEdge, TypeConvGraph, apply_code_template, validate_code_template
from .helpers import (
	check_if_smart_pointer_return_inner_type,
	fn_arg_type,
	if_option_return_some_type,
	if_result_return_ok_err_types,
	if_ty_result_return_ok_type,
	if_type_slice_return_elem_type,
	if_vec_return_elem_type,
	list_lifetimes,
)
from .registry import TypeMap
from .rule import ConversionRule
from .ty import TypeNode, display_typename, make_unique_typename, make_unique_typename_if_need
from .unify import is_second_subst_of_first, try_unify

__all__ = [
	"CapabilityBound",
	"CastImplDecl",
	"ConvMacroDecl",
	"ConvTraitDecl",
	"ConversionRule",
	"DerefImplDecl",
	"ForeignTypeEntry",
	"ForeignTypesMapDecl",
	"SupportCodeDecl",
	"TypeConvEdge",
	"TypeConvGraph",
	"TypeMap",
	"TypeMapBuilder",
	"TypeNode",
	"apply_code_template",
	"build_type_map",
	"check_if_smart_pointer_return_inner_type",
	"decode_items",
	"display_typename",
	"find_trait_bound",
	"fn_arg_type",
	"get_trait_bounds",
	"if_option_return_some_type",
	"if_result_return_ok_err_types",
	"if_ty_result_return_ok_type",
	"if_type_slice_return_elem_type",
	"if_vec_return_elem_type",
	"is_second_subst_of_first",
	"list_lifetimes",
	"make_unique_typename",
	"make_unique_typename_if_need",
	"parse_type_map",
	"try_unify",
	"validate_code_template",
]
