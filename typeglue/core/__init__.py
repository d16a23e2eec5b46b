# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Core data shapes shared by the parser and the type map."""

from .diagnostics import Diagnostic, DiagnosticNote, TypeMapError
from .generics import GenericParam, GenericParamKind, Generics, TraitBound, WherePredicate
from .normalize import TypeNameCache, normalize_ty_lifetimes
from .span import Span
from .type_expr import (
	ArrayType,
	Lifetime,
	OpaqueType,
	PathSegment,
	PathType,
	PtrType,
	RefType,
	SliceType,
	TupleType,
	TypeExpr,
	list_lifetimes,
)
from .type_subst import TyParamsSubstMap, replace_all_types_with

__all__ = [
	"ArrayType",
	"Diagnostic",
	"DiagnosticNote",
	"GenericParam",
	"GenericParamKind",
	"Generics",
	"Lifetime",
	"OpaqueType",
	"PathSegment",
	"PathType",
	"PtrType",
	"RefType",
	"SliceType",
	"Span",
	"TraitBound",
	"TupleType",
	"TyParamsSubstMap",
	"TypeExpr",
	"TypeMapError",
	"TypeNameCache",
	"WherePredicate",
	"list_lifetimes",
	"normalize_ty_lifetimes",
	"replace_all_types_with",
]
