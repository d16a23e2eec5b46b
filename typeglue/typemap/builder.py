# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Registry construction.

Decoded declarations are applied in source order. Construction either
completes or raises a single `TypeMapError`; a partially filled `TypeMap` is
never handed out.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import structlog

from typeglue.config.typemap import (
	CAST_DEREF_MUT_TRAIT,
	CAST_DEREF_TRAIT,
	CAST_FROM_TRAIT,
	CAST_INTO_TRAIT,
	FOREIGN_TYPES_MAP_MOD,
	TypeMapConfig,
)
from typeglue.core.diagnostics import TypeMapError
from typeglue.core.normalize import TypeNameCache
from typeglue.core.type_expr import RefType, TypeExpr
from typeglue.parser.ast import Item
from typeglue.parser.parser import parse_items

from .decls import (
	CastImplDecl,
	ConvMacroDecl,
	ConvTraitDecl,
	Decl,
	DerefImplDecl,
	ForeignTypesMapDecl,
	SupportCodeDecl,
	decode_items,
)
from .graph import TypeConvEdge
from .registry import TypeMap
from .rule import ConversionRule
from .ty import make_unique_typename_if_need

log = structlog.get_logger(__name__)


class TypeMapBuilder:
	def __init__(self, config: TypeMapConfig, *, name_cache: Optional[TypeNameCache] = None) -> None:
		self.config = config
		self.type_map = TypeMap(config, name_cache=name_cache)
		self._types_map_loc: Optional[object] = None
		self._types_map_seen = False
		self._foreign_name_locs: Dict[str, Optional[object]] = {}

	def _error(self, message: str, loc: Optional[object]) -> TypeMapError:
		return TypeMapError.at(message, loc, file=self.config.name)

	def add(self, decl: Decl) -> None:
		if isinstance(decl, ForeignTypesMapDecl):
			self._add_foreign_types_map(decl)
		elif isinstance(decl, ConvTraitDecl):
			self.type_map.traits_usage_code[decl.name] = decl.code_template
			self.type_map.utils_code.append(decl.item)
		elif isinstance(decl, CastImplDecl):
			self._add_cast_impl(decl)
		elif isinstance(decl, DerefImplDecl):
			self._add_deref_impl(decl)
		elif isinstance(decl, ConvMacroDecl):
			self._add_rule(
				decl.item,
				decl.from_ty,
				decl.to_ty,
				decl.code_template,
				decl.generics,
				decl.to_hint,
				decl.from_hint,
			)
		elif isinstance(decl, SupportCodeDecl):
			self.type_map.utils_code.append(decl.item)
		else:
			raise AssertionError(f"unhandled declaration {type(decl).__name__}")

	def _add_foreign_types_map(self, decl: ForeignTypesMapDecl) -> None:
		if self._types_map_seen:
			raise self._error(f"Should only one {FOREIGN_TYPES_MAP_MOD} per types map", decl.item.loc).note(
				"Previously defined here", self._types_map_loc
			)
		self._types_map_seen = True
		self._types_map_loc = decl.item.loc
		log.debug("typemap.foreign_types_map", entries=len(decl.entries))
		tm = self.type_map
		for entry in decl.entries:
			if entry.foreign_name in tm.foreign_names_map:
				raise self._error(f"Foreign type '{entry.foreign_name}' defined twice", entry.loc).note(
					"Previously defined here", self._foreign_name_locs[entry.foreign_name]
				)
			idx = tm.find_or_add_node(entry.host_ty, loc=entry.loc)
			tm.foreign_names_map[entry.foreign_name] = idx
			self._foreign_name_locs[entry.foreign_name] = entry.loc

	def _conv_code(self, trait_name: str, missing: str, loc: Optional[object]) -> str:
		code = self.type_map.traits_usage_code.get(trait_name)
		if code is None:
			raise self._error(f"Can not find conversion code for {missing}", loc)
		return code

	def _add_rule(self, item: Item, from_ty, to_ty, code_template, generics, to_hint, from_hint) -> None:
		rule = ConversionRule(
			from_ty=from_ty,
			to_ty=to_ty,
			code_template=code_template,
			generic_params=generics,
			to_foreigner_hint=to_hint,
			from_foreigner_hint=from_hint,
			dependency=item.source,
			loc=item.loc,
		)
		log.debug("typemap.generic_rule", from_ty=from_ty.render(), to_ty=to_ty.render())
		self.type_map.generic_edges.append(rule)

	def _add_fixed(
		self,
		item: Item,
		from_ty: TypeExpr,
		from_suffix: Optional[str],
		to_ty: TypeExpr,
		to_suffix: Optional[str],
		code_template: str,
	) -> None:
		tm = self.type_map
		src = tm.find_or_add_node(from_ty, suffix=from_suffix, loc=item.loc)
		dst = tm.find_or_add_node(to_ty, suffix=to_suffix, loc=item.loc)
		tm.add_conv_edge(src, dst, TypeConvEdge(code_template=code_template, dependency=item.source))

	def _add_cast_impl(self, decl: CastImplDecl) -> None:
		code = self._conv_code(decl.trait_name, f"{CAST_INTO_TRAIT}/{CAST_FROM_TRAIT}", decl.item.loc)
		if decl.is_generic:
			self._add_rule(decl.item, decl.from_ty, decl.to_ty, code, decl.generics, decl.to_hint, decl.from_hint)
		else:
			self._add_fixed(decl.item, decl.from_ty, decl.from_hint, decl.to_ty, decl.to_hint, code)

	def _add_deref_impl(self, decl: DerefImplDecl) -> None:
		code = self._conv_code(decl.trait_name, f"{CAST_DEREF_TRAIT}/{CAST_DEREF_MUT_TRAIT}", decl.item.loc)
		to_ref_ty: TypeExpr = RefType(elem=decl.target_ty, mutable=decl.mutable)
		log.debug("typemap.deref", self_ty=decl.self_ty.render(), target=decl.target_ty.render())
		if decl.is_generic:
			self._add_rule(decl.item, decl.self_ty, to_ref_ty, code, decl.generics, decl.to_hint, decl.from_hint)
			return
		tm = self.type_map
		existing = tm.find_host_type(make_unique_typename_if_need(tm.normalize(to_ref_ty), decl.to_hint))
		if existing is not None:
			to_ref_ty = existing.ty
		self._add_fixed(decl.item, decl.self_ty, decl.from_hint, to_ref_ty, decl.to_hint, code)


def build_type_map(
	items: Iterable[Item],
	config: Optional[TypeMapConfig] = None,
	*,
	name_cache: Optional[TypeNameCache] = None,
) -> TypeMap:
	"""Build a registry from parsed declaration items."""
	config = config if config is not None else TypeMapConfig()
	builder = TypeMapBuilder(config, name_cache=name_cache)
	for decl in decode_items(items, config):
		builder.add(decl)
	tm = builder.type_map
	log.debug("typemap.built", name=config.name, summary=repr(tm))
	return tm


def parse_type_map(
	source: str,
	config: Optional[TypeMapConfig] = None,
	*,
	file: Optional[str] = None,
	name_cache: Optional[TypeNameCache] = None,
) -> TypeMap:
	"""Parse declaration source and build its registry."""
	config = config if config is not None else TypeMapConfig()
	items = parse_items(source, file=file if file is not None else config.name)
	return build_type_map(items, config, name_cache=name_cache)


__all__ = ["TypeMapBuilder", "build_type_map", "parse_type_map"]
