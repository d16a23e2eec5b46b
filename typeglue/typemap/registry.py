# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The conversion registry produced from a type map declaration file.

It owns:
- `conv_graph`: fixed conversions between concrete host types,
- `foreign_names_map` / `host_names_map`: name indexes holding graph handles,
- `generic_edges`: generic conversion rules, tried in declaration order,
- `utils_code`: declarations kept verbatim as support code,
- `traits_usage_code`: code templates per conversion interface (a private copy
  of the configured base table, extended by declarations).

Queries here are single hop; searching conversion chains through the graph
belongs to the code generator.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import structlog

from typeglue.config.typemap import TypeMapConfig
from typeglue.core.normalize import TypeNameCache
from typeglue.core.type_expr import TypeExpr
from typeglue.parser.ast import Item

from .graph import TypeConvEdge, TypeConvGraph
from .rule import ConversionRule
from .ty import TypeNode, make_unique_typename_if_need

log = structlog.get_logger(__name__)


class TypeMap:
	def __init__(self, config: Optional[TypeMapConfig] = None, *, name_cache: Optional[TypeNameCache] = None) -> None:
		self.config = config if config is not None else TypeMapConfig()
		# One cache per construction session.
		self.name_cache = name_cache if name_cache is not None else TypeNameCache()
		self.conv_graph = TypeConvGraph()
		self.foreign_names_map: Dict[str, int] = {}
		self.host_names_map: Dict[str, int] = {}
		self.utils_code: List[Item] = []
		self.generic_edges: List[ConversionRule] = []
		self.traits_usage_code: Dict[str, str] = dict(self.config.traits_usage_code)

	def normalize(self, ty: TypeExpr) -> str:
		return self.name_cache.normalize(ty)

	def find_host_type(self, name: str) -> Optional[TypeNode]:
		"""Registered node by unique name."""
		idx = self.host_names_map.get(name)
		return self.conv_graph.node(idx) if idx is not None else None

	def find_foreign_type(self, foreign_name: str) -> Optional[TypeNode]:
		idx = self.foreign_names_map.get(foreign_name)
		return self.conv_graph.node(idx) if idx is not None else None

	def find_or_add_node(
		self,
		ty: TypeExpr,
		*,
		suffix: Optional[str] = None,
		loc: Optional[object] = None,
	) -> int:
		"""Handle of the node named after `ty` (plus `suffix`), created on first use."""
		name = make_unique_typename_if_need(self.normalize(ty), suffix)
		idx = self.host_names_map.get(name)
		if idx is None:
			idx = self.conv_graph.add_node(TypeNode(ty=ty, normalized_name=name, loc=loc))
			self.host_names_map[name] = idx
			log.debug("typemap.node_added", name=name, idx=idx)
		return idx

	def add_type(self, node: TypeNode) -> TypeNode:
		"""
		Register a host type with its capabilities.

		When a node with the same unique name exists, the capability sets are
		merged and the existing expression is kept.
		"""
		idx = self.host_names_map.get(node.normalized_name)
		if idx is None:
			idx = self.conv_graph.add_node(node)
			self.host_names_map[node.normalized_name] = idx
			return self.conv_graph.node(idx)
		existing = self.conv_graph.node(idx)
		if node.implements <= existing.implements:
			return existing
		return self.conv_graph.replace_node(idx, existing.with_capabilities(*node.implements))

	def add_conv_edge(self, src: int, dst: int, edge: TypeConvEdge) -> None:
		log.debug(
			"typemap.edge_added",
			src=self.conv_graph.node(src).normalized_name,
			dst=self.conv_graph.node(dst).normalized_name,
		)
		self.conv_graph.add_edge(src, dst, edge)

	def fixed_edges(self, from_name: str, to_name: str) -> List[TypeConvEdge]:
		"""Direct conversions between two registered types, in declaration order."""
		src = self.host_names_map.get(from_name)
		dst = self.host_names_map.get(to_name)
		if src is None or dst is None:
			return []
		return self.conv_graph.edges_between(src, dst)

	def find_generic_conversion(
		self,
		candidate: TypeNode,
		goal: Optional[TypeNode] = None,
	) -> Optional[Tuple[ConversionRule, TypeExpr, str]]:
		"""First generic rule accepting `candidate`, with its destination type and name."""
		for rule in self.generic_edges:
			found = rule.is_conv_possible(candidate, goal, self.find_host_type, cache=self.name_cache)
			if found is not None:
				to_ty, to_name = found
				return rule, to_ty, to_name
		return None

	def __repr__(self) -> str:
		return (
			f"TypeMap(nodes={self.conv_graph.node_count()}, edges={self.conv_graph.edge_count()}, "
			f"rules={len(self.generic_edges)}, foreign_names={len(self.foreign_names_map)})"
		)


__all__ = ["TypeMap"]
