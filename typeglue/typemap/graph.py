# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fixed conversion graph.

Nodes are integer handles into a networkx `MultiDiGraph`; each node carries its
`TypeNode` under the "node" attribute and each edge its `TypeConvEdge` under
"conv". Parallel edges between the same pair of types are allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import networkx as nx

from typeglue.core.diagnostics import TypeMapError

from .ty import TypeNode

TO_VAR_PLACEHOLDER = "{to_var}"
FROM_VAR_PLACEHOLDER = "{from_var}"
TO_VAR_TYPE_PLACEHOLDER = "{to_var_type}"

_REQUIRED_PLACEHOLDERS = (TO_VAR_PLACEHOLDER, FROM_VAR_PLACEHOLDER, TO_VAR_TYPE_PLACEHOLDER)


def validate_code_template(template: str, loc: Optional[object] = None, *, file: Optional[str] = None) -> None:
	"""Basic placeholder check; the template body itself is not interpreted."""
	for placeholder in _REQUIRED_PLACEHOLDERS:
		if placeholder not in template:
			raise TypeMapError.at(f"{placeholder} not found in code template", loc, file=file)


def apply_code_template(template: str, var_name: str, to_type_name: str) -> str:
	return (
		template.replace(TO_VAR_TYPE_PLACEHOLDER, to_type_name)
		.replace(TO_VAR_PLACEHOLDER, var_name)
		.replace(FROM_VAR_PLACEHOLDER, var_name)
	)


@dataclass(frozen=True)
class TypeConvEdge:
	code_template: str
	# Source of the declaration that produced this edge.
	dependency: Optional[str] = None

	def render(self, var_name: str, to_type_name: str) -> str:
		return apply_code_template(self.code_template, var_name, to_type_name)


class TypeConvGraph:
	def __init__(self) -> None:
		self._graph = nx.MultiDiGraph()

	def add_node(self, node: TypeNode) -> int:
		idx = self._graph.number_of_nodes()
		self._graph.add_node(idx, node=node.with_graph_idx(idx))
		return idx

	def replace_node(self, idx: int, node: TypeNode) -> TypeNode:
		stored = node.with_graph_idx(idx)
		self._graph.nodes[idx]["node"] = stored
		return stored

	def node(self, idx: int) -> TypeNode:
		return self._graph.nodes[idx]["node"]

	def add_edge(self, src: int, dst: int, edge: TypeConvEdge) -> int:
		return self._graph.add_edge(src, dst, conv=edge)

	def edges_between(self, src: int, dst: int) -> List[TypeConvEdge]:
		data = self._graph.get_edge_data(src, dst)
		if not data:
			return []
		return [attrs["conv"] for _, attrs in sorted(data.items())]

	def out_edges(self, src: int) -> List[Tuple[int, TypeConvEdge]]:
		return [(dst, attrs["conv"]) for _, dst, attrs in self._graph.out_edges(src, data=True)]

	def nodes(self) -> Iterator[TypeNode]:
		for idx in self._graph.nodes:
			yield self.node(idx)

	def edges(self) -> Iterator[Tuple[int, int, TypeConvEdge]]:
		for src, dst, attrs in self._graph.edges(data=True):
			yield src, dst, attrs["conv"]

	def node_count(self) -> int:
		return self._graph.number_of_nodes()

	def edge_count(self) -> int:
		return self._graph.number_of_edges()

	@property
	def nx_graph(self) -> nx.MultiDiGraph:
		"""Read-only view for path search."""
		return self._graph.copy(as_view=True)

	def __contains__(self, idx: object) -> bool:
		return idx in self._graph


__all__ = [
	"FROM_VAR_PLACEHOLDER",
	"TO_VAR_PLACEHOLDER",
	"TO_VAR_TYPE_PLACEHOLDER",
	"TypeConvEdge",
	"TypeConvGraph",
	"apply_code_template",
	"validate_code_template",
]
