# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import networkx as nx
import pytest

from typeglue.core.diagnostics import TypeMapError
from typeglue.parser import parse_type
from typeglue.typemap.graph import TypeConvEdge, TypeConvGraph, apply_code_template, validate_code_template
from typeglue.typemap.ty import TypeNode, display_typename, make_unique_typename, split_unique_typename

TEMPLATE = "let {to_var}: {to_var_type} = {from_var}.cast_into(env);"


def test_unique_names():
	name = make_unique_typename("jobjectArray", "Foo []")
	assert name != "jobjectArray"
	assert split_unique_typename(name) == ("jobjectArray", "Foo []")
	assert split_unique_typename("jobjectArray") == ("jobjectArray", None)
	assert display_typename(name) == "jobjectArray^Foo []"
	node = TypeNode.new(parse_type("jobjectArray"), suffix="Foo []")
	assert node.normalized_name == name
	assert node.base_name == "jobjectArray"
	assert str(node) == "jobjectArray^Foo []"


def test_template_rendering():
	assert apply_code_template(TEMPLATE, "x", "bool") == "let x: bool = x.cast_into(env);"
	validate_code_template(TEMPLATE)
	with pytest.raises(TypeMapError) as excinfo:
		validate_code_template("let {to_var} = {from_var};")
	assert "{to_var_type} not found" in str(excinfo.value)


def test_graph_nodes_and_parallel_edges():
	graph = TypeConvGraph()
	src = graph.add_node(TypeNode.new(parse_type("jboolean")))
	dst = graph.add_node(TypeNode.new(parse_type("bool")))
	assert graph.node(src).graph_idx == src
	first = TypeConvEdge(code_template=TEMPLATE, dependency="impl A")
	second = TypeConvEdge(code_template=TEMPLATE.replace("cast_into", "other_into"))
	graph.add_edge(src, dst, first)
	graph.add_edge(src, dst, second)
	assert graph.edges_between(src, dst) == [first, second]
	assert graph.edges_between(dst, src) == []
	assert [d for d, _ in graph.out_edges(src)] == [dst, dst]
	assert graph.node_count() == 2 and graph.edge_count() == 2
	assert src in graph and 42 not in graph


def test_replace_node_keeps_handle():
	graph = TypeConvGraph()
	idx = graph.add_node(TypeNode.new(parse_type("Foo")))
	stored = graph.replace_node(idx, graph.node(idx).with_capabilities("ForeignClass"))
	assert stored.graph_idx == idx
	assert graph.node(idx).implements == frozenset({"ForeignClass"})


def test_nx_view_supports_path_search():
	graph = TypeConvGraph()
	a, b, c = (graph.add_node(TypeNode.new(parse_type(n))) for n in ("A", "B", "C"))
	graph.add_edge(a, b, TypeConvEdge(TEMPLATE))
	graph.add_edge(b, c, TypeConvEdge(TEMPLATE))
	assert nx.shortest_path(graph.nx_graph, a, c) == [a, b, c]
	with pytest.raises(nx.NetworkXError):
		graph.nx_graph.add_node(99)
