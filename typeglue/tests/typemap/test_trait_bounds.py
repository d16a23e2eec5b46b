# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typeglue.parser import parse_items
from typeglue.typemap.bounds import CapabilityBound, find_trait_bound, get_trait_bounds


def _impl_generics(code: str):
	(impl,) = parse_items(code)
	return impl.generics


def test_no_bounds():
	assert get_trait_bounds(_impl_generics("impl<T> Foo for Boo {}")) == []


def test_inline_bound():
	assert get_trait_bounds(_impl_generics("impl<T: Moo> Foo for Boo {}")) == [
		CapabilityBound(ty_param="T", trait_names=frozenset({"Moo"}))
	]


def test_where_bound():
	assert get_trait_bounds(_impl_generics("impl<T> Foo for Boo where T: Moo {}")) == [
		CapabilityBound(ty_param="T", trait_names=frozenset({"Moo"}))
	]


def test_inline_and_where_bounds_merge():
	bounds = get_trait_bounds(_impl_generics("impl<T: Moo, E> Foo for Boo where T: Clone + Moo, E: Send {}"))
	assert bounds == [
		CapabilityBound(ty_param="T", trait_names=frozenset({"Moo", "Clone"})),
		CapabilityBound(ty_param="E", trait_names=frozenset({"Send"})),
	]


def test_composite_predicate_keyed_by_normalized_type():
	bounds = get_trait_bounds(_impl_generics("impl<'a, T> Foo for Boo where &'a Vec<T>: Moo {}"))
	assert bounds == [CapabilityBound(ty_param="& Vec < T >", trait_names=frozenset({"Moo"}))]


def test_relaxed_and_lifetime_bounds_are_ignored():
	generics = _impl_generics("impl<'a, 'b: 'a, T: ?Sized + 'a> Foo for Boo where T: 'b {}")
	assert get_trait_bounds(generics) == []


def test_find_trait_bound():
	bounds = get_trait_bounds(_impl_generics("impl<T1: Moo, T2> Foo for Boo {}"))
	assert find_trait_bound(bounds, "T1").trait_names == frozenset({"Moo"})
	assert find_trait_bound(bounds, "T2") is None
