# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typeglue.core.type_subst import TyParamsSubstMap
from typeglue.parser import parse_type
from typeglue.typemap.unify import is_second_subst_of_first, try_unify


def _unify(pattern: str, concrete: str, *params: str):
	subst = TyParamsSubstMap.for_params(params)
	ok = is_second_subst_of_first(parse_type(pattern), parse_type(concrete), subst)
	return ok, subst


def test_binds_param_to_whole_subtree():
	ok, subst = _unify("Wrapper<T>", "Wrapper<Inner<Foo>>", "T")
	assert ok
	assert subst.get("T") == parse_type("Inner<Foo>")


def test_top_level_param_binds_single_segment_path():
	ok, subst = _unify("T", "std::rc::Rc<u8>", "T")
	assert ok is False
	ok, subst = _unify("T", "Rc<u8>", "T")
	assert ok
	assert subst.get("T") == parse_type("Rc<u8>")


def test_several_params():
	ok, subst = _unify("Result<T, E>", "Result<u8, &'static str>", "T", "E")
	assert ok
	assert subst.get("T") == parse_type("u8")
	assert subst.get("E") == parse_type("&'static str")


def test_names_must_match():
	ok, _ = _unify("Vec<T>", "Option<u8>", "T")
	assert not ok
	ok, _ = _unify("Foo", "Foo", "T")
	assert ok


def test_reference_mutability_must_match():
	ok, _ = _unify("&mut T", "&u8", "T")
	assert not ok
	ok, _ = _unify("&T", "&mut u8", "T")
	assert not ok
	ok, subst = _unify("&T", "&'a u8", "T")
	assert ok
	assert subst.get("T") == parse_type("u8")


def test_slices_and_tuples():
	ok, subst = _unify("&[T]", "&[i32]", "T")
	assert ok and subst.get("T") == parse_type("i32")
	ok, _ = _unify("(T1, T2)", "(One, Two, Three)", "T1", "T2")
	assert not ok
	ok, subst = _unify("(T1, T2)", "(One, Two)", "T1", "T2")
	assert ok
	assert [i.ty.render() for i in subst] == ["One", "Two"]
	ok, _ = _unify("()", "()")
	assert ok


def test_repeated_param_must_agree():
	ok, _ = _unify("(T, T)", "(u8, u8)", "T")
	assert ok
	ok, _ = _unify("(T, T)", "(u8, u16)", "T")
	assert not ok
	ok, _ = _unify("Pair<T, T>", "Pair<u8, u16>", "T")
	assert not ok


def test_repeated_param_bound_through_generic_arg():
	ok, subst = _unify("(Vec<T>, T)", "(Vec<&str>, &str)", "T")
	assert ok
	assert subst.get("T") == parse_type("&str")
	ok, _ = _unify("(Vec<T>, T)", "(Vec<std::string::String>, std::string::String)", "T")
	assert ok
	ok, _ = _unify("(Vec<T>, T)", "(Vec<(u8, u16)>, (u8, u16))", "T")
	assert ok
	ok, _ = _unify("(Vec<T>, T)", "(Vec<&str>, &u8)", "T")
	assert not ok


def test_other_shapes_compare_structurally():
	ok, _ = _unify("*mut T", "*mut T", "T")
	assert ok
	ok, _ = _unify("*mut T", "*mut u8", "T")
	assert not ok
	ok, _ = _unify("[u8; 4]", "[u8; 4]")
	assert ok


def test_try_unify_leaves_input_untouched():
	subst = TyParamsSubstMap.for_params(["T", "E"])
	# `T` binds before the mismatch on the second argument.
	assert try_unify(parse_type("Result<T, u8>"), parse_type("Result<bool, u16>"), subst) is None
	assert subst.unbound() == ["T", "E"]
	found = try_unify(parse_type("Result<T, E>"), parse_type("Result<bool, u16>"), subst)
	assert found is not None and found is not subst
	assert found.unbound() == []
	assert subst.unbound() == ["T", "E"]
