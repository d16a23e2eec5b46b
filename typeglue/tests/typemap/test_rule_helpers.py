# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typeglue.core.normalize import normalize_ty_lifetimes
from typeglue.core.generics import Generics
from typeglue.parser import parse_type
from typeglue.typemap.helpers import (
	check_if_smart_pointer_return_inner_type,
	if_option_return_some_type,
	if_result_return_ok_err_types,
	if_ty_result_return_ok_type,
	if_type_slice_return_elem_type,
	if_vec_return_elem_type,
	list_lifetimes,
)
from typeglue.typemap.rule import ConversionRule
from typeglue.typemap.ty import TypeNode


def _node(text: str) -> TypeNode:
	return TypeNode.new(parse_type(text))


def test_option():
	assert normalize_ty_lifetimes(if_option_return_some_type(_node("Option<String>"))) == "String"
	assert if_option_return_some_type(_node("String")) is None


def test_result():
	ok, err = if_result_return_ok_err_types(_node("Result<bool, String>"))
	assert (normalize_ty_lifetimes(ok), normalize_ty_lifetimes(err)) == ("bool", "String")
	assert if_result_return_ok_err_types(_node("Option<bool>")) is None
	assert normalize_ty_lifetimes(if_ty_result_return_ok_type(parse_type("Result<bool, String>"))) == "bool"
	assert (
		normalize_ty_lifetimes(if_ty_result_return_ok_type(parse_type("Result<Option<i32>, String>")))
		== "Option < i32 >"
	)
	assert if_ty_result_return_ok_type(parse_type("Vec<i32>")) is None


def test_vec():
	assert normalize_ty_lifetimes(if_vec_return_elem_type(_node("Vec<bool>"))) == "bool"


def test_smart_pointer():
	inner = check_if_smart_pointer_return_inner_type(_node("Rc<RefCell<bool>>"), "Rc")
	assert normalize_ty_lifetimes(inner) == "RefCell < bool >"
	unwrapped = ConversionRule.simple(parse_type("RefCell<T>"), parse_type("T"), Generics.of("T")).is_conv_possible(
		_node(normalize_ty_lifetimes(inner))
	)
	assert unwrapped[1] == "bool"
	assert check_if_smart_pointer_return_inner_type(_node("Arc<bool>"), "Rc") is None


def test_slice_elem():
	assert if_type_slice_return_elem_type(parse_type("&[i32]"), False) == parse_type("i32")
	assert if_type_slice_return_elem_type(parse_type("i32"), False) is None
	assert if_type_slice_return_elem_type(parse_type("&mut [i32]"), False) is None
	assert if_type_slice_return_elem_type(parse_type("&mut [i32]"), True) == parse_type("i32")


def test_list_lifetimes():
	assert list_lifetimes(parse_type("Rc<RefCell<Foo<'a>>>")) == ["'a"]
