# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from typeglue.core.type_expr import PathType, PtrType, SliceType
from typeglue.parser import (
	DeclParseError,
	FnItem,
	ImplItem,
	MacroItem,
	ModItem,
	OtherItem,
	SelfArg,
	TraitItem,
	TypedArg,
	fn_arg_type,
	parse_items,
)
from typeglue.parser.ast import MetaList, MetaNameValue, MetaWord


def test_foreign_types_map_module_inner_attrs():
	(mod,) = parse_items(
		"""
mod foreign_types_map {
	#![foreign_name = "boolean"]
	#![host_name = "jboolean"]
}
"""
	)
	assert isinstance(mod, ModItem)
	assert mod.name == "foreign_types_map"
	assert [(a.name, a.str_value()) for a in mod.inner_attrs] == [
		("foreign_name", "boolean"),
		("host_name", "jboolean"),
	]
	assert all(a.inner for a in mod.inner_attrs)
	assert mod.loc is not None and mod.loc.line == 2


def test_attribute_shapes():
	(impl,) = parse_items(
		"""
#[to_hint = "T"]
#[cfg(target_pointer_width = "64")]
#[allow(dead_code)]
#[inline]
impl CastFrom<isize> for jlong {
	fn cast_from(x: isize, _: *mut JNIEnv) -> Self {
		x as jlong
	}
}
"""
	)
	hint, cfg, allow, inline = impl.attrs
	assert isinstance(hint.meta, MetaNameValue) and hint.str_value() == "T"
	assert isinstance(cfg.meta, MetaList)
	(pred,) = cfg.meta.items
	assert isinstance(pred, MetaNameValue)
	assert pred.path == "target_pointer_width" and pred.value.value == "64"
	assert isinstance(allow.meta, MetaList)
	assert isinstance(inline.meta, MetaWord)
	assert inline.str_value() is None


def test_trait_impl_header_and_members():
	(impl,) = parse_items(
		"""
impl<T> CastDeref for Vec<T> {
	type Target = [T];
	fn cast_deref(&self) -> &Self::Target {
		&*self
	}
}
"""
	)
	assert isinstance(impl, ImplItem)
	assert impl.trait_name() == "CastDeref"
	assert impl.self_ty == PathType.named("Vec", [PathType.named("T")])
	assert impl.generics.type_param_names() == ["T"]
	assert impl.assoc_type("Target") == SliceType(elem=PathType.named("T"))
	assert impl.assoc_type("Target").render() == "[ T ]"
	assert impl.assoc_type("Missing") is None
	fn = impl.members[1]
	assert isinstance(fn, FnItem)
	assert isinstance(fn.params[0], SelfArg) and fn.params[0].by_ref


def test_trait_name_ignores_generic_args():
	(impl,) = parse_items("impl<'a> CastFrom<jobject> for Option<&'a str> { }")
	assert impl.trait_name() == "CastFrom"
	assert impl.trait_path.last.args == (PathType.named("jobject"),)


def test_trait_body_is_kept_as_text():
	(trait,) = parse_items(
		"""
#[code_template = "let {to_var}: {to_var_type} = {from_var}.cast_into(env);"]
trait CastInto<T> {
	fn cast_into(self, env: *mut JNIEnv) -> T;
}
"""
	)
	assert isinstance(trait, TraitItem)
	assert trait.name == "CastInto"
	assert trait.generics.type_param_names() == ["T"]
	assert "cast_into" in trait.body
	assert trait.source.startswith("#[code_template")
	assert trait.attrs[0].str_value() == "let {to_var}: {to_var_type} = {from_var}.cast_into(env);"


def test_macro_rules_item():
	(mac,) = parse_items(
		"""
#[generic_arg = "T"]
macro_rules! unpack_return {
	($result_value:expr, $env:ident) => {
		match $result_value { Ok(x) => x, Err(msg) => return msg }
	}
}
"""
	)
	assert isinstance(mac, MacroItem)
	assert mac.path == "macro_rules"
	assert mac.name == "unpack_return"
	assert mac.attrs[0].name == "generic_arg"


def test_other_items_are_kept():
	items = parse_items(
		"""
use std::rc::Rc;
pub struct Foo { x: u8 }
enum Kind { A, B }
const N: usize = 4;
static mut COUNTER: u32 = 0;
pub fn helper(x: u8) -> u8 { x }
"""
	)
	kinds = [i.kind if isinstance(i, OtherItem) else type(i).__name__ for i in items]
	assert kinds == ["use", "struct", "enum", "const", "static", "FnItem"]
	assert items[1].is_pub
	assert items[1].name == "Foo"
	assert items[1].source == "pub struct Foo { x: u8 }"


def test_fn_arg_type_of_receiver_is_none():
	(fn,) = parse_items("fn f(&mut self, env: *mut JNIEnv, (a, b): (u8, u8)) {}")
	receiver, env, pair = fn.params
	assert fn_arg_type(receiver) is None
	assert isinstance(env, TypedArg)
	assert fn_arg_type(env) == PtrType(elem=PathType.named("JNIEnv"), mutable=True)
	assert pair.pattern == "( a , b )"


def test_comments_are_ignored():
	items = parse_items(
		"""
// leading comment
/* block
   comment */
struct A;
"""
	)
	assert len(items) == 1


def test_syntax_error_has_location():
	with pytest.raises(DeclParseError) as excinfo:
		parse_items("impl Foo for {", file="bad.rs")
	assert excinfo.value.loc is not None
	assert excinfo.value.loc.file == "bad.rs"
