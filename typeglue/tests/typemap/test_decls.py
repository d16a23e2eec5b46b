# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from typeglue.config import TypeMapConfig
from typeglue.core.diagnostics import TypeMapError
from typeglue.parser import parse_items
from typeglue.typemap.decls import (
	CastImplDecl,
	ConvMacroDecl,
	ConvTraitDecl,
	DerefImplDecl,
	ForeignTypesMapDecl,
	SupportCodeDecl,
	collect_known_attrs,
	decode_items,
	extract_trait_param_type,
	foreigner_hint_for_generic,
	is_wrong_cfg_pointer_width,
)

CFG_IMPL = """
#[to_hint = "T"]
#[cfg(target_pointer_width = "64")]
impl CastFrom<isize> for jlong {
	fn cast_from(x: isize, _: *mut JNIEnv) -> Self {
		x as jlong
	}
}
"""


def _decode(code: str, width: int = 64):
	return list(decode_items(parse_items(code), TypeMapConfig(target_pointer_width=width)))


def _only(code: str):
	(item,) = parse_items(code)
	return item


def test_cfg_pointer_width():
	impl = _only(CFG_IMPL)
	assert is_wrong_cfg_pointer_width(impl.attrs, 32)
	assert not is_wrong_cfg_pointer_width(impl.attrs, 64)
	assert _decode(CFG_IMPL, 32) == []
	assert len(_decode(CFG_IMPL, 64)) == 1


def test_collect_known_attrs():
	impl = _only(CFG_IMPL)
	attrs = collect_known_attrs(impl.attrs)
	assert {k: [v.value for v in vs] for k, vs in attrs.items()} == {"to_hint": ["T"]}

	impl = _only(
		"""
#[to_hint = "T"]
#[code_template = "let mut {to_var}: {to_var_type} = <{to_var_type}>::cast_from({from_var});"]
#[cfg(target_pointer_width = "64")]
impl CastFrom<isize> for jlong { }
"""
	)
	attrs = collect_known_attrs(impl.attrs)
	assert sorted((k, [v.value for v in vs]) for k, vs in attrs.items()) == [
		("code_template", ["let mut {to_var}: {to_var_type} = <{to_var_type}>::cast_from({from_var});"]),
		("to_hint", ["T"]),
	]


def test_known_attr_must_be_string_value():
	impl = _only("#[to_hint(T)]\nimpl CastFrom<isize> for jlong { }")
	with pytest.raises(TypeMapError) as excinfo:
		collect_known_attrs(impl.attrs)
	assert excinfo.value.diagnostic.message == "Invalid attribute"
	assert excinfo.value.span.line == 1


def test_extract_trait_param_type():
	impl = _only("impl<'bugaga> CastFrom<jobject> for Option<&'bugaga str> { }")
	assert extract_trait_param_type(impl.trait_path).render() == "jobject"


@pytest.mark.parametrize(
	"header, message",
	[
		("impl CastFrom for jlong { }", "Expect generic arguments here"),
		("impl CastFrom<u8, u16> for jlong { }", "Should be only one generic argument"),
		("impl<'a> CastFrom<'a> for jlong { }", "Expect type here"),
	],
)
def test_extract_trait_param_type_errors(header, message):
	impl = _only(header)
	with pytest.raises(TypeMapError) as excinfo:
		extract_trait_param_type(impl.trait_path, impl.loc)
	assert excinfo.value.diagnostic.message == message


def test_hint_for_generic():
	impl = _only(
		"""
#[to_hint = "T"]
impl<T: ForeignClass> CastFrom<T> for *mut ::std::os::raw::c_void { }
"""
	)
	attrs = collect_known_attrs(impl.attrs)
	assert foreigner_hint_for_generic(impl.generics, attrs, "to_hint") == "T"
	assert foreigner_hint_for_generic(impl.generics, attrs, "from_hint") is None


def test_hint_must_mention_param():
	impl = _only('#[to_hint = "X []"]\nimpl<T> CastFrom<Vec<T>> for jobjectArray { }')
	with pytest.raises(TypeMapError) as excinfo:
		foreigner_hint_for_generic(impl.generics, collect_known_attrs(impl.attrs), "to_hint")
	err = excinfo.value
	assert err.diagnostic.message == "to_hint not contains T"
	assert [n.message for n in err.notes] == ["T defined here"]


def test_hint_given_twice_points_at_both():
	impl = _only('#[to_hint = "T"]\n#[to_hint = "T []"]\nimpl<T> CastFrom<Vec<T>> for jobjectArray { }')
	with pytest.raises(TypeMapError) as excinfo:
		_decode(impl.source)
	err = excinfo.value
	assert err.diagnostic.message == "Several to_hint attributes"
	assert err.span.line == 2
	assert err.notes[0].message == "First to_hint"
	assert err.notes[0].span.line == 1


def test_hint_with_two_params_is_rejected():
	with pytest.raises(TypeMapError) as excinfo:
		_decode('#[to_hint = "T1"]\nimpl<T1, T2> CastFrom<(T1, T2)> for ObjectPair { }')
	assert excinfo.value.diagnostic.message == "Expect exactly one generic parameter for to_hint"


def test_hint_mixed_with_other_attrs_on_impl():
	with pytest.raises(TypeMapError) as excinfo:
		_decode('#[to_hint = "T"]\n#[from_hint = "T"]\nimpl<T> CastFrom<T> for jobject { }')
	assert excinfo.value.diagnostic.message == "Expect only to_hint attribute"


def test_classification_order():
	decls = _decode(
		"""
mod foreign_types_map {
	#![foreign_name = "boolean"]
	#![host_name = "jboolean"]
}

#[code_template = "let {to_var}: {to_var_type} = {from_var}.cast_into(env);"]
trait CastInto<T> {
	fn cast_into(self, env: *mut JNIEnv) -> T;
}

trait Helper {}

impl CastInto<bool> for jboolean {
	fn cast_into(self, _: *mut JNIEnv) -> bool { self != 0 }
}

impl CastDeref for String {
	type Target = str;
	fn cast_deref(&self) -> &str { &self }
}

impl<T> CastDerefMut for Vec<T> {
	type Target = [T];
	fn cast_deref_mut(&mut self) -> &mut [T] { self }
}

#[generic_arg = "T"]
#[generic_arg = "E"]
#[from_type = "Result<T, E>"]
#[to_type = "T"]
#[code_template = "let {to_var}: {to_var_type} = unpack_return!({from_var}, env);"]
macro_rules! unpack_return { ($v:expr) => { $v } }

macro_rules! plain { () => {} }

impl Display for Foo { }
"""
	)
	kinds = [type(d) for d in decls]
	assert kinds == [
		ForeignTypesMapDecl,
		ConvTraitDecl,
		SupportCodeDecl,
		CastImplDecl,
		DerefImplDecl,
		DerefImplDecl,
		ConvMacroDecl,
		SupportCodeDecl,
		SupportCodeDecl,
	]
	foreign, trait, _, cast, deref, deref_mut, macro, _, _ = decls
	assert [(e.foreign_name, e.host_name) for e in foreign.entries] == [("boolean", "jboolean")]
	assert trait.name == "CastInto"
	assert (cast.from_ty.render(), cast.to_ty.render()) == ("jboolean", "bool")
	assert not cast.is_generic
	assert (deref.target_ty.render(), deref.mutable) == ("str", False)
	assert deref_mut.mutable and deref_mut.is_generic
	assert macro.generics.type_param_names() == ["T", "E"]
	assert macro.from_ty.render() == "Result < T , E >"


def test_cast_from_direction():
	(decl,) = _decode("impl CastFrom<u8> for jshort { }")
	assert (decl.from_ty.render(), decl.to_ty.render()) == ("u8", "jshort")


def test_deref_without_target():
	with pytest.raises(TypeMapError) as excinfo:
		_decode("impl CastDeref for String { }")
	assert excinfo.value.diagnostic.message == "No Target associated type"


def test_foreign_map_errors():
	with pytest.raises(TypeMapError) as excinfo:
		_decode('mod foreign_types_map {\n#![host_name = "jint"]\n}')
	assert excinfo.value.diagnostic.message == "No foreign_name for host_name"

	with pytest.raises(TypeMapError) as excinfo:
		_decode("mod foreign_types_map {\n#![foreign_name(int)]\n}")
	assert excinfo.value.diagnostic.message == "Expect name value attribute"

	with pytest.raises(TypeMapError) as excinfo:
		_decode('mod foreign_types_map {\n#![allow(dead_code)]\n}')
	assert excinfo.value.diagnostic.message == "Unexpected attribute: 'allow'"

	with pytest.raises(TypeMapError) as excinfo:
		_decode('mod foreign_types_map {\n#![foreign_name = "int"]\n}')
	assert excinfo.value.diagnostic.message == "No host_name for foreign_name"


def test_trait_attrs_need_code_template():
	with pytest.raises(TypeMapError) as excinfo:
		_decode('#[to_hint = "T"]\ntrait CastInto<T> { }')
	assert excinfo.value.diagnostic.message == "No code_template attribute"

	with pytest.raises(TypeMapError) as excinfo:
		_decode('#[code_template = "{to_var} = {from_var}"]\ntrait CastInto<T> { }')
	assert excinfo.value.diagnostic.message == "{to_var_type} not found in code template"


def test_macro_errors():
	with pytest.raises(TypeMapError) as excinfo:
		_decode('#[generic_arg = "T"]\n#[to_type = "T"]\nmacro_rules! m { () => {} }')
	assert excinfo.value.diagnostic.message.startswith("No from_type")

	with pytest.raises(NotImplementedError):
		_decode(
			'#[from_type = "u8"]\n#[to_type = "u16"]\n'
			'#[code_template = "let {to_var}: {to_var_type} = {from_var} as u16;"]\n'
			"macro_rules! m { () => {} }"
		)
