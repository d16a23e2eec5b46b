# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration decoding.

Parsed items are classified once, in source order, into closed declaration
kinds. All attribute shape checks happen here, so the registry builder only
sees well-formed declarations:

- `ForeignTypesMapDecl`  the `foreign_types_map` module (foreign/host name pairs)
- `ConvTraitDecl`        a conversion interface carrying a `code_template`
- `CastImplDecl`         `impl CastInto<X> for Y` / `impl CastFrom<X> for Y`
- `DerefImplDecl`        `impl CastDeref for Y { type Target = X; }` (or `CastDerefMut`)
- `ConvMacroDecl`        a macro carrying `from_type`/`to_type`/`code_template`
- `SupportCodeDecl`      anything else; kept verbatim as support code

Items guarded by `#[cfg(target_pointer_width = "N")]` for another width are
dropped before any of their other attributes are looked at.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from typeglue.config.typemap import (
	CAST_DEREF_MUT_TRAIT,
	CAST_DEREF_TRAIT,
	CAST_FROM_TRAIT,
	CAST_INTO_TRAIT,
	CFG_ATTR,
	CFG_POINTER_WIDTH_KEY,
	CODE_TEMPLATE_ATTR,
	FOREIGN_NAME_ATTR,
	FOREIGN_TYPES_MAP_MOD,
	FROM_HINT_ATTR,
	FROM_TYPE_ATTR,
	GENERIC_ARG_ATTR,
	HOST_NAME_ATTR,
	KNOWN_ATTRS,
	TARGET_ASSOC_TYPE,
	TO_HINT_ATTR,
	TO_TYPE_ATTR,
	TypeMapConfig,
)
from typeglue.core.diagnostics import TypeMapError
from typeglue.core.generics import GenericParam, Generics
from typeglue.core.type_expr import PathType, TypeExpr
from typeglue.parser.ast import Attribute, ImplItem, Item, MacroItem, MetaList, MetaNameValue, ModItem, TraitItem
from typeglue.parser.parser import DeclParseError, parse_generics, parse_type

from .graph import validate_code_template

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AttrValue:
	value: str
	loc: Optional[object] = field(default=None, compare=False, hash=False)


AttrMap = Dict[str, List[AttrValue]]


@dataclass(frozen=True)
class ForeignTypeEntry:
	foreign_name: str
	host_name: str
	host_ty: TypeExpr
	loc: Optional[object] = field(default=None, compare=False, hash=False)


@dataclass(frozen=True)
class ForeignTypesMapDecl:
	entries: Tuple[ForeignTypeEntry, ...]
	item: ModItem


@dataclass(frozen=True)
class ConvTraitDecl:
	name: str
	code_template: str
	item: TraitItem


@dataclass(frozen=True)
class CastImplDecl:
	trait_name: str
	from_ty: TypeExpr
	to_ty: TypeExpr
	generics: Generics
	# Validated hints for generic impls, plain node-name suffixes otherwise.
	to_hint: Optional[str]
	from_hint: Optional[str]
	item: ImplItem

	@property
	def is_generic(self) -> bool:
		return self.generics.has_type_params()


@dataclass(frozen=True)
class DerefImplDecl:
	trait_name: str
	self_ty: TypeExpr
	target_ty: TypeExpr
	mutable: bool
	generics: Generics
	to_hint: Optional[str]
	from_hint: Optional[str]
	item: ImplItem

	@property
	def is_generic(self) -> bool:
		return self.generics.has_type_params()


@dataclass(frozen=True)
class ConvMacroDecl:
	from_ty: TypeExpr
	to_ty: TypeExpr
	code_template: str
	generics: Generics
	to_hint: Optional[str]
	from_hint: Optional[str]
	item: MacroItem


@dataclass(frozen=True)
class SupportCodeDecl:
	item: Item


Decl = Union[ForeignTypesMapDecl, ConvTraitDecl, CastImplDecl, DerefImplDecl, ConvMacroDecl, SupportCodeDecl]


def is_wrong_cfg_pointer_width(attrs: Sequence[Attribute], target_pointer_width: int) -> bool:
	"""True when a `cfg(target_pointer_width = "N")` guard names another width."""
	for attr in attrs:
		if attr.name != CFG_ATTR or not isinstance(attr.meta, MetaList):
			continue
		if len(attr.meta.items) != 1:
			continue
		pred = attr.meta.items[0]
		if not isinstance(pred, MetaNameValue) or pred.path != CFG_POINTER_WIDTH_KEY:
			continue
		try:
			width = int(pred.value.value)
		except ValueError:
			continue
		return width != target_pointer_width
	return False


def collect_known_attrs(attrs: Iterable[Attribute], *, file: Optional[str] = None) -> AttrMap:
	"""Group conversion attributes by name, keeping source order; others are ignored."""
	out: AttrMap = {}
	for attr in attrs:
		if attr.name not in KNOWN_ATTRS:
			continue
		value = attr.str_value()
		if value is None:
			raise TypeMapError.at("Invalid attribute", attr.loc, file=file)
		out.setdefault(attr.name, []).append(AttrValue(value=value, loc=attr.loc))
	return out


def extract_trait_param_type(trait_path: PathType, loc: Optional[object] = None, *, file: Optional[str] = None) -> TypeExpr:
	"""`X` out of `CastFrom<X>`."""
	if trait_path.leading_colon or len(trait_path.segments) != 1:
		raise TypeMapError.at("Invalid trait path", loc, file=file)
	args = trait_path.segments[0].args
	if not args:
		raise TypeMapError.at("Expect generic arguments here", loc, file=file)
	if len(args) != 1:
		raise TypeMapError.at("Should be only one generic argument", loc, file=file)
	if not isinstance(args[0], TypeExpr):
		raise TypeMapError.at("Expect type here", loc, file=file)
	return args[0]


def foreigner_hint_for_generic(
	generics: Generics,
	attrs: AttrMap,
	attr_name: str,
	*,
	loc: Optional[object] = None,
	file: Optional[str] = None,
) -> Optional[str]:
	"""
	Naming hint of a generic rule, checked against its type parameters.

	The hint must occur at most once, the rule must have exactly one type
	parameter and the hint text must mention that parameter.
	"""
	values = attrs.get(attr_name)
	if not values:
		return None
	if len(values) != 1:
		raise TypeMapError.at(f"Several {attr_name} attributes", values[1].loc, file=file).note(
			f"First {attr_name}", values[0].loc
		)
	params = generics.type_params()
	generics_loc = generics.loc if generics.loc is not None else loc
	if len(params) != 1:
		raise TypeMapError.at(f"Expect exactly one generic parameter for {attr_name}", generics_loc, file=file)
	param = params[0]
	hint = values[0]
	if param.name not in hint.value:
		raise TypeMapError.at(f"{attr_name} not contains {param.name}", hint.loc, file=file).note(
			f"{param.name} defined here", param.loc if param.loc is not None else generics_loc
		)
	return hint.value


def code_template_from_attrs(attrs: AttrMap, loc: Optional[object], *, file: Optional[str] = None) -> str:
	values = attrs.get(CODE_TEMPLATE_ATTR)
	if not values:
		raise TypeMapError.at(f"No {CODE_TEMPLATE_ATTR} attribute", loc, file=file)
	if len(values) != 1:
		raise TypeMapError.at(
			f"Expect to have {CODE_TEMPLATE_ATTR} attribute, and it should be only one", loc, file=file
		)
	validate_code_template(values[0].value, values[0].loc, file=file)
	return values[0].value


def decode_items(items: Iterable[Item], config: TypeMapConfig) -> Iterator[Decl]:
	"""Classify `items` in source order, skipping those disabled by `cfg`."""
	for item in items:
		if is_wrong_cfg_pointer_width(item.attrs, config.target_pointer_width):
			log.debug("decls.cfg_skip", item=type(item).__name__, loc=item.loc)
			continue
		decl = decode_item(item, config)
		log.debug("decls.decoded", kind=type(decl).__name__, loc=item.loc)
		yield decl


def decode_item(item: Item, config: TypeMapConfig) -> Decl:
	file = config.name
	if isinstance(item, ModItem) and item.name == FOREIGN_TYPES_MAP_MOD:
		return _decode_foreign_types_map(item, file)
	if isinstance(item, ImplItem) and item.trait_name() in (CAST_INTO_TRAIT, CAST_FROM_TRAIT):
		return _decode_cast_impl(item, file)
	if isinstance(item, TraitItem):
		attrs = collect_known_attrs(item.attrs, file=file)
		if not attrs:
			return SupportCodeDecl(item=item)
		return ConvTraitDecl(name=item.name, code_template=code_template_from_attrs(attrs, item.loc, file=file), item=item)
	if isinstance(item, ImplItem) and item.trait_name() in (CAST_DEREF_TRAIT, CAST_DEREF_MUT_TRAIT):
		return _decode_deref_impl(item, file)
	if isinstance(item, MacroItem):
		attrs = collect_known_attrs(item.attrs, file=file)
		if not attrs:
			return SupportCodeDecl(item=item)
		return _decode_conv_macro(item, attrs, file)
	return SupportCodeDecl(item=item)


def _attr_type(value: AttrValue, *, file: Optional[str]) -> TypeExpr:
	try:
		return parse_type(value.value, file=file)
	except DeclParseError as err:
		raise TypeMapError.at(f"Can not parse type '{value.value}': {err}", value.loc, file=file) from err


def _name_value(attr: Attribute, *, file: Optional[str]) -> AttrValue:
	value = attr.str_value()
	if value is None:
		raise TypeMapError.at("Expect name value attribute", attr.loc, file=file)
	return AttrValue(value=value, loc=attr.loc)


def _decode_foreign_types_map(item: ModItem, file: Optional[str]) -> ForeignTypesMapDecl:
	entries: List[ForeignTypeEntry] = []
	pending: Optional[AttrValue] = None
	for attr in item.inner_attrs:
		if attr.name == FOREIGN_NAME_ATTR:
			if pending is not None:
				raise TypeMapError.at(f"No {HOST_NAME_ATTR} for {FOREIGN_NAME_ATTR}", pending.loc, file=file)
			pending = _name_value(attr, file=file)
		elif attr.name == HOST_NAME_ATTR:
			host = _name_value(attr, file=file)
			if pending is None:
				raise TypeMapError.at(f"No {FOREIGN_NAME_ATTR} for {HOST_NAME_ATTR}", attr.loc, file=file)
			entries.append(
				ForeignTypeEntry(
					foreign_name=pending.value,
					host_name=host.value,
					host_ty=_attr_type(host, file=file),
					loc=pending.loc,
				)
			)
			pending = None
		else:
			raise TypeMapError.at(f"Unexpected attribute: '{attr.name}'", attr.loc, file=file)
	if pending is not None:
		raise TypeMapError.at(f"No {HOST_NAME_ATTR} for {FOREIGN_NAME_ATTR}", pending.loc, file=file)
	return ForeignTypesMapDecl(entries=tuple(entries), item=item)


def _impl_hints(item: ImplItem, attrs: AttrMap, file: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
	"""(to_hint, from_hint) of a cast/deref impl."""
	hints: Dict[str, Optional[str]] = {TO_HINT_ATTR: None, FROM_HINT_ATTR: None}
	for name in hints:
		values = attrs.get(name)
		if not values:
			continue
		if len(values) != 1:
			raise TypeMapError.at(f"Several {name} attributes", values[1].loc, file=file).note(
				f"First {name}", values[0].loc
			)
		if len(attrs) != 1:
			raise TypeMapError.at(f"Expect only {name} attribute", item.loc, file=file)
		hints[name] = values[0].value
	if item.generics.has_type_params():
		for name in hints:
			hints[name] = foreigner_hint_for_generic(item.generics, attrs, name, loc=item.loc, file=file)
	return hints[TO_HINT_ATTR], hints[FROM_HINT_ATTR]


def _decode_cast_impl(item: ImplItem, file: Optional[str]) -> CastImplDecl:
	attrs = collect_known_attrs(item.attrs, file=file)
	to_hint, from_hint = _impl_hints(item, attrs, file)
	assert item.trait_path is not None
	type_param = extract_trait_param_type(item.trait_path, item.loc, file=file)
	trait_name = item.trait_name()
	if trait_name == CAST_INTO_TRAIT:
		from_ty, to_ty = item.self_ty, type_param
	else:
		from_ty, to_ty = type_param, item.self_ty
	return CastImplDecl(
		trait_name=trait_name,
		from_ty=from_ty,
		to_ty=to_ty,
		generics=item.generics,
		to_hint=to_hint,
		from_hint=from_hint,
		item=item,
	)


def _decode_deref_impl(item: ImplItem, file: Optional[str]) -> DerefImplDecl:
	attrs = collect_known_attrs(item.attrs, file=file)
	to_hint, from_hint = _impl_hints(item, attrs, file)
	target = item.assoc_type(TARGET_ASSOC_TYPE)
	if target is None:
		raise TypeMapError.at(f"No {TARGET_ASSOC_TYPE} associated type", item.loc, file=file)
	trait_name = item.trait_name()
	return DerefImplDecl(
		trait_name=trait_name,
		self_ty=item.self_ty,
		target_ty=target,
		mutable=trait_name == CAST_DEREF_MUT_TRAIT,
		generics=item.generics,
		to_hint=to_hint,
		from_hint=from_hint,
		item=item,
	)


def _single(attrs: AttrMap, name: str, item: MacroItem, file: Optional[str]) -> AttrValue:
	values = attrs.get(name)
	if not values:
		raise TypeMapError.at(f"No {name} but there are other attributes: {sorted(attrs)}", item.loc, file=file)
	if len(values) != 1:
		raise TypeMapError.at(f"Several {name} attributes", values[1].loc, file=file).note(f"First {name}", values[0].loc)
	return values[0]


def _decode_conv_macro(item: MacroItem, attrs: AttrMap, file: Optional[str]) -> ConvMacroDecl:
	from_value = _single(attrs, FROM_TYPE_ATTR, item, file)
	to_value = _single(attrs, TO_TYPE_ATTR, item, file)
	code_template = code_template_from_attrs(attrs, item.loc, file=file)
	generic_args = attrs.get(GENERIC_ARG_ATTR)
	if not generic_args:
		raise NotImplementedError(f"conversion macro without {GENERIC_ARG_ATTR} attributes")
	params: List[GenericParam] = []
	for value in generic_args:
		try:
			parsed = parse_generics(f"<{value.value}>", file=file)
		except DeclParseError as err:
			raise TypeMapError.at(f"Invalid {GENERIC_ARG_ATTR} '{value.value}': {err}", value.loc, file=file) from err
		params.extend(replace(p, loc=value.loc) for p in parsed.params)
	generics = Generics(params=tuple(params), loc=generic_args[0].loc)
	return ConvMacroDecl(
		from_ty=_attr_type(from_value, file=file),
		to_ty=_attr_type(to_value, file=file),
		code_template=code_template,
		generics=generics,
		to_hint=foreigner_hint_for_generic(generics, attrs, TO_HINT_ATTR, loc=item.loc, file=file),
		from_hint=foreigner_hint_for_generic(generics, attrs, FROM_HINT_ATTR, loc=item.loc, file=file),
		item=item,
	)


__all__ = [
	"AttrMap",
	"AttrValue",
	"CastImplDecl",
	"ConvMacroDecl",
	"ConvTraitDecl",
	"Decl",
	"DerefImplDecl",
	"ForeignTypeEntry",
	"ForeignTypesMapDecl",
	"SupportCodeDecl",
	"code_template_from_attrs",
	"collect_known_attrs",
	"decode_item",
	"decode_items",
	"extract_trait_param_type",
	"foreigner_hint_for_generic",
	"is_wrong_cfg_pointer_width",
]
