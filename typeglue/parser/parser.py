from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from typeglue.core.generics import (
	Bound,
	GenericParam,
	GenericParamKind,
	Generics,
	TraitBound,
	WherePredicate,
)
from typeglue.core.type_expr import (
	ArrayType,
	GenericArg,
	Lifetime,
	OpaqueType,
	PathSegment,
	PathType,
	PtrType,
	RefType,
	SliceType,
	TupleType,
	TypeExpr,
)

from .ast import (
	Attribute,
	FnArg,
	FnItem,
	ImplItem,
	Item,
	Lit,
	Located,
	MacroItem,
	Meta,
	MetaList,
	MetaNameValue,
	MetaWord,
	ModItem,
	OtherItem,
	SelfArg,
	TraitItem,
	TypeAliasItem,
	TypedArg,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start=["start", "type_entry", "generics_entry"],
	propagate_positions=True,
	maybe_placeholders=False,
)


class DeclParseError(ValueError):
	"""
	Declaration source could not be parsed.

	Raised instead of lark's own exceptions so callers only deal with
	`ValueError` subclasses carrying a best-effort location (`loc`).
	"""

	def __init__(self, message: str, *, loc: Optional[Located]) -> None:
		super().__init__(message)
		self.loc = loc


@dataclass(frozen=True)
class _Source:
	text: str
	file: Optional[str] = None


def _run(source: str, start: str, file: Optional[str]) -> Tree:
	try:
		return _PARSER.parse(source, start=start)
	except UnexpectedInput as err:
		line = getattr(err, "line", -1)
		column = getattr(err, "column", -1)
		loc = Located(line=line, column=column, file=file) if line and line > 0 else None
		raise DeclParseError(f"invalid declaration syntax: {_short_reason(err)}", loc=loc) from err


def _short_reason(err: UnexpectedInput) -> str:
	token = getattr(err, "token", None)
	if token is not None:
		return f"unexpected {token.type} {token.value!r}"
	char = getattr(err, "char", None)
	if char is not None:
		return f"unexpected character {char!r}"
	return "unexpected end of input"


def parse_items(source: str, file: Optional[str] = None) -> List[Item]:
	"""Parse a declaration file into items, in source order."""
	src = _Source(text=source, file=file)
	tree = _run(source, "start", file)
	items: List[Item] = []
	for child in tree.children:
		# File-level inner attributes (`#![allow(...)]`) carry no declarations.
		if isinstance(child, Tree) and _name(child) == "item":
			items.append(_build_item(child, src))
	return items


def parse_type(text: str, file: Optional[str] = None) -> TypeExpr:
	"""Parse a single type expression (`Vec<T>`, `&'a mut [u8]`, ...)."""
	src = _Source(text=text, file=file)
	tree = _run(text, "type_entry", file)
	return _build_type(tree.children[0], src)


def parse_generics(text: str, file: Optional[str] = None) -> Generics:
	"""Parse a generic parameter list including the angle brackets (`<T: Bound, 'a>`)."""
	src = _Source(text=text, file=file)
	tree = _run(text, "generics_entry", file)
	return _build_generics(tree.children[0], src)


# ---- items ----


def _build_item(tree: Tree, src: _Source) -> Item:
	attrs: List[Attribute] = []
	is_pub = False
	body: Optional[Tree] = None
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "outer_attr":
			attrs.append(_build_attr(child, src, inner=False))
		elif kind == "vis":
			is_pub = True
		else:
			body = child
	assert body is not None, "item without a declaration"
	item = _build_item_kind(body, src)
	item.attrs = attrs
	item.loc = _loc(tree, src)
	item.source = _text(tree, src)
	item.is_pub = is_pub
	return item


def _build_item_kind(tree: Tree, src: _Source) -> Item:
	kind = _name(tree)
	if kind == "mod_item":
		return _build_mod(tree, src)
	if kind == "trait_item":
		return _build_trait(tree, src)
	if kind in ("trait_impl", "inherent_impl"):
		return _build_impl(tree, src)
	if kind == "macro_item":
		return _build_macro(tree, src)
	if kind == "fn_item":
		return _build_fn(tree, src)
	if kind == "type_alias":
		return _build_type_alias(tree, src)
	if kind in ("struct_item", "enum_item", "const_item", "static_item"):
		return OtherItem(kind=kind[: -len("_item")], name=_first_token(tree, "NAME"))
	if kind == "use_item":
		return OtherItem(kind="use")
	raise AssertionError(f"unhandled item kind {kind}")


def _build_mod(tree: Tree, src: _Source) -> ModItem:
	name = _first_token(tree, "NAME")
	assert name is not None
	mod = ModItem(name=name)
	body = _child(tree, "mod_body")
	if body is not None:
		for child in body.children:
			if not isinstance(child, Tree):
				continue
			if _name(child) == "inner_attr":
				mod.inner_attrs.append(_build_attr(child, src, inner=True))
			else:
				mod.items.append(_build_item(child, src))
	return mod


def _build_trait(tree: Tree, src: _Source) -> TraitItem:
	name = _first_token(tree, "NAME")
	assert name is not None
	generics = _build_generics_parts(_child(tree, "generics"), _child(tree, "where_clause"), src)
	bounds_node = _child(tree, "bounds")
	supertraits = _build_bounds(bounds_node, src) if bounds_node is not None else ()
	body = _child(tree, "brace_tt")
	return TraitItem(
		name=name,
		generics=generics,
		supertraits=supertraits,
		body=_text(body, src) if body is not None else "",
	)


def _build_impl(tree: Tree, src: _Source) -> ImplItem:
	types = [c for c in tree.children if isinstance(c, Tree) and _is_type_node(c)]
	trait_path: Optional[PathType] = None
	if _name(tree) == "trait_impl":
		built = _build_type(types[0], src)
		assert isinstance(built, PathType)
		trait_path = built
		self_ty = _build_type(types[1], src)
	else:
		self_ty = _build_type(types[0], src)
	generics = _build_generics_parts(_child(tree, "generics"), _child(tree, "where_clause"), src)
	members: List[Item] = []
	body = _child(tree, "impl_body")
	if body is not None:
		for member in body.children:
			if isinstance(member, Tree) and _name(member) == "impl_member":
				members.append(_build_item(member, src))
	return ImplItem(generics=generics, self_ty=self_ty, trait_path=trait_path, members=members)


def _build_macro(tree: Tree, src: _Source) -> MacroItem:
	path_node = _child(tree, "simple_path")
	assert path_node is not None
	body = next(c for c in tree.children if isinstance(c, Tree) and _name(c) in ("brace_tt", "paren_tt", "bracket_tt"))
	name = next((c.value for c in tree.children if isinstance(c, Token) and c.type == "NAME"), None)
	return MacroItem(path=_simple_path(path_node), name=name, body=_text(body, src))


def _build_fn(tree: Tree, src: _Source) -> FnItem:
	name = _first_token(tree, "NAME")
	assert name is not None
	generics = _build_generics_parts(_child(tree, "generics"), _child(tree, "where_clause"), src)
	params: List[FnArg] = []
	params_node = _child(tree, "fn_params")
	if params_node is not None:
		params = [_build_fn_param(p, src) for p in params_node.children if isinstance(p, Tree)]
	ret_nodes = [c for c in tree.children if isinstance(c, Tree) and _is_type_node(c)]
	body = _child(tree, "brace_tt")
	return FnItem(
		name=name,
		generics=generics,
		params=params,
		ret=_build_type(ret_nodes[0], src) if ret_nodes else None,
		body=_text(body, src) if body is not None else None,
	)


def _build_fn_param(tree: Tree, src: _Source) -> FnArg:
	kind = _name(tree)
	loc = _loc(tree, src)
	mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
	if kind == "self_value":
		return SelfArg(mutable=mutable, loc=loc)
	if kind == "self_typed":
		ty_node = next(c for c in tree.children if isinstance(c, Tree))
		return SelfArg(mutable=mutable, ty=_build_type(ty_node, src), loc=loc)
	if kind == "self_ref":
		lt = next((c for c in tree.children if isinstance(c, Token) and c.type == "LIFETIME"), None)
		return SelfArg(by_ref=True, mutable=mutable, lifetime=Lifetime(lt.value) if lt is not None else None, loc=loc)
	if kind == "typed_param":
		pattern_node, ty_node = [c for c in tree.children if isinstance(c, Tree)]
		return TypedArg(pattern=_render_pattern(pattern_node), ty=_build_type(ty_node, src), loc=loc)
	raise AssertionError(f"unhandled fn parameter {kind}")


def _render_pattern(tree: Tree) -> str:
	if _name(tree) == "pat_ident":
		toks = [c.value for c in tree.children if isinstance(c, Token)]
		return " ".join(toks)
	inner = [_render_pattern(c) for c in tree.children if isinstance(c, Tree)]
	if not inner:
		return "( )"
	if len(inner) == 1:
		return f"( {inner[0]} , )"
	return f"( {' , '.join(inner)} )"


def _build_type_alias(tree: Tree, src: _Source) -> TypeAliasItem:
	name = _first_token(tree, "NAME")
	assert name is not None
	ty_node = next(c for c in tree.children if isinstance(c, Tree) and _is_type_node(c))
	return TypeAliasItem(
		name=name,
		generics=_build_generics_parts(_child(tree, "generics"), None, src),
		ty=_build_type(ty_node, src),
	)


# ---- attributes ----


def _build_attr(tree: Tree, src: _Source, *, inner: bool) -> Attribute:
	meta_node = next(c for c in tree.children if isinstance(c, Tree))
	return Attribute(meta=_build_meta(meta_node, src), inner=inner, loc=_loc(tree, src))


def _build_meta(tree: Tree, src: _Source) -> Meta:
	kind = _name(tree)
	path_node = tree.children[0]
	assert isinstance(path_node, Tree)
	path = _simple_path(path_node)
	loc = _loc(tree, src)
	if kind == "meta_word":
		return MetaWord(path=path, loc=loc)
	if kind == "meta_name_value":
		value = tree.children[1]
		assert isinstance(value, Token)
		return MetaNameValue(path=path, value=_build_lit(value), loc=loc)
	items: List[Meta | Lit] = []
	items_node = _child(tree, "meta_items")
	if items_node is not None:
		for item in items_node.children:
			if isinstance(item, Tree):
				items.append(_build_meta(item, src))
			else:
				items.append(_build_lit(item))
	return MetaList(path=path, items=items, loc=loc)


def _build_lit(tok: Token) -> Lit:
	if tok.type == "STRING":
		return Lit(kind="str", value=_decode_string_token(tok), raw=tok.value)
	if tok.type == "RAW_STRING":
		return Lit(kind="str", value=tok.value[2:-1], raw=tok.value)
	if tok.type == "NUMBER":
		return Lit(kind="int", value=tok.value, raw=tok.value)
	if tok.type == "CHAR":
		return Lit(kind="char", value=tok.value[1:-1], raw=tok.value)
	return Lit(kind="ident", value=tok.value, raw=tok.value)


def _decode_string_token(tok: Token) -> str:
	"""
	Decode STRING tokens. Escapes are interpreted Python-style (unicode_escape),
	then the code points are reinterpreted as raw bytes and decoded as UTF-8 so
	non-ASCII text written directly in the source survives.
	"""
	content = tok.value[1:-1]
	if "\\" not in content:
		return content
	unescaped = codecs.decode(content, "unicode_escape")
	raw_bytes = unescaped.encode("latin-1")
	return raw_bytes.decode("utf-8")


def _simple_path(tree: Tree) -> str:
	return "::".join(c.value for c in tree.children if isinstance(c, Token))


# ---- generics ----


def _build_generics(tree: Tree, src: _Source) -> Generics:
	return _build_generics_parts(tree, None, src)


def _build_generics_parts(generics: Optional[Tree], where: Optional[Tree], src: _Source) -> Generics:
	params: List[GenericParam] = []
	if generics is not None:
		for node in generics.children:
			if isinstance(node, Tree):
				params.append(_build_generic_param(node, src))
	preds: List[WherePredicate] = []
	if where is not None:
		for node in where.children:
			if isinstance(node, Tree):
				preds.append(_build_where_pred(node, src))
	loc = _loc(generics, src) if generics is not None else None
	return Generics(params=tuple(params), where_clause=tuple(preds), loc=loc)


def _build_generic_param(tree: Tree, src: _Source) -> GenericParam:
	kind = _name(tree)
	loc = _loc(tree, src)
	if kind == "lifetime_param":
		name_tok = tree.children[0]
		assert isinstance(name_tok, Token)
		lb = _child(tree, "lifetime_bounds")
		bounds: Tuple[Bound, ...] = _build_lifetime_bounds(lb) if lb is not None else ()
		return GenericParam(name=name_tok.value, kind=GenericParamKind.LIFETIME, bounds=bounds, loc=loc)
	if kind == "const_param":
		name = _first_token(tree, "NAME")
		assert name is not None
		ty_node = next(c for c in tree.children if isinstance(c, Tree))
		return GenericParam(name=name, kind=GenericParamKind.CONST, ty=_build_type(ty_node, src), loc=loc)
	name = _first_token(tree, "NAME")
	assert name is not None
	bounds_node = _child(tree, "bounds")
	default_node = next((c for c in tree.children if isinstance(c, Tree) and _is_type_node(c)), None)
	return GenericParam(
		name=name,
		kind=GenericParamKind.TYPE,
		bounds=_build_bounds(bounds_node, src) if bounds_node is not None else (),
		ty=_build_type(default_node, src) if default_node is not None else None,
		loc=loc,
	)


def _build_where_pred(tree: Tree, src: _Source) -> WherePredicate:
	loc = _loc(tree, src)
	if _name(tree) == "lifetime_predicate":
		lt = tree.children[0]
		assert isinstance(lt, Token)
		lb = _child(tree, "lifetime_bounds")
		return WherePredicate(
			bounded=Lifetime(lt.value),
			bounds=_build_lifetime_bounds(lb) if lb is not None else (),
			loc=loc,
		)
	ty_node = tree.children[0]
	assert isinstance(ty_node, Tree)
	bounds_node = _child(tree, "bounds")
	return WherePredicate(
		bounded=_build_type(ty_node, src),
		bounds=_build_bounds(bounds_node, src) if bounds_node is not None else (),
		loc=loc,
	)


def _build_bounds(tree: Tree, src: _Source) -> Tuple[Bound, ...]:
	out: List[Bound] = []
	for node in tree.children:
		if not isinstance(node, Tree):
			continue
		kind = _name(node)
		if kind == "lifetime_bound":
			tok = node.children[0]
			assert isinstance(tok, Token)
			out.append(Lifetime(tok.value))
			continue
		path_node = next(c for c in node.children if isinstance(c, Tree))
		path = _build_type(path_node, src)
		assert isinstance(path, PathType)
		out.append(TraitBound(path=path, maybe=(kind == "maybe_bound")))
	return tuple(out)


def _build_lifetime_bounds(tree: Tree) -> Tuple[Bound, ...]:
	return tuple(Lifetime(t.value) for t in tree.children if isinstance(t, Token))


# ---- types ----

_TYPE_NODES = frozenset(
	{
		"path_type",
		"global_path_type",
		"ref_type",
		"ptr_type",
		"slice_type",
		"array_type",
		"unit_type",
		"paren_type",
		"single_tuple_type",
		"tuple_type",
		"dyn_type",
		"impl_type",
		"fn_ptr_type",
		"never_type",
	}
)


def _is_type_node(tree: Tree) -> bool:
	return _name(tree) in _TYPE_NODES


def _build_type(tree: Tree, src: _Source) -> TypeExpr:
	name = _name(tree)
	kids = [c for c in tree.children if isinstance(c, Tree)]
	if name in ("path_type", "global_path_type"):
		segs = tuple(_build_segment(s, src) for s in kids)
		return PathType(segments=segs, leading_colon=(name == "global_path_type"))
	if name == "ref_type":
		lt = next((c for c in tree.children if isinstance(c, Token) and c.type == "LIFETIME"), None)
		mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
		return RefType(
			elem=_build_type(kids[0], src),
			mutable=mutable,
			lifetime=Lifetime(lt.value) if lt is not None else None,
		)
	if name == "ptr_type":
		mutable = any(isinstance(c, Token) and c.type == "MUT" for c in tree.children)
		return PtrType(elem=_build_type(kids[0], src), mutable=mutable)
	if name == "slice_type":
		return SliceType(elem=_build_type(kids[0], src))
	if name == "array_type":
		length = next(c.value for c in tree.children if isinstance(c, Token))
		return ArrayType(elem=_build_type(kids[0], src), length=length)
	if name == "unit_type":
		return TupleType(elems=())
	if name == "paren_type":
		return _build_type(kids[0], src)
	if name in ("single_tuple_type", "tuple_type"):
		return TupleType(elems=tuple(_build_type(k, src) for k in kids))
	if name in ("dyn_type", "impl_type"):
		keyword = "dyn" if name == "dyn_type" else "impl"
		return OpaqueType(tokens=(keyword, *_bounds_tokens(_build_bounds(kids[0], src))))
	if name == "fn_ptr_type":
		return OpaqueType(tokens=_fn_ptr_tokens(tree, src))
	if name == "never_type":
		return OpaqueType(tokens=("!",))
	raise AssertionError(f"unhandled type node {name}")


def _build_segment(tree: Tree, src: _Source) -> PathSegment:
	name_tok = tree.children[0]
	assert isinstance(name_tok, Token)
	args: List[GenericArg] = []
	args_node = _child(tree, "generic_args")
	if args_node is not None:
		for arg in args_node.children:
			if isinstance(arg, Token):
				args.append(Lifetime(arg.value))
			else:
				args.append(_build_type(arg, src))
	return PathSegment(name=name_tok.value, args=tuple(args))


def _bounds_tokens(bounds: Tuple[Bound, ...]) -> Tuple[str, ...]:
	out: List[str] = []
	for b in bounds:
		if out:
			out.append("+")
		if isinstance(b, Lifetime):
			out.append(b.name)
			continue
		if b.maybe:
			out.append("?")
		out.extend(b.path.render().split(" "))
	return tuple(out)


def _fn_ptr_tokens(tree: Tree, src: _Source) -> Tuple[str, ...]:
	out: List[str] = []
	if any(isinstance(c, Token) and c.type == "UNSAFE" for c in tree.children):
		out.append("unsafe")
	out.extend(["fn", "("])
	args = [_build_type(c, src) for c in tree.children if isinstance(c, Tree) and _is_type_node(c)]
	for i, t in enumerate(args):
		if i:
			out.append(",")
		out.extend(t.render().split(" "))
	out.append(")")
	ret = _child(tree, "fn_ret")
	if ret is not None:
		out.append("->")
		out.extend(_build_type(ret.children[0], src).render().split(" "))
	return tuple(out)


# ---- helpers ----


def _child(tree: Tree, name: str) -> Optional[Tree]:
	return next((c for c in tree.children if isinstance(c, Tree) and _name(c) == name), None)


def _first_token(tree: Tree, type_: str) -> Optional[str]:
	return next((c.value for c in tree.children if isinstance(c, Token) and c.type == type_), None)


def _text(tree: Tree, src: _Source) -> str:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return ""
	return src.text[meta.start_pos : meta.end_pos]


def _loc(tree: Tree, src: _Source) -> Located:
	meta = tree.meta
	return Located(
		line=getattr(meta, "line", 0),
		column=getattr(meta, "column", 0),
		end_line=getattr(meta, "end_line", None),
		end_column=getattr(meta, "end_column", None),
		file=src.file,
	)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["DeclParseError", "parse_generics", "parse_items", "parse_type"]
