from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from typeglue.core.generics import Bound, Generics
from typeglue.core.type_expr import Lifetime, PathType, TypeExpr


@dataclass(frozen=True)
class Located:
	line: int
	column: int
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	file: Optional[str] = None


@dataclass(frozen=True)
class Lit:
	"""Attribute literal. `kind` is one of "str", "int", "char", "ident"."""

	kind: str
	value: str
	raw: str


@dataclass
class MetaWord:
	path: str
	loc: Optional[Located] = None


@dataclass
class MetaNameValue:
	path: str
	value: Lit
	loc: Optional[Located] = None


@dataclass
class MetaList:
	path: str
	items: List[Union["Meta", Lit]] = field(default_factory=list)
	loc: Optional[Located] = None


Meta = Union[MetaWord, MetaNameValue, MetaList]


@dataclass
class Attribute:
	meta: Meta
	inner: bool = False
	loc: Optional[Located] = None

	@property
	def name(self) -> str:
		return self.meta.path

	def str_value(self) -> Optional[str]:
		"""Value of a `name = "..."` attribute; None for any other shape."""
		if isinstance(self.meta, MetaNameValue) and self.meta.value.kind == "str":
			return self.meta.value.value
		return None


class Item:
	"""Base for top-level and nested declarations."""

	attrs: List[Attribute]
	loc: Optional[Located]
	source: str


@dataclass
class ModItem(Item):
	name: str
	inner_attrs: List[Attribute] = field(default_factory=list)
	items: List[Item] = field(default_factory=list)
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


@dataclass
class TraitItem(Item):
	name: str
	generics: Generics = field(default_factory=Generics)
	supertraits: Tuple[Bound, ...] = ()
	body: str = ""
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


@dataclass
class SelfArg:
	"""Receiver parameter (`self`, `mut self`, `&'a mut self`, `self: Box<Self>`)."""

	by_ref: bool = False
	mutable: bool = False
	lifetime: Optional[Lifetime] = None
	ty: Optional[TypeExpr] = None
	loc: Optional[Located] = None


@dataclass
class TypedArg:
	pattern: str
	ty: TypeExpr
	loc: Optional[Located] = None


FnArg = Union[SelfArg, TypedArg]


@dataclass
class FnItem(Item):
	name: str
	generics: Generics = field(default_factory=Generics)
	params: List[FnArg] = field(default_factory=list)
	ret: Optional[TypeExpr] = None
	body: Optional[str] = None
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


@dataclass
class TypeAliasItem(Item):
	"""`type Name = Ty;` (also an associated type inside an impl)."""

	name: str
	generics: Generics = field(default_factory=Generics)
	ty: Optional[TypeExpr] = None
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


@dataclass
class ImplItem(Item):
	generics: Generics
	self_ty: TypeExpr
	trait_path: Optional[PathType] = None
	members: List[Item] = field(default_factory=list)
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False

	def trait_name(self) -> Optional[str]:
		"""Trait identifier with its generic arguments ignored (`CastFrom<T>` -> `CastFrom`)."""
		tp = self.trait_path
		if tp is None or tp.leading_colon or len(tp.segments) != 1:
			return None
		return tp.segments[0].name

	def assoc_type(self, name: str) -> Optional[TypeExpr]:
		for member in self.members:
			if isinstance(member, TypeAliasItem) and member.name == name:
				return member.ty
		return None


@dataclass
class MacroItem(Item):
	"""A macro definition (`macro_rules! name { ... }`) or item-position invocation."""

	path: str
	name: Optional[str] = None
	body: str = ""
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


@dataclass
class OtherItem(Item):
	"""struct/enum/use/const/static: kept only as source text."""

	kind: str
	name: Optional[str] = None
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = None
	source: str = ""
	is_pub: bool = False


def fn_arg_type(arg: FnArg) -> Optional[TypeExpr]:
	"""Declared type of a typed parameter; None for receivers."""
	if isinstance(arg, TypedArg):
		return arg.ty
	return None


__all__ = [
	"Attribute",
	"FnArg",
	"FnItem",
	"ImplItem",
	"Item",
	"Lit",
	"Located",
	"MacroItem",
	"Meta",
	"MetaList",
	"MetaNameValue",
	"MetaWord",
	"ModItem",
	"OtherItem",
	"SelfArg",
	"TraitItem",
	"TypeAliasItem",
	"TypedArg",
	"fn_arg_type",
]
