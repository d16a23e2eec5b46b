"""Declaration front-end: source text -> items with decoded signatures."""

from .ast import (
	Attribute,
	FnItem,
	ImplItem,
	Item,
	Located,
	MacroItem,
	ModItem,
	OtherItem,
	SelfArg,
	TraitItem,
	TypeAliasItem,
	TypedArg,
	fn_arg_type,
)
from .parser import DeclParseError, parse_generics, parse_items, parse_type

__all__ = [
	"Attribute",
	"DeclParseError",
	"FnItem",
	"ImplItem",
	"Item",
	"Located",
	"MacroItem",
	"ModItem",
	"OtherItem",
	"SelfArg",
	"TraitItem",
	"TypeAliasItem",
	"TypedArg",
	"fn_arg_type",
	"parse_generics",
	"parse_items",
	"parse_type",
]
