# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type expression shapes used by the type map.

Why this exists
---------------
The declaration front-end produces these nodes for every type it sees (impl
targets, trait arguments, associated types, attribute values), and the unifier
and substitutor operate on them directly. They are deliberately independent of
the parser tree so conversion rules can also be built programmatically.

Shapes:
- `PathType`   nominal path, each segment optionally carrying generic args
               (`Vec<T>`, `std::os::raw::c_void`, `MutexGuard<'a, T>`)
- `RefType`    `&T`, `&'a mut T`
- `SliceType`  `[T]`
- `TupleType`  `()`, `(T,)`, `(A, B)`
- `PtrType`, `ArrayType`, `OpaqueType`: "other" shapes. The unifier compares
  them by structural equality only; the substitutor still descends into
  pointer/array element types.

All nodes are frozen and hash/compare structurally, lifetimes included. Source
locations are never part of a type expression.

Rendering follows the spaced token form (`Foo < T >`, `& 'a str`, `( )`) so
rendered names line up with the keys the rest of the generator uses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Union


class TypeExpr:
	"""Base of all type expression nodes."""

	__slots__ = ()

	def render(self) -> str:
		raise NotImplementedError

	def map_children(self, fn: Callable[["TypeExpr"], "TypeExpr"]) -> "TypeExpr":
		"""Return a copy with `fn` applied to every direct child type."""
		return self

	def children(self) -> Tuple["TypeExpr", ...]:
		return ()

	def __str__(self) -> str:
		return self.render()


@dataclass(frozen=True)
class Lifetime:
	"""A lifetime/region marker such as `'a` (name includes the quote)."""

	name: str

	def render(self) -> str:
		return self.name

	def __str__(self) -> str:
		return self.name


GenericArg = Union[TypeExpr, Lifetime]


def _render_arg(arg: GenericArg) -> str:
	return arg.render()


@dataclass(frozen=True)
class PathSegment:
	name: str
	args: Tuple[GenericArg, ...] = ()

	def type_args(self) -> Tuple[TypeExpr, ...]:
		return tuple(a for a in self.args if isinstance(a, TypeExpr))

	def render(self) -> str:
		if not self.args:
			return self.name
		return f"{self.name} < {' , '.join(_render_arg(a) for a in self.args)} >"


@dataclass(frozen=True)
class PathType(TypeExpr):
	segments: Tuple[PathSegment, ...]
	leading_colon: bool = False

	@staticmethod
	def named(name: str, args: List[GenericArg] | Tuple[GenericArg, ...] | None = None) -> "PathType":
		"""
		Construct a path from a `::`-separated name; `args` attach to the last
		segment (`PathType.named("Vec", [PathType.named("u8")])` is `Vec<u8>`).
		"""
		parts = [p for p in name.split("::")]
		leading = False
		if parts and parts[0] == "":
			leading = True
			parts = parts[1:]
		segs = [PathSegment(name=p.strip()) for p in parts]
		if args:
			segs[-1] = PathSegment(name=segs[-1].name, args=tuple(args))
		return PathType(segments=tuple(segs), leading_colon=leading)

	def single_ident(self) -> Optional[str]:
		"""Return the identifier if this is a bare one-segment path without args."""
		if self.leading_colon or len(self.segments) != 1:
			return None
		seg = self.segments[0]
		if seg.args:
			return None
		return seg.name

	@property
	def last(self) -> PathSegment:
		return self.segments[-1]

	def render(self) -> str:
		body = " :: ".join(s.render() for s in self.segments)
		return f":: {body}" if self.leading_colon else body

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		if not any(s.args for s in self.segments):
			return self
		segs = tuple(
			PathSegment(
				name=s.name,
				args=tuple(fn(a) if isinstance(a, TypeExpr) else a for a in s.args),
			)
			for s in self.segments
		)
		return PathType(segments=segs, leading_colon=self.leading_colon)

	def children(self) -> Tuple[TypeExpr, ...]:
		return tuple(a for s in self.segments for a in s.type_args())


@dataclass(frozen=True)
class RefType(TypeExpr):
	elem: TypeExpr
	mutable: bool = False
	lifetime: Optional[Lifetime] = None

	def render(self) -> str:
		parts = ["&"]
		if self.lifetime is not None:
			parts.append(self.lifetime.render())
		if self.mutable:
			parts.append("mut")
		parts.append(self.elem.render())
		return " ".join(parts)

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		return RefType(elem=fn(self.elem), mutable=self.mutable, lifetime=self.lifetime)

	def children(self) -> Tuple[TypeExpr, ...]:
		return (self.elem,)


@dataclass(frozen=True)
class SliceType(TypeExpr):
	elem: TypeExpr

	def render(self) -> str:
		return f"[ {self.elem.render()} ]"

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		return SliceType(elem=fn(self.elem))

	def children(self) -> Tuple[TypeExpr, ...]:
		return (self.elem,)


@dataclass(frozen=True)
class TupleType(TypeExpr):
	elems: Tuple[TypeExpr, ...] = ()

	def render(self) -> str:
		if not self.elems:
			return "( )"
		if len(self.elems) == 1:
			return f"( {self.elems[0].render()} , )"
		return f"( {' , '.join(e.render() for e in self.elems)} )"

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		return TupleType(elems=tuple(fn(e) for e in self.elems))

	def children(self) -> Tuple[TypeExpr, ...]:
		return self.elems


@dataclass(frozen=True)
class PtrType(TypeExpr):
	elem: TypeExpr
	mutable: bool = False

	def render(self) -> str:
		return f"* {'mut' if self.mutable else 'const'} {self.elem.render()}"

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		return PtrType(elem=fn(self.elem), mutable=self.mutable)

	def children(self) -> Tuple[TypeExpr, ...]:
		return (self.elem,)


@dataclass(frozen=True)
class ArrayType(TypeExpr):
	elem: TypeExpr
	length: str

	def render(self) -> str:
		return f"[ {self.elem.render()} ; {self.length} ]"

	def map_children(self, fn: Callable[[TypeExpr], TypeExpr]) -> TypeExpr:
		return ArrayType(elem=fn(self.elem), length=self.length)

	def children(self) -> Tuple[TypeExpr, ...]:
		return (self.elem,)


@dataclass(frozen=True)
class OpaqueType(TypeExpr):
	"""
	Anything the type map does not decompose (`dyn Trait`, `impl Trait`, ...).

	`tokens` is the token sequence as written; equality is token equality.
	"""

	tokens: Tuple[str, ...]

	def render(self) -> str:
		return " ".join(self.tokens)


def unit() -> TupleType:
	return TupleType(elems=())


def walk(ty: TypeExpr) -> Iterator[TypeExpr]:
	"""Pre-order traversal over `ty` and all nested type expressions."""
	yield ty
	for child in ty.children():
		yield from walk(child)


def strip_lifetimes(ty: TypeExpr) -> TypeExpr:
	"""
	Erase every lifetime marker.

	References lose their lifetime; lifetime arguments are dropped from generic
	argument lists entirely (`Foo<'a, T>` becomes `Foo<T>`).
	"""
	if isinstance(ty, RefType):
		return RefType(elem=strip_lifetimes(ty.elem), mutable=ty.mutable, lifetime=None)
	if isinstance(ty, PathType):
		segs = tuple(
			PathSegment(
				name=s.name,
				args=tuple(strip_lifetimes(a) for a in s.args if isinstance(a, TypeExpr)),
			)
			for s in ty.segments
		)
		return PathType(segments=segs, leading_colon=ty.leading_colon)
	if isinstance(ty, OpaqueType):
		out: List[str] = []
		for tok in ty.tokens:
			if tok.startswith("'"):
				if out and out[-1] == "+":
					out.pop()
				continue
			out.append(tok)
		return OpaqueType(tokens=tuple(out))
	return ty.map_children(strip_lifetimes)


def list_lifetimes(ty: TypeExpr) -> List[str]:
	"""List lifetime markers in source order (`Rc<RefCell<Foo<'a>>>` -> ["'a"])."""
	out: List[str] = []

	def visit(t: TypeExpr) -> None:
		if isinstance(t, RefType):
			if t.lifetime is not None:
				out.append(t.lifetime.name)
			visit(t.elem)
			return
		if isinstance(t, PathType):
			for seg in t.segments:
				for arg in seg.args:
					if isinstance(arg, Lifetime):
						out.append(arg.name)
					else:
						visit(arg)
			return
		if isinstance(t, OpaqueType):
			out.extend(tok for tok in t.tokens if tok.startswith("'"))
			return
		for child in t.children():
			visit(child)

	visit(ty)
	return out


__all__ = [
	"ArrayType",
	"GenericArg",
	"Lifetime",
	"OpaqueType",
	"PathSegment",
	"PathType",
	"PtrType",
	"RefType",
	"SliceType",
	"TupleType",
	"TypeExpr",
	"list_lifetimes",
	"strip_lifetimes",
	"unit",
	"walk",
]
