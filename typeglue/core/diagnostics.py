"""
Common diagnostic structure for type map construction.

A diagnostic is a message plus a primary span; "duplicate" style problems also
carry a secondary note pointing at the earlier definition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .span import Span


@dataclass(frozen=True)
class DiagnosticNote:
	"""Secondary location attached to a diagnostic."""

	message: str
	span: Span = field(default_factory=Span)


@dataclass
class Diagnostic:
	"""Represents a type map diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "parse" for front-end failures, "typemap" for registry
	# construction.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[DiagnosticNote] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def note(self, message: str, loc: object | None) -> "Diagnostic":
		"""Attach a secondary location (e.g. "previously defined here")."""
		self.notes.append(DiagnosticNote(message=message, span=Span.from_loc(loc, file=self.span.file)))
		return self

	def render(self) -> str:
		lines = [f"{self.span.short()}: {self.severity}: {self.message}"]
		for n in self.notes:
			lines.append(f"{n.span.short()}: note: {n.message}")
		return "\n".join(lines)


class TypeMapError(ValueError):
	"""
	User-facing failure of type map construction.

	Always carries exactly one pinned diagnostic; the builder never produces a
	partially filled registry once this is raised.
	"""

	def __init__(self, diagnostic: Diagnostic) -> None:
		super().__init__(diagnostic.message)
		self.diagnostic = diagnostic

	@classmethod
	def at(cls, message: str, loc: object | None, *, file: Optional[str] = None, code: str | None = None) -> "TypeMapError":
		return cls(Diagnostic(message=message, code=code, phase="typemap", span=Span.from_loc(loc, file=file)))

	@property
	def span(self) -> Span:
		return self.diagnostic.span

	@property
	def notes(self) -> List[DiagnosticNote]:
		return self.diagnostic.notes

	def note(self, message: str, loc: object | None) -> "TypeMapError":
		self.diagnostic.note(message, loc)
		return self

	def __str__(self) -> str:
		return self.diagnostic.render()


__all__ = ["Diagnostic", "DiagnosticNote", "TypeMapError"]
