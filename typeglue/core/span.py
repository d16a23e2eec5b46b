# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span wraps whatever location object the declaration front-end provides via
the `raw` field while also carrying optional file/line/column info.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span it is returned unchanged (with `file` filled in
		when it was missing); otherwise the front-end object is stored in `raw`.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return cls(
					file=file,
					line=loc.line,
					column=loc.column,
					end_line=loc.end_line,
					end_column=loc.end_column,
					raw=loc.raw,
				)
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def is_known(self) -> bool:
		return self.line is not None

	def short(self) -> str:
		"""Render as `file:line:col` (best effort)."""
		where = self.file or "<typemap>"
		if self.line is None:
			return where
		if self.column is None:
			return f"{where}:{self.line}"
		return f"{where}:{self.line}:{self.column}"


__all__ = ["Span"]
