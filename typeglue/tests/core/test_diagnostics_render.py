# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typeglue.core.diagnostics import TypeMapError
from typeglue.core.span import Span
from typeglue.parser.ast import Located


def test_error_renders_primary_and_note():
	err = TypeMapError.at("Should only one foreign_types_map per types map", Located(line=5, column=1), file="map.rs")
	err.note("Previously defined here", Located(line=1, column=1))
	assert isinstance(err, ValueError)
	assert str(err) == (
		"map.rs:5:1: error: Should only one foreign_types_map per types map\n"
		"map.rs:1:1: note: Previously defined here"
	)


def test_unknown_location():
	err = TypeMapError.at("Invalid attribute", None)
	assert not err.span.is_known()
	assert str(err) == "<typemap>: error: Invalid attribute"


def test_span_from_span_fills_file():
	span = Span(line=3, column=7)
	assert Span.from_loc(span, file="x.rs").short() == "x.rs:3:7"
	assert Span.from_loc(span) is span
