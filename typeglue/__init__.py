# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
typeglue: type-conversion core of an FFI binding generator.

The public entry points live in `typeglue.typemap` (registry construction and
generic conversion rules) and `typeglue.parser` (declaration front-end).
"""

__version__ = "0.3.0"
