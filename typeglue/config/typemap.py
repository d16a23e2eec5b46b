# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type map construction settings and the fixed declaration vocabulary.

`TypeMapConfig.traits_usage_code` is the base table of conversion code
templates keyed by conversion interface name. Declarations seen while building
a registry extend a private copy of it; the config itself is never mutated.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

# Conversion interfaces.
CAST_INTO_TRAIT = "CastInto"
CAST_FROM_TRAIT = "CastFrom"
CAST_DEREF_TRAIT = "CastDeref"
CAST_DEREF_MUT_TRAIT = "CastDerefMut"
TARGET_ASSOC_TYPE = "Target"

# Module holding foreign/host type name pairs.
FOREIGN_TYPES_MAP_MOD = "foreign_types_map"
FOREIGN_NAME_ATTR = "foreign_name"
HOST_NAME_ATTR = "host_name"

# Attributes on conversion declarations.
TO_HINT_ATTR = "to_hint"
FROM_HINT_ATTR = "from_hint"
CODE_TEMPLATE_ATTR = "code_template"
GENERIC_ARG_ATTR = "generic_arg"
FROM_TYPE_ATTR = "from_type"
TO_TYPE_ATTR = "to_type"

KNOWN_ATTRS = (
	TO_HINT_ATTR,
	FROM_HINT_ATTR,
	CODE_TEMPLATE_ATTR,
	GENERIC_ARG_ATTR,
	FROM_TYPE_ATTR,
	TO_TYPE_ATTR,
)

CFG_ATTR = "cfg"
CFG_POINTER_WIDTH_KEY = "target_pointer_width"


def host_pointer_width() -> int:
	"""Pointer width of the running interpreter, in bits."""
	return struct.calcsize("P") * 8


@dataclass(frozen=True)
class TypeMapConfig:
	target_pointer_width: int = 64
	traits_usage_code: Mapping[str, str] = field(default_factory=dict)
	# Label used in diagnostics (usually the declaration file name).
	name: Optional[str] = None

	def __post_init__(self) -> None:
		if self.target_pointer_width not in (16, 32, 64):
			raise ValueError(f"unsupported target pointer width: {self.target_pointer_width}")
		object.__setattr__(self, "traits_usage_code", MappingProxyType(dict(self.traits_usage_code)))

	@classmethod
	def for_host(cls, **kwargs) -> "TypeMapConfig":
		return cls(target_pointer_width=host_pointer_width(), **kwargs)

	def with_code(self, trait_name: str, code_template: str) -> "TypeMapConfig":
		"""Copy with one more base code template registered."""
		table = dict(self.traits_usage_code)
		table[trait_name] = code_template
		return replace(self, traits_usage_code=table)


__all__ = [
	"CAST_DEREF_MUT_TRAIT",
	"CAST_DEREF_TRAIT",
	"CAST_FROM_TRAIT",
	"CAST_INTO_TRAIT",
	"CFG_ATTR",
	"CFG_POINTER_WIDTH_KEY",
	"CODE_TEMPLATE_ATTR",
	"FOREIGN_NAME_ATTR",
	"FOREIGN_TYPES_MAP_MOD",
	"FROM_HINT_ATTR",
	"FROM_TYPE_ATTR",
	"GENERIC_ARG_ATTR",
	"HOST_NAME_ATTR",
	"KNOWN_ATTRS",
	"TARGET_ASSOC_TYPE",
	"TO_HINT_ATTR",
	"TO_TYPE_ATTR",
	"TypeMapConfig",
	"host_pointer_width",
]
