# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Configuration: type map settings and logging setup."""

from .logging import configure_logging
from .typemap import TypeMapConfig, host_pointer_width

__all__ = ["TypeMapConfig", "configure_logging", "host_pointer_width"]
