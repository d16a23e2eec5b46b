# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
structlog setup for applications and the test suite.

Library modules only call `structlog.get_logger(__name__)`. Events go through
the stdlib `logging` tree so a host application keeps control of handlers;
`configure_logging` installs one stderr handler for the `typeglue` logger and
replaces it on repeated calls.
"""

from __future__ import annotations

import logging
import sys
from typing import List

import structlog

PACKAGE_LOGGER = "typeglue"

# Third-party loggers that stay at WARNING even in verbose mode.
_QUIET_LOGGERS = ("lark",)


class _TypeglueHandler(logging.StreamHandler):
	pass


def _pre_chain() -> List[structlog.types.Processor]:
	return [
		structlog.contextvars.merge_contextvars,
		structlog.stdlib.add_log_level,
		structlog.stdlib.add_logger_name,
		structlog.processors.TimeStamper(fmt="iso"),
		structlog.processors.StackInfoRenderer(),
	]


def _renderer(log_json: bool) -> structlog.types.Processor:
	if log_json:
		return structlog.processors.JSONRenderer(sort_keys=True)
	return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
	"""Route typeglue events to stderr; DEBUG when `verbose`, else WARNING."""
	pre_chain = _pre_chain()
	structlog.configure(
		processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
		logger_factory=structlog.stdlib.LoggerFactory(),
		wrapper_class=structlog.stdlib.BoundLogger,
		cache_logger_on_first_use=False,
	)

	handler = _TypeglueHandler(sys.stderr)
	handler.setFormatter(
		structlog.stdlib.ProcessorFormatter(
			foreign_pre_chain=pre_chain,
			processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(log_json)],
		)
	)

	pkg_logger = logging.getLogger(PACKAGE_LOGGER)
	for old in [h for h in pkg_logger.handlers if isinstance(h, _TypeglueHandler)]:
		pkg_logger.removeHandler(old)
	pkg_logger.addHandler(handler)
	pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

	for name in _QUIET_LOGGERS:
		logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
