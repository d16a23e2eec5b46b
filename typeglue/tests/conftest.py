# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import pytest

from typeglue.config.logging import configure_logging


@pytest.fixture(scope="session", autouse=True)
def _configure_logging_for_tests() -> None:
	"""Route structlog through stdlib logging so pytest's caplog sees debug events."""
	configure_logging(verbose=True)
