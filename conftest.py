"""Global test configuration and shared fixtures."""

from __future__ import annotations

import logging
import typing as t

import pytest

pytest_plugins = ("cmdscope.pytest_plugin", "pytester")


@pytest.fixture(autouse=True)
def debug_cmdscope_logging(
    caplog: pytest.LogCaptureFixture,
) -> t.Generator[None, None, None]:
    """Capture cmdscope debug records so failures show dispatch decisions."""
    with caplog.at_level(logging.DEBUG, logger="cmdscope"):
        yield
