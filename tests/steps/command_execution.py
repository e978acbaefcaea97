"""pytest-bdd steps that call commands through the table."""

from __future__ import annotations

import typing as t

import pytest
from pytest_bdd import given, parsers, when

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from cmdscope.unittests._table_helpers import BuildScript


@pytest.fixture
def results() -> dict[str, object]:
    """Most recent result of each command called by a step."""
    return {}


@given(parsers.cfparse('I call "{cmd}"'))
@when(parsers.cfparse('I call "{cmd}"'))
def call_command(script: BuildScript, results: dict[str, object], cmd: str) -> None:
    """Call *cmd* from the script scope."""
    results[cmd] = script.table.call(cmd)


@when(parsers.cfparse('I call "{cmd}" with version {version:g}'))
def call_command_with_version(
    script: BuildScript, results: dict[str, object], cmd: str, version: float
) -> None:
    """Call *cmd* passing ``version`` by keyword."""
    results[cmd] = script.table.call(cmd, version=version)
