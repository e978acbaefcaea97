# ruff: noqa: S101
"""pytest-bdd assertions that validate recorded calls and verification."""

from __future__ import annotations

import typing as t

import pytest
from pytest_bdd import parsers, then

from cmdscope.comparators import match_args
from cmdscope.errors import UnmetExpectationError

if t.TYPE_CHECKING:  # pragma: no cover - typing only
    from cmdscope.controller import MockSession
    from cmdscope.unittests._table_helpers import BuildScript


@then("the verifiable mocks should have been invoked")
def check_verifiable_mocks(session: MockSession) -> None:
    """Verifiable mocks all serviced at least one call."""
    session.assert_verifiable_mocks_invoked()


@then(parsers.cfparse('verifying the verifiable mocks should fail listing "{cmd}"'))
def check_verifiable_mocks_fail(session: MockSession, cmd: str) -> None:
    """Verification fails and names *cmd* among the unmet mocks."""
    with pytest.raises(UnmetExpectationError) as excinfo:
        session.assert_verifiable_mocks_invoked()
    assert [reg.command for reg in excinfo.value.registrations] == [cmd]
    assert cmd in str(excinfo.value)


@then(
    parsers.cfparse(
        '"{cmd}" should have been called {count:d} times with version {version:g}'
    )
)
def check_call_count_for_version(
    session: MockSession, cmd: str, count: int, version: float
) -> None:
    """Exactly *count* calls to *cmd* carried ``version``."""
    session.assert_call_count(
        cmd, parameter_filter=match_args(version=version), times=count
    )


@then(parsers.cfparse('"{cmd}" should have been called {count:d} times'))
def check_call_count(session: MockSession, cmd: str, count: int) -> None:
    """Exactly *count* calls to *cmd* were recorded."""
    session.assert_call_count(cmd, times=count)


@then(parsers.cfparse('the result of "{cmd}" should be "{text}"'))
def check_result(results: dict[str, object], cmd: str, text: str) -> None:
    """The last call to *cmd* returned a value rendering as *text*."""
    assert str(results[cmd]) == text


@then("the real build should not have run")
def check_real_build_skipped(script: BuildScript) -> None:
    """The original Build command was never executed."""
    assert script.built == []
