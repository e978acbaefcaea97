"""Pytest plugin providing the ``cmdscope`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .commands import CommandTable
from .controller import MockSession

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("cmdscope")
    group.addoption(
        "--cmdscope-auto-verify",
        action="store_true",
        dest="cmdscope_auto_verify",
        default=None,
        help=(
            "Check verifiable mocks when the cmdscope fixture is torn down. "
            "Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-cmdscope-auto-verify",
        action="store_false",
        dest="cmdscope_auto_verify",
        default=None,
        help=(
            "Do not check verifiable mocks during cmdscope fixture teardown. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "cmdscope_auto_verify",
        "Check verifiable mocks when the cmdscope fixture is torn down.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "cmdscope(auto_verify: bool = True): override verification of "
            "verifiable mocks at fixture teardown for a single test."
        ),
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase's report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _auto_verify_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture should verify mocks during teardown."""
    # Priority order: marker > fixture param > CLI option > INI setting

    marker_value = _get_marker_auto_verify(request)
    if marker_value is not None:
        return marker_value

    param_value = _get_param_auto_verify(request)
    if param_value is not None:
        return param_value

    config = request.config
    cli_value = config.getoption("cmdscope_auto_verify")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("cmdscope_auto_verify"))


def _get_marker_auto_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return marker override for auto verification if present."""
    marker = request.node.get_closest_marker("cmdscope")
    if marker is None or "auto_verify" not in marker.kwargs:
        return None
    return bool(marker.kwargs["auto_verify"])


def _get_param_auto_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return fixture parameter override for auto verification if present."""
    param = getattr(request, "param", None)
    if param is None:
        return None
    if isinstance(param, dict):
        if "auto_verify" in param:
            return bool(param["auto_verify"])
        keys = list(param.keys())
        msg = (
            "cmdscope fixture param dict must contain 'auto_verify' key, "
            f"got keys: {keys}"
        )
        raise TypeError(msg)
    if isinstance(param, bool):
        return param
    msg = (
        "cmdscope fixture param must be a bool or dict with 'auto_verify' key, "
        f"got {type(param).__name__}"
    )
    raise TypeError(msg)


@pytest.fixture
def command_table() -> CommandTable:
    """Return the command table the ``cmdscope`` fixture attaches to.

    Override this fixture in a project's ``conftest.py`` to supply the
    application's own table.
    """
    return CommandTable()


@pytest.fixture
def cmdscope(
    request: pytest.FixtureRequest, command_table: CommandTable
) -> t.Generator[MockSession, None, None]:
    """Provide a :class:`MockSession` attached to ``command_table``."""
    auto_verify = _auto_verify_enabled(request)
    session = MockSession(command_table)
    session.attach()
    try:
        with session.context(request.node.nodeid):
            yield session
            if auto_verify and not _call_stage_failed(request.node):
                _verify_session(session)
    finally:
        _teardown_session(session)


def _verify_session(session: MockSession) -> None:
    """Check verifiable mocks, failing the test on unmet expectations."""
    try:
        session.assert_verifiable_mocks_invoked()
    except AssertionError as err:
        logger.exception("Error during cmdscope verification")
        pytest.fail(f"{type(err).__name__}: {err}")


def _teardown_session(session: MockSession) -> None:
    """Detach the session from its command table."""
    try:
        session.detach()
    except Exception:
        logger.exception("Error during cmdscope fixture cleanup")
        pytest.fail("cmdscope fixture cleanup failed")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
