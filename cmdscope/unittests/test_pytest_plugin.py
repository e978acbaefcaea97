"""Unit tests for the pytest plugin."""

from __future__ import annotations

import dataclasses as dc
import textwrap

import pytest

from cmdscope.commands import CommandTable
from cmdscope.controller import MockSession
from cmdscope.unittests._table_helpers import make_build_script

_CONFTEST = textwrap.dedent(
    """
    import pytest

    from cmdscope.unittests._table_helpers import make_build_script

    pytest_plugins = ("cmdscope.pytest_plugin",)


    @pytest.fixture
    def command_table():
        return make_build_script().table
    """
)

_UNMET_TEST = "cmdscope.mock('Build', verifiable=True)"


@dc.dataclass(slots=True, frozen=True)
class AutoVerifyTestCase:
    """Test case data for auto-verify configuration scenarios."""

    ini_setting: str | None
    cli_args: tuple[str, ...]
    test_decorator: str
    should_fail: bool


@pytest.fixture
def command_table() -> CommandTable:
    """Supply the build script table to the ``cmdscope`` fixture."""
    return make_build_script().table


def test_fixture_yields_attached_session(
    cmdscope: MockSession, command_table: CommandTable
) -> None:
    """The fixture attaches to ``command_table`` inside a per-test context."""
    assert cmdscope.attached
    assert command_table.dispatcher is cmdscope.interceptor
    assert cmdscope.current_context.name.endswith(
        "test_fixture_yields_attached_session"
    )

    cmdscope.mock("Get-Version", 4.2, verifiable=True)
    assert command_table.call("Get-Version") == 4.2


@pytest.mark.parametrize(
    "case",
    [
        AutoVerifyTestCase(None, (), "", should_fail=True),
        AutoVerifyTestCase("false", (), "", should_fail=False),
        AutoVerifyTestCase("false", ("--cmdscope-auto-verify",), "", should_fail=True),
        AutoVerifyTestCase(None, ("--no-cmdscope-auto-verify",), "", should_fail=False),
        AutoVerifyTestCase(
            None,
            (),
            "@pytest.mark.cmdscope(auto_verify=False)",
            should_fail=False,
        ),
        AutoVerifyTestCase(
            "false",
            ("--no-cmdscope-auto-verify",),
            "@pytest.mark.cmdscope(auto_verify=True)",
            should_fail=True,
        ),
    ],
    ids=[
        "default",
        "ini-off",
        "cli-overrides-ini",
        "cli-off",
        "marker-off",
        "marker-overrides-all",
    ],
)
def test_auto_verify_configuration(
    pytester: pytest.Pytester, case: AutoVerifyTestCase
) -> None:
    """Auto verification follows marker > CLI > ini precedence."""
    pytester.makeconftest(_CONFTEST)
    if case.ini_setting is not None:
        pytester.makeini(f"[pytest]\ncmdscope_auto_verify = {case.ini_setting}\n")
    pytester.makepyfile(
        textwrap.dedent(
            f"""
            import pytest

            {case.test_decorator}
            def test_unmet(cmdscope):
                {_UNMET_TEST}
            """
        )
    )

    result = pytester.runpytest(*case.cli_args)

    if case.should_fail:
        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(["*UnmetExpectationError*"])
    else:
        result.assert_outcomes(passed=1)


def test_auto_verify_skipped_when_test_body_failed(pytester: pytest.Pytester) -> None:
    """A failing test body is not reported a second time by verification."""
    pytester.makeconftest(_CONFTEST)
    pytester.makepyfile(
        f"""
        def test_fails(cmdscope):
            {_UNMET_TEST}
            assert False
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(failed=1)


@pytest.mark.parametrize(
    ("param", "should_fail"),
    [("True", True), ("{'auto_verify': False}", False)],
    ids=["bool-param", "dict-param"],
)
def test_auto_verify_fixture_param(
    pytester: pytest.Pytester,
    param: str,
    should_fail: bool,  # noqa: FBT001
) -> None:
    """Indirect fixture parameters override the ini default."""
    pytester.makeconftest(_CONFTEST)
    pytester.makeini("[pytest]\ncmdscope_auto_verify = false\n")
    pytester.makepyfile(
        f"""
        import pytest

        @pytest.mark.parametrize("cmdscope", [{param}], indirect=True)
        def test_param(cmdscope):
            {_UNMET_TEST}
        """
    )

    result = pytester.runpytest()

    if should_fail:
        result.assert_outcomes(passed=1, errors=1)
    else:
        result.assert_outcomes(passed=1)


def test_invalid_fixture_param(pytester: pytest.Pytester) -> None:
    """Unsupported fixture params raise TypeError during setup."""
    pytester.makeconftest(_CONFTEST)
    pytester.makepyfile(
        """
        import pytest

        @pytest.mark.parametrize("cmdscope", [{"other": 1}], indirect=True)
        def test_param(cmdscope):
            pass
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(errors=1)
    result.stdout.fnmatch_lines(["*must contain 'auto_verify' key*"])


def test_session_detached_after_each_test(pytester: pytest.Pytester) -> None:
    """Mocks never leak between tests sharing a module-level table."""
    pytester.makeconftest(
        textwrap.dedent(
            """
            import pytest

            from cmdscope.unittests._table_helpers import make_build_script

            pytest_plugins = ("cmdscope.pytest_plugin",)

            SCRIPT = make_build_script()


            @pytest.fixture
            def command_table():
                return SCRIPT.table
            """
        )
    )
    pytester.makepyfile(
        """
        from conftest import SCRIPT

        def test_first(cmdscope):
            cmdscope.mock("Get-Version", 9.9)
            assert SCRIPT.table.call("Get-Version") == 9.9

        def test_second(cmdscope):
            assert SCRIPT.table.call("Get-Version") == 1.0
            cmdscope.assert_call_count("Get-Version", times=1)

        def test_third():
            assert SCRIPT.table.dispatcher is None
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=3)
