"""Verification helpers for :class:`~cmdscope.controller.MockSession`."""

from __future__ import annotations

import typing as t
from textwrap import indent

from ._validators import validate_call_count
from .errors import CallCountMismatchError, UnmetExpectationError
from .interceptor import describe_callable

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .commands import ScopeHandle
    from .interceptor import MockRegistration
    from .recorder import InvocationRecord


def _describe_invocations(records: t.Sequence[InvocationRecord]) -> str:
    if not records:
        return "(none)"
    return "\n".join(
        f"#{entry.sequence} {entry.describe()} [{entry.scope}]" for entry in records
    )


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    lines: list[str] = []
    for index, entry in enumerate(entries, start=start):
        entry_lines = entry.splitlines() or [""]
        lines.append(f"{index}. {entry_lines[0]}")
        lines.extend(f"   {extra}" for extra in entry_lines[1:])
    return "\n".join(lines)


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _describe_count(expected: int, *, at_least: bool) -> str:
    noun = "call" if expected == 1 else "calls"
    if at_least:
        return f"at least {expected} {noun}"
    return f"exactly {expected} {noun}"


class VerifiableMockVerifier:
    """Check that every verifiable registration serviced at least one call.

    A registration counts as invoked when a retained record matched it, or
    when a call from an already finished inner context matched it.
    """

    def verify(
        self,
        registrations: t.Iterable[MockRegistration],
        records: t.Iterable[InvocationRecord],
    ) -> None:
        """Raise :class:`UnmetExpectationError` listing every unmet registration."""
        matched_ids = {
            id(entry.matched) for entry in records if entry.matched is not None
        }
        unmet = [
            reg
            for reg in registrations
            if reg.verifiable
            and id(reg) not in matched_ids
            and reg not in reg.context.satisfied
        ]
        if not unmet:
            return
        msg = _format_sections(
            "Verifiable mocks were not invoked.",
            [("Unmet mocks", _numbered([reg.describe() for reg in unmet]))],
        )
        raise UnmetExpectationError(msg, unmet)


class CallCountVerifier:
    """Compare the number of recorded calls against an expectation.

    ``times=None`` requires at least one call. An integer is compared exactly,
    or as a lower bound when ``exactly`` is false; ``times=0`` always means the
    command must not have been called.
    """

    def __init__(self, times: int | None = None, *, exactly: bool = True) -> None:
        if times is not None:
            validate_call_count(times)
        self.times = times
        self.exactly = exactly

    @property
    def expected(self) -> int:
        """Return the expected count (the lower bound in at-least mode)."""
        return 1 if self.times is None else self.times

    @property
    def at_least(self) -> bool:
        """Return ``True`` when the expected count is a lower bound."""
        if self.times is None:
            return True
        return not self.exactly and self.times != 0

    def satisfied_by(self, actual: int) -> bool:
        """Return ``True`` when *actual* meets the expectation."""
        if self.at_least:
            return actual >= self.expected
        return actual == self.expected

    def verify(
        self,
        command: str,
        calls: t.Sequence[InvocationRecord],
        *,
        scope: ScopeHandle | None = None,
        parameter_filter: t.Callable[..., t.Any] | None = None,
    ) -> None:
        """Raise :class:`CallCountMismatchError` when ``len(calls)`` is wrong."""
        actual = len(calls)
        if self.satisfied_by(actual):
            return
        expected_lines = [
            command,
            f"scope={scope if scope is not None else '<any>'}",
            f"filter={describe_callable(parameter_filter)}",
            f"expected {_describe_count(self.expected, at_least=self.at_least)}",
        ]
        title = (
            "Command was called when it should not have been."
            if self.expected == 0
            else "Call count mismatch."
        )
        msg = _format_sections(
            title,
            [
                ("Expected", "\n".join(expected_lines)),
                ("Observed calls", f"{actual} (expected {self.expected})"),
                ("Recorded invocations", _describe_invocations(calls)),
            ],
        )
        raise CallCountMismatchError(
            msg,
            expected=self.expected,
            actual=actual,
            at_least=self.at_least,
            calls=calls,
        )


__all__ = ["CallCountVerifier", "VerifiableMockVerifier"]
