"""Exception hierarchy for cmdscope."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .interceptor import MockRegistration
    from .recorder import InvocationRecord


class CmdScopeError(Exception):
    """Base class for all cmdscope errors."""


class UnknownCommandError(CmdScopeError, LookupError):
    """Raised when a command name does not resolve from the requested scope."""


class LifecycleError(CmdScopeError):
    """Raised when a session or context is used out of order."""


class VerificationError(CmdScopeError, AssertionError):
    """Base class for failed mock assertions."""


class UnmetExpectationError(VerificationError):
    """Raised when verifiable mocks were never matched by a call."""

    def __init__(
        self, message: str, registrations: t.Sequence[MockRegistration]
    ) -> None:
        super().__init__(message)
        self.registrations = tuple(registrations)


class CallCountMismatchError(VerificationError):
    """Raised when the recorded call count differs from the expected count."""

    def __init__(
        self,
        message: str,
        *,
        expected: int,
        actual: int,
        at_least: bool = False,
        calls: t.Sequence[InvocationRecord] = (),
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.at_least = at_least
        self.calls = tuple(calls)


__all__ = [
    "CallCountMismatchError",
    "CmdScopeError",
    "LifecycleError",
    "UnknownCommandError",
    "UnmetExpectationError",
    "VerificationError",
]
