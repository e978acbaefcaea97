"""Scoped command mocking built around a register-call-verify lifecycle.

Commands are plain callables registered on a :class:`CommandTable`, either in
the test-script scope or inside a :class:`Module`. A :class:`MockSession`
intercepts calls made through the table, substitutes mock bodies per scope,
records every call and verifies the recorded history.
"""

from __future__ import annotations

from .arguments import CallArguments
from .commands import SCRIPT_SCOPE, CommandTable, Module, ScopeHandle, ScopeKind
from .comparators import (
    Any,
    ArgumentMatcher,
    Contains,
    IsA,
    Predicate,
    Regex,
    StartsWith,
    match_args,
)
from .controller import MockSession
from .errors import (
    CallCountMismatchError,
    CmdScopeError,
    LifecycleError,
    UnknownCommandError,
    UnmetExpectationError,
    VerificationError,
)
from .interceptor import Interceptor, MockContext, MockRegistration, Returns
from .recorder import CallRecorder, InvocationRecord

__all__ = [
    "SCRIPT_SCOPE",
    "Any",
    "ArgumentMatcher",
    "CallArguments",
    "CallCountMismatchError",
    "CallRecorder",
    "CmdScopeError",
    "CommandTable",
    "Contains",
    "Interceptor",
    "InvocationRecord",
    "IsA",
    "LifecycleError",
    "MockContext",
    "MockRegistration",
    "MockSession",
    "Module",
    "Predicate",
    "Regex",
    "Returns",
    "ScopeHandle",
    "ScopeKind",
    "StartsWith",
    "UnknownCommandError",
    "UnmetExpectationError",
    "VerificationError",
    "match_args",
]
