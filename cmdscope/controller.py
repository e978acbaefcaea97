"""MockSession controller and related helpers."""

from __future__ import annotations

import contextlib
import logging
import types  # noqa: TC003
import typing as t

from .commands import CommandTable, Module, ScopeHandle
from .errors import LifecycleError
from .interceptor import Interceptor, MockContext, MockRegistration
from .recorder import CallRecorder, InvocationRecord
from .verifiers import CallCountVerifier, VerifiableMockVerifier

logger = logging.getLogger(__name__)

ScopeLike = ScopeHandle | Module | str


class MockSession:
    """Central orchestrator wiring the interceptor, recorder and verifiers.

    A session attaches to one :class:`CommandTable`. Mocks are registered in
    the innermost active context; leaving a context reverts its mocks and
    discards the calls recorded while it was innermost.
    """

    def __init__(
        self,
        table: CommandTable,
        *,
        verify_on_exit: bool = False,
    ) -> None:
        """Create a new session for *table*.

        Parameters
        ----------
        table:
            The command table whose calls are intercepted.
        verify_on_exit:
            When ``True``, :meth:`__exit__` calls
            :meth:`assert_verifiable_mocks_invoked` if the block exited
            without an exception.
        """
        self.table = table
        self.recorder = CallRecorder()
        self.interceptor = Interceptor(table, self.recorder)
        self._verify_on_exit = verify_on_exit
        self._attached = False
        self._root: MockContext | None = None

    # ------------------------------------------------------------------
    # Attachment
    # ------------------------------------------------------------------
    @property
    def attached(self) -> bool:
        """Return ``True`` while calls on the table are intercepted."""
        return self._attached

    def attach(self) -> None:
        """Start intercepting calls made through the command table."""
        if self._attached:
            msg = "mock session is already attached"
            raise LifecycleError(msg)
        self.table.attach(self.interceptor)
        self._attached = True
        logger.debug("Mock session attached to %r", self.table)

    def detach(self) -> None:
        """Exit every active context and stop intercepting calls."""
        if not self._attached:
            return
        try:
            for context in reversed(self.interceptor.contexts):
                self.interceptor.pop(context)
        finally:
            self._root = None
            self.table.detach(self.interceptor)
            self._attached = False
            logger.debug("Mock session detached from %r", self.table)

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> MockSession:
        """Attach and open the session's root context."""
        self.attach()
        self._root = self.interceptor.push("session")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Optionally verify, then detach."""
        try:
            if self._verify_on_exit and exc_type is None and self._attached:
                self.assert_verifiable_mocks_invoked()
        finally:
            self.detach()

    @contextlib.contextmanager
    def context(self, name: str = "context") -> t.Iterator[MockContext]:
        """Open a nested context whose mocks and records end with the block."""
        if not self._attached:
            msg = "cannot open a mock context on a detached session"
            raise LifecycleError(msg)
        ctx = self.interceptor.push(name)
        try:
            yield ctx
        finally:
            # detach() may already have closed it
            if ctx.active:
                self.interceptor.pop(ctx)

    @property
    def current_context(self) -> MockContext:
        """Return the innermost active context."""
        return self.interceptor.current

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def mock(
        self,
        command: str,
        body: object = None,
        *,
        scope: ScopeLike | None = None,
        parameter_filter: t.Callable[..., t.Any] | None = None,
        verifiable: bool = False,
    ) -> MockRegistration:
        """Substitute *body* for calls to *command* made from *scope*.

        *scope* defaults to the table's current scope, so a mock registered
        inside :meth:`in_module_scope` applies to that module's internal
        calls. *body* may be a callable, called with the bound arguments it
        names, or any other value to return as-is.
        """
        handle = self._resolve_scope(scope)
        return self.interceptor.register(
            command,
            handle,
            body,
            parameter_filter,
            verifiable=verifiable,
        )

    def unregister(self, scope: ScopeLike | None = None) -> int:
        """Revert every mock registered for *scope* (default: current scope)."""
        return self.interceptor.unregister(self._resolve_scope(scope))

    def calls(
        self,
        command: str,
        *,
        scope: ScopeLike | None = None,
        parameter_filter: t.Callable[..., t.Any] | None = None,
    ) -> t.Iterator[InvocationRecord]:
        """Yield recorded calls to *command*; ``scope=None`` means any scope."""
        handle = None if scope is None else self._resolve_scope(scope)
        return self.recorder.query(command, handle, parameter_filter)

    def assert_verifiable_mocks_invoked(self, scope: ScopeLike | None = None) -> None:
        """Fail unless every active verifiable mock serviced a call.

        Raises
        ------
        UnmetExpectationError
            Listing every verifiable mock that never matched a call.
        """
        handle = None if scope is None else self._resolve_scope(scope)
        registrations = self.interceptor.registrations(scope=handle)
        VerifiableMockVerifier().verify(registrations, self.recorder.records)

    def assert_call_count(  # noqa: PLR0913 - mirrors the documented assertion
        self,
        command: str,
        *,
        scope: ScopeLike | None = None,
        parameter_filter: t.Callable[..., t.Any] | None = None,
        times: int | None = None,
        exactly: bool = True,
    ) -> None:
        """Fail unless *command* was called the expected number of times.

        Raises
        ------
        CallCountMismatchError
            When the number of matching records differs from *times*.
        """
        verifier = CallCountVerifier(times, exactly=exactly)
        handle = None if scope is None else self._resolve_scope(scope)
        matching = list(self.recorder.query(command, handle, parameter_filter))
        verifier.verify(
            command, matching, scope=handle, parameter_filter=parameter_filter
        )

    def in_module_scope(
        self, module: Module | str
    ) -> contextlib.AbstractContextManager[Module]:
        """Run the enclosed block as if it executed inside *module*."""
        return self.table.in_module_scope(module)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve_scope(self, scope: ScopeLike | None) -> ScopeHandle:
        if scope is None:
            return self.table.current_scope
        if isinstance(scope, ScopeHandle):
            return scope
        if isinstance(scope, Module):
            return scope.scope
        return self.table.get_module(scope).scope


__all__ = ["MockSession", "ScopeLike"]
