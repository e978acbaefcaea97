"""Scoped interception of command dispatch."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as t

from ._validators import validate_command_name
from .arguments import CallArguments, bind_arguments, call_with_arguments
from .errors import LifecycleError, UnknownCommandError

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .commands import CommandFunc, CommandTable, ScopeHandle
    from .recorder import CallRecorder

logger = logging.getLogger(__name__)


class Returns:
    """Mock body returning a fixed value."""

    def __init__(self, value: object) -> None:
        self.value = value

    def __call__(self) -> object:
        """Return the configured value."""
        return self.value

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Returns({self.value!r})"


def describe_callable(func: t.Callable[..., t.Any] | None) -> str:
    """Return a short label for a body or filter."""
    if func is None:
        return "<any>"
    if isinstance(func, type) or not hasattr(func, "__qualname__"):
        return repr(func)
    return func.__qualname__


@dc.dataclass(eq=False, slots=True)
class MockContext:
    """Lifetime boundary owning the registrations made while it is innermost."""

    name: str
    depth: int
    registrations: list[MockRegistration] = dc.field(default_factory=list)
    active: bool = True
    # registrations matched by calls whose records were discarded with an
    # inner context
    satisfied: set[MockRegistration] = dc.field(default_factory=set)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"MockContext({self.name!r}, depth={self.depth}, "
            f"registrations={len(self.registrations)}, active={self.active})"
        )


@dc.dataclass(frozen=True, slots=True, eq=False)
class MockRegistration:
    """A substitute body installed for a command within one scope."""

    command: str
    scope: ScopeHandle
    body: t.Callable[..., t.Any]
    parameter_filter: t.Callable[..., t.Any] | None
    verifiable: bool
    sequence: int
    context: MockContext

    def matches(self, arguments: CallArguments) -> bool:
        """Return ``True`` when this registration should service the call."""
        if self.parameter_filter is None:
            return True
        return bool(call_with_arguments(self.parameter_filter, arguments))

    def invoke(self, arguments: CallArguments) -> t.Any:  # noqa: ANN401 - body result
        """Run the mock body with the bound call arguments."""
        return call_with_arguments(self.body, arguments)

    def describe(self) -> str:
        """Return a readable label for messages."""
        label = f"{self.command} in {self.scope}"
        if self.parameter_filter is not None:
            label += f" where {describe_callable(self.parameter_filter)}"
        return label

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"MockRegistration(#{self.sequence} {self.describe()}, "
            f"verifiable={self.verifiable})"
        )


class Interceptor:
    """Select mock bodies for dispatched calls and record every call.

    Registrations live in a stack of :class:`MockContext` objects. Resolution
    walks the stack from the innermost context outwards and, inside each
    context, from the most recent registration backwards. Only registrations
    made for the caller's own scope are considered; a call with no matching
    registration runs the original command.
    """

    def __init__(self, table: CommandTable, recorder: CallRecorder) -> None:
        self._table = table
        self._recorder = recorder
        self._contexts: list[MockContext] = []

    # ------------------------------------------------------------------
    # Context stack
    # ------------------------------------------------------------------
    @property
    def contexts(self) -> tuple[MockContext, ...]:
        """Return the active contexts, outermost first."""
        return tuple(self._contexts)

    @property
    def current(self) -> MockContext:
        """Return the innermost active context."""
        if not self._contexts:
            msg = "no mock context is active"
            raise LifecycleError(msg)
        return self._contexts[-1]

    def push(self, name: str) -> MockContext:
        """Enter a new innermost context."""
        context = MockContext(name=name, depth=len(self._contexts))
        self._contexts.append(context)
        logger.debug("Entered mock context %r at depth %d", name, context.depth)
        return context

    def pop(self, context: MockContext) -> None:
        """Exit *context*, reverting its registrations and discarding its records."""
        if not self._contexts or self._contexts[-1] is not context:
            msg = f"mock context {context.name!r} is not the innermost context"
            raise LifecycleError(msg)
        self._contexts.pop()
        removed = len(context.registrations)
        context.registrations.clear()
        context.active = False
        for entry in self._recorder.records:
            owner = entry.matched.context if entry.matched is not None else None
            if entry.context is context and owner is not None and owner.active:
                owner.satisfied.add(entry.matched)
        self._recorder.discard(context)
        logger.debug(
            "Exited mock context %r; reverted %d registration(s)",
            context.name,
            removed,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(  # noqa: PLR0913 - mirrors the public mock() signature
        self,
        command: str,
        scope: ScopeHandle,
        body: object = None,
        parameter_filter: t.Callable[..., t.Any] | None = None,
        *,
        verifiable: bool = False,
    ) -> MockRegistration:
        """Install *body* for *command* calls made from *scope*.

        A non-callable *body* becomes a constant return value.

        Raises
        ------
        UnknownCommandError
            When *command* does not resolve from *scope*.
        LifecycleError
            When no context is active.
        """
        validate_command_name(command)
        context = self.current
        if not self._table.has_command(command, scope):
            msg = f"cannot mock {command!r}: command is not defined in {scope}"
            raise UnknownCommandError(msg)
        if parameter_filter is not None and not callable(parameter_filter):
            msg = "parameter_filter must be callable"
            raise TypeError(msg)
        func = body if callable(body) else Returns(body)
        registration = MockRegistration(
            command=command,
            scope=scope,
            body=func,
            parameter_filter=parameter_filter,
            verifiable=verifiable,
            sequence=self._recorder.next_sequence(),
            context=context,
        )
        context.registrations.append(registration)
        logger.debug("Registered %r in context %r", registration, context.name)
        return registration

    def unregister(self, scope: ScopeHandle) -> int:
        """Remove every registration for *scope* from the active contexts."""
        removed = 0
        for context in self._contexts:
            kept = [reg for reg in context.registrations if reg.scope != scope]
            removed += len(context.registrations) - len(kept)
            context.registrations[:] = kept
        logger.debug("Unregistered %d mock(s) for %s", removed, scope)
        return removed

    def registrations(
        self,
        command: str | None = None,
        scope: ScopeHandle | None = None,
    ) -> list[MockRegistration]:
        """Return active registrations in registration order."""
        found = [
            reg
            for context in self._contexts
            for reg in context.registrations
            if (command is None or reg.command == command)
            and (scope is None or reg.scope == scope)
        ]
        return sorted(found, key=lambda reg: reg.sequence)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def select(
        self, command: str, scope: ScopeHandle, arguments: CallArguments
    ) -> MockRegistration | None:
        """Return the registration servicing a call, or ``None``."""
        for context in reversed(self._contexts):
            for registration in reversed(context.registrations):
                if registration.command != command or registration.scope != scope:
                    continue
                if registration.matches(arguments):
                    return registration
        return None

    def dispatch(
        self,
        command: str,
        scope: ScopeHandle,
        original: CommandFunc,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
    ) -> t.Any:  # noqa: ANN401 - forwards the command result
        """Record the call and run the selected mock body or *original*."""
        if not self._contexts:
            return original(*args, **kwargs)
        arguments = bind_arguments(original, args, kwargs)
        registration = self.select(command, scope, arguments)
        self._recorder.record(command, scope, arguments, registration, self.current)
        if registration is None:
            logger.debug("Call to %r from %s falls through to original", command, scope)
            return original(*args, **kwargs)
        logger.debug("Call to %r from %s serviced by %r", command, scope, registration)
        return registration.invoke(arguments)


__all__ = [
    "Interceptor",
    "MockContext",
    "MockRegistration",
    "Returns",
    "describe_callable",
]
