"""Append-only journal of command invocations."""

from __future__ import annotations

import dataclasses as dc
import itertools
import logging
import typing as t

from .arguments import CallArguments, call_with_arguments

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .commands import ScopeHandle
    from .interceptor import MockContext, MockRegistration

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True, eq=False)
class InvocationRecord:
    """A single call dispatched while a mock context was active."""

    command: str
    scope: ScopeHandle
    arguments: CallArguments
    sequence: int
    matched: MockRegistration | None
    context: MockContext

    @property
    def mocked(self) -> bool:
        """Return ``True`` when a mock body serviced the call."""
        return self.matched is not None

    def describe(self) -> str:
        """Return a call-like representation for messages."""
        return f"{self.command}({self.arguments.describe()})"

    def __repr__(self) -> str:
        """Return a debug representation."""
        return (
            f"InvocationRecord(#{self.sequence} {self.describe()} "
            f"in {self.scope}, mocked={self.mocked})"
        )


class CallRecorder:
    """Record invocations in sequence order and answer queries over them.

    The recorder also owns the monotonic clock shared with mock
    registrations, so a record's ``matched`` registration always carries a
    smaller sequence number than the record itself.
    """

    def __init__(self) -> None:
        self._records: list[InvocationRecord] = []
        self._clock = itertools.count(1)

    def next_sequence(self) -> int:
        """Return the next value of the shared sequence clock."""
        return next(self._clock)

    def record(
        self,
        command: str,
        scope: ScopeHandle,
        arguments: CallArguments,
        matched: MockRegistration | None,
        context: MockContext,
    ) -> InvocationRecord:
        """Append and return a new :class:`InvocationRecord`."""
        entry = InvocationRecord(
            command=command,
            scope=scope,
            arguments=arguments,
            sequence=self.next_sequence(),
            matched=matched,
            context=context,
        )
        self._records.append(entry)
        return entry

    def query(
        self,
        command: str,
        scope: ScopeHandle | None = None,
        parameter_filter: t.Callable[..., bool] | None = None,
    ) -> t.Iterator[InvocationRecord]:
        """Yield records for *command* in sequence order.

        ``scope=None`` matches every scope. The filter is evaluated lazily
        against each candidate's bound arguments.
        """
        for entry in tuple(self._records):
            if entry.command != command:
                continue
            if scope is not None and entry.scope != scope:
                continue
            if parameter_filter is not None and not call_with_arguments(
                parameter_filter, entry.arguments
            ):
                continue
            yield entry

    def discard(self, context: MockContext) -> int:
        """Drop every record captured while *context* was innermost."""
        kept = [entry for entry in self._records if entry.context is not context]
        removed = len(self._records) - len(kept)
        self._records = kept
        if removed:
            logger.debug("Discarded %d record(s) of context %r", removed, context.name)
        return removed

    @property
    def records(self) -> tuple[InvocationRecord, ...]:
        """Return all retained records, oldest first."""
        return tuple(self._records)

    def __len__(self) -> int:
        """Return the number of retained records."""
        return len(self._records)


__all__ = ["CallRecorder", "InvocationRecord"]
