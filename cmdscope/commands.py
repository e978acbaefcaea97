"""Command table: named commands resolved per script or module scope."""

from __future__ import annotations

import contextlib
import dataclasses as dc
import enum
import logging
import typing as t

from ._validators import validate_command_name
from .errors import LifecycleError, UnknownCommandError

logger = logging.getLogger(__name__)

CommandFunc = t.Callable[..., t.Any]
_F = t.TypeVar("_F", bound=CommandFunc)


class ScopeKind(enum.StrEnum):
    """Kinds of command resolution scope."""

    SCRIPT = "script"
    MODULE = "module"


@dc.dataclass(frozen=True, slots=True)
class ScopeHandle:
    """Identity of a resolution scope: the test script or a module's internals."""

    kind: ScopeKind
    name: str

    @classmethod
    def script(cls) -> ScopeHandle:
        """Return the handle of the test-script scope."""
        return SCRIPT_SCOPE

    @classmethod
    def module(cls, name: str) -> ScopeHandle:
        """Return the handle of module *name*'s internal scope."""
        return cls(ScopeKind.MODULE, name)

    @property
    def is_module(self) -> bool:
        """Return ``True`` for module scopes."""
        return self.kind is ScopeKind.MODULE

    def __str__(self) -> str:
        """Return a readable label for messages."""
        if self.is_module:
            return f"module {self.name!r}"
        return "script scope"


SCRIPT_SCOPE: t.Final[ScopeHandle] = ScopeHandle(ScopeKind.SCRIPT, "script")


class Dispatcher(t.Protocol):
    """Hook that routes calls made through a :class:`CommandTable`."""

    def dispatch(
        self,
        command: str,
        scope: ScopeHandle,
        original: CommandFunc,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
    ) -> t.Any:  # noqa: ANN401 - forwards the command result
        """Run *command* on behalf of a caller in *scope*."""
        ...


class Module:
    """A named group of commands sharing an internal scope.

    Commands defined on a module are private to its scope unless exported.
    Code inside the module calls other commands through :meth:`call`, which
    resolves names from the module's internal scope.
    """

    def __init__(self, name: str, table: CommandTable) -> None:
        self.name = name
        self.table = table
        self.scope = ScopeHandle.module(name)

    def command(
        self, name: str | None = None, *, export: bool = False
    ) -> t.Callable[[_F], _F]:
        """Register the decorated function as a command of this module."""
        return self.table.command(name, scope=self.scope, export=export)

    def define(self, name: str, func: CommandFunc, *, export: bool = False) -> None:
        """Register *func* as command *name* of this module."""
        self.table.define(name, func, scope=self.scope, export=export)

    def call(self, name: str, /, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Call command *name* as resolved from inside this module."""
        return self.table.call_from(self.scope, name, *args, **kwargs)

    @property
    def exports(self) -> frozenset[str]:
        """Return the names this module exports to the script scope."""
        return self.table.exports_of(self)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Module({self.name!r})"


class CommandTable:
    """Registry mapping command names to callables per scope.

    Resolution order from the script scope is: script commands, then commands
    exported by modules. From a module scope the module's own commands come
    first, followed by the script-scope order.
    """

    def __init__(self) -> None:
        self._commands: dict[ScopeHandle, dict[str, CommandFunc]] = {
            SCRIPT_SCOPE: {}
        }
        self._exports: dict[str, ScopeHandle] = {}
        self._modules: dict[str, Module] = {}
        self._scope_stack: list[ScopeHandle] = [SCRIPT_SCOPE]
        self._dispatcher: Dispatcher | None = None

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------
    def define(
        self,
        name: str,
        func: CommandFunc,
        *,
        scope: ScopeHandle = SCRIPT_SCOPE,
        export: bool = False,
    ) -> None:
        """Register *func* as command *name* in *scope*."""
        validate_command_name(name)
        if not callable(func):
            msg = f"command {name!r} must be callable, got {type(func).__name__}"
            raise TypeError(msg)
        if export and not scope.is_module:
            msg = "only module commands can be exported"
            raise ValueError(msg)
        if scope.is_module:
            self.module(scope.name)
        self._commands.setdefault(scope, {})[name] = func
        if export:
            previous = self._exports.get(name)
            if previous is not None and previous != scope:
                logger.debug(
                    "Export of %r from %s replaces export from %s",
                    name,
                    scope,
                    previous,
                )
            self._exports[name] = scope

    def command(
        self,
        name: str | None = None,
        *,
        scope: ScopeHandle = SCRIPT_SCOPE,
        export: bool = False,
    ) -> t.Callable[[_F], _F]:
        """Register the decorated function, named *name* or after itself."""

        def decorator(func: _F) -> _F:
            self.define(name or func.__name__, func, scope=scope, export=export)
            return func

        return decorator

    def module(self, name: str) -> Module:
        """Return module *name*, creating it on first use."""
        mod = self._modules.get(name)
        if mod is None:
            mod = Module(name, self)
            self._modules[name] = mod
            self._commands.setdefault(mod.scope, {})
        return mod

    def get_module(self, name: str) -> Module:
        """Return an existing module or raise :class:`LookupError`."""
        try:
            return self._modules[name]
        except KeyError:
            msg = f"unknown module {name!r}"
            raise LookupError(msg) from None

    def exports_of(self, module: Module) -> frozenset[str]:
        """Return the command names exported by *module*."""
        return frozenset(
            name for name, owner in self._exports.items() if owner == module.scope
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _lookup(self, name: str, scope: ScopeHandle) -> CommandFunc | None:
        if scope.is_module:
            func = self._commands.get(scope, {}).get(name)
            if func is not None:
                return func
        func = self._commands[SCRIPT_SCOPE].get(name)
        if func is not None:
            return func
        owner = self._exports.get(name)
        if owner is None:
            return None
        return self._commands[owner][name]

    def has_command(self, name: str, scope: ScopeHandle = SCRIPT_SCOPE) -> bool:
        """Return ``True`` when *name* resolves from *scope*."""
        return self._lookup(name, scope) is not None

    def resolve(self, name: str, scope: ScopeHandle = SCRIPT_SCOPE) -> CommandFunc:
        """Return the callable *name* resolves to from *scope*.

        Raises
        ------
        UnknownCommandError
            When no command of that name is visible from *scope*.
        """
        func = self._lookup(name, scope)
        if func is None:
            msg = f"command {name!r} is not defined in {scope}"
            raise UnknownCommandError(msg)
        return func

    def visible_commands(self, scope: ScopeHandle = SCRIPT_SCOPE) -> list[str]:
        """Return the sorted names resolvable from *scope*."""
        names = set(self._commands[SCRIPT_SCOPE]) | set(self._exports)
        if scope.is_module:
            names |= set(self._commands.get(scope, {}))
        return sorted(names)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------
    @property
    def current_scope(self) -> ScopeHandle:
        """Return the scope calls made through :meth:`call` resolve from."""
        return self._scope_stack[-1]

    def call(self, name: str, /, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Call command *name* from the current scope."""
        return self.call_from(self.current_scope, name, *args, **kwargs)

    def call_from(
        self, scope: ScopeHandle, name: str, /, *args: t.Any, **kwargs: t.Any
    ) -> t.Any:  # noqa: ANN401
        """Call command *name* as a caller in *scope* would."""
        original = self.resolve(name, scope)
        if self._dispatcher is None:
            return original(*args, **kwargs)
        return self._dispatcher.dispatch(name, scope, original, args, kwargs)

    @contextlib.contextmanager
    def in_module_scope(self, module: Module | str) -> t.Iterator[Module]:
        """Run the enclosed block as if it executed inside *module*."""
        mod = self.get_module(module) if isinstance(module, str) else module
        self._scope_stack.append(mod.scope)
        try:
            yield mod
        finally:
            self._scope_stack.pop()

    # ------------------------------------------------------------------
    # Dispatcher management
    # ------------------------------------------------------------------
    def attach(self, dispatcher: Dispatcher) -> None:
        """Route every call through *dispatcher* until :meth:`detach`."""
        if self._dispatcher is not None:
            msg = "a mock session is already attached to this command table"
            raise LifecycleError(msg)
        self._dispatcher = dispatcher

    def detach(self, dispatcher: Dispatcher) -> None:
        """Stop routing calls through *dispatcher*."""
        if self._dispatcher is not dispatcher:
            msg = "dispatcher is not attached to this command table"
            raise LifecycleError(msg)
        self._dispatcher = None

    @property
    def dispatcher(self) -> Dispatcher | None:
        """Return the attached dispatcher, if any."""
        return self._dispatcher


__all__ = [
    "SCRIPT_SCOPE",
    "CommandFunc",
    "CommandTable",
    "Dispatcher",
    "Module",
    "ScopeHandle",
    "ScopeKind",
]
