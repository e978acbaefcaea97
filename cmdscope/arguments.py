"""Argument binding helpers shared by the interceptor and the recorder."""

from __future__ import annotations

import inspect
import typing as t
from collections.abc import Mapping

_Kind = inspect.Parameter


class CallArguments(Mapping[str, t.Any]):
    """Immutable, ordered view of the arguments bound for one call.

    Values are reachable by key (``args["version"]``) and by attribute
    (``args.version``).
    """

    __slots__ = ("_items",)

    def __init__(self, pairs: t.Iterable[tuple[str, t.Any]] = ()) -> None:
        self._items: dict[str, t.Any] = dict(pairs)

    def __getitem__(self, key: str) -> t.Any:  # noqa: ANN401 - argument values are arbitrary
        """Return the value bound to *key*."""
        return self._items[key]

    def __iter__(self) -> t.Iterator[str]:
        """Iterate over argument names in binding order."""
        return iter(self._items)

    def __len__(self) -> int:
        """Return the number of bound arguments."""
        return len(self._items)

    def __getattr__(self, name: str) -> t.Any:  # noqa: ANN401 - argument values are arbitrary
        """Expose bound arguments as attributes."""
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._items[name]
        except KeyError:
            raise AttributeError(name) from None

    def as_pairs(self) -> tuple[tuple[str, t.Any], ...]:
        """Return the bound arguments as ordered ``(name, value)`` pairs."""
        return tuple(self._items.items())

    def describe(self) -> str:
        """Return ``name=value`` pairs suitable for messages."""
        return ", ".join(f"{key}={value!r}" for key, value in self._items.items())

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"CallArguments({self.describe()})"


def _signature(func: t.Callable[..., t.Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None


def bind_arguments(
    func: t.Callable[..., t.Any],
    args: t.Sequence[t.Any],
    kwargs: t.Mapping[str, t.Any],
) -> CallArguments:
    """Bind ``args``/``kwargs`` against *func*'s signature, applying defaults.

    Extra keyword arguments collected by ``**kwargs`` are flattened into the
    result. Callables without an introspectable signature get positional
    arguments named ``arg0``, ``arg1`` and so on.

    Raises
    ------
    TypeError
        When the arguments cannot be bound, exactly as calling *func* would.
    """
    signature = _signature(func)
    if signature is None:
        pairs = [(f"arg{index}", value) for index, value in enumerate(args)]
        pairs.extend(kwargs.items())
        return CallArguments(pairs)

    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    pairs = []
    for name, value in bound.arguments.items():
        if signature.parameters[name].kind is _Kind.VAR_KEYWORD:
            pairs.extend(value.items())
        else:
            pairs.append((name, value))
    return CallArguments(pairs)


def call_with_arguments(
    func: t.Callable[..., t.Any], arguments: t.Mapping[str, t.Any]
) -> t.Any:  # noqa: ANN401 - forwards whatever *func* returns
    """Call *func* passing only the bound arguments it declares.

    Parameters are matched by name. A required parameter the call did not
    bind receives ``None``; one with a default keeps its default. A callable
    accepting ``**kwargs`` receives every remaining argument, and a callable
    declaring no parameters is called with none, so ``lambda: 1.1`` works as
    a mock body.
    """
    signature = _signature(func)
    if signature is None:
        return func(**arguments)

    positional: list[t.Any] = []
    keywords: dict[str, t.Any] = {}
    accepts_any = False
    for param in signature.parameters.values():
        if param.kind is _Kind.VAR_KEYWORD:
            accepts_any = True
            continue
        if param.kind is _Kind.VAR_POSITIONAL:
            continue
        if param.name in arguments:
            value = arguments[param.name]
        elif param.default is _Kind.empty:
            value = None
        elif param.kind is _Kind.POSITIONAL_ONLY:
            value = param.default
        else:
            continue
        if param.kind is _Kind.POSITIONAL_ONLY:
            positional.append(value)
        else:
            keywords[param.name] = value

    if accepts_any:
        consumed = set(keywords) | {
            p.name
            for p in signature.parameters.values()
            if p.kind is _Kind.POSITIONAL_ONLY
        }
        for name, value in arguments.items():
            if name not in consumed:
                keywords[name] = value
    return func(*positional, **keywords)


__all__ = ["CallArguments", "bind_arguments", "call_with_arguments"]
