"""Comparator classes and helpers for building parameter filters."""

from __future__ import annotations

import re
import typing as t


class Comparator(t.Protocol):
    """Callable returning ``True`` when a value matches."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        ...


class Any:
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


class IsA:
    """Match values that are instances of ``typ``."""

    def __init__(self, typ: type | tuple[type, ...]) -> None:
        self.typ = typ

    def __call__(self, value: object) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        return isinstance(value, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        if isinstance(self.typ, tuple):
            names = ", ".join(typ.__name__ for typ in self.typ)
            return f"IsA(({names}))"
        return f"IsA({self.typ.__name__})"


class Regex:
    """Match if the string form of *value* matches ``pattern``."""

    def __init__(self, pattern: str) -> None:
        self._pattern = re.compile(pattern)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        if value is None:
            return False
        return bool(self._pattern.search(str(value)))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex({self._pattern.pattern!r})"


class Contains:
    """Match if ``item`` is found in *value*."""

    def __init__(self, item: object) -> None:
        self.item = item

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains({self.item!r})"


class StartsWith:
    """Match if *value* is a string beginning with ``prefix``."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith({self.prefix!r})"


class Predicate:
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: t.Callable[[t.Any], bool]) -> None:
        self.func = func

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = getattr(self.func, "__qualname__", None) or repr(self.func)
        return f"Predicate({name})"


_COMPARATOR_TYPES: tuple[type, ...] = (Any, IsA, Regex, Contains, StartsWith, Predicate)


class ArgumentMatcher:
    """Parameter filter comparing named arguments to literals or comparators.

    Literal values are compared with ``==``; instances of the comparator
    classes in this module are called with the argument value. Arguments not
    named in the matcher are ignored, while a named argument the command does
    not bind never matches.
    """

    def __init__(self, expected: t.Mapping[str, object]) -> None:
        self.expected = dict(expected)

    def __call__(self, **arguments: object) -> bool:
        """Return ``True`` when every expected argument matches."""
        for name, want in self.expected.items():
            if name not in arguments:
                return False
            value = arguments[name]
            if isinstance(want, _COMPARATOR_TYPES):
                if not want(value):
                    return False
            elif value != want:
                return False
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        parts = ", ".join(f"{key}={value!r}" for key, value in self.expected.items())
        return f"match_args({parts})"


def match_args(**expected: object) -> ArgumentMatcher:
    """Build a parameter filter from keyword literals and comparators."""
    return ArgumentMatcher(expected)


__all__ = [
    "Any",
    "ArgumentMatcher",
    "Comparator",
    "Contains",
    "IsA",
    "Predicate",
    "Regex",
    "StartsWith",
    "match_args",
]
