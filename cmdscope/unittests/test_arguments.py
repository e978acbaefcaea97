"""Unit tests for :mod:`cmdscope.arguments`."""

from __future__ import annotations

import pytest

from cmdscope.arguments import CallArguments, bind_arguments, call_with_arguments


def test_bind_applies_defaults_in_signature_order() -> None:
    """Bound arguments follow the signature and include defaults."""

    def deploy(target: str, version: float = 1.0, *, dry_run: bool = False) -> None:
        del target, version, dry_run

    bound = bind_arguments(deploy, ("prod",), {"dry_run": True})

    assert bound.as_pairs() == (
        ("target", "prod"),
        ("version", 1.0),
        ("dry_run", True),
    )


def test_bind_flattens_var_keyword() -> None:
    """Extra keywords collected by ``**kwargs`` appear as their own names."""

    def tag(name: str, **labels: str) -> None:
        del name, labels

    bound = bind_arguments(tag, ("v1",), {"env": "prod", "team": "core"})

    assert dict(bound) == {"name": "v1", "env": "prod", "team": "core"}


def test_bind_rejects_unbindable_calls() -> None:
    """Binding fails exactly as calling the function would."""

    def needs_one(value: int) -> None:
        del value

    with pytest.raises(TypeError):
        bind_arguments(needs_one, (), {})


def test_call_arguments_attribute_and_key_access() -> None:
    """Arguments can be read by key or attribute."""
    args = CallArguments([("version", 1.2)])

    assert args["version"] == 1.2
    assert args.version == 1.2
    with pytest.raises(AttributeError):
        _ = args.missing
    assert repr(args) == "CallArguments(version=1.2)"


def test_call_with_arguments_passes_only_declared_names() -> None:
    """Callables receive just the parameters they declare."""
    args = CallArguments([("version", 1.2), ("target", "prod")])

    assert call_with_arguments(lambda: "none", args) == "none"
    assert call_with_arguments(lambda version: version * 2, args) == 2.4
    assert call_with_arguments(lambda **kw: sorted(kw), args) == ["target", "version"]


def test_call_with_arguments_fills_unbound_names() -> None:
    """Unbound required names receive ``None``; defaults are kept."""
    args = CallArguments([("target", "prod")])

    assert call_with_arguments(lambda version: version, args) is None
    assert call_with_arguments(lambda version=2.0: version, args) == 2.0
    assert call_with_arguments(lambda *, version: version is None, args)

    def body(first: int = 1, second: object = "x", /) -> tuple[int, object]:
        return first, second

    assert call_with_arguments(body, CallArguments([("second", "y")])) == (1, "y")


def test_call_with_arguments_supports_positional_only() -> None:
    """Positional-only parameters are passed positionally."""

    def body(version: float, /, **rest: object) -> tuple[float, dict[str, object]]:
        return version, rest

    args = CallArguments([("version", 2.0), ("target", "prod")])

    assert call_with_arguments(body, args) == (2.0, {"target": "prod"})
